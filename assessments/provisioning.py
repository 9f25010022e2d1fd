"""
Test provisioning: turns a pending leave request into a not-started session.

The leave length picks a composition tier, and each tier biases the draw
toward a difficulty. Questions are drawn from the requested subjects first
and topped up from the whole bank when those run short.
"""
import logging
import random
from collections import namedtuple

from django.db import transaction

from cores.models import AuditLog, current_policy
from leaves.models import LeaveRequest
from questions.models import Question
from .exceptions import InsufficientQuestions, LeaveNotEligible, LeaveNotFound
from .models import SessionQuestion, TestSession

logger = logging.getLogger(__name__)

Tier = namedtuple('Tier', 'name mcq_count coding_count difficulty_weights label')

EASY, MEDIUM, HARD = Question.Difficulty.EASY, Question.Difficulty.MEDIUM, Question.Difficulty.HARD

LONG_TIER = Tier('long', 7, 3, {EASY: 1, MEDIUM: 2, HARD: 4}, "Higher (More Hard Questions)")
MEDIUM_TIER = Tier('medium', 6, 2, {EASY: 1, MEDIUM: 2, HARD: 1}, "Moderate")
SHORT_TIER = Tier('short', 5, 2, {EASY: 4, MEDIUM: 2, HARD: 1}, "Balanced (More Easy Questions)")


def leave_days(start_date, end_date):
    return (end_date - start_date).days + 1


def composition_for(days):
    """Map an inclusive leave length to its tier. 3 and 7 days are both medium."""
    if days < 1:
        raise ValueError(f"Leave must span at least one day, got {days}")
    if days > 7:
        return LONG_TIER
    if days >= 3:
        return MEDIUM_TIER
    return SHORT_TIER


def weighted_sample(candidates, count, weights, rng):
    """
    Draw ``count`` distinct questions, each with probability proportional to
    its difficulty weight (Efraimidis-Spirakis keys).
    """
    if count <= 0 or not candidates:
        return []
    keyed = []
    for question in candidates:
        weight = weights.get(question.difficulty, 1)
        keyed.append((rng.random() ** (1.0 / weight), question.pk, question))
    keyed.sort(key=lambda item: (item[0], item[1]), reverse=True)
    return [question for _, _, question in keyed[:count]]


def draw_round(question_type, subjects, count, weights, rng):
    """Fill one round's quota from the subjects, falling back to the whole bank."""
    pool = Question.objects.filter(question_type=question_type, is_active=True)
    picked = weighted_sample(list(pool.filter(subject__in=subjects)), count, weights, rng)

    if len(picked) < count:
        shortfall = count - len(picked)
        logger.warning(
            "Only %d of %d %s questions available for subjects %s; drawing %d from all subjects",
            len(picked), count, question_type, sorted(subjects), shortfall,
        )
        fallback = pool.exclude(pk__in=[q.pk for q in picked])
        picked += weighted_sample(list(fallback), shortfall, weights, rng)

        if len(picked) < count:
            logger.warning(
                "Question bank short by %d %s questions; session will carry %d",
                count - len(picked), question_type, len(picked),
            )
    return picked


def provision_test(leave_id, policy=None, rng=None, actor=None):
    """
    Build the test for a leave request.

    Returns the leave's active session if one already exists. Raises
    ``LeaveNotFound``, ``LeaveNotEligible`` or ``InsufficientQuestions``; on
    failure the leave keeps its ``pending`` status.
    """
    policy = policy or current_policy()
    rng = rng or random.Random()

    with transaction.atomic():
        try:
            leave = LeaveRequest.objects.select_for_update().get(pk=leave_id)
        except LeaveRequest.DoesNotExist:
            raise LeaveNotFound()

        active = leave.test_sessions.exclude(state=TestSession.State.SUBMITTED).first()
        if active:
            return active

        if leave.status != LeaveRequest.Status.PENDING:
            raise LeaveNotEligible(f"Leave request is '{leave.status}', a test can only be provisioned while pending.")

        tier = composition_for(leave.days)
        subjects = list(leave.subjects or [])
        mcqs = draw_round(Question.QuestionType.MCQ, subjects, tier.mcq_count, tier.difficulty_weights, rng)
        coding = draw_round(Question.QuestionType.CODING, subjects, tier.coding_count, tier.difficulty_weights, rng)

        if not mcqs and not coding:
            raise InsufficientQuestions(f"No questions available for subjects {sorted(subjects)} or any fallback subject.")

        session = TestSession.objects.create(
            leave=leave,
            time_limit=policy.total_time_limit,
            policy_snapshot=policy.as_dict(),
        )
        items = [(SessionQuestion.Round.MCQ, q) for q in mcqs] + [(SessionQuestion.Round.CODING, q) for q in coding]
        SessionQuestion.objects.bulk_create([
            SessionQuestion(session=session, question=question, round=round_, position=position)
            for position, (round_, question) in enumerate(items)
        ])

        leave.status = LeaveRequest.Status.TEST_ASSIGNED
        leave.save(update_fields=['status'])

        AuditLog.record(
            AuditLog.Action.PROVISION, session, actor=actor,
            details=f"{tier.name} tier: {len(mcqs)} MCQ + {len(coding)} coding for {leave.days} day leave",
        )

    logger.info(
        "Provisioned session %s for leave %s (%s tier, %d MCQ, %d coding, %d min)",
        session.pk, leave.pk, tier.name, len(mcqs), len(coding), session.time_limit,
    )
    return session
