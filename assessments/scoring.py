"""
Scoring runs once, while ``submit`` holds the session lock. Judge calls for
coding answers are made beforehand where the caller can (``prejudge``).

Each round is scored as a percentage of the points it carries. The raw
score weights the rounds by those same points, so a round with more points
counts for more. The violation penalty frozen at submission is then taken
off and the result clamped to [0, 100].
"""
import logging
from collections import namedtuple

from questions.models import Question
from .judge import CachingJudge, get_judge
from .models import SessionQuestion, TestSession
from .penalties import penalty_for

logger = logging.getLogger(__name__)

RoundTotals = namedtuple('RoundTotals', 'earned maximum')


def percentage(earned, maximum):
    if not maximum:
        return 0.0
    return 100.0 * earned / maximum


def clamp(value, low=0.0, high=100.0):
    return max(low, min(high, value))


def mcq_is_correct(question, value):
    """``value`` is the selected option index. Anything else is simply wrong."""
    if isinstance(value, bool):
        return False
    try:
        index = int(value)
    except (TypeError, ValueError):
        return False
    return index == question.correct_option_index()


def score_coding(question, answer, judge):
    """Returns (cases passed, total cases), hidden cases included."""
    cases = list(question.test_cases.all())
    if not cases:
        return 0, 0
    code = answer.value if answer else None
    if not isinstance(code, str) or not code.strip():
        return 0, len(cases)
    verdicts = judge.run(question, code, answer.language, cases)
    return sum(1 for passed in verdicts if passed), len(cases)


def prejudge(session, judge=None):
    """
    Judge every coding answer of an unlocked session ahead of submission.
    The returned judge replays those verdicts, so scoring under the row lock
    only calls out for code that changed in between.
    """
    cached = CachingJudge(judge or get_judge())
    answers = (
        session.answers.filter(question__question_type=Question.QuestionType.CODING)
        .select_related('question')
        .prefetch_related('question__test_cases')
    )
    for answer in answers:
        score_coding(answer.question, answer, cached)
    return cached


def score_session(session, judge=None):
    """
    Grade every answer and write round, raw and final scores onto the
    session. The caller saves the session.
    """
    judge = judge or get_judge()
    policy = session.policy
    answers = {a.question_id: a for a in session.answers.all()}
    totals = {
        SessionQuestion.Round.MCQ: RoundTotals(0.0, 0),
        SessionQuestion.Round.CODING: RoundTotals(0.0, 0),
    }

    items = session.items.select_related('question').prefetch_related('question__options', 'question__test_cases')
    for item in items:
        question = item.question
        answer = answers.get(question.pk)
        earned = 0.0

        if item.round == SessionQuestion.Round.MCQ:
            if answer is not None:
                answer.is_correct = mcq_is_correct(question, answer.value)
                earned = float(question.points) if answer.is_correct else 0.0
        else:
            passed, total = score_coding(question, answer, judge)
            if total:
                earned = question.points * passed / total
            if answer is not None:
                answer.cases_passed, answer.cases_total = passed, total
                answer.is_correct = bool(total) and passed == total

        if answer is not None:
            answer.awarded_points = round(earned, 2)
            answer.save(update_fields=['is_correct', 'cases_passed', 'cases_total', 'awarded_points'])

        running = totals[item.round]
        totals[item.round] = RoundTotals(running.earned + earned, running.maximum + question.points)

    mcq = totals[SessionQuestion.Round.MCQ]
    coding = totals[SessionQuestion.Round.CODING]
    earned = mcq.earned + coding.earned
    maximum = mcq.maximum + coding.maximum
    raw = percentage(earned, maximum)

    session.violation_count = session.violations.count()
    session.violation_penalty = float(penalty_for(session.violation_count, policy))
    session.round1_score = round(percentage(mcq.earned, mcq.maximum), 2)
    session.round2_score = round(percentage(coding.earned, coding.maximum), 2)
    session.points_earned = round(earned, 2)
    session.max_score = maximum
    session.raw_score = round(raw, 2)
    session.final_score = round(clamp(raw - session.violation_penalty), 2)
    session.test_result = (
        TestSession.Result.PASS if session.final_score >= policy.passing_percentage else TestSession.Result.FAIL
    )

    logger.info(
        "Scored session %s: round1=%.2f round2=%.2f raw=%.2f penalty=%.0f final=%.2f (%s)",
        session.pk, session.round1_score, session.round2_score, session.raw_score,
        session.violation_penalty, session.final_score, session.test_result,
    )
    return session
