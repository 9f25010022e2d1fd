"""
Session state machine: not-started -> in-progress -> submitted.

The server clock is the only clock. Every mutating call locks the session
row for the length of one read-modify-write, so two requests racing on the
same session are applied one after the other.
"""
import logging
import math

from django.db import transaction
from django.utils import timezone

from cores.models import AuditLog
from leaves.models import LeaveRequest
from .exceptions import (
    AlreadyStarted, AlreadySubmitted, FullscreenRequired, InvalidSubmitReason,
    ResultNotFound, SessionNotActive, SessionNotFound,
)
from .models import TestSession
from .scoring import prejudge, score_session

logger = logging.getLogger(__name__)

State = TestSession.State
SubmitReason = TestSession.SubmitReason


def lock_session(session_id):
    """Fetch and row-lock a session. Call inside ``transaction.atomic``."""
    try:
        return TestSession.objects.select_for_update().select_related('leave').get(pk=session_id)
    except (TestSession.DoesNotExist, ValueError):
        raise SessionNotFound()


def compute_remaining(session, now=None):
    """Whole seconds left on the clock, never negative."""
    limit = session.time_limit * 60
    if session.start_time is None:
        return limit
    elapsed = ((now or timezone.now()) - session.start_time).total_seconds()
    return max(0, math.floor(limit - elapsed))


def is_expired(session, now=None):
    return session.state == State.IN_PROGRESS and compute_remaining(session, now) <= 0


def start_session(session_id, fullscreen_acknowledged=False, now=None):
    with transaction.atomic():
        session = lock_session(session_id)
        if session.state != State.NOT_STARTED:
            raise AlreadyStarted()
        if session.policy.require_fullscreen and not fullscreen_acknowledged:
            raise FullscreenRequired()

        session.state = State.IN_PROGRESS
        session.start_time = now or timezone.now()
        session.save(update_fields=['state', 'start_time'])

    logger.info("Session %s started at %s (%d min)", session.pk, session.start_time.isoformat(), session.time_limit)
    return session


def submit(session, reason, now=None, judge=None):
    """
    Finalize a locked, in-progress session: freeze answers, score, and mark
    the leave as test-completed. There is no way back.
    """
    if reason not in SubmitReason.values:
        raise InvalidSubmitReason(f"Unknown submit reason '{reason}'.")
    if session.state == State.SUBMITTED:
        raise AlreadySubmitted()
    if session.state != State.IN_PROGRESS:
        raise SessionNotActive()

    session.state = State.SUBMITTED
    session.submit_reason = reason
    session.end_time = now or timezone.now()
    score_session(session, judge=judge)
    session.save()

    leave = session.leave
    leave.status = LeaveRequest.Status.TEST_COMPLETED
    leave.test_score = session.final_score
    leave.save(update_fields=['status', 'test_score'])

    AuditLog.record(
        AuditLog.Action.SUBMIT, session,
        details=f"Submitted ({reason}): final {session.final_score}, {session.violation_count} violations",
    )
    logger.info("Session %s submitted (%s), final score %.2f", session.pk, reason, session.final_score)
    return session


def expire_if_due(session, now=None, judge=None):
    """Submit a locked session as timed out if its clock has run down."""
    if is_expired(session, now):
        submit(session, SubmitReason.TIMEOUT, now=now, judge=judge)
        return True
    return False


def warm_judge(session_id, judge=None, now=None, only_if_expired=False):
    """
    Run the code judge for an in-progress session before its row is locked,
    so the slow external calls happen outside the lock.
    """
    session = TestSession.objects.filter(pk=session_id, state=State.IN_PROGRESS).first()
    if session is None or (only_if_expired and not is_expired(session, now)):
        return judge
    return prejudge(session, judge)


def finalize_session(session_id, reason=SubmitReason.MANUAL, now=None, judge=None):
    """
    Client or system initiated submission. Server state decides the reason:
    a manual submit after the deadline is a timeout, a claimed timeout before
    it is a manual submit, and ``violation-limit`` only stands once the
    recorded violations reach the limit.
    """
    judge = warm_judge(session_id, judge)
    with transaction.atomic():
        session = lock_session(session_id)
        expired = is_expired(session, now)
        if reason == SubmitReason.VIOLATION_LIMIT and session.violations.count() < session.policy.max_violations:
            reason = SubmitReason.MANUAL
        if reason == SubmitReason.MANUAL and expired:
            reason = SubmitReason.TIMEOUT
        elif reason == SubmitReason.TIMEOUT and not expired:
            reason = SubmitReason.MANUAL
        return submit(session, reason, now=now, judge=judge)


def get_result(session_id, now=None, judge=None):
    """The scored session. Sessions whose clock ran out are finalized first."""
    judge = warm_judge(session_id, judge, now=now, only_if_expired=True)
    with transaction.atomic():
        session = lock_session(session_id)
        expire_if_due(session, now=now, judge=judge)
        if session.state != State.SUBMITTED:
            raise ResultNotFound()
        return session


def expire_overdue_sessions(now=None, judge=None):
    """Sweep in-progress sessions past their deadline. Returns the ids submitted."""
    now = now or timezone.now()
    expired = []
    for session_id in TestSession.objects.filter(state=State.IN_PROGRESS).values_list('pk', flat=True):
        session_judge = warm_judge(session_id, judge, now=now, only_if_expired=True)
        with transaction.atomic():
            session = lock_session(session_id)
            if expire_if_due(session, now=now, judge=session_judge):
                expired.append(session.pk)
    return expired
