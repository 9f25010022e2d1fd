"""
Anti-cheat violation tracking.

The client's detection layer (tab switches, blur, blocked shortcuts...)
reports one typed event per call. The tracker appends it, recomputes the
penalty and warning level, and force-submits the session once the limit is
reached. Duplicate events are recorded as they come.
"""
import logging
from dataclasses import dataclass

from django.db import transaction
from django.utils import timezone

from .exceptions import SessionExpired, SessionNotActive
from .lifecycle import expire_if_due, lock_session, submit
from .models import TestSession, ViolationRecord
from .penalties import penalty_for, warning_level

logger = logging.getLogger(__name__)

KNOWN_VIOLATION_TYPES = (
    'tab-switch',
    'window-blur',
    'copy-paste',
    'paste-attempt',
    'right-click',
    'devtools',
    'fullscreen-exit',
    'screen-capture',
    'drag-drop',
    'print-attempt',
)


@dataclass(frozen=True)
class ViolationReport:
    violation_count: int
    max_violations: int
    current_penalty: int
    warning_level: str
    auto_submitted: bool

    def as_dict(self):
        return {
            "violationCount": self.violation_count,
            "maxViolations": self.max_violations,
            "currentPenalty": self.current_penalty,
            "warningLevel": self.warning_level,
            "autoSubmitted": self.auto_submitted,
        }


def report_violation(session_id, violation_type, detail='', now=None, judge=None):
    now = now or timezone.now()
    expired = False

    with transaction.atomic():
        session = lock_session(session_id)
        if session.state != TestSession.State.IN_PROGRESS:
            raise SessionNotActive()

        if expire_if_due(session, now=now, judge=judge):
            expired = True
        else:
            if violation_type not in KNOWN_VIOLATION_TYPES:
                logger.info("Session %s reported unrecognised violation type '%s'", session.pk, violation_type)
            ViolationRecord.objects.create(session=session, violation_type=violation_type, detail=detail or '', timestamp=now)

            policy = session.policy
            count = session.violations.count()
            auto_submitted = False
            if count >= policy.max_violations and policy.auto_submit_on_violation:
                submit(session, TestSession.SubmitReason.VIOLATION_LIMIT, now=now, judge=judge)
                auto_submitted = True
                logger.warning("Session %s auto-submitted after %d violations", session.pk, count)

            report = ViolationReport(
                violation_count=count,
                max_violations=policy.max_violations,
                current_penalty=penalty_for(count, policy),
                warning_level=warning_level(count, policy),
                auto_submitted=auto_submitted,
            )

    if expired:
        raise SessionExpired()
    return report
