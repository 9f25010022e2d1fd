import logging

from django.db import transaction
from django.utils import timezone

from .exceptions import SessionExpired, SessionNotActive, UnknownQuestion
from .lifecycle import expire_if_due, lock_session
from .models import Answer, TestSession

logger = logging.getLogger(__name__)


def upsert_answer(session_id, question_id, value, language='', now=None, judge=None):
    """
    Record the current answer to one question, replacing any earlier one.
    The value is stored as given; its shape is only checked at scoring time.
    """
    now = now or timezone.now()
    expired = False

    with transaction.atomic():
        session = lock_session(session_id)
        if session.state != TestSession.State.IN_PROGRESS:
            raise SessionNotActive()

        if expire_if_due(session, now=now, judge=judge):
            expired = True
        else:
            if not session.items.filter(question_id=question_id).exists():
                raise UnknownQuestion(f"Question {question_id} is not part of this test.")
            answer, created = Answer.objects.update_or_create(
                session=session,
                question_id=question_id,
                defaults={'value': value, 'language': language or '', 'submitted_at': now},
            )

    # Raised after commit so the timeout submission sticks
    if expired:
        raise SessionExpired()

    logger.debug("Session %s %s answer for question %s", session.pk, "stored" if created else "replaced", question_id)
    return answer
