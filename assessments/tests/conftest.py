import random

import pytest
from django.utils import timezone

from assessments.lifecycle import start_session
from assessments.models import SessionQuestion, TestSession
from assessments.provisioning import provision_test
from cores.policy import Policy


@pytest.fixture
def policy():
    return Policy()


@pytest.fixture
def provisioned(question_bank, make_leave, policy):
    leave = make_leave(days=4)
    return provision_test(leave.pk, policy=policy, rng=random.Random(7))


@pytest.fixture
def started(provisioned):
    return start_session(provisioned.pk, fullscreen_acknowledged=True, now=timezone.now())


@pytest.fixture
def build_session(make_leave):
    """An in-progress session holding exactly the given questions."""
    def _build(mcqs=(), coding=(), policy=None, start_time=None):
        policy = policy or Policy()
        leave = make_leave(status='test-assigned')
        session = TestSession.objects.create(
            leave=leave,
            state=TestSession.State.IN_PROGRESS,
            start_time=start_time or timezone.now(),
            time_limit=policy.total_time_limit,
            policy_snapshot=policy.as_dict(),
        )
        items = [(SessionQuestion.Round.MCQ, q) for q in mcqs] + [(SessionQuestion.Round.CODING, q) for q in coding]
        for position, (round_, question) in enumerate(items):
            SessionQuestion.objects.create(session=session, question=question, round=round_, position=position)
        return session
    return _build
