from datetime import timedelta

import pytest

from assessments.exceptions import SessionExpired, SessionNotActive
from assessments.models import TestSession, ViolationRecord
from assessments.penalties import penalty_for, warning_level
from assessments.violations import report_violation
from cores.policy import Policy

from .judges import FailAllJudge


@pytest.mark.parametrize("count, level", [
    (0, 'normal'),
    (1, 'normal'),
    (2, 'normal'),
    (3, 'warning'),
    (4, 'critical'),
    (5, 'critical'),
    (9, 'critical'),
])
def test_warning_level_with_defaults(count, level):
    assert warning_level(count, Policy()) == level


def test_warning_offsets_are_configurable():
    policy = Policy(max_violations=10, warning_offset=4, critical_offset=2)
    assert warning_level(5, policy) == 'normal'
    assert warning_level(6, policy) == 'warning'
    assert warning_level(8, policy) == 'critical'


def test_penalty_is_capped():
    policy = Policy(violation_penalty_percent=15)
    assert penalty_for(3, policy) == 45
    assert penalty_for(7, policy) == 100


@pytest.mark.django_db
class TestReportViolation:

    def test_five_violations_escalate_then_auto_submit(self, started):
        judge = FailAllJudge()
        reports = [report_violation(started.pk, 'tab-switch', judge=judge) for _ in range(5)]

        assert [r.warning_level for r in reports] == ['normal', 'normal', 'warning', 'critical', 'critical']
        assert [r.current_penalty for r in reports] == [5, 10, 15, 20, 25]
        assert [r.auto_submitted for r in reports] == [False, False, False, False, True]

        session = TestSession.objects.get(pk=started.pk)
        assert session.state == TestSession.State.SUBMITTED
        assert session.submit_reason == TestSession.SubmitReason.VIOLATION_LIMIT
        assert session.violation_count == 5
        assert session.violation_penalty == 25

    def test_report_after_auto_submit_is_rejected(self, started):
        for _ in range(5):
            report_violation(started.pk, 'window-blur', judge=FailAllJudge())
        with pytest.raises(SessionNotActive):
            report_violation(started.pk, 'window-blur')
        assert ViolationRecord.objects.filter(session=started).count() == 5

    def test_without_auto_submit_penalty_caps_at_100(self, build_session, make_mcq):
        policy = Policy(auto_submit_on_violation=False)
        session = build_session(mcqs=[make_mcq()], policy=policy)

        for _ in range(20):
            report = report_violation(session.pk, 'copy-paste')

        assert report.violation_count == 20
        assert report.current_penalty == 100
        assert report.auto_submitted is False
        assert TestSession.objects.get(pk=session.pk).state == TestSession.State.IN_PROGRESS

    def test_duplicate_events_are_each_recorded(self, started):
        report_violation(started.pk, 'right-click', detail="contextmenu")
        report = report_violation(started.pk, 'right-click', detail="contextmenu")
        assert report.violation_count == 2

    def test_unrecognised_type_is_accepted(self, started):
        report = report_violation(started.pk, 'second-monitor')
        assert report.violation_count == 1
        assert ViolationRecord.objects.get(session=started).violation_type == 'second-monitor'

    def test_not_started_session_rejected(self, provisioned):
        with pytest.raises(SessionNotActive):
            report_violation(provisioned.pk, 'tab-switch')

    def test_report_after_deadline_submits_as_timeout(self, started):
        late = started.start_time + timedelta(minutes=started.time_limit + 1)
        with pytest.raises(SessionExpired):
            report_violation(started.pk, 'tab-switch', now=late, judge=FailAllJudge())

        session = TestSession.objects.get(pk=started.pk)
        assert session.submit_reason == TestSession.SubmitReason.TIMEOUT
        assert not ViolationRecord.objects.filter(session=session).exists()

    def test_report_contract(self, started):
        payload = report_violation(started.pk, 'devtools').as_dict()
        assert payload == {
            "violationCount": 1,
            "maxViolations": 5,
            "currentPenalty": 5,
            "warningLevel": "normal",
            "autoSubmitted": False,
        }
