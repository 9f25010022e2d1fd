import pytest
from django.db import connection
from django.test.utils import CaptureQueriesContext

from assessments.models import TestSession
from cores.models import AuditLog, TestSettings
from leaves.models import LeaveRequest

pytestmark = pytest.mark.django_db


@pytest.fixture
def build_finished_session():
    def _build(leave, final_score=75.0):
        return TestSession.objects.create(
            leave=leave,
            state=TestSession.State.SUBMITTED,
            submit_reason=TestSession.SubmitReason.MANUAL,
            time_limit=75,
            final_score=final_score,
            round1_score=final_score,
            round2_score=final_score,
        )
    return _build


def leave_payload(**overrides):
    payload = {
        "reason": "Medical appointment",
        "startDate": "2026-11-02",
        "endDate": "2026-11-04",
        "subjects": ["Mathematics"],
    }
    payload.update(overrides)
    return payload


class TestCreateLeave:

    def test_create(self, student_client, student):
        resp = student_client.post('/api/leaves/', leave_payload(), format='json')

        assert resp.status_code == 201
        assert resp.data['status'] == 'pending'
        assert resp.data['days'] == 3
        assert resp.data['testAttempt'] is None
        assert LeaveRequest.objects.get().requester == student

    def test_end_before_start(self, student_client):
        resp = student_client.post('/api/leaves/', leave_payload(endDate="2026-11-01"), format='json')
        assert resp.status_code == 400
        assert 'endDate' in resp.data

    def test_subjects_required(self, student_client):
        resp = student_client.post('/api/leaves/', leave_payload(subjects=[]), format='json')
        assert resp.status_code == 400
        assert 'subjects' in resp.data

    def test_blank_subjects_rejected(self, student_client):
        resp = student_client.post('/api/leaves/', leave_payload(subjects=["  "]), format='json')
        assert resp.status_code == 400

    def test_duplicate_subjects_collapsed(self, student_client):
        resp = student_client.post(
            '/api/leaves/', leave_payload(subjects=["Physics", "Mathematics", "Physics"]), format='json',
        )
        assert resp.data['subjects'] == ["Physics", "Mathematics"]

    def test_longer_than_max_leave_days(self, student_client):
        resp = student_client.post('/api/leaves/', leave_payload(endDate="2026-11-09"), format='json')
        assert resp.status_code == 400
        assert "cannot exceed 7 days" in str(resp.data['endDate'])

    def test_max_leave_days_follows_settings(self, student_client):
        test_settings = TestSettings.load()
        test_settings.max_leave_days = 14
        test_settings.save()

        resp = student_client.post('/api/leaves/', leave_payload(endDate="2026-11-12"), format='json')
        assert resp.status_code == 201
        assert resp.data['days'] == 11


class TestListLeaves:

    def test_requesters_see_only_their_own(self, student_client, make_leave, make_user):
        mine = make_leave()
        make_leave(requester=make_user())

        resp = student_client.get('/api/leaves/')
        assert [row['id'] for row in resp.data] == [mine.pk]

    def test_reviewer_sees_all_and_filters(self, reviewer_client, make_leave, make_user):
        make_leave()
        done = make_leave(requester=make_user(), status=LeaveRequest.Status.TEST_COMPLETED)

        assert len(reviewer_client.get('/api/leaves/').data) == 2
        resp = reviewer_client.get('/api/leaves/', {'status': 'test-completed'})
        assert [row['id'] for row in resp.data] == [done.pk]


class TestPreview:

    @pytest.mark.parametrize("end, days, mcq, coding, label", [
        ("2026-11-03", 2, 5, 2, "Balanced (More Easy Questions)"),
        ("2026-11-05", 4, 6, 2, "Moderate"),
        ("2026-11-10", 9, 7, 3, "Higher (More Hard Questions)"),
    ])
    def test_composition(self, student_client, end, days, mcq, coding, label):
        resp = student_client.get('/api/leaves/preview/', {'startDate': '2026-11-02', 'endDate': end})

        assert resp.status_code == 200
        assert resp.data == {
            "days": days, "mcqCount": mcq, "codingCount": coding, "difficulty": label, "timeLimit": 75,
        }

    def test_missing_dates(self, student_client):
        assert student_client.get('/api/leaves/preview/').status_code == 400


class TestDecision:

    def test_approve_completed_leave(self, reviewer_client, reviewer, make_leave):
        leave = make_leave(status=LeaveRequest.Status.TEST_COMPLETED, test_score=88.0)

        resp = reviewer_client.put(f'/api/leaves/{leave.pk}/status/', {"status": "approved"}, format='json')

        assert resp.status_code == 200
        leave.refresh_from_db()
        assert leave.status == LeaveRequest.Status.APPROVED
        assert leave.decided_by == reviewer
        assert leave.decided_at is not None
        assert AuditLog.objects.filter(action=AuditLog.Action.DECISION, target_object_id=str(leave.pk)).exists()

    def test_rejection_needs_remarks(self, reviewer_client, make_leave):
        leave = make_leave(status=LeaveRequest.Status.TEST_COMPLETED)
        resp = reviewer_client.put(f'/api/leaves/{leave.pk}/status/', {"status": "rejected"}, format='json')
        assert resp.status_code == 400
        assert 'adminRemarks' in resp.data

    def test_reject_with_remarks(self, reviewer_client, make_leave):
        leave = make_leave(status=LeaveRequest.Status.TEST_COMPLETED)
        resp = reviewer_client.put(
            f'/api/leaves/{leave.pk}/status/', {"status": "rejected", "adminRemarks": "Exam week"}, format='json',
        )
        assert resp.status_code == 200
        assert resp.data['adminRemarks'] == "Exam week"

    def test_cannot_decide_before_test_completes(self, reviewer_client, make_leave):
        leave = make_leave()
        resp = reviewer_client.put(f'/api/leaves/{leave.pk}/status/', {"status": "approved"}, format='json')
        assert resp.status_code == 409

    def test_cannot_decide_twice(self, reviewer_client, make_leave):
        leave = make_leave(status=LeaveRequest.Status.APPROVED)
        resp = reviewer_client.put(f'/api/leaves/{leave.pk}/status/', {"status": "rejected", "adminRemarks": "x"}, format='json')
        assert resp.status_code == 409

    def test_requesters_cannot_decide(self, student_client, make_leave):
        leave = make_leave(status=LeaveRequest.Status.TEST_COMPLETED)
        resp = student_client.put(f'/api/leaves/{leave.pk}/status/', {"status": "approved"}, format='json')
        assert resp.status_code == 403

    def test_pending_status_is_not_a_decision(self, reviewer_client, make_leave):
        leave = make_leave(status=LeaveRequest.Status.TEST_COMPLETED)
        resp = reviewer_client.put(f'/api/leaves/{leave.pk}/status/', {"status": "pending"}, format='json')
        assert resp.status_code == 400


class TestListQueries:

    def test_query_count_does_not_grow_with_leaves(self, reviewer_client, make_leave, build_finished_session):
        build_finished_session(make_leave(status=LeaveRequest.Status.TEST_COMPLETED))
        with CaptureQueriesContext(connection) as one:
            assert len(reviewer_client.get('/api/leaves/').data) == 1

        for _ in range(3):
            build_finished_session(make_leave(status=LeaveRequest.Status.TEST_COMPLETED))
        with CaptureQueriesContext(connection) as four:
            resp = reviewer_client.get('/api/leaves/')

        assert len(resp.data) == 4
        assert all(row['recommendation'] is not None for row in resp.data)
        assert len(four.captured_queries) == len(one.captured_queries)

    def test_latest_attempt_is_reported(self, student_client, make_leave, build_finished_session):
        leave = make_leave(status=LeaveRequest.Status.TEST_COMPLETED)
        build_finished_session(leave, final_score=40.0)
        latest = build_finished_session(leave, final_score=90.0)

        resp = student_client.get(f'/api/leaves/{leave.pk}/')
        assert resp.data['testAttempt']['testId'] == latest.pk
        assert resp.data['recommendation']['action'] == 'approve'
