"""
End-to-end HTTP flow: leave request, provisioning, the proctored session,
results and the reviewer's decision.
"""
import pytest
from rest_framework.test import APIClient

from questions.models import Question


@pytest.fixture(autouse=True)
def passing_judge(settings):
    settings.CODE_JUDGE_BACKEND = 'assessments.tests.judges.PassAllJudge'


@pytest.fixture
def leave_id(student_client, question_bank):
    resp = student_client.post('/api/leaves/', {
        "reason": "Sister's wedding",
        "startDate": "2026-11-02",
        "endDate": "2026-11-05",
        "subjects": ["Mathematics"],
    }, format='json')
    assert resp.status_code == 201, resp.data
    return resp.data['id']


@pytest.fixture
def session_id(student_client, leave_id):
    resp = student_client.post(f'/api/leaves/{leave_id}/provision-test/')
    assert resp.status_code == 201, resp.data
    return resp.data['testId']


@pytest.fixture
def running(student_client, session_id):
    resp = student_client.post(f'/api/tests/{session_id}/start/', {"fullscreenAcknowledged": True}, format='json')
    assert resp.status_code == 200, resp.data
    return session_id


@pytest.mark.django_db
def test_full_flow(student_client, reviewer_client, leave_id, session_id):
    # Fetch the test by leave: answers are stripped
    resp = student_client.get(f'/api/tests/leave/{leave_id}/')
    assert resp.status_code == 200
    assert resp.data['testId'] == session_id
    assert resp.data['state'] == 'not-started'
    assert resp.data['timeLimit'] == 75
    assert resp.data['requireFullscreen'] is True
    questions = resp.data['questions']
    assert [q['round'] for q in questions] == ['round1'] * 6 + ['round2'] * 2
    for item in questions:
        for option in item['question']['options']:
            assert 'isCorrect' not in option
        if item['round'] == 'round2':
            assert len(item['question']['testCases']) == 2

    resp = student_client.post(f'/api/tests/{session_id}/start/', {"fullscreenAcknowledged": True}, format='json')
    assert resp.status_code == 200
    assert 4490 <= resp.data['timeRemaining'] <= 4500

    for item in questions:
        question = Question.objects.get(pk=item['question']['id'])
        if item['round'] == 'round1':
            payload = {"questionId": question.pk, "selectedOption": question.correct_option_index()}
        else:
            payload = {"questionId": question.pk, "code": "print(2 * int(input().split()[0]))", "language": "python"}
        resp = student_client.post(f'/api/tests/{session_id}/answer/', payload, format='json')
        assert resp.status_code == 200, resp.data
        assert resp.data['status'] == 'saved'

    resp = student_client.post(f'/api/tests/{session_id}/violation/', {"type": "tab-switch"}, format='json')
    assert resp.status_code == 200
    assert resp.data == {
        "violationCount": 1, "maxViolations": 5, "currentPenalty": 5,
        "warningLevel": "normal", "autoSubmitted": False,
    }

    resp = student_client.post(f'/api/tests/{session_id}/submit/', {}, format='json')
    assert resp.status_code == 200
    assert resp.data['submitReason'] == 'manual'
    assert resp.data['percentage'] == 95
    assert resp.data['testResult'] == 'pass'

    resp = student_client.get(f'/api/tests/{session_id}/result/')
    assert resp.status_code == 200
    result = resp.data
    assert result['rawScore'] == 100
    assert result['percentage'] == 95
    assert result['violationPenalty'] == 5
    assert result['round1Passed'] is True
    assert result['roundScores'] == {"round1": 100, "round2": 100}
    assert result['recommendation'] == {"action": "approve", "reason": "excellent performance"}
    assert len(result['responses']) == 8
    assert [v['type'] for v in result['violations']] == ['tab-switch']

    resp = reviewer_client.put(f'/api/leaves/{leave_id}/status/', {"status": "approved"}, format='json')
    assert resp.status_code == 200, resp.data
    assert resp.data['status'] == 'approved'
    assert resp.data['testScore'] == 95


@pytest.mark.django_db
class TestSessionErrors:

    def test_unauthenticated(self, session_id):
        assert APIClient().get(f'/api/tests/{session_id}/').status_code == 401

    def test_other_requesters_session_is_hidden(self, make_user, session_id):
        client = APIClient()
        client.force_authenticate(user=make_user())
        assert client.get(f'/api/tests/{session_id}/').status_code == 404
        assert client.post(f'/api/tests/{session_id}/start/', {"fullscreenAcknowledged": True}, format='json').status_code == 404

    def test_reviewer_can_view_any_session(self, reviewer_client, session_id):
        assert reviewer_client.get(f'/api/tests/{session_id}/').status_code == 200

    def test_second_start_conflicts(self, student_client, running):
        resp = student_client.post(f'/api/tests/{running}/start/', {"fullscreenAcknowledged": True}, format='json')
        assert resp.status_code == 409
        assert resp.data['code'] == 'already_started'

    def test_start_without_fullscreen(self, student_client, session_id):
        resp = student_client.post(f'/api/tests/{session_id}/start/', {}, format='json')
        assert resp.status_code == 400
        assert resp.data['code'] == 'fullscreen_required'

    def test_answer_to_foreign_question(self, student_client, running, make_mcq):
        stranger = make_mcq(subject="History")
        resp = student_client.post(f'/api/tests/{running}/answer/', {"questionId": stranger.pk, "selectedOption": 0}, format='json')
        assert resp.status_code == 400
        assert resp.data['code'] == 'unknown_question'

    def test_answer_without_value(self, student_client, running):
        resp = student_client.post(f'/api/tests/{running}/answer/', {"questionId": 1}, format='json')
        assert resp.status_code == 400

    def test_answer_before_start(self, student_client, session_id, question_bank):
        mcqs, _ = question_bank
        resp = student_client.post(f'/api/tests/{session_id}/answer/', {"questionId": mcqs[0].pk, "selectedOption": 0}, format='json')
        assert resp.status_code == 409
        assert resp.data['code'] == 'session_not_active'

    def test_result_before_submit(self, student_client, running):
        resp = student_client.get(f'/api/tests/{running}/result/')
        assert resp.status_code == 404
        assert resp.data['code'] == 'result_not_found'

    def test_double_submit(self, student_client, running):
        assert student_client.post(f'/api/tests/{running}/submit/', {}, format='json').status_code == 200
        resp = student_client.post(f'/api/tests/{running}/submit/', {}, format='json')
        assert resp.status_code == 409
        assert resp.data['code'] == 'already_submitted'

    def test_unknown_submit_reason(self, student_client, running):
        resp = student_client.post(f'/api/tests/{running}/submit/', {"reason": "gave-up"}, format='json')
        assert resp.status_code == 400

    def test_violation_limit_over_http(self, student_client, running):
        for _ in range(4):
            student_client.post(f'/api/tests/{running}/violation/', {"type": "window-blur"}, format='json')
        resp = student_client.post(f'/api/tests/{running}/violation/', {"type": "window-blur"}, format='json')
        assert resp.data['autoSubmitted'] is True
        assert resp.data['warningLevel'] == 'critical'

        resp = student_client.get(f'/api/tests/{running}/result/')
        assert resp.data['submitReason'] == 'violation-limit'


@pytest.mark.django_db
def test_provisioning_with_empty_bank(student_client, make_leave):
    leave = make_leave()
    resp = student_client.post(f'/api/leaves/{leave.pk}/provision-test/')
    assert resp.status_code == 422
    assert resp.data['code'] == 'insufficient_questions'


@pytest.mark.django_db
def test_no_test_for_leave_yet(student_client, make_leave):
    resp = student_client.get(f'/api/tests/leave/{make_leave().pk}/')
    assert resp.status_code == 404
