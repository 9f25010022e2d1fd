import pytest
from rest_framework_simplejwt.tokens import AccessToken

from users.models import User

pytestmark = pytest.mark.django_db


def register(client, **overrides):
    payload = {
        "email": "ada@example.com",
        "first_name": "Ada",
        "last_name": "Lovelace",
        "password": "analytical1",
    }
    payload.update(overrides)
    return client.post('/api/auth/register/', payload, format='json')


def test_register_defaults_to_student(api_client):
    resp = register(api_client)
    assert resp.status_code == 201
    user = User.objects.get(email="ada@example.com")
    assert user.role == User.Role.STUDENT
    assert user.check_password("analytical1")


def test_register_as_employee(api_client):
    resp = register(api_client, role="employee", department="Finance", employee_id="E-104")
    assert resp.status_code == 201
    assert User.objects.get().department == "Finance"


def test_cannot_self_register_as_admin(api_client):
    resp = register(api_client, role="admin")
    assert resp.status_code == 400
    assert not User.objects.exists()


def test_duplicate_email_rejected(api_client):
    register(api_client)
    assert register(api_client).status_code == 400


def test_login_with_email_returns_tokens(api_client):
    register(api_client)
    resp = api_client.post('/api/auth/login/', {"email": "ADA@example.com", "password": "analytical1"}, format='json')

    assert resp.status_code == 200, resp.data
    assert 'access' in resp.data and 'refresh' in resp.data
    assert resp.data['user']['role'] == 'student'
    assert AccessToken(resp.data['access'])['role'] == 'student'


def test_login_with_wrong_password(api_client):
    register(api_client)
    resp = api_client.post('/api/auth/login/', {"email": "ada@example.com", "password": "nope"}, format='json')
    assert resp.status_code == 401


def test_bearer_token_authenticates(api_client):
    register(api_client)
    tokens = api_client.post('/api/auth/login/', {"email": "ada@example.com", "password": "analytical1"}, format='json').data

    api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {tokens['access']}")
    resp = api_client.get('/api/auth/me/')
    assert resp.status_code == 200
    assert resp.data['email'] == "ada@example.com"


def test_profile_role_is_read_only(student_client, student):
    student_client.patch('/api/auth/me/', {"role": "admin", "department": "Physics"}, format='json')
    student.refresh_from_db()
    assert student.role == User.Role.STUDENT
    assert student.department == "Physics"


class TestAdminStats:

    def test_counts(self, reviewer_client, make_leave, make_mcq):
        make_leave()
        make_leave(status='test-completed', test_score=72.5)
        make_mcq()

        resp = reviewer_client.get('/api/admin/stats/')

        assert resp.status_code == 200
        assert resp.data['leaves_by_status']['pending'] == 1
        assert resp.data['pending_review'] == 1
        assert resp.data['questions_by_type'] == {"mcq": 1, "coding": 0}
        assert resp.data['tests_submitted'] == 0
        assert resp.data['average_score'] is None
        assert resp.data['total_requesters'] == 1

    def test_requesters_blocked(self, student_client):
        assert student_client.get('/api/admin/stats/').status_code == 403
