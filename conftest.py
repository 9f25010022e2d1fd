"""
Shared fixtures: users, API clients, a small question bank factory and
leave requests.
"""
import itertools
from datetime import date, timedelta

import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

from leaves.models import LeaveRequest
from questions.models import CodingTestCase, Option, Question


@pytest.fixture(autouse=True)
def clear_settings_cache():
    # TestSettings.load() caches the singleton across tests
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def make_user(db, django_user_model):
    counter = itertools.count(1)

    def _make(**kwargs):
        n = next(counter)
        fields = {
            'username': f"user{n}",
            'email': f"user{n}@example.com",
            'password': "pass12345",
            'first_name': "Test",
            'last_name': f"User{n}",
        }
        fields.update(kwargs)
        return django_user_model.objects.create_user(**fields)
    return _make


@pytest.fixture
def student(make_user):
    return make_user(email="student@example.com", username="student")


@pytest.fixture
def reviewer(make_user):
    return make_user(email="reviewer@example.com", username="reviewer", is_staff=True, role='admin')


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def student_client(student):
    client = APIClient()
    client.force_authenticate(user=student)
    return client


@pytest.fixture
def reviewer_client(reviewer):
    client = APIClient()
    client.force_authenticate(user=reviewer)
    return client


@pytest.fixture
def make_mcq(db):
    def _make(subject="Mathematics", difficulty="medium", points=1, correct=0, option_count=4, **kwargs):
        question = Question.objects.create(
            question_type=Question.QuestionType.MCQ,
            subject=subject,
            difficulty=difficulty,
            points=points,
            text=kwargs.pop('text', f"{subject} question"),
            **kwargs,
        )
        Option.objects.bulk_create([
            Option(question=question, text=f"Option {i}", is_correct=(i == correct), order=i)
            for i in range(option_count)
        ])
        return question
    return _make


@pytest.fixture
def make_coding(db):
    def _make(subject="Mathematics", difficulty="medium", points=5, cases=4, hidden=2, **kwargs):
        question = Question.objects.create(
            question_type=Question.QuestionType.CODING,
            subject=subject,
            difficulty=difficulty,
            points=points,
            text=kwargs.pop('text', f"Solve a {subject} problem"),
            sample_input="1 2",
            sample_output="3",
            **kwargs,
        )
        CodingTestCase.objects.bulk_create([
            CodingTestCase(
                question=question, input=f"{i} {i}", expected_output=str(2 * i),
                is_hidden=(i >= cases - hidden), order=i,
            )
            for i in range(cases)
        ])
        return question
    return _make


@pytest.fixture
def make_leave(db, student):
    def _make(days=4, subjects=("Mathematics",), requester=None, start=date(2026, 11, 2), **kwargs):
        return LeaveRequest.objects.create(
            requester=requester or student,
            reason="Family event",
            start_date=start,
            end_date=start + timedelta(days=days - 1),
            subjects=list(subjects),
            **kwargs,
        )
    return _make


@pytest.fixture
def question_bank(make_mcq, make_coding):
    """10 Mathematics MCQs and 3 Mathematics coding questions."""
    difficulties = ["easy", "medium", "hard"]
    mcqs = [make_mcq(difficulty=difficulties[i % 3], correct=i % 4) for i in range(10)]
    coding = [make_coding(difficulty=difficulties[i % 3]) for i in range(3)]
    return mcqs, coding
