import pytest
from django.core.files.uploadedfile import SimpleUploadedFile

from assessments.models import SessionQuestion, TestSession
from cores.models import AuditLog
from questions.models import Question

pytestmark = pytest.mark.django_db

MCQ = {
    "questionType": "mcq",
    "subject": "Mathematics",
    "difficulty": "easy",
    "points": 2,
    "questionText": "What is 7 x 6?",
    "options": [
        {"text": "42", "isCorrect": True},
        {"text": "36"},
        {"text": "48"},
    ],
}

CODING = {
    "questionType": "coding",
    "subject": "Mathematics",
    "difficulty": "hard",
    "points": 10,
    "questionText": "Sum two integers",
    "sampleInput": "1 2",
    "sampleOutput": "3",
    "testCases": [
        {"input": "1 2", "expectedOutput": "3"},
        {"input": "10 -4", "expectedOutput": "6", "isHidden": True},
    ],
}


class TestQuestionCrud:

    def test_create_mcq(self, reviewer_client):
        resp = reviewer_client.post('/api/questions/', MCQ, format='json')

        assert resp.status_code == 201, resp.data
        question = Question.objects.get()
        assert question.options.count() == 3
        assert question.correct_option_index() == 0
        assert AuditLog.objects.filter(action=AuditLog.Action.QUESTION).count() == 1

    def test_create_coding(self, reviewer_client):
        resp = reviewer_client.post('/api/questions/', CODING, format='json')

        assert resp.status_code == 201, resp.data
        assert [c['isHidden'] for c in resp.data['testCases']] == [False, True]

    @pytest.mark.parametrize("options", [
        [{"text": "42", "isCorrect": True}],
        [{"text": "42"}, {"text": "36"}],
        [{"text": "42", "isCorrect": True}, {"text": "36", "isCorrect": True}],
        [{"text": "42", "isCorrect": True}, {"text": "   "}],
    ])
    def test_bad_options_rejected(self, reviewer_client, options):
        resp = reviewer_client.post('/api/questions/', dict(MCQ, options=options), format='json')
        assert resp.status_code == 400
        assert 'options' in resp.data

    def test_coding_needs_test_cases(self, reviewer_client):
        resp = reviewer_client.post('/api/questions/', dict(CODING, testCases=[]), format='json')
        assert resp.status_code == 400
        assert 'testCases' in resp.data

    def test_update_replaces_options(self, reviewer_client, make_mcq):
        question = make_mcq()
        resp = reviewer_client.patch(f'/api/questions/{question.pk}/', {
            "options": [{"text": "yes"}, {"text": "no", "isCorrect": True}],
        }, format='json')

        assert resp.status_code == 200, resp.data
        assert [o.text for o in question.options.all()] == ["yes", "no"]
        assert question.correct_option_index() == 1

    def test_patch_without_options_keeps_them(self, reviewer_client, make_mcq):
        question = make_mcq()
        resp = reviewer_client.patch(f'/api/questions/{question.pk}/', {"points": 3}, format='json')
        assert resp.status_code == 200
        assert question.options.count() == 4

    def test_filters(self, reviewer_client, make_mcq, make_coding):
        make_mcq(subject="Physics", difficulty="hard")
        make_mcq(subject="Mathematics")
        make_coding(subject="Physics")

        assert len(reviewer_client.get('/api/questions/', {'type': 'mcq'}).data) == 2
        assert len(reviewer_client.get('/api/questions/', {'subject': 'Physics'}).data) == 2
        assert len(reviewer_client.get('/api/questions/', {'subject': 'Physics', 'difficulty': 'hard'}).data) == 1

    def test_requesters_cannot_manage_bank(self, student_client):
        assert student_client.get('/api/questions/').status_code == 403
        assert student_client.post('/api/questions/', MCQ, format='json').status_code == 403

    def test_delete_unused_question(self, reviewer_client, make_mcq):
        question = make_mcq()
        assert reviewer_client.delete(f'/api/questions/{question.pk}/').status_code == 204
        assert not Question.objects.filter(pk=question.pk).exists()

    def test_delete_drawn_question_retires_it(self, reviewer_client, make_mcq, make_leave):
        question = make_mcq()
        session = TestSession.objects.create(leave=make_leave(), time_limit=75)
        SessionQuestion.objects.create(session=session, question=question, round='round1', position=0)

        assert reviewer_client.delete(f'/api/questions/{question.pk}/').status_code == 204
        question.refresh_from_db()
        assert question.is_active is False


class TestSubjects:

    def test_distinct_active_subjects(self, student_client, make_mcq, make_coding):
        make_mcq(subject="Physics")
        make_mcq(subject="Mathematics")
        make_coding(subject="Physics")
        make_mcq(subject="History", is_active=False)

        resp = student_client.get('/api/questions/subjects/')
        assert resp.status_code == 200
        assert resp.data == ["Mathematics", "Physics"]


class TestBulkUpload:

    def upload(self, client, text):
        csv_file = SimpleUploadedFile("questions.csv", text.encode('utf-8'), content_type='text/csv')
        return client.post('/api/questions/bulk-upload/', {'file': csv_file}, format='multipart')

    def test_upload(self, reviewer_client):
        resp = self.upload(reviewer_client, (
            "question_text,subject,difficulty,points,options,correct_answer\n"
            "2 + 2?,Mathematics,Easy,1,3|4|5,4\n"
            "Capital of France?,Geography,medium,2,Paris|Rome,paris\n"
        ))

        assert resp.status_code == 201
        assert resp.data['skippedRows'] == []
        assert Question.objects.count() == 2
        geography = Question.objects.get(subject="Geography")
        assert geography.points == 2
        assert geography.correct_option_index() == 0
        assert Question.objects.get(subject="Mathematics").difficulty == "easy"

    def test_bad_rows_are_skipped(self, reviewer_client):
        resp = self.upload(reviewer_client, (
            "question_text,subject,difficulty,points,options,correct_answer\n"
            "Only one option,Mathematics,easy,1,4,4\n"
            "Answer missing,Mathematics,easy,1,1|2,3\n"
            "Fine,Mathematics,easy,1,1|2,2\n"
        ))

        assert resp.status_code == 201
        assert resp.data['skippedRows'] == [2, 3]
        assert Question.objects.count() == 1

    def test_missing_file(self, reviewer_client):
        resp = reviewer_client.post('/api/questions/bulk-upload/', {}, format='multipart')
        assert resp.status_code == 400

    def test_malformed_points(self, reviewer_client):
        resp = self.upload(reviewer_client, (
            "question_text,subject,difficulty,points,options,correct_answer\n"
            "2 + 2?,Mathematics,easy,lots,3|4,4\n"
        ))
        assert resp.status_code == 400
        assert not Question.objects.exists()

    def test_non_positive_points_are_skipped(self, reviewer_client):
        resp = self.upload(reviewer_client, (
            "question_text,subject,difficulty,points,options,correct_answer\n"
            "2 + 2?,Mathematics,easy,-3,3|4,4\n"
            "3 + 3?,Mathematics,easy,0,5|6,6\n"
            "4 + 4?,Mathematics,easy,2,7|8,8\n"
        ))

        assert resp.status_code == 201
        assert resp.data['skippedRows'] == [2, 3]
        assert list(Question.objects.values_list('points', flat=True)) == [2]

    def test_unknown_difficulty_is_skipped(self, reviewer_client):
        resp = self.upload(reviewer_client, (
            "question_text,subject,difficulty,points,options,correct_answer\n"
            "2 + 2?,Mathematics,extreme,1,3|4,4\n"
            "3 + 3?,Mathematics, Hard ,1,5|6,6\n"
        ))

        assert resp.status_code == 201
        assert resp.data['skippedRows'] == [2]
        assert list(Question.objects.values_list('difficulty', flat=True)) == ["hard"]
