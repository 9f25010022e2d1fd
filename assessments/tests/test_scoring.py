"""
Scoring: points-weighted rounds, the frozen penalty and pass/fail.
"""
import pytest

from assessments.lifecycle import finalize_session
from assessments.models import Answer, TestSession, ViolationRecord
from assessments.scoring import clamp, mcq_is_correct, percentage
from cores.policy import Policy

from .judges import FailAllJudge, PassAllJudge, RecordingJudge, VisibleOnlyJudge

SOURCE = "a, b = map(int, input().split())\nprint(a + b)"


def answer(session, question, value, language='python'):
    return Answer.objects.create(session=session, question=question, value=value, language=language)


class TestHelpers:

    def test_percentage_of_nothing_is_zero(self):
        assert percentage(0, 0) == 0.0

    def test_percentage(self):
        assert percentage(3, 4) == 75.0

    @pytest.mark.parametrize("value, expected", [(-12.5, 0.0), (42.0, 42.0), (130.0, 100.0)])
    def test_clamp(self, value, expected):
        assert clamp(value) == expected


@pytest.mark.django_db
class TestMcqIsCorrect:

    @pytest.mark.parametrize("value", [None, "banana", True, False, [1], {"option": 2}])
    def test_malformed_values_are_wrong(self, make_mcq, value):
        question = make_mcq(correct=1)
        assert mcq_is_correct(question, value) is False

    def test_matching_index(self, make_mcq):
        question = make_mcq(correct=2)
        assert mcq_is_correct(question, 2) is True
        assert mcq_is_correct(question, 1) is False


@pytest.mark.django_db
class TestScoreSession:

    def test_perfect_answers_score_100(self, build_session, make_mcq, make_coding):
        mcqs = [make_mcq(correct=i % 4) for i in range(3)]
        coding = [make_coding()]
        session = build_session(mcqs=mcqs, coding=coding)
        for q in mcqs:
            answer(session, q, q.correct_option_index())
        answer(session, coding[0], SOURCE)

        session = finalize_session(session.pk, judge=PassAllJudge())

        assert session.round1_score == 100
        assert session.round2_score == 100
        assert session.final_score == 100
        assert session.test_result == TestSession.Result.PASS

    def test_rounds_are_weighted_by_points(self, build_session, make_mcq, make_coding):
        """Two 1-point MCQs right plus half of an 8-point coding question: 6 of 10."""
        mcqs = [make_mcq(points=1), make_mcq(points=1)]
        coding = make_coding(points=8, cases=4, hidden=2)
        session = build_session(mcqs=mcqs, coding=[coding])
        for q in mcqs:
            answer(session, q, q.correct_option_index())
        answer(session, coding, SOURCE)

        session = finalize_session(session.pk, judge=VisibleOnlyJudge())

        assert session.round1_score == 100
        assert session.round2_score == 50
        assert session.points_earned == 6
        assert session.max_score == 10
        assert session.raw_score == 60
        assert session.test_result == TestSession.Result.FAIL

    def test_hidden_cases_count_toward_the_score(self, build_session, make_coding):
        coding = make_coding(points=5, cases=5, hidden=3)
        session = build_session(coding=[coding])
        answer(session, coding, SOURCE)

        finalize_session(session.pk, judge=VisibleOnlyJudge())

        graded = Answer.objects.get(session=session)
        assert (graded.cases_passed, graded.cases_total) == (2, 5)
        assert graded.awarded_points == 2.0
        assert graded.is_correct is False

    def test_missing_coding_round_scores_zero(self, build_session, make_mcq):
        mcqs = [make_mcq(), make_mcq()]
        session = build_session(mcqs=mcqs)
        answer(session, mcqs[0], mcqs[0].correct_option_index())

        session = finalize_session(session.pk, judge=FailAllJudge())

        assert session.round1_score == 50
        assert session.round2_score == 0
        assert session.raw_score == 50

    def test_unanswered_questions_earn_nothing(self, build_session, make_mcq, make_coding):
        judge = RecordingJudge()
        session = build_session(mcqs=[make_mcq()], coding=[make_coding()])

        session = finalize_session(session.pk, judge=judge)

        assert session.final_score == 0
        assert session.max_score == 6
        assert judge.calls == []

    def test_blank_code_is_not_sent_to_the_judge(self, build_session, make_coding):
        judge = RecordingJudge()
        coding = make_coding()
        session = build_session(coding=[coding])
        answer(session, coding, "   \n")

        finalize_session(session.pk, judge=judge)

        assert judge.calls == []
        assert Answer.objects.get(session=session).cases_passed == 0

    def test_judge_receives_code_and_language(self, build_session, make_coding):
        judge = RecordingJudge()
        coding = make_coding(cases=3, hidden=1)
        session = build_session(coding=[coding])
        answer(session, coding, SOURCE, language='python')

        finalize_session(session.pk, judge=judge)

        assert judge.calls == [(coding.pk, SOURCE, 'python', 3)]

    def test_malformed_mcq_answer_scores_zero(self, build_session, make_mcq):
        question = make_mcq()
        session = build_session(mcqs=[question])
        answer(session, question, "first one")

        session = finalize_session(session.pk, judge=FailAllJudge())

        assert session.final_score == 0
        assert Answer.objects.get(session=session).is_correct is False

    def test_penalty_is_subtracted(self, build_session, make_mcq):
        questions = [make_mcq() for _ in range(4)]
        session = build_session(mcqs=questions, policy=Policy(auto_submit_on_violation=False))
        for q in questions[:3]:
            answer(session, q, q.correct_option_index())
        for _ in range(2):
            ViolationRecord.objects.create(session=session, violation_type='tab-switch')

        session = finalize_session(session.pk, judge=FailAllJudge())

        assert session.raw_score == 75
        assert session.violation_penalty == 10
        assert session.final_score == 65

    def test_final_score_never_negative(self, build_session, make_mcq):
        question = make_mcq()
        session = build_session(mcqs=[question], policy=Policy(auto_submit_on_violation=False))
        answer(session, question, 3)
        for _ in range(8):
            ViolationRecord.objects.create(session=session, violation_type='tab-switch')

        session = finalize_session(session.pk, judge=FailAllJudge())

        assert session.final_score == 0
        assert session.violation_penalty == 40

    @pytest.mark.parametrize("passing, result", [(70, 'pass'), (80, 'fail')])
    def test_pass_fail_uses_session_threshold(self, build_session, make_mcq, passing, result):
        questions = [make_mcq() for _ in range(4)]
        session = build_session(mcqs=questions, policy=Policy(passing_percentage=passing))
        for q in questions[:3]:
            answer(session, q, q.correct_option_index())

        session = finalize_session(session.pk, judge=FailAllJudge())

        assert session.final_score == 75
        assert session.test_result == result
