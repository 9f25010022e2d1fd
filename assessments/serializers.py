from django.utils import timezone
from rest_framework import serializers

from questions.serializers import CandidateQuestionSerializer
from .lifecycle import compute_remaining
from .models import Answer, SessionQuestion, TestSession, ViolationRecord
from .penalties import penalty_for, warning_level
from .recommendation import recommend_for_session

# --- Request payloads ---

class StartSessionSerializer(serializers.Serializer):
    fullscreenAcknowledged = serializers.BooleanField(default=False)


class ViolationReportSerializer(serializers.Serializer):
    type = serializers.CharField(max_length=50)
    detail = serializers.CharField(allow_blank=True, required=False, default='')


class AnswerSubmitSerializer(serializers.Serializer):
    """
    MCQs send ``selectedOption``, coding questions send ``code``. A raw
    ``value`` is accepted for either.
    """
    questionId = serializers.IntegerField()
    selectedOption = serializers.IntegerField(required=False, allow_null=True)
    code = serializers.CharField(required=False, allow_blank=True, trim_whitespace=False)
    value = serializers.JSONField(required=False)
    language = serializers.CharField(max_length=30, required=False, default='javascript')

    def validate(self, attrs):
        for key in ('selectedOption', 'code', 'value'):
            if key in attrs:
                attrs['answer_value'] = attrs[key]
                return attrs
        raise serializers.ValidationError("Provide selectedOption, code or value.")


class FinalizeSerializer(serializers.Serializer):
    reason = serializers.ChoiceField(choices=TestSession.SubmitReason.choices, default=TestSession.SubmitReason.MANUAL)

# --- Session views ---

class SessionQuestionSerializer(serializers.ModelSerializer):
    question = CandidateQuestionSerializer(read_only=True)

    class Meta:
        model = SessionQuestion
        fields = ['position', 'round', 'question']


class TestSessionSerializer(serializers.ModelSerializer):
    """Live view of a session for the test taker."""
    testId = serializers.IntegerField(source='id', read_only=True)
    leaveId = serializers.IntegerField(source='leave_id', read_only=True)
    timeLimit = serializers.IntegerField(source='time_limit', read_only=True)
    startTime = serializers.DateTimeField(source='start_time', read_only=True)
    endTime = serializers.DateTimeField(source='end_time', read_only=True)
    submitReason = serializers.CharField(source='submit_reason', read_only=True)
    timeRemaining = serializers.SerializerMethodField()
    requireFullscreen = serializers.SerializerMethodField()
    proctoring = serializers.SerializerMethodField()
    questions = SessionQuestionSerializer(source='items', many=True, read_only=True)
    answers = serializers.SerializerMethodField()

    class Meta:
        model = TestSession
        fields = [
            'testId', 'leaveId', 'state', 'timeLimit', 'startTime', 'endTime',
            'timeRemaining', 'submitReason', 'requireFullscreen', 'proctoring',
            'questions', 'answers',
        ]

    def get_timeRemaining(self, obj):
        if obj.is_submitted:
            return 0
        return compute_remaining(obj, self.context.get('now') or timezone.now())

    def get_requireFullscreen(self, obj):
        return obj.policy.require_fullscreen

    def get_proctoring(self, obj):
        policy = obj.policy
        count = obj.violations.count()
        return {
            "violationCount": count,
            "maxViolations": policy.max_violations,
            "currentPenalty": penalty_for(count, policy),
            "warningLevel": warning_level(count, policy),
        }

    def get_answers(self, obj):
        return {str(a.question_id): a.value for a in obj.answers.all()}

# --- Results ---

class AnswerResultSerializer(serializers.ModelSerializer):
    questionId = serializers.IntegerField(source='question_id')
    submittedAt = serializers.DateTimeField(source='submitted_at')
    isCorrect = serializers.BooleanField(source='is_correct', allow_null=True)
    awardedPoints = serializers.FloatField(source='awarded_points')
    casesPassed = serializers.IntegerField(source='cases_passed')
    casesTotal = serializers.IntegerField(source='cases_total')

    class Meta:
        model = Answer
        fields = ['questionId', 'value', 'language', 'submittedAt', 'isCorrect', 'awardedPoints', 'casesPassed', 'casesTotal']


class ViolationRecordSerializer(serializers.ModelSerializer):
    type = serializers.CharField(source='violation_type')

    class Meta:
        model = ViolationRecord
        fields = ['type', 'detail', 'timestamp']


class TestResultSerializer(serializers.ModelSerializer):
    testId = serializers.IntegerField(source='id')
    totalScore = serializers.FloatField(source='points_earned')
    maxScore = serializers.IntegerField(source='max_score')
    percentage = serializers.FloatField(source='final_score')
    rawScore = serializers.FloatField(source='raw_score')
    roundScores = serializers.SerializerMethodField()
    round1Passed = serializers.SerializerMethodField()
    violationCount = serializers.IntegerField(source='violation_count')
    violationPenalty = serializers.FloatField(source='violation_penalty')
    testResult = serializers.CharField(source='test_result')
    submitReason = serializers.CharField(source='submit_reason')
    recommendation = serializers.SerializerMethodField()
    responses = AnswerResultSerializer(source='answers', many=True)
    violations = ViolationRecordSerializer(many=True)
    startTime = serializers.DateTimeField(source='start_time')
    endTime = serializers.DateTimeField(source='end_time')

    class Meta:
        model = TestSession
        fields = [
            'testId', 'totalScore', 'maxScore', 'percentage', 'rawScore', 'roundScores',
            'round1Passed', 'violationCount', 'violationPenalty', 'testResult',
            'submitReason', 'recommendation', 'responses', 'violations', 'startTime', 'endTime',
        ]

    def get_roundScores(self, obj):
        return {"round1": obj.round1_score, "round2": obj.round2_score}

    def get_round1Passed(self, obj):
        return obj.round1_score >= obj.policy.round1_passing_percentage

    def get_recommendation(self, obj):
        rec = recommend_for_session(obj)
        return rec._asdict() if rec else None
