from rest_framework import serializers

from assessments.provisioning import composition_for, leave_days
from assessments.recommendation import recommend_for_session
from cores.models import current_policy
from .models import LeaveRequest


class TestAttemptSummarySerializer(serializers.Serializer):
    testId = serializers.IntegerField(source='id')
    state = serializers.CharField()
    timeLimit = serializers.IntegerField(source='time_limit')
    startTime = serializers.DateTimeField(source='start_time')
    endTime = serializers.DateTimeField(source='end_time')
    submitReason = serializers.CharField(source='submit_reason')
    roundScores = serializers.SerializerMethodField()
    violationCount = serializers.IntegerField(source='violation_count')
    violationPenalty = serializers.FloatField(source='violation_penalty')
    finalScore = serializers.FloatField(source='final_score')
    testResult = serializers.CharField(source='test_result')

    def get_roundScores(self, obj):
        return {"round1": obj.round1_score, "round2": obj.round2_score}


class LeaveRequestSerializer(serializers.ModelSerializer):
    requester_email = serializers.CharField(source='requester.email', read_only=True)
    startDate = serializers.DateField(source='start_date')
    endDate = serializers.DateField(source='end_date')
    subjects = serializers.ListField(child=serializers.CharField(max_length=100), allow_empty=False)
    testScore = serializers.FloatField(source='test_score', read_only=True)
    adminRemarks = serializers.CharField(source='admin_remarks', read_only=True)
    days = serializers.IntegerField(read_only=True)
    testAttempt = TestAttemptSummarySerializer(source='test_attempt', read_only=True)
    recommendation = serializers.SerializerMethodField()

    class Meta:
        model = LeaveRequest
        fields = [
            'id', 'requester', 'requester_email', 'reason', 'startDate', 'endDate', 'days',
            'subjects', 'status', 'testScore', 'adminRemarks', 'decided_at',
            'testAttempt', 'recommendation', 'created_at',
        ]
        read_only_fields = ['requester', 'status', 'decided_at', 'created_at']

    def validate_subjects(self, value):
        # Keep first occurrence order, drop duplicates and blanks
        cleaned = list(dict.fromkeys(s.strip() for s in value if s.strip()))
        if not cleaned:
            raise serializers.ValidationError("Please select at least one subject.")
        return cleaned

    def validate(self, attrs):
        start, end = attrs['start_date'], attrs['end_date']
        if end < start:
            raise serializers.ValidationError({"endDate": "End date cannot be before start date."})
        max_days = current_policy().max_leave_days
        days = leave_days(start, end)
        if days > max_days:
            raise serializers.ValidationError({"endDate": f"Leave cannot exceed {max_days} days (requested {days})."})
        return attrs

    def get_recommendation(self, obj):
        session = obj.test_attempt
        rec = recommend_for_session(session) if session else None
        return rec._asdict() if rec else None


class LeaveDecisionSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[LeaveRequest.Status.APPROVED, LeaveRequest.Status.REJECTED])
    adminRemarks = serializers.CharField(required=False, allow_blank=True, default='')

    def validate(self, attrs):
        if attrs['status'] == LeaveRequest.Status.REJECTED and not attrs['adminRemarks'].strip():
            raise serializers.ValidationError({"adminRemarks": "Please provide remarks for rejection."})
        return attrs


class TestPreviewSerializer(serializers.Serializer):
    startDate = serializers.DateField()
    endDate = serializers.DateField()

    def validate(self, attrs):
        if attrs['endDate'] < attrs['startDate']:
            raise serializers.ValidationError({"endDate": "End date cannot be before start date."})
        return attrs

    def to_representation(self, instance):
        days = leave_days(instance['startDate'], instance['endDate'])
        tier = composition_for(days)
        return {
            "days": days,
            "mcqCount": tier.mcq_count,
            "codingCount": tier.coding_count,
            "difficulty": tier.label,
            "timeLimit": current_policy().total_time_limit,
        }
