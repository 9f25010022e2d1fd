from rest_framework import serializers
from .models import TestSettings, AuditLog


class TestSettingsSerializer(serializers.ModelSerializer):
    # Map frontend camelCase names onto the model fields
    mcqCount = serializers.IntegerField(source='mcq_count', min_value=1, max_value=50, required=False)
    codingCount = serializers.IntegerField(source='coding_count', min_value=0, max_value=10, required=False)
    mcqTimeLimit = serializers.IntegerField(source='mcq_time_limit', min_value=5, max_value=120, required=False)
    codingTimeLimit = serializers.IntegerField(source='coding_time_limit', min_value=10, max_value=180, required=False)
    passingPercentage = serializers.IntegerField(source='passing_percentage', min_value=0, max_value=100, required=False)
    round1PassingPercentage = serializers.IntegerField(source='round1_passing_percentage', min_value=0, max_value=100, required=False)
    maxViolations = serializers.IntegerField(source='max_violations', min_value=1, max_value=50, required=False)
    violationPenaltyPercent = serializers.IntegerField(source='violation_penalty_percent', min_value=0, max_value=100, required=False)
    autoSubmitOnViolation = serializers.BooleanField(source='auto_submit_on_violation', required=False)
    requireFullscreen = serializers.BooleanField(source='require_fullscreen', required=False)
    maxLeaveDays = serializers.IntegerField(source='max_leave_days', min_value=1, max_value=365, required=False)

    class Meta:
        model = TestSettings
        fields = [
            'mcqCount', 'codingCount', 'mcqTimeLimit', 'codingTimeLimit',
            'passingPercentage', 'round1PassingPercentage', 'maxViolations',
            'violationPenaltyPercent', 'autoSubmitOnViolation', 'requireFullscreen',
            'maxLeaveDays', 'updated_at',
        ]
        read_only_fields = ['updated_at']


class AuditLogSerializer(serializers.ModelSerializer):
    actor_email = serializers.CharField(source='actor.email', read_only=True, default=None)

    class Meta:
        model = AuditLog
        fields = ['id', 'actor', 'actor_email', 'action', 'target_model', 'target_object_id', 'timestamp', 'details']
