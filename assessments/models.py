# assessments/models.py
from django.db import models
from django.db.models import Q
from django.utils import timezone

from cores.policy import Policy
from leaves.models import LeaveRequest
from questions.models import Question


class TestSession(models.Model):
    """One proctored attempt, provisioned for a single leave request."""

    class State(models.TextChoices):
        NOT_STARTED = "not-started", "Not Started"
        IN_PROGRESS = "in-progress", "In Progress"
        SUBMITTED = "submitted", "Submitted"

    class SubmitReason(models.TextChoices):
        MANUAL = "manual", "Manual"
        TIMEOUT = "timeout", "Timeout"
        VIOLATION_LIMIT = "violation-limit", "Violation Limit"

    class Result(models.TextChoices):
        PASS = "pass", "Pass"
        FAIL = "fail", "Fail"

    leave = models.ForeignKey(LeaveRequest, on_delete=models.CASCADE, related_name='test_sessions')
    state = models.CharField(max_length=20, choices=State.choices, default=State.NOT_STARTED)
    submit_reason = models.CharField(max_length=20, choices=SubmitReason.choices, blank=True)

    time_limit = models.PositiveIntegerField(help_text="Minutes")
    policy_snapshot = models.JSONField(default=dict)

    created_at = models.DateTimeField(auto_now_add=True)
    start_time = models.DateTimeField(null=True, blank=True)
    end_time = models.DateTimeField(null=True, blank=True)

    # Filled once, at submission
    round1_score = models.FloatField(null=True, blank=True)
    round2_score = models.FloatField(null=True, blank=True)
    raw_score = models.FloatField(null=True, blank=True)
    points_earned = models.FloatField(null=True, blank=True)
    max_score = models.PositiveIntegerField(default=0)
    violation_count = models.PositiveIntegerField(default=0)
    violation_penalty = models.FloatField(default=0)
    final_score = models.FloatField(null=True, blank=True)
    test_result = models.CharField(max_length=10, choices=Result.choices, blank=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=['leave'],
                condition=~Q(state='submitted'),
                name='one_active_session_per_leave',
            ),
        ]

    @property
    def policy(self):
        return Policy.from_dict(self.policy_snapshot)

    @property
    def is_active(self):
        return self.state == self.State.IN_PROGRESS

    @property
    def is_submitted(self):
        return self.state == self.State.SUBMITTED

    def __str__(self):
        return f"Session {self.pk} for leave {self.leave_id} ({self.state})"


class SessionQuestion(models.Model):
    class Round(models.TextChoices):
        MCQ = "round1", "Round 1 (MCQ)"
        CODING = "round2", "Round 2 (Coding)"

    session = models.ForeignKey(TestSession, related_name='items', on_delete=models.CASCADE)
    question = models.ForeignKey(Question, related_name='session_items', on_delete=models.PROTECT)
    round = models.CharField(max_length=10, choices=Round.choices)
    position = models.PositiveIntegerField()

    class Meta:
        ordering = ['position']
        unique_together = ('session', 'question')


class Answer(models.Model):
    """The current response to one question. Later submissions overwrite."""
    session = models.ForeignKey(TestSession, related_name='answers', on_delete=models.CASCADE)
    question = models.ForeignKey(Question, on_delete=models.PROTECT)

    # Option index for MCQ, source code for coding
    value = models.JSONField(null=True)
    language = models.CharField(max_length=30, blank=True)
    submitted_at = models.DateTimeField(default=timezone.now)

    # Grading
    is_correct = models.BooleanField(null=True)
    cases_passed = models.PositiveIntegerField(default=0)
    cases_total = models.PositiveIntegerField(default=0)
    awarded_points = models.FloatField(default=0)

    class Meta:
        unique_together = ('session', 'question')
        ordering = ['submitted_at', 'id']


class ViolationRecord(models.Model):
    """Append-only anti-cheat event."""
    session = models.ForeignKey(TestSession, related_name='violations', on_delete=models.CASCADE)
    violation_type = models.CharField(max_length=50)
    detail = models.TextField(blank=True)
    timestamp = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ['timestamp', 'id']

    def __str__(self):
        return f"{self.violation_type} @ {self.timestamp:%H:%M:%S}"
