from django.conf import settings
from django.core.cache import cache
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from .policy import Policy

SETTINGS_CACHE_KEY = 'test_settings'


class TestSettings(models.Model):
    # --- Test Composition ---
    mcq_count = models.PositiveIntegerField(default=10)
    coding_count = models.PositiveIntegerField(default=2)
    mcq_time_limit = models.PositiveIntegerField(default=30, help_text="Minutes")
    coding_time_limit = models.PositiveIntegerField(default=45, help_text="Minutes")

    # --- Passing Criteria ---
    passing_percentage = models.PositiveIntegerField(default=70, validators=[MaxValueValidator(100)])
    round1_passing_percentage = models.PositiveIntegerField(default=60, validators=[MaxValueValidator(100)])

    # --- Proctoring ---
    max_violations = models.PositiveIntegerField(default=5, validators=[MinValueValidator(1)])
    violation_penalty_percent = models.PositiveIntegerField(default=5, validators=[MaxValueValidator(100)])
    auto_submit_on_violation = models.BooleanField(default=True)
    require_fullscreen = models.BooleanField(default=True)

    # --- Leave Policy ---
    max_leave_days = models.PositiveIntegerField(default=7, validators=[MinValueValidator(1)])

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = "test settings"

    def save(self, *args, **kwargs):
        self.pk = 1  # Singleton pattern
        super().save(*args, **kwargs)
        cache.set(SETTINGS_CACHE_KEY, self)

    def delete(self, *args, **kwargs):
        pass

    @classmethod
    def load(cls):
        obj = cache.get(SETTINGS_CACHE_KEY)
        if obj is None:
            obj, created = cls.objects.get_or_create(pk=1)
            cache.set(SETTINGS_CACHE_KEY, obj)
        return obj

    def as_policy(self):
        return Policy(
            mcq_count=self.mcq_count,
            coding_count=self.coding_count,
            mcq_time_limit=self.mcq_time_limit,
            coding_time_limit=self.coding_time_limit,
            passing_percentage=self.passing_percentage,
            round1_passing_percentage=self.round1_passing_percentage,
            max_violations=self.max_violations,
            violation_penalty_percent=self.violation_penalty_percent,
            auto_submit_on_violation=self.auto_submit_on_violation,
            require_fullscreen=self.require_fullscreen,
            max_leave_days=self.max_leave_days,
            warning_offset=getattr(settings, 'PROCTORING_WARNING_OFFSET', 2),
            critical_offset=getattr(settings, 'PROCTORING_CRITICAL_OFFSET', 1),
        )

    def __str__(self):
        return "Test Settings"


def current_policy():
    """The live policy, falling back to defaults until an admin saves settings."""
    return TestSettings.load().as_policy()


class AuditLog(models.Model):
    class Action(models.TextChoices):
        SETTINGS = 'SETTINGS', 'Settings Changed'
        PROVISION = 'PROVISION', 'Test Provisioned'
        SUBMIT = 'SUBMIT', 'Test Submitted'
        DECISION = 'DECISION', 'Leave Decided'
        QUESTION = 'QUESTION', 'Question Bank Changed'

    actor = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='audit_logs')
    action = models.CharField(max_length=20, choices=Action.choices)
    target_model = models.CharField(max_length=50, help_text="e.g., LeaveRequest, TestSession, TestSettings")
    target_object_id = models.CharField(max_length=100, blank=True, null=True)
    details = models.TextField(blank=True, help_text="Description of changes")
    timestamp = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-timestamp']

    @classmethod
    def record(cls, action, target, actor=None, details=''):
        return cls.objects.create(
            actor=actor,
            action=action,
            target_model=target.__class__.__name__,
            target_object_id=str(target.pk),
            details=details,
        )

    def __str__(self):
        return f"{self.actor} - {self.action} - {self.timestamp}"
