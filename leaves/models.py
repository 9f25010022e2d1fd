# leaves/models.py
from django.conf import settings
from django.db import models


class LeaveRequest(models.Model):
    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        TEST_ASSIGNED = "test-assigned", "Test Assigned"
        TEST_COMPLETED = "test-completed", "Test Completed"
        APPROVED = "approved", "Approved"
        REJECTED = "rejected", "Rejected"

    requester = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='leave_requests')
    reason = models.TextField()
    start_date = models.DateField()
    end_date = models.DateField()
    subjects = models.JSONField(default=list)

    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    test_score = models.FloatField(null=True, blank=True)

    # Human decision
    admin_remarks = models.TextField(blank=True)
    decided_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='leave_decisions'
    )
    decided_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']

    @property
    def days(self):
        """Leave length counting both endpoints."""
        return (self.end_date - self.start_date).days + 1

    @property
    def test_attempt(self):
        # Served from prefetch_related('test_sessions') in list views
        return max(self.test_sessions.all(), key=lambda s: (s.created_at, s.pk), default=None)

    def __str__(self):
        return f"{self.requester} - {self.start_date}..{self.end_date} ({self.status})"
