from django.contrib import admin

from .models import LeaveRequest


@admin.register(LeaveRequest)
class LeaveRequestAdmin(admin.ModelAdmin):
    list_display = ['id', 'requester', 'start_date', 'end_date', 'status', 'test_score']
    list_filter = ['status']
    search_fields = ['requester__email', 'reason']
