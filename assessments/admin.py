from django.contrib import admin

from .models import Answer, SessionQuestion, TestSession, ViolationRecord


class SessionQuestionInline(admin.TabularInline):
    model = SessionQuestion
    extra = 0


class ViolationRecordInline(admin.TabularInline):
    model = ViolationRecord
    extra = 0
    readonly_fields = ['violation_type', 'detail', 'timestamp']

    def has_add_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(TestSession)
class TestSessionAdmin(admin.ModelAdmin):
    list_display = ['id', 'leave', 'state', 'submit_reason', 'final_score', 'violation_count']
    list_filter = ['state', 'submit_reason', 'test_result']
    inlines = [SessionQuestionInline, ViolationRecordInline]


admin.site.register(Answer)
