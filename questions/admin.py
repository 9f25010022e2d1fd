from django.contrib import admin

from .models import Question, Option, CodingTestCase


class OptionInline(admin.TabularInline):
    model = Option
    extra = 0


class CodingTestCaseInline(admin.TabularInline):
    model = CodingTestCase
    extra = 0


@admin.register(Question)
class QuestionAdmin(admin.ModelAdmin):
    list_display = ['id', 'question_type', 'subject', 'difficulty', 'points', 'is_active']
    list_filter = ['question_type', 'subject', 'difficulty', 'is_active']
    search_fields = ['text', 'subject']
    inlines = [OptionInline, CodingTestCaseInline]
