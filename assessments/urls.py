from django.urls import path
from .views import (
    FinalizeSessionView, ReportViolationView, SessionDetailView, StartSessionView,
    SubmitAnswerView, TestForLeaveView, TestResultView,
)

urlpatterns = [
    path('leave/<int:leave_id>/', TestForLeaveView.as_view(), name='test-for-leave'),
    path('<int:session_id>/', SessionDetailView.as_view(), name='session-detail'),
    path('<int:session_id>/start/', StartSessionView.as_view(), name='session-start'),
    path('<int:session_id>/violation/', ReportViolationView.as_view(), name='session-violation'),
    path('<int:session_id>/answer/', SubmitAnswerView.as_view(), name='session-answer'),
    path('<int:session_id>/submit/', FinalizeSessionView.as_view(), name='session-submit'),
    path('<int:session_id>/result/', TestResultView.as_view(), name='session-result'),
]
