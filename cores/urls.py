from django.urls import path
from .views import TestSettingsView, AuditLogListView

urlpatterns = [
    path('settings/', TestSettingsView.as_view(), name='test-settings'),
    path('audit-logs/', AuditLogListView.as_view(), name='audit-logs'),
]
