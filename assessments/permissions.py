from django.shortcuts import get_object_or_404
from rest_framework import permissions

from .models import TestSession


class IsReviewer(permissions.BasePermission):
    """
    Staff and admin-role accounts. Requesters are blocked.
    """
    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        return request.user.is_staff or getattr(request.user, 'role', '') == 'admin'


def owned_session_or_404(request, session_id):
    """Requesters only ever see their own sessions; reviewers see all."""
    queryset = TestSession.objects.select_related('leave')
    if not IsReviewer().has_permission(request, None):
        queryset = queryset.filter(leave__requester=request.user)
    return get_object_or_404(queryset, pk=session_id)
