import logging

from rest_framework import generics, permissions, status
from rest_framework.views import APIView
from rest_framework.response import Response

from assessments.permissions import IsReviewer
from .models import TestSettings, AuditLog
from .serializers import TestSettingsSerializer, AuditLogSerializer

logger = logging.getLogger(__name__)


class TestSettingsView(APIView):
    """Anyone signed in may read the policy; only reviewers may change it."""

    def get_permissions(self):
        if self.request.method == 'GET':
            return [permissions.IsAuthenticated()]
        return [IsReviewer()]

    def get(self, request):
        serializer = TestSettingsSerializer(TestSettings.load())
        return Response(serializer.data)

    def put(self, request):
        test_settings = TestSettings.load()
        serializer = TestSettingsSerializer(test_settings, data=request.data, partial=True)
        if serializer.is_valid():
            serializer.save()
            changed = ', '.join(sorted(request.data.keys()))
            AuditLog.record(
                AuditLog.Action.SETTINGS, test_settings, actor=request.user,
                details=f"Updated test settings: {changed}",
            )
            logger.info("Test settings updated by %s (%s)", request.user, changed)
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


class AuditLogListView(generics.ListAPIView):
    """Most recent first. Narrow with ``?action=DECISION`` or ``?target=TestSession``."""
    serializer_class = AuditLogSerializer
    permission_classes = [IsReviewer]

    def get_queryset(self):
        params = self.request.query_params
        logs = AuditLog.objects.select_related('actor')
        if params.get('action'):
            logs = logs.filter(action=params['action'])
        if params.get('target'):
            logs = logs.filter(target_model=params['target'])
        return logs
