import logging

from django.db import transaction
from django.utils import timezone
from rest_framework import mixins, permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from assessments.exceptions import AssessmentErrorMixin
from assessments.permissions import IsReviewer
from assessments.provisioning import provision_test
from assessments.serializers import TestSessionSerializer
from cores.models import AuditLog
from .models import LeaveRequest
from .serializers import LeaveDecisionSerializer, LeaveRequestSerializer, TestPreviewSerializer

logger = logging.getLogger(__name__)


class LeaveRequestViewSet(AssessmentErrorMixin,
                          mixins.CreateModelMixin,
                          mixins.ListModelMixin,
                          mixins.RetrieveModelMixin,
                          viewsets.GenericViewSet):
    serializer_class = LeaveRequestSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        queryset = LeaveRequest.objects.select_related('requester').prefetch_related('test_sessions')
        if not IsReviewer().has_permission(self.request, self):
            queryset = queryset.filter(requester=self.request.user)
        # ?status=test-completed
        status_filter = self.request.query_params.get('status')
        if status_filter:
            queryset = queryset.filter(status=status_filter)
        return queryset.order_by('-created_at')

    def get_permissions(self):
        if self.action == 'decide':
            return [IsReviewer()]
        return super().get_permissions()

    def perform_create(self, serializer):
        leave = serializer.save(requester=self.request.user)
        logger.info("Leave %s requested by %s for %d day(s)", leave.pk, leave.requester, leave.days)

    @action(detail=False, methods=['get'], url_path='preview')
    def preview(self, request):
        """Test composition for a date range, before the leave is filed."""
        serializer = TestPreviewSerializer(data={
            'startDate': request.query_params.get('startDate'),
            'endDate': request.query_params.get('endDate'),
        })
        serializer.is_valid(raise_exception=True)
        return Response(serializer.to_representation(serializer.validated_data))

    @action(detail=True, methods=['post'], url_path='provision-test')
    def provision(self, request, pk=None):
        leave = self.get_object()
        session = provision_test(leave.pk, actor=request.user)
        return Response(TestSessionSerializer(session).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['put'], url_path='status')
    def decide(self, request, pk=None):
        """Final human decision. Overrides the engine's recommendation if it wants to."""
        serializer = LeaveDecisionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        with transaction.atomic():
            leave = LeaveRequest.objects.select_for_update().get(pk=self.get_object().pk)
            if leave.status != LeaveRequest.Status.TEST_COMPLETED:
                return Response(
                    {"error": f"Only leaves with a completed test can be decided (status is '{leave.status}')."},
                    status=status.HTTP_409_CONFLICT,
                )
            leave.status = serializer.validated_data['status']
            leave.admin_remarks = serializer.validated_data['adminRemarks']
            leave.decided_by = request.user
            leave.decided_at = timezone.now()
            leave.save(update_fields=['status', 'admin_remarks', 'decided_by', 'decided_at'])

            AuditLog.record(
                AuditLog.Action.DECISION, leave, actor=request.user,
                details=f"Leave {leave.status} (score {leave.test_score}): {leave.admin_remarks}",
            )

        return Response(LeaveRequestSerializer(leave).data)
