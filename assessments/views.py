from django.shortcuts import get_object_or_404
from rest_framework import permissions, status, views
from rest_framework.response import Response

from leaves.models import LeaveRequest
from .answers import upsert_answer
from .exceptions import AssessmentErrorMixin
from .lifecycle import compute_remaining, finalize_session, get_result, start_session
from .models import TestSession
from .permissions import IsReviewer, owned_session_or_404
from .serializers import (
    AnswerSubmitSerializer, FinalizeSerializer, StartSessionSerializer,
    TestResultSerializer, TestSessionSerializer, ViolationReportSerializer,
)
from .violations import report_violation


class SessionAPIView(AssessmentErrorMixin, views.APIView):
    permission_classes = [permissions.IsAuthenticated]


class TestForLeaveView(SessionAPIView):
    """
    The test attached to a leave request, with questions (answers stripped)
    and the server's view of the remaining time.
    """

    def get(self, request, leave_id):
        leaves = LeaveRequest.objects.all()
        if not IsReviewer().has_permission(request, self):
            leaves = leaves.filter(requester=request.user)
        leave = get_object_or_404(leaves, pk=leave_id)

        session = leave.test_attempt
        if session is None:
            return Response({"error": "No test has been provisioned for this leave."}, status=status.HTTP_404_NOT_FOUND)
        return Response(TestSessionSerializer(session).data)


class SessionDetailView(SessionAPIView):
    def get(self, request, session_id):
        session = owned_session_or_404(request, session_id)
        return Response(TestSessionSerializer(session).data)


class StartSessionView(SessionAPIView):
    def post(self, request, session_id):
        session = owned_session_or_404(request, session_id)
        serializer = StartSessionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        session = start_session(session.pk, fullscreen_acknowledged=serializer.validated_data['fullscreenAcknowledged'])
        return Response({
            "testId": session.pk,
            "startTime": session.start_time,
            "timeLimit": session.time_limit,
            "timeRemaining": compute_remaining(session),
        })


class ReportViolationView(SessionAPIView):
    def post(self, request, session_id):
        session = owned_session_or_404(request, session_id)
        serializer = ViolationReportSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        report = report_violation(session.pk, serializer.validated_data['type'], serializer.validated_data['detail'])
        return Response(report.as_dict())


class SubmitAnswerView(SessionAPIView):
    def post(self, request, session_id):
        session = owned_session_or_404(request, session_id)
        serializer = AnswerSubmitSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        answer = upsert_answer(session.pk, data['questionId'], data['answer_value'], language=data['language'])
        return Response({"status": "saved", "questionId": answer.question_id, "submittedAt": answer.submitted_at})


class FinalizeSessionView(SessionAPIView):
    def post(self, request, session_id):
        session = owned_session_or_404(request, session_id)
        serializer = FinalizeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        session = finalize_session(session.pk, reason=serializer.validated_data['reason'])
        return Response({
            "status": "Submitted",
            "submitReason": session.submit_reason,
            "percentage": session.final_score,
            "testResult": session.test_result,
        })


class TestResultView(SessionAPIView):
    def get(self, request, session_id):
        session = owned_session_or_404(request, session_id)
        session = get_result(session.pk)
        return Response(TestResultSerializer(session).data)
