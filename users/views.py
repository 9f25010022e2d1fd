from django.contrib.auth import get_user_model
from django.db.models import Avg, Count
from rest_framework import generics, permissions
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework_simplejwt.views import TokenObtainPairView

from assessments.models import TestSession
from assessments.permissions import IsReviewer
from leaves.models import LeaveRequest
from questions.models import Question

from .serializers import RegisterSerializer, CustomTokenObtainPairSerializer, UserSerializer

User = get_user_model()


# --- Authentication Views ---
class RegisterView(generics.CreateAPIView):
    serializer_class = RegisterSerializer
    permission_classes = [permissions.AllowAny]


class CustomLoginView(TokenObtainPairView):
    serializer_class = CustomTokenObtainPairSerializer


class UserProfileView(generics.RetrieveUpdateAPIView):
    serializer_class = UserSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_object(self):
        return self.request.user


# --- Dashboard Stats ---
class AdminStatsView(APIView):
    permission_classes = [IsReviewer]

    def get(self, request):
        by_status = {
            row['status']: row['total']
            for row in LeaveRequest.objects.values('status').annotate(total=Count('id')).order_by()
        }
        by_type = {
            row['question_type']: row['total']
            for row in Question.objects.filter(is_active=True).values('question_type').annotate(total=Count('id')).order_by()
        }
        submitted = TestSession.objects.filter(state=TestSession.State.SUBMITTED)
        stats = {
            "total_requesters": User.objects.exclude(role=User.Role.ADMIN).filter(is_staff=False).count(),
            "leaves_by_status": {choice: by_status.get(choice, 0) for choice in LeaveRequest.Status.values},
            "pending_review": by_status.get(LeaveRequest.Status.TEST_COMPLETED, 0),
            "questions_by_type": {choice: by_type.get(choice, 0) for choice in Question.QuestionType.values},
            "tests_submitted": submitted.count(),
            "average_score": submitted.aggregate(avg=Avg('final_score'))['avg'],
            "auto_submitted": submitted.filter(submit_reason=TestSession.SubmitReason.VIOLATION_LIMIT).count(),
        }
        return Response(stats)
