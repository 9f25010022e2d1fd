import csv
import io
import logging

from django.db import transaction
from rest_framework import viewsets, permissions, status, filters
from rest_framework.decorators import action
from rest_framework.parsers import JSONParser, MultiPartParser, FormParser
from rest_framework.response import Response

from assessments.permissions import IsReviewer
from cores.models import AuditLog
from .models import Question, Option
from .serializers import QuestionSerializer

logger = logging.getLogger(__name__)


class QuestionViewSet(viewsets.ModelViewSet):
    queryset = Question.objects.prefetch_related('options', 'test_cases').order_by('-id')
    serializer_class = QuestionSerializer
    parser_classes = (JSONParser, MultiPartParser, FormParser)

    filter_backends = [filters.SearchFilter]
    search_fields = ['text', 'subject']

    def get_permissions(self):
        if self.action == 'subjects':
            return [permissions.IsAuthenticated()]
        return [IsReviewer()]

    def get_queryset(self):
        queryset = super().get_queryset()
        params = self.request.query_params
        # ?type=mcq&subject=Mathematics&difficulty=hard
        if params.get('type'):
            queryset = queryset.filter(question_type=params['type'])
        if params.get('subject'):
            queryset = queryset.filter(subject=params['subject'])
        if params.get('difficulty'):
            queryset = queryset.filter(difficulty=params['difficulty'])
        return queryset

    def perform_create(self, serializer):
        question = serializer.save()
        AuditLog.record(
            AuditLog.Action.QUESTION, question, actor=self.request.user,
            details=f"Added {question.question_type} question to {question.subject}",
        )

    def perform_destroy(self, instance):
        # Questions already drawn into a session are retired, not deleted
        if instance.session_items.exists():
            instance.is_active = False
            instance.save(update_fields=['is_active'])
        else:
            instance.delete()

    @action(detail=False, methods=['get'], url_path='subjects')
    def subjects(self, request):
        names = (
            Question.objects.filter(is_active=True)
            .order_by('subject')
            .values_list('subject', flat=True)
            .distinct()
        )
        return Response(list(names))

    @action(detail=False, methods=['post'], url_path='bulk-upload')
    def bulk_upload(self, request):
        """
        Upload MCQs via CSV.
        Expected CSV Header: question_text, subject, difficulty, points, options, correct_answer
        Options are pipe separated; correct_answer must match one option's text.
        """
        file_obj = request.FILES.get('file')
        if not file_obj:
            return Response({"error": "No file uploaded"}, status=status.HTTP_400_BAD_REQUEST)

        try:
            reader = csv.DictReader(io.StringIO(file_obj.read().decode('utf-8')))
            created_count = 0
            skipped = []

            with transaction.atomic():
                for line_no, row in enumerate(reader, start=2):
                    options = [o.strip() for o in row.get('options', '').split('|') if o.strip()]
                    correct = row.get('correct_answer', '').strip().lower()
                    difficulty = (row.get('difficulty') or 'medium').strip().lower()
                    points = int(row.get('points') or 1)
                    if len(options) < 2 or [o.lower() for o in options].count(correct) != 1:
                        skipped.append(line_no)
                        continue
                    if points < 1 or difficulty not in Question.Difficulty.values:
                        skipped.append(line_no)
                        continue

                    question = Question.objects.create(
                        question_type=Question.QuestionType.MCQ,
                        text=row['question_text'],
                        subject=row.get('subject') or 'General',
                        difficulty=difficulty,
                        points=points,
                    )
                    Option.objects.bulk_create([
                        Option(question=question, text=text, is_correct=(text.lower() == correct), order=i)
                        for i, text in enumerate(options)
                    ])
                    created_count += 1
        except (KeyError, ValueError, UnicodeDecodeError) as e:
            logger.warning("Bulk upload rejected: %s", e)
            return Response({"error": f"Malformed CSV: {e}"}, status=status.HTTP_400_BAD_REQUEST)

        if skipped:
            logger.warning("Bulk upload skipped rows %s (bad options, points or difficulty)", skipped)
        return Response(
            {"status": f"Successfully uploaded {created_count} questions", "skippedRows": skipped},
            status=status.HTTP_201_CREATED,
        )
