# questions/serializers.py
from django.db import transaction
from rest_framework import serializers

from .models import Question, Option, CodingTestCase

# --- Helper Serializers ---

class OptionSerializer(serializers.ModelSerializer):
    isCorrect = serializers.BooleanField(source='is_correct', default=False)

    class Meta:
        model = Option
        fields = ['id', 'text', 'isCorrect']


class CodingTestCaseSerializer(serializers.ModelSerializer):
    expectedOutput = serializers.CharField(source='expected_output', allow_blank=True)
    isHidden = serializers.BooleanField(source='is_hidden', default=False)

    class Meta:
        model = CodingTestCase
        fields = ['id', 'input', 'expectedOutput', 'isHidden']
        extra_kwargs = {'input': {'allow_blank': True, 'required': False}}

# --- Question Serializers ---

class QuestionSerializer(serializers.ModelSerializer):
    """Full question, answers included. Staff only."""
    questionType = serializers.ChoiceField(source='question_type', choices=Question.QuestionType.choices)
    questionText = serializers.CharField(source='text')
    inputFormat = serializers.CharField(source='input_format', required=False, allow_blank=True)
    outputFormat = serializers.CharField(source='output_format', required=False, allow_blank=True)
    starterCode = serializers.CharField(source='starter_code', required=False, allow_blank=True)
    sampleInput = serializers.CharField(source='sample_input', required=False, allow_blank=True)
    sampleOutput = serializers.CharField(source='sample_output', required=False, allow_blank=True)
    timeLimit = serializers.IntegerField(source='time_limit', required=False, min_value=1)
    isActive = serializers.BooleanField(source='is_active', required=False)

    options = OptionSerializer(many=True, required=False)
    testCases = CodingTestCaseSerializer(source='test_cases', many=True, required=False)

    class Meta:
        model = Question
        fields = [
            'id', 'questionType', 'subject', 'difficulty', 'points', 'questionText',
            'constraints', 'inputFormat', 'outputFormat', 'starterCode',
            'sampleInput', 'sampleOutput', 'timeLimit', 'isActive',
            'options', 'testCases', 'created_at',
        ]
        read_only_fields = ['created_at']
        extra_kwargs = {'points': {'min_value': 1}}

    def validate(self, attrs):
        q_type = attrs.get('question_type', getattr(self.instance, 'question_type', None))
        options = attrs.get('options')
        test_cases = attrs.get('test_cases')

        if q_type == Question.QuestionType.MCQ and (self.instance is None or options is not None):
            options = options or []
            if len(options) < 2:
                raise serializers.ValidationError({"options": "An MCQ needs at least two options."})
            if sum(1 for opt in options if opt.get('is_correct')) != 1:
                raise serializers.ValidationError({"options": "Mark exactly one option as correct."})
            if any(not opt['text'].strip() for opt in options):
                raise serializers.ValidationError({"options": "Please fill all options."})

        if q_type == Question.QuestionType.CODING and (self.instance is None or test_cases is not None):
            if not test_cases:
                raise serializers.ValidationError({"testCases": "Please add at least one test case."})

        return attrs

    @transaction.atomic
    def create(self, validated_data):
        options = validated_data.pop('options', [])
        test_cases = validated_data.pop('test_cases', [])
        question = Question.objects.create(**validated_data)
        self._write_children(question, options, test_cases)
        return question

    @transaction.atomic
    def update(self, instance, validated_data):
        options = validated_data.pop('options', None)
        test_cases = validated_data.pop('test_cases', None)
        instance = super().update(instance, validated_data)
        if options is not None:
            instance.options.all().delete()
            self._write_children(instance, options, [])
        if test_cases is not None:
            instance.test_cases.all().delete()
            self._write_children(instance, [], test_cases)
        return instance

    def _write_children(self, question, options, test_cases):
        Option.objects.bulk_create([
            Option(question=question, order=i, **opt) for i, opt in enumerate(options)
        ])
        CodingTestCase.objects.bulk_create([
            CodingTestCase(question=question, order=i, **case) for i, case in enumerate(test_cases)
        ])


class CandidateOptionSerializer(serializers.ModelSerializer):
    class Meta:
        model = Option
        fields = ['text']


class CandidateQuestionSerializer(serializers.ModelSerializer):
    """What a test taker sees: no correct flags, no hidden test cases."""
    questionType = serializers.CharField(source='question_type')
    questionText = serializers.CharField(source='text')
    inputFormat = serializers.CharField(source='input_format')
    outputFormat = serializers.CharField(source='output_format')
    starterCode = serializers.CharField(source='starter_code')
    sampleInput = serializers.CharField(source='sample_input')
    sampleOutput = serializers.CharField(source='sample_output')
    timeLimit = serializers.IntegerField(source='time_limit')
    options = CandidateOptionSerializer(many=True, read_only=True)
    testCases = serializers.SerializerMethodField()

    class Meta:
        model = Question
        fields = [
            'id', 'questionType', 'subject', 'difficulty', 'points', 'questionText',
            'constraints', 'inputFormat', 'outputFormat', 'starterCode',
            'sampleInput', 'sampleOutput', 'timeLimit', 'options', 'testCases',
        ]

    def get_testCases(self, obj):
        visible = [case for case in obj.test_cases.all() if not case.is_hidden]
        return [{"input": case.input, "expectedOutput": case.expected_output} for case in visible]
