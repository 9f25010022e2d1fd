# questions/models.py
from django.db import models


class Question(models.Model):
    class QuestionType(models.TextChoices):
        MCQ = "mcq", "Multiple Choice"
        CODING = "coding", "Coding"

    class Difficulty(models.TextChoices):
        EASY = "easy", "Easy"
        MEDIUM = "medium", "Medium"
        HARD = "hard", "Hard"

    question_type = models.CharField(max_length=20, choices=QuestionType.choices, default=QuestionType.MCQ)
    subject = models.CharField(max_length=100, db_index=True)
    difficulty = models.CharField(max_length=20, choices=Difficulty.choices, default=Difficulty.MEDIUM)
    points = models.PositiveIntegerField(default=1)

    # MCQ prompt, or the coding problem statement
    text = models.TextField()

    # Coding payload
    constraints = models.TextField(blank=True)
    input_format = models.TextField(blank=True)
    output_format = models.TextField(blank=True)
    starter_code = models.TextField(blank=True)
    sample_input = models.TextField(blank=True)
    sample_output = models.TextField(blank=True)
    time_limit = models.PositiveIntegerField(default=300, help_text="Seconds allowed per run")

    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['id']

    @property
    def is_mcq(self):
        return self.question_type == self.QuestionType.MCQ

    def correct_option_index(self):
        for index, option in enumerate(self.options.all()):
            if option.is_correct:
                return index
        return None

    def __str__(self):
        return f"[{self.subject}/{self.difficulty}] {self.text[:50]}..."


class Option(models.Model):
    question = models.ForeignKey(Question, related_name='options', on_delete=models.CASCADE)
    text = models.CharField(max_length=255)
    is_correct = models.BooleanField(default=False)
    order = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ['order', 'id']

    def __str__(self):
        return self.text


class CodingTestCase(models.Model):
    question = models.ForeignKey(Question, related_name='test_cases', on_delete=models.CASCADE)
    input = models.TextField(blank=True)
    expected_output = models.TextField()
    is_hidden = models.BooleanField(default=False)
    order = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ['order', 'id']

    def __str__(self):
        return f"Case {self.order} of question {self.question_id}"
