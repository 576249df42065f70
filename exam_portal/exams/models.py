from decimal import Decimal

from django.db import models
from django.conf import settings
from django.utils.translation import gettext_lazy as _
from django.core.validators import MinValueValidator, MaxValueValidator
from django.core.exceptions import ValidationError

User = settings.AUTH_USER_MODEL


class QuestionType(models.TextChoices):
    SINGLE = "SINGLE", _("Single answer")
    MULTIPLE = "MULTIPLE", _("Multiple answers")


class QuestionDifficulty(models.TextChoices):
    EASY = "EASY", _("Easy")
    MEDIUM = "MEDIUM", _("Medium")
    HARD = "HARD", _("Hard")


class ResultStatus(models.TextChoices):
    PASS = "PASS", _("Passed")
    FAIL = "FAIL", _("Failed")


class Exam(models.Model):
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    subject = models.CharField(max_length=255)
    tutor = models.ForeignKey(User, on_delete=models.CASCADE, related_name="authored_exams")
    assigned_to = models.ManyToManyField(User, blank=True, related_name="assigned_exams")
    duration = models.PositiveIntegerField(
        help_text=_("Bearbeitungszeit in Minuten (nur informativ)."),
    )
    start_date = models.DateTimeField()
    end_date = models.DateTimeField()
    attempt_limit = models.PositiveSmallIntegerField(
        default=1, validators=[MinValueValidator(1)]
    )
    passing_score = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal("60"),
        validators=[MinValueValidator(0), MaxValueValidator(100)],
        help_text=_("Mindestprozentsatz zum Bestehen."),
    )
    show_results_immediately = models.BooleanField(default=False)
    show_correct_answers = models.BooleanField(default=False)
    randomize_questions = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Exam")
        verbose_name_plural = _("Exams")
        ordering = ["-created_at"]

    def __str__(self):
        return self.title

    def clean(self):
        if self.start_date and self.end_date and self.end_date <= self.start_date:
            raise ValidationError(_("End date must be after start date."))

    def assignee_ids(self) -> set:
        # Uses the prefetch cache when the exam was loaded with relations
        return {user.pk for user in self.assigned_to.all()}

    def ordered_questions(self) -> list:
        return list(self.questions.all())


class Question(models.Model):
    exam = models.ForeignKey(Exam, on_delete=models.CASCADE, related_name="questions")
    order = models.PositiveIntegerField(default=0)
    text = models.TextField()
    type = models.CharField(
        max_length=10, choices=QuestionType.choices, default=QuestionType.SINGLE
    )
    points = models.PositiveIntegerField(default=1)
    topic = models.CharField(max_length=255, blank=True)
    difficulty = models.CharField(
        max_length=10, choices=QuestionDifficulty.choices, default=QuestionDifficulty.MEDIUM
    )
    explanation = models.TextField(blank=True)

    class Meta:
        verbose_name = _("Question")
        verbose_name_plural = _("Questions")
        ordering = ["exam", "order"]

    def __str__(self):
        return f"Q{self.order + 1} of {self.exam.title}: {self.text[:30]}"

    def correct_flags(self) -> tuple:
        return tuple(option.is_correct for option in self.options.all())


class QuestionOption(models.Model):
    question = models.ForeignKey(Question, on_delete=models.CASCADE, related_name="options")
    order = models.PositiveSmallIntegerField(
        default=0, help_text=_("Index referenced by submitted selections.")
    )
    text = models.CharField(max_length=500)
    is_correct = models.BooleanField(default=False)

    class Meta:
        verbose_name = _("Question Option")
        verbose_name_plural = _("Question Options")
        ordering = ["question", "order"]
        unique_together = ("question", "order")

    def __str__(self):
        marker = " (correct)" if self.is_correct else ""
        return f"{self.order}: {self.text}{marker}"


class ExamResult(models.Model):
    exam = models.ForeignKey(Exam, on_delete=models.CASCADE, related_name="results")
    student = models.ForeignKey(User, on_delete=models.CASCADE, related_name="exam_results")
    score = models.PositiveIntegerField()
    total_points = models.PositiveIntegerField()
    percentage = models.DecimalField(max_digits=5, decimal_places=2)
    status = models.CharField(max_length=4, choices=ResultStatus.choices)
    attempt_number = models.PositiveSmallIntegerField(validators=[MinValueValidator(1)])
    time_spent = models.PositiveIntegerField(
        default=0, help_text=_("Gesamte Bearbeitungszeit in Sekunden.")
    )
    started_at = models.DateTimeField()
    submitted_at = models.DateTimeField()
    feedback = models.TextField(blank=True)

    class Meta:
        verbose_name = _("Exam Result")
        verbose_name_plural = _("Exam Results")
        ordering = ["-submitted_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["exam", "student", "attempt_number"],
                name="unique_attempt_per_student",
            ),
        ]

    def __str__(self):
        return f"Attempt {self.attempt_number} for {self.exam.title} by {self.student.username}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError(_("Exam results are immutable once submitted."))
        super().save(*args, **kwargs)


class ResultAnswer(models.Model):
    result = models.ForeignKey(ExamResult, on_delete=models.CASCADE, related_name="answers")
    question = models.ForeignKey(Question, on_delete=models.CASCADE, related_name="graded_answers")
    order = models.PositiveIntegerField(default=0)
    selected_options = models.JSONField(default=list, blank=True)
    is_correct = models.BooleanField(default=False)
    points_awarded = models.PositiveIntegerField(default=0)
    time_spent_seconds = models.PositiveIntegerField(default=0)

    class Meta:
        verbose_name = _("Graded Answer")
        verbose_name_plural = _("Graded Answers")
        ordering = ["result", "order"]

    def __str__(self):
        return f"Answer to question {self.question_id}: {'correct' if self.is_correct else 'wrong'}"
