from decimal import Decimal

from django.conf import settings
from django.utils import timezone
from rest_framework import serializers

from ..users.serializers import UserReferenceSerializer
from .services.access_guard import WindowState, window_state
from .models import (
    Exam,
    ExamResult,
    Question,
    QuestionDifficulty,
    QuestionOption,
    QuestionType,
    ResultAnswer,
)


# --- Input Serializers (exam authoring) ---


class OptionInputSerializer(serializers.Serializer):
    text = serializers.CharField(max_length=500, required=False, allow_blank=True, default="")
    isCorrect = serializers.BooleanField(required=False, default=False)


class QuestionInputSerializer(serializers.Serializer):
    # "question" is accepted as an alias for "text" (older frontends send it)
    text = serializers.CharField(required=False, allow_blank=True)
    question = serializers.CharField(required=False, allow_blank=True, write_only=True)
    type = serializers.ChoiceField(choices=QuestionType.choices, default=QuestionType.SINGLE)
    options = OptionInputSerializer(many=True)
    points = serializers.IntegerField(min_value=0, default=1)
    topic = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    difficulty = serializers.ChoiceField(
        choices=QuestionDifficulty.choices, default=QuestionDifficulty.MEDIUM
    )
    explanation = serializers.CharField(required=False, allow_blank=True, default="")

    def validate(self, attrs):
        text = (attrs.pop("text", "") or attrs.pop("question", "") or "").strip()
        attrs.pop("question", None)
        if not text:
            raise serializers.ValidationError({"text": "Question text must not be empty."})

        options = attrs.get("options") or []
        if any(not option["text"].strip() for option in options):
            raise serializers.ValidationError({"options": "Every option needs a non-empty text."})
        if not any(option["isCorrect"] for option in options):
            raise serializers.ValidationError(
                {"options": "At least one option must be marked as correct."}
            )

        attrs["text"] = text
        return attrs


class ExamCreateSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255)
    subject = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    duration = serializers.IntegerField(min_value=1)
    startDate = serializers.DateTimeField()
    endDate = serializers.DateTimeField()
    assignedTo = serializers.ListField(child=serializers.IntegerField(min_value=1), allow_empty=True)
    questions = QuestionInputSerializer(many=True, allow_empty=True)
    attemptLimit = serializers.IntegerField(
        min_value=1, default=lambda: settings.EXAM_DEFAULT_ATTEMPT_LIMIT
    )
    passingScore = serializers.DecimalField(
        max_digits=5,
        decimal_places=2,
        min_value=Decimal("0"),
        max_value=Decimal("100"),
        default=lambda: Decimal(settings.EXAM_DEFAULT_PASSING_SCORE),
    )
    showResultsImmediately = serializers.BooleanField(required=False, default=False)
    showCorrectAnswers = serializers.BooleanField(required=False, default=False)
    randomizeQuestions = serializers.BooleanField(required=False, default=False)

    def validate_assignedTo(self, value):
        if not value:
            raise serializers.ValidationError("Please assign the exam to at least one student.")
        # assignedTo is a set: duplicates collapse, first occurrence keeps its position
        return list(dict.fromkeys(value))

    def validate_questions(self, value):
        if not value:
            raise serializers.ValidationError("Please add at least one question.")
        return value

    def validate(self, attrs):
        if attrs["endDate"] <= attrs["startDate"]:
            raise serializers.ValidationError({"endDate": "End date must be after start date."})
        return attrs


# --- Output Serializers ---


class OptionSerializer(serializers.ModelSerializer):
    isCorrect = serializers.BooleanField(source="is_correct")

    class Meta:
        model = QuestionOption
        fields = ["id", "text", "isCorrect"]


class QuestionSerializer(serializers.ModelSerializer):
    options = OptionSerializer(many=True, read_only=True)

    class Meta:
        model = Question
        fields = [
            "id",
            "text",
            "type",
            "options",
            "points",
            "topic",
            "difficulty",
            "explanation",
        ]


class ExamSerializer(serializers.ModelSerializer):
    tutor = UserReferenceSerializer(read_only=True)
    assignedTo = UserReferenceSerializer(source="assigned_to", many=True, read_only=True)
    questions = QuestionSerializer(many=True, read_only=True)
    startDate = serializers.DateTimeField(source="start_date")
    endDate = serializers.DateTimeField(source="end_date")
    attemptLimit = serializers.IntegerField(source="attempt_limit")
    passingScore = serializers.DecimalField(source="passing_score", max_digits=5, decimal_places=2)
    showResultsImmediately = serializers.BooleanField(source="show_results_immediately")
    showCorrectAnswers = serializers.BooleanField(source="show_correct_answers")
    randomizeQuestions = serializers.BooleanField(source="randomize_questions")
    isActive = serializers.BooleanField(source="is_active")
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = Exam
        fields = [
            "id",
            "title",
            "description",
            "subject",
            "tutor",
            "assignedTo",
            "questions",
            "duration",
            "startDate",
            "endDate",
            "attemptLimit",
            "passingScore",
            "showResultsImmediately",
            "showCorrectAnswers",
            "randomizeQuestions",
            "isActive",
            "createdAt",
            "updatedAt",
        ]


class ExamWithWindowSerializer(ExamSerializer):
    """Exam detail plus the window state derived from the current time."""

    windowState = serializers.SerializerMethodField()
    isUpcoming = serializers.SerializerMethodField()
    isOpen = serializers.SerializerMethodField()
    isCompleted = serializers.SerializerMethodField()
    currentTime = serializers.SerializerMethodField()

    class Meta(ExamSerializer.Meta):
        fields = ExamSerializer.Meta.fields + [
            "windowState",
            "isUpcoming",
            "isOpen",
            "isCompleted",
            "currentTime",
        ]

    def _now(self):
        return self.context.get("now") or timezone.now()

    def _state(self, obj) -> WindowState:
        return window_state(self._now(), obj.start_date, obj.end_date)

    def get_windowState(self, obj) -> str:
        return self._state(obj).value

    def get_isUpcoming(self, obj) -> bool:
        return self._state(obj) is WindowState.UPCOMING

    def get_isOpen(self, obj) -> bool:
        return self._state(obj) is WindowState.ACTIVE

    def get_isCompleted(self, obj) -> bool:
        return self._state(obj) is WindowState.COMPLETED

    def get_currentTime(self, obj) -> str:
        return self._now().isoformat()


class ExamReferenceSerializer(serializers.ModelSerializer):
    class Meta:
        model = Exam
        fields = ["id", "title", "subject"]


class ResultAnswerSerializer(serializers.ModelSerializer):
    questionId = serializers.IntegerField(source="question_id")
    selectedOptions = serializers.JSONField(source="selected_options")
    isCorrect = serializers.BooleanField(source="is_correct")
    points = serializers.IntegerField(source="points_awarded")
    timeSpent = serializers.IntegerField(source="time_spent_seconds")

    class Meta:
        model = ResultAnswer
        fields = ["questionId", "selectedOptions", "isCorrect", "points", "timeSpent"]


class ExamResultSerializer(serializers.ModelSerializer):
    exam = ExamReferenceSerializer(read_only=True)
    student = UserReferenceSerializer(read_only=True)
    answers = ResultAnswerSerializer(many=True, read_only=True)
    totalPoints = serializers.IntegerField(source="total_points")
    percentage = serializers.DecimalField(max_digits=5, decimal_places=2)
    attemptNumber = serializers.IntegerField(source="attempt_number")
    timeSpent = serializers.IntegerField(source="time_spent")
    startedAt = serializers.DateTimeField(source="started_at")
    submittedAt = serializers.DateTimeField(source="submitted_at")

    class Meta:
        model = ExamResult
        fields = [
            "id",
            "exam",
            "student",
            "answers",
            "score",
            "totalPoints",
            "percentage",
            "status",
            "attemptNumber",
            "timeSpent",
            "startedAt",
            "submittedAt",
            "feedback",
        ]


class ExamResultDetailSerializer(ExamResultSerializer):
    """Result with the full exam embedded; pass through the visibility filter before returning."""

    exam = ExamSerializer(read_only=True)


class SubmissionSummarySerializer(serializers.ModelSerializer):
    totalPoints = serializers.IntegerField(source="total_points")
    percentage = serializers.DecimalField(max_digits=5, decimal_places=2)
    attemptNumber = serializers.IntegerField(source="attempt_number")

    class Meta:
        model = ExamResult
        fields = ["id", "score", "totalPoints", "percentage", "status", "attemptNumber"]
