"""
Exam and Result Repositories

Storage contracts for exams (with embedded questions and options) and for
graded attempt results. Joins are explicit: ``get_with_relations`` returns
objects whose tutor, assignees, questions and options are already resolved.

Database errors other than the attempt uniqueness violation are logged and
re-raised as StorageFailure.

Author: Exam Portal Development Team
Version: 1.0.0
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from django.contrib.auth import get_user_model
from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import Max, Prefetch, QuerySet

from ..users.identity import Identity
from ..users.models import Role
from .exceptions import AttemptConflict, ExamValidationError, NotFound, StorageFailure
from .models import Exam, ExamResult, Question, QuestionOption, ResultAnswer

logger = logging.getLogger(__name__)


def _question_prefetch() -> Prefetch:
    return Prefetch(
        "questions",
        queryset=Question.objects.order_by("order").prefetch_related(
            Prefetch("options", queryset=QuestionOption.objects.order_by("order"))
        ),
    )


class ExamRepository:
    """
    Repository für Prüfungen inklusive Fragen und Antwortoptionen.
    """

    def __init__(self):
        self.logger = logger

    def with_relations(self) -> QuerySet:
        return Exam.objects.select_related("tutor", "tutor__profile").prefetch_related(
            "assigned_to",
            "assigned_to__profile",
            _question_prefetch(),
        )

    def get(self, exam_id: Any) -> Exam:
        try:
            return Exam.objects.get(pk=exam_id)
        except (Exam.DoesNotExist, ValueError, TypeError):
            raise NotFound("Exam", exam_id)

    def get_with_relations(self, exam_id: Any) -> Exam:
        try:
            return self.with_relations().get(pk=exam_id)
        except (Exam.DoesNotExist, ValueError, TypeError):
            raise NotFound("Exam", exam_id)

    def list_for(self, identity: Identity) -> QuerySet:
        """
        Tutors see the exams they created, students the active exams assigned to them.
        """
        queryset = self.with_relations()
        if identity.is_tutor:
            queryset = queryset.filter(tutor_id=identity.id)
        elif identity.is_student:
            queryset = queryset.filter(assigned_to__id=identity.id, is_active=True)
        else:
            return queryset.none()
        return queryset.distinct().order_by("-created_at")

    def _resolve_assignees(self, student_ids: List[int]) -> List[Any]:
        User = get_user_model()
        students = list(
            User.objects.filter(pk__in=student_ids, profile__role=Role.STUDENT)
        )
        found = {student.pk for student in students}
        missing = [student_id for student_id in student_ids if student_id not in found]
        if missing:
            raise ExamValidationError(
                f"Unknown students in assignedTo: {', '.join(str(m) for m in missing)}",
                field="assignedTo",
                errors={"assignedTo": missing},
            )
        return students

    def create(self, tutor_id: int, data: Dict[str, Any]) -> Exam:
        """
        Create an exam with its questions and options in one transaction.

        Args:
            tutor_id: Owning tutor
            data: Output of validation.validate_exam_payload
        """
        students = self._resolve_assignees(data["assignedTo"])
        try:
            with transaction.atomic():
                exam = Exam.objects.create(
                    title=data["title"],
                    subject=data["subject"],
                    description=data.get("description", ""),
                    tutor_id=tutor_id,
                    duration=data["duration"],
                    start_date=data["startDate"],
                    end_date=data["endDate"],
                    attempt_limit=data["attemptLimit"],
                    passing_score=data["passingScore"],
                    show_results_immediately=data["showResultsImmediately"],
                    show_correct_answers=data["showCorrectAnswers"],
                    randomize_questions=data["randomizeQuestions"],
                )
                exam.assigned_to.set(students)

                for order, question_data in enumerate(data["questions"]):
                    question = Question.objects.create(
                        exam=exam,
                        order=order,
                        text=question_data["text"],
                        type=question_data["type"],
                        points=question_data["points"],
                        topic=question_data.get("topic", ""),
                        difficulty=question_data["difficulty"],
                        explanation=question_data.get("explanation", ""),
                    )
                    QuestionOption.objects.bulk_create([
                        QuestionOption(
                            question=question,
                            order=index,
                            text=option["text"].strip(),
                            is_correct=option["isCorrect"],
                        )
                        for index, option in enumerate(question_data["options"])
                    ])
        except DatabaseError as exc:
            self.logger.exception(f"Creating exam for tutor {tutor_id} failed: {exc}")
            raise StorageFailure("create_exam") from exc

        self.logger.info(
            f"Exam {exam.pk} '{exam.title}' created by tutor {tutor_id} "
            f"with {len(data['questions'])} questions for {len(students)} students"
        )
        return self.get_with_relations(exam.pk)

    def delete(self, exam: Exam) -> int:
        """Delete an exam and its results. Returns the number of deleted results."""
        try:
            with transaction.atomic():
                results_count = ExamResult.objects.filter(exam=exam).count()
                exam.delete()
        except DatabaseError as exc:
            self.logger.exception(f"Deleting exam {exam.pk} failed: {exc}")
            raise StorageFailure("delete_exam") from exc
        self.logger.info(f"Exam {exam.pk} deleted together with {results_count} results")
        return results_count

    def bulk_delete(self, tutor_id: int, exam_ids: Iterable[Any]) -> Dict[str, Any]:
        """
        Delete the given exams owned by the tutor; exams owned by others are skipped.
        """
        requested = list(exam_ids)
        found = list(Exam.objects.filter(pk__in=requested))
        owned = [exam for exam in found if exam.tutor_id == tutor_id]
        if not owned:
            raise NotFound("Exam", ", ".join(str(i) for i in requested))

        owned_ids = [exam.pk for exam in owned]
        try:
            with transaction.atomic():
                deleted_results = ExamResult.objects.filter(exam_id__in=owned_ids).count()
                Exam.objects.filter(pk__in=owned_ids).delete()
        except DatabaseError as exc:
            self.logger.exception(f"Bulk delete of exams {owned_ids} failed: {exc}")
            raise StorageFailure("bulk_delete_exams") from exc

        self.logger.info(f"Tutor {tutor_id} deleted {len(owned_ids)} exams in bulk")
        return {
            "deletedExams": len(owned_ids),
            "deletedResults": deleted_results,
            "examTitles": [exam.title for exam in owned],
            "skippedExams": len(found) - len(owned),
        }


class ResultRepository:
    """
    Repository für Prüfungsergebnisse (ein Datensatz pro Versuch).
    """

    def __init__(self):
        self.logger = logger

    def with_relations(self) -> QuerySet:
        return ExamResult.objects.select_related(
            "exam", "student", "student__profile"
        ).prefetch_related(
            Prefetch("answers", queryset=ResultAnswer.objects.order_by("order"))
        )

    def for_pair(self, exam_id: Any, student_id: int) -> QuerySet:
        return self.with_relations().filter(exam_id=exam_id, student_id=student_id)

    def for_exam(self, exam_id: Any) -> QuerySet:
        return self.with_relations().filter(exam_id=exam_id)

    def get_with_relations(self, exam_id: Any, result_id: Any) -> ExamResult:
        """
        Fetch one result of an exam with the full exam (questions and options) joined.
        """
        queryset = self.with_relations().select_related("exam__tutor").prefetch_related(
            "exam__assigned_to",
            Prefetch(
                "exam__questions",
                queryset=Question.objects.order_by("order").prefetch_related(
                    Prefetch("options", queryset=QuestionOption.objects.order_by("order"))
                ),
            ),
        )
        try:
            return queryset.get(pk=result_id, exam_id=exam_id)
        except (ExamResult.DoesNotExist, ValueError, TypeError):
            raise NotFound("Result", result_id)

    def max_attempt(self, exam_id: Any, student_id: int) -> int:
        """Highest stored attempt number for the pair, 0 when there is none."""
        highest = ExamResult.objects.filter(exam_id=exam_id, student_id=student_id).aggregate(
            highest=Max("attempt_number")
        )["highest"]
        return highest or 0

    def create(
        self,
        exam: Exam,
        student_id: int,
        attempt_number: int,
        scoring,
        time_spent: int = 0,
        started_at=None,
        submitted_at=None,
    ) -> ExamResult:
        """
        Persist a graded attempt together with its answers.

        Args:
            exam: Exam being submitted
            student_id: Submitting student
            attempt_number: Number reserved by the attempt counter
            scoring: ScoringResult from the scoring engine
            time_spent: Seconds reported by the client
            started_at: When the attempt was started (defaults to submitted_at)
            submitted_at: Submission time

        Raises:
            AttemptConflict: Another submission already stored this attempt number
            StorageFailure: Any other database error
        """
        try:
            with transaction.atomic():
                result = ExamResult.objects.create(
                    exam=exam,
                    student_id=student_id,
                    score=scoring.score,
                    total_points=scoring.total_points,
                    percentage=scoring.percentage,
                    status=scoring.status,
                    attempt_number=attempt_number,
                    time_spent=time_spent,
                    started_at=started_at or submitted_at,
                    submitted_at=submitted_at,
                )
                ResultAnswer.objects.bulk_create([
                    ResultAnswer(
                        result=result,
                        question_id=answer.question_id,
                        order=order,
                        selected_options=list(answer.selected_options),
                        is_correct=answer.is_correct,
                        points_awarded=answer.points_awarded,
                        time_spent_seconds=answer.time_spent_seconds,
                    )
                    for order, answer in enumerate(scoring.answers)
                ])
        except IntegrityError as exc:
            self.logger.warning(
                f"Attempt {attempt_number} for exam {exam.pk} and student {student_id} "
                f"was stored concurrently: {exc}"
            )
            raise AttemptConflict(attempt_number) from exc
        except DatabaseError as exc:
            self.logger.exception(f"Storing result for exam {exam.pk} failed: {exc}")
            raise StorageFailure("create_result") from exc
        return result

    def clear(self, exam_id: Any, student_id: Optional[int] = None) -> int:
        """
        Delete results of an exam, optionally only those of one student.

        Returns:
            Number of deleted results (answers are not counted)
        """
        queryset = ExamResult.objects.filter(exam_id=exam_id)
        if student_id is not None:
            queryset = queryset.filter(student_id=student_id)
        try:
            with transaction.atomic():
                count = queryset.count()
                queryset.delete()
        except DatabaseError as exc:
            self.logger.exception(f"Clearing results of exam {exam_id} failed: {exc}")
            raise StorageFailure("clear_results") from exc
        self.logger.info(
            f"Cleared {count} results of exam {exam_id}"
            + (f" for student {student_id}" if student_id is not None else "")
        )
        return count
