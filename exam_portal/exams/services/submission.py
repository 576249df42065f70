"""
Submission Service

Runs one exam submission end to end: role and access checks, envelope
validation, window check, attempt reservation, grading and persistence.
The steps run in this order so that the first failing check decides the
response:

1. caller must be a student (AccessDenied)
2. exam must exist and be active (NotFound)
3. caller must be assigned (AccessDenied)
4. answers must be an array (ExamValidationError)
5. now must be inside the window (ExamNotOpen / ExamClosed)
6. attempt limit (AttemptLimitExceeded), then grade and store (AttemptConflict)

Author: Exam Portal Development Team
Version: 1.0.0
"""

import logging
from datetime import datetime
from typing import Any, Callable, Optional

from django.db import transaction
from django.utils import timezone

from ...users.identity import Identity
from ..exceptions import AccessDenied, NotFound
from ..models import ExamResult
from ..repositories import ExamRepository, ResultRepository
from ..validation import validate_submission
from .access_guard import check_access, ensure_open
from .attempt_counter import ensure_attempt_allowed
from .scoring import QuestionKey, score_submission, summarize

logger = logging.getLogger(__name__)


class SubmissionService:
    """
    Service für die Abgabe von Prüfungen durch Studierende.
    """

    def __init__(
        self,
        exams: Optional[ExamRepository] = None,
        results: Optional[ResultRepository] = None,
        clock: Callable[[], datetime] = timezone.now,
    ):
        self.exams = exams or ExamRepository()
        self.results = results or ResultRepository()
        self.clock = clock
        self.logger = logger

    def submit(self, exam_id: Any, identity: Identity, payload: Any) -> ExamResult:
        """
        Grade and store a submission.

        Args:
            exam_id: Exam primary key from the URL
            identity: Submitting caller
            payload: Request body ({answers, timeSpent, startedAt})

        Returns:
            The stored ExamResult
        """
        if not identity.is_student:
            raise AccessDenied("Only students can submit exams")

        exam = self.exams.get_with_relations(exam_id)
        if not exam.is_active:
            raise NotFound("Exam", exam_id)

        check_access(exam, identity)
        submission = validate_submission(payload)

        now = self.clock()
        ensure_open(exam, now)

        keys = [QuestionKey.from_question(question) for question in exam.ordered_questions()]

        with transaction.atomic():
            decision = ensure_attempt_allowed(exam, identity.id, self.results)
            scoring = score_submission(keys, submission.answers, exam.passing_score)
            result = self.results.create(
                exam=exam,
                student_id=identity.id,
                attempt_number=decision.attempt_number,
                scoring=scoring,
                time_spent=submission.time_spent,
                started_at=submission.started_at,
                submitted_at=now,
            )

        self.logger.info(
            f"Student {identity.id} submitted exam {exam.pk} "
            f"(attempt {decision.attempt_number}/{decision.attempts_allowed}): {summarize(scoring)}"
        )
        return result
