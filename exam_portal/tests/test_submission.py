from datetime import timedelta
from unittest import mock

from django.core.exceptions import ValidationError
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from ..exams.exceptions import AttemptConflict
from ..exams.models import ExamResult, ResultStatus
from ..exams.repositories import ResultRepository
from ..exams.services.attempt_counter import next_attempt
from ..exams.services.submission import SubmissionService
from ..users.identity import identity_from_user
from ..users.models import Role
from .factories import answers_for, create_exam, create_user


class StaleResults(ResultRepository):
    # A second request that read the counter before the first insert
    def max_attempt(self, exam_id, student_id):
        return 0


class SubmitExamTests(TestCase):
    client_class = APIClient

    @classmethod
    def setUpTestData(cls):
        cls.tutor = create_user("tutor", Role.TUTOR)
        cls.student = create_user("student")
        cls.outsider = create_user("outsider")
        cls.exam = create_exam(cls.tutor, [cls.student])

    def setUp(self):
        self.client.force_authenticate(user=self.student)

    def submit(self, selections, exam=None, **extra):
        exam = exam or self.exam
        body = {"answers": answers_for(exam, selections), **extra}
        return self.client.post(f"/api/exams/{exam.pk}/submit/", body, format="json")

    def test_correct_submission_passes(self):
        response = self.submit([[0], [1, 0]], timeSpent=95)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        result = response.json()["result"]
        self.assertEqual(result["score"], 5)
        self.assertEqual(result["totalPoints"], 5)
        self.assertEqual(result["percentage"], 100.0)
        self.assertEqual(result["status"], "PASS")
        self.assertEqual(result["attemptNumber"], 1)

        stored = ExamResult.objects.get(pk=result["id"])
        self.assertEqual(stored.time_spent, 95)
        self.assertEqual(stored.answers.count(), 2)
        self.assertEqual(stored.started_at, stored.submitted_at)

    def test_wrong_submission_fails(self):
        result = self.submit([[1], [0]]).json()["result"]
        self.assertEqual(result["score"], 0)
        self.assertEqual(result["percentage"], 0.0)
        self.assertEqual(result["status"], "FAIL")

    def test_partial_submission(self):
        # 2 of 5 points -> 40 % < 60 %
        result = self.submit([[0], [0]]).json()["result"]
        self.assertEqual(result["score"], 2)
        self.assertEqual(result["percentage"], 40.0)
        self.assertEqual(result["status"], "FAIL")

    def test_positional_ids_and_missing_answers(self):
        body = {"answers": [{"questionId": "q0", "selectedOptions": [0]}]}
        response = self.client.post(f"/api/exams/{self.exam.pk}/submit/", body, format="json")
        result = response.json()["result"]
        self.assertEqual(result["score"], 2)

        stored = ExamResult.objects.get(pk=result["id"])
        self.assertEqual([a.selected_options for a in stored.answers.all()], [[0], []])

    def test_attempt_limit(self):
        first = self.submit([[0], [0, 1]])
        second = self.submit([[1], [0]])
        third = self.submit([[0], [0, 1]])

        self.assertEqual(first.json()["result"]["attemptNumber"], 1)
        self.assertEqual(second.json()["result"]["attemptNumber"], 2)
        self.assertEqual(third.status_code, status.HTTP_400_BAD_REQUEST)
        body = third.json()
        self.assertEqual(body["error_code"], "AttemptLimitExceeded")
        self.assertEqual(body["message"], "You have reached the maximum number of attempts for this exam")
        self.assertEqual(body["attemptsMade"], 2)
        self.assertEqual(body["attemptsAllowed"], 2)
        self.assertEqual(ExamResult.objects.filter(exam=self.exam).count(), 2)

    def test_answers_must_be_an_array(self):
        response = self.client.post(
            f"/api/exams/{self.exam.pk}/submit/", {"answers": {"q0": [0]}}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json()["error_code"], "ValidationError")
        self.assertFalse(ExamResult.objects.exists())

    def test_before_window(self):
        now = timezone.now()
        upcoming = create_exam(
            self.tutor,
            [self.student],
            startDate=(now + timedelta(hours=1)).isoformat(),
            endDate=(now + timedelta(hours=2)).isoformat(),
        )
        response = self.submit([[0], [0, 1]], exam=upcoming)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json()["error_code"], "ExamNotOpen")
        self.assertEqual(response.json()["message"], "Exam has not started yet")

    def test_after_window(self):
        now = timezone.now()
        finished = create_exam(
            self.tutor,
            [self.student],
            startDate=(now - timedelta(hours=2)).isoformat(),
            endDate=(now - timedelta(hours=1)).isoformat(),
        )
        response = self.submit([[0], [0, 1]], exam=finished)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json()["error_code"], "ExamClosed")
        self.assertEqual(response.json()["message"], "Exam has ended")

    def test_unassigned_student(self):
        self.client.force_authenticate(user=self.outsider)
        response = self.submit([[0], [0, 1]])
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_tutor_cannot_submit(self):
        self.client.force_authenticate(user=self.tutor)
        response = self.submit([[0], [0, 1]])
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_missing_exam(self):
        response = self.client.post("/api/exams/999999/submit/", {"answers": []}, format="json")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_access_is_checked_before_payload(self):
        self.client.force_authenticate(user=self.outsider)
        response = self.client.post(
            f"/api/exams/{self.exam.pk}/submit/", {"answers": "broken"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_oversized_time_spent_is_rejected(self):
        too_long = self.submit([[0], [0, 1]], timeSpent=1e20)
        self.assertEqual(too_long.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(too_long.json()["error_code"], "ValidationError")

        answers = answers_for(self.exam, [[0], [0, 1]])
        answers[0]["timeSpent"] = 10 ** 25
        response = self.client.post(
            f"/api/exams/{self.exam.pk}/submit/", {"answers": answers}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json()["details"]["field"], "answers[0].timeSpent")
        self.assertFalse(ExamResult.objects.exists())

    def test_concurrent_attempt_returns_conflict(self):
        self.submit([[0], [0, 1]])

        with mock.patch("exam_portal.exams.services.submission.ResultRepository", StaleResults):
            response = self.submit([[0], [0, 1]])

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.json()["error_code"], "Conflict")
        self.assertEqual(ExamResult.objects.filter(exam=self.exam).count(), 1)


class SubmissionServiceTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.tutor = create_user("tutor", Role.TUTOR)
        cls.student = create_user("student")
        cls.exam = create_exam(cls.tutor, [cls.student], attemptLimit=3)
        cls.identity = identity_from_user(cls.student)

    def payload(self):
        return {"answers": answers_for(self.exam, [[0], [0, 1]])}

    def test_window_boundaries_are_accepted(self):
        at_start = SubmissionService(clock=lambda: self.exam.start_date)
        at_end = SubmissionService(clock=lambda: self.exam.end_date)

        first = at_start.submit(self.exam.pk, self.identity, self.payload())
        second = at_end.submit(self.exam.pk, self.identity, self.payload())

        self.assertEqual(first.submitted_at, self.exam.start_date)
        self.assertEqual(second.attempt_number, 2)
        self.assertEqual(first.status, ResultStatus.PASS)

    def test_attempt_numbers_are_sequential(self):
        service = SubmissionService()
        numbers = [service.submit(self.exam.pk, self.identity, self.payload()).attempt_number for _ in range(3)]
        self.assertEqual(numbers, [1, 2, 3])

        decision = next_attempt(self.exam, self.student.pk)
        self.assertFalse(decision.allowed)
        self.assertEqual(decision.attempts_made, 3)

    def test_concurrent_attempt_number_conflict(self):
        SubmissionService().submit(self.exam.pk, self.identity, self.payload())

        with self.assertRaises(AttemptConflict) as ctx:
            SubmissionService(results=StaleResults()).submit(self.exam.pk, self.identity, self.payload())
        self.assertEqual(ctx.exception.status_code, 409)
        self.assertEqual(ExamResult.objects.filter(exam=self.exam).count(), 1)

    def test_results_are_immutable(self):
        result = SubmissionService().submit(self.exam.pk, self.identity, self.payload())
        result.score = 0
        with self.assertRaises(ValidationError):
            result.save()
