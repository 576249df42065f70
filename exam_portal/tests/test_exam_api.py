from datetime import timedelta

from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from ..exams.models import Exam, ExamResult, Question
from ..users.models import Role
from .factories import answers_for, create_exam, create_user, exam_payload


class ExamApiTestCase(TestCase):
    client_class = APIClient

    @classmethod
    def setUpTestData(cls):
        cls.tutor = create_user("tutor", Role.TUTOR)
        cls.other_tutor = create_user("other_tutor", Role.TUTOR)
        cls.student = create_user("student")
        cls.other_student = create_user("other_student")

    def login(self, user):
        self.client.force_authenticate(user=user)


class CreateExamTests(ExamApiTestCase):
    def test_tutor_creates_exam(self):
        self.login(self.tutor)
        response = self.client.post("/api/exams/", exam_payload([self.student]), format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        body = response.json()
        self.assertEqual(body["tutor"]["id"], self.tutor.pk)
        self.assertEqual([s["id"] for s in body["assignedTo"]], [self.student.pk])
        self.assertEqual(len(body["questions"]), 2)
        self.assertEqual(
            [o["isCorrect"] for o in body["questions"][1]["options"]], [True, True, False]
        )
        self.assertEqual(body["attemptLimit"], 2)
        self.assertEqual(Question.objects.filter(exam_id=body["id"]).count(), 2)

    def test_student_cannot_create(self):
        self.login(self.student)
        response = self.client.post("/api/exams/", exam_payload([self.student]), format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.json()["error_code"], "AccessDenied")

    def test_validation_error_names_field(self):
        self.login(self.tutor)
        data = exam_payload([self.student], title="")
        response = self.client.post("/api/exams/", data, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json()["error_code"], "ValidationError")
        self.assertEqual(response.json()["details"]["field"], "title")
        self.assertFalse(Exam.objects.exists())

    def test_unknown_student_is_rejected(self):
        self.login(self.tutor)
        data = exam_payload([self.student])
        data["assignedTo"].append(999999)
        response = self.client.post("/api/exams/", data, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json()["details"]["field"], "assignedTo")

    def test_tutor_cannot_be_assigned_as_student(self):
        self.login(self.tutor)
        data = exam_payload([self.student, self.other_tutor])
        response = self.client.post("/api/exams/", data, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_unauthenticated(self):
        response = self.client.get("/api/exams/")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class ListAndGetExamTests(ExamApiTestCase):
    @classmethod
    def setUpTestData(cls):
        super().setUpTestData()
        cls.exam = create_exam(cls.tutor, [cls.student])
        cls.foreign_exam = create_exam(cls.other_tutor, [cls.other_student], title="Fremd")

    def test_tutor_lists_only_own_exams(self):
        self.login(self.tutor)
        response = self.client.get("/api/exams/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([e["id"] for e in response.json()], [self.exam.pk])

    def test_student_lists_assigned_active_exams_without_answer_key(self):
        hidden = create_exam(self.tutor, [self.student], title="Inaktiv")
        Exam.objects.filter(pk=hidden.pk).update(is_active=False)

        self.login(self.student)
        body = self.client.get("/api/exams/").json()

        self.assertEqual([e["id"] for e in body], [self.exam.pk])
        for question in body[0]["questions"]:
            self.assertNotIn("explanation", question)
            for option in question["options"]:
                self.assertNotIn("isCorrect", option)

    def test_get_exam_includes_window_state(self):
        self.login(self.tutor)
        body = self.client.get(f"/api/exams/{self.exam.pk}/").json()

        self.assertEqual(body["windowState"], "Active")
        self.assertTrue(body["isOpen"])
        self.assertFalse(body["isUpcoming"])
        self.assertFalse(body["isCompleted"])
        self.assertTrue(body["isActive"])
        self.assertIn("currentTime", body)
        self.assertIn("isCorrect", body["questions"][0]["options"][0])

    def test_upcoming_exam(self):
        now = timezone.now()
        upcoming = create_exam(
            self.tutor,
            [self.student],
            startDate=(now + timedelta(days=1)).isoformat(),
            endDate=(now + timedelta(days=2)).isoformat(),
        )
        self.login(self.student)
        body = self.client.get(f"/api/exams/{upcoming.pk}/").json()
        self.assertEqual(body["windowState"], "Upcoming")
        self.assertTrue(body["isUpcoming"])

    def test_student_gets_exam_without_answer_key(self):
        self.login(self.student)
        response = self.client.get(f"/api/exams/{self.exam.pk}/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        for question in response.json()["questions"]:
            self.assertNotIn("explanation", question)
            for option in question["options"]:
                self.assertNotIn("isCorrect", option)

    def test_randomized_exam_keeps_question_set(self):
        shuffled = create_exam(self.tutor, [self.student], randomizeQuestions=True)
        self.login(self.student)
        body = self.client.get(f"/api/exams/{shuffled.pk}/").json()
        self.assertEqual(
            sorted(q["id"] for q in body["questions"]),
            sorted(q.pk for q in shuffled.ordered_questions()),
        )

    def test_access_is_limited_to_owner_and_assignees(self):
        self.login(self.other_student)
        response = self.client.get(f"/api/exams/{self.exam.pk}/")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.json()["message"], "You are not assigned to this exam")

        self.login(self.other_tutor)
        response = self.client.get(f"/api/exams/{self.exam.pk}/")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_missing_exam(self):
        self.login(self.tutor)
        response = self.client.get("/api/exams/999999/")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.json()["message"], "Exam not found")

    def test_inactive_exam_is_hidden_from_students(self):
        Exam.objects.filter(pk=self.exam.pk).update(is_active=False)
        self.login(self.student)
        response = self.client.get(f"/api/exams/{self.exam.pk}/")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class DeleteExamTests(ExamApiTestCase):
    def setUp(self):
        self.exam = create_exam(self.tutor, [self.student])

    def submit(self):
        self.login(self.student)
        response = self.client.post(
            f"/api/exams/{self.exam.pk}/submit/",
            {"answers": answers_for(self.exam, [[0], [0, 1]])},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_owner_deletes_exam_and_results(self):
        self.submit()
        self.login(self.tutor)
        response = self.client.delete(f"/api/exams/{self.exam.pk}/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()["deletedResults"], 1)
        self.assertEqual(response.json()["examTitle"], self.exam.title)
        self.assertFalse(Exam.objects.filter(pk=self.exam.pk).exists())
        self.assertFalse(ExamResult.objects.exists())

    def test_only_owner_may_delete(self):
        self.login(self.other_tutor)
        self.assertEqual(
            self.client.delete(f"/api/exams/{self.exam.pk}/").status_code,
            status.HTTP_403_FORBIDDEN,
        )
        self.login(self.student)
        self.assertEqual(
            self.client.delete(f"/api/exams/{self.exam.pk}/").status_code,
            status.HTTP_403_FORBIDDEN,
        )
        self.assertTrue(Exam.objects.filter(pk=self.exam.pk).exists())


class BulkDeleteTests(ExamApiTestCase):
    def setUp(self):
        self.first = create_exam(self.tutor, [self.student], title="Eins")
        self.second = create_exam(self.tutor, [self.student], title="Zwei")
        self.foreign = create_exam(self.other_tutor, [self.student], title="Fremd")

    def test_deletes_owned_and_skips_foreign(self):
        self.login(self.tutor)
        response = self.client.post(
            "/api/exams/bulk-delete/",
            {"examIds": [self.first.pk, self.second.pk, self.foreign.pk]},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        body = response.json()
        self.assertEqual(body["deletedExams"], 2)
        self.assertEqual(body["skippedExams"], 1)
        self.assertEqual(sorted(body["examTitles"]), ["Eins", "Zwei"])
        self.assertEqual(list(Exam.objects.values_list("pk", flat=True)), [self.foreign.pk])

    def test_requires_exam_ids(self):
        self.login(self.tutor)
        for body in ({}, {"examIds": []}, {"examIds": "1"}, {"examIds": ["a"]}):
            response = self.client.post("/api/exams/bulk-delete/", body, format="json")
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_nothing_owned(self):
        self.login(self.tutor)
        response = self.client.post(
            "/api/exams/bulk-delete/", {"examIds": [self.foreign.pk]}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_students_cannot_bulk_delete(self):
        self.login(self.student)
        response = self.client.post(
            "/api/exams/bulk-delete/", {"examIds": [self.first.pk]}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
