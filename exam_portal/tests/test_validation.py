from datetime import timedelta
from decimal import Decimal

from django.test import SimpleTestCase, override_settings
from django.utils import timezone

from ..exams.exceptions import ExamValidationError
from ..exams.validation import MAX_TIME_SPENT, validate_exam_payload, validate_submission
from .factories import sample_questions


def payload(**overrides):
    now = timezone.now()
    data = {
        "title": "Grundlagen",
        "subject": "Informatik",
        "duration": 45,
        "startDate": now.isoformat(),
        "endDate": (now + timedelta(days=1)).isoformat(),
        "assignedTo": [3, 4, 3],
        "questions": sample_questions(),
    }
    data.update(overrides)
    return data


class ExamPayloadTests(SimpleTestCase):
    @override_settings(EXAM_DEFAULT_ATTEMPT_LIMIT=1, EXAM_DEFAULT_PASSING_SCORE=60)
    def test_defaults_and_deduplication(self):
        data = validate_exam_payload(payload())
        self.assertEqual(data["assignedTo"], [3, 4])
        self.assertEqual(data["attemptLimit"], 1)
        self.assertEqual(data["passingScore"], Decimal("60"))
        self.assertFalse(data["showCorrectAnswers"])
        self.assertEqual(data["questions"][0]["text"], "Pick A")

    def test_question_alias(self):
        questions = sample_questions()
        questions[0]["question"] = questions[0].pop("text")
        data = validate_exam_payload(payload(questions=questions))
        self.assertEqual(data["questions"][0]["text"], "Pick A")

    def test_end_must_follow_start(self):
        now = timezone.now().isoformat()
        with self.assertRaises(ExamValidationError) as ctx:
            validate_exam_payload(payload(startDate=now, endDate=now))
        self.assertEqual(ctx.exception.field, "endDate")

    def test_requires_students_and_questions(self):
        with self.assertRaises(ExamValidationError) as ctx:
            validate_exam_payload(payload(assignedTo=[]))
        self.assertEqual(ctx.exception.field, "assignedTo")

        with self.assertRaises(ExamValidationError) as ctx:
            validate_exam_payload(payload(questions=[]))
        self.assertEqual(ctx.exception.field, "questions")

    def test_question_without_correct_option(self):
        questions = sample_questions()
        for option in questions[1]["options"]:
            option["isCorrect"] = False
        with self.assertRaises(ExamValidationError) as ctx:
            validate_exam_payload(payload(questions=questions))
        self.assertEqual(ctx.exception.field, "questions[1].options")
        self.assertTrue(ctx.exception.message.startswith("Question 2:"))
        self.assertEqual(ctx.exception.status_code, 400)

    def test_passing_score_range(self):
        with self.assertRaises(ExamValidationError) as ctx:
            validate_exam_payload(payload(passingScore=101))
        self.assertEqual(ctx.exception.field, "passingScore")

    def test_empty_option_text(self):
        questions = sample_questions()
        questions[0]["options"][1]["text"] = "   "
        with self.assertRaises(ExamValidationError):
            validate_exam_payload(payload(questions=questions))


class SubmissionPayloadTests(SimpleTestCase):
    def test_answers_must_be_a_list(self):
        for body in ({}, {"answers": "nope"}, {"answers": {"q0": [1]}}, []):
            with self.assertRaises(ExamValidationError):
                validate_submission(body)

    def test_answer_entries_must_be_objects(self):
        with self.assertRaises(ExamValidationError) as ctx:
            validate_submission({"answers": [1]})
        self.assertEqual(ctx.exception.field, "answers[0]")

    def test_selected_options_must_be_a_list(self):
        with self.assertRaises(ExamValidationError):
            validate_submission({"answers": [{"questionId": "q0", "selectedOptions": 1}]})

    def test_valid_submission(self):
        submission = validate_submission({
            "answers": [{"questionId": "q0", "selectedOptions": [0]}],
            "timeSpent": 120,
            "startedAt": "2025-01-01T10:00:00Z",
        })
        self.assertEqual(len(submission.answers), 1)
        self.assertEqual(submission.time_spent, 120)
        self.assertEqual(submission.started_at.year, 2025)

    def test_empty_answers_are_allowed(self):
        submission = validate_submission({"answers": []})
        self.assertEqual(submission.answers, [])
        self.assertIsNone(submission.started_at)

    def test_invalid_started_at(self):
        with self.assertRaises(ExamValidationError):
            validate_submission({"answers": [], "startedAt": "yesterday"})

    def test_time_spent_must_fit_storage(self):
        for value in (MAX_TIME_SPENT + 1, 1e20, float("inf"), -1, "60"):
            with self.assertRaises(ExamValidationError) as ctx:
                validate_submission({"answers": [], "timeSpent": value})
            self.assertEqual(ctx.exception.field, "timeSpent")

        submission = validate_submission({"answers": [], "timeSpent": MAX_TIME_SPENT})
        self.assertEqual(submission.time_spent, MAX_TIME_SPENT)

    def test_answer_time_spent_must_fit_storage(self):
        with self.assertRaises(ExamValidationError) as ctx:
            validate_submission({
                "answers": [{"questionId": "q0", "selectedOptions": [0], "timeSpent": 10 ** 25}],
            })
        self.assertEqual(ctx.exception.field, "answers[0].timeSpent")

        submission = validate_submission({
            "answers": [{"questionId": "q0", "selectedOptions": [0], "timeSpent": 12.7}],
        })
        self.assertEqual(submission.answers[0]["timeSpent"], 12)
