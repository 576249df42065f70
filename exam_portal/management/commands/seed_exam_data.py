import logging
from datetime import timedelta

from django.contrib.auth.models import User
from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from ...exams.models import Exam
from ...exams.repositories import ExamRepository
from ...exams.validation import validate_exam_payload
from ...users.models import Role

logger = logging.getLogger(__name__)

SEED_USERNAME_PREFIX = "seed_"

# Beispielprüfungen: (Titel, Fach, Fragen)
SAMPLE_EXAMS = [
    (
        "Python Grundlagen",
        "Programming",
        [
            {
                "text": "Which keyword defines a function in Python?",
                "type": "SINGLE",
                "options": [
                    {"text": "func", "isCorrect": False},
                    {"text": "def", "isCorrect": True},
                    {"text": "lambda", "isCorrect": False},
                ],
                "points": 1,
                "topic": "Syntax",
                "difficulty": "EASY",
                "explanation": "Functions are declared with def.",
            },
            {
                "text": "Which of these types are immutable?",
                "type": "MULTIPLE",
                "options": [
                    {"text": "tuple", "isCorrect": True},
                    {"text": "list", "isCorrect": False},
                    {"text": "str", "isCorrect": True},
                    {"text": "dict", "isCorrect": False},
                ],
                "points": 2,
                "topic": "Data Types",
                "difficulty": "MEDIUM",
            },
            {
                "text": "What does len([1, 2, 3]) return?",
                "type": "SINGLE",
                "options": [
                    {"text": "2", "isCorrect": False},
                    {"text": "3", "isCorrect": True},
                ],
                "points": 1,
                "topic": "Builtins",
                "difficulty": "EASY",
            },
        ],
    ),
    (
        "SQL Basics",
        "Databases",
        [
            {
                "text": "Which clause filters grouped rows?",
                "type": "SINGLE",
                "options": [
                    {"text": "WHERE", "isCorrect": False},
                    {"text": "HAVING", "isCorrect": True},
                    {"text": "ORDER BY", "isCorrect": False},
                ],
                "points": 2,
                "topic": "Aggregation",
                "difficulty": "MEDIUM",
            },
            {
                "text": "Which statements change data?",
                "type": "MULTIPLE",
                "options": [
                    {"text": "SELECT", "isCorrect": False},
                    {"text": "UPDATE", "isCorrect": True},
                    {"text": "DELETE", "isCorrect": True},
                ],
                "points": 2,
                "topic": "DML",
                "difficulty": "EASY",
            },
        ],
    ),
]


class Command(BaseCommand):
    help = "Cleans and seeds the database with a tutor, students and sample exams for local development."

    def add_arguments(self, parser):
        parser.add_argument("--students", type=int, default=3, help="Number of student accounts to create")
        parser.add_argument("--password", default="test", help="Password for all seeded accounts")

    def _create_user(self, username, password, role, **extra):
        user = User.objects.create_user(
            username=username,
            password=password,
            email=f"{username}@example.com",
            **extra,
        )
        # Profil wird per Signal angelegt
        user.profile.role = role
        user.profile.save()
        return user

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write(self.style.WARNING("Starting database cleanup before seeding..."))
        seeded_users = User.objects.filter(username__startswith=SEED_USERNAME_PREFIX)
        Exam.objects.filter(tutor__in=seeded_users).delete()
        seeded_users.delete()
        self.stdout.write(self.style.SUCCESS("Cleanup finished."))

        password = options["password"]
        tutor = self._create_user(
            f"{SEED_USERNAME_PREFIX}tutor", password, Role.TUTOR, first_name="Tina", last_name="Tutor"
        )
        self.stdout.write(self.style.SUCCESS(f'Tutor "{tutor.username}" erstellt.'))

        students = []
        for number in range(1, options["students"] + 1):
            student = self._create_user(f"{SEED_USERNAME_PREFIX}student{number}", password, Role.STUDENT)
            student.profile.student_id = f"S-{number:04d}"
            student.profile.save()
            students.append(student)
        self.stdout.write(self.style.SUCCESS(f"{len(students)} Studierende erstellt."))

        if not students:
            self.stdout.write(self.style.WARNING("No students created, skipping exams."))
            return

        now = timezone.now()
        repository = ExamRepository()
        for title, subject, questions in SAMPLE_EXAMS:
            payload = validate_exam_payload({
                "title": title,
                "subject": subject,
                "description": f"Sample exam for {subject}",
                "duration": 30,
                "startDate": (now - timedelta(days=1)).isoformat(),
                "endDate": (now + timedelta(days=14)).isoformat(),
                "assignedTo": [student.pk for student in students],
                "questions": questions,
                "attemptLimit": 2,
                "passingScore": "60",
                "showResultsImmediately": True,
            })
            exam = repository.create(tutor.pk, payload)
            self.stdout.write(self.style.SUCCESS(f'Prüfung erstellt: "{exam.title}"'))

        logger.info(f"Seeded {len(SAMPLE_EXAMS)} exams for {len(students)} students")
        self.stdout.write(self.style.SUCCESS("Seeding finished."))
