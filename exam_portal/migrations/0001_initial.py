import decimal

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Profile",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("role", models.CharField(choices=[("TUTOR", "Tutor"), ("STUDENT", "Student")], default="STUDENT", max_length=10, verbose_name="Role")),
                ("institution", models.CharField(blank=True, max_length=255)),
                ("student_id", models.CharField(blank=True, max_length=64)),
                ("user", models.OneToOneField(help_text="Associated user account", on_delete=django.db.models.deletion.CASCADE, related_name="profile", to=settings.AUTH_USER_MODEL, verbose_name="User")),
            ],
            options={
                "verbose_name": "User Profile",
                "verbose_name_plural": "User Profiles",
                "db_table": "exam_portal_profile",
            },
        ),
        migrations.CreateModel(
            name="Exam",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True)),
                ("subject", models.CharField(max_length=255)),
                ("duration", models.PositiveIntegerField(help_text="Bearbeitungszeit in Minuten (nur informativ).")),
                ("start_date", models.DateTimeField()),
                ("end_date", models.DateTimeField()),
                ("attempt_limit", models.PositiveSmallIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1)])),
                ("passing_score", models.DecimalField(decimal_places=2, default=decimal.Decimal("60"), help_text="Mindestprozentsatz zum Bestehen.", max_digits=5, validators=[django.core.validators.MinValueValidator(0), django.core.validators.MaxValueValidator(100)])),
                ("show_results_immediately", models.BooleanField(default=False)),
                ("show_correct_answers", models.BooleanField(default=False)),
                ("randomize_questions", models.BooleanField(default=False)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("assigned_to", models.ManyToManyField(blank=True, related_name="assigned_exams", to=settings.AUTH_USER_MODEL)),
                ("tutor", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="authored_exams", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "verbose_name": "Exam",
                "verbose_name_plural": "Exams",
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="Question",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("order", models.PositiveIntegerField(default=0)),
                ("text", models.TextField()),
                ("type", models.CharField(choices=[("SINGLE", "Single answer"), ("MULTIPLE", "Multiple answers")], default="SINGLE", max_length=10)),
                ("points", models.PositiveIntegerField(default=1)),
                ("topic", models.CharField(blank=True, max_length=255)),
                ("difficulty", models.CharField(choices=[("EASY", "Easy"), ("MEDIUM", "Medium"), ("HARD", "Hard")], default="MEDIUM", max_length=10)),
                ("explanation", models.TextField(blank=True)),
                ("exam", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="questions", to="exam_portal.exam")),
            ],
            options={
                "verbose_name": "Question",
                "verbose_name_plural": "Questions",
                "ordering": ["exam", "order"],
            },
        ),
        migrations.CreateModel(
            name="QuestionOption",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("order", models.PositiveSmallIntegerField(default=0, help_text="Index referenced by submitted selections.")),
                ("text", models.CharField(max_length=500)),
                ("is_correct", models.BooleanField(default=False)),
                ("question", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="options", to="exam_portal.question")),
            ],
            options={
                "verbose_name": "Question Option",
                "verbose_name_plural": "Question Options",
                "ordering": ["question", "order"],
                "unique_together": {("question", "order")},
            },
        ),
        migrations.CreateModel(
            name="ExamResult",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("score", models.PositiveIntegerField()),
                ("total_points", models.PositiveIntegerField()),
                ("percentage", models.DecimalField(decimal_places=2, max_digits=5)),
                ("status", models.CharField(choices=[("PASS", "Passed"), ("FAIL", "Failed")], max_length=4)),
                ("attempt_number", models.PositiveSmallIntegerField(validators=[django.core.validators.MinValueValidator(1)])),
                ("time_spent", models.PositiveIntegerField(default=0, help_text="Gesamte Bearbeitungszeit in Sekunden.")),
                ("started_at", models.DateTimeField()),
                ("submitted_at", models.DateTimeField()),
                ("feedback", models.TextField(blank=True)),
                ("exam", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="results", to="exam_portal.exam")),
                ("student", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="exam_results", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "verbose_name": "Exam Result",
                "verbose_name_plural": "Exam Results",
                "ordering": ["-submitted_at"],
                "constraints": [
                    models.UniqueConstraint(fields=("exam", "student", "attempt_number"), name="unique_attempt_per_student"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ResultAnswer",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("order", models.PositiveIntegerField(default=0)),
                ("selected_options", models.JSONField(blank=True, default=list)),
                ("is_correct", models.BooleanField(default=False)),
                ("points_awarded", models.PositiveIntegerField(default=0)),
                ("time_spent_seconds", models.PositiveIntegerField(default=0)),
                ("question", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="graded_answers", to="exam_portal.question")),
                ("result", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="answers", to="exam_portal.examresult")),
            ],
            options={
                "verbose_name": "Graded Answer",
                "verbose_name_plural": "Graded Answers",
                "ordering": ["result", "order"],
            },
        ),
    ]
