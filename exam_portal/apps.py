"""
Exam Portal Application Configuration

This module contains the Django application configuration for the Exam Portal.
The application provides timed multi-question exams authored by tutors,
automatic scoring of student submissions, attempt limits and result visibility
rules for students.

Author: Exam Portal Development Team
Version: 1.0.0
"""

from django.apps import AppConfig


class ExamPortalConfig(AppConfig):
    """
    Configuration class for the Exam Portal Django application.

    Attributes:
        default_auto_field: Default primary key field type for models
        name: Application name for Django registration
        verbose_name: Human-readable application name for admin interface
    """

    default_auto_field: str = "django.db.models.BigAutoField"
    name: str = "exam_portal"
    verbose_name: str = "Exam Portal"

