"""
Exam Portal User Models

This module extends Django's built-in User model with a role-carrying profile.
The role decides what a user may do with exams: tutors author and own exams,
students are assigned to exams and submit attempts.

Models:
- Profile: Role and institutional metadata for a user

Features:
- Automatic profile creation for new users
- Role exposed to JWT claims and to the explicit Identity value

Author: Exam Portal Development Team
Version: 1.0.0
"""

from django.db import models
from django.conf import settings
from django.db.models.signals import post_save
from django.dispatch import receiver
from django.utils.translation import gettext_lazy as _


class Role(models.TextChoices):
    TUTOR = "TUTOR", _("Tutor")
    STUDENT = "STUDENT", _("Student")


class Profile(models.Model):
    """
    Extended user profile model for the Exam Portal.

    Attributes:
        user: One-to-one relationship with Django User model
        role: Either TUTOR or STUDENT
        institution: Optional school or organisation name
        student_id: Optional external student number shown to tutors
    """

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="profile",
        verbose_name=_("User"),
        help_text=_("Associated user account"),
    )

    role = models.CharField(
        max_length=10,
        choices=Role.choices,
        default=Role.STUDENT,
        verbose_name=_("Role"),
    )

    institution = models.CharField(max_length=255, blank=True)
    student_id = models.CharField(max_length=64, blank=True)

    class Meta:
        verbose_name = _("User Profile")
        verbose_name_plural = _("User Profiles")
        db_table = "exam_portal_profile"

    def __str__(self) -> str:
        return f"{self.user.username} Profile ({self.role})"

    def __repr__(self) -> str:
        return f"<Profile(user={self.user.username}, role={self.role})>"

    @property
    def is_tutor(self) -> bool:
        return self.role == Role.TUTOR

    @property
    def is_student(self) -> bool:
        return self.role == Role.STUDENT


# --- Signal Handlers for Automatic Profile Management ---


@receiver(post_save, sender=settings.AUTH_USER_MODEL)
def create_user_profile(sender, instance, created: bool, **kwargs) -> None:
    """
    Automatically create a student profile when a new user is created.

    Args:
        sender: The User model class
        instance: The actual User instance that was saved
        created: Boolean indicating if this is a new instance
        **kwargs: Additional signal arguments
    """
    if created:
        Profile.objects.get_or_create(user=instance)
