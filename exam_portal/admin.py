"""
Exam Portal Django Admin Configuration

The admin interface is organized into logical sections:
- User Management: user administration with the exam role on the profile
- Examination System: exams with inline questions, read-only results

Results are write-once; the admin can inspect and delete them but never edit.

Author: Exam Portal Development Team
Version: 1.0.0
"""

from typing import Optional
from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.contrib.auth.models import User
from django.utils.translation import gettext_lazy as _
from django.db.models import QuerySet
from django.http import HttpRequest

# Import all models from the central models registry
from .models import (
    Profile,
    Exam,
    Question,
    QuestionOption,
    ExamResult,
    ResultAnswer,
)

# --- User Management Administration ---


class ProfileInline(admin.StackedInline):
    """Inline admin for the exam profile (role, institution, student number)."""

    model = Profile
    can_delete = False
    verbose_name_plural = "Profile Information"
    fk_name = "user"
    fields = ("role", "institution", "student_id")

    def get_extra(
        self, request: HttpRequest, obj: Optional[User] = None, **kwargs
    ) -> int:
        return 0


class UserAdmin(BaseUserAdmin):
    inlines = (ProfileInline,)
    list_display = (
        "username",
        "email",
        "first_name",
        "last_name",
        "get_role",
        "is_active",
    )
    list_select_related = ("profile",)
    list_filter = ("profile__role", "is_staff", "is_active")
    search_fields = ("username", "first_name", "last_name", "email", "profile__student_id")
    ordering = ("username",)

    @admin.display(description=_("Role"))
    def get_role(self, instance: User) -> Optional[str]:
        try:
            return instance.profile.get_role_display()
        except Profile.DoesNotExist:
            return None


# Register enhanced user administration
admin.site.unregister(User)
admin.site.register(User, UserAdmin)


# --- Examination System Administration ---


class QuestionInline(admin.StackedInline):
    """Inline admin for exam questions."""

    model = Question
    extra = 0
    fields = ("order", "text", "type", "points", "topic", "difficulty", "explanation")
    ordering = ("order",)
    show_change_link = True


class QuestionOptionInline(admin.TabularInline):
    model = QuestionOption
    extra = 0
    fields = ("order", "text", "is_correct")
    ordering = ("order",)


@admin.register(Exam)
class ExamAdmin(admin.ModelAdmin):
    """
    Administration interface for exams.

    Questions are edited inline; their options on the question change page.
    """

    list_display = (
        "title",
        "subject",
        "tutor",
        "start_date",
        "end_date",
        "attempt_limit",
        "passing_score",
        "is_active",
    )
    list_filter = ("is_active", "subject", "start_date")
    search_fields = ("title", "subject", "tutor__username")
    filter_horizontal = ("assigned_to",)
    readonly_fields = ("created_at", "updated_at")
    inlines = [QuestionInline]
    fieldsets = (
        (_("Basic Information"), {"fields": ("title", "description", "subject", "tutor")}),
        (_("Schedule"), {"fields": ("start_date", "end_date", "duration")}),
        (
            _("Rules"),
            {
                "fields": (
                    "attempt_limit",
                    "passing_score",
                    "show_results_immediately",
                    "show_correct_answers",
                    "randomize_questions",
                    "is_active",
                )
            },
        ),
        (_("Assignment"), {"fields": ("assigned_to",)}),
        (_("Timestamps"), {"fields": ("created_at", "updated_at"), "classes": ("collapse",)}),
    )

    def get_queryset(self, request: HttpRequest) -> QuerySet:
        return super().get_queryset(request).select_related("tutor")


@admin.register(Question)
class QuestionAdmin(admin.ModelAdmin):
    list_display = ("__str__", "exam", "type", "points", "topic", "difficulty")
    list_filter = ("type", "difficulty", "exam")
    search_fields = ("text", "topic", "exam__title")
    ordering = ("exam", "order")
    inlines = [QuestionOptionInline]


class ResultAnswerInline(admin.TabularInline):
    model = ResultAnswer
    extra = 0
    can_delete = False
    fields = ("question", "selected_options", "is_correct", "points_awarded", "time_spent_seconds")
    readonly_fields = fields

    def has_add_permission(self, request: HttpRequest, obj=None) -> bool:
        return False


@admin.register(ExamResult)
class ExamResultAdmin(admin.ModelAdmin):
    """Read-only view of submitted attempts."""

    list_display = (
        "exam",
        "student",
        "attempt_number",
        "score",
        "total_points",
        "percentage",
        "status",
        "submitted_at",
    )
    list_filter = ("status", "exam")
    search_fields = ("exam__title", "student__username", "student__email")
    date_hierarchy = "submitted_at"
    inlines = [ResultAnswerInline]

    def get_readonly_fields(self, request: HttpRequest, obj=None):
        return [field.name for field in self.model._meta.fields]

    def has_add_permission(self, request: HttpRequest) -> bool:
        return False

    def has_change_permission(self, request: HttpRequest, obj=None) -> bool:
        return False

    def get_queryset(self, request: HttpRequest) -> QuerySet:
        return super().get_queryset(request).select_related("exam", "student")
