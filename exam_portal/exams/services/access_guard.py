"""
Access Guard

Decides whether an identity may view or submit an exam and classifies the
exam's time window. Window boundaries are inclusive: a submission exactly at
``start_date`` or ``end_date`` is accepted.

Author: Exam Portal Development Team
Version: 1.0.0
"""

import logging
from datetime import datetime
from enum import Enum
from typing import Optional

from django.utils import timezone

from ...users.identity import Identity
from ..exceptions import AccessDenied, ExamClosed, ExamNotOpen

logger = logging.getLogger(__name__)


class WindowState(str, Enum):
    UPCOMING = "Upcoming"
    ACTIVE = "Active"
    COMPLETED = "Completed"


def window_state(now: datetime, start: datetime, end: datetime) -> WindowState:
    if now < start:
        return WindowState.UPCOMING
    if now > end:
        return WindowState.COMPLETED
    return WindowState.ACTIVE


def is_owner(exam, identity: Identity) -> bool:
    return identity.is_tutor and exam.tutor_id == identity.id


def is_assignee(exam, identity: Identity) -> bool:
    return identity.is_student and identity.id in exam.assignee_ids()


def has_access(exam, identity: Identity) -> bool:
    return is_owner(exam, identity) or is_assignee(exam, identity)


def check_access(exam, identity: Identity) -> None:
    """
    Grant tutors who own the exam and students assigned to it.

    Raises:
        AccessDenied: For everyone else
    """
    if has_access(exam, identity):
        return
    logger.warning(f"Access denied to exam {exam.pk} for user {identity.id} ({identity.role})")
    if identity.is_tutor:
        raise AccessDenied("Access denied. You can only manage your own exams.")
    raise AccessDenied("You are not assigned to this exam")


def ensure_open(exam, now: Optional[datetime] = None) -> WindowState:
    """
    Raises:
        ExamNotOpen: Before the window starts
        ExamClosed: After the window ended
    """
    now = now or timezone.now()
    state = window_state(now, exam.start_date, exam.end_date)
    if state is WindowState.UPCOMING:
        raise ExamNotOpen(exam.start_date)
    if state is WindowState.COMPLETED:
        raise ExamClosed(exam.end_date)
    return state
