"""
Result Visibility Filter

Removes answer-key data from payloads shown to students. Students keep their
own selections and the per-answer correct/incorrect verdict; what disappears is
every option's ``isCorrect`` flag and the question explanations in the embedded
exam. Filtering works on copies and is idempotent.
"""

import copy
from typing import Any, Dict

from ...users.models import Role

ANSWER_KEY_OPTION_FIELDS = ("isCorrect",)
ANSWER_KEY_QUESTION_FIELDS = ("explanation",)


def strip_answer_key(exam_payload: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of a serialized exam without option flags or explanations."""
    exam_payload = copy.deepcopy(exam_payload)
    for question in exam_payload.get("questions") or []:
        for name in ANSWER_KEY_QUESTION_FIELDS:
            question.pop(name, None)
        for option in question.get("options") or []:
            for name in ANSWER_KEY_OPTION_FIELDS:
                option.pop(name, None)
    return exam_payload


def must_redact(exam, viewer_role: str) -> bool:
    return viewer_role == Role.STUDENT and not exam.show_correct_answers


def redact(result_payload: Dict[str, Any], exam, viewer_role: str) -> Dict[str, Any]:
    """
    Apply the visibility rules to a serialized result.

    Args:
        result_payload: Serialized ExamResult, optionally embedding the exam under "exam"
        exam: The Exam instance deciding ``show_correct_answers``
        viewer_role: Role of the caller (TUTOR or STUDENT)

    Returns:
        The payload unchanged for tutors or exams showing answers, otherwise a redacted copy
    """
    if not must_redact(exam, viewer_role):
        return result_payload

    redacted = dict(result_payload)
    if isinstance(redacted.get("exam"), dict):
        redacted["exam"] = strip_answer_key(redacted["exam"])
    return redacted
