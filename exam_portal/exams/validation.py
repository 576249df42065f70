"""
Input validation for exam authoring and submissions.

Runs before any domain entity is constructed and raises ExamValidationError
with the offending field and a readable reason, instead of relying on the
database to reject a write.

Author: Exam Portal Development Team
Version: 1.0.0
"""

import math
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

from django.utils import timezone
from django.utils.dateparse import parse_datetime
from rest_framework.settings import api_settings

from .exceptions import ExamValidationError
from .serializers import ExamCreateSerializer

_QUESTION_PATH = re.compile(r"^questions\[(\d+)\]\.?(.*)$")

# Upper bound of the PositiveIntegerField columns storing durations
MAX_TIME_SPENT = 2147483647


@dataclass(frozen=True)
class SubmissionPayload:
    answers: List[Dict[str, Any]]
    time_spent: int
    started_at: Optional[datetime]


def _flatten_errors(errors: Any, prefix: str = "") -> Iterator[Tuple[str, str]]:
    if isinstance(errors, dict):
        for key, value in errors.items():
            if key == api_settings.NON_FIELD_ERRORS_KEY:
                name = prefix
            else:
                name = f"{prefix}.{key}" if prefix else str(key)
            yield from _flatten_errors(value, name)
    elif isinstance(errors, list):
        for index, value in enumerate(errors):
            if isinstance(value, (dict, list)):
                yield from _flatten_errors(value, f"{prefix}[{index}]")
            else:
                yield prefix, str(value)
    else:
        yield prefix, str(errors)


def _describe(field: str, reason: str) -> str:
    match = _QUESTION_PATH.match(field)
    if match:
        number = int(match.group(1)) + 1
        return f"Question {number}: {reason}"
    if not field:
        return reason
    return f"{field}: {reason}"


def validate_exam_payload(data: Any) -> Dict[str, Any]:
    """
    Validate an exam creation request body.

    Args:
        data: Parsed JSON body with camelCase keys

    Returns:
        The validated data (dates aware, defaults applied, assignees de-duplicated)

    Raises:
        ExamValidationError: Naming the first invalid field; all errors are in ``details``
    """
    serializer = ExamCreateSerializer(data=data)
    if serializer.is_valid():
        return serializer.validated_data

    flattened = list(_flatten_errors(serializer.errors))
    field, reason = flattened[0] if flattened else ("", "Invalid exam data.")
    raise ExamValidationError(_describe(field, reason), field=field or None, errors=serializer.errors)


def _parse_started_at(value: Any) -> Optional[datetime]:
    if value in (None, ""):
        return None
    parsed = value if isinstance(value, datetime) else parse_datetime(str(value))
    if parsed is None:
        raise ExamValidationError("startedAt must be an ISO 8601 timestamp.", field="startedAt")
    if timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed)
    return parsed


def _parse_time_spent(value: Any, field: str = "timeSpent") -> int:
    if value in (None, ""):
        return 0
    if (
        isinstance(value, bool)
        or not isinstance(value, (int, float))
        or not math.isfinite(value)
        or not 0 <= value <= MAX_TIME_SPENT
    ):
        raise ExamValidationError(
            f"{field} must be a number of seconds between 0 and {MAX_TIME_SPENT}.", field=field
        )
    return int(value)


def validate_submission(payload: Any) -> SubmissionPayload:
    """
    Validate the shape of a submission body.

    Only the envelope is checked: ``answers`` must be an array of objects whose
    ``selectedOptions`` (when present) is an array, and durations must fit the
    stored columns. Answers for unknown
    questions or missing answers are not errors; the scoring engine grades them.
    """
    if not isinstance(payload, Mapping):
        raise ExamValidationError(
            "Invalid submission format. Expected a JSON object.", field="answers"
        )

    answers = payload.get("answers")
    if not isinstance(answers, list):
        raise ExamValidationError(
            "Invalid submission format. Answers must be provided as an array.",
            field="answers",
        )

    cleaned: List[Dict[str, Any]] = []
    for index, answer in enumerate(answers):
        if not isinstance(answer, Mapping):
            raise ExamValidationError(f"Answer {index + 1} must be an object.", field=f"answers[{index}]")
        selected = answer.get("selectedOptions", [])
        if selected is not None and not isinstance(selected, list):
            raise ExamValidationError(
                f"Answer {index + 1}: selectedOptions must be an array.",
                field=f"answers[{index}].selectedOptions",
            )
        cleaned_answer = dict(answer)
        if "timeSpent" in answer:
            cleaned_answer["timeSpent"] = _parse_time_spent(
                answer["timeSpent"], field=f"answers[{index}].timeSpent"
            )
        cleaned.append(cleaned_answer)

    return SubmissionPayload(
        answers=cleaned,
        time_spent=_parse_time_spent(payload.get("timeSpent")),
        started_at=_parse_started_at(payload.get("startedAt")),
    )
