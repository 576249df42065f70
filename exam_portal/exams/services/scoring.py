"""
Scoring Engine

Grades a raw answer submission against an exam's question set. The engine is
pure: it works on ``QuestionKey`` snapshots instead of ORM instances, never
touches the database and never raises for missing or odd answers.

Grading rules:
- SINGLE: correct iff exactly the one correct-flagged option is selected
- MULTIPLE: correct iff the selected set equals the correct set and is non-empty
- No partial credit; missing answers are graded as empty selections

Author: Exam Portal Development Team
Version: 1.0.0
"""

import math
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from ..models import QuestionType, ResultStatus

TWO_PLACES = Decimal("0.01")


@dataclass(frozen=True)
class QuestionKey:
    """Answer key for one question, detached from the ORM."""

    id: Any
    type: str
    points: int
    correct_flags: Tuple[bool, ...]

    @classmethod
    def from_question(cls, question) -> "QuestionKey":
        return cls(
            id=question.pk,
            type=question.type,
            points=question.points,
            correct_flags=question.correct_flags(),
        )

    @property
    def correct_indexes(self) -> frozenset:
        return frozenset(i for i, flag in enumerate(self.correct_flags) if flag)


@dataclass(frozen=True)
class GradedAnswer:
    question_id: Any
    selected_options: List[int]
    is_correct: bool
    points_awarded: int
    time_spent_seconds: int = 0


@dataclass(frozen=True)
class ScoringResult:
    answers: List[GradedAnswer] = field(default_factory=list)
    score: int = 0
    total_points: int = 0
    percentage: Decimal = Decimal("0.00")
    status: str = ResultStatus.FAIL

    @property
    def correct_count(self) -> int:
        return sum(1 for answer in self.answers if answer.is_correct)


def normalize_selection(raw: Any) -> List[int]:
    """Sorted, de-duplicated non-negative option indexes; anything else is dropped."""
    if not isinstance(raw, (list, tuple, set, frozenset)):
        return []
    indexes = set()
    for value in raw:
        # bool is an int subclass but never a valid option index
        if isinstance(value, bool):
            continue
        if isinstance(value, int) and value >= 0:
            indexes.add(value)
    return sorted(indexes)


def match_answer(question_id: Any, index: int, answers: Sequence[Mapping[str, Any]]) -> Optional[Mapping[str, Any]]:
    """
    Locate the submitted answer for a question.

    Identity match on ``questionId`` wins; otherwise the positional id
    ``q{index}`` is tried. Returns None when neither matches.
    """
    expected = str(question_id)
    for answer in answers:
        if answer.get("questionId") is not None and str(answer.get("questionId")) == expected:
            return answer

    positional = f"q{index}"
    for answer in answers:
        if answer.get("questionId") == positional:
            return answer
    return None


def is_selection_correct(key: QuestionKey, selection: Iterable[int]) -> bool:
    selected = frozenset(selection)
    correct = key.correct_indexes
    if not correct:
        # No correct option was authored; nothing can satisfy the question
        return False

    if key.type == QuestionType.SINGLE:
        # Multiple flagged options on a SINGLE question: the first one is the key
        first_correct = key.correct_flags.index(True)
        return selected == frozenset({first_correct})

    if key.type == QuestionType.MULTIPLE:
        return bool(selected) and selected == correct

    return False


def calculate_percentage(score: int, total_points: int) -> Decimal:
    if total_points <= 0:
        return Decimal("0.00")
    raw = Decimal(score) * Decimal(100) / Decimal(total_points)
    return raw.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def determine_status(percentage: Decimal, passing_score: Any) -> str:
    return ResultStatus.PASS if percentage >= Decimal(str(passing_score)) else ResultStatus.FAIL


def _time_spent(answer: Mapping[str, Any]) -> int:
    value = answer.get("timeSpent", 0)
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value) or value < 0:
        return 0
    return int(value)


def score_submission(
    questions: Sequence[QuestionKey],
    answers: Sequence[Mapping[str, Any]],
    passing_score: Any,
) -> ScoringResult:
    """
    Grade every question of an exam against the submitted answers.

    Args:
        questions: Answer keys in exam order
        answers: Raw answer dicts with ``questionId``, ``selectedOptions``, ``timeSpent``
        passing_score: Percentage needed to pass (0-100)

    Returns:
        ScoringResult with per-question grading, totals, percentage and status
    """
    graded: List[GradedAnswer] = []
    score = 0
    total_points = 0

    for index, key in enumerate(questions):
        answer = match_answer(key.id, index, answers) or {"selectedOptions": []}
        selection = normalize_selection(answer.get("selectedOptions"))
        correct = is_selection_correct(key, selection)

        total_points += key.points
        awarded = key.points if correct else 0
        score += awarded

        graded.append(
            GradedAnswer(
                question_id=key.id,
                selected_options=selection,
                is_correct=correct,
                points_awarded=awarded,
                time_spent_seconds=_time_spent(answer),
            )
        )

    percentage = calculate_percentage(score, total_points)
    return ScoringResult(
        answers=graded,
        score=score,
        total_points=total_points,
        percentage=percentage,
        status=determine_status(percentage, passing_score),
    )


def summarize(result: ScoringResult) -> Dict[str, Any]:
    return {
        "score": result.score,
        "totalPoints": result.total_points,
        "percentage": result.percentage,
        "status": result.status,
        "correctAnswers": result.correct_count,
    }
