"""
Attempt Counter

Computes the next attempt number for an (exam, student) pair and enforces the
exam's attempt limit. The read-then-insert sequence is not atomic on its own;
the unique constraint on (exam, student, attempt_number) makes the losing
concurrent insert fail with AttemptConflict.
"""

from dataclasses import dataclass

from ..exceptions import AttemptLimitExceeded
from ..repositories import ResultRepository


@dataclass(frozen=True)
class AttemptDecision:
    attempt_number: int
    allowed: bool
    attempts_made: int
    attempts_allowed: int


def next_attempt(exam, student_id: int, results: ResultRepository = None) -> AttemptDecision:
    results = results or ResultRepository()
    attempts_made = results.max_attempt(exam.pk, student_id)
    candidate = attempts_made + 1
    return AttemptDecision(
        attempt_number=candidate,
        allowed=candidate <= exam.attempt_limit,
        attempts_made=attempts_made,
        attempts_allowed=exam.attempt_limit,
    )


def ensure_attempt_allowed(exam, student_id: int, results: ResultRepository = None) -> AttemptDecision:
    decision = next_attempt(exam, student_id, results)
    if not decision.allowed:
        raise AttemptLimitExceeded(decision.attempts_made, decision.attempts_allowed)
    return decision
