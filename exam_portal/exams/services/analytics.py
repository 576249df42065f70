"""
Exam analytics for tutors: overall averages, best and worst attempts,
per-question correctness and per-topic performance.
"""

from collections import OrderedDict
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

from ..models import Exam, ExamResult, ResultStatus
from .scoring import calculate_percentage

UNTAGGED_TOPIC = "General"


def _mean(values: Sequence[Decimal]) -> Decimal:
    if not values:
        return Decimal("0.00")
    return calculate_percentage(sum(values, Decimal(0)), 100 * len(values))


def _top_scorer(results: Sequence[ExamResult]) -> Optional[ExamResult]:
    # Earliest submission wins ties
    best = None
    for result in results:
        if best is None or result.percentage > best.percentage:
            best = result
    return best


def _lowest_scorer(results: Sequence[ExamResult]) -> Optional[ExamResult]:
    lowest = None
    for result in results:
        if lowest is None or result.percentage < lowest.percentage:
            lowest = result
    return lowest


def exam_analytics(exam: Exam, results: Sequence[ExamResult]) -> Dict[str, Any]:
    """
    Aggregate the stored results of one exam.

    Args:
        exam: Exam with questions loaded
        results: All results of the exam, answers prefetched

    Returns:
        Dict with totalAttempts, averageScore, passRate, averageTimeSpent,
        topScorer, lowestScorer (ExamResult or None), questionAnalysis, topicStats
    """
    results = sorted(results, key=lambda r: (r.submitted_at, r.pk))
    total_attempts = len(results)
    passed = sum(1 for result in results if result.status == ResultStatus.PASS)

    # question id -> verdict per result; answers are matched by question, not position
    verdicts: Dict[Any, List[bool]] = {}
    for result in results:
        for answer in result.answers.all():
            verdicts.setdefault(answer.question_id, []).append(answer.is_correct)

    question_analysis = []
    topics: "OrderedDict[str, Dict[str, int]]" = OrderedDict()
    for number, question in enumerate(exam.ordered_questions(), start=1):
        graded = verdicts.get(question.pk, [])
        correct = sum(1 for verdict in graded if verdict)
        topic = question.topic or UNTAGGED_TOPIC

        question_analysis.append({
            "questionId": question.pk,
            "questionNumber": number,
            "question": question.text,
            "topic": topic,
            "difficulty": question.difficulty,
            "correctAnswers": correct,
            "totalAttempts": len(graded),
            "correctPercentage": calculate_percentage(correct, len(graded)),
        })

        stats = topics.setdefault(topic, {"correct": 0, "total": 0})
        stats["correct"] += correct
        stats["total"] += len(graded)

    topic_stats = [
        {
            "topic": topic,
            "correct": stats["correct"],
            "total": stats["total"],
            "percentage": calculate_percentage(stats["correct"], stats["total"]),
        }
        for topic, stats in topics.items()
    ]

    average_time = (
        round(sum(result.time_spent for result in results) / total_attempts)
        if total_attempts else 0
    )

    return {
        "examId": exam.pk,
        "examTitle": exam.title,
        "totalAttempts": total_attempts,
        "uniqueStudents": len({result.student_id for result in results}),
        "averageScore": _mean([result.percentage for result in results]),
        "passRate": calculate_percentage(passed, total_attempts),
        "averageTimeSpent": average_time,
        "topScorer": _top_scorer(results),
        "lowestScorer": _lowest_scorer(results),
        "questionAnalysis": question_analysis,
        "topicStats": topic_stats,
    }
