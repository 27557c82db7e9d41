"""Scoreboard aggregation.

Pure functions over a list of attempts; nothing is cached and every call
recomputes from scratch.
"""

import math
from typing import Dict, List, Sequence

from schemas.quiz_attempt import AttemptView, QuizSummary


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


def attempt_percentage(score: int, total: int) -> int:
    """Percentage of ``score`` over ``total``; 0 when there is no total."""
    if total <= 0:
        return 0
    return round_half_up(score / total * 100)


def summarize(attempts: Sequence[AttemptView]) -> List[QuizSummary]:
    """Group attempts by quiz and compute per-quiz statistics.

    Groups appear in the order their quiz is first seen. Percentages are
    computed against ``total_questions`` as given, so callers must pass
    totals already scaled to points.

    Args:
        attempts: Attempts to aggregate. Not modified.

    Returns:
        One QuizSummary per quiz.
    """
    groups: Dict[str, List[AttemptView]] = {}
    for attempt in attempts:
        groups.setdefault(attempt.quiz_id, []).append(attempt)

    summaries = []
    for quiz_id, group in groups.items():
        scores = [attempt_percentage(a.score, a.total_questions) for a in group]
        summaries.append(
            QuizSummary(
                quiz_id=quiz_id,
                quiz_title=group[0].quiz_title,
                total_attempts=len(group),
                average_score=sum(scores) / len(scores),
                highest_score=max(scores),
                lowest_score=min(scores),
                attempts=list(group),
            )
        )
    return summaries
