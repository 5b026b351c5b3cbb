# tasks/priority_engine/scoring.py
"""
Local Priority Scorer
=====================

Deterministic fallback scoring used whenever no AI ranking has been applied
to a task. Urgency dominates (it can reach 100 on its own) while the weight
and effort boosts are capped at 30 and 20, so a small overdue task still
outranks a heavy task that is due next month, and among equally urgent tasks
the heavier and longer ones surface first.
"""

import datetime
import math
from typing import Optional, Union

from .urgency import compute_urgency

DEFAULT_EFFORT_MINUTES = 30
DEFAULT_WEIGHT = 0.0

MAX_WEIGHT_SCORE = 30
WEIGHT_MULTIPLIER = 3
MAX_EFFORT_SCORE = 20
EFFORT_MINUTES_PER_POINT = 10

MIN_SCORE = 0
MAX_SCORE = 100

DEFAULT_PRIORITY_REASON = "Still have time - progress steadily"


def round_half_up(value: float) -> int:
    """Rounds .5 away from zero for positives, matching what users see in the app."""
    return int(math.floor(value + 0.5))


def clamp_score(value: Union[int, float]) -> int:
    return max(MIN_SCORE, min(MAX_SCORE, round_half_up(float(value))))


def normalize_effort_minutes(value) -> int:
    """Positive whole minutes; anything missing or unusable becomes 30."""
    try:
        minutes = float(value)
    except (TypeError, ValueError):
        return DEFAULT_EFFORT_MINUTES
    if not math.isfinite(minutes) or minutes <= 0:
        return DEFAULT_EFFORT_MINUTES
    return round_half_up(minutes)


def _coerce_weight(value) -> float:
    try:
        weight = float(value)
    except (TypeError, ValueError):
        return DEFAULT_WEIGHT
    return weight if math.isfinite(weight) else DEFAULT_WEIGHT


def compute_weight_score(weight) -> float:
    return min(MAX_WEIGHT_SCORE, _coerce_weight(weight) * WEIGHT_MULTIPLIER)


def compute_effort_score(estimated_minutes) -> int:
    minutes = normalize_effort_minutes(estimated_minutes)
    return min(MAX_EFFORT_SCORE, round_half_up(minutes / EFFORT_MINUTES_PER_POINT))


def compute_priority_score(
    deadline: datetime.datetime,
    weight: Optional[float] = None,
    estimated_minutes: Optional[int] = None,
    now: Optional[datetime.datetime] = None,
) -> int:
    """
    Combines urgency, importance weight and effort into an integer score.

    Args:
        deadline: Aware deadline of the task.
        weight: Importance weight; missing -> 0.
        estimated_minutes: Effort estimate; missing or non-positive -> 30.
        now: Reference time for the urgency model.

    Returns:
        Integer score in [0, 100].
    """
    urgency = compute_urgency(deadline, now)
    total = urgency + compute_weight_score(weight) + compute_effort_score(estimated_minutes)
    return clamp_score(min(MAX_SCORE, round_half_up(total)))


def build_priority_reason() -> str:
    # The local fallback keeps a single templated reason; narrative text comes from the AI ranking.
    return DEFAULT_PRIORITY_REASON
