# tasks/priority_engine/merge.py

import logging
import math
from dataclasses import replace
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .external_ranker import RankingResult
from .overrides import PriorityOverride
from .projection import Task
from .scoring import clamp_score

logger = logging.getLogger(__name__)


def _usable_score(value) -> Optional[int]:
    """Clamped integer score, or None when the AI sent something unusable."""
    if isinstance(value, bool):
        return None
    try:
        score = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(score):
        return None
    return clamp_score(score)


def index_results(results: Iterable[RankingResult]) -> Dict[str, RankingResult]:
    """One result per task id; a later duplicate replaces an earlier one."""
    by_id: Dict[str, RankingResult] = {}
    for result in results:
        if _usable_score(result.priority_score) is None:
            logger.debug(f"Ignoring ranking result for {result.task_id}: unusable score")
            continue
        by_id[result.task_id] = result
    return by_id


def _apply(task: Task, result: RankingResult) -> Task:
    return replace(
        task,
        priority_score=_usable_score(result.priority_score),
        priority_level=result.priority_level,
        # only a missing reason falls back; an explicit [] clears it
        priority_reason=list(result.reason) if result.reason is not None else task.priority_reason,
        next_actions=list(result.next_actions),
        assumptions=list(result.assumptions),
    )


def apply_indexed_results(
    tasks: Sequence[Task],
    by_id: Mapping[str, RankingResult],
) -> List[Task]:
    """Merge step for results already passed through ``index_results``."""
    unknown = set(by_id) - {task.id for task in tasks}
    if unknown:
        logger.warning(f"Ignoring ranking results for unknown tasks: {sorted(unknown)}")

    return [_apply(task, by_id[task.id]) if task.id in by_id else task for task in tasks]


def merge_ranking_results(
    tasks: Sequence[Task],
    results: Iterable[RankingResult],
) -> List[Task]:
    """
    Applies AI results onto the current task collection.

    Every task comes back, in the same order. Tasks without a result are the
    very same objects; results for unknown task ids are dropped.
    """
    return apply_indexed_results(tasks, index_results(results))


def override_from_task(task: Task) -> PriorityOverride:
    return PriorityOverride(
        priority_score=task.priority_score,
        priority_reason=task.priority_reason,
        priority_level=task.priority_level,
        next_actions=list(task.next_actions),
        assumptions=list(task.assumptions),
    )


def collect_overrides(
    merged: Sequence[Task],
    by_id: Mapping[str, RankingResult],
) -> List[Tuple[str, PriorityOverride]]:
    """Override records for the merged tasks that a result actually matched."""
    return [(task.id, override_from_task(task)) for task in merged if task.id in by_id]
