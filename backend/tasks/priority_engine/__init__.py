# tasks/priority_engine/__init__.py
"""
Smart Priority Engine
=====================

Pure-Python ranking logic behind the Smart Priority screen. Nothing in this
package touches the ORM; storage is reached through the repository
interfaces in ``overrides``.

Modules:
--------
- status: Task lifecycle states and the active/done split
- urgency: Deadline -> urgency contribution (0..100)
- scoring: Deterministic local priority score and reason
- projection: Assignment records -> Task, visibility, override replay
- external_ranker: Request/response contract of the remote ranking endpoint
- merge: Applies remote results onto local tasks (at most one per task)
- controller: Debounce + single in-flight guard for "rank now"
- orchestrator: One ranking round (request, merge, persist overrides)
- analytics: On-time rate, streaks and backlog

Usage:
------
    from tasks.priority_engine import SmartPriorityOrchestrator

    orchestrator = SmartPriorityOrchestrator(overrides=repository)
    ranked = orchestrator.rank(user_id=user.pk, tasks=tasks)
"""

from .analytics import ProductivityStats, compute_productivity_stats
from .controller import AsyncioScheduler, ControllerState, RankingController
from .external_ranker import (
    RankingError,
    RankingInProgressError,
    RankingNotConfiguredError,
    RankingResult,
    RankingUnavailableError,
    SmartPriorityClient,
    build_ranking_request,
)
from .merge import collect_overrides, merge_ranking_results
from .orchestrator import SmartPriorityOrchestrator
from .overrides import InMemoryOverrideRepository, OverrideRepository, PriorityOverride
from .projection import (
    AssignmentRecord,
    InvalidDeadlineError,
    Task,
    Viewer,
    project_tasks,
    sort_by_priority,
)
from .scoring import compute_priority_score
from .status import ACTIVE_STATUSES, DONE_STATUSES, TaskStatus
from .urgency import compute_urgency

__all__ = [
    # Core classes
    "SmartPriorityOrchestrator",
    "SmartPriorityClient",
    "RankingController",
    "AsyncioScheduler",
    "InMemoryOverrideRepository",
    "OverrideRepository",
    # Data shapes
    "AssignmentRecord",
    "Task",
    "Viewer",
    "PriorityOverride",
    "RankingResult",
    "ProductivityStats",
    "ControllerState",
    "TaskStatus",
    # Errors
    "RankingError",
    "RankingInProgressError",
    "RankingNotConfiguredError",
    "RankingUnavailableError",
    "InvalidDeadlineError",
    # Functions
    "compute_urgency",
    "compute_priority_score",
    "project_tasks",
    "sort_by_priority",
    "build_ranking_request",
    "merge_ranking_results",
    "collect_overrides",
    "compute_productivity_stats",
    # Constants
    "ACTIVE_STATUSES",
    "DONE_STATUSES",
]
