# tasks/services.py

import datetime
import logging
from typing import List, Optional

from asgiref.sync import sync_to_async
from django.conf import settings
from django.core.cache import cache
from django.db import transaction
from django.utils import timezone

from tasks.models import TaskProgress
from tasks.priority_engine import (
    ProductivityStats,
    RankingController,
    RankingInProgressError,
    SmartPriorityClient,
    SmartPriorityOrchestrator,
    Task,
    TaskStatus,
    compute_productivity_stats,
    project_tasks,
    sort_by_priority,
)
from tasks.priority_engine.controller import Scheduler
from tasks.priority_engine.status import is_done_status
from tasks.repositories import (
    DatabaseOverrideRepository,
    ProgressRepository,
    get_assignment_repository,
)
from tasks.signals import REASON_PRIORITY, REASON_STATUS, notify_tasks_changed

logger = logging.getLogger(__name__)

# Upper bound on how long a crashed worker can hold the per-user ranking slot
DEFAULT_RANKING_LOCK_SECONDS = 60


class TaskNotFound(LookupError):
    """The task does not exist or is not visible to the user."""

    pass


def load_tasks_for_user(
    user,
    assignments=None,
    now: Optional[datetime.datetime] = None,
) -> List[Task]:
    """
    Projects every assignment the user can see, with their stored statuses
    and priority overrides applied.
    """
    if assignments is None:
        assignments = get_assignment_repository().list_assignments()
    return project_tasks(
        viewer=user.as_viewer(),
        assignments=assignments,
        statuses=ProgressRepository().statuses(user.pk),
        overrides=DatabaseOverrideRepository().get_all(user.pk),
        now=now,
    )


def ranked_tasks(user, assignments=None, now: Optional[datetime.datetime] = None) -> List[Task]:
    return sort_by_priority(load_tasks_for_user(user, assignments, now))


def update_task_status(user, task_id: str, status: str, assignments=None) -> TaskProgress:
    """
    Moves a task to a new status and keeps the completion log in step:
    entering a done status stamps ``completed_at`` once, leaving it clears it.

    Raises:
        TaskNotFound: the task is not visible to the user.
    """
    status = TaskStatus(status)
    visible_ids = {task.id for task in load_tasks_for_user(user, assignments)}
    if task_id not in visible_ids:
        raise TaskNotFound(task_id)

    with transaction.atomic():
        progress, _ = TaskProgress.objects.select_for_update().get_or_create(
            user=user, task_id=task_id
        )
        progress.status = status
        if is_done_status(status):
            if progress.completed_at is None:
                progress.completed_at = timezone.now()
        else:
            progress.completed_at = None
        progress.save(update_fields=['status', 'completed_at', 'updated_at'])

    logger.info(f"Task {task_id} for user {user.pk} moved to {status}")
    notify_tasks_changed(update_task_status, user.pk, REASON_STATUS, [task_id])
    return progress


def compute_user_stats(user, assignments=None, now: Optional[datetime.datetime] = None) -> ProductivityStats:
    tasks = load_tasks_for_user(user, assignments, now)
    return compute_productivity_stats(tasks, ProgressRepository().completion_log(user.pk), now)


def _ranking_lock_key(user_id) -> str:
    return f"smart-priority:in-flight:{user_id}"


def rank_tasks_for_user(
    user,
    assignments=None,
    client: Optional[SmartPriorityClient] = None,
    now: Optional[datetime.datetime] = None,
) -> List[Task]:
    """
    Runs one AI ranking round and returns the ranked active tasks.

    At most one round per user runs at a time; a request arriving while one
    is in flight is dropped, not queued.

    Raises:
        RankingInProgressError: a round for this user is already running.
        RankingError: the remote call failed; nothing was persisted.
    """
    lock_key = _ranking_lock_key(user.pk)
    lock_timeout = getattr(settings, 'SMART_PRIORITY_LOCK_SECONDS', None) or DEFAULT_RANKING_LOCK_SECONDS
    if not cache.add(lock_key, True, timeout=lock_timeout):
        logger.info(f"Ranking already in flight for user {user.pk}; dropping request")
        raise RankingInProgressError()

    try:
        tasks = load_tasks_for_user(user, assignments, now)
        orchestrator = SmartPriorityOrchestrator(
            client=client or SmartPriorityClient(),
            overrides=DatabaseOverrideRepository(),
        )
        merged = orchestrator.rank(user.pk, tasks, now)
    finally:
        cache.delete(lock_key)

    changed = [after.id for before, after in zip(tasks, merged) if after is not before]
    if changed:
        notify_tasks_changed(rank_tasks_for_user, user.pk, REASON_PRIORITY, changed)
    return sort_by_priority(merged)


def ranking_controller_for_user(
    user,
    assignments=None,
    client: Optional[SmartPriorityClient] = None,
    scheduler: Optional[Scheduler] = None,
    delay: Optional[float] = None,
) -> RankingController:
    """
    Debounced "rank now" for async callers. The blocking round runs through
    ``sync_to_async`` so the event loop is never held by the HTTP call.
    """
    rank = sync_to_async(rank_tasks_for_user, thread_sensitive=True)

    async def rank_now() -> List[Task]:
        return await rank(user, assignments, client)

    return RankingController(rank_now, scheduler=scheduler, delay=delay)
