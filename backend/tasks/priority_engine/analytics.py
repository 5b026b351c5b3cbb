from dataclasses import asdict, dataclass
from typing import Dict, Iterable, Mapping, Optional, Set
import datetime

from django.utils import timezone

from .projection import Task
from .scoring import round_half_up
from .status import is_done_status


@dataclass(frozen=True)
class ProductivityStats:
    total: int
    active_count: int
    done_count: int
    backlog_count: int
    on_time_rate: int
    current_streak: int
    longest_streak: int

    def as_dict(self) -> Dict[str, int]:
        return asdict(self)


def day_key(moment: datetime.datetime) -> datetime.date:
    """Local calendar date of a timestamp; naive values are taken as already local."""
    if timezone.is_naive(moment):
        return moment.date()
    return timezone.localdate(moment)


def is_on_time(completed_at: datetime.datetime, deadline: datetime.datetime) -> bool:
    return completed_at <= deadline


def on_time_days(
    completion_log: Mapping[str, datetime.datetime],
    tasks_by_id: Mapping[str, Task],
) -> Set[datetime.date]:
    """Days with at least one on-time completion; late ones are simply left out."""
    days = set()
    for task_id, completed_at in completion_log.items():
        task = tasks_by_id.get(task_id)
        if task is None:
            continue
        if is_on_time(completed_at, task.deadline):
            days.add(day_key(completed_at))
    return days


def longest_streak(days: Iterable[datetime.date]) -> int:
    ordered = sorted(set(days))
    if not ordered:
        return 0

    longest = run = 1
    for previous, current in zip(ordered, ordered[1:]):
        if (current - previous).days == 1:
            run += 1
            longest = max(longest, run)
        else:
            run = 1
    return longest


def current_streak(days: Iterable[datetime.date], today: datetime.date) -> int:
    """Consecutive days ending today; 0 when today itself is missing."""
    present = set(days)
    streak = 0
    cursor = today
    while cursor in present:
        streak += 1
        cursor -= datetime.timedelta(days=1)
    return streak


def on_time_rate(
    tasks: Iterable[Task],
    completion_log: Mapping[str, datetime.datetime],
) -> int:
    done = [t for t in tasks if is_done_status(t.status)]
    if not done:
        return 0
    on_time = sum(
        1
        for t in done
        if t.id in completion_log and is_on_time(completion_log[t.id], t.deadline)
    )
    return round_half_up(on_time / len(done) * 100)


def compute_productivity_stats(
    tasks: Iterable[Task],
    completion_log: Mapping[str, datetime.datetime],
    now: Optional[datetime.datetime] = None,
) -> ProductivityStats:
    """
    Derives the profile statistics from the visible tasks and the completion log.

    completion_log: task id -> last completion timestamp
    now: reference time for backlog and "today", defaults to ``timezone.now()``
    """
    if now is None:
        now = timezone.now()
    tasks = list(tasks)

    done = [t for t in tasks if is_done_status(t.status)]
    active = [t for t in tasks if t.is_active]
    days = on_time_days(completion_log, {t.id: t for t in tasks})

    return ProductivityStats(
        total=len(tasks),
        active_count=len(active),
        done_count=len(done),
        backlog_count=sum(1 for t in active if t.deadline < now),
        on_time_rate=on_time_rate(done, completion_log),
        current_streak=current_streak(days, day_key(now)),
        longest_streak=longest_streak(days),
    )
