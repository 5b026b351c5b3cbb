# tasks/tests/test_engine.py
"""
Priority Engine Unit Tests
==========================

Test suite for the deterministic half of the Smart Priority engine.

This module tests:
1. Urgency computation (deadline -> 0..100)
2. Local priority score (urgency + capped weight and effort boosts)
3. Productivity analytics (on-time rate, streaks, backlog)

Test Philosophy:
----------------
- Test MATH, not just plumbing
- Fixed reference times; nothing depends on the wall clock
- Boundary conditions: overdue, exactly 1h, exactly 50h, empty logs
"""

from __future__ import annotations

import datetime

from django.test import SimpleTestCase, override_settings

from tasks.priority_engine.analytics import (
    compute_productivity_stats,
    current_streak,
    day_key,
    longest_streak,
)
from tasks.priority_engine.projection import Task
from tasks.priority_engine.scoring import (
    DEFAULT_PRIORITY_REASON,
    build_priority_reason,
    compute_effort_score,
    compute_priority_score,
    compute_weight_score,
    round_half_up,
)
from tasks.priority_engine.status import TaskStatus
from tasks.priority_engine.urgency import compute_urgency

UTC = datetime.timezone.utc

# Fixed reference: January 15, 2024 at noon UTC
FIXED_NOW = datetime.datetime(2024, 1, 15, 12, 0, 0, tzinfo=UTC)


def hours_from_now(hours: float) -> datetime.datetime:
    return FIXED_NOW + datetime.timedelta(hours=hours)


def make_task(
    task_id: str,
    deadline: datetime.datetime,
    status: TaskStatus = TaskStatus.NOT_STARTED,
    priority_score: int = 50,
) -> Task:
    return Task(
        id=task_id,
        title=f"Task {task_id}",
        subject="Math",
        deadline=deadline,
        estimated_minutes=30,
        weight=0,
        status=status,
        is_group=False,
        priority_score=priority_score,
        priority_reason=DEFAULT_PRIORITY_REASON,
    )


# ===========================================================================
# URGENCY SCORE TESTS
# ===========================================================================


class TestComputeUrgency(SimpleTestCase):
    """
    Test suite for the compute_urgency function.

    Tests cover:
    - Overdue tasks (must return 100)
    - Imminent tasks (<= 1 hour, must return 100)
    - Linear decay of 2 points per hour
    - Tasks 50 hours or more out (must return 0)
    """

    def test_overdue_task_returns_maximum_urgency(self) -> None:
        """A task whose deadline already passed saturates at exactly 100."""
        result = compute_urgency(hours_from_now(-3), now=FIXED_NOW)

        self.assertEqual(result, 100.0, "Overdue task must have urgency of 100")

    def test_severely_overdue_task_still_returns_hundred(self) -> None:
        """A task overdue by weeks does not exceed the scale."""
        result = compute_urgency(hours_from_now(-24 * 30), now=FIXED_NOW)

        self.assertEqual(result, 100.0)

    def test_task_due_within_the_hour_returns_maximum(self) -> None:
        result = compute_urgency(hours_from_now(0.5), now=FIXED_NOW)

        self.assertEqual(result, 100.0)

    def test_task_due_in_exactly_one_hour_returns_maximum(self) -> None:
        result = compute_urgency(hours_from_now(1), now=FIXED_NOW)

        self.assertEqual(result, 100.0)

    def test_linear_decay_two_points_per_hour(self) -> None:
        """10 hours out -> 100 - 20 = 80; 25 hours out -> 50."""
        self.assertAlmostEqual(compute_urgency(hours_from_now(10), now=FIXED_NOW), 80.0)
        self.assertAlmostEqual(compute_urgency(hours_from_now(25), now=FIXED_NOW), 50.0)

    def test_task_due_in_fifty_hours_returns_zero(self) -> None:
        result = compute_urgency(hours_from_now(50), now=FIXED_NOW)

        self.assertEqual(result, 0.0)

    def test_far_future_task_never_goes_negative(self) -> None:
        result = compute_urgency(hours_from_now(24 * 60), now=FIXED_NOW)

        self.assertEqual(result, 0.0)

    def test_nearer_deadline_is_never_less_urgent(self) -> None:
        """Monotonic in the deadline for anything at least an hour out."""
        previous = None
        for hours in [1, 1.5, 2, 5, 12, 24, 36, 49, 50, 51, 200]:
            urgency = compute_urgency(hours_from_now(hours), now=FIXED_NOW)
            if previous is not None:
                self.assertGreaterEqual(previous, urgency, f"urgency rose at {hours}h")
            previous = urgency

    def test_urgency_always_within_bounds(self) -> None:
        for hours in [-1000, -1, 0, 0.25, 1, 3, 49.9, 50, 10_000]:
            urgency = compute_urgency(hours_from_now(hours), now=FIXED_NOW)
            self.assertGreaterEqual(urgency, 0.0)
            self.assertLessEqual(urgency, 100.0)


# ===========================================================================
# LOCAL PRIORITY SCORE TESTS
# ===========================================================================


class TestComputePriorityScore(SimpleTestCase):
    """Tests for the deterministic fallback scorer."""

    def test_imminent_heavy_task_caps_at_hundred(self) -> None:
        """Due in 0.5h, weight 3, 60 min -> 100 + 9 + 6 = 115 -> 100."""
        score = compute_priority_score(hours_from_now(0.5), weight=3, estimated_minutes=60, now=FIXED_NOW)

        self.assertEqual(score, 100)

    def test_distant_light_task_scores_effort_only(self) -> None:
        """Due in 50h, weight 0, 10 min -> 0 + 0 + 1 = 1."""
        score = compute_priority_score(hours_from_now(50), weight=0, estimated_minutes=10, now=FIXED_NOW)

        self.assertEqual(score, 1)

    def test_mid_range_task_combines_all_components(self) -> None:
        """Due in 10h (80), weight 2 (6), 45 min (4.5 -> 5) = 91."""
        score = compute_priority_score(hours_from_now(10), weight=2, estimated_minutes=45, now=FIXED_NOW)

        self.assertEqual(score, 91)

    def test_weight_boost_is_capped_at_thirty(self) -> None:
        self.assertEqual(compute_weight_score(3), 9)
        self.assertEqual(compute_weight_score(10), 30)
        self.assertEqual(compute_weight_score(40), 30)

    def test_effort_boost_is_capped_at_twenty(self) -> None:
        self.assertEqual(compute_effort_score(60), 6)
        self.assertEqual(compute_effort_score(200), 20)
        self.assertEqual(compute_effort_score(600), 20)

    def test_effort_rounds_halves_up(self) -> None:
        """25 minutes is 2.5 points, which rounds up to 3."""
        self.assertEqual(compute_effort_score(25), 3)
        self.assertEqual(round_half_up(2.5), 3)
        self.assertEqual(round_half_up(2.49), 2)

    def test_missing_inputs_use_defaults(self) -> None:
        """No weight -> 0, no effort -> 30 minutes (3 points)."""
        score = compute_priority_score(hours_from_now(50), weight=None, estimated_minutes=None, now=FIXED_NOW)

        self.assertEqual(score, 3)

    def test_non_positive_effort_falls_back_to_default(self) -> None:
        self.assertEqual(compute_effort_score(0), 3)
        self.assertEqual(compute_effort_score(-15), 3)
        self.assertEqual(compute_effort_score("soon"), 3)

    def test_small_overdue_task_outranks_heavy_distant_task(self) -> None:
        overdue_small = compute_priority_score(hours_from_now(-2), weight=0, estimated_minutes=10, now=FIXED_NOW)
        distant_heavy = compute_priority_score(hours_from_now(24 * 14), weight=10, estimated_minutes=300, now=FIXED_NOW)

        self.assertGreater(overdue_small, distant_heavy)

    def test_score_is_bounded_integer(self) -> None:
        cases = [
            (hours_from_now(-100), 100, 10_000),
            (hours_from_now(1000), 0, 1),
            (hours_from_now(20), -50, 30),
            (hours_from_now(3), 1.7, 33),
        ]
        for deadline, weight, minutes in cases:
            score = compute_priority_score(deadline, weight=weight, estimated_minutes=minutes, now=FIXED_NOW)
            self.assertIsInstance(score, int)
            self.assertGreaterEqual(score, 0)
            self.assertLessEqual(score, 100)

    def test_reason_is_fixed_template(self) -> None:
        self.assertEqual(build_priority_reason(), "Still have time - progress steadily")


# ===========================================================================
# PRODUCTIVITY ANALYTICS TESTS
# ===========================================================================


@override_settings(TIME_ZONE="Asia/Bangkok")
class TestProductivityStats(SimpleTestCase):
    """Tests for on-time rate, streaks and backlog."""

    def setUp(self) -> None:
        self.day_zero = datetime.datetime(2024, 1, 1, 3, 0, tzinfo=UTC)

    def _day(self, offset: int) -> datetime.datetime:
        return self.day_zero + datetime.timedelta(days=offset)

    def test_zero_done_tasks_gives_zero_rate(self) -> None:
        tasks = [make_task("a", hours_from_now(5)), make_task("b", hours_from_now(-5))]

        stats = compute_productivity_stats(tasks, {}, now=FIXED_NOW)

        self.assertEqual(stats.on_time_rate, 0)
        self.assertEqual(stats.done_count, 0)

    def test_on_time_rate_rounds_to_whole_percent(self) -> None:
        deadline = hours_from_now(-10)
        tasks = [
            make_task("a", deadline, TaskStatus.SUBMITTED),
            make_task("b", deadline, TaskStatus.PENDING_REVIEW),
            make_task("c", deadline, TaskStatus.SUBMITTED),
        ]
        log = {
            "a": deadline - datetime.timedelta(hours=1),
            "b": deadline,  # exactly on the deadline counts
            "c": deadline + datetime.timedelta(minutes=1),
        }

        stats = compute_productivity_stats(tasks, log, now=FIXED_NOW)

        self.assertEqual(stats.on_time_rate, 67)

    def test_done_task_without_completion_is_not_on_time(self) -> None:
        deadline = hours_from_now(-10)
        tasks = [
            make_task("a", deadline, TaskStatus.SUBMITTED),
            make_task("b", deadline, TaskStatus.SUBMITTED),
        ]
        log = {"a": deadline - datetime.timedelta(hours=2)}

        stats = compute_productivity_stats(tasks, log, now=FIXED_NOW)

        self.assertEqual(stats.on_time_rate, 50)

    def test_streaks_with_gap(self) -> None:
        """On time on D, D+1, D+2 and D+10; today is D+10."""
        offsets = [0, 1, 2, 10]
        tasks = [
            make_task(f"t{o}", self._day(o) + datetime.timedelta(days=1), TaskStatus.SUBMITTED)
            for o in offsets
        ]
        log = {f"t{o}": self._day(o) for o in offsets}
        today = datetime.datetime(2024, 1, 11, 12, 0, tzinfo=UTC)

        stats = compute_productivity_stats(tasks, log, now=today)

        self.assertEqual(stats.longest_streak, 3)
        self.assertEqual(stats.current_streak, 1)

    def test_current_streak_is_zero_when_today_missing(self) -> None:
        tasks = [make_task("a", self._day(5), TaskStatus.SUBMITTED)]
        log = {"a": self._day(0)}
        tomorrow = self._day(1) + datetime.timedelta(hours=6)

        stats = compute_productivity_stats(tasks, log, now=tomorrow)

        self.assertEqual(stats.current_streak, 0)
        self.assertEqual(stats.longest_streak, 1)

    def test_late_completion_neither_extends_nor_counts(self) -> None:
        """Late on D+1 leaves D and D+2 as separate one-day runs."""
        tasks = [
            make_task("a", self._day(1), TaskStatus.SUBMITTED),
            make_task("b", self._day(0), TaskStatus.SUBMITTED),  # finished a day late
            make_task("c", self._day(3), TaskStatus.SUBMITTED),
        ]
        log = {"a": self._day(0), "b": self._day(1), "c": self._day(2)}

        stats = compute_productivity_stats(tasks, log, now=self._day(2))

        self.assertEqual(stats.longest_streak, 1)
        self.assertEqual(stats.current_streak, 1)

    def test_several_completions_on_one_day_count_once(self) -> None:
        tasks = [
            make_task("a", self._day(3), TaskStatus.SUBMITTED),
            make_task("b", self._day(3), TaskStatus.SUBMITTED),
        ]
        log = {"a": self._day(0), "b": self._day(0) + datetime.timedelta(hours=2)}

        stats = compute_productivity_stats(tasks, log, now=self._day(0))

        self.assertEqual(stats.current_streak, 1)
        self.assertEqual(stats.longest_streak, 1)

    def test_completions_of_unknown_tasks_are_ignored(self) -> None:
        tasks = [make_task("a", self._day(3), TaskStatus.SUBMITTED)]
        log = {"ghost": self._day(0)}

        stats = compute_productivity_stats(tasks, log, now=self._day(0))

        self.assertEqual(stats.current_streak, 0)
        self.assertEqual(stats.longest_streak, 0)

    def test_backlog_counts_only_overdue_active_tasks(self) -> None:
        tasks = [
            make_task("late-active", hours_from_now(-1), TaskStatus.IN_PROGRESS),
            make_task("late-returned", hours_from_now(-48), TaskStatus.RETURNED),
            make_task("late-done", hours_from_now(-1), TaskStatus.SUBMITTED),
            make_task("future", hours_from_now(1), TaskStatus.NOT_STARTED),
            make_task("due-now", FIXED_NOW, TaskStatus.NOT_STARTED),
        ]

        stats = compute_productivity_stats(tasks, {}, now=FIXED_NOW)

        self.assertEqual(stats.backlog_count, 2)
        self.assertEqual(stats.active_count, 4)
        self.assertEqual(stats.done_count, 1)
        self.assertEqual(stats.total, 5)

    def test_day_key_uses_local_calendar_date(self) -> None:
        """20:00 UTC on Jan 10 is already Jan 11 in Bangkok."""
        moment = datetime.datetime(2024, 1, 10, 20, 0, tzinfo=UTC)

        self.assertEqual(day_key(moment), datetime.date(2024, 1, 11))

    def test_longest_streak_never_below_current(self) -> None:
        base = datetime.date(2024, 3, 1)
        logs = [
            [],
            [0],
            [0, 1, 2],
            [0, 2, 3, 4, 9],
            [5, 6, 7, 8],
        ]
        for offsets in logs:
            days = {base + datetime.timedelta(days=o) for o in offsets}
            for today_offset in range(0, 11):
                today = base + datetime.timedelta(days=today_offset)
                current = current_streak(days, today)
                longest = longest_streak(days)
                self.assertGreaterEqual(current, 0)
                self.assertGreaterEqual(longest, current, f"{offsets} @ {today_offset}")

    def test_stats_dict_has_profile_keys(self) -> None:
        stats = compute_productivity_stats([], {}, now=FIXED_NOW)

        self.assertEqual(
            set(stats.as_dict()),
            {
                "total",
                "active_count",
                "done_count",
                "backlog_count",
                "on_time_rate",
                "current_streak",
                "longest_streak",
            },
        )
