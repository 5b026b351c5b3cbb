# tasks/tests/test_repositories.py
"""
Repository Tests
================

ORM-backed override storage: round trips, last-write-wins, and how
oversized AI values are stored.
"""

from __future__ import annotations

from django.contrib.auth import get_user_model
from django.test import TestCase

from tasks.models import PriorityOverride as PriorityOverrideRecord
from tasks.priority_engine.overrides import PriorityOverride
from tasks.repositories import DatabaseOverrideRepository

User = get_user_model()


class TestDatabaseOverrideRepository(TestCase):

    def setUp(self) -> None:
        self.user = User.objects.create_user(email="repo@example.com", password="pw-12345678")
        self.repository = DatabaseOverrideRepository()

    def test_round_trip(self) -> None:
        override = PriorityOverride(
            priority_score=77,
            priority_reason=["Exam Friday"],
            priority_level="high",
            next_actions=["Review notes"],
            assumptions=["Two hours free tonight"],
        )

        self.repository.set(self.user.pk, "t1", override)

        self.assertEqual(self.repository.get(self.user.pk, "t1"), override)
        self.assertEqual(self.repository.get_all(self.user.pk), {"t1": override})

    def test_last_write_wins(self) -> None:
        self.repository.set(self.user.pk, "t1", PriorityOverride(priority_score=10))
        self.repository.set(self.user.pk, "t1", PriorityOverride(priority_score=90))

        self.assertEqual(PriorityOverrideRecord.objects.count(), 1)
        self.assertEqual(self.repository.get(self.user.pk, "t1").priority_score, 90)

    def test_long_priority_level_is_truncated_with_warning(self) -> None:
        level = "extremely-high-urgent"

        with self.assertLogs("tasks.repositories", level="WARNING") as logs:
            self.repository.set(self.user.pk, "t1", PriorityOverride(priority_score=95, priority_level=level))

        self.assertEqual(self.repository.get(self.user.pk, "t1").priority_level, level[:16])
        self.assertIn("t1", logs.output[0])
        self.assertIn(level, logs.output[0])

    def test_short_priority_level_is_stored_silently(self) -> None:
        with self.assertNoLogs("tasks.repositories", level="WARNING"):
            self.repository.set(self.user.pk, "t1", PriorityOverride(priority_score=50, priority_level="medium"))

        self.assertEqual(self.repository.get(self.user.pk, "t1").priority_level, "medium")
