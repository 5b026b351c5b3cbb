# tasks/priority_engine/status.py

from django.db import models
from django.utils.translation import gettext_lazy as _


class TaskStatus(models.TextChoices):
    """Lifecycle states a student can move an assignment through."""

    NOT_STARTED = "not_started", _("Not started")
    IN_PROGRESS = "in_progress", _("In progress")
    READY_TO_SUBMIT = "ready_to_submit", _("Ready to submit")
    SUBMITTED = "submitted", _("Submitted")
    PENDING_REVIEW = "pending_review", _("Pending review")
    RETURNED = "returned", _("Returned")


# Submitted or waiting on the teacher: excluded from ranking and backlog
DONE_STATUSES = frozenset({TaskStatus.SUBMITTED, TaskStatus.PENDING_REVIEW})

ACTIVE_STATUSES = frozenset(set(TaskStatus) - DONE_STATUSES)


def is_done_status(status) -> bool:
    return status in DONE_STATUSES


def is_active_status(status) -> bool:
    return status not in DONE_STATUSES
