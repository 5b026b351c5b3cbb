# tasks/signals.py
"""
Change notifications for a user's task collection.

Subscribers connect to ``tasks_changed`` instead of polling:

    from tasks.signals import tasks_changed

    @receiver(tasks_changed)
    def on_tasks_changed(sender, user_id, reason, task_ids, **kwargs):
        ...

``reason`` is one of REASON_STATUS or REASON_PRIORITY.
"""

import logging

from django.dispatch import Signal

logger = logging.getLogger(__name__)

REASON_STATUS = "status"
REASON_PRIORITY = "priority"

# Sent with: user_id, reason, task_ids
tasks_changed = Signal()


def notify_tasks_changed(sender, user_id, reason: str, task_ids) -> None:
    task_ids = list(task_ids)
    logger.debug(f"tasks_changed for user {user_id} ({reason}): {task_ids}")
    tasks_changed.send(sender=sender, user_id=user_id, reason=reason, task_ids=task_ids)
