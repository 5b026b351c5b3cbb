from django.db import models
from django.conf import settings
from django.utils.translation import gettext_lazy as _

from .priority_engine.status import TaskStatus


class TaskProgress(models.Model):
    """
    Per-user progress on an assignment: its lifecycle status and, while the
    task sits in a done status, the timestamp of its last completion.
    """
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='task_progress',
        verbose_name=_("user")
    )

    # Assignment ids come from the authoring feed, not from this database
    task_id = models.CharField(max_length=255, verbose_name=_("task id"))

    status = models.CharField(
        max_length=32,
        choices=TaskStatus.choices,
        default=TaskStatus.NOT_STARTED,
        verbose_name=_("status")
    )
    completed_at = models.DateTimeField(
        null=True, blank=True,
        verbose_name=_("completed at"),
        help_text=_("Set the first time the task enters a done status; cleared on revert.")
    )
    updated_at = models.DateTimeField(auto_now=True, verbose_name=_("updated at"))

    class Meta:
        verbose_name = _("Task progress")
        verbose_name_plural = _("Task progress")
        constraints = [
            models.UniqueConstraint(fields=['user', 'task_id'], name='unique_progress_per_user_task'),
        ]

    def __str__(self):
        return f"{self.user} / {self.task_id}: {self.status}"


class PriorityOverride(models.Model):
    """
    Last AI ranking applied to a task for a user. Replayed over the local
    score every time tasks are loaded; never expires.
    """
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='priority_overrides',
        verbose_name=_("user")
    )
    task_id = models.CharField(max_length=255, verbose_name=_("task id"))

    priority_score = models.PositiveSmallIntegerField(
        null=True, blank=True,
        verbose_name=_("priority score"),
        help_text=_("AI-calculated score for prioritization (0-100).")
    )
    # A plain string or a list of strings
    priority_reason = models.JSONField(null=True, blank=True, verbose_name=_("priority reason"))
    priority_level = models.CharField(max_length=16, blank=True, default="", verbose_name=_("priority level"))
    next_actions = models.JSONField(default=list, blank=True, verbose_name=_("next actions"))
    assumptions = models.JSONField(default=list, blank=True, verbose_name=_("assumptions"))
    updated_at = models.DateTimeField(auto_now=True, verbose_name=_("updated at"))

    class Meta:
        verbose_name = _("Priority override")
        verbose_name_plural = _("Priority overrides")
        constraints = [
            models.UniqueConstraint(fields=['user', 'task_id'], name='unique_override_per_user_task'),
        ]

    def __str__(self):
        return f"Override for {self.user} / {self.task_id}: {self.priority_score}"
