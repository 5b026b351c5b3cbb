# tasks/repositories.py

import datetime
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from django.conf import settings

from .models import PriorityOverride as PriorityOverrideRecord, TaskProgress
from .priority_engine.overrides import PriorityOverride
from .priority_engine.projection import AssignmentRecord

logger = logging.getLogger(__name__)


class DatabaseOverrideRepository:
    """``OverrideRepository`` backed by the ``PriorityOverride`` table."""

    @staticmethod
    def _to_value(record: PriorityOverrideRecord) -> PriorityOverride:
        return PriorityOverride(
            priority_score=record.priority_score,
            priority_reason=record.priority_reason,
            priority_level=record.priority_level or None,
            next_actions=list(record.next_actions or []),
            assumptions=list(record.assumptions or []),
        )

    def get(self, user_id, task_id: str) -> Optional[PriorityOverride]:
        record = PriorityOverrideRecord.objects.filter(user_id=user_id, task_id=task_id).first()
        return self._to_value(record) if record else None

    @staticmethod
    def _fit_level(task_id: str, level) -> str:
        text = str(level) if level else ""
        max_length = PriorityOverrideRecord._meta.get_field('priority_level').max_length
        if len(text) > max_length:
            logger.warning(
                f"Priority level for task {task_id} is longer than {max_length} chars; "
                f"storing {text[:max_length]!r} instead of {text!r}"
            )
            text = text[:max_length]
        return text

    def set(self, user_id, task_id: str, override: PriorityOverride) -> None:
        PriorityOverrideRecord.objects.update_or_create(
            user_id=user_id,
            task_id=task_id,
            defaults={
                'priority_score': override.priority_score,
                'priority_reason': override.priority_reason,
                'priority_level': self._fit_level(task_id, override.priority_level),
                'next_actions': list(override.next_actions),
                'assumptions': list(override.assumptions),
            },
        )

    def get_all(self, user_id) -> Dict[str, PriorityOverride]:
        return {
            record.task_id: self._to_value(record)
            for record in PriorityOverrideRecord.objects.filter(user_id=user_id)
        }


class ProgressRepository:
    """Per-user task statuses and the completion log derived from them."""

    def statuses(self, user_id) -> Dict[str, str]:
        return dict(TaskProgress.objects.filter(user_id=user_id).values_list('task_id', 'status'))

    def completion_log(self, user_id) -> Dict[str, datetime.datetime]:
        rows = TaskProgress.objects.filter(user_id=user_id, completed_at__isnull=False)
        return dict(rows.values_list('task_id', 'completed_at'))


class JsonFileAssignmentRepository:
    """
    Reads assignment records from the JSON feed published by the authoring side.

    The feed is either a bare list of assignments or an object with
    ``assignments`` plus optional ``teacher_assignments`` and a
    ``classrooms`` map of class code -> grade room.
    """

    def __init__(self, path: Optional[str] = None):
        self.path = Path(path or getattr(settings, 'ASSIGNMENTS_FEED_PATH', ''))

    def _read_payload(self) -> Any:
        try:
            with self.path.open(encoding='utf-8') as fh:
                return json.load(fh)
        except FileNotFoundError:
            logger.warning(f"Assignment feed not found at {self.path}")
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Assignment feed at {self.path} is unreadable: {e}")
        return []

    def list_assignments(self) -> List[AssignmentRecord]:
        payload = self._read_payload()
        if isinstance(payload, list):
            authored, teacher_made, classrooms = payload, [], {}
        elif isinstance(payload, dict):
            authored = payload.get('assignments') or []
            teacher_made = payload.get('teacher_assignments') or []
            classrooms = {str(k).upper(): v for k, v in (payload.get('classrooms') or {}).items()}
        else:
            return []

        records = []
        for item in authored:
            try:
                records.append(AssignmentRecord.from_dict(item))
            except (KeyError, TypeError, AttributeError) as e:
                logger.warning(f"Skipping malformed assignment record: {e}")
        for item in teacher_made:
            try:
                grade_room = classrooms.get(str(item.get('classCode', '')).upper())
                records.append(AssignmentRecord.from_teacher_assignment(item, grade_room))
            except (KeyError, TypeError, AttributeError) as e:
                logger.warning(f"Skipping malformed teacher assignment: {e}")
        return records


def get_assignment_repository() -> JsonFileAssignmentRepository:
    return JsonFileAssignmentRepository()
