# tasks/priority_engine/overrides.py

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Protocol, Tuple, Union

Reason = Union[str, List[str]]


@dataclass(frozen=True)
class PriorityOverride:
    """
    Last AI ranking applied to a task, replayed on top of the local default
    every time the task is projected.
    """

    priority_score: Optional[int] = None
    priority_reason: Optional[Reason] = None
    priority_level: Optional[str] = None
    next_actions: List[str] = field(default_factory=list)
    assumptions: List[str] = field(default_factory=list)


class OverrideRepository(Protocol):
    """Storage seam for overrides, keyed by (user, task id)."""

    def get(self, user_id, task_id: str) -> Optional[PriorityOverride]:
        ...

    def set(self, user_id, task_id: str, override: PriorityOverride) -> None:
        ...

    def get_all(self, user_id) -> Dict[str, PriorityOverride]:
        ...


class InMemoryOverrideRepository:
    """Process-local repository; last write wins."""

    def __init__(self) -> None:
        self._items: Dict[Tuple[str, str], PriorityOverride] = {}

    def get(self, user_id, task_id: str) -> Optional[PriorityOverride]:
        return self._items.get((str(user_id), task_id))

    def set(self, user_id, task_id: str, override: PriorityOverride) -> None:
        self._items[(str(user_id), task_id)] = override

    def get_all(self, user_id) -> Dict[str, PriorityOverride]:
        key = str(user_id)
        return {task_id: value for (owner, task_id), value in self._items.items() if owner == key}
