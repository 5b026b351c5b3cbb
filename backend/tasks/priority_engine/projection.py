# tasks/priority_engine/projection.py
"""
Task Projection
===============

Turns assignment records produced by the assignment-authoring side of the app
into the normalized ``Task`` shape consumed by the scorer, the AI ranking and
the API.

Responsibilities:
-----------------
1. Parse the authoring JSON into an ``AssignmentRecord``.
2. Infer the submission type and channel (best effort, never fails).
3. Filter out assignments the viewer is not allowed to see.
4. Compute the local score and reason, then replay any stored override.

Deadlines are validated here: an unparseable deadline raises
``InvalidDeadlineError`` and the assignment is skipped by ``project_tasks``,
so the urgency model only ever sees real datetimes.
"""

from __future__ import annotations

import datetime
import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from .overrides import PriorityOverride, Reason
from .scoring import (
    DEFAULT_WEIGHT,
    build_priority_reason,
    compute_priority_score,
    normalize_effort_minutes,
)
from .status import TaskStatus, is_active_status

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Submission inference tables
# ---------------------------------------------------------------------------

SUBMISSION_FILE = "file"
SUBMISSION_PHOTO = "photo"
SUBMISSION_PAPER = "paper"
SUBMISSION_LINK = "link"

CHANNEL_IN_APP = "in_app"
CHANNEL_CLASSROOM = "classroom"
CHANNEL_IN_PERSON = "in_person"

IMAGE_FORMATS = frozenset({"JPG", "JPEG", "PNG", "HEIC", "WEBP"})
IN_APP_MARKERS = ("dekthai", "in-app", "in app", "แอป")

ROLE_TEACHER = "teacher"
ROLE_STUDENT = "student"
ENROLLMENT_APPROVED = "approved"

UNKNOWN_GRADE_ROOM = "Unknown Room"


class InvalidDeadlineError(ValueError):
    """Raised when an assignment deadline is not a usable ISO 8601 timestamp."""

    pass


# ---------------------------------------------------------------------------
# Inbound records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Deliverable:
    submit_type: str = SUBMISSION_FILE
    accepted_formats: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class AssignmentRecord:
    """Flattened view of an authored assignment; only what projection needs."""

    id: str
    title: str
    deadline: str
    subject: str = ""
    description: str = ""
    assignment_type: str = "individual"
    target_class_codes: List[str] = field(default_factory=list)
    target_grade_rooms: List[str] = field(default_factory=list)
    grade_weight_percent: Optional[float] = None
    full_score: Optional[float] = None
    estimated_duration_minutes: Optional[float] = None
    deliverables: List[Deliverable] = field(default_factory=list)
    channel: str = ""
    resources: List[str] = field(default_factory=list)
    rubric_rows: List[str] = field(default_factory=list)
    question_channel: Optional[str] = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "AssignmentRecord":
        info = payload.get("assignmentInfo") or {}
        submission = payload.get("submission") or {}
        brief = payload.get("taskBrief") or {}
        rubric = payload.get("rubric") or {}
        qa = payload.get("qa") or {}

        deliverables = [
            Deliverable(
                submit_type=item.get("submitType") or SUBMISSION_FILE,
                accepted_formats=list(item.get("acceptedFormats") or []),
            )
            for item in (payload.get("deliverables") or {}).get("items") or []
        ]

        return cls(
            id=str(payload["id"]),
            title=info.get("title", ""),
            subject=info.get("subject", ""),
            description=info.get("shortDescription") or "",
            assignment_type=info.get("assignmentType") or "individual",
            target_class_codes=list(info.get("targetClassCodes") or []),
            target_grade_rooms=list(info.get("targetGradeRooms") or []),
            grade_weight_percent=info.get("gradeWeightPercent"),
            full_score=info.get("fullScore"),
            estimated_duration_minutes=info.get("estimatedDurationMinutes"),
            deliverables=deliverables,
            channel=submission.get("channel") or "",
            deadline=submission.get("deadline") or "",
            resources=[r.get("label", "") for r in brief.get("resources") or []],
            rubric_rows=[
                f"{row.get('title', '')} ({row.get('maxScore', '')})"
                for row in rubric.get("rows") or []
            ],
            question_channel=qa.get("questionChannel"),
        )

    @classmethod
    def from_teacher_assignment(
        cls,
        payload: Mapping[str, Any],
        grade_room: Optional[str] = None,
    ) -> "AssignmentRecord":
        """
        Expands the short record a teacher creates from the classroom screen
        into a full assignment with the app's standard defaults.
        """
        teacher_name = payload.get("teacherName", "")
        return cls(
            id=str(payload["id"]),
            title=payload.get("title", ""),
            subject=payload.get("subject", ""),
            description=f"Assigned by {teacher_name}",
            assignment_type="individual",
            target_class_codes=[payload.get("classCode", "")],
            target_grade_rooms=[grade_room or UNKNOWN_GRADE_ROOM],
            grade_weight_percent=10,
            full_score=100,
            estimated_duration_minutes=60,
            deliverables=[
                Deliverable(
                    submit_type=SUBMISSION_FILE,
                    accepted_formats=["PDF", "DOCX", "PNG", "JPG"],
                )
            ],
            channel="In DekThai",
            deadline=payload.get("deadline") or "",
            resources=[f"Teacher: {teacher_name}"],
            rubric_rows=["Completion (100)"],
            question_channel=f"Teacher {teacher_name}",
        )

    @property
    def importance_weight(self) -> float:
        if self.grade_weight_percent is not None:
            return self.grade_weight_percent
        if self.full_score is not None:
            return self.full_score
        return DEFAULT_WEIGHT


@dataclass(frozen=True)
class Viewer:
    """The subset of a user account that decides assignment visibility."""

    id: Any
    role: str = ROLE_STUDENT
    grade: str = ""
    class_code: Optional[str] = None
    enrollment_status: str = "none"
    managed_class_codes: List[str] = field(default_factory=list)
    assigned_class_codes: List[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Outbound task shape
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Task:
    id: str
    title: str
    subject: str
    deadline: datetime.datetime
    estimated_minutes: int
    weight: float
    status: TaskStatus
    is_group: bool
    priority_score: int
    priority_reason: Reason
    submission_type: str = SUBMISSION_FILE
    channel: str = CHANNEL_IN_PERSON
    description: str = ""
    attachments: List[str] = field(default_factory=list)
    rubric: Optional[str] = None
    class_code: Optional[str] = None
    assigned_by: Optional[str] = None
    returned_reason: Optional[str] = None
    priority_level: Optional[str] = None
    next_actions: List[str] = field(default_factory=list)
    assumptions: List[str] = field(default_factory=list)

    @property
    def is_active(self) -> bool:
        return is_active_status(self.status)


# ---------------------------------------------------------------------------
# Inference helpers
# ---------------------------------------------------------------------------


def parse_deadline(value) -> datetime.datetime:
    """
    Parses an ISO 8601 deadline into an aware datetime.

    Date-only values resolve to midnight; naive values are interpreted in the
    default timezone.

    Raises:
        InvalidDeadlineError: if the value cannot be parsed.
    """
    if isinstance(value, datetime.datetime):
        parsed = value
    else:
        text = str(value or "").strip()
        try:
            parsed = parse_datetime(text)
            if parsed is None:
                day = parse_date(text)
                parsed = datetime.datetime.combine(day, datetime.time.min) if day else None
        except ValueError as e:
            raise InvalidDeadlineError(f"Invalid deadline {value!r}: {e}") from e
        if parsed is None:
            raise InvalidDeadlineError(f"Invalid deadline {value!r}")

    if timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed)
    return parsed


def detect_submission_type(assignment: AssignmentRecord) -> str:
    if not assignment.deliverables:
        return SUBMISSION_FILE
    first = assignment.deliverables[0]
    if first.submit_type == "link":
        return SUBMISSION_LINK
    if first.submit_type == "text":
        return SUBMISSION_PAPER
    formats = {str(f).upper().lstrip(".") for f in first.accepted_formats}
    if formats & IMAGE_FORMATS:
        return SUBMISSION_PHOTO
    return SUBMISSION_FILE


def map_channel(channel: Optional[str]) -> str:
    normalized = (channel or "").lower()
    if "classroom" in normalized:
        return CHANNEL_CLASSROOM
    if any(marker in normalized for marker in IN_APP_MARKERS):
        return CHANNEL_IN_APP
    return CHANNEL_IN_PERSON


def can_view_assignment(viewer: Optional[Viewer], assignment: AssignmentRecord) -> bool:
    if viewer is None:
        return False

    targets = {code.upper() for code in assignment.target_class_codes if code}

    if viewer.role == ROLE_TEACHER:
        assigned = {
            code.upper()
            for code in [*viewer.managed_class_codes, *viewer.assigned_class_codes]
            if code
        }
        return bool(targets & assigned)

    if viewer.enrollment_status != ENROLLMENT_APPROVED or not viewer.class_code:
        return False
    by_code = viewer.class_code.upper() in targets
    by_grade = viewer.grade in assignment.target_grade_rooms
    return by_code or by_grade


# ---------------------------------------------------------------------------
# Projection
# ---------------------------------------------------------------------------


def apply_override(task: Task, override: Optional[PriorityOverride]) -> Task:
    """Replaces only the fields the override carries; the local default stays otherwise."""
    if override is None:
        return task
    changes: Dict[str, Any] = {}
    if override.priority_score is not None:
        changes["priority_score"] = override.priority_score
    if override.priority_reason is not None:
        changes["priority_reason"] = override.priority_reason
    if override.priority_level is not None:
        changes["priority_level"] = override.priority_level
    if override.next_actions:
        changes["next_actions"] = list(override.next_actions)
    if override.assumptions:
        changes["assumptions"] = list(override.assumptions)
    return replace(task, **changes) if changes else task


def project_assignment(
    assignment: AssignmentRecord,
    status: Optional[str] = None,
    override: Optional[PriorityOverride] = None,
    now: Optional[datetime.datetime] = None,
) -> Task:
    deadline = parse_deadline(assignment.deadline)
    weight = assignment.importance_weight
    estimated_minutes = normalize_effort_minutes(assignment.estimated_duration_minutes)

    task = Task(
        id=assignment.id,
        title=assignment.title,
        subject=assignment.subject,
        deadline=deadline,
        estimated_minutes=estimated_minutes,
        weight=weight,
        status=TaskStatus(status) if status else TaskStatus.NOT_STARTED,
        is_group=assignment.assignment_type == "group",
        priority_score=compute_priority_score(deadline, weight, estimated_minutes, now),
        priority_reason=build_priority_reason(),
        submission_type=detect_submission_type(assignment),
        channel=map_channel(assignment.channel),
        description=assignment.description,
        attachments=[label for label in assignment.resources if label],
        rubric=", ".join(assignment.rubric_rows) or None,
        class_code=assignment.target_class_codes[0] if assignment.target_class_codes else None,
        assigned_by=assignment.question_channel or next(iter(assignment.resources), None) or None,
    )
    return apply_override(task, override)


def project_tasks(
    viewer: Optional[Viewer],
    assignments: Iterable[AssignmentRecord],
    statuses: Optional[Mapping[str, str]] = None,
    overrides: Optional[Mapping[str, PriorityOverride]] = None,
    now: Optional[datetime.datetime] = None,
) -> List[Task]:
    """
    Projects every assignment the viewer may see into a Task.

    Assignments with an invalid deadline are logged and skipped.
    """
    statuses = statuses or {}
    overrides = overrides or {}
    tasks: List[Task] = []

    for assignment in assignments:
        if not can_view_assignment(viewer, assignment):
            continue
        try:
            tasks.append(
                project_assignment(
                    assignment,
                    status=statuses.get(assignment.id),
                    override=overrides.get(assignment.id),
                    now=now,
                )
            )
        except InvalidDeadlineError as e:
            logger.warning(f"Skipping assignment {assignment.id}: {e}")

    return tasks


def sort_by_priority(tasks: Sequence[Task]) -> List[Task]:
    """Active tasks only, highest score first."""
    return sorted((t for t in tasks if t.is_active), key=lambda t: t.priority_score, reverse=True)
