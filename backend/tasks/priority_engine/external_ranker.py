# tasks/priority_engine/external_ranker.py
"""
External Smart Priority Ranker
==============================

Client for the remote Smart Priority ranking endpoint.

This module is a pure service with NO Django ORM dependencies. It builds the
batch request, performs the single HTTP POST and turns the response into
``RankingResult`` values. The prompt and model behind the endpoint are not
this module's concern.

Design Principles:
------------------
1. One request per ranking: every active task goes into a single batch
2. One error condition: any transport or parse failure raises ``RankingError``
3. No retries: the caller decides whether to try again
4. Pass-through results: scores and levels are returned as received
5. Fail-Safe Initialization: never crashes on missing configuration

Error Codes:
------------
- SCORER_NOT_CONFIGURED: endpoint or API key missing
- TIMEOUT: no response within the configured timeout
- CONNECTION_ERROR: endpoint unreachable
- API_ERROR_<status>: non-2xx response
- JSON_PARSE_ERROR: body is not valid JSON
- VALIDATION_ERROR: body is JSON but has no ``results`` list
- RANKING_IN_PROGRESS: a ranking for the same user is still running
- UNEXPECTED_ERROR: anything else
"""

from __future__ import annotations

import datetime
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional

import requests
from django.conf import settings
from django.utils import timezone

from .projection import Task

logger = logging.getLogger(__name__)

UNEXPECTED_ERROR = "UNEXPECTED_ERROR"
RANKING_IN_PROGRESS = "RANKING_IN_PROGRESS"


# ---------------------------------------------------------------------------
# Custom Exceptions
# ---------------------------------------------------------------------------


class RankingError(Exception):
    """Single error condition surfaced to callers of the ranking endpoint."""

    def __init__(self, message: str, error_code: str = UNEXPECTED_ERROR) -> None:
        super().__init__(message)
        self.error_code = error_code


class RankingNotConfiguredError(RankingError):
    """Raised when the ranker is used but not properly configured."""

    pass


class RankingUnavailableError(RankingError):
    """Raised when the ranking endpoint cannot produce a usable response."""

    pass


class RankingInProgressError(RankingError):
    """Raised when a ranking for the same user is already running; the request is dropped."""

    def __init__(self, message: str = "A Smart Priority ranking is already running") -> None:
        super().__init__(message, error_code=RANKING_IN_PROGRESS)


# ---------------------------------------------------------------------------
# Contract types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RankingResult:
    task_id: str
    priority_score: Any = None
    priority_level: Any = None
    reason: Optional[List[str]] = None
    next_actions: List[str] = field(default_factory=list)
    assumptions: List[str] = field(default_factory=list)

    @classmethod
    def from_payload(cls, payload: Any) -> Optional["RankingResult"]:
        """Returns None for entries that do not even name a task."""
        if not isinstance(payload, Mapping):
            return None
        task_id = payload.get("task_id")
        if task_id is None or task_id == "":
            return None
        return cls(
            task_id=str(task_id),
            priority_score=payload.get("priority_score"),
            priority_level=payload.get("priority_level"),
            reason=_optional_string_list(payload.get("reason")),
            next_actions=_as_string_list(payload.get("next_actions")),
            assumptions=_as_string_list(payload.get("assumptions")),
        )


def _as_string_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value]
    return [str(value)]


def _optional_string_list(value: Any) -> Optional[List[str]]:
    """None when the key is absent or null; an explicit empty list stays empty."""
    if value is None:
        return None
    return _as_string_list(value)


def build_ranking_request(
    tasks: Iterable[Task],
    now: Optional[datetime.datetime] = None,
) -> Dict[str, Any]:
    """
    Batches every active task into one request body.

    Inactive (submitted / under review) tasks are left out.
    """
    if now is None:
        now = timezone.now()
    return {
        "user_context": {"now": now.isoformat()},
        "tasks": [
            {
                "task_id": task.id,
                "title": task.title,
                "due": task.deadline.isoformat(),
                "effort_min": task.estimated_minutes,
                "importance": task.weight,
                "status": str(task.status),
                "subject": task.subject or None,
                "is_group": task.is_group,
                "returned_reason": task.returned_reason,
            }
            for task in tasks
            if task.is_active
        ],
    }


# ---------------------------------------------------------------------------
# Main Service Class
# ---------------------------------------------------------------------------


class SmartPriorityClient:
    """
    HTTP client for the Smart Priority ranking endpoint.

    The class uses DEFERRED INITIALIZATION: missing configuration does not
    raise in ``__init__``; it is recorded in ``configuration_error`` and
    surfaced as ``RankingNotConfiguredError`` when ``rank`` is called.

    Attributes:
        endpoint (str | None): Full URL of the ranking endpoint.
        api_key (str | None): Bearer token sent with every request.
        timeout (float): Seconds to wait for the endpoint.
        is_configured (bool): Whether the client is ready for use.
        configuration_error (str | None): Description of configuration issue, if any.
    """

    DEFAULT_TIMEOUT: float = 20.0  # Seconds

    def __init__(
        self,
        endpoint: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.timeout: float = float(
            timeout or getattr(settings, "SMART_PRIORITY_TIMEOUT", None) or self.DEFAULT_TIMEOUT
        )
        self.session = session or requests.Session()

        self.endpoint: Optional[str] = None
        self.api_key: Optional[str] = None
        self.is_configured: bool = False
        self.configuration_error: Optional[str] = None

        self._configure(endpoint, api_key)

    def _configure(self, endpoint: Optional[str], api_key: Optional[str]) -> None:
        resolved_endpoint = endpoint or getattr(settings, "SMART_PRIORITY_ENDPOINT", None) or ""
        resolved_key = api_key or getattr(settings, "SMART_PRIORITY_API_KEY", None) or ""

        if not resolved_endpoint:
            self.configuration_error = (
                "SMART_PRIORITY_ENDPOINT is not configured. "
                "Set the SMART_PRIORITY_ENDPOINT environment variable or Django setting."
            )
            logger.warning(f"SmartPriorityClient: {self.configuration_error}")
            return

        if not resolved_key:
            self.configuration_error = (
                "SMART_PRIORITY_API_KEY is not configured. "
                "Set the SMART_PRIORITY_API_KEY environment variable or Django setting."
            )
            logger.warning(f"SmartPriorityClient: {self.configuration_error}")
            return

        self.endpoint = resolved_endpoint
        self.api_key = resolved_key
        self.is_configured = True
        self.configuration_error = None
        logger.info(f"SmartPriorityClient configured for {self.endpoint}")

    def rank(self, request_body: Mapping[str, Any]) -> List[RankingResult]:
        """
        Sends one batch ranking request.

        Args:
            request_body: Output of ``build_ranking_request``.

        Returns:
            Results that carry a task id, in response order (duplicates kept).

        Raises:
            RankingNotConfiguredError: endpoint or key missing.
            RankingUnavailableError: transport, status or parse failure.
        """
        if not self.is_configured:
            raise RankingNotConfiguredError(
                self.configuration_error or "Smart Priority ranker not available",
                error_code="SCORER_NOT_CONFIGURED",
            )

        task_count = len(request_body.get("tasks") or [])
        logger.debug(f"SmartPriorityClient: ranking {task_count} tasks")

        try:
            response = self.session.post(
                self.endpoint,
                json=dict(request_body),
                headers={
                    "Content-Type": "application/json",
                    "Authorization": f"Bearer {self.api_key}",
                },
                timeout=self.timeout,
            )
        except requests.Timeout as e:
            logger.warning(f"Smart Priority request timed out: {e}")
            raise RankingUnavailableError(
                f"Smart Priority request timed out after {self.timeout:g}s",
                error_code="TIMEOUT",
            ) from e
        except requests.ConnectionError as e:
            logger.error(f"Smart Priority connection error: {e}")
            raise RankingUnavailableError(
                "Could not connect to the Smart Priority service",
                error_code="CONNECTION_ERROR",
            ) from e
        except requests.RequestException as e:
            logger.error(f"Smart Priority request failed: {e}")
            raise RankingUnavailableError(
                f"Smart Priority request failed: {type(e).__name__}",
                error_code="REQUEST_ERROR",
            ) from e

        raw = response.text
        if not response.ok:
            logger.error(f"Smart Priority API error: {response.status_code} - {raw[:200]}")
            raise RankingUnavailableError(
                f"SmartPriority API error ({response.status_code}): {raw}",
                error_code=f"API_ERROR_{response.status_code}",
            )

        results = self._parse_results(raw)
        logger.info(f"SmartPriorityClient: received {len(results)} results for {task_count} tasks")
        return results

    def _parse_results(self, raw: str) -> List[RankingResult]:
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error(f"Failed to decode ranking response as JSON: {e}")
            raise RankingUnavailableError(
                "Smart Priority returned an invalid JSON response",
                error_code="JSON_PARSE_ERROR",
            ) from e

        if not isinstance(data, Mapping) or not isinstance(data.get("results"), list):
            logger.error("Ranking response is missing the results list")
            raise RankingUnavailableError(
                "Smart Priority response is missing 'results'",
                error_code="VALIDATION_ERROR",
            )

        results = []
        for entry in data["results"]:
            result = RankingResult.from_payload(entry)
            if result is None:
                logger.debug(f"Dropping ranking entry without task_id: {entry!r}")
                continue
            results.append(result)
        return results

    def health_check(self) -> Dict[str, Any]:
        return {
            "is_configured": self.is_configured,
            "endpoint": self.endpoint,
            "timeout": self.timeout,
            "configuration_error": self.configuration_error,
        }
