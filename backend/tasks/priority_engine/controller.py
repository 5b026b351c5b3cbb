# tasks/priority_engine/controller.py
"""
Invocation Controller
=====================

Debounces "rank now" requests and keeps at most one ranking call in flight.

States:
-------
- IDLE: nothing scheduled, nothing running
- SCHEDULED: a debounce timer is pending
- IN_FLIGHT: a ranking call is running (a new timer may also be pending)

Transitions:
------------
- request_rank: cancel the pending timer (if any) and schedule a new one
- timer_fired: start the call, or drop the request if one is already in flight
- call completed (ok or error): clear the in-flight flag unconditionally

Dropped requests are not queued. Timers and task spawning go through an
injected scheduler so the policy can be driven without real time.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from typing import Any, Awaitable, Callable, Optional, Protocol

from django.conf import settings

from .external_ranker import UNEXPECTED_ERROR, RankingError

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 0.5


class ControllerState(str, enum.Enum):
    IDLE = "idle"
    SCHEDULED = "scheduled"
    IN_FLIGHT = "in_flight"


class TimerHandle(Protocol):
    def cancel(self) -> None:
        ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        ...

    def spawn(self, coro: Awaitable[Any]) -> Any:
        ...


class AsyncioScheduler:
    """Scheduler backed by the running asyncio event loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop or asyncio.get_running_loop()

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return self.loop.call_later(delay, callback)

    def spawn(self, coro: Awaitable[Any]) -> asyncio.Task:
        return self.loop.create_task(coro)


class RankingController:
    """
    Single-slot, drop-if-busy wrapper around an async ranking call.

    Args:
        rank_now: Zero-argument coroutine function performing one ranking.
        scheduler: Provides ``call_later`` and ``spawn``.
        delay: Debounce delay in seconds; defaults to
            ``settings.SMART_PRIORITY_DEBOUNCE_SECONDS`` (0.5).
    """

    def __init__(
        self,
        rank_now: Callable[[], Awaitable[Any]],
        scheduler: Optional[Scheduler] = None,
        delay: Optional[float] = None,
    ) -> None:
        self._rank_now = rank_now
        self._scheduler = scheduler or AsyncioScheduler()
        if delay is None:
            delay = getattr(settings, "SMART_PRIORITY_DEBOUNCE_SECONDS", DEFAULT_DEBOUNCE_SECONDS)
        self.delay = float(delay)

        self._timer: Optional[TimerHandle] = None
        self._task: Any = None
        self._in_flight = False
        self.last_error: Optional[str] = None
        self.last_error_code: Optional[str] = None
        self.last_result: Any = None
        self.dropped_requests = 0

    @property
    def state(self) -> ControllerState:
        if self._in_flight:
            return ControllerState.IN_FLIGHT
        if self._timer is not None:
            return ControllerState.SCHEDULED
        return ControllerState.IDLE

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @property
    def has_pending_timer(self) -> bool:
        return self._timer is not None

    def request_rank(self) -> None:
        self.last_error = None
        self.last_error_code = None
        if self._timer is not None:
            self._timer.cancel()
        self._timer = self._scheduler.call_later(self.delay, self.timer_fired)

    def timer_fired(self) -> bool:
        """Returns True when a call was started, False when the request was dropped."""
        self._timer = None
        if self._in_flight:
            self.dropped_requests += 1
            logger.debug("Ranking already in flight; dropping request")
            return False

        self._in_flight = True
        self._task = self._scheduler.spawn(self._run())
        return True

    @property
    def task(self) -> Any:
        """Handle of the most recently spawned ranking call, as returned by the scheduler."""
        return self._task

    async def _run(self) -> None:
        try:
            self.last_result = await self._rank_now()
        except RankingError as e:
            self.last_error = str(e)
            self.last_error_code = e.error_code
            logger.warning(f"Smart Priority ranking failed ({e.error_code}): {e}")
        except Exception as e:
            self.last_error = str(e) or type(e).__name__
            self.last_error_code = UNEXPECTED_ERROR
            logger.exception(f"Smart Priority ranking crashed: {e}")
        finally:
            self._in_flight = False
