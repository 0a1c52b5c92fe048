"""
Draft Autosave Task

An explicit, cancellable scheduled task owned by the session. Each tick
calls the session's draft-save callback.

Two ways to drive it:
- `run()` on the asyncio loop in production (real sleeps)
- `advance(now)` from tests, with a ManualClock standing in for time

Cancellation semantics: `stop()` prevents any further tick from firing,
but a tick that is already running is allowed to finish.
"""

import asyncio
from datetime import datetime, timedelta
from typing import Awaitable, Callable, Optional

import structlog

from invoicecraft.clock import Clock, SystemClock

logger = structlog.get_logger(__name__)

TickCallback = Callable[[], Awaitable[None]]


class AutoSaveTask:
    """Fires `on_tick` every `interval_seconds` while started."""

    def __init__(
        self,
        on_tick: TickCallback,
        interval_seconds: float = 6.0,
        clock: Optional[Clock] = None,
    ):
        if interval_seconds <= 0:
            raise ValueError("Autosave interval must be positive")
        self._on_tick = on_tick
        self._interval = timedelta(seconds=interval_seconds)
        self._clock = clock or SystemClock()
        self._next_due: Optional[datetime] = None
        self._in_tick = False
        self._wakeup: Optional[asyncio.Event] = None
        self.ticks_fired = 0

    @property
    def is_running(self) -> bool:
        return self._next_due is not None

    @property
    def next_due(self) -> Optional[datetime]:
        return self._next_due

    @property
    def interval_seconds(self) -> float:
        return self._interval.total_seconds()

    def start(self) -> None:
        """Arm the task. Restarting resets the deadline to one interval from now."""
        self._next_due = self._clock.now() + self._interval
        logger.debug("autosave_started", next_due=self._next_due.isoformat())

    def stop(self) -> None:
        """Disarm immediately. No tick fires after this returns."""
        if self._next_due is None:
            return
        self._next_due = None
        if self._wakeup is not None:
            self._wakeup.set()
        logger.debug("autosave_stopped", in_tick=self._in_tick)

    async def advance(self, now: Optional[datetime] = None, coalesce: bool = False) -> int:
        """
        Fire every tick due at or before `now`.

        With `coalesce`, missed deadlines (a suspended machine, a stalled
        loop) collapse into a single tick and the next deadline is one
        interval after `now`.

        Returns the number of ticks fired. Stops early if a tick (or
        anything it triggers) stops the task.
        """
        now = now or self._clock.now()
        if coalesce:
            if self._next_due is None or self._next_due > now:
                return 0
            missed = (now - self._next_due) // self._interval
            if missed:
                logger.debug("autosave_ticks_skipped", skipped=missed)
            self._next_due = now + self._interval
            await self._fire()
            return 1

        fired = 0
        while self._next_due is not None and self._next_due <= now:
            self._next_due = self._next_due + self._interval
            await self._fire()
            fired += 1
        return fired

    async def run(self) -> None:
        """Production driver: sleep until each deadline, exit once stopped."""
        self._wakeup = asyncio.Event()
        try:
            while self._next_due is not None:
                delay = (self._next_due - self._clock.now()).total_seconds()
                if delay > 0:
                    self._wakeup.clear()
                    try:
                        await asyncio.wait_for(self._wakeup.wait(), timeout=delay)
                    except asyncio.TimeoutError:
                        pass
                    continue
                await self.advance(coalesce=True)
        finally:
            self._wakeup = None

    async def _fire(self) -> None:
        self._in_tick = True
        try:
            await self._on_tick()
            self.ticks_fired += 1
        finally:
            self._in_tick = False
