"""Interval scheduler: runs the pipeline every N days.

State machine per tick:

  idle → due_check → triggered → idle     (interval elapsed)
  idle → due_check → idle                 (too soon)

The last-run time comes from the database (last completed session), so a
restart never causes an early run and the check can fire as often as wanted.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class SchedulerState(str, Enum):
    IDLE = "idle"
    DUE_CHECK = "due_check"
    TRIGGERED = "triggered"
    STOPPED = "stopped"


def is_due(last_run: datetime | None, interval_days: float, now: datetime) -> bool:
    """True when there is no previous run or the interval has fully elapsed."""
    if last_run is None:
        return True
    return now - last_run >= timedelta(days=interval_days)


class IntervalScheduler:
    """Calls ``trigger`` whenever ``interval_days`` have passed since ``last_run()``.

    Usage::

        scheduler = IntervalScheduler(run_once, lambda: get_last_session_date(conn), 3.0)
        await scheduler.run_forever()
    """

    def __init__(
        self,
        trigger: Callable[[], Awaitable[Any]],
        last_run: Callable[[], datetime | None],
        interval_days: float,
        *,
        check_interval_s: float = 3600.0,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._trigger = trigger
        self._last_run = last_run
        self._interval_days = interval_days
        self._check_interval_s = check_interval_s
        self._clock = clock
        self._state = SchedulerState.IDLE
        self._stop_event = asyncio.Event()
        self._last_triggered: datetime | None = None

    @property
    def state(self) -> SchedulerState:
        return self._state

    async def tick(self) -> bool:
        """Run one due-check. Returns True if the trigger was invoked.

        Trigger errors are logged; the scheduler stays usable.
        """
        if self._state is SchedulerState.STOPPED:
            return False

        self._state = SchedulerState.DUE_CHECK
        now = self._clock()
        try:
            last = self._last_run()
        except Exception:
            logger.exception("Could not read last run time, assuming due")
            last = None

        if not is_due(last, self._interval_days, now):
            logger.debug("Not due yet (last run %s)", last)
            self._state = SchedulerState.IDLE
            return False

        self._state = SchedulerState.TRIGGERED
        self._last_triggered = now
        logger.info("Scheduled run triggered")
        try:
            await self._trigger()
        except Exception:
            logger.exception("Scheduled run failed")
        finally:
            if self._state is not SchedulerState.STOPPED:
                self._state = SchedulerState.IDLE
        return True

    async def run_forever(self) -> None:
        """Tick, then wait ``check_interval_s``, until stop() is called."""
        logger.info(
            "Scheduler started: every %.1f days, checking every %.0fs",
            self._interval_days, self._check_interval_s,
        )
        while self._state is not SchedulerState.STOPPED:
            await self.tick()
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self._check_interval_s)
            except asyncio.TimeoutError:
                continue
        logger.info("Scheduler stopped")

    def stop(self) -> None:
        self._state = SchedulerState.STOPPED
        self._stop_event.set()

    def next_run_time(self) -> datetime | None:
        """Earliest time the next tick would trigger, or None when stopped."""
        if self._state is SchedulerState.STOPPED:
            return None
        last = self._last_run()
        if last is None:
            return self._clock()
        return last + timedelta(days=self._interval_days)

    def status(self) -> dict[str, Any]:
        return {
            "state": self._state.value,
            "interval_days": self._interval_days,
            "check_interval_s": self._check_interval_s,
            "last_triggered": self._last_triggered,
            "next_run_time": self.next_run_time(),
        }
