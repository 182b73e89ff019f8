"""Tests for the interval scheduler: due check, tick state machine, stop."""

import asyncio
from datetime import datetime, timedelta
from unittest.mock import AsyncMock

import pytest

from src.pipeline.scheduler import IntervalScheduler, SchedulerState, is_due

NOW = datetime(2026, 3, 10, 9, 0, 0)


def _scheduler(
    last_run: datetime | None,
    trigger: AsyncMock | None = None,
    interval_days: float = 3.0,
    **kw: object,
) -> IntervalScheduler:
    return IntervalScheduler(
        trigger or AsyncMock(),
        lambda: last_run,
        interval_days,
        clock=lambda: NOW,
        **kw,  # type: ignore[arg-type]
    )


# ---------------------------------------------------------------------------
# is_due
# ---------------------------------------------------------------------------


class TestIsDue:
    def test_never_run(self) -> None:
        assert is_due(None, 3.0, NOW) is True

    def test_too_soon(self) -> None:
        assert is_due(NOW - timedelta(days=2, hours=23), 3.0, NOW) is False

    def test_exactly_elapsed(self) -> None:
        assert is_due(NOW - timedelta(days=3), 3.0, NOW) is True

    def test_fractional_interval(self) -> None:
        assert is_due(NOW - timedelta(hours=13), 0.5, NOW) is True
        assert is_due(NOW - timedelta(hours=11), 0.5, NOW) is False


# ---------------------------------------------------------------------------
# tick
# ---------------------------------------------------------------------------


class TestTick:
    async def test_triggers_when_due(self) -> None:
        trigger = AsyncMock()
        scheduler = _scheduler(NOW - timedelta(days=4), trigger)
        assert await scheduler.tick() is True
        trigger.assert_awaited_once()
        assert scheduler.state is SchedulerState.IDLE

    async def test_skips_when_not_due(self) -> None:
        trigger = AsyncMock()
        scheduler = _scheduler(NOW - timedelta(days=1), trigger)
        assert await scheduler.tick() is False
        trigger.assert_not_awaited()
        assert scheduler.state is SchedulerState.IDLE

    async def test_first_run_triggers(self) -> None:
        trigger = AsyncMock()
        assert await _scheduler(None, trigger).tick() is True
        trigger.assert_awaited_once()

    async def test_trigger_error_returns_to_idle(self) -> None:
        trigger = AsyncMock(side_effect=RuntimeError("browser crashed"))
        scheduler = _scheduler(None, trigger)
        assert await scheduler.tick() is True
        assert scheduler.state is SchedulerState.IDLE

    async def test_last_run_error_treated_as_due(self) -> None:
        def _broken() -> datetime | None:
            raise RuntimeError("db locked")

        trigger = AsyncMock()
        scheduler = IntervalScheduler(trigger, _broken, 3.0, clock=lambda: NOW)
        assert await scheduler.tick() is True
        trigger.assert_awaited_once()

    async def test_state_is_triggered_during_run(self) -> None:
        seen: list[SchedulerState] = []
        scheduler: IntervalScheduler

        async def _trigger() -> None:
            seen.append(scheduler.state)

        scheduler = IntervalScheduler(_trigger, lambda: None, 3.0, clock=lambda: NOW)
        await scheduler.tick()
        assert seen == [SchedulerState.TRIGGERED]

    async def test_stopped_never_triggers(self) -> None:
        trigger = AsyncMock()
        scheduler = _scheduler(None, trigger)
        scheduler.stop()
        assert await scheduler.tick() is False
        trigger.assert_not_awaited()
        assert scheduler.state is SchedulerState.STOPPED

    async def test_stop_during_trigger_stays_stopped(self) -> None:
        scheduler: IntervalScheduler

        async def _trigger() -> None:
            scheduler.stop()

        scheduler = IntervalScheduler(_trigger, lambda: None, 3.0, clock=lambda: NOW)
        await scheduler.tick()
        assert scheduler.state is SchedulerState.STOPPED


# ---------------------------------------------------------------------------
# run_forever / stop
# ---------------------------------------------------------------------------


class TestRunForever:
    async def test_stop_ends_loop(self) -> None:
        trigger = AsyncMock()
        scheduler = _scheduler(None, trigger, check_interval_s=3600)
        task = asyncio.create_task(scheduler.run_forever())
        await asyncio.sleep(0)
        scheduler.stop()
        await asyncio.wait_for(task, timeout=1.0)
        assert scheduler.state is SchedulerState.STOPPED
        trigger.assert_awaited_once()

    async def test_rechecks_each_interval(self) -> None:
        calls = 0
        scheduler: IntervalScheduler

        async def _trigger() -> None:
            nonlocal calls
            calls += 1
            if calls == 3:
                scheduler.stop()

        scheduler = IntervalScheduler(
            _trigger, lambda: None, 3.0, check_interval_s=0.01, clock=lambda: NOW,
        )
        await asyncio.wait_for(scheduler.run_forever(), timeout=2.0)
        assert calls == 3


# ---------------------------------------------------------------------------
# next_run_time / status
# ---------------------------------------------------------------------------


class TestNextRunTime:
    def test_never_run_is_now(self) -> None:
        assert _scheduler(None).next_run_time() == NOW

    def test_last_plus_interval(self) -> None:
        last = datetime(2026, 3, 8, 12, 0)
        assert _scheduler(last).next_run_time() == datetime(2026, 3, 11, 12, 0)

    def test_stopped_is_none(self) -> None:
        scheduler = _scheduler(None)
        scheduler.stop()
        assert scheduler.next_run_time() is None

    @pytest.mark.parametrize("interval", [1.0, 3.0, 7.5])
    def test_status_reports_interval(self, interval: float) -> None:
        status = _scheduler(None, interval_days=interval).status()
        assert status["state"] == "idle"
        assert status["interval_days"] == interval
        assert status["last_triggered"] is None
        assert status["next_run_time"] == NOW
