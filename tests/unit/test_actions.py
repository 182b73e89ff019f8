"""Tests for browser actions: random_sleep, polite_pause, click_first."""

import asyncio
from unittest.mock import AsyncMock, patch

from src.browser.actions import (
    FETCH_DELAY_FLOOR,
    QUERY_DELAY_FLOOR,
    click_first,
    polite_pause,
    random_sleep,
)

# ---------------------------------------------------------------------------
# TestRandomSleep
# ---------------------------------------------------------------------------


class TestRandomSleep:
    """random_sleep: floor enforcement, range, actual sleeping."""

    async def test_returns_duration_in_range(self) -> None:
        with patch.object(asyncio, "sleep", new_callable=AsyncMock):
            duration = await random_sleep(0.0, 0.01)
        assert 0.0 <= duration <= 0.01

    async def test_floor_enforcement(self) -> None:
        """min_s is always the floor; duration never below it."""
        with patch.object(asyncio, "sleep", new_callable=AsyncMock):
            for _ in range(20):
                duration = await random_sleep(1.0, 2.0)
                assert duration >= 1.0

    async def test_max_below_min_is_clamped(self) -> None:
        """If max_s < min_s, max_s is raised to min_s."""
        with patch.object(asyncio, "sleep", new_callable=AsyncMock):
            duration = await random_sleep(5.0, 2.0)
        assert duration == 5.0

    async def test_actually_calls_asyncio_sleep(self) -> None:
        with patch.object(asyncio, "sleep", new_callable=AsyncMock) as mock_sleep:
            await random_sleep(0.1, 0.2)
        mock_sleep.assert_called_once()
        slept = mock_sleep.call_args[0][0]
        assert 0.1 <= slept <= 0.2

    async def test_negative_min_clamped_to_zero(self) -> None:
        with patch.object(asyncio, "sleep", new_callable=AsyncMock):
            duration = await random_sleep(-1.0, 0.5)
        assert duration >= 0.0


# ---------------------------------------------------------------------------
# TestPolitePause
# ---------------------------------------------------------------------------


class TestPolitePause:
    """polite_pause: the module floor wins over smaller caller bounds."""

    async def test_floor_applied_to_small_bounds(self) -> None:
        with patch.object(asyncio, "sleep", new_callable=AsyncMock):
            for _ in range(20):
                duration = await polite_pause(0.0, 0.1, floor=FETCH_DELAY_FLOOR)
                assert duration == FETCH_DELAY_FLOOR

    async def test_caller_bounds_above_floor_kept(self) -> None:
        with patch.object(asyncio, "sleep", new_callable=AsyncMock):
            for _ in range(20):
                duration = await polite_pause(3.0, 4.0, floor=QUERY_DELAY_FLOOR)
                assert 3.0 <= duration <= 4.0

    async def test_delegates_to_random_sleep(self) -> None:
        with patch("src.browser.actions.random_sleep", new_callable=AsyncMock) as mock_rs:
            mock_rs.return_value = QUERY_DELAY_FLOOR
            await polite_pause(0.5, 1.0, floor=QUERY_DELAY_FLOOR)
        min_arg, max_arg = mock_rs.call_args[0]
        assert min_arg == QUERY_DELAY_FLOOR
        assert max_arg >= min_arg


# ---------------------------------------------------------------------------
# TestClickFirst
# ---------------------------------------------------------------------------


class TestClickFirst:
    async def test_clicks_first_match(self) -> None:
        button = AsyncMock()
        page = AsyncMock()
        page.query_selector = AsyncMock(
            side_effect=lambda sel: button if sel == "#accept" else None,
        )
        assert await click_first(page, ("#missing", "#accept")) is True
        button.click.assert_awaited_once()

    async def test_no_match(self) -> None:
        page = AsyncMock()
        page.query_selector = AsyncMock(return_value=None)
        assert await click_first(page, ("#a", "#b")) is False

    async def test_click_error_tries_next(self) -> None:
        broken = AsyncMock()
        broken.click = AsyncMock(side_effect=RuntimeError("detached"))
        working = AsyncMock()
        page = AsyncMock()
        page.query_selector = AsyncMock(side_effect=[broken, working])
        assert await click_first(page, ("#a", "#b")) is True
        working.click.assert_awaited_once()

    async def test_empty_selectors(self) -> None:
        assert await click_first(AsyncMock(), ()) is False
