"""Reusable browser actions: politeness delays and consent dismissal.

Design rules:
  - All delays randomized. Floor values enforced in code.
  - No fixed asyncio.sleep() anywhere except via random_sleep().
"""

import asyncio
import logging
import random
from typing import Any

logger = logging.getLogger(__name__)

# Floor values enforced regardless of caller args.
FETCH_DELAY_FLOOR = 1.0
QUERY_DELAY_FLOOR = 2.0


async def random_sleep(min_s: float, max_s: float) -> float:
    """Sleep for a random duration between min_s and max_s seconds.

    Floor enforcement: min_s is always respected as the absolute minimum.
    If max_s < min_s, max_s is raised to min_s.

    Returns the actual sleep duration (useful for testing).
    """
    floor = max(min_s, 0.0)
    ceiling = max(max_s, floor)
    duration = random.uniform(floor, ceiling)
    await asyncio.sleep(duration)
    return duration


async def polite_pause(min_s: float, max_s: float, *, floor: float) -> float:
    """random_sleep with a module floor applied on top of the caller's bounds."""
    min_s = max(min_s, floor)
    return await random_sleep(min_s, max(max_s, min_s))


async def click_first(page: Any, selectors: tuple[str, ...]) -> bool:
    """Click the first element matching any selector in order.

    Returns False when nothing matched or every click raised.
    """
    for selector in selectors:
        try:
            el = await page.query_selector(selector)
            if el is not None:
                await el.click()
                return True
        except Exception:
            logger.debug("Click on '%s' failed, trying next", selector, exc_info=True)
    return False
