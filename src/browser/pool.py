"""Browser pool: one patchright browser shared by a capped set of contexts.

Rules:
  - The pool is constructed and started explicitly; there is no module-level
    instance.
  - At most ``max_concurrency`` contexts are open at once. Asking for one more
    raises PoolExhaustedError immediately instead of waiting.
  - Every context opened through open_page() is closed on exit, success or not.
"""

import json
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from types import TracebackType
from typing import Any

from patchright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright

from src.core.config import BrowserConfig

logger = logging.getLogger(__name__)

_LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--no-first-run",
    "--disable-gpu",
]


class PoolExhaustedError(RuntimeError):
    """Raised when a context is requested while the pool is at capacity."""


class BrowserLaunchError(RuntimeError):
    """Raised when the browser cannot be started (e.g. executable not installed)."""


class BrowserPool:
    """Owns one browser and hands out up to ``max_concurrency`` contexts.

    Usage::

        async with BrowserPool(config) as pool:
            async with pool.open_page("https://...") as page:
                text = await page.inner_text("body")
    """

    def __init__(self, config: BrowserConfig) -> None:
        self._config = config
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._contexts: list[BrowserContext] = []
        self._cookies: list[Any] = []

    @property
    def max_concurrency(self) -> int:
        return self._config.max_concurrency

    @property
    def in_use(self) -> int:
        return len(self._contexts)

    async def start(self) -> None:
        if self._browser is not None:
            return
        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(
                headless=self._config.headless, args=_LAUNCH_ARGS,
            )
        except Exception as e:
            if self._playwright is not None:
                await self._playwright.stop()
                self._playwright = None
            msg = f"Could not launch browser: {e}"
            raise BrowserLaunchError(msg) from e
        if self._config.cookies_path:
            self._cookies = _load_cookies(self._config.cookies_path)
        logger.info(
            "Browser started (headless=%s, max_concurrency=%d)",
            self._config.headless, self._config.max_concurrency,
        )

    async def close(self) -> None:
        for context in list(self._contexts):
            await self.release(context)
        if self._browser is not None:
            await self._browser.close()
            self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None
        logger.debug("Browser pool closed")

    async def __aenter__(self) -> "BrowserPool":
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def acquire(self) -> BrowserContext:
        """Open a new browser context, counting it against the cap."""
        if self._browser is None:
            msg = "BrowserPool not started; call start() or use 'async with'"
            raise RuntimeError(msg)
        if len(self._contexts) >= self._config.max_concurrency:
            msg = f"Maximum concurrency limit ({self._config.max_concurrency}) reached"
            raise PoolExhaustedError(msg)

        context = await self._browser.new_context(
            user_agent=self._config.user_agent,
            viewport={"width": 1920, "height": 1080},
            ignore_https_errors=True,
            extra_http_headers={"Accept-Language": "en-US,en;q=0.9"},
        )
        self._contexts.append(context)
        try:
            context.set_default_timeout(self._config.timeout_ms)
            context.set_default_navigation_timeout(self._config.timeout_ms)
            if self._cookies:
                await context.add_cookies(self._cookies)
        except Exception:
            await self.release(context)
            raise
        logger.debug("Opened context (%d/%d)", len(self._contexts), self._config.max_concurrency)
        return context

    async def release(self, context: BrowserContext) -> None:
        """Close a context and free its slot. Close errors are logged, not raised."""
        if context in self._contexts:
            self._contexts.remove(context)
        try:
            await context.close()
        except Exception:
            logger.warning("Failed to close browser context", exc_info=True)
        logger.debug("Closed context (%d remaining)", len(self._contexts))

    @asynccontextmanager
    async def open_page(self, url: str) -> AsyncIterator[Page]:
        """Navigate a fresh page to ``url`` and yield it; the context is always released."""
        context = await self.acquire()
        try:
            page = await context.new_page()
            await page.goto(
                url, wait_until="domcontentloaded", timeout=self._config.timeout_ms,
            )
            yield page
        finally:
            await self.release(context)


def _load_cookies(path: str) -> list[Any]:
    """Load cookies from a JSON file. Returns empty list on any failure."""
    cookie_path = Path(path)
    if not cookie_path.exists():
        logger.debug("Cookie file not found: %s", path)
        return []
    try:
        data = json.loads(cookie_path.read_text())
        if isinstance(data, list):
            logger.info("Loaded %d cookies from %s", len(data), path)
            return data
        logger.warning("Cookie file is not a JSON array: %s", path)
        return []
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Failed to load cookies from %s: %s", path, e)
        return []
