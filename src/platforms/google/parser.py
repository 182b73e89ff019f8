"""Google results parser: converts result containers into SearchResult objects.

Design rules:
  - Every selector lookup uses a fallback tuple.
  - A result without a title or an http(s) URL is skipped, never fatal.
  - Google's "/url?q=" redirect links are unwrapped to the target URL.
"""

import logging
from typing import Protocol, runtime_checkable
from urllib.parse import parse_qs, urlparse

from src.core.schemas import SearchResult
from src.platforms.google.searcher import is_job_related
from src.platforms.google.selectors import (
    RESULT_CONTAINER_SELECTORS,
    RESULT_LINK_SELECTORS,
    RESULT_SNIPPET_SELECTORS,
    RESULT_TITLE_SELECTORS,
)

logger = logging.getLogger(__name__)


@runtime_checkable
class ElementLike(Protocol):
    """Minimal element interface so tests can use AsyncMock instead of patchright."""

    async def query_selector(self, selector: str) -> "ElementLike | None": ...
    async def query_selector_all(self, selector: str) -> list["ElementLike"]: ...
    async def get_attribute(self, name: str) -> str | None: ...
    async def text_content(self) -> str | None: ...


class GoogleResultsParser:
    """Parses a loaded Google results page."""

    def __init__(self, max_results: int = 20) -> None:
        self._max_results = max_results

    async def parse_page(
        self, page: ElementLike, target_site: str | None = None,
    ) -> list[SearchResult]:
        containers = await self._find_containers(page)
        results: list[SearchResult] = []
        seen: set[str] = set()
        for container in containers:
            try:
                result = await self.parse_result(container)
            except Exception:
                logger.debug("Failed to parse search result, skipping", exc_info=True)
                continue
            if result is None or result.url in seen:
                continue
            if target_site and target_site.lower() not in result.site:
                continue
            if not is_job_related(result.title, result.snippet, result.url):
                continue
            seen.add(result.url)
            results.append(result)
            if len(results) >= self._max_results:
                break
        return results

    async def parse_result(self, container: ElementLike) -> SearchResult | None:
        link = await self._find_first(container, RESULT_LINK_SELECTORS)
        if link is None:
            return None
        href = await link.get_attribute("href")
        url = self._clean_url(href or "")
        if not url:
            return None

        title = await self._text_fallback(link, RESULT_TITLE_SELECTORS)
        if not title:
            return None
        snippet = await self._text_fallback(container, RESULT_SNIPPET_SELECTORS)
        site = urlparse(url).netloc.lower().removeprefix("www.")
        return SearchResult(url=url, title=title, snippet=snippet, site=site)

    # --- Private helpers ---

    async def _find_containers(self, page: ElementLike) -> list[ElementLike]:
        for selector in RESULT_CONTAINER_SELECTORS:
            containers = await page.query_selector_all(selector)
            if containers:
                logger.debug("Found %d results with selector '%s'", len(containers), selector)
                return containers
        logger.warning("No search results found with any selector")
        return []

    async def _text_fallback(self, parent: ElementLike, selectors: tuple[str, ...]) -> str:
        el = await self._find_first(parent, selectors)
        if el is None:
            return ""
        text = await el.text_content()
        return " ".join(text.split()) if text else ""

    async def _find_first(
        self, parent: ElementLike, selectors: tuple[str, ...],
    ) -> ElementLike | None:
        for selector in selectors:
            try:
                el = await parent.query_selector(selector)
                if el is not None:
                    return el
            except Exception:
                logger.debug("Selector '%s' raised, trying next", selector, exc_info=True)
        return None

    @staticmethod
    def _clean_url(href: str) -> str:
        """Unwrap redirect links and reject anything that is not http(s)."""
        if href.startswith("/url?"):
            target = parse_qs(urlparse(href).query).get("q", [""])[0]
            href = target
        parsed = urlparse(href)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            return ""
        if parsed.netloc.endswith("google.com"):
            return ""
        return href
