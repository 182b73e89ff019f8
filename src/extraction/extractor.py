"""Field extractor: converts a loaded job page into a JobRecord.

Design rules:
  - Every field is resolved by an ordered tuple of strategies; the first
    non-empty trimmed value wins.
  - A record is dropped only when title AND company are both unresolved.
    Every other field degrades to "" / None.
  - The page is only read, never navigated or mutated.
"""

import logging
from collections.abc import Awaitable, Callable, Iterable
from datetime import datetime
from typing import Protocol, runtime_checkable
from urllib.parse import urlparse

from src.core.schemas import ExtractionOutcome, ExtractionResult, JobRecord
from src.extraction.heuristics import extract_requirements, infer_posted_date, infer_tech_stack
from src.extraction.selectors import (
    BODY_SELECTOR,
    COMPANY_META_PROPERTIES,
    COMPANY_SELECTORS,
    DESCRIPTION_SELECTORS,
    LOCATION_SELECTORS,
    SALARY_SELECTORS,
    TITLE_SELECTORS,
)

logger = logging.getLogger(__name__)

DESCRIPTION_FALLBACK_CHARS = 5000


@runtime_checkable
class ElementLike(Protocol):
    async def text_content(self) -> str | None: ...
    async def get_attribute(self, name: str) -> str | None: ...


@runtime_checkable
class PageLike(Protocol):
    """Minimal page interface so tests can use AsyncMock instead of patchright."""

    url: str

    async def query_selector(self, selector: str) -> ElementLike | None: ...
    async def inner_text(self, selector: str) -> str: ...


Strategy = Callable[[PageLike], Awaitable[str | None]]


def selector_text(selector: str) -> Strategy:
    """Strategy: text content of the first element matching ``selector``."""

    async def _strategy(page: PageLike) -> str | None:
        el = await page.query_selector(selector)
        if el is None:
            return None
        return await el.text_content()

    return _strategy


def meta_content(prop: str) -> Strategy:
    """Strategy: ``content`` attribute of ``<meta property=prop>``."""

    async def _strategy(page: PageLike) -> str | None:
        el = await page.query_selector(f'meta[property="{prop}"]')
        if el is None:
            return None
        return await el.get_attribute("content")

    return _strategy


def chain(selectors: Iterable[str], *extra: Strategy) -> tuple[Strategy, ...]:
    return (*(selector_text(s) for s in selectors), *extra)


TITLE_STRATEGIES = chain(TITLE_SELECTORS)
COMPANY_STRATEGIES = chain(COMPANY_SELECTORS, *(meta_content(p) for p in COMPANY_META_PROPERTIES))
DESCRIPTION_STRATEGIES = chain(DESCRIPTION_SELECTORS)
LOCATION_STRATEGIES = chain(LOCATION_SELECTORS)
SALARY_STRATEGIES = chain(SALARY_SELECTORS)


async def first_value(page: PageLike, strategies: Iterable[Strategy]) -> str | None:
    """Run strategies in order, returning the first non-empty trimmed value.

    A strategy that raises counts as "no value" for that strategy only.
    """
    for strategy in strategies:
        try:
            value = await strategy(page)
        except Exception:
            logger.debug("Extraction strategy raised, trying next", exc_info=True)
            continue
        if value and value.strip():
            return " ".join(value.split())
    return None


class JobExtractor:
    """Extracts JobRecord objects from loaded pages.

    ``profile_tech`` is merged into the tech catalog when scanning page text.
    """

    def __init__(self, profile_tech: Iterable[str] = ()) -> None:
        self._profile_tech = tuple(profile_tech)

    async def extract(
        self, page: PageLike, *, source_url: str = "", now: datetime | None = None,
    ) -> JobRecord | None:
        """Return a JobRecord, or None if the page is not a usable job listing."""
        result = await self.extract_result(page, source_url=source_url, now=now)
        if result.outcome is ExtractionOutcome.ERROR:
            logger.warning("Extraction error for %s: %s", source_url or "page", result.error)
        elif result.outcome is ExtractionOutcome.MISSING_REQUIRED:
            logger.debug("Page %s has neither title nor company, skipping", source_url)
        return result.record

    async def extract_result(
        self, page: PageLike, *, source_url: str = "", now: datetime | None = None,
    ) -> ExtractionResult:
        try:
            return await self._extract(page, source_url, now)
        except Exception as e:
            return ExtractionResult(outcome=ExtractionOutcome.ERROR, error=str(e) or type(e).__name__)

    async def _extract(
        self, page: PageLike, source_url: str, now: datetime | None,
    ) -> ExtractionResult:
        title = await first_value(page, TITLE_STRATEGIES)
        company = await first_value(page, COMPANY_STRATEGIES)
        if title is None and company is None:
            return ExtractionResult(
                outcome=ExtractionOutcome.MISSING_REQUIRED,
                missing_fields=["title", "company"],
            )

        body = await self._body_text(page)
        description = await first_value(page, DESCRIPTION_STRATEGIES)
        location = await first_value(page, LOCATION_STRATEGIES)
        salary = await first_value(page, SALARY_STRATEGIES)

        job_url = page.url or source_url
        requirements = extract_requirements(body)
        tech_stack = infer_tech_stack(body, self._profile_tech)
        posted_date = infer_posted_date(body, now)

        missing = [
            name
            for name, value in (
                ("title", title),
                ("company", company),
                ("description", description),
                ("location", location),
                ("salary_range", salary),
                ("requirements", requirements),
                ("tech_stack", tech_stack),
                ("posted_date", posted_date),
            )
            if not value
        ]

        record = JobRecord(
            title=title or "",
            company=company or "",
            company_url=_company_url(job_url),
            job_url=job_url,
            description=description or body[:DESCRIPTION_FALLBACK_CHARS].strip(),
            requirements=requirements,
            tech_stack=tech_stack,
            salary_range=salary,
            location=location,
            posted_date=posted_date,
        )
        return ExtractionResult(
            outcome=ExtractionOutcome.OK, record=record, missing_fields=missing,
        )

    @staticmethod
    async def _body_text(page: PageLike) -> str:
        try:
            text = await page.inner_text(BODY_SELECTOR)
        except Exception:
            logger.debug("Could not read body text", exc_info=True)
            return ""
        return text or ""


def _company_url(job_url: str) -> str:
    parsed = urlparse(job_url)
    if not parsed.scheme or not parsed.netloc:
        return ""
    return f"{parsed.scheme}://{parsed.netloc}"
