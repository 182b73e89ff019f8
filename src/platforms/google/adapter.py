"""Google search feed: wires query builder, parser, and the browser pool."""

import logging

from src.browser.actions import QUERY_DELAY_FLOOR, click_first, polite_pause
from src.browser.pool import BrowserPool
from src.core.config import SearchConfig
from src.core.schemas import SearchResult
from src.platforms.base import CandidateFeed, ExecutedQuery
from src.platforms.google.parser import GoogleResultsParser
from src.platforms.google.searcher import build_query, build_search_url
from src.platforms.google.selectors import CONSENT_SELECTORS
from src.profile.schema import CandidateProfile

logger = logging.getLogger(__name__)


class GoogleSearchFeed(CandidateFeed):
    """Finds job URLs by running one Google query per (role, site).

    Requires a started BrowserPool injected via constructor. A query that
    fails is logged and skipped; the remaining queries still run.
    """

    def __init__(self, pool: BrowserPool, config: SearchConfig) -> None:
        super().__init__()
        self._pool = pool
        self._config = config
        self._parser = GoogleResultsParser(max_results=config.max_results_per_query)

    @property
    def feed_id(self) -> str:
        return "google"

    async def search(self, profile: CandidateProfile) -> list[SearchResult]:
        self.executed_queries = []
        sites: list[str | None] = list(self._config.sites) or [None]
        all_results: list[SearchResult] = []
        seen: set[str] = set()

        plan = [(role, site) for role in profile.roles for site in sites]
        for idx, (role, site) in enumerate(plan):
            query = build_query(role, site, profile.locations)
            try:
                results = await self._run_query(query, site)
            except Exception:
                logger.warning("Search failed for '%s' on %s", role, site or "all sites", exc_info=True)
                results = []

            self.executed_queries.append(
                ExecutedQuery(query=query, site=site or "", results_count=len(results)),
            )
            for r in results:
                if r.url not in seen:
                    seen.add(r.url)
                    all_results.append(r)

            if idx < len(plan) - 1:
                await polite_pause(
                    self._config.query_delay_min_s,
                    self._config.query_delay_max_s,
                    floor=QUERY_DELAY_FLOOR,
                )

        logger.info("Total unique job results found: %d", len(all_results))
        return all_results

    async def _run_query(self, query: str, site: str | None) -> list[SearchResult]:
        url = build_search_url(query, num=self._config.max_results_per_query)
        logger.debug("Searching Google: %s", query)
        async with self._pool.open_page(url) as page:
            if await click_first(page, CONSENT_SELECTORS):
                logger.debug("Dismissed cookie consent")
                await page.wait_for_load_state("domcontentloaded")
            results = await self._parser.parse_page(page, target_site=site)
        logger.info("Found %d results for query %s", len(results), query)
        return results
