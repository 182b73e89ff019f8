"""Orchestrator: wires feed, page loader, extractor, scorer, matcher, and DB write.

Data flow per session:
  1. Create session row (running)
  2. Feed search → candidate URLs (capped at batch_size)
  3. Fetch + extract each URL (bounded concurrency, per-URL timeout, skip on failure)
  4. Dedupe by job_url → score → rank → select top picks
  5. Upsert all ranked jobs, then mark the top picks
  6. Update session row once: completed with counts, or failed with the error
"""

import asyncio
import json
import logging
import sqlite3
from collections.abc import Iterator
from contextlib import AbstractAsyncContextManager
from datetime import datetime
from typing import Protocol

from src.browser.actions import FETCH_DELAY_FLOOR, polite_pause
from src.core.config import Settings
from src.core.db import (
    create_session,
    get_last_session_date,
    job_exists,
    log_search_query,
    mark_top_picks,
    update_session,
    upsert_job,
)
from src.core.schemas import JobRecord, SearchResult, SessionStatus, SessionSummary
from src.extraction.extractor import JobExtractor, PageLike
from src.pipeline.matcher import build_report, dedupe_by_url, rank_and_select
from src.pipeline.scheduler import is_due
from src.platforms.base import CandidateFeed
from src.profile.schema import CandidateProfile

logger = logging.getLogger(__name__)


class PageLoader(Protocol):
    """Anything that can open a URL as a readable page (e.g. BrowserPool)."""

    @property
    def max_concurrency(self) -> int: ...

    def open_page(self, url: str) -> AbstractAsyncContextManager[PageLike]: ...


async def run_session(
    settings: Settings,
    profile: CandidateProfile,
    feed: CandidateFeed,
    loader: PageLoader,
    conn: sqlite3.Connection,
    *,
    now: datetime | None = None,
) -> SessionSummary:
    """Execute one full discovery session.

    Never raises for failures after the session row exists: they end the
    session as failed. Failing to create the session row does raise.
    """
    now = now or datetime.now()
    session_id = create_session(conn, now.date(), list(profile.roles))
    logger.info("Session %d started for %d roles", session_id, len(profile.roles))

    try:
        candidates = await feed.search(profile)
        for q in feed.executed_queries:
            log_search_query(conn, q.query, q.site, q.results_count, session_id)

        batch = candidates[: settings.pipeline.batch_size]
        logger.info("Fetching %d of %d candidate URLs", len(batch), len(candidates))

        records = await fetch_records(batch, loader, JobExtractor(profile.tech_stack), settings, now)
        records = dedupe_by_url(records)
        logger.info("Extracted %d job records", len(records))

        ranked, selected = rank_and_select(
            records,
            profile,
            top_n=settings.pipeline.top_n,
            min_score=settings.pipeline.min_score_threshold,
            config=settings.scoring,
            now=now,
        )

        new_jobs = sum(1 for s in ranked if not job_exists(conn, s.job.job_url))
        ids = {s.job.job_url: upsert_job(conn, s, session_id) for s in ranked}
        mark_top_picks(conn, [ids[s.job.job_url] for s in selected])

        report = build_report(ranked)
        update_session(
            conn,
            session_id,
            status=SessionStatus.COMPLETED,
            total_jobs_found=len(ranked),
            top_jobs_selected=len(selected),
            completed_at=datetime.now(),
        )
    except Exception as e:
        message = str(e) or type(e).__name__
        logger.exception("Session %d failed: %s", session_id, message)
        try:
            update_session(
                conn,
                session_id,
                status=SessionStatus.FAILED,
                error_message=message,
                completed_at=datetime.now(),
            )
        except Exception:
            logger.exception("Could not record failure for session %d", session_id)
        return SessionSummary(
            session_id=session_id, status=SessionStatus.FAILED, error_message=message,
        )

    logger.info(
        "Session %d completed: %d jobs (%d new), %d top picks, average score %.1f%%",
        session_id, report.total_jobs, new_jobs, len(selected), report.average_score * 100,
    )
    return SessionSummary(
        session_id=session_id,
        status=SessionStatus.COMPLETED,
        total_jobs_found=len(ranked),
        new_jobs_found=new_jobs,
        top_jobs_selected=len(selected),
        average_score=report.average_score,
        report=report,
        top_jobs=selected,
    )


async def run_if_due(
    settings: Settings,
    profile: CandidateProfile,
    feed: CandidateFeed,
    loader: PageLoader,
    conn: sqlite3.Connection,
    *,
    now: datetime | None = None,
) -> SessionSummary | None:
    """Run a session only if the configured interval has elapsed since the last one."""
    now = now or datetime.now()
    last_run = get_last_session_date(conn)
    if not is_due(last_run, settings.scheduler.interval_days, now):
        logger.info("Skipping run, last completed session at %s", last_run)
        return None
    return await run_session(settings, profile, feed, loader, conn, now=now)


async def fetch_records(
    candidates: list[SearchResult],
    loader: PageLoader,
    extractor: JobExtractor,
    settings: Settings,
    now: datetime | None = None,
) -> list[JobRecord]:
    """Load and extract every candidate URL, skipping any that fail.

    At most ``loader.max_concurrency`` pages are open at once. Output keeps
    feed order regardless of completion order.
    """
    semaphore = asyncio.Semaphore(max(1, loader.max_concurrency))
    pipeline = settings.pipeline

    async def _one(candidate: SearchResult) -> JobRecord | None:
        async with semaphore:
            try:
                return await asyncio.wait_for(
                    _load_and_extract(candidate.url, loader, extractor, now),
                    timeout=pipeline.page_timeout_s,
                )
            except asyncio.TimeoutError:
                logger.warning("Timed out scraping %s, skipping", candidate.url)
            except Exception:
                logger.warning("Failed to scrape %s, skipping", candidate.url, exc_info=True)
            finally:
                await polite_pause(
                    pipeline.fetch_delay_min_s, pipeline.fetch_delay_max_s, floor=FETCH_DELAY_FLOOR,
                )
            return None

    results = await asyncio.gather(*(_one(c) for c in candidates))
    return [r for r in results if r is not None]


async def _load_and_extract(
    url: str,
    loader: PageLoader,
    extractor: JobExtractor,
    now: datetime | None,
) -> JobRecord | None:
    async with loader.open_page(url) as page:
        return await extractor.extract(page, source_url=url, now=now)


def iter_top_jobs_lines(summary: SessionSummary) -> Iterator[str]:
    """Human-readable lines for a session's top picks."""
    for idx, s in enumerate(summary.top_jobs, start=1):
        yield f"{idx}. {s.job.title} at {s.job.company} (Score: {s.score * 100:.1f}%)"
        yield f"   {s.job.job_url}"
        for reason in s.match_reasons:
            yield f"   - {reason}"


def export_results_json(summary: SessionSummary) -> str:
    """Export a session's top picks as a JSON string."""
    data = []
    for s in summary.top_jobs:
        j = s.job
        data.append({
            "session_id": summary.session_id,
            "title": j.title,
            "company": j.company,
            "company_url": j.company_url,
            "job_url": j.job_url,
            "location": j.location,
            "salary_range": j.salary_range,
            "tech_stack": j.tech_stack,
            "posted_date": j.posted_date.isoformat() if j.posted_date else None,
            "score": s.score,
            "match_reasons": s.match_reasons,
        })
    return json.dumps(data, indent=2)
