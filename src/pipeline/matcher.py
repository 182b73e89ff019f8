"""Batch matching: rank scored jobs, select top picks, build the batch report.

Selection policy:
  1. Rank by score descending (stable: ties keep input order).
  2. Keep jobs with score >= min_score, take the first top_n.
  3. If none qualify, take the first top_n of the full ranking instead,
     so a non-empty batch always yields top picks.
"""

import logging
from collections import Counter
from collections.abc import Iterable
from datetime import datetime

from src.core.config import ScoringConfig
from src.core.schemas import JobRecord, JobReport, ScoreDistribution, ScoredJob
from src.pipeline.scorer import score_jobs
from src.profile.schema import CandidateProfile

logger = logging.getLogger(__name__)

REPORT_TOP_K = 10
UNKNOWN_LOCATION = "Unknown"


def rank_jobs(scored: list[ScoredJob]) -> list[ScoredJob]:
    """Return a new list sorted by score descending. sorted() is stable."""
    return sorted(scored, key=lambda s: s.score, reverse=True)


def select_top_jobs(ranked: list[ScoredJob], top_n: int, min_score: float) -> list[ScoredJob]:
    """Pick the top picks from an already-ranked list."""
    qualified = [s for s in ranked if s.score >= min_score]
    if not qualified:
        if ranked:
            logger.warning(
                "No jobs meet minimum score %.2f, taking top %d anyway", min_score, top_n,
            )
        return ranked[:top_n]
    selected = qualified[:top_n]
    logger.debug("Selected %d top jobs (min score: %.2f)", len(selected), min_score)
    return selected


def rank_and_select(
    jobs: list[JobRecord],
    profile: CandidateProfile,
    top_n: int,
    min_score: float,
    config: ScoringConfig | None = None,
    now: datetime | None = None,
) -> tuple[list[ScoredJob], list[ScoredJob]]:
    """Score, rank and select. Returns (ranked, selected)."""
    ranked = rank_jobs(score_jobs(jobs, profile, config, now))
    if ranked:
        logger.info("Scored %d jobs. Top score: %.2f", len(ranked), ranked[0].score)
    return ranked, select_top_jobs(ranked, top_n, min_score)


def dedupe_by_url(jobs: Iterable[JobRecord]) -> list[JobRecord]:
    """Collapse records sharing a job_url.

    The last record wins but keeps the position of the first occurrence.
    """
    latest: dict[str, JobRecord] = {}
    for job in jobs:
        latest[job.job_url] = job
    return list(latest.values())


def build_report(scored: list[ScoredJob]) -> JobReport:
    """Aggregate statistics over the full scored batch (not just top picks)."""
    if not scored:
        return JobReport()

    tech_counts: Counter[str] = Counter()
    company_counts: Counter[str] = Counter()
    locations: Counter[str] = Counter()
    distribution = ScoreDistribution()

    for s in scored:
        tech_counts.update(s.job.tech_stack)
        company_counts[s.job.company] += 1
        locations[s.job.location or UNKNOWN_LOCATION] += 1
        if s.score > 0.8:
            distribution.excellent += 1
        elif s.score > 0.6:
            distribution.good += 1
        elif s.score > 0.4:
            distribution.fair += 1
        else:
            distribution.poor += 1

    return JobReport(
        total_jobs=len(scored),
        average_score=sum(s.score for s in scored) / len(scored),
        top_tech_stack=[t for t, _ in tech_counts.most_common(REPORT_TOP_K)],
        top_companies=[c for c, _ in company_counts.most_common(REPORT_TOP_K)],
        location_distribution=dict(locations),
        score_distribution=distribution,
    )
