"""Rule-based relevance scoring of a job against a candidate profile.

Four sub-scores, each on a 0-100 scale, combined with ScoringConfig weights:

  tech overlap  0.40   matched techs / max(|job techs|, |profile techs|)
  title match   0.30   profile role inside title, else generic keywords
  location      0.20   preferred location or remote
  recency       0.10   banded by days since posting (unknown = 50)

Final score = weighted sum / 100, clamped to [0, 1].
Match reasons are derived in a separate pass and are never empty.
"""

import logging
import math
from datetime import date, datetime

from src.core.config import ScoringConfig
from src.core.schemas import JobRecord, ScoredJob
from src.profile.schema import CandidateProfile

logger = logging.getLogger(__name__)

GENERIC_TITLE_KEYWORDS = ("developer", "engineer", "software", "full stack", "backend", "frontend")
GENERIC_TITLE_MAX = 60.0
REMOTE_MARKERS = ("remote", "work from home")
UNKNOWN_RECENCY = 50.0

# (max days since posting, sub-score); first band that fits wins.
_RECENCY_BANDS: tuple[tuple[int, float], ...] = (
    (1, 100.0),
    (3, 80.0),
    (7, 60.0),
    (14, 40.0),
    (30, 20.0),
)

_DEFAULT_CONFIG = ScoringConfig()


def score_job(
    job: JobRecord,
    profile: CandidateProfile,
    config: ScoringConfig | None = None,
    now: datetime | None = None,
) -> ScoredJob:
    """Score a single job and attach human-readable match reasons."""
    config = config or _DEFAULT_CONFIG
    today = (now or datetime.now()).date()

    weighted = (
        tech_score(job, profile) * config.tech_weight
        + title_score(job, profile) * config.title_weight
        + location_score(job, profile) * config.location_weight
        + recency_score(job.posted_date, today) * config.recency_weight
    )
    score = _clamp(weighted / 100.0)
    reasons = match_reasons(job, profile, score, today)
    return ScoredJob(job=job, score=score, match_reasons=reasons)


def score_jobs(
    jobs: list[JobRecord],
    profile: CandidateProfile,
    config: ScoringConfig | None = None,
    now: datetime | None = None,
) -> list[ScoredJob]:
    """Score a batch in input order. Each job is scored independently."""
    now = now or datetime.now()
    return [score_job(j, profile, config, now) for j in jobs]


# --- Sub-scores (0-100) ---


def tech_score(job: JobRecord, profile: CandidateProfile) -> float:
    if not job.tech_stack:
        return 0.0
    matches = _matched_tech(job, profile)
    denominator = max(len(job.tech_stack), len(profile.tech_stack))
    return len(matches) / denominator * 100.0


def title_score(job: JobRecord, profile: CandidateProfile) -> float:
    title = job.title.lower()
    if _matched_role(job, profile) is not None:
        return 100.0
    hits = sum(1 for kw in GENERIC_TITLE_KEYWORDS if kw in title)
    return hits / len(GENERIC_TITLE_KEYWORDS) * GENERIC_TITLE_MAX


def location_score(job: JobRecord, profile: CandidateProfile) -> float:
    location = (job.location or "").lower()
    if not location:
        return 0.0
    if _matched_location(job, profile) is not None or _is_remote(location):
        return 100.0
    return 0.0


def recency_score(posted: date | None, today: date) -> float:
    if posted is None:
        return UNKNOWN_RECENCY
    days = (today - posted).days
    for max_days, value in _RECENCY_BANDS:
        if days <= max_days:
            return value
    return 0.0


# --- Match reasons ---


def match_reasons(
    job: JobRecord, profile: CandidateProfile, score: float, today: date,
) -> list[str]:
    """Build justifications in rule order. Falls back to the overall percentage."""
    reasons: list[str] = []

    techs = _matched_tech(job, profile)
    if techs:
        suffix = "..." if len(techs) > 3 else ""
        reasons.append(f"Tech stack match: {', '.join(techs[:3])}{suffix}")

    role = _matched_role(job, profile)
    if role is not None:
        reasons.append(f"Role match: {role}")

    location = _matched_location(job, profile)
    if location is not None:
        reasons.append(f"Location match: {location}")
    elif _is_remote((job.location or "").lower()):
        reasons.append("Remote work available")

    if job.posted_date is not None:
        days = (today - job.posted_date).days
        if days <= 1:
            reasons.append("Posted today")
        elif days <= 3:
            reasons.append("Recently posted")

    full_text = f"{job.description} {job.requirements}".lower()
    if "senior" in full_text and profile.years_of_experience >= 5:
        reasons.append("Senior level match")
    elif "mid-level" in full_text and profile.years_of_experience >= 3:
        reasons.append("Mid-level match")

    if job.salary_range:
        reasons.append("Salary information available")

    if "startup" in full_text or "early stage" in full_text:
        reasons.append("Startup opportunity")

    if not reasons:
        reasons.append(f"Overall match score: {score * 100:.0f}%")
    return reasons


# --- Helpers ---


def _matched_tech(job: JobRecord, profile: CandidateProfile) -> list[str]:
    wanted = {t.lower() for t in profile.tech_stack}
    return [t for t in job.tech_stack if t.lower() in wanted]


def _matched_role(job: JobRecord, profile: CandidateProfile) -> str | None:
    title = job.title.lower()
    for role in profile.roles:
        if role.lower() in title:
            return role
    return None


def _matched_location(job: JobRecord, profile: CandidateProfile) -> str | None:
    location = (job.location or "").lower()
    if not location:
        return None
    for preferred in profile.locations:
        if preferred.lower() in location:
            return preferred
    return None


def _is_remote(location: str) -> bool:
    return any(marker in location for marker in REMOTE_MARKERS)


def _clamp(value: float) -> float:
    if not math.isfinite(value):
        logger.warning("Non-finite score %r, using 0.0", value)
        return 0.0
    return max(0.0, min(1.0, value))
