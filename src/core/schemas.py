"""Core data models for the job discovery engine."""

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class SearchResult(BaseModel):
    """A candidate URL returned by a feed (e.g. one search-engine hit)."""

    model_config = ConfigDict(frozen=True)

    url: str
    title: str = ""
    snippet: str = ""
    site: str = ""


class JobRecord(BaseModel):
    """A job listing extracted from a loaded page.

    Frozen; job_url is the natural identity of the listing.
    """

    model_config = ConfigDict(frozen=True)

    title: str
    company: str
    company_url: str = ""
    job_url: str
    description: str = ""
    requirements: str = ""
    tech_stack: list[str] = Field(default_factory=list)
    salary_range: str | None = None
    location: str | None = None
    posted_date: date | None = None


class ScoredJob(BaseModel):
    """Wrapper that pairs a frozen JobRecord with a relevance score and reasons."""

    model_config = ConfigDict(frozen=True)

    job: JobRecord
    score: float = Field(ge=0.0, le=1.0)
    match_reasons: list[str] = Field(min_length=1)


class ExtractionOutcome(str, Enum):
    OK = "ok"
    MISSING_REQUIRED = "missing_required"
    ERROR = "error"


class ExtractionResult(BaseModel):
    """Outcome of extracting one page.

    ``missing_fields`` lists optional fields that degraded to empty, which is
    not a failure. ``outcome`` tells the caller whether to keep the record.
    """

    model_config = ConfigDict(frozen=True)

    outcome: ExtractionOutcome
    record: JobRecord | None = None
    missing_fields: list[str] = Field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.outcome is ExtractionOutcome.OK and self.record is not None


class SessionStatus(str, Enum):
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class ScrapingSession(BaseModel):
    """A persisted pipeline run."""

    id: int
    session_date: date
    search_queries: list[str] = Field(default_factory=list)
    status: SessionStatus = SessionStatus.RUNNING
    total_jobs_found: int = 0
    top_jobs_selected: int = 0
    started_at: datetime | None = None
    completed_at: datetime | None = None
    error_message: str | None = None


class ScoreDistribution(BaseModel):
    excellent: int = 0
    good: int = 0
    fair: int = 0
    poor: int = 0


class JobReport(BaseModel):
    """Aggregate statistics over a scored batch. Derived, never persisted."""

    total_jobs: int = 0
    average_score: float = 0.0
    top_tech_stack: list[str] = Field(default_factory=list)
    top_companies: list[str] = Field(default_factory=list)
    location_distribution: dict[str, int] = Field(default_factory=dict)
    score_distribution: ScoreDistribution = Field(default_factory=ScoreDistribution)


class SessionSummary(BaseModel):
    """What a single orchestrator run hands back to its caller."""

    session_id: int
    status: SessionStatus
    total_jobs_found: int = 0
    new_jobs_found: int = 0
    top_jobs_selected: int = 0
    average_score: float = 0.0
    error_message: str | None = None
    report: JobReport = Field(default_factory=JobReport)
    top_jobs: list[ScoredJob] = Field(default_factory=list)
