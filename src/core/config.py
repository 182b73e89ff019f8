"""Configuration models and YAML loader for the job discovery engine."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator


class SearchConfig(BaseModel):
    """Search-engine feed settings."""

    sites: list[str] = Field(
        default_factory=lambda: ["linkedin.com", "indeed.com", "ycombinator.com"],
    )
    max_results_per_query: int = Field(default=20, ge=1, le=100)
    query_delay_min_s: float = Field(default=2.0, ge=0.0)
    query_delay_max_s: float = Field(default=4.0, ge=0.0)

    @field_validator("sites")
    @classmethod
    def strip_sites(cls, v: list[str]) -> list[str]:
        return [s.strip() for s in v if s.strip()]


class BrowserConfig(BaseModel):
    """Browser pool configuration."""

    headless: bool = True
    max_concurrency: int = Field(default=3, ge=1, le=16)
    timeout_ms: int = Field(default=30000, ge=1000)
    cookies_path: str | None = None
    user_agent: str = (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    )


class ScoringConfig(BaseModel):
    """Weights for the four relevance sub-scores. Must sum to 1.0."""

    tech_weight: float = Field(default=0.40, ge=0.0, le=1.0)
    title_weight: float = Field(default=0.30, ge=0.0, le=1.0)
    location_weight: float = Field(default=0.20, ge=0.0, le=1.0)
    recency_weight: float = Field(default=0.10, ge=0.0, le=1.0)

    @model_validator(mode="after")
    def weights_sum_to_one(self) -> "ScoringConfig":
        total = self.tech_weight + self.title_weight + self.location_weight + self.recency_weight
        if abs(total - 1.0) > 1e-6:
            msg = f"scoring weights must sum to 1.0, got {total:.3f}"
            raise ValueError(msg)
        return self


class PipelineConfig(BaseModel):
    """Per-run limits for the orchestrator."""

    batch_size: int = Field(default=50, ge=1)
    top_n: int = Field(default=5, ge=1)
    min_score_threshold: float = Field(default=0.3, ge=0.0, le=1.0)
    page_timeout_s: float = Field(default=30.0, gt=0.0)
    fetch_delay_min_s: float = Field(default=2.0, ge=0.0)
    fetch_delay_max_s: float = Field(default=3.0, ge=0.0)


class SchedulerConfig(BaseModel):
    """Interval scheduler configuration."""

    enabled: bool = True
    interval_days: float = Field(default=3.0, gt=0.0)
    check_interval_s: float = Field(default=3600.0, ge=1.0)


class DatabaseConfig(BaseModel):
    """Database configuration."""

    path: str = "data/jobs.db"


class Settings(BaseModel):
    """Top-level settings loaded from YAML."""

    profile_path: str = "config/profile.yaml"
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    browser: BrowserConfig = Field(default_factory=BrowserConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Settings":
        """Load settings from a YAML file."""
        path = Path(path)
        if not path.exists():
            msg = f"Config file not found: {path}"
            raise FileNotFoundError(msg)
        raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}
        return cls.model_validate(raw)
