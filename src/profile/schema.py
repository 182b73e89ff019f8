"""CandidateProfile model for config/profile.yaml."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator


class CandidateProfile(BaseModel):
    """Structured resume/preferences input that drives scoring.

    Accepts the legacy resume layout (``{"candidate": {...}}`` with
    ``location`` and ``experience_years``) as well as the flat layout.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = ""
    roles: list[str]
    tech_stack: list[str] = Field(default_factory=list)
    locations: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("locations", "location"),
    )
    years_of_experience: int = Field(
        default=0,
        ge=0,
        validation_alias=AliasChoices("years_of_experience", "experience_years"),
    )
    email: str = ""
    phone: str = ""
    portfolio: str = ""

    @model_validator(mode="before")
    @classmethod
    def unwrap_candidate(cls, data: Any) -> Any:
        if isinstance(data, dict) and isinstance(data.get("candidate"), dict):
            return data["candidate"]
        return data

    @field_validator("roles")
    @classmethod
    def roles_non_empty(cls, v: list[str]) -> list[str]:
        roles = [r.strip() for r in v if r.strip()]
        if not roles:
            msg = "roles must not be empty"
            raise ValueError(msg)
        return roles

    @field_validator("tech_stack", "locations")
    @classmethod
    def strip_blank(cls, v: list[str]) -> list[str]:
        return [s.strip() for s in v if s.strip()]

    @classmethod
    def from_yaml(cls, path: str | Path) -> "CandidateProfile":
        """Load a profile from a YAML (or JSON) file."""
        path = Path(path)
        if not path.exists():
            msg = f"Profile file not found: {path}"
            raise FileNotFoundError(msg)
        raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}
        return cls.model_validate(raw)
