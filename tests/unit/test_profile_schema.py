"""Tests for CandidateProfile schema."""

from pathlib import Path
from textwrap import dedent

import pytest
from pydantic import ValidationError

from src.profile.schema import CandidateProfile


class TestCandidateProfile:
    def test_valid_profile(self) -> None:
        p = CandidateProfile(
            name="Jane Doe",
            roles=["Backend Engineer"],
            tech_stack=["Python", "FastAPI"],
            locations=["Bangalore"],
            years_of_experience=5,
        )
        assert p.name == "Jane Doe"
        assert p.roles == ["Backend Engineer"]
        assert p.years_of_experience == 5

    def test_missing_roles_raises(self) -> None:
        with pytest.raises(ValidationError, match="roles must not be empty"):
            CandidateProfile(roles=[])

    def test_blank_roles_raise(self) -> None:
        with pytest.raises(ValidationError, match="roles must not be empty"):
            CandidateProfile(roles=["  ", ""])

    def test_lists_stripped(self) -> None:
        p = CandidateProfile(
            roles=[" Backend Engineer "], tech_stack=["Python ", " "], locations=[" Remote"],
        )
        assert p.roles == ["Backend Engineer"]
        assert p.tech_stack == ["Python"]
        assert p.locations == ["Remote"]

    def test_defaults(self) -> None:
        p = CandidateProfile(roles=["Engineer"])
        assert p.tech_stack == []
        assert p.locations == []
        assert p.years_of_experience == 0

    def test_negative_experience_raises(self) -> None:
        with pytest.raises(ValidationError):
            CandidateProfile(roles=["Engineer"], years_of_experience=-1)

    def test_frozen(self) -> None:
        p = CandidateProfile(roles=["Engineer"])
        with pytest.raises(ValidationError):
            p.name = "Other"  # type: ignore[misc]

    def test_legacy_field_names(self) -> None:
        p = CandidateProfile.model_validate(
            {"roles": ["Engineer"], "location": ["Pune"], "experience_years": 7},
        )
        assert p.locations == ["Pune"]
        assert p.years_of_experience == 7

    def test_candidate_envelope_unwrapped(self) -> None:
        p = CandidateProfile.model_validate(
            {"candidate": {"name": "Raj", "roles": ["SRE"], "tech_stack": ["Go"]}},
        )
        assert p.name == "Raj"
        assert p.roles == ["SRE"]


class TestFromYaml:
    def test_load(self, tmp_path: Path) -> None:
        path = tmp_path / "profile.yaml"
        path.write_text(dedent("""\
            name: Jane Doe
            roles:
              - Backend Engineer
            tech_stack: [Python, Docker]
            locations: [Bangalore]
            years_of_experience: 4
        """))
        p = CandidateProfile.from_yaml(path)
        assert p.tech_stack == ["Python", "Docker"]
        assert p.years_of_experience == 4

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            CandidateProfile.from_yaml(tmp_path / "missing.yaml")

    def test_empty_file_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "profile.yaml"
        path.write_text("")
        with pytest.raises(ValidationError):
            CandidateProfile.from_yaml(path)

    def test_example_profile_loads(self) -> None:
        example = Path(__file__).resolve().parents[2] / "config" / "profile.example.yaml"
        p = CandidateProfile.from_yaml(example)
        assert p.roles == ["Backend Engineer", "Full Stack Developer"]
        assert p.years_of_experience == 5
