"""Tests for page-text heuristics: tech stack, requirements, posted date."""

from datetime import date, datetime

from src.extraction.heuristics import (
    REQUIREMENTS_MAX_CHARS,
    extract_requirements,
    infer_posted_date,
    infer_tech_stack,
)

NOW = datetime(2026, 3, 10, 9, 0, 0)


class TestInferTechStack:
    def test_finds_catalog_entries(self) -> None:
        text = "We use Python, Docker and Kubernetes in production."
        assert infer_tech_stack(text) == ["Python", "Docker", "Kubernetes"]

    def test_case_insensitive(self) -> None:
        assert infer_tech_stack("experience with POSTGRESQL") == ["PostgreSQL", "SQL"]

    def test_catalog_order_not_text_order(self) -> None:
        assert infer_tech_stack("Redis then Flask") == ["Flask", "Redis"]

    def test_profile_tech_appended(self) -> None:
        text = "Strong Elm and Haskell background, some Python"
        assert infer_tech_stack(text, ["Haskell", "Elm"]) == ["Python", "Haskell", "Elm"]

    def test_profile_tech_already_in_catalog_not_duplicated(self) -> None:
        assert infer_tech_stack("python shop", ["python", "PYTHON"]) == ["Python"]

    def test_blank_extra_ignored(self) -> None:
        assert infer_tech_stack("nothing here", ["", "  "]) == []

    def test_empty_text(self) -> None:
        assert infer_tech_stack("") == []


class TestExtractRequirements:
    def test_text_after_header(self) -> None:
        text = "About us\nRequirements: 3+ years of Python\nBenefits"
        assert extract_requirements(text) == "3+ years of Python\nBenefits"

    def test_header_priority(self) -> None:
        text = "Skills: teamwork. Qualifications: a degree."
        assert extract_requirements(text) == "a degree."

    def test_truncated(self) -> None:
        text = "Must have:" + "x" * 3000
        assert len(extract_requirements(text)) == REQUIREMENTS_MAX_CHARS

    def test_source_case_kept(self) -> None:
        assert extract_requirements("WHAT YOU'LL NEED: Go and AWS") == "Go and AWS"

    def test_no_header(self) -> None:
        assert extract_requirements("Just a description") == ""


class TestInferPostedDate:
    def test_posted_today(self) -> None:
        assert infer_posted_date("Posted today", NOW) == date(2026, 3, 10)

    def test_posted_yesterday(self) -> None:
        assert infer_posted_date("posted  yesterday", NOW) == date(2026, 3, 9)

    def test_hours_ago(self) -> None:
        assert infer_posted_date("5 hours ago", NOW) == date(2026, 3, 10)

    def test_hours_ago_crosses_midnight(self) -> None:
        assert infer_posted_date("12 hours ago", NOW) == date(2026, 3, 9)

    def test_days_ago(self) -> None:
        assert infer_posted_date("Posted 3 days ago", NOW) == date(2026, 3, 7)

    def test_single_day(self) -> None:
        assert infer_posted_date("1 day ago", NOW) == date(2026, 3, 9)

    def test_today_wins_over_days(self) -> None:
        assert infer_posted_date("Posted today. Similar job: 10 days ago", NOW) == date(2026, 3, 10)

    def test_unknown(self) -> None:
        assert infer_posted_date("Apply now", NOW) is None
