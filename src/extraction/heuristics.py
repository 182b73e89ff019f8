"""Text heuristics over a page's full text: tech stack, requirements, posted date.

Pure functions, no browser dependency.
"""

import re
from collections.abc import Iterable
from datetime import date, datetime, timedelta

REQUIREMENTS_MAX_CHARS = 1000

TECH_CATALOG: tuple[str, ...] = (
    "JavaScript",
    "TypeScript",
    "Python",
    "Java",
    "Go",
    "Rust",
    "Ruby",
    "PHP",
    "C++",
    "C#",
    "Kotlin",
    "Swift",
    "Scala",
    "Elixir",
    "React",
    "Next.js",
    "Vue",
    "Angular",
    "Svelte",
    "Node.js",
    "Express",
    "NestJS",
    "Django",
    "Flask",
    "FastAPI",
    "Spring",
    "Rails",
    "Laravel",
    ".NET",
    "GraphQL",
    "REST",
    "gRPC",
    "PostgreSQL",
    "MySQL",
    "MongoDB",
    "Redis",
    "Elasticsearch",
    "Kafka",
    "RabbitMQ",
    "SQL",
    "AWS",
    "GCP",
    "Azure",
    "Docker",
    "Kubernetes",
    "Terraform",
    "Linux",
    "Git",
    "CI/CD",
    "Tailwind",
    "HTML",
    "CSS",
)

# Priority order: the first header present in the text wins.
REQUIREMENTS_HEADERS: tuple[str, ...] = (
    "requirements:",
    "qualifications:",
    "must have:",
    "what you'll need:",
    "what we're looking for:",
    "you have:",
    "skills:",
)

_POSTED_TODAY = re.compile(r"posted\s+today", re.IGNORECASE)
_POSTED_YESTERDAY = re.compile(r"posted\s+yesterday", re.IGNORECASE)
_HOURS_AGO = re.compile(r"(\d+)\s+hours?\s+ago", re.IGNORECASE)
_DAYS_AGO = re.compile(r"(\d+)\s+days?\s+ago", re.IGNORECASE)


def infer_tech_stack(text: str, extra: Iterable[str] = ()) -> list[str]:
    """Return technologies mentioned in ``text`` (case-insensitive substring).

    Candidates are the catalog followed by ``extra`` (the profile's stack).
    The result is deduplicated case-insensitively, catalog order first.
    """
    haystack = text.lower()
    found: list[str] = []
    seen: set[str] = set()
    for tech in (*TECH_CATALOG, *extra):
        key = tech.strip().lower()
        if not key or key in seen:
            continue
        if key in haystack:
            seen.add(key)
            found.append(tech.strip())
    return found


def extract_requirements(text: str) -> str:
    """Return up to 1000 chars following the first requirements-style header."""
    lowered = text.lower()
    for header in REQUIREMENTS_HEADERS:
        idx = lowered.find(header)
        if idx != -1:
            start = idx + len(header)
            return text[start : start + REQUIREMENTS_MAX_CHARS].strip()
    return ""


def infer_posted_date(text: str, now: datetime | None = None) -> date | None:
    """Convert relative phrases ("3 days ago", "posted today") into a date.

    Returns None when no phrase is present.
    """
    now = now or datetime.now()
    if _POSTED_TODAY.search(text):
        return now.date()
    if _POSTED_YESTERDAY.search(text):
        return (now - timedelta(days=1)).date()
    match = _HOURS_AGO.search(text)
    if match:
        return (now - timedelta(hours=int(match.group(1)))).date()
    match = _DAYS_AGO.search(text)
    if match:
        return (now - timedelta(days=int(match.group(1)))).date()
    return None
