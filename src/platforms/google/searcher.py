"""Google query and URL builders.

Pure functions, no browser dependency.
"""

from urllib.parse import urlencode

GOOGLE_SEARCH_BASE = "https://www.google.com/search"

JOB_KEYWORDS = ("job", "career", "hiring", "position", "opening", "vacancy")


def build_query(role: str, site: str | None = None, locations: list[str] | None = None) -> str:
    """Build a search query for one role, optionally restricted to a site.

    Remote / work-from-home is always included alongside preferred locations.
    """
    query = f'"{role}" jobs'
    if site:
        query += f" site:{site}"

    terms = ["remote", '"work from home"']
    for loc in locations or []:
        term = f'"{loc}"' if " " in loc else loc.lower()
        if term not in terms:
            terms.append(term)
    query += f" ({' OR '.join(terms)})"
    return query


def build_search_url(query: str, num: int = 20) -> str:
    """Build a Google results URL for a query."""
    params = {"q": query, "num": str(num), "hl": "en"}
    return f"{GOOGLE_SEARCH_BASE}?{urlencode(params)}"


def is_job_related(title: str, snippet: str, url: str) -> bool:
    text = f"{title} {snippet} {url}".lower()
    return any(kw in text for kw in JOB_KEYWORDS)
