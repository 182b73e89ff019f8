"""SQLite database layer for job listings, scraping sessions, and search queries."""

import json
import sqlite3
from datetime import date, datetime
from pathlib import Path
from typing import Any

from src.core.schemas import ScoredJob, ScrapingSession, SessionStatus

_JOB_LISTINGS_TABLE = """
CREATE TABLE IF NOT EXISTS job_listings (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    title           TEXT    NOT NULL,
    company         TEXT    NOT NULL DEFAULT '',
    company_url     TEXT    NOT NULL DEFAULT '',
    job_url         TEXT    NOT NULL UNIQUE,
    description     TEXT    NOT NULL DEFAULT '',
    requirements    TEXT    NOT NULL DEFAULT '',
    tech_stack      TEXT    NOT NULL DEFAULT '[]',
    salary_range    TEXT,
    location        TEXT,
    posted_date     TEXT,
    score           REAL    NOT NULL DEFAULT 0.0,
    is_top_pick     INTEGER NOT NULL DEFAULT 0,
    session_id      INTEGER,
    scraped_at      TEXT    NOT NULL,
    created_at      TEXT    NOT NULL,
    updated_at      TEXT    NOT NULL
);
"""

_SESSIONS_TABLE = """
CREATE TABLE IF NOT EXISTS scraping_sessions (
    id                INTEGER PRIMARY KEY AUTOINCREMENT,
    session_date      TEXT    NOT NULL,
    search_queries    TEXT    NOT NULL DEFAULT '[]',
    status            TEXT    NOT NULL DEFAULT 'running',
    total_jobs_found  INTEGER NOT NULL DEFAULT 0,
    top_jobs_selected INTEGER NOT NULL DEFAULT 0,
    started_at        TEXT    NOT NULL,
    completed_at      TEXT,
    error_message     TEXT
);
"""

_SEARCH_QUERIES_TABLE = """
CREATE TABLE IF NOT EXISTS search_queries (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    query           TEXT    NOT NULL,
    site            TEXT    NOT NULL DEFAULT '',
    results_count   INTEGER NOT NULL DEFAULT 0,
    session_id      INTEGER REFERENCES scraping_sessions(id),
    executed_at     TEXT    NOT NULL
);
"""

_INDEXES = (
    "CREATE INDEX IF NOT EXISTS idx_job_listings_session_id ON job_listings(session_id)",
    "CREATE INDEX IF NOT EXISTS idx_job_listings_score ON job_listings(score DESC)",
    "CREATE INDEX IF NOT EXISTS idx_scraping_sessions_date ON scraping_sessions(session_date DESC)",
)

# Columns update_session() is allowed to touch.
_SESSION_UPDATABLE = (
    "status",
    "total_jobs_found",
    "top_jobs_selected",
    "completed_at",
    "error_message",
)


def init_db(path: str | Path) -> sqlite3.Connection:
    """Create the database and tables, returning a connection."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute(_JOB_LISTINGS_TABLE)
    conn.execute(_SESSIONS_TABLE)
    conn.execute(_SEARCH_QUERIES_TABLE)
    for statement in _INDEXES:
        conn.execute(statement)
    conn.commit()
    return conn


# --- Sessions ---


def create_session(
    conn: sqlite3.Connection,
    session_date: date,
    search_queries: list[str],
) -> int:
    """Insert a new session in ``running`` state. Returns the session ID."""
    cursor = conn.execute(
        """
        INSERT INTO scraping_sessions (session_date, search_queries, status, started_at)
        VALUES (?, ?, ?, ?)
        """,
        (
            session_date.isoformat(),
            json.dumps(search_queries),
            SessionStatus.RUNNING.value,
            datetime.now().isoformat(),
        ),
    )
    conn.commit()
    return cursor.lastrowid or 0


def update_session(conn: sqlite3.Connection, session_id: int, **fields: Any) -> None:
    """Apply a partial update to a session row.

    Only the columns in ``_SESSION_UPDATABLE`` may be set; anything else
    raises ValueError. Enum and datetime values are stored as text.
    """
    unknown = set(fields) - set(_SESSION_UPDATABLE)
    if unknown:
        msg = f"Cannot update session columns: {sorted(unknown)}"
        raise ValueError(msg)
    if not fields:
        return

    columns: list[str] = []
    values: list[Any] = []
    for column in _SESSION_UPDATABLE:
        if column not in fields:
            continue
        value = fields[column]
        if isinstance(value, SessionStatus):
            value = value.value
        elif isinstance(value, datetime):
            value = value.isoformat()
        columns.append(f"{column} = ?")
        values.append(value)

    values.append(session_id)
    conn.execute(
        f"UPDATE scraping_sessions SET {', '.join(columns)} WHERE id = ?",  # noqa: S608
        values,
    )
    conn.commit()


def get_session(conn: sqlite3.Connection, session_id: int) -> ScrapingSession | None:
    row = conn.execute(
        "SELECT * FROM scraping_sessions WHERE id = ?", (session_id,),
    ).fetchone()
    return _row_to_session(row) if row is not None else None


def get_recent_sessions(conn: sqlite3.Connection, limit: int = 10) -> list[ScrapingSession]:
    """Return the most recent sessions, newest first."""
    rows = conn.execute(
        "SELECT * FROM scraping_sessions ORDER BY started_at DESC, id DESC LIMIT ?",
        (limit,),
    ).fetchall()
    return [_row_to_session(r) for r in rows]


def get_last_session_date(conn: sqlite3.Connection) -> datetime | None:
    """Return the start time of the most recent completed session, if any.

    Failed and running sessions do not count as a run.
    """
    row = conn.execute(
        "SELECT MAX(started_at) AS last_run FROM scraping_sessions WHERE status = ?",
        (SessionStatus.COMPLETED.value,),
    ).fetchone()
    if row is None or row["last_run"] is None:
        return None
    return datetime.fromisoformat(row["last_run"])


# --- Job listings ---


def upsert_job(conn: sqlite3.Connection, scored: ScoredJob, session_id: int) -> int:
    """Insert a job listing or update the existing row with the same job_url.

    On conflict the mutable fields (title, company, description, score) and
    the owning session are overwritten, and the top-pick flag is cleared so
    only the new session's mark_top_picks sets it. Returns the row ID either way.
    """
    j = scored.job
    now = datetime.now().isoformat()
    conn.execute(
        """
        INSERT INTO job_listings
            (title, company, company_url, job_url, description, requirements,
             tech_stack, salary_range, location, posted_date, score, session_id,
             scraped_at, created_at, updated_at)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        ON CONFLICT(job_url) DO UPDATE SET
            title = excluded.title,
            company = excluded.company,
            description = excluded.description,
            score = excluded.score,
            is_top_pick = 0,
            session_id = excluded.session_id,
            scraped_at = excluded.scraped_at,
            updated_at = excluded.updated_at
        """,
        (
            j.title,
            j.company,
            j.company_url,
            j.job_url,
            j.description,
            j.requirements,
            json.dumps(j.tech_stack),
            j.salary_range,
            j.location,
            j.posted_date.isoformat() if j.posted_date else None,
            scored.score,
            session_id,
            now,
            now,
            now,
        ),
    )
    conn.commit()
    row = conn.execute("SELECT id FROM job_listings WHERE job_url = ?", (j.job_url,)).fetchone()
    return int(row["id"])


def mark_top_picks(conn: sqlite3.Connection, job_ids: list[int]) -> None:
    """Flag the given rows as top picks. Re-marking is a no-op."""
    if not job_ids:
        return
    conn.executemany(
        "UPDATE job_listings SET is_top_pick = 1 WHERE id = ?",
        [(job_id,) for job_id in job_ids],
    )
    conn.commit()


def job_exists(conn: sqlite3.Connection, job_url: str) -> bool:
    row = conn.execute(
        "SELECT 1 FROM job_listings WHERE job_url = ? LIMIT 1", (job_url,),
    ).fetchone()
    return row is not None


def get_jobs_for_session(conn: sqlite3.Connection, session_id: int) -> list[sqlite3.Row]:
    """Return all job rows owned by a session, best score first."""
    return conn.execute(
        "SELECT * FROM job_listings WHERE session_id = ? ORDER BY score DESC, id",
        (session_id,),
    ).fetchall()


def get_top_jobs_for_session(
    conn: sqlite3.Connection,
    session_id: int,
    limit: int = 5,
) -> list[sqlite3.Row]:
    """Return the top-pick rows for a session, best score first."""
    return conn.execute(
        """
        SELECT * FROM job_listings
        WHERE session_id = ? AND is_top_pick = 1
        ORDER BY score DESC, scraped_at DESC
        LIMIT ?
        """,
        (session_id, limit),
    ).fetchall()


# --- Search queries ---


def log_search_query(
    conn: sqlite3.Connection,
    query: str,
    site: str,
    results_count: int,
    session_id: int | None = None,
) -> int:
    """Record an executed search-engine query. Returns the row ID."""
    cursor = conn.execute(
        """
        INSERT INTO search_queries (query, site, results_count, session_id, executed_at)
        VALUES (?, ?, ?, ?, ?)
        """,
        (query, site, results_count, session_id, datetime.now().isoformat()),
    )
    conn.commit()
    return cursor.lastrowid or 0


def _row_to_session(row: sqlite3.Row) -> ScrapingSession:
    return ScrapingSession(
        id=row["id"],
        session_date=date.fromisoformat(row["session_date"]),
        search_queries=json.loads(row["search_queries"] or "[]"),
        status=SessionStatus(row["status"]),
        total_jobs_found=row["total_jobs_found"],
        top_jobs_selected=row["top_jobs_selected"],
        started_at=datetime.fromisoformat(row["started_at"]),
        completed_at=(
            datetime.fromisoformat(row["completed_at"]) if row["completed_at"] else None
        ),
        error_message=row["error_message"],
    )
