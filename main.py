"""CLI entry point for the job discovery engine."""

import argparse
import asyncio
import logging
import sqlite3
import sys

import yaml

from src.browser.pool import BrowserPool
from src.core.config import Settings
from src.core.db import (
    get_last_session_date,
    get_recent_sessions,
    get_top_jobs_for_session,
    init_db,
)
from src.core.schemas import SessionSummary
from src.pipeline.orchestrator import (
    export_results_json,
    iter_top_jobs_lines,
    run_if_due,
    run_session,
)
from src.pipeline.scheduler import IntervalScheduler
from src.platforms.base import CandidateFeed
from src.platforms.google.adapter import GoogleSearchFeed
from src.platforms.static import StaticFeed
from src.profile.schema import CandidateProfile

logger = logging.getLogger(__name__)

TEST_BATCH_SIZE = 5


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Job discovery engine - find, score and store job listings for a profile",
    )
    subparsers = parser.add_subparsers(dest="command")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        default="config/settings.yaml",
        help="Path to settings YAML file (default: config/settings.yaml)",
    )
    common.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )

    # --- run subcommand (default) ---
    run_parser = subparsers.add_parser("run", parents=[common], help="Run one session now")
    run_parser.add_argument(
        "--export",
        choices=["json"],
        help="Export top picks to format (json)",
    )

    # --- schedule subcommand ---
    subparsers.add_parser(
        "schedule",
        parents=[common],
        help="Run the interval scheduler until interrupted",
    )

    # --- status subcommand ---
    status_parser = subparsers.add_parser(
        "status", parents=[common], help="Show recent sessions and top picks",
    )
    status_parser.add_argument(
        "--limit",
        type=int,
        default=5,
        help="Number of recent sessions to show (default: 5)",
    )

    # --- test subcommand ---
    test_parser = subparsers.add_parser(
        "test",
        parents=[common],
        help=f"Limited headful run ({TEST_BATCH_SIZE} URLs)",
    )
    test_parser.add_argument(
        "--url",
        action="append",
        default=[],
        help="Scrape this URL instead of searching (repeatable)",
    )

    # --- backward compat: top-level flags for run ---
    parser.add_argument("--config", default="config/settings.yaml", help=argparse.SUPPRESS)
    parser.add_argument("--export", choices=["json"], help=argparse.SUPPRESS)
    parser.add_argument("--verbose", "-v", action="store_true", help=argparse.SUPPRESS)

    args = parser.parse_args(argv)

    # Default to run when no subcommand given
    if args.command is None:
        args.command = "run"

    return args


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


async def run_once(
    settings: Settings,
    profile: CandidateProfile,
    conn: sqlite3.Connection,
    urls: list[str] | None = None,
) -> SessionSummary:
    """Start a browser pool, run one session, and shut the pool down."""
    async with BrowserPool(settings.browser) as pool:
        feed: CandidateFeed = StaticFeed(urls) if urls else GoogleSearchFeed(pool, settings.search)
        return await run_session(settings, profile, feed, pool, conn)


def print_summary(summary: SessionSummary, export_format: str | None = None) -> None:
    print(f"\nSession {summary.session_id}: {summary.status.value}")
    if summary.error_message:
        print(f"  Error: {summary.error_message}")
        return
    print(f"  {summary.total_jobs_found} jobs found ({summary.new_jobs_found} new), "
          f"{summary.top_jobs_selected} top picks, "
          f"average score {summary.average_score * 100:.1f}%")
    for line in iter_top_jobs_lines(summary):
        print(f"  {line}")

    if export_format == "json" and summary.top_jobs:
        print(f"\n{export_results_json(summary)}")


def cmd_status(conn: sqlite3.Connection, limit: int) -> None:
    sessions = get_recent_sessions(conn, limit)
    if not sessions:
        print("No sessions recorded yet.")
        return

    print("\nRecent sessions:")
    for idx, s in enumerate(sessions, start=1):
        print(f"{idx}. {s.session_date} - {s.status.value}")
        print(f"   Jobs found: {s.total_jobs_found}, Top picks: {s.top_jobs_selected}")
        if s.error_message:
            print(f"   Error: {s.error_message}")

    print("\nRecent top jobs:")
    rank = 0
    for s in sessions:
        for row in get_top_jobs_for_session(conn, s.id):
            rank += 1
            print(f"{rank}. {row['title']} at {row['company']} (Score: {row['score'] * 100:.1f}%)")
            print(f"   {row['job_url']}")
            if rank >= 10:
                return


async def cmd_schedule(
    settings: Settings, profile: CandidateProfile, conn: sqlite3.Connection,
) -> None:
    """Run the interval scheduler with one browser pool for its whole lifetime.

    The pool is started before the first tick, so a browser that cannot be
    launched fails the command instead of every scheduled run.
    """
    if not settings.scheduler.enabled:
        print("Scheduler is disabled in settings.")
        return

    async with BrowserPool(settings.browser) as pool:
        feed = GoogleSearchFeed(pool, settings.search)

        async def _trigger() -> None:
            summary = await run_if_due(settings, profile, feed, pool, conn)
            if summary is not None:
                print_summary(summary)

        scheduler = IntervalScheduler(
            _trigger,
            lambda: get_last_session_date(conn),
            settings.scheduler.interval_days,
            check_interval_s=settings.scheduler.check_interval_s,
        )
        status = scheduler.status()
        print(
            f"Scheduler {status['state']}: every {status['interval_days']:g} days, "
            f"next run at {status['next_run_time']:%Y-%m-%d %H:%M}",
        )
        try:
            await scheduler.run_forever()
        finally:
            scheduler.stop()


def load_inputs(config_path: str) -> tuple[Settings, CandidateProfile]:
    settings = Settings.from_yaml(config_path)
    profile = CandidateProfile.from_yaml(settings.profile_path)
    return settings, profile


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    setup_logging(args.verbose)

    try:
        settings, profile = load_inputs(args.config)
    except (FileNotFoundError, ValueError, yaml.YAMLError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        conn = init_db(settings.database.path)
    except (sqlite3.Error, OSError) as e:
        print(f"Error opening database {settings.database.path}: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        if args.command == "status":
            cmd_status(conn, args.limit)
        elif args.command == "schedule":
            try:
                asyncio.run(cmd_schedule(settings, profile, conn))
            except KeyboardInterrupt:
                print("\nShutting down.")
        elif args.command == "test":
            test_settings = settings.model_copy(
                update={
                    "browser": settings.browser.model_copy(update={"headless": False}),
                    "pipeline": settings.pipeline.model_copy(
                        update={"batch_size": TEST_BATCH_SIZE},
                    ),
                },
            )
            summary = asyncio.run(run_once(test_settings, profile, conn, urls=args.url))
            print_summary(summary)
        else:
            summary = asyncio.run(run_once(settings, profile, conn))
            print_summary(summary, args.export)
    except RuntimeError as e:
        print(f"Error starting browser: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        conn.close()


if __name__ == "__main__":
    main()
