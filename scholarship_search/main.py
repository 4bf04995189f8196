#!/usr/bin/env python3
"""
Main orchestration module for the Scholarship Search importer.

This module coordinates one import run:
aggregate (fetch → extract → de-duplicate) → import

run_importer is the single entry point; the scheduled trigger and the
manual trigger both resolve their settings and then call it, so a run
behaves the same whichever way it was started.
"""

import argparse
import os
import sys
from typing import Callable, List, Optional, Union

from scholarship_search.aggregate import aggregate_all
from scholarship_search.config import ConfigError, ImporterConfig, load_config
from scholarship_search.fetch import create_session
from scholarship_search.importer import import_all
from scholarship_search.models import CandidateRecord, RunFailure, RunSummary
from scholarship_search.scheduler import ImportScheduler
from scholarship_search.sources import clamp_max_pages
from scholarship_search.store import ContentStore, JsonContentStore
from scholarship_search.summary_cache import (
    LAST_CRON_RUN_KEY,
    LAST_MANUAL_RUN_KEY,
    SummaryCache,
)
from scholarship_search.utils import get_logger, setup_logging


# Exit codes
EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_ENV_ERROR = 2

NO_DATA_MESSAGE = "No data fetched from sources."
NO_KEYWORDS_MESSAGE = "Fetching cron ran but no keywords were configured."

Aggregator = Callable[[str, int], List[CandidateRecord]]
RunResult = Union[RunSummary, RunFailure]


def run_importer(
    keywords: str,
    max_pages_per_source: int,
    store: Optional[ContentStore],
    aggregator: Optional[Aggregator] = aggregate_all
) -> RunResult:
    """
    Execute one import run.

    Args:
        keywords: Search keywords sent to every source.
        max_pages_per_source: Result pages per source variant (1-5).
        store: Content store receiving new listings.
        aggregator: Callable producing de-duplicated candidates.

    Returns:
        RunSummary, or RunFailure when a required collaborator is missing.
    """
    logger = get_logger("main")

    if store is None:
        logger.error("Import aborted: no content store available")
        return RunFailure("Content store unavailable.")
    if aggregator is None or not callable(aggregator):
        logger.error("Import aborted: no aggregator available")
        return RunFailure("Scraper aggregator unavailable.")

    max_pages = clamp_max_pages(max_pages_per_source)

    logger.info("=" * 60)
    logger.info(f"Scholarship import - Starting (keywords={keywords!r}, pages={max_pages})")
    logger.info("=" * 60)

    try:
        candidates = aggregator(keywords, max_pages)

        if not candidates:
            logger.info("No listings fetched from any source")
            return RunSummary(message=NO_DATA_MESSAGE)

        summary = import_all(store, candidates)
    except Exception as e:
        logger.exception(f"Import aborted by unexpected error: {e}")
        return RunFailure(f"Unexpected error: {e}")

    logger.info("=" * 60)
    logger.info(f"Scholarship import - Complete: {summary.describe()}")
    logger.info("=" * 60)

    return summary


def _default_aggregator(config: ImporterConfig) -> Aggregator:
    def aggregate(keywords: str, max_pages: int) -> List[CandidateRecord]:
        session = create_session(info_url=config.info_url)
        try:
            return aggregate_all(keywords, max_pages, session=session)
        finally:
            session.close()
    return aggregate


def describe_result(result: RunResult) -> str:
    return result.describe()


def execute_scheduled_run(
    config: ImporterConfig,
    store: Optional[ContentStore] = None,
    cache: Optional[SummaryCache] = None,
    aggregator: Optional[Aggregator] = None
) -> Optional[RunResult]:
    """
    Scheduled trigger: run with the configured keywords and page bound.

    The outcome is recorded in the summary cache. Without configured
    keywords nothing is fetched.

    Returns:
        The run result, or None when no keywords are configured.
    """
    logger = get_logger("main")
    cache = cache or SummaryCache(config.summary_path)

    if not config.keywords:
        logger.warning(NO_KEYWORDS_MESSAGE)
        cache.set(LAST_CRON_RUN_KEY, NO_KEYWORDS_MESSAGE)
        return None

    if store is None:
        store = JsonContentStore(config.data_path)
    result = run_importer(
        config.keywords,
        config.max_pages,
        store,
        aggregator or _default_aggregator(config)
    )

    if isinstance(result, RunFailure):
        cache.set(LAST_CRON_RUN_KEY, f"Fetching cron failed: {result.reason}")
    else:
        cache.set(LAST_CRON_RUN_KEY, describe_result(result))

    return result


def execute_manual_run(
    config: ImporterConfig,
    keywords: Optional[str] = None,
    max_pages: Optional[int] = None,
    store: Optional[ContentStore] = None,
    cache: Optional[SummaryCache] = None,
    aggregator: Optional[Aggregator] = None
) -> RunResult:
    """
    Manual trigger: run with operator keywords, else the configured ones.

    Returns:
        The run result. Missing keywords yield a RunFailure.
    """
    logger = get_logger("main")
    cache = cache or SummaryCache(config.summary_path)

    keywords = (keywords or "").strip() or config.keywords
    if not keywords:
        logger.error("No keywords given and none configured")
        result: RunResult = RunFailure("No keywords provided.")
        cache.set(LAST_MANUAL_RUN_KEY, describe_result(result))
        return result

    if store is None:
        store = JsonContentStore(config.data_path)
    result = run_importer(
        keywords,
        max_pages if max_pages is not None else config.max_pages,
        store,
        aggregator or _default_aggregator(config)
    )
    cache.set(LAST_MANUAL_RUN_KEY, describe_result(result))
    return result


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="scholarship-search",
        description="Import scholarship listings from external sources."
    )
    parser.add_argument("--config", help="Path to a JSON settings file.")
    subparsers = parser.add_subparsers(dest="command")

    run_parser = subparsers.add_parser("run", help="Run one import now.")
    run_parser.add_argument("--keywords", help="Search keywords (defaults to configured keywords).")
    run_parser.add_argument("--max-pages", type=int, help="Pages per source, 1-5.")

    subparsers.add_parser("schedule", help="Run imports on the configured schedule.")
    subparsers.add_parser("status", help="Show the last run summaries.")

    return parser


def _print_status(config: ImporterConfig) -> int:
    cache = SummaryCache(config.summary_path)
    scheduler = ImportScheduler(lambda: None)
    try:
        scheduler.apply_schedule(config.cron_schedule)
    except ConfigError as e:
        print(f"Schedule: invalid ({e})")
        return EXIT_ENV_ERROR

    next_run = scheduler.next_run_time()
    print(f"Schedule: {config.cron_schedule}")
    print(f"Next run: {next_run.isoformat() if next_run else 'not scheduled'}")
    print(f"Last scheduled run: {cache.get(LAST_CRON_RUN_KEY) or 'n/a'}")
    print(f"Last manual run: {cache.get(LAST_MANUAL_RUN_KEY) or 'n/a'}")
    return EXIT_SUCCESS


def _run_schedule(config: ImporterConfig) -> int:
    logger = get_logger("main")
    scheduler = ImportScheduler(lambda: execute_scheduled_run(config))

    try:
        scheduler.apply_schedule(config.cron_schedule)
    except ConfigError as e:
        logger.error(str(e))
        return EXIT_ENV_ERROR

    if scheduler.next_run_time() is None:
        logger.error("Schedule is 'never'; set SCHOLARSHIP_CRON_SCHEDULE to enable it")
        return EXIT_ENV_ERROR

    logger.info(f"Next import at {scheduler.next_run_time().isoformat()}")
    try:
        scheduler.start()
    finally:
        scheduler.shutdown()
    return EXIT_SUCCESS


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the Scholarship Search importer.

    Sets up logging, loads settings and dispatches the command.

    Returns:
        Exit code for the process.
    """
    setup_logging(os.environ.get("LOG_LEVEL", "INFO").upper())
    logger = get_logger("main")

    args = build_parser().parse_args(argv)
    config = load_config(args.config)
    command = args.command or "run"

    try:
        if command == "status":
            return _print_status(config)
        if command == "schedule":
            return _run_schedule(config)

        result = execute_manual_run(
            config,
            keywords=getattr(args, "keywords", None),
            max_pages=getattr(args, "max_pages", None),
        )
        print(describe_result(result))
        return EXIT_FAILURE if isinstance(result, RunFailure) else EXIT_SUCCESS

    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return EXIT_FAILURE

    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
