"""
Aggregate module for the Scholarship Search importer.

Runs every configured source variant and merges the results, dropping
repeated URLs within the same run. The same listing commonly shows up in
both findaphd.com audience variants; removing it here saves a store lookup.
"""

from typing import Iterable, List, Optional, Sequence, Set

import requests

from scholarship_search.fetch import create_session
from scholarship_search.models import CandidateRecord
from scholarship_search.sources import DEFAULT_SOURCES, SourceVariant, scrape_source
from scholarship_search.utils import get_logger


# Module logger
logger = get_logger("aggregate")


def dedupe_by_url(records: Iterable[CandidateRecord]) -> List[CandidateRecord]:
    """
    Keep the first record for each distinct non-empty URL.

    Records without a URL cannot be compared and are passed through; the
    importer rejects them later.

    Args:
        records: Candidates in fetch order.

    Returns:
        Candidates in first-seen order with repeated URLs removed.
    """
    seen_urls: Set[str] = set()
    unique: List[CandidateRecord] = []

    for record in records:
        url = record.url if isinstance(record.url, str) else ""
        if not url:
            logger.debug(f"Passing through record without URL: {record.title!r}")
            unique.append(record)
            continue
        if url in seen_urls:
            continue
        seen_urls.add(url)
        unique.append(record)

    return unique


def aggregate_all(
    keywords: str,
    max_pages_per_source: int = 1,
    sources: Optional[Sequence[SourceVariant]] = None,
    session: Optional[requests.Session] = None,
    **scrape_options
) -> List[CandidateRecord]:
    """
    Scrape all source variants and return deduplicated candidates.

    Args:
        keywords: Search keywords passed to every source.
        max_pages_per_source: Page bound applied to each variant.
        sources: Variants to run. Defaults to DEFAULT_SOURCES.
        session: Session shared by all requests of the run.
        **scrape_options: Forwarded to scrape_source (delay_range, sleep).

    Returns:
        Candidates from all sources, unique by URL.
    """
    if sources is None:
        sources = DEFAULT_SOURCES

    owns_session = session is None
    if owns_session:
        session = create_session()

    all_records: List[CandidateRecord] = []

    try:
        for variant in sources:
            records = scrape_source(
                variant,
                keywords,
                max_pages_per_source,
                session=session,
                **scrape_options
            )
            logger.info(f"[{variant.name}] Collected {len(records)} listing(s)")
            all_records.extend(records)
    finally:
        if owns_session:
            session.close()

    unique = dedupe_by_url(all_records)
    logger.info(
        f"Aggregated {len(all_records)} listing(s) from {len(sources)} source(s), "
        f"{len(unique)} after de-duplication"
    )

    return unique
