"""
Importer module for the Scholarship Search importer.

This module writes candidate listings into the content store:
1. Rejects candidates without a title or a valid URL
2. Skips candidates whose URL is already stored
3. Creates the listing and attaches its metadata
4. Tags it with the provenance category of its source

A listing is created at most once per URL and is never updated when the
same URL is seen again.
"""

from datetime import datetime
from typing import Iterable, Optional

from scholarship_search.dates import (
    format_date,
    format_timestamp,
    to_date,
    to_timestamp,
    utc_now,
)
from scholarship_search.models import CandidateRecord, RunSummary
from scholarship_search.store import (
    CATEGORY_TAXONOMY,
    META_COUNTRY,
    META_DEADLINE,
    META_POSTED_DATE,
    META_SOURCE,
    META_URL,
    ContentStore,
    StoreError,
    Term,
)
from scholarship_search.utils import get_logger, sanitize_text, slugify


# Module logger
logger = get_logger("importer")

DEFAULT_POST_STATUS = "publish"

# Provenance category label per known source
SOURCE_CATEGORY_LABELS = {
    "scholarshipdb.net": "ScholarshipDB Import",
    "findaphd.com": "FindAPhD Import",
}
DEFAULT_CATEGORY_LABEL = "Scraped Scholarship"


def category_label_for(source: Optional[str]) -> str:
    """Category label for a source tag, or the generic fallback."""
    return SOURCE_CATEGORY_LABELS.get(source or "", DEFAULT_CATEGORY_LABEL)


def build_body(candidate: CandidateRecord) -> str:
    """Listing body: the description, or a placeholder citing title and source."""
    description = (candidate.description or "").strip()
    if description:
        return description
    return (
        f'This scholarship, titled "{sanitize_text(candidate.title)}", was sourced from '
        f"{candidate.source or 'N/A'}. Please visit the scholarship URL for full details."
    )


def ensure_category(store: ContentStore, source: Optional[str]) -> Term:
    """
    Look up the provenance category for a source, creating it on first use.

    Args:
        store: Content store.
        source: Source tag of the listing.

    Returns:
        The existing or newly created term.
    """
    label = category_label_for(source)
    slug = slugify(label)

    term = store.term_exists(slug, CATEGORY_TAXONOMY)
    if term is None:
        logger.info(f"Creating category '{label}'")
        term = store.insert_term(
            label,
            CATEGORY_TAXONOMY,
            slug=slug,
            description=f"Scholarships imported from the source: {source or 'N/A'}",
        )
    return term


def import_candidate(
    store: ContentStore,
    candidate: CandidateRecord,
    now: Optional[datetime] = None
) -> Optional[int]:
    """
    Import one candidate.

    The category is resolved first, then the listing is created together
    with all of its metadata in a single store write. A failure before or
    during that write leaves nothing behind, so the URL can be retried on
    a later run.

    Returns:
        ID of the new listing, or None if the candidate was rejected or its
        URL is already stored.

    Raises:
        StoreError: If the store fails before the listing is created.
    """
    if not candidate.is_importable():
        logger.debug(f"Skipping candidate without title or valid URL: {candidate.url!r}")
        return None

    url = candidate.url
    if store.find_ids_by_meta(META_URL, url):
        logger.debug(f"Already imported, skipping: {url}")
        return None

    now = now or utc_now()
    posted = to_timestamp(candidate.posted_date, now=now)
    deadline = to_date(candidate.deadline, now=now)

    post_date = posted if isinstance(posted, datetime) else now

    meta = {META_URL: url}
    if candidate.country:
        meta[META_COUNTRY] = sanitize_text(candidate.country)
    if candidate.source:
        meta[META_SOURCE] = sanitize_text(candidate.source)
    if posted is not None:
        meta[META_POSTED_DATE] = format_timestamp(posted)
    if deadline is not None:
        meta[META_DEADLINE] = format_date(deadline)

    term = ensure_category(store, candidate.source)

    listing_id = store.create_record(
        title=sanitize_text(candidate.title),
        body=build_body(candidate),
        status=DEFAULT_POST_STATUS,
        post_date=format_timestamp(post_date),
        meta=meta,
    )

    try:
        store.set_object_terms(listing_id, [term.id], CATEGORY_TAXONOMY, append=False)
    except StoreError as e:
        # The listing exists with its URL; only the category is missing.
        logger.error(f"Listing {listing_id} created without category '{term.name}': {e}")

    return listing_id


def import_all(
    store: ContentStore,
    candidates: Iterable[CandidateRecord],
    now: Optional[datetime] = None
) -> RunSummary:
    """
    Import candidates in order and summarize the outcome.

    Every candidate counts as processed. A store failure on one candidate
    is logged and the run continues with the next.

    Args:
        store: Content store to write to.
        candidates: Candidates, typically from aggregate_all.
        now: Reference time for relative dates and default post dates.

    Returns:
        RunSummary with processed and newly added counts.
    """
    candidates = list(candidates)
    if not candidates:
        logger.info("No candidates to import")
        return RunSummary(error="No data to process.")

    summary = RunSummary()

    for candidate in candidates:
        summary.processed_count += 1
        try:
            listing_id = import_candidate(store, candidate, now=now)
        except StoreError as e:
            logger.error(f"Failed to import {candidate.url}: {e}")
            continue

        if listing_id is not None:
            summary.newly_added_count += 1
            logger.info(f"Imported listing {listing_id}: {candidate.title}")

    logger.info(
        f"Import complete: {summary.processed_count} processed, "
        f"{summary.newly_added_count} added"
    )
    return summary
