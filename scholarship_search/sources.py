"""
Source definitions for the Scholarship Search importer.

A SourceVariant pairs a way of building search URLs with the extractor for
the resulting pages. findaphd.com is searched twice, once per audience
segment, using the same extractor.
"""

import random
import time
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple
from urllib.parse import urlencode

import requests

from scholarship_search.fetch import create_session, fetch_html
from scholarship_search.models import CandidateRecord
from scholarship_search.parse import (
    FINDAPHD_BASE_URL,
    SCHOLARSHIPDB_BASE_URL,
    extract_findaphd,
    extract_scholarshipdb,
)
from scholarship_search.utils import get_logger


# Module logger
logger = get_logger("sources")

# Allowed pages per source and run
MIN_PAGES = 1
MAX_PAGES = 5

# Pause between pages of the same source, in seconds
DEFAULT_PAGE_DELAY = (1.0, 2.0)


@dataclass(frozen=True)
class SourceVariant:
    """
    One searchable listing path of a source site.

    Attributes:
        name: Label used in logs.
        base_url: Site root, used to absolutize detail links.
        path: Search path appended to base_url.
        keyword_param: Query parameter carrying the keywords.
        page_param: Query parameter carrying the 1-based page number.
        extra_params: Fixed parameters the variant always sends.
        extract: Page extractor shared by all variants of the site.
    """
    name: str
    base_url: str
    path: str
    keyword_param: str
    page_param: str
    extract: Callable[[str, str], List[CandidateRecord]]
    extra_params: Tuple[Tuple[str, str], ...] = ()

    def build_url(self, keywords: str, page: int) -> str:
        params = [(self.keyword_param, keywords), (self.page_param, str(page))]
        params.extend(self.extra_params)
        return f"{self.base_url.rstrip('/')}{self.path}?{urlencode(params)}"


SCHOLARSHIPDB = SourceVariant(
    name="scholarshipdb.net",
    base_url=SCHOLARSHIPDB_BASE_URL,
    path="/scholarships/Program-PhD",
    keyword_param="q",
    page_param="page",
    extract=extract_scholarshipdb,
)

FINDAPHD_NON_EU = SourceVariant(
    name="findaphd.com (non-EU)",
    base_url=FINDAPHD_BASE_URL,
    path="/phds/non-eu-students/",
    keyword_param="Keywords",
    page_param="PG",
    extract=extract_findaphd,
    extra_params=(("01w0", ""),),
)

FINDAPHD_EU = SourceVariant(
    name="findaphd.com (EU)",
    base_url=FINDAPHD_BASE_URL,
    path="/phds/eu-students/",
    keyword_param="Keywords",
    page_param="PG",
    extract=extract_findaphd,
    extra_params=(("01g0", ""),),
)

DEFAULT_SOURCES = [SCHOLARSHIPDB, FINDAPHD_NON_EU, FINDAPHD_EU]


def clamp_max_pages(max_pages: int) -> int:
    """Bound a page count to the supported range."""
    try:
        pages = int(max_pages)
    except (TypeError, ValueError):
        logger.warning(f"Invalid page count {max_pages!r}, using {MIN_PAGES}")
        return MIN_PAGES
    return max(MIN_PAGES, min(MAX_PAGES, pages))


def scrape_source(
    variant: SourceVariant,
    keywords: str,
    max_pages: int = 1,
    session: Optional[requests.Session] = None,
    delay_range: Tuple[float, float] = DEFAULT_PAGE_DELAY,
    sleep: Callable[[float], None] = time.sleep
) -> List[CandidateRecord]:
    """
    Fetch and extract pages 1..max_pages of one source variant.

    Pages are fetched sequentially with a randomized pause in between. A
    page that fails to fetch is skipped; a page with no listing blocks is
    not an error, but on page 1 it is logged as a possible selector break.

    Args:
        variant: Source variant to scrape.
        keywords: Search keywords.
        max_pages: Number of result pages to request.
        session: Session to reuse across pages.
        delay_range: Bounds of the random pause between pages, in seconds.
        sleep: Sleep function, replaceable in tests.

    Returns:
        CandidateRecords from all pages in fetch order.
    """
    max_pages = clamp_max_pages(max_pages)
    owns_session = session is None
    if owns_session:
        session = create_session()

    records: List[CandidateRecord] = []

    try:
        for page in range(1, max_pages + 1):
            url = variant.build_url(keywords, page)
            logger.debug(f"[{variant.name}] Requesting page {page}: {url}")

            result = fetch_html(url, session)
            if not result.success:
                logger.warning(
                    f"[{variant.name}] Skipping page {page}: {result.error_message}"
                )
            else:
                page_records = variant.extract(result.html_content, variant.base_url)
                if not page_records and page == 1:
                    logger.warning(
                        f"[{variant.name}] No listings found on page 1; "
                        f"the page layout may have changed"
                    )
                logger.info(f"[{variant.name}] Page {page}: {len(page_records)} listing(s)")
                records.extend(page_records)

            if max_pages > 1 and page < max_pages:
                sleep(random.uniform(*delay_range))
    finally:
        if owns_session:
            session.close()

    return records
