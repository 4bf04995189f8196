"""
Parse module for the Scholarship Search importer.

This module turns one listing page of a known source into CandidateRecords.
Each source has a fixed selector pattern for its listing blocks; fields
inside a block are looked up independently, and only a missing title or
link causes the block to be dropped.

Markup from the sources is frequently malformed. BeautifulSoup's
html.parser builds a best-effort tree and never reports parse errors, so
broken markup costs at most the blocks it mangles.
"""

from typing import List, Optional

from bs4 import BeautifulSoup, Tag

from scholarship_search.dates import DateField, normalize_date
from scholarship_search.models import CandidateRecord
from scholarship_search.utils import get_logger, normalize_url, sanitize_text


# Module logger
logger = get_logger("parse")


SCHOLARSHIPDB_SOURCE = "scholarshipdb.net"
SCHOLARSHIPDB_BASE_URL = "https://scholarshipdb.net"

FINDAPHD_SOURCE = "findaphd.com"
FINDAPHD_BASE_URL = "https://www.findaphd.com"

# Listing block and field selectors, per source
SCHOLARSHIPDB_SELECTORS = {
    "block": "div.panel.panel-default",
    "title": "h4 a",
    "country": "a.text-success",
    "date": 'span.text-muted:-soup-contains("Posted")',
}

FINDAPHD_SELECTORS = {
    "block": "div.phd-result.card",
    "title": "h4.text-dark.mx-0.mb-3 > a",
    "country": "img.country-flag[title]",
    "date": 'div.py-2.small:-soup-contains("Closing date:")',
}


def make_soup(html: str) -> BeautifulSoup:
    """Parse HTML leniently; parser complaints are discarded."""
    return BeautifulSoup(html or "", "html.parser")


def _select_text(block: Tag, selector: str) -> Optional[str]:
    node = block.select_one(selector)
    if node is None:
        return None
    return sanitize_text(node.get_text()) or None


def _select_attr(block: Tag, selector: str, attr: str) -> Optional[str]:
    node = block.select_one(selector)
    if node is None:
        return None
    value = node.get(attr)
    if isinstance(value, list):
        value = " ".join(value)
    return sanitize_text(value) or None


def _title_and_link(block: Tag, selector: str, base_url: str):
    link_node = block.select_one(selector)
    if link_node is None:
        return None, None
    title = sanitize_text(link_node.get_text()) or None
    href = sanitize_text(link_node.get("href"))
    if not href:
        return title, None
    return title, normalize_url(href, base_url)


def extract_scholarshipdb(html: str, base_url: str = SCHOLARSHIPDB_BASE_URL) -> List[CandidateRecord]:
    """
    Extract listings from a scholarshipdb.net search result page.

    Args:
        html: Raw page HTML.
        base_url: Base for resolving relative detail links.

    Returns:
        CandidateRecords in page order; empty when nothing matched.
    """
    soup = make_soup(html)
    records: List[CandidateRecord] = []

    for block in soup.select(SCHOLARSHIPDB_SELECTORS["block"]):
        title, link = _title_and_link(block, SCHOLARSHIPDB_SELECTORS["title"], base_url)
        if not title or not link:
            logger.debug(f"Skipping {SCHOLARSHIPDB_SOURCE} block missing title or link")
            continue

        date_text = _select_text(block, SCHOLARSHIPDB_SELECTORS["date"])

        records.append(CandidateRecord(
            title=title,
            url=link,
            source=SCHOLARSHIPDB_SOURCE,
            country=_select_text(block, SCHOLARSHIPDB_SELECTORS["country"]),
            posted_date=normalize_date(date_text, DateField.POSTED),
            deadline=None,
            description="",
        ))

    return records


def extract_findaphd(html: str, base_url: str = FINDAPHD_BASE_URL) -> List[CandidateRecord]:
    """
    Extract listings from a findaphd.com search result page.

    The country comes from the flag image's title attribute and the
    deadline from the "Closing date:" line. No posted date is shown.
    """
    soup = make_soup(html)
    records: List[CandidateRecord] = []

    for block in soup.select(FINDAPHD_SELECTORS["block"]):
        title, link = _title_and_link(block, FINDAPHD_SELECTORS["title"], base_url)
        if not title or not link:
            logger.debug(f"Skipping {FINDAPHD_SOURCE} block missing title or link")
            continue

        date_text = _select_text(block, FINDAPHD_SELECTORS["date"])

        records.append(CandidateRecord(
            title=title,
            url=link,
            source=FINDAPHD_SOURCE,
            country=_select_attr(block, FINDAPHD_SELECTORS["country"], "title"),
            posted_date=None,
            deadline=normalize_date(date_text, DateField.DEADLINE),
            description="",
        ))

    return records
