"""
Date normalization for scraped listing dates.

Sources describe dates in several phrasings ("3 days ago",
"Posted on March 5, 2024", "Closing date: 24 Jul 2024"). Recognized
phrasings become timezone-aware UTC datetimes (posted dates) or plain
dates (deadlines). Anything else passes through as sanitized text; callers
must accept a string where they hoped for a date.

Date-only input is interpreted in UTC.
"""

import re
from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import Optional, Union

from dateutil import parser as date_parser

from scholarship_search.utils import get_logger, sanitize_text


logger = get_logger("dates")

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
DATE_FORMAT = "%Y-%m-%d"

DAYS_AGO_PATTERN = re.compile(r"(\d+)\s+days?\s+ago", re.IGNORECASE)
POSTED_ON_PATTERN = re.compile(r"Posted on\s+(.*)", re.IGNORECASE)
CLOSING_DATE_PATTERN = re.compile(r"Closing date:\s*(.*)", re.IGNORECASE)

Normalized = Union[datetime, date, str]


class DateField(Enum):
    """Which listing field a date belongs to; decides the canonical shape."""
    POSTED = "posted"
    DEADLINE = "deadline"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_absolute(text: str) -> Optional[datetime]:
    """
    Parse a free-form absolute date as UTC.

    Returns:
        Aware datetime, or None when the text is not a date.
    """
    if not text:
        return None
    try:
        parsed = date_parser.parse(text)
    except (ValueError, OverflowError):
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def normalize_date(
    raw_text: Optional[str],
    field: DateField = DateField.POSTED,
    now: Optional[datetime] = None
) -> Optional[Normalized]:
    """
    Convert source date text into a canonical value.

    Recognized phrasings:
        "<N> days ago"            -> now (UTC) minus N days
        "Posted on <date>"        -> that date, UTC
        "Closing date: <date>"    -> that date, no time component

    Args:
        raw_text: Text as scraped.
        field: POSTED yields datetimes, DEADLINE yields dates.
        now: Reference time for relative phrasings. Defaults to current UTC.

    Returns:
        datetime/date on success, the sanitized input otherwise, or None for
        empty input.
    """
    text = sanitize_text(raw_text)
    if not text:
        return None

    parsed: Optional[datetime] = None
    date_only = field is DateField.DEADLINE

    days_match = DAYS_AGO_PATTERN.search(text)
    posted_match = POSTED_ON_PATTERN.search(text)
    closing_match = CLOSING_DATE_PATTERN.search(text)

    if days_match:
        reference = now or utc_now()
        parsed = reference.astimezone(timezone.utc) - timedelta(days=int(days_match.group(1)))
    elif posted_match:
        parsed = parse_absolute(posted_match.group(1).strip())
    elif closing_match:
        parsed = parse_absolute(closing_match.group(1).strip())
        date_only = True

    if parsed is None:
        logger.debug(f"Unrecognized date text, keeping as-is: {text!r}")
        return text

    return parsed.date() if date_only else parsed


def to_timestamp(value: Optional[Normalized], now: Optional[datetime] = None) -> Optional[Union[datetime, str]]:
    """
    Resolve a candidate's posted date into an aware UTC datetime.

    Accepts what extractors hand over: datetimes, dates, recognized phrasings
    or plain absolute date strings. Unresolvable text is returned sanitized.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)

    normalized = normalize_date(value, DateField.POSTED, now=now)
    if not isinstance(normalized, str):
        return to_timestamp(normalized)
    return parse_absolute(normalized) or normalized


def to_date(value: Optional[Normalized], now: Optional[datetime] = None) -> Optional[Union[date, str]]:
    """Resolve a candidate's deadline into a date, or sanitized raw text."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.astimezone(timezone.utc).date() if value.tzinfo else value.date()
    if isinstance(value, date):
        return value

    normalized = normalize_date(value, DateField.DEADLINE, now=now)
    if not isinstance(normalized, str):
        return to_date(normalized)
    parsed = parse_absolute(normalized)
    return parsed.date() if parsed else normalized


def format_timestamp(value: Union[datetime, str]) -> str:
    """Render a UTC timestamp for storage; text passes through."""
    if isinstance(value, datetime):
        return value.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)
    return value


def format_date(value: Union[date, str]) -> str:
    if isinstance(value, date):
        return value.strftime(DATE_FORMAT)
    return value
