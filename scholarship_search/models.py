"""
Record types passed between the stages of the import pipeline.

CandidateRecord is produced by the source extractors and consumed by the
importer. RunSummary and RunFailure are the two possible outcomes of a run.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Union

from scholarship_search.utils import is_valid_url


DateValue = Union[datetime, date, str]


@dataclass
class CandidateRecord:
    """
    A scholarship listing extracted from one source page, not yet persisted.

    Attributes:
        title: Listing title as shown on the source.
        url: Absolute detail URL, used as the deduplication key.
        source: Tag identifying the origin site (e.g. "scholarshipdb.net").
        country: Country text, if the source shows one.
        posted_date: Normalized timestamp, or the raw text when unparseable.
        deadline: Normalized date, or the raw text when unparseable.
        description: Free text; empty for list-view extraction.
    """
    title: Optional[str]
    url: Optional[str]
    source: Optional[str] = None
    country: Optional[str] = None
    posted_date: Optional[DateValue] = None
    deadline: Optional[DateValue] = None
    description: Optional[str] = None

    def is_importable(self) -> bool:
        """True when both a title and a syntactically valid URL are present."""
        return bool(self.title and self.title.strip()) and is_valid_url(self.url)


@dataclass
class RunSummary:
    """
    Outcome of one import run.

    Attributes:
        processed_count: Candidates examined, including rejected ones.
        newly_added_count: Listings actually created.
        error: Non-fatal problem worth surfacing to operators.
        message: Informational note (e.g. nothing was fetched).
    """
    processed_count: int = 0
    newly_added_count: int = 0
    error: Optional[str] = None
    message: Optional[str] = None

    def describe(self) -> str:
        text = (
            f"Import completed. Processed: {self.processed_count}, "
            f"Added: {self.newly_added_count}."
        )
        if self.message:
            text += f" {self.message}"
        if self.error:
            text += f" Error: {self.error}"
        return text


@dataclass
class RunFailure:
    """A run that could not be carried out at all."""
    reason: str

    def describe(self) -> str:
        return f"Import failed: {self.reason}"
