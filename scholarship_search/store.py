"""
Content store for imported scholarship listings.

ContentStore is the repository interface the importer writes through.
JsonContentStore keeps listings and taxonomy terms in a single JSON
document, rewritten atomically after every mutation. A failed write
leaves both the file and the in-memory state as they were.

Supports:
- Lookup of listing IDs by metadata equality
- Listing creation (with initial metadata) and metadata updates
- Taxonomy term lookup/creation and assignment to listings
"""

from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from scholarship_search.utils import get_logger, safe_read_json, safe_write_json


# Module logger
logger = get_logger("store")

# Default path for the listing store
DEFAULT_STORE_PATH = "data/scholarships.json"

CATEGORY_TAXONOMY = "scholarship_category"

# Listing metadata keys
META_URL = "scholarship_url"
META_COUNTRY = "scholarship_country"
META_SOURCE = "scholarship_source"
META_POSTED_DATE = "posted_date"
META_DEADLINE = "scholarship_deadline"
META_IS_FEATURED = "scholarship_is_featured"


class StoreError(Exception):
    """Raised when the store cannot complete a write."""


@dataclass
class StoredListing:
    """A persisted scholarship listing."""
    id: int
    title: str
    body: str
    status: str
    post_date: str
    meta: Dict[str, Any] = field(default_factory=dict)
    terms: Dict[str, List[int]] = field(default_factory=dict)


@dataclass
class Term:
    """A taxonomy term such as a provenance category."""
    id: int
    name: str
    slug: str
    taxonomy: str
    description: str = ""


class ContentStore(ABC):
    """Repository operations the importer relies on."""

    @abstractmethod
    def find_ids_by_meta(self, key: str, value: Any) -> List[int]:
        """IDs of listings whose metadata `key` equals `value` exactly."""

    @abstractmethod
    def create_record(
        self,
        title: str,
        body: str,
        status: str,
        post_date: str,
        meta: Optional[Dict[str, Any]] = None
    ) -> int:
        """
        Create a listing with its initial metadata in one write.

        Returns the new ID. Raises StoreError on failure, in which case
        nothing is stored.
        """

    @abstractmethod
    def update_meta(self, listing_id: int, key: str, value: Any) -> None:
        """Attach or overwrite one metadata value."""

    @abstractmethod
    def get_meta(self, listing_id: int, key: str) -> Optional[Any]:
        """Metadata value, or None if unset."""

    @abstractmethod
    def term_exists(self, slug: str, taxonomy: str) -> Optional[Term]:
        """Term with this slug in the taxonomy, if any."""

    @abstractmethod
    def insert_term(self, name: str, taxonomy: str, slug: str, description: str = "") -> Term:
        """Create a taxonomy term. Raises StoreError on failure."""

    @abstractmethod
    def set_object_terms(
        self,
        listing_id: int,
        term_ids: List[int],
        taxonomy: str,
        append: bool = False
    ) -> None:
        """Assign terms to a listing, replacing prior ones unless append."""

    @abstractmethod
    def get_listing(self, listing_id: int) -> Optional[StoredListing]:
        """Listing by ID, or None."""

    @abstractmethod
    def count_listings(self) -> int:
        """Number of stored listings."""


class JsonContentStore(ContentStore):
    """
    ContentStore backed by a JSON file.

    The document holds the listings, the terms and the next free IDs. The
    whole document is loaded on construction and rewritten after each
    mutation. A listing and its metadata are written together by
    create_record, so a listing is never persisted without its URL.
    """

    def __init__(self, filepath: str = DEFAULT_STORE_PATH):
        self.filepath = filepath
        self._listings: Dict[int, StoredListing] = {}
        self._terms: Dict[int, Term] = {}
        self._next_listing_id = 1
        self._next_term_id = 1
        self._load()

    def _load(self) -> None:
        data = safe_read_json(self.filepath, default={})
        if not isinstance(data, dict):
            logger.warning(f"Unexpected data format in {self.filepath}, starting empty")
            data = {}

        for entry in data.get("listings", []):
            try:
                listing = StoredListing(**entry)
            except TypeError as e:
                logger.warning(f"Skipping malformed listing entry: {e}")
                continue
            self._listings[listing.id] = listing

        for entry in data.get("terms", []):
            try:
                term = Term(**entry)
            except TypeError as e:
                logger.warning(f"Skipping malformed term entry: {e}")
                continue
            self._terms[term.id] = term

        self._next_listing_id = max(
            [data.get("next_listing_id", 1)] + [i + 1 for i in self._listings]
        )
        self._next_term_id = max(
            [data.get("next_term_id", 1)] + [i + 1 for i in self._terms]
        )

        logger.debug(
            f"Loaded {len(self._listings)} listing(s) and "
            f"{len(self._terms)} term(s) from {self.filepath}"
        )

    def _save(self) -> None:
        data = {
            "next_listing_id": self._next_listing_id,
            "next_term_id": self._next_term_id,
            "listings": [asdict(listing) for listing in self._listings.values()],
            "terms": [asdict(term) for term in self._terms.values()],
        }
        if not safe_write_json(self.filepath, data):
            raise StoreError(f"Failed to write content store to {self.filepath}")

    def _require(self, listing_id: int) -> StoredListing:
        listing = self._listings.get(listing_id)
        if listing is None:
            raise StoreError(f"No listing with ID {listing_id}")
        return listing

    def find_ids_by_meta(self, key: str, value: Any) -> List[int]:
        return [
            listing.id for listing in self._listings.values()
            if key in listing.meta and listing.meta[key] == value
        ]

    def create_record(
        self,
        title: str,
        body: str,
        status: str,
        post_date: str,
        meta: Optional[Dict[str, Any]] = None
    ) -> int:
        listing_id = self._next_listing_id
        self._listings[listing_id] = StoredListing(
            id=listing_id,
            title=title,
            body=body,
            status=status,
            post_date=post_date,
            meta=dict(meta or {}),
        )
        self._next_listing_id += 1
        try:
            self._save()
        except StoreError:
            del self._listings[listing_id]
            self._next_listing_id -= 1
            raise
        return listing_id

    def update_meta(self, listing_id: int, key: str, value: Any) -> None:
        listing = self._require(listing_id)
        previous = dict(listing.meta)
        listing.meta[key] = value
        try:
            self._save()
        except StoreError:
            listing.meta = previous
            raise

    def get_meta(self, listing_id: int, key: str) -> Optional[Any]:
        listing = self._listings.get(listing_id)
        if listing is None:
            return None
        return listing.meta.get(key)

    def term_exists(self, slug: str, taxonomy: str) -> Optional[Term]:
        for term in self._terms.values():
            if term.slug == slug and term.taxonomy == taxonomy:
                return term
        return None

    def insert_term(self, name: str, taxonomy: str, slug: str, description: str = "") -> Term:
        if self.term_exists(slug, taxonomy) is not None:
            raise StoreError(f"Term '{slug}' already exists in {taxonomy}")
        term = Term(
            id=self._next_term_id,
            name=name,
            slug=slug,
            taxonomy=taxonomy,
            description=description,
        )
        self._terms[term.id] = term
        self._next_term_id += 1
        try:
            self._save()
        except StoreError:
            del self._terms[term.id]
            self._next_term_id -= 1
            raise
        return term

    def set_object_terms(
        self,
        listing_id: int,
        term_ids: List[int],
        taxonomy: str,
        append: bool = False
    ) -> None:
        listing = self._require(listing_id)
        unknown = [t for t in term_ids if t not in self._terms]
        if unknown:
            raise StoreError(f"Unknown term ID(s): {unknown}")

        previous = dict(listing.terms)
        current = listing.terms.get(taxonomy, []) if append else []
        listing.terms[taxonomy] = current + [t for t in term_ids if t not in current]
        try:
            self._save()
        except StoreError:
            listing.terms = previous
            raise

    def get_listing(self, listing_id: int) -> Optional[StoredListing]:
        return self._listings.get(listing_id)

    def count_listings(self) -> int:
        return len(self._listings)
