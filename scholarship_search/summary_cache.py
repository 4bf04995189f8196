"""
Short-lived cache of run summaries for operators.

Entries expire after a TTL (one day by default). The cache is purely
informational; nothing in the pipeline reads it back.
"""

import time
from typing import Callable, Optional

from scholarship_search.utils import get_logger, safe_read_json, safe_write_json


logger = get_logger("summary_cache")

DEFAULT_SUMMARY_PATH = "data/run_summary.json"
DAY_IN_SECONDS = 24 * 60 * 60

LAST_CRON_RUN_KEY = "last_cron_run_summary"
LAST_MANUAL_RUN_KEY = "last_manual_run_summary"


class SummaryCache:
    """Key/value text store with per-entry expiry, persisted as JSON."""

    def __init__(self, filepath: str = DEFAULT_SUMMARY_PATH,
                 clock: Callable[[], float] = time.time):
        self.filepath = filepath
        self._clock = clock

    def _read(self) -> dict:
        data = safe_read_json(self.filepath, default={})
        return data if isinstance(data, dict) else {}

    def set(self, key: str, value: str, ttl: int = DAY_IN_SECONDS) -> bool:
        data = self._read()
        data[key] = {"value": value, "expires_at": self._clock() + ttl}
        written = safe_write_json(self.filepath, data)
        if not written:
            logger.warning(f"Could not record summary '{key}' in {self.filepath}")
        return written

    def get(self, key: str) -> Optional[str]:
        entry = self._read().get(key)
        if not isinstance(entry, dict):
            return None
        if entry.get("expires_at", 0) <= self._clock():
            return None
        return entry.get("value")
