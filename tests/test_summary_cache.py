"""
Tests for the summary_cache module.
"""

from unittest.mock import patch

from scholarship_search.summary_cache import DAY_IN_SECONDS, SummaryCache


class FakeClock:
    def __init__(self, now=1_000_000.0):
        self.now = now

    def __call__(self):
        return self.now


class TestSummaryCache:
    """Tests for TTL-bound summaries."""

    def test_set_and_get(self, tmp_path):
        cache = SummaryCache(str(tmp_path / "summary.json"), clock=FakeClock())

        assert cache.set("last", "Import completed. Processed: 1, Added: 1.") is True
        assert cache.get("last") == "Import completed. Processed: 1, Added: 1."

    def test_expires_after_ttl(self, tmp_path):
        clock = FakeClock()
        cache = SummaryCache(str(tmp_path / "summary.json"), clock=clock)
        cache.set("last", "value")

        clock.now += DAY_IN_SECONDS - 1
        assert cache.get("last") == "value"

        clock.now += 1
        assert cache.get("last") is None

    def test_custom_ttl(self, tmp_path):
        clock = FakeClock()
        cache = SummaryCache(str(tmp_path / "summary.json"), clock=clock)
        cache.set("last", "value", ttl=10)

        clock.now += 11
        assert cache.get("last") is None

    def test_keys_independent(self, tmp_path):
        cache = SummaryCache(str(tmp_path / "summary.json"), clock=FakeClock())
        cache.set("a", "one")
        cache.set("b", "two")

        assert cache.get("a") == "one"
        assert cache.get("b") == "two"

    def test_missing_key_and_file(self, tmp_path):
        cache = SummaryCache(str(tmp_path / "missing.json"))

        assert cache.get("anything") is None

    def test_write_failure_reported(self, tmp_path):
        cache = SummaryCache(str(tmp_path / "summary.json"))

        with patch("scholarship_search.summary_cache.safe_write_json", return_value=False):
            assert cache.set("last", "value") is False
