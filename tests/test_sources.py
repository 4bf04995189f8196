"""
Tests for the sources module.

Tests cover:
- Search URL construction per source variant
- Pagination and pacing between pages
- Skipping failed pages
- Page-count bounds
"""

import logging
from unittest.mock import Mock, patch
from urllib.parse import parse_qs, urlparse

from scholarship_search.fetch import FetchFailure, FetchResult
from scholarship_search.models import CandidateRecord
from scholarship_search.sources import (
    FINDAPHD_EU,
    FINDAPHD_NON_EU,
    SCHOLARSHIPDB,
    SourceVariant,
    clamp_max_pages,
    scrape_source,
)


def _ok(url, html="<html></html>"):
    return FetchResult(source_url=url, html_content=html, success=True, status_code=200)


def _variant(extract):
    return SourceVariant(
        name="test-source",
        base_url="https://source.test",
        path="/search",
        keyword_param="q",
        page_param="page",
        extract=extract,
    )


class TestBuildUrl:
    """Tests for search URL construction."""

    def test_scholarshipdb_url(self):
        url = SCHOLARSHIPDB.build_url("machine learning", 2)
        parsed = urlparse(url)

        assert parsed.netloc == "scholarshipdb.net"
        assert parsed.path == "/scholarships/Program-PhD"
        assert parse_qs(parsed.query) == {"q": ["machine learning"], "page": ["2"]}

    def test_findaphd_non_eu_url(self):
        url = FINDAPHD_NON_EU.build_url("robotics", 1)
        parsed = urlparse(url)

        assert parsed.path == "/phds/non-eu-students/"
        query = parse_qs(parsed.query, keep_blank_values=True)
        assert query["Keywords"] == ["robotics"]
        assert query["PG"] == ["1"]
        assert "01w0" in query

    def test_findaphd_eu_url(self):
        url = FINDAPHD_EU.build_url("robotics", 3)
        parsed = urlparse(url)

        assert parsed.path == "/phds/eu-students/"
        query = parse_qs(parsed.query, keep_blank_values=True)
        assert query["PG"] == ["3"]
        assert "01g0" in query
        assert "01w0" not in query

    def test_findaphd_variants_share_extractor(self):
        assert FINDAPHD_EU.extract is FINDAPHD_NON_EU.extract


class TestClampMaxPages:
    """Tests for page-count bounds."""

    def test_within_range(self):
        assert clamp_max_pages(3) == 3

    def test_below_and_above(self):
        assert clamp_max_pages(0) == 1
        assert clamp_max_pages(12) == 5

    def test_invalid(self):
        assert clamp_max_pages("many") == 1


class TestScrapeSource:
    """Tests for paginated scraping of one variant."""

    @patch("scholarship_search.sources.fetch_html")
    def test_fetches_each_page(self, mock_fetch):
        """Test one fetch+extract cycle per page, in order."""
        mock_fetch.side_effect = lambda url, session: _ok(url, html=url)
        extract = Mock(side_effect=lambda html, base: [CandidateRecord("T", html)])
        sleep = Mock()

        records = scrape_source(_variant(extract), "ai", max_pages=3,
                                session=Mock(), sleep=sleep)

        assert len(records) == 3
        pages = [parse_qs(urlparse(r.url).query)["page"][0] for r in records]
        assert pages == ["1", "2", "3"]
        extract.assert_called_with(records[2].url, "https://source.test")

    @patch("scholarship_search.sources.fetch_html")
    def test_pauses_between_pages_only(self, mock_fetch):
        """Test pacing delay is within bounds and not applied after the last page."""
        mock_fetch.side_effect = lambda url, session: _ok(url)
        sleep = Mock()

        scrape_source(_variant(Mock(return_value=[])), "ai", max_pages=3,
                      session=Mock(), sleep=sleep)

        assert sleep.call_count == 2
        for call in sleep.call_args_list:
            assert 1.0 <= call.args[0] <= 2.0

    @patch("scholarship_search.sources.fetch_html")
    def test_single_page_no_pause(self, mock_fetch):
        mock_fetch.side_effect = lambda url, session: _ok(url)
        sleep = Mock()

        scrape_source(_variant(Mock(return_value=[])), "ai", max_pages=1,
                      session=Mock(), sleep=sleep)

        sleep.assert_not_called()

    @patch("scholarship_search.sources.fetch_html")
    def test_failed_page_skipped(self, mock_fetch):
        """Test a failed page does not stop later pages."""
        mock_fetch.side_effect = [
            FetchResult("u1", None, False, error_message="HTTP 500",
                        status_code=500, failure=FetchFailure.HTTP_STATUS),
            _ok("u2", html="page2"),
        ]
        extract = Mock(return_value=[CandidateRecord("T", "https://source.test/a")])

        records = scrape_source(_variant(extract), "ai", max_pages=2,
                                session=Mock(), sleep=Mock())

        assert len(records) == 1
        extract.assert_called_once_with("page2", "https://source.test")

    @patch("scholarship_search.sources.fetch_html")
    def test_empty_first_page_warns(self, mock_fetch, caplog):
        """Test only the first empty page is flagged as a possible layout change."""
        mock_fetch.side_effect = lambda url, session: _ok(url)

        with caplog.at_level(logging.WARNING, logger="scholarship_search"):
            records = scrape_source(_variant(Mock(return_value=[])), "ai", max_pages=2,
                                    session=Mock(), sleep=Mock())

        assert records == []
        layout_warnings = [r for r in caplog.records if "layout" in r.getMessage()]
        assert len(layout_warnings) == 1
        assert "page 1" in layout_warnings[0].getMessage()

    @patch("scholarship_search.sources.create_session")
    @patch("scholarship_search.sources.fetch_html")
    def test_own_session_closed(self, mock_fetch, mock_create_session):
        session = Mock()
        mock_create_session.return_value = session
        mock_fetch.side_effect = lambda url, s: _ok(url)

        scrape_source(_variant(Mock(return_value=[])), "ai", max_pages=1, sleep=Mock())

        session.close.assert_called_once()

    @patch("scholarship_search.sources.fetch_html")
    def test_page_bound_clamped(self, mock_fetch):
        mock_fetch.side_effect = lambda url, session: _ok(url)

        scrape_source(_variant(Mock(return_value=[])), "ai", max_pages=9,
                      session=Mock(), sleep=Mock())

        assert mock_fetch.call_count == 5
