"""
Fetch module for the Scholarship Search importer.

This module retrieves raw HTML for a single listing page. Every expected
failure (bad URL, network trouble, bad status, empty body) is reported in
the returned FetchResult rather than raised. Each page gets exactly one
attempt; a failed page is skipped by the caller.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from scholarship_search import __version__
from scholarship_search.utils import get_logger, is_valid_url


# Module logger
logger = get_logger("fetch")

# Default configuration
DEFAULT_TIMEOUT = 30  # seconds
DEFAULT_MAX_RETRIES = 0
DEFAULT_INFO_URL = "https://github.com/scholarship-search/scholarship-search"


def build_user_agent(info_url: str = DEFAULT_INFO_URL) -> str:
    """Identifying User-Agent naming the software and where to learn about it."""
    return f"Mozilla/5.0 (compatible; ScholarshipSearch/{__version__}; +{info_url})"


class FetchFailure(Enum):
    """Why a page could not be retrieved."""
    INVALID_URL = "invalid_url"
    TRANSPORT = "transport"
    HTTP_STATUS = "http_status"
    EMPTY_BODY = "empty_body"


@dataclass
class FetchResult:
    """
    Represents the result of fetching a single URL.

    Attributes:
        source_url: The original URL that was fetched.
        html_content: Raw HTML content if successful, None otherwise.
        success: Whether the fetch was successful.
        error_message: Error description if fetch failed, None otherwise.
        status_code: HTTP status code if a response was received.
        failure: Failure class if fetch failed, None otherwise.
    """
    source_url: str
    html_content: Optional[str]
    success: bool
    error_message: Optional[str] = None
    status_code: Optional[int] = None
    failure: Optional[FetchFailure] = None


def create_session(
    max_retries: int = DEFAULT_MAX_RETRIES,
    info_url: str = DEFAULT_INFO_URL
) -> requests.Session:
    """
    Create a requests session carrying the identifying headers.

    Args:
        max_retries: Transport-level retries. The importer uses a single
                     attempt per page, so this defaults to 0.
        info_url: Contact/info URL embedded in the User-Agent.

    Returns:
        Configured requests.Session instance.
    """
    session = requests.Session()

    retry_strategy = Retry(
        total=max_retries,
        backoff_factor=0,
        raise_on_status=False
    )

    adapter = HTTPAdapter(max_retries=retry_strategy)
    session.mount("http://", adapter)
    session.mount("https://", adapter)

    session.headers.update({
        "User-Agent": build_user_agent(info_url),
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.5",
    })

    return session


def validate_url(url: str) -> bool:
    """
    Validate that a URL is well-formed and uses HTTP/HTTPS.

    Args:
        url: URL string to validate.

    Returns:
        True if URL is valid, False otherwise.
    """
    return is_valid_url(url)


def _failed(url: str, failure: FetchFailure, message: str,
            status_code: Optional[int] = None) -> FetchResult:
    return FetchResult(
        source_url=url,
        html_content=None,
        success=False,
        error_message=message,
        status_code=status_code,
        failure=failure
    )


def fetch_html(
    url: str,
    session: Optional[requests.Session] = None,
    timeout: int = DEFAULT_TIMEOUT
) -> FetchResult:
    """
    Fetch a single URL and return the result.

    Args:
        url: URL to fetch.
        session: Session to reuse. A one-off session is created and closed
                 when omitted.
        timeout: Request timeout in seconds.

    Returns:
        FetchResult containing the fetch outcome.
    """
    if not validate_url(url):
        logger.warning(f"Invalid URL format: {url}")
        return _failed(url, FetchFailure.INVALID_URL, "Invalid URL format")

    owns_session = session is None
    if owns_session:
        session = create_session()

    logger.debug(f"Fetching URL: {url}")

    try:
        response = session.get(url, timeout=timeout)
    except requests.exceptions.Timeout:
        logger.warning(f"Timeout fetching {url}")
        return _failed(url, FetchFailure.TRANSPORT, "Request timeout")
    except requests.exceptions.ConnectionError as e:
        logger.warning(f"Connection error for {url}: {e}")
        return _failed(url, FetchFailure.TRANSPORT, f"Connection error: {e}")
    except requests.exceptions.RequestException as e:
        logger.warning(f"Request exception for {url}: {e}")
        return _failed(url, FetchFailure.TRANSPORT, f"Request failed: {e}")
    finally:
        if owns_session:
            session.close()

    if not 200 <= response.status_code < 300:
        logger.warning(f"HTTP {response.status_code} for {url}")
        return _failed(
            url,
            FetchFailure.HTTP_STATUS,
            f"HTTP {response.status_code}",
            status_code=response.status_code
        )

    body = response.text
    if not body or not body.strip():
        logger.warning(f"Empty response body for {url}")
        return _failed(
            url,
            FetchFailure.EMPTY_BODY,
            "Empty response body",
            status_code=response.status_code
        )

    logger.info(f"Successfully fetched {url} ({len(body)} bytes)")
    return FetchResult(
        source_url=url,
        html_content=body,
        success=True,
        status_code=response.status_code
    )
