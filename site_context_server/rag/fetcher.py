"""Page fetching strategies for the site crawler.

A fetcher turns one URL into raw HTML or a FetchError. Strategies are plain
objects with a ``fetch(url, timeout)`` method and can be chained with
FallbackFetcher, which tries each one in order until one succeeds.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

import requests

from .config import DEFAULT_USER_AGENT

logger = logging.getLogger(__name__)

# Responses shorter than this are most likely an empty SPA shell
MIN_CONTENT_CHARS = 500

DYNAMIC_CONTENT_MARKERS = (
    "You need to enable JavaScript",
    "Please enable JavaScript",
)

BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,image/apng,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
    "Accept-Encoding": "gzip, deflate",
    "Connection": "keep-alive",
    "Upgrade-Insecure-Requests": "1",
    "Cache-Control": "max-age=0",
}


class FetchErrorKind(str, Enum):
    """Distinguishable reasons a page could not be used."""

    TIMEOUT = "timeout"
    HTTP_ERROR = "http_error"
    CONNECTION_ERROR = "connection_error"
    NON_HTML = "non_html"
    DYNAMIC_CONTENT = "dynamic_content"


class FetchError(Exception):
    """A page could not be fetched or is not worth reading."""

    def __init__(self, kind: FetchErrorKind, url: str, message: str = "", status_code: int | None = None):
        self.kind = kind
        self.url = url
        self.status_code = status_code
        detail = message or kind.value
        super().__init__(f"{kind.value}: {url} ({detail})")


class LikelyDynamicContent(FetchError):
    """Fetched successfully, but the body looks like a JavaScript-rendered shell."""

    def __init__(self, url: str, message: str = ""):
        super().__init__(FetchErrorKind.DYNAMIC_CONTENT, url, message)


@dataclass(frozen=True)
class FetchResult:
    """Raw page content obtained at the final URL after redirects."""

    content: str
    final_url: str
    status_code: int = 200


class Fetcher(Protocol):
    """Anything that can fetch a single page."""

    def fetch(self, url: str, timeout: float) -> FetchResult: ...


def check_dynamic_content(url: str, content: str) -> None:
    """Raise LikelyDynamicContent if the body is too short or asks for JavaScript."""
    if len(content) < MIN_CONTENT_CHARS:
        raise LikelyDynamicContent(url, f"body is only {len(content)} characters")
    for marker in DYNAMIC_CONTENT_MARKERS:
        if marker in content:
            raise LikelyDynamicContent(url, f"body contains {marker!r}")


class RequestsFetcher:
    """Fetch strategy backed by a requests session with fixed headers."""

    def __init__(self, headers: dict[str, str] | None = None, session: requests.Session | None = None):
        """Initialize the fetcher.

        Args:
            headers: Request headers sent with every fetch
            session: Optional session to reuse (one is created if omitted)
        """
        self.headers = dict(headers or BROWSER_HEADERS)
        self.session = session or requests.Session()

    def fetch(self, url: str, timeout: float) -> FetchResult:
        """Fetch a page, following redirects.

        Args:
            url: URL to fetch
            timeout: Wall-clock bound for connect and read, in seconds

        Returns:
            FetchResult with the page HTML and the final URL

        Raises:
            FetchError: On timeout, connection failure, non-2xx status or non-HTML content
            LikelyDynamicContent: If the body looks JavaScript-rendered
        """
        logger.debug(f"[FETCHER] GET {url}")
        try:
            response = self.session.get(url, headers=self.headers, timeout=timeout, allow_redirects=True)
        except requests.exceptions.Timeout as e:
            raise FetchError(FetchErrorKind.TIMEOUT, url, str(e)) from e
        except requests.exceptions.RequestException as e:
            raise FetchError(FetchErrorKind.CONNECTION_ERROR, url, str(e)) from e

        if not 200 <= response.status_code < 300:
            raise FetchError(
                FetchErrorKind.HTTP_ERROR, url, f"HTTP {response.status_code}", status_code=response.status_code
            )

        # Only parse HTML content, skip images/XML/etc served under page-like URLs
        content_type = response.headers.get("content-type", "")
        if content_type and "html" not in content_type.lower():
            raise FetchError(FetchErrorKind.NON_HTML, url, content_type, status_code=response.status_code)

        content = response.text
        check_dynamic_content(url, content)

        return FetchResult(content=content, final_url=response.url or url, status_code=response.status_code)


# Responses a different client identity may get past
FALLBACK_STATUS_CODES = frozenset({401, 403, 406, 429})


def should_fall_back(error: FetchError) -> bool:
    """Whether another strategy could succeed where this one failed.

    Network failures and ordinary HTTP errors would only repeat the same
    request, so they are raised at once.
    """
    if error.kind == FetchErrorKind.DYNAMIC_CONTENT:
        return True
    return error.kind == FetchErrorKind.HTTP_ERROR and error.status_code in FALLBACK_STATUS_CODES


class FallbackFetcher:
    """Try several fetch strategies in order until one succeeds.

    Only failures that depend on the client identity, such as a blocked user
    agent or a JavaScript shell, move on to the next strategy.
    """

    def __init__(self, strategies: list[Fetcher]):
        if not strategies:
            raise ValueError("FallbackFetcher needs at least one strategy")
        self.strategies = list(strategies)

    def fetch(self, url: str, timeout: float) -> FetchResult:
        last_error: FetchError | None = None
        for idx, strategy in enumerate(self.strategies, 1):
            try:
                return strategy.fetch(url, timeout)
            except FetchError as e:
                last_error = e
                if not should_fall_back(e):
                    raise
                if idx < len(self.strategies):
                    logger.debug(f"[FETCHER] Strategy {idx}/{len(self.strategies)} failed for {url}: {e}")
        raise last_error


def default_fetcher(user_agent: str = DEFAULT_USER_AGENT) -> FallbackFetcher:
    """Browser-like headers first, then the plain bot user agent."""
    session = requests.Session()
    return FallbackFetcher(
        [
            RequestsFetcher(BROWSER_HEADERS, session=session),
            RequestsFetcher({"User-Agent": user_agent}, session=session),
        ]
    )
