"""HTML to plain text and link extraction."""

import logging
from typing import Protocol

from bs4 import BeautifulSoup

from .models import Page
from .normalizer import normalize_url

logger = logging.getLogger(__name__)

# Regions that never hold page content
NON_CONTENT_TAGS = ["script", "style", "noscript", "iframe", "svg", "header", "footer", "nav"]

DEFAULT_MAX_PAGE_CHARS = 20000


class Extractor(Protocol):
    """Structural interface any HTML backend can implement."""

    def text(self) -> str: ...

    def links(self) -> set[str]: ...


class HtmlExtractor:
    """BeautifulSoup-backed extractor for one page."""

    def __init__(self, content: str, base_url: str, allowed_host: str | None = None):
        """Parse the page once.

        Args:
            content: Raw HTML
            base_url: URL the page was served from (relative links resolve against it)
            allowed_host: Hostname links must stay on (defaults to base_url's host)
        """
        self.base_url = base_url
        self.allowed_host = allowed_host
        self.soup = BeautifulSoup(content or "", "html.parser")

    def text(self) -> str:
        """Visible text with non-content regions removed and whitespace collapsed."""
        soup = BeautifulSoup(str(self.soup.body or self.soup), "html.parser")
        for element in soup(NON_CONTENT_TAGS):
            element.decompose()

        text = soup.get_text(separator=" ", strip=True)
        return " ".join(text.split())

    def links(self) -> set[str]:
        """Normalized same-host links found in <a href> attributes."""
        links: set[str] = set()
        for anchor in self.soup.find_all("a", href=True):
            href = anchor.get("href")
            if not isinstance(href, str):
                continue
            url = normalize_url(href, self.base_url, self.allowed_host)
            if url:
                links.add(url)
        return links


def extract(
    content: str, base_url: str, allowed_host: str | None = None, max_chars: int = DEFAULT_MAX_PAGE_CHARS
) -> Page:
    """Build a Page from raw HTML.

    Args:
        content: Raw HTML
        base_url: URL the page was served from
        allowed_host: Hostname links must stay on (defaults to base_url's host)
        max_chars: Page text is truncated to this many characters

    Returns:
        Page with truncated text and its outbound links
    """
    extractor = HtmlExtractor(content, base_url, allowed_host)
    text = extractor.text()
    if len(text) > max_chars:
        logger.debug(f"[RAG] Truncating text of {base_url} from {len(text)} to {max_chars} chars")
        text = text[:max_chars]
    return Page(url=base_url, text=text, outbound_links=extractor.links())
