"""Shared pytest fixtures for Site Context Server tests."""

import pytest

from site_context_server.config import ServerConfig
from site_context_server.rag.config import RAGConfig
from site_context_server.rag.fetcher import FetchError, FetchErrorKind, FetchResult
from site_context_server.rag.normalizer import visit_key


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests with no network access")


def make_html(text: str, links=(), title: str = "Test page") -> str:
    """Build a small HTML page with some boilerplate around the content."""
    anchors = "".join(f'<a href="{href}">link</a> ' for href in links)
    return f"""<html>
<head><title>{title}</title><style>body {{ color: red; }}</style></head>
<body>
<nav><a href="/nav-only">Menu</a></nav>
<main><p>{text}</p>{anchors}</main>
<script>var tracking = "do not index";</script>
<footer>Copyright footer</footer>
</body>
</html>"""


class FakeFetcher:
    """In-memory fetcher serving a dict of url -> html (or FetchError)."""

    def __init__(self, pages, redirects=None):
        self.pages = {visit_key(url): content for url, content in pages.items()}
        self.redirects = {visit_key(src): dst for src, dst in (redirects or {}).items()}
        self.calls = []

    def fetch(self, url, timeout):
        self.calls.append(url)
        final_url = self.redirects.get(visit_key(url), url)
        content = self.pages.get(visit_key(final_url))
        if content is None:
            raise FetchError(FetchErrorKind.HTTP_ERROR, url, "HTTP 404", status_code=404)
        if isinstance(content, FetchError):
            raise content
        return FetchResult(content=content, final_url=final_url)


LONG_TEXT = "This paragraph has enough words in it to pass the minimum page length check easily."


@pytest.fixture
def rag_config():
    """Provide a small, quiet RAGConfig for testing."""
    return RAGConfig(max_pages=10, show_progress=False, chunk_size=200, chunk_overlap=50)


@pytest.fixture
def default_config():
    """Provide a default ServerConfig instance for testing."""
    config = ServerConfig()
    config.SHOW_PROGRESS = False
    return config


@pytest.fixture
def site_pages():
    """A small site: home links to about and refunds, refunds links back home and off-site."""
    return {
        "http://a.example/": make_html(LONG_TEXT + " Welcome home.", ["/about", "/refunds", "/about/"]),
        "http://a.example/about": make_html(LONG_TEXT + " About our team.", ["/"]),
        "http://a.example/refunds": make_html(
            LONG_TEXT + " Our quarterly refund policy lets you return items within 30 days.",
            ["http://a.example/", "http://other.example/elsewhere", "/files/terms.pdf"],
        ),
    }


@pytest.fixture
def fake_fetcher(site_pages):
    return FakeFetcher(site_pages)
