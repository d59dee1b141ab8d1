"""URL canonicalization for the site crawler."""

import re
from urllib.parse import urljoin, urlparse, urlunparse

# Binary or non-page resources the crawler never follows
EXCLUDED_EXTENSIONS = (
    # images
    "jpg", "jpeg", "png", "gif", "bmp", "webp", "svg", "ico", "tif", "tiff",
    # archives
    "zip", "tar", "gz", "tgz", "bz2", "rar", "7z",
    # stylesheets and scripts
    "css", "js", "mjs",
    # documents
    "pdf", "doc", "docx", "xls", "xlsx", "ppt", "pptx", "odt", "rtf",
    # media and fonts
    "mp3", "mp4", "avi", "mov", "webm", "wav", "woff", "woff2", "ttf", "eot",
)

_EXCLUDED_EXTENSION_RE = re.compile(r"\.(" + "|".join(EXCLUDED_EXTENSIONS) + r")$", re.IGNORECASE)

_ALLOWED_SCHEMES = ("http", "https")


def normalize_url(raw_url: str, base_url: str, allowed_host: str | None = None) -> str | None:
    """Resolve a link against its page and return its canonical form.

    Args:
        raw_url: Link as found in the page (absolute or relative)
        base_url: URL the link is resolved against
        allowed_host: Hostname links must stay on (defaults to base_url's host)

    Returns:
        Absolute URL without fragment, or None if the link is rejected
    """
    if not raw_url:
        return None

    try:
        absolute = urljoin(base_url, raw_url.strip())
        parsed = urlparse(absolute)
        host = parsed.hostname
        if allowed_host is None:
            allowed_host = urlparse(base_url).hostname
    except ValueError:
        # e.g. unbalanced IPv6 brackets
        return None

    if parsed.scheme not in _ALLOWED_SCHEMES or not host:
        return None

    if not allowed_host or host != allowed_host.lower():
        return None

    if _EXCLUDED_EXTENSION_RE.search(parsed.path):
        return None

    return urlunparse(parsed._replace(fragment=""))


def visit_key(url: str) -> str:
    """Key used for visited-set comparisons (single trailing slash removed)."""
    url = url.split("#", 1)[0]
    if url.endswith("/"):
        url = url[:-1]
    return url


def site_domain(url: str) -> str:
    """Return the bare hostname of a seed URL (scheme and leading "www." stripped).

    Raises:
        ValueError: If the URL is not an absolute http(s) URL
    """
    parsed = urlparse(url.strip())
    if parsed.scheme not in _ALLOWED_SCHEMES or not parsed.hostname:
        raise ValueError(f"Not an absolute http(s) URL: {url!r}")
    return re.sub(r"^www\.", "", parsed.hostname)
