"""Fixed-size overlapping text windows."""

from .config import ConfigurationError
from .models import Page, TextWindow


def _validate(size: int, overlap: int) -> None:
    if size <= 0 or not 0 <= overlap < size:
        raise ConfigurationError(f"Chunk overlap must satisfy 0 <= overlap < size (size={size}, overlap={overlap})")


def window_offsets(length: int, size: int, overlap: int) -> range:
    """Start offsets of every window over a text of the given length."""
    _validate(size, overlap)
    return range(0, length, size - overlap)


def split_text(text: str, size: int, overlap: int) -> list[str]:
    """Split text into windows of `size` characters sharing `overlap` characters.

    Windows start at 0, size-overlap, 2*(size-overlap), ... and the last one
    may be shorter than `size`.

    Raises:
        ConfigurationError: Unless size > 0 and 0 <= overlap < size
    """
    return [text[start : start + size] for start in window_offsets(len(text), size, overlap)]


def chunk_page(page: Page, size: int, overlap: int) -> list[TextWindow]:
    """Split a page's text, keeping each window's offset within the page."""
    return [
        TextWindow(offset=start, text=page.text[start : start + size])
        for start in window_offsets(len(page.text), size, overlap)
    ]
