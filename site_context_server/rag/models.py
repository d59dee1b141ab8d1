"""Records passed between the crawl, chunk, index and retrieval stages."""

from dataclasses import dataclass, field


@dataclass
class Page:
    """Extracted text and same-host links of one crawled page."""

    url: str
    text: str
    outbound_links: set[str] = field(default_factory=set)


@dataclass(frozen=True)
class TextWindow:
    """One chunk-sized slice of a page's text, before it has an id."""

    offset: int
    text: str


@dataclass(frozen=True)
class Chunk:
    """Indexed unit of page text. The id is assigned by the index and never reused."""

    id: int
    source_url: str
    text: str
    offset_in_page: int = 0


@dataclass(frozen=True)
class RetrievalResult:
    chunk: Chunk
    score: float
