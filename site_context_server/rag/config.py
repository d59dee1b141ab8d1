"""RAG configuration dataclass."""

from dataclasses import dataclass

# Default user agent for the fallback fetch strategy
DEFAULT_USER_AGENT = "SiteContextBot/1.0 (+https://github.com/site-context/site-context-server)"


class ConfigurationError(ValueError):
    """Raised when crawl, chunking or search settings are invalid."""


@dataclass
class RAGConfig:
    """Configuration for site crawling, chunking and retrieval.

    Attributes:
        # Crawling settings
        max_pages: Maximum distinct pages visited per seed URL (default: 150)
        request_timeout: HTTP request timeout in seconds (default: 10.0)
        max_workers: Concurrent fetches per crawl (default: 1 = sequential BFS)
        site_workers: Seed sites crawled concurrently (default: 1)
        max_page_chars: Page text is truncated to this many characters (default: 20000)
        min_page_chars: Pages with this much text or less are not indexed (default: 50)
        user_agent: User agent for the fallback fetch strategy
        show_progress: Show a tqdm progress bar per crawl (default: True)

        # Chunking settings
        chunk_size: Characters per chunk window (default: 1000)
        chunk_overlap: Characters shared by consecutive windows (default: 200)

        # Search settings
        search_top_k: Default number of results to return (default: 5)
        dedup_prefix_chars: Results sharing this many leading characters are
            treated as duplicates (default: 50)
        min_prefix_length: Shortest token prefix stored in the term index (default: 2)
    """

    # Crawling settings
    max_pages: int = 150
    request_timeout: float = 10.0
    max_workers: int = 1
    site_workers: int = 1
    max_page_chars: int = 20000
    min_page_chars: int = 50
    user_agent: str = DEFAULT_USER_AGENT
    show_progress: bool = True

    # Chunking settings
    chunk_size: int = 1000
    chunk_overlap: int = 200

    # Search settings
    search_top_k: int = 5
    dedup_prefix_chars: int = 50
    min_prefix_length: int = 2

    def __post_init__(self):
        """Validate settings that would otherwise fail deep inside the pipeline."""
        if self.max_pages < 1:
            raise ConfigurationError(f"max_pages must be at least 1, got {self.max_pages}")
        if self.request_timeout <= 0:
            raise ConfigurationError(f"request_timeout must be positive, got {self.request_timeout}")
        if self.max_workers < 1 or self.site_workers < 1:
            raise ConfigurationError(
                f"Worker counts must be at least 1 (max_workers={self.max_workers}, site_workers={self.site_workers})"
            )
        if self.chunk_size <= 0 or not 0 <= self.chunk_overlap < self.chunk_size:
            raise ConfigurationError(
                f"Chunk overlap must satisfy 0 <= overlap < size "
                f"(size={self.chunk_size}, overlap={self.chunk_overlap})"
            )
        if self.search_top_k < 1:
            raise ConfigurationError(f"search_top_k must be at least 1, got {self.search_top_k}")
        if self.min_prefix_length < 1:
            raise ConfigurationError(f"min_prefix_length must be at least 1, got {self.min_prefix_length}")
