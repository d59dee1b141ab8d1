"""Site knowledge base: crawl seed sites into an index and serve context from it."""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor

from .config import ConfigurationError, RAGConfig
from .crawler import SiteCrawler
from .fetcher import Fetcher, default_fetcher
from .indexer import KnowledgeIndex
from .models import Chunk, RetrievalResult
from .normalizer import site_domain
from .retriever import Retriever

logger = logging.getLogger(__name__)


def parse_seed_urls(seed_urls: str | list[str]) -> list[str]:
    """Split a comma-separated seed list, dropping blank entries."""
    if isinstance(seed_urls, str):
        seed_urls = seed_urls.split(",")
    return [url.strip() for url in seed_urls if isinstance(url, str) and url.strip()]


class SiteKnowledgeBase:
    """Owns one index and its retriever; nothing here is shared between instances."""

    def __init__(self, config: RAGConfig | None = None, fetcher: Fetcher | None = None):
        """Initialize an empty knowledge base.

        Args:
            config: RAG configuration (defaults to RAGConfig())
            fetcher: Fetch strategy shared by all crawls (defaults to default_fetcher())
        """
        self.config = config or RAGConfig()
        self.fetcher = fetcher or default_fetcher(self.config.user_agent)
        self.index = KnowledgeIndex(min_prefix_length=self.config.min_prefix_length)
        self.retriever = Retriever(self.index, fingerprint_chars=self.config.dedup_prefix_chars)

        self._lock = threading.Lock()
        self.sites: dict[str, list[Chunk]] = {}
        self.failures: dict[str, str] = {}

    def _new_crawler(self) -> SiteCrawler:
        return SiteCrawler(
            fetcher=self.fetcher,
            max_pages=self.config.max_pages,
            request_timeout=self.config.request_timeout,
            min_page_chars=self.config.min_page_chars,
            max_page_chars=self.config.max_page_chars,
            max_workers=self.config.max_workers,
            show_progress=self.config.show_progress,
        )

    def ingest(self, seed_urls: str | list[str]) -> dict[str, list[Chunk]]:
        """Crawl, chunk and index every seed site.

        Each seed is handled independently: an invalid URL or an unexpected
        error is logged and recorded in ``failures`` without affecting the
        other seeds.

        Args:
            seed_urls: Comma-separated seed URLs (or a list of them)

        Returns:
            Mapping of bare domain -> chunks indexed for that site in this call

        Raises:
            ConfigurationError: If no seed URL is given
        """
        seeds = parse_seed_urls(seed_urls)
        if not seeds:
            raise ConfigurationError("No seed URLs configured")

        logger.info(f"[INGEST] Ingesting {len(seeds)} site(s)")
        start_time = time.time()

        results: dict[str, list[Chunk]] = {}
        if self.config.site_workers > 1 and len(seeds) > 1:
            with ThreadPoolExecutor(max_workers=self.config.site_workers) as executor:
                outcomes = list(executor.map(self._ingest_site, seeds))
        else:
            outcomes = [self._ingest_site(seed) for seed in seeds]

        for outcome in outcomes:
            if outcome is not None:
                domain, chunks = outcome
                results.setdefault(domain, []).extend(chunks)

        logger.info(
            f"[INGEST] Knowledge base ready for domains: {sorted(results)} "
            f"({len(self.index)} chunks total, {time.time() - start_time:.1f}s)"
        )
        return results

    def _ingest_site(self, seed_url: str) -> tuple[str, list[Chunk]] | None:
        try:
            domain = site_domain(seed_url)
        except ValueError as e:
            logger.error(f"[INGEST] Invalid seed URL {seed_url!r}: {e}")
            self._record_failure(seed_url, str(e))
            return None

        try:
            pages = self._new_crawler().crawl(seed_url)
            chunks: list[Chunk] = []
            for page in pages:
                chunks.extend(self.index.add_page(page, self.config.chunk_size, self.config.chunk_overlap))
        except ConfigurationError:
            raise
        except Exception as e:
            logger.error(f"[INGEST] Failed to ingest {seed_url}: {e}")
            self._record_failure(seed_url, str(e))
            return None

        if not pages:
            logger.warning(f"[INGEST] No usable pages found for {domain}")
        logger.info(f"[INGEST] {domain}: {len(pages)} pages -> {len(chunks)} chunks")

        with self._lock:
            self.sites.setdefault(domain, []).extend(chunks)
            self.failures.pop(seed_url, None)
        return domain, chunks

    def _record_failure(self, seed_url: str, message: str) -> None:
        with self._lock:
            self.failures[seed_url] = message

    def clear(self) -> None:
        """Forget every site and empty the index."""
        with self._lock:
            self.sites = {}
            self.failures = {}
        self.index.clear()

    def rebuild(self, seed_urls: str | list[str]) -> dict[str, list[Chunk]]:
        """Clear the index and ingest the given seeds from scratch."""
        # Validate before clearing so a bad request keeps the current index
        if not parse_seed_urls(seed_urls):
            raise ConfigurationError("No seed URLs configured")
        self.clear()
        return self.ingest(seed_urls)

    def retrieve_context(self, query: str, limit: int | None = None, domain: str | None = None) -> str:
        """Formatted context for a user query.

        Args:
            query: The user's message
            limit: Maximum number of chunks (defaults to config.search_top_k)
            domain: Restrict to one site; accepts a bare domain, a "www." host or a URL

        Returns:
            Labeled source blocks, or the no-data sentinel
        """
        return self.retriever.format_context(self.search(query, limit, domain))

    def search(self, query: str, limit: int | None = None, domain: str | None = None) -> list[RetrievalResult]:
        """Ranked, deduplicated results for a user query (see Retriever.query)."""
        if limit is None:
            limit = self.config.search_top_k
        return self.retriever.query(query, limit, domain=normalize_domain(domain))


def normalize_domain(domain: str | None) -> str | None:
    """Reduce a domain filter (bare domain, "www." host or URL) to a bare hostname."""
    if not domain:
        return None
    domain = domain.strip().lower()
    if "://" in domain:
        return site_domain(domain)
    return domain.removeprefix("www.")
