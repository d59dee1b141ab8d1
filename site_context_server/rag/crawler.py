"""Breadth-first site crawler.

Starts from one seed URL, follows same-host links in breadth-first order and
stops after a fixed number of distinct pages. Every newly visited URL counts
toward the page budget whether or not its fetch succeeds; failed fetches are
logged and skipped.
"""

import logging
import sys
from collections import deque
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from urllib.parse import urlparse

from tqdm import tqdm

from .extractor import DEFAULT_MAX_PAGE_CHARS, extract
from .fetcher import Fetcher, FetchError, FetchResult, LikelyDynamicContent, default_fetcher
from .models import Page
from .normalizer import normalize_url, visit_key

logger = logging.getLogger(__name__)


class CrawlStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"


@dataclass
class CrawlState:
    """Traversal state of a single crawl."""

    budget_remaining: int
    visited: set[str] = field(default_factory=set)
    queued: set[str] = field(default_factory=set)
    queue: deque = field(default_factory=deque)

    def enqueue(self, url: str) -> None:
        key = visit_key(url)
        if key not in self.visited and key not in self.queued:
            self.queued.add(key)
            self.queue.append(url)

    def claim_next(self) -> str | None:
        """Pop queued URLs until one has not been visited, mark it visited and spend budget on it."""
        while self.queue and self.budget_remaining > 0:
            url = self.queue.popleft()
            key = visit_key(url)
            self.queued.discard(key)
            if key in self.visited:
                continue
            self.visited.add(key)
            self.budget_remaining -= 1
            return url
        return None


class SiteCrawler:
    """Bounded breadth-first crawler restricted to the seed URL's host."""

    def __init__(
        self,
        fetcher: Fetcher | None = None,
        max_pages: int = 150,
        request_timeout: float = 10.0,
        min_page_chars: int = 50,
        max_page_chars: int = DEFAULT_MAX_PAGE_CHARS,
        max_workers: int = 1,
        show_progress: bool = True,
    ):
        """Initialize the crawler.

        Args:
            fetcher: Fetch strategy (defaults to browser headers with bot fallback)
            max_pages: Maximum distinct pages visited per crawl
            request_timeout: HTTP request timeout in seconds
            min_page_chars: Pages with this much text or less are not returned
            max_page_chars: Page text is truncated to this many characters
            max_workers: Pages fetched concurrently (1 = strictly sequential)
            show_progress: Show a progress bar on stderr
        """
        self.fetcher = fetcher or default_fetcher()
        self.max_pages = max_pages
        self.request_timeout = request_timeout
        self.min_page_chars = min_page_chars
        self.max_page_chars = max_page_chars
        self.max_workers = max_workers
        self.show_progress = show_progress
        self.status = CrawlStatus.IDLE
        self.visited_count = 0

    def crawl(self, seed_url: str, max_pages: int | None = None) -> list[Page]:
        """Crawl a site starting from its seed URL.

        Args:
            seed_url: Absolute http(s) URL to start from
            max_pages: Override the crawler's page budget for this crawl

        Returns:
            Pages with enough text, in visit order (empty if nothing usable was found)
        """
        budget = max_pages if max_pages is not None else self.max_pages
        seed = normalize_url(seed_url, seed_url)
        self.status = CrawlStatus.RUNNING
        self.visited_count = 0

        if seed is None:
            logger.warning(f"[CRAWLER] Seed URL rejected: {seed_url}")
            self.status = CrawlStatus.COMPLETED
            return []

        seed_host = urlparse(seed).hostname
        state = CrawlState(budget_remaining=budget)
        state.enqueue(seed)
        pages: list[Page] = []

        logger.info(f"[CRAWLER] Starting crawl of {seed} (max pages: {budget})")

        pbar = tqdm(desc="Crawling", unit="page", total=budget, disable=not self.show_progress, file=sys.stderr)
        executor = ThreadPoolExecutor(max_workers=self.max_workers) if self.max_workers > 1 else None
        try:
            while True:
                batch = []
                while len(batch) < self.max_workers:
                    url = state.claim_next()
                    if url is None:
                        break
                    batch.append(url)
                if not batch:
                    break

                if executor is not None:
                    outcomes = list(executor.map(self._fetch, batch))
                else:
                    outcomes = [self._fetch(url) for url in batch]

                for url, outcome in zip(batch, outcomes):
                    self.visited_count += 1
                    pbar.update(1)
                    pbar.set_postfix_str(f"pages={len(pages)}, queue={len(state.queue)}", refresh=False)
                    logger.debug(f"[CRAWLER] Visited ({self.visited_count}/{budget}): {url}")

                    if isinstance(outcome, FetchError):
                        continue

                    try:
                        page = self._process(url, outcome, seed_host, state)
                    except Exception as e:
                        logger.warning(f"[CRAWLER] Failed to parse {url}: {e}")
                        continue
                    if page is not None:
                        pages.append(page)
        finally:
            if executor is not None:
                executor.shutdown(wait=True)
            pbar.close()
            self.status = CrawlStatus.COMPLETED

        logger.info(f"[CRAWLER] Finished {seed}. Visited: {self.visited_count}. Pages with content: {len(pages)}")
        return pages

    def _fetch(self, url: str) -> FetchResult | FetchError:
        try:
            return self.fetcher.fetch(url, self.request_timeout)
        except LikelyDynamicContent as e:
            logger.info(f"[CRAWLER] Skipping likely dynamic page {url}: {e}")
            return e
        except FetchError as e:
            logger.warning(f"[CRAWLER] Failed to fetch {url}: {e}")
            return e

    def _process(self, url: str, result: FetchResult, seed_host: str | None, state: CrawlState) -> Page | None:
        final_url = normalize_url(result.final_url, result.final_url, seed_host)
        if final_url is None:
            logger.warning(f"[CRAWLER] Redirect off the seed host blocked: {result.final_url}")
            return None

        # The redirect target counts as visited too
        final_key = visit_key(final_url)
        if final_key != visit_key(url):
            if final_key in state.visited:
                logger.debug(f"[CRAWLER] {url} redirects to already visited {final_url}")
                return None
            state.visited.add(final_key)

        page = extract(result.content, final_url, allowed_host=seed_host, max_chars=self.max_page_chars)

        for link in sorted(page.outbound_links):
            state.enqueue(link)

        if len(page.text) <= self.min_page_chars:
            logger.debug(f"[CRAWLER] Skipping near-empty page {final_url} ({len(page.text)} chars)")
            return None
        return page
