"""In-memory term index over page chunks.

Every token of a chunk is stored under all of its prefixes (down to
``min_prefix_length``), so a query for "refu" finds chunks mentioning
"refund". A prefix posting weighs ``(1 + ln tf) * len(prefix) / len(token)``:
exact tokens score highest and short prefixes of long words score little.
Query scores sum ``weight * idf`` over the query tokens.
"""

import itertools
import logging
import math
import re
import threading
from collections import Counter

from .chunker import chunk_page
from .models import Chunk, Page
from .normalizer import site_domain

logger = logging.getLogger(__name__)

_TOKEN_RE = re.compile(r"\w+", re.UNICODE)


def tokenize(text: str) -> list[str]:
    """Lowercase word tokens, identical for ingestion and queries."""
    return [token.lower() for token in _TOKEN_RE.findall(text)]


class KnowledgeIndex:
    """Chunk table plus prefix-aware inverted index.

    Writers are serialized and a chunk's postings are inserted under the same
    lock searches take, so a search never sees half of a chunk.
    """

    def __init__(self, min_prefix_length: int = 2):
        """Initialize an empty index.

        Args:
            min_prefix_length: Shortest prefix stored for a token (shorter tokens are stored whole)
        """
        self.min_prefix_length = min_prefix_length
        self._lock = threading.RLock()
        # Ids keep increasing across clear() so they are never reused
        self._ids = itertools.count()
        self._chunks: dict[int, Chunk] = {}
        self._postings: dict[str, dict[int, float]] = {}

    def __len__(self) -> int:
        return len(self._chunks)

    def _term_weights(self, text: str) -> dict[str, float]:
        weights: dict[str, float] = {}
        for token, count in Counter(tokenize(text)).items():
            tf_weight = 1.0 + math.log(count)
            shortest = min(self.min_prefix_length, len(token))
            for end in range(shortest, len(token) + 1):
                prefix = token[:end]
                weight = tf_weight * end / len(token)
                if weight > weights.get(prefix, 0.0):
                    weights[prefix] = weight
        return weights

    def add(self, source_url: str, text: str, offset: int = 0) -> Chunk | None:
        """Store one chunk and index its tokens.

        Args:
            source_url: Page the text came from
            text: Chunk text (surrounding whitespace is trimmed)
            offset: Character offset of the untrimmed text within its page

        Returns:
            The stored Chunk with its assigned id, or None if the text is blank
        """
        stripped = text.lstrip()
        # Keep the offset pointing at the first retained character
        offset += len(text) - len(stripped)
        text = stripped.rstrip()
        if not text:
            return None

        weights = self._term_weights(text)
        with self._lock:
            chunk = Chunk(id=next(self._ids), source_url=source_url, text=text, offset_in_page=offset)
            self._chunks[chunk.id] = chunk
            for term, weight in weights.items():
                self._postings.setdefault(term, {})[chunk.id] = weight
        return chunk

    def add_page(self, page: Page, size: int, overlap: int) -> list[Chunk]:
        """Chunk a page and index every window."""
        chunks = []
        for window in chunk_page(page, size, overlap):
            chunk = self.add(page.url, window.text, window.offset)
            if chunk is not None:
                chunks.append(chunk)
        return chunks

    def clear(self) -> None:
        """Drop every chunk and posting."""
        with self._lock:
            self._chunks = {}
            self._postings = {}
        logger.info("[RAG] Index cleared")

    def get(self, chunk_id: int) -> Chunk | None:
        return self._chunks.get(chunk_id)

    def domains(self) -> set[str]:
        """Bare hostnames of every indexed page."""
        with self._lock:
            return {site_domain(chunk.source_url) for chunk in self._chunks.values()}

    def search_scored(self, query: str, limit: int, domain: str | None = None) -> list[tuple[int, float]]:
        """Rank chunks against a free-text query.

        Args:
            query: Free-text query
            limit: Maximum number of results
            domain: Only return chunks from this bare hostname

        Returns:
            (chunk_id, score) pairs by descending score, ties by ascending id
        """
        terms = set(tokenize(query))
        if not terms or limit <= 0:
            return []

        with self._lock:
            total = len(self._chunks)
            if not total:
                return []

            scores: dict[int, float] = {}
            for term in terms:
                postings = self._postings.get(term)
                if not postings:
                    continue
                idf = math.log(1.0 + total / len(postings))
                for chunk_id, weight in postings.items():
                    scores[chunk_id] = scores.get(chunk_id, 0.0) + weight * idf

            if domain:
                scores = {
                    chunk_id: score
                    for chunk_id, score in scores.items()
                    if site_domain(self._chunks[chunk_id].source_url) == domain
                }

        ranked = sorted(scores.items(), key=lambda item: (-item[1], item[0]))
        return ranked[:limit]

    def search(self, query: str, limit: int, domain: str | None = None) -> list[int]:
        """Chunk ids ranked by relevance (see search_scored)."""
        return [chunk_id for chunk_id, _ in self.search_scored(query, limit, domain)]
