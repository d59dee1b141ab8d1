"""Ranked, deduplicated retrieval and prompt-context formatting."""

import logging

from .indexer import KnowledgeIndex
from .models import RetrievalResult

logger = logging.getLogger(__name__)

NO_CONTEXT_SENTINEL = "(No relevant data found in search)"
CONTEXT_DELIMITER = "\n\n---\n\n"


class Retriever:
    """Query a KnowledgeIndex and drop near-duplicate chunks."""

    def __init__(self, index: KnowledgeIndex, fingerprint_chars: int = 50, oversample: int = 2):
        """Initialize the retriever.

        Args:
            index: Index to search
            fingerprint_chars: Results whose first N characters match an earlier result are dropped
            oversample: Candidates fetched per requested result, to make up for dropped duplicates
        """
        self.index = index
        self.fingerprint_chars = fingerprint_chars
        self.oversample = oversample

    def query(self, text: str, limit: int, domain: str | None = None) -> list[RetrievalResult]:
        """Return at most `limit` results, best first.

        Args:
            text: Free-text query
            limit: Maximum number of results
            domain: Only return chunks from this bare hostname

        Returns:
            Ranked results, or [] when nothing matches
        """
        if limit <= 0:
            return []

        candidates = self.index.search_scored(text, limit * self.oversample, domain=domain)

        seen: set[str] = set()
        results: list[RetrievalResult] = []
        for chunk_id, score in candidates:
            chunk = self.index.get(chunk_id)
            if chunk is None:
                # Index was cleared between search and lookup
                continue
            fingerprint = chunk.text[: self.fingerprint_chars]
            if fingerprint in seen:
                continue
            seen.add(fingerprint)
            results.append(RetrievalResult(chunk=chunk, score=score))
            if len(results) >= limit:
                break

        logger.debug(f"[RAG] Query {text!r}: {len(candidates)} candidates, {len(results)} after dedup")
        return results

    @staticmethod
    def format_context(results: list[RetrievalResult]) -> str:
        """Render results as labeled source blocks in rank order."""
        if not results:
            return NO_CONTEXT_SENTINEL

        return CONTEXT_DELIMITER.join(f"[SOURCE: {r.chunk.source_url}]\n{r.chunk.text}" for r in results)
