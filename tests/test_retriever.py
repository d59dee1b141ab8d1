"""Tests for deduplicated retrieval and context formatting."""

import pytest

from site_context_server.rag.indexer import KnowledgeIndex
from site_context_server.rag.models import Chunk, RetrievalResult
from site_context_server.rag.retriever import NO_CONTEXT_SENTINEL, Retriever

PREFIX = "Returns and refunds: items can be returned within thirty days of delivery. "


@pytest.fixture
def index():
    return KnowledgeIndex()


@pytest.fixture
def retriever(index):
    return Retriever(index)


@pytest.mark.unit
class TestRetrieverQuery:
    """Test Retriever.query."""

    def test_near_duplicates_are_dropped(self, index, retriever):
        index.add("http://a.example/1", PREFIX + "Refund shipping is free.")
        index.add("http://a.example/2", PREFIX + "Refund labels are printed at home.")
        other = index.add("http://a.example/3", "A refund is issued to the original payment method.")

        results = retriever.query("refund", 5)

        fingerprints = [r.chunk.text[:50] for r in results]
        assert len(fingerprints) == len(set(fingerprints))
        assert len(results) == 2
        assert other.id in {r.chunk.id for r in results}

    def test_results_ordered_by_score(self, index, retriever):
        index.add("http://a.example/1", "warranty information")
        index.add("http://a.example/2", "warranty warranty warranty details")

        results = retriever.query("warranty", 5)

        assert [r.score for r in results] == sorted((r.score for r in results), reverse=True)
        assert results[0].chunk.source_url == "http://a.example/2"

    @pytest.mark.parametrize("limit", [0, 1, 2, 3, 7])
    def test_never_more_than_limit(self, index, retriever, limit):
        for i in range(10):
            index.add("http://a.example/", f"Distinct opening {i}: the store opens early on day {i}.")

        assert len(retriever.query("store opens", limit)) <= limit

    def test_limit_reached_when_enough_unique_candidates(self, index, retriever):
        for i in range(10):
            index.add("http://a.example/", f"Variant {i} of the catalogue entry for lamps.")

        assert len(retriever.query("lamps", 4)) == 4

    def test_empty_index_returns_empty(self, retriever):
        assert retriever.query("anything", 5) == []

    def test_no_match_returns_empty(self, index, retriever):
        index.add("http://a.example/", "only about bicycles")

        assert retriever.query("submarine", 5) == []

    def test_domain_restriction(self, index, retriever):
        index.add("http://a.example/", "gift cards available")
        b_chunk = index.add("http://b.example/", "gift cards sold out")

        results = retriever.query("gift cards", 5, domain="b.example")

        assert [r.chunk.id for r in results] == [b_chunk.id]

    def test_custom_fingerprint_length(self, index):
        index.add("http://a.example/", "abc refund one")
        index.add("http://a.example/", "abc refund two")

        assert len(Retriever(index, fingerprint_chars=3).query("refund", 5)) == 1
        assert len(Retriever(index, fingerprint_chars=50).query("refund", 5)) == 2


@pytest.mark.unit
class TestFormatContext:
    """Test Retriever.format_context."""

    def test_empty_results_sentinel(self):
        assert Retriever.format_context([]) == NO_CONTEXT_SENTINEL
        assert NO_CONTEXT_SENTINEL == "(No relevant data found in search)"

    def test_blocks_in_rank_order(self):
        results = [
            RetrievalResult(chunk=Chunk(id=3, source_url="http://a.example/x", text="First"), score=2.0),
            RetrievalResult(chunk=Chunk(id=1, source_url="http://a.example/y", text="Second"), score=1.0),
        ]

        context = Retriever.format_context(results)

        assert context == "[SOURCE: http://a.example/x]\nFirst\n\n---\n\n[SOURCE: http://a.example/y]\nSecond"
