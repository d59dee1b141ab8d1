"""Crawl, chunk, index and retrieve website content."""

from .chunker import chunk_page, split_text
from .config import ConfigurationError, RAGConfig
from .crawler import CrawlStatus, SiteCrawler
from .extractor import Extractor, HtmlExtractor, extract
from .fetcher import (
    FallbackFetcher,
    FetchError,
    FetchErrorKind,
    FetchResult,
    LikelyDynamicContent,
    RequestsFetcher,
    default_fetcher,
)
from .indexer import KnowledgeIndex, tokenize
from .knowledge_base import SiteKnowledgeBase, parse_seed_urls
from .models import Chunk, Page, RetrievalResult, TextWindow
from .normalizer import normalize_url, site_domain, visit_key
from .retriever import NO_CONTEXT_SENTINEL, Retriever

__all__ = [
    "NO_CONTEXT_SENTINEL",
    "Chunk",
    "ConfigurationError",
    "CrawlStatus",
    "Extractor",
    "FallbackFetcher",
    "FetchError",
    "FetchErrorKind",
    "FetchResult",
    "HtmlExtractor",
    "KnowledgeIndex",
    "LikelyDynamicContent",
    "Page",
    "RAGConfig",
    "RequestsFetcher",
    "RetrievalResult",
    "Retriever",
    "SiteCrawler",
    "SiteKnowledgeBase",
    "TextWindow",
    "chunk_page",
    "default_fetcher",
    "extract",
    "normalize_url",
    "parse_seed_urls",
    "site_domain",
    "split_text",
    "tokenize",
    "visit_key",
]
