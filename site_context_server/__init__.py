"""Site Context Server - crawl websites and serve grounded retrieval context."""

from .builtin_tools import SiteContextInput, create_site_context_tool
from .config import ServerConfig
from .rag import (
    NO_CONTEXT_SENTINEL,
    ConfigurationError,
    KnowledgeIndex,
    RAGConfig,
    Retriever,
    SiteCrawler,
    SiteKnowledgeBase,
)
from .server import ContextServer

__version__ = "0.1.0"
__all__ = [
    "NO_CONTEXT_SENTINEL",
    "ConfigurationError",
    "ContextServer",
    "KnowledgeIndex",
    "RAGConfig",
    "Retriever",
    "ServerConfig",
    "SiteContextInput",
    "SiteCrawler",
    "SiteKnowledgeBase",
    "create_site_context_tool",
]
