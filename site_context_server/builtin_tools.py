"""LangChain tool wrapping site context retrieval.

Answer-generation agents can call this tool to ground their replies in the
crawled website content instead of general knowledge.
"""

from typing import TYPE_CHECKING

from langchain_core.tools import Tool
from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from .rag.knowledge_base import SiteKnowledgeBase


class SiteContextInput(BaseModel):
    """Input schema for the site context tool."""

    query: str = Field(
        description="What to look up in the website content (e.g., 'refund policy', 'opening hours on weekends')"
    )
    max_results: int = Field(default=5, ge=1, description="Maximum number of page excerpts to return. Default is 5.")
    domain: str = Field(default="", description="Optional site restriction (e.g., 'example.com')")


def create_site_context_tool(knowledge_base: "SiteKnowledgeBase") -> Tool:
    """Create a site context tool bound to a knowledge base.

    Args:
        knowledge_base: SiteKnowledgeBase with ingested sites

    Returns:
        LangChain Tool returning formatted source excerpts

    Example:
        >>> from site_context_server import SiteKnowledgeBase, create_site_context_tool
        >>> kb = SiteKnowledgeBase()
        >>> kb.ingest("https://example.com")
        >>> tools = [create_site_context_tool(kb)]
    """

    def _site_context(query: str, max_results: int = 5, domain: str = "") -> str:
        """Wrapper that forwards to the knowledge base."""
        return knowledge_base.retrieve_context(query, limit=max_results, domain=domain or None)

    return Tool(
        name="site_context",
        description="Search the crawled website content for passages relevant to the user's question. Use this before answering questions about the website's products, policies, prices or pages. Returns excerpts labeled with their source URL.",
        func=_site_context,
        args_schema=SiteContextInput,
    )


__all__ = [
    "SiteContextInput",
    "create_site_context_tool",
]
