"""Base configuration for Site Context Server."""

from typing import Optional

from .rag.config import DEFAULT_USER_AGENT, RAGConfig


class ServerConfig:
    """Base configuration class for Site Context Server.

    Projects should subclass this and override as needed.
    """

    # Sites crawled at startup (comma-separated)
    SCRAPE_URLS: str = ""

    # Server configuration
    DEFAULT_HOST: str = "127.0.0.1"  # Default to localhost for security (use 0.0.0.0 for all interfaces)
    DEFAULT_PORT: int = 5001
    INGEST_ON_STARTUP: bool = True

    # Crawl settings
    MAX_PAGES: int = 150
    FETCH_TIMEOUT: float = 10.0  # Seconds per HTTP request
    CRAWL_WORKERS: int = 1  # Concurrent fetches per site
    SITE_WORKERS: int = 1  # Sites crawled concurrently
    MAX_PAGE_CHARS: int = 20000
    MIN_PAGE_CHARS: int = 50
    USER_AGENT: str = DEFAULT_USER_AGENT
    SHOW_PROGRESS: bool = True

    # Chunking and retrieval settings
    CHUNK_SIZE: int = 1000
    CHUNK_OVERLAP: int = 200
    SEARCH_LIMIT: int = 5

    # Debug settings
    DEBUG_LOG: bool = False
    DEBUG_LOG_FILE: str = "site_context_debug.log"
    DEBUG_LOG_MAX_BYTES: int = 10 * 1024 * 1024  # 10MB default
    DEBUG_LOG_BACKUP_COUNT: int = 5  # Keep 5 backup files

    # Custom CORS origins for the context API (None = allow all)
    CORS_ORIGINS: Optional[list] = None

    @classmethod
    def from_env(cls, env_prefix: str = ""):
        """Create config from environment variables with optional prefix.

        Args:
            env_prefix: Prefix for environment variables (e.g., "DOCS_", "SHOP_")

        Returns:
            ServerConfig instance populated from environment
        """
        import os

        from dotenv import load_dotenv

        load_dotenv()

        config = cls()

        # Helper to get env var with prefix
        def get_env(name: str, default):
            # Try with prefix first, then without
            prefixed = os.getenv(f"{env_prefix}{name}", None)
            if prefixed is not None:
                return prefixed
            return os.getenv(name, default)

        # Load configuration from environment
        config.SCRAPE_URLS = get_env("SCRAPE_URLS", None) or get_env("SCRAPE_URL", cls.SCRAPE_URLS)
        config.DEFAULT_HOST = get_env("HOST", cls.DEFAULT_HOST)
        config.DEFAULT_PORT = int(get_env("PORT", str(cls.DEFAULT_PORT)))
        config.INGEST_ON_STARTUP = get_env("INGEST_ON_STARTUP", "").lower() not in ("false", "0", "no")
        config.MAX_PAGES = int(get_env("MAX_PAGES", str(cls.MAX_PAGES)))
        config.FETCH_TIMEOUT = float(get_env("FETCH_TIMEOUT", str(cls.FETCH_TIMEOUT)))
        config.CRAWL_WORKERS = int(get_env("CRAWL_WORKERS", str(cls.CRAWL_WORKERS)))
        config.SITE_WORKERS = int(get_env("SITE_WORKERS", str(cls.SITE_WORKERS)))
        config.MAX_PAGE_CHARS = int(get_env("MAX_PAGE_CHARS", str(cls.MAX_PAGE_CHARS)))
        config.MIN_PAGE_CHARS = int(get_env("MIN_PAGE_CHARS", str(cls.MIN_PAGE_CHARS)))
        config.USER_AGENT = get_env("USER_AGENT", cls.USER_AGENT)
        config.SHOW_PROGRESS = get_env("SHOW_PROGRESS", "").lower() not in ("false", "0", "no")
        config.CHUNK_SIZE = int(get_env("CHUNK_SIZE", str(cls.CHUNK_SIZE)))
        config.CHUNK_OVERLAP = int(get_env("CHUNK_OVERLAP", str(cls.CHUNK_OVERLAP)))
        config.SEARCH_LIMIT = int(get_env("SEARCH_LIMIT", str(cls.SEARCH_LIMIT)))
        config.DEBUG_LOG = get_env("DEBUG_LOG", "").lower() in ("true", "1", "yes")
        config.DEBUG_LOG_FILE = get_env("DEBUG_LOG_FILE", cls.DEBUG_LOG_FILE)
        config.DEBUG_LOG_MAX_BYTES = int(get_env("DEBUG_LOG_MAX_BYTES", str(cls.DEBUG_LOG_MAX_BYTES)))
        config.DEBUG_LOG_BACKUP_COUNT = int(get_env("DEBUG_LOG_BACKUP_COUNT", str(cls.DEBUG_LOG_BACKUP_COUNT)))

        cors_origins = get_env("CORS_ORIGINS", "")
        if cors_origins:
            config.CORS_ORIGINS = [origin.strip() for origin in cors_origins.split(",") if origin.strip()]

        return config

    def to_rag_config(self) -> RAGConfig:
        """Build the validated RAG settings from this server config.

        Raises:
            ConfigurationError: If any crawl, chunk or search setting is invalid
        """
        return RAGConfig(
            max_pages=self.MAX_PAGES,
            request_timeout=self.FETCH_TIMEOUT,
            max_workers=self.CRAWL_WORKERS,
            site_workers=self.SITE_WORKERS,
            max_page_chars=self.MAX_PAGE_CHARS,
            min_page_chars=self.MIN_PAGE_CHARS,
            user_agent=self.USER_AGENT,
            show_progress=self.SHOW_PROGRESS,
            chunk_size=self.CHUNK_SIZE,
            chunk_overlap=self.CHUNK_OVERLAP,
            search_top_k=self.SEARCH_LIMIT,
        )
