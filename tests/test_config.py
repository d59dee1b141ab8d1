"""Tests for ServerConfig and RAGConfig."""

import pytest

from site_context_server.config import ServerConfig
from site_context_server.rag.config import ConfigurationError, RAGConfig


@pytest.fixture
def clean_env(monkeypatch):
    """Isolate from any .env file and from variables set in the test environment."""
    monkeypatch.setattr("dotenv.load_dotenv", lambda *args, **kwargs: False)
    for name in ("SCRAPE_URLS", "SCRAPE_URL", "PORT", "CHUNK_SIZE", "INGEST_ON_STARTUP", "CORS_ORIGINS", "DEBUG_LOG"):
        monkeypatch.delenv(name, raising=False)
        monkeypatch.delenv(f"SHOP_{name}", raising=False)
    return monkeypatch


@pytest.mark.unit
class TestRAGConfig:
    """Test RAGConfig defaults and validation."""

    def test_defaults(self):
        config = RAGConfig()

        assert config.max_pages == 150
        assert config.request_timeout == 10.0
        assert config.max_page_chars == 20000
        assert config.min_page_chars == 50
        assert (config.chunk_size, config.chunk_overlap) == (1000, 200)
        assert config.dedup_prefix_chars == 50

    @pytest.mark.parametrize(
        "overrides",
        [
            {"chunk_size": 100, "chunk_overlap": 100},
            {"chunk_size": 100, "chunk_overlap": -1},
            {"chunk_size": 0, "chunk_overlap": 0},
            {"max_pages": 0},
            {"request_timeout": 0},
            {"max_workers": 0},
            {"site_workers": 0},
            {"search_top_k": 0},
            {"min_prefix_length": 0},
        ],
    )
    def test_invalid_settings_raise(self, overrides):
        with pytest.raises(ConfigurationError):
            RAGConfig(**overrides)


@pytest.mark.unit
class TestServerConfig:
    """Test ServerConfig.from_env."""

    def test_defaults_without_environment(self, clean_env):
        config = ServerConfig.from_env()

        assert config.SCRAPE_URLS == ""
        assert config.DEFAULT_HOST == "127.0.0.1"
        assert config.DEFAULT_PORT == 5001
        assert config.INGEST_ON_STARTUP is True
        assert config.DEBUG_LOG is False
        assert config.CORS_ORIGINS is None

    def test_reads_environment(self, clean_env):
        clean_env.setenv("SCRAPE_URLS", "https://a.example,https://b.example")
        clean_env.setenv("PORT", "8080")
        clean_env.setenv("CHUNK_SIZE", "500")
        clean_env.setenv("INGEST_ON_STARTUP", "false")
        clean_env.setenv("CORS_ORIGINS", "http://localhost:3000, http://localhost:8080")

        config = ServerConfig.from_env()

        assert config.SCRAPE_URLS == "https://a.example,https://b.example"
        assert config.DEFAULT_PORT == 8080
        assert config.CHUNK_SIZE == 500
        assert config.INGEST_ON_STARTUP is False
        assert config.CORS_ORIGINS == ["http://localhost:3000", "http://localhost:8080"]

    def test_single_scrape_url_fallback(self, clean_env):
        clean_env.setenv("SCRAPE_URL", "https://only.example")

        assert ServerConfig.from_env().SCRAPE_URLS == "https://only.example"

    def test_prefixed_variables_win(self, clean_env):
        clean_env.setenv("PORT", "8000")
        clean_env.setenv("SHOP_PORT", "9000")

        assert ServerConfig.from_env("SHOP_").DEFAULT_PORT == 9000
        assert ServerConfig.from_env().DEFAULT_PORT == 8000

    def test_to_rag_config(self):
        config = ServerConfig()
        config.MAX_PAGES = 20
        config.CHUNK_SIZE = 300
        config.CHUNK_OVERLAP = 30
        config.SEARCH_LIMIT = 3

        rag_config = config.to_rag_config()

        assert rag_config.max_pages == 20
        assert (rag_config.chunk_size, rag_config.chunk_overlap) == (300, 30)
        assert rag_config.search_top_k == 3

    def test_to_rag_config_validates(self):
        config = ServerConfig()
        config.CHUNK_OVERLAP = config.CHUNK_SIZE

        with pytest.raises(ConfigurationError):
            config.to_rag_config()
