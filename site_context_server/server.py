"""Flask server exposing crawled site context to an answer-generation service."""

import logging
import threading
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Optional

from flask import Flask, jsonify, request
from flask_cors import CORS

from .config import ServerConfig
from .rag.config import ConfigurationError
from .rag.knowledge_base import SiteKnowledgeBase

logger = logging.getLogger(__name__)


class ContextServer:
    """Flask server that ingests seed sites and answers context queries."""

    def __init__(
        self,
        config: ServerConfig,
        knowledge_base: Optional[SiteKnowledgeBase] = None,
        name: str = "SiteContext",
        logger_names: Optional[List[str]] = None,
    ):
        """Initialize Site Context Server.

        Args:
            config: ServerConfig instance
            knowledge_base: Knowledge base to serve (built from config if omitted)
            name: Display name for the server
            logger_names: Optional list of logger names for debug logging
        """
        self.name = name
        self.config = config
        self.knowledge_base = knowledge_base or SiteKnowledgeBase(config.to_rag_config())

        self._ingest_thread: Optional[threading.Thread] = None
        # Held for the whole of any ingestion, background or requested
        self._ingest_lock = threading.Lock()

        # Create Flask app
        self.app = Flask(name.lower())
        if config.CORS_ORIGINS:
            CORS(self.app, origins=config.CORS_ORIGINS)
        else:
            CORS(self.app)

        # Configure logging
        logger_names = logger_names or ["site_context_server"]

        if config.DEBUG_LOG:
            log_file = Path(config.DEBUG_LOG_FILE)
            # Use RotatingFileHandler for automatic log rotation
            file_handler = RotatingFileHandler(
                log_file,
                maxBytes=config.DEBUG_LOG_MAX_BYTES,
                backupCount=config.DEBUG_LOG_BACKUP_COUNT,
                encoding="utf-8",
            )
            file_handler.setLevel(logging.DEBUG)

            formatter = logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
            )
            file_handler.setFormatter(formatter)

            for logger_name in logger_names:
                logger_obj = logging.getLogger(logger_name)
                logger_obj.setLevel(logging.DEBUG)
                logger_obj.addHandler(file_handler)

            max_mb = config.DEBUG_LOG_MAX_BYTES / (1024 * 1024)
            print(f"Debug logging enabled: {log_file.absolute()}")
            print(f"  Logging: {', '.join(logger_names)}")
            print(f"  Rotation: {max_mb:.1f}MB max, {config.DEBUG_LOG_BACKUP_COUNT} backups")

        # Register routes
        self._register_routes()

    def _register_routes(self):
        """Register Flask routes."""
        self.app.route("/health", methods=["GET"])(self.health)
        self.app.route("/v1/sites", methods=["GET"])(self.list_sites)
        self.app.route("/v1/context", methods=["POST"])(self.context)
        self.app.route("/v1/ingest", methods=["POST"])(self.ingest)

    @property
    def is_ingesting(self) -> bool:
        if self._ingest_lock.locked():
            return True
        return self._ingest_thread is not None and self._ingest_thread.is_alive()

    def start_ingest(self, seed_urls: str) -> threading.Thread:
        """Ingest seed sites on a background thread so the server can start serving immediately.

        Returns:
            threading.Thread: The background thread (already started)
        """

        def _background_task():
            try:
                with self._ingest_lock:
                    self.knowledge_base.ingest(seed_urls)
            except ConfigurationError as e:
                logger.error(f"[INGEST] Startup ingestion not run: {e}")
            except Exception as e:
                logger.error(f"[INGEST] Startup ingestion failed: {e}")

        thread = threading.Thread(target=_background_task, daemon=True)
        self._ingest_thread = thread
        thread.start()
        logger.info("[INGEST] Background ingestion thread started")
        return thread

    def health(self):
        """Health check endpoint."""
        return jsonify(
            {
                "status": "healthy",
                "ingesting": self.is_ingesting,
                "chunks": len(self.knowledge_base.index),
            }
        )

    def list_sites(self):
        """List ingested sites and seeds that failed."""
        sites = self.knowledge_base.sites
        return jsonify(
            {
                "object": "list",
                "data": [{"domain": domain, "chunks": len(chunks)} for domain, chunks in sorted(sites.items())],
                "failures": dict(self.knowledge_base.failures),
            }
        )

    def context(self):
        """Return formatted context for a user query."""
        try:
            data = request.get_json(silent=True)

            # Validate JSON payload
            if not isinstance(data, dict):
                return jsonify({"error": "Invalid JSON in request body"}), 400

            query = data.get("query")
            if query is None:
                return jsonify({"error": "Missing required field: 'query'"}), 400

            if not isinstance(query, str):
                return jsonify({"error": "Field 'query' must be a string"}), 400

            if not query.strip():
                return jsonify({"error": "Field 'query' cannot be empty"}), 400

            limit = data.get("limit", self.config.SEARCH_LIMIT)
            if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
                return jsonify({"error": "Field 'limit' must be a positive integer"}), 400

            domain = data.get("domain") or None
            if domain is not None and not isinstance(domain, str):
                return jsonify({"error": "Field 'domain' must be a string"}), 400

            kb = self.knowledge_base
            try:
                results = kb.search(query, limit, domain=domain)
            except ValueError as e:
                return jsonify({"error": f"Invalid domain: {e}"}), 400
            return jsonify(
                {
                    "context": kb.retriever.format_context(results),
                    "results": [
                        {
                            "id": r.chunk.id,
                            "url": r.chunk.source_url,
                            "offset": r.chunk.offset_in_page,
                            "score": r.score,
                            "text": r.chunk.text,
                        }
                        for r in results
                    ],
                }
            )

        except Exception as e:
            logger.exception("[RAG] Context request failed")
            return jsonify({"error": str(e)}), 500

    def ingest(self):
        """Rebuild the index from a new set of seed URLs."""
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return jsonify({"error": "Invalid JSON in request body"}), 400

        urls = data.get("urls")
        if not isinstance(urls, (str, list)):
            return jsonify({"error": "Field 'urls' must be a comma-separated string or an array"}), 400

        background = self._ingest_thread
        if (background is not None and background.is_alive()) or not self._ingest_lock.acquire(blocking=False):
            return jsonify({"error": "Ingestion already in progress"}), 409

        try:
            sites = self.knowledge_base.rebuild(urls)
        except ConfigurationError as e:
            return jsonify({"error": str(e)}), 400
        except Exception as e:
            logger.exception("[INGEST] Ingestion request failed")
            return jsonify({"error": str(e)}), 500
        finally:
            self._ingest_lock.release()

        return jsonify(
            {
                "sites": {domain: len(chunks) for domain, chunks in sorted(sites.items())},
                "failures": dict(self.knowledge_base.failures),
            }
        )

    def run(self, port: Optional[int] = None, host: Optional[str] = None, debug: bool = False):
        """Run the Flask server.

        Args:
            port: Port to run on (defaults to config.DEFAULT_PORT)
            host: Host to bind to (defaults to config.DEFAULT_HOST, which is 127.0.0.1 for security)
            debug: Enable debug mode
        """
        port = port or self.config.DEFAULT_PORT
        host = host or self.config.DEFAULT_HOST

        print(
            f"""
╭────────────────────────────────────╮
│  {self.name} - Site Context Server   │
╰────────────────────────────────────╯

Seeds: {self.config.SCRAPE_URLS or "(none)"}
Host: {host}
Port: {port}
API: http://localhost:{port}/v1
"""
        )

        # Security warning if binding to all interfaces
        if host == "0.0.0.0":
            print("⚠️  WARNING: Server is binding to 0.0.0.0 (all network interfaces)")
            print("   This exposes the API to your entire network without authentication.")
            print("   For security, use HOST=127.0.0.1 (localhost only) unless you need network access.\n")

        if self.config.INGEST_ON_STARTUP and self.config.SCRAPE_URLS:
            self.start_ingest(self.config.SCRAPE_URLS)
        elif not self.config.SCRAPE_URLS:
            print("No SCRAPE_URLS configured, starting with an empty knowledge base.")

        # Start Flask app
        self.app.run(host=host, port=port, debug=debug, use_reloader=False)

