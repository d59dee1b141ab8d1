"""Command line interface for Site Context Server."""

import logging
import sys

import click

from .config import ServerConfig
from .rag.config import ConfigurationError
from .rag.knowledge_base import SiteKnowledgeBase


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")


@click.group()
@click.option("--env-prefix", default="", help="Prefix for environment variables (e.g. DOCS_)")
@click.option("--verbose", "-v", is_flag=True, help="Verbose logging")
@click.pass_context
def cli(ctx, env_prefix, verbose):
    """Crawl websites and serve retrieval context from them."""
    _setup_logging(verbose)
    ctx.obj = ServerConfig.from_env(env_prefix)


@cli.command()
@click.argument("urls", required=False)
@click.option("--query", "-q", multiple=True, help="Query to run against the index after ingestion")
@click.option("--limit", type=int, default=None, help="Maximum results per query")
@click.option("--max-pages", type=int, default=None, help="Page budget per site")
@click.option("--chunk-size", type=int, default=None, help="Chunk size in characters")
@click.option("--chunk-overlap", type=int, default=None, help="Chunk overlap in characters")
@click.option("--no-progress", is_flag=True, help="Hide progress bars")
@click.pass_obj
def ingest(config, urls, query, limit, max_pages, chunk_size, chunk_overlap, no_progress):
    """Crawl URLS (comma-separated, defaults to SCRAPE_URLS) and report what was indexed."""
    if max_pages is not None:
        config.MAX_PAGES = max_pages
    if chunk_size is not None:
        config.CHUNK_SIZE = chunk_size
    if chunk_overlap is not None:
        config.CHUNK_OVERLAP = chunk_overlap
    if no_progress:
        config.SHOW_PROGRESS = False

    try:
        knowledge_base = SiteKnowledgeBase(config.to_rag_config())
        sites = knowledge_base.ingest(urls or config.SCRAPE_URLS)
    except ConfigurationError as e:
        raise click.UsageError(str(e)) from e

    for domain, chunks in sorted(sites.items()):
        click.echo(f"{domain}: {len(chunks)} chunks")
    for seed, error in knowledge_base.failures.items():
        click.echo(f"FAILED {seed}: {error}", err=True)

    for text in query:
        click.echo(f"\n=== {text}")
        click.echo(knowledge_base.retrieve_context(text, limit=limit))

    if not sites:
        sys.exit(1)


@cli.command()
@click.option("--host", default=None, help="Host to bind to (default from HOST)")
@click.option("--port", type=int, default=None, help="Port to run on (default from PORT)")
@click.option("--debug", is_flag=True, help="Enable Flask debug mode")
@click.pass_obj
def serve(config, host, port, debug):
    """Run the context HTTP server, ingesting SCRAPE_URLS in the background."""
    from .server import ContextServer

    try:
        server = ContextServer(config)
    except ConfigurationError as e:
        raise click.UsageError(str(e)) from e
    server.run(port=port, host=host, debug=debug)


def main():
    cli()


if __name__ == "__main__":
    main()
