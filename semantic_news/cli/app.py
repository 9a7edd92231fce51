"""Command-line interface for semantic-news.

Usage::

    python -m semantic_news.cli index --embedding local
    python -m semantic_news.cli index --embedding openai --corpus data/News.json

    python -m semantic_news.cli search "space telescope finds new planet"

    python -m semantic_news.cli stats

    python -m semantic_news.cli          # interactive menu

The menu offers indexing with either embedding variant and a search loop
that compares every configured store side by side until an empty query.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from semantic_news.config.loader import load_settings
from semantic_news.config.settings import Settings
from semantic_news.main import (
    build_harness,
    build_ingestion_service,
    build_vector_store,
    load_snapshot,
)
from semantic_news.models.news import IngestionResult
from semantic_news.providers.vector_store.memory_provider import InMemoryVectorStore
from semantic_news.services.output_formatter import OutputFormatter
from semantic_news.utils.errors import SemanticNewsError
from semantic_news.utils.logging import configure_logging

_MENU = """\
1. Index with local embeddings
2. Index with OpenAI embeddings
3. Search
4. Quit"""


# ---------------------------------------------------------------------------
# Subcommand handlers
# ---------------------------------------------------------------------------


async def _index_corpus(
    embedding: str,
    corpus: str | None,
    settings: Settings,
) -> IngestionResult | None:
    """Embed the corpus with one provider variant and write its stores.

    Returns ``None`` when the corpus file does not exist.
    """
    corpus_path = Path(corpus or settings.corpus_path)
    if not corpus_path.is_file():
        print(f"Error: corpus file not found: {corpus_path}", file=sys.stderr)
        return None

    service = build_ingestion_service(settings, embedding)
    print(f"Indexing {corpus_path} with {embedding} embeddings...")
    result = await service.ingest_file(corpus_path)
    print(OutputFormatter().format_ingestion(result))
    return result


async def _handle_index(embedding: str, corpus: str | None, settings: Settings) -> int:
    result = await _index_corpus(embedding, corpus, settings)
    return 0 if result is not None else 1


async def _handle_search(query: str, settings: Settings) -> int:
    """Run one query against every pairing and print the tables."""
    harness = await build_harness(settings)
    report = await harness.compare(query)
    print(OutputFormatter().format_report(report))
    return 0


async def _handle_stats(settings: Settings) -> int:
    """Print the row count of every configured store."""
    counts: dict[str, int | str] = {}
    for backend in settings.storage_backends:
        label = f"{backend.name} ({backend.kind}, {backend.dimension}d)"
        try:
            counts[label] = await build_vector_store(backend).count()
        except SemanticNewsError as exc:
            counts[label] = f"unavailable: {exc}"

    print("Storage backends")
    print("=" * 40)
    print(OutputFormatter().format_stats(counts))
    return 0


async def _search_loop(settings: Settings, snapshot: InMemoryVectorStore | None) -> None:
    """Prompt for queries until an empty line; one table set per query."""
    formatter = OutputFormatter()
    harness = await build_harness(settings, snapshot=snapshot)
    while True:
        try:
            query = input("\nSearch (empty to return): ").strip()
        except EOFError:
            return
        if not query:
            return
        report = await harness.compare(query)
        print(formatter.format_report(report))


async def _handle_menu(settings: Settings) -> int:
    """Interactive menu: index local, index OpenAI, search, quit.

    The snapshot is loaded once and reused by every search; it is reloaded
    only after an indexing run wrote to the snapshot backend.
    """
    snapshot = await load_snapshot(settings)
    if snapshot is not None:
        loaded = await snapshot.count()
        if loaded == 0:
            print(
                f"No news items in '{settings.snapshot_backend}' yet. "
                "Choose an indexing option first."
            )
        else:
            print(f"Loaded {loaded} news items from '{settings.snapshot_backend}'.")

    while True:
        print()
        print(_MENU)
        try:
            choice = input("Select an option: ").strip()
        except EOFError:
            return 0

        try:
            if choice in ("1", "2"):
                embedding = "local" if choice == "1" else "openai"
                result = await _index_corpus(embedding, None, settings)
                if result is not None and settings.snapshot_backend in result.stores_written:
                    snapshot = await load_snapshot(settings)
            elif choice == "3":
                await _search_loop(settings, snapshot)
            elif choice in ("4", "q", "quit", ""):
                return 0
            else:
                print(f"Unknown option: {choice}")
        except SemanticNewsError as exc:
            print(f"Error: {exc}", file=sys.stderr)


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the semantic-news CLI."""
    parser = argparse.ArgumentParser(
        prog="semantic-news",
        description="Index a news corpus and compare semantic search across vector stores.",
    )
    parser.add_argument(
        "--config",
        default="config/config.yaml",
        help="YAML settings file (default: config/config.yaml)",
    )
    parser.add_argument("--log-level", dest="log_level", help="Override LOG_LEVEL")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # -- index --
    index_parser = subparsers.add_parser("index", help="Embed and store the corpus")
    index_parser.add_argument(
        "--embedding",
        choices=["local", "openai"],
        default="local",
        help="Embedding provider variant (default: local)",
    )
    index_parser.add_argument("--corpus", help="JSON-lines corpus file (default: CORPUS_PATH)")

    # -- search --
    search_parser = subparsers.add_parser("search", help="Compare one query across all stores")
    search_parser.add_argument("text", help="Query text")

    # -- stats --
    subparsers.add_parser("stats", help="Show row counts per storage backend")

    # -- menu --
    subparsers.add_parser("menu", help="Interactive menu (default)")

    return parser


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    """CLI entry point.

    Loads settings once, configures logging, and dispatches to the chosen
    command.  Domain errors are reported on stderr with exit status 1.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        app_settings = load_settings(args.config)
    except SemanticNewsError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    configure_logging(
        log_level=args.log_level or app_settings.log_level,
        app_env=app_settings.app_env,
    )

    command = args.command or "menu"
    try:
        if command == "index":
            exit_code = asyncio.run(_handle_index(args.embedding, args.corpus, app_settings))
        elif command == "search":
            exit_code = asyncio.run(_handle_search(args.text, app_settings))
        elif command == "stats":
            exit_code = asyncio.run(_handle_stats(app_settings))
        else:
            exit_code = asyncio.run(_handle_menu(app_settings))
    except SemanticNewsError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        exit_code = 1

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
