# =============================================================================
# semantic_news/cli/__init__.py -- CLI Module Overview
# =============================================================================
#
# Command-line entry point for semantic-news, run as
# `python -m semantic_news.cli` or via the `semantic-news` console script.
#
#   1. INDEX  -- embeds the JSON-lines news corpus with the local or OpenAI
#      provider and writes every storage backend configured for it.
#   2. SEARCH -- embeds one query per provider and prints a result table
#      for the in-memory snapshot and for every storage backend.
#   3. STATS  -- row count per configured storage backend.
#   4. MENU   -- interactive loop over the above (the default command).
#
# Architecture Notes:
#   - argparse, not Click/Typer, matching the rest of the tooling.
#   - Settings are loaded once in main() and passed down explicitly.
# =============================================================================

"""CLI for indexing the news corpus and comparing semantic search backends."""
