"""Utility modules for semantic-news.

- **errors** -- Domain-specific exception hierarchy rooted at
  SemanticNewsError; each failure kind (parse, embedding, dimension,
  degenerate vector, backend) has its own subclass so callers can abort or
  isolate failures without broad ``except Exception`` blocks.
- **logging** -- structlog setup with a dual-renderer pattern: coloured
  console output in development, structured JSON in production.
- **vectors** -- dimension checks and float32 packing shared by the stores.
"""

# -- Domain exception hierarchy --------------------------------------------
from semantic_news.utils.errors import (
    ConfigurationError,
    CorpusParseError,
    DegenerateVectorError,
    DimensionMismatchError,
    EmbeddingError,
    SemanticNewsError,
    VectorStoreError,
)

# -- Structured logging setup ----------------------------------------------
from semantic_news.utils.logging import configure_logging, get_logger

__all__ = [
    "ConfigurationError",
    "CorpusParseError",
    "DegenerateVectorError",
    "DimensionMismatchError",
    "EmbeddingError",
    "SemanticNewsError",
    "VectorStoreError",
    "configure_logging",
    "get_logger",
]
