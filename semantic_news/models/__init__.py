"""Data models for semantic-news.

Re-exports
----------
NewsRecord, EmbeddedRecord, SimilarityResult, IngestionResult
    Corpus records, their embeddings, ranked hits and ingestion summaries.
PairingResult, ComparisonReport
    Per-pairing and per-query output of the benchmark harness.
"""

from semantic_news.models.benchmark import ComparisonReport, PairingResult
from semantic_news.models.news import (
    EmbeddedRecord,
    IngestionResult,
    NewsRecord,
    SimilarityResult,
)

__all__ = [
    "ComparisonReport",
    "EmbeddedRecord",
    "IngestionResult",
    "NewsRecord",
    "PairingResult",
    "SimilarityResult",
]
