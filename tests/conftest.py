"""Shared pytest fixtures for the semantic-news test suite."""

from __future__ import annotations

import json
import re
from datetime import date
from pathlib import Path
from typing import Any

import pytest

from semantic_news.config.settings import Settings, StorageBackendConfig
from semantic_news.interfaces.embedding_provider import IEmbeddingProvider
from semantic_news.models.news import EmbeddedRecord, NewsRecord
from semantic_news.utils.logging import configure_logging

KEYWORD_DIM = 32

_TOKEN_RE = re.compile(r"[a-z0-9]+")


class KeywordEmbeddingProvider(IEmbeddingProvider):
    """Deterministic bag-of-words embedding provider for tests.

    Each distinct lowercase token gets its own axis in order of first
    appearance, so texts sharing words have positive cosine similarity and
    texts with disjoint words are orthogonal (apart from a small constant
    bias on the last axis that keeps every vector non-zero).
    """

    def __init__(
        self,
        dimension: int = KEYWORD_DIM,
        batch_size: int = 1,
        name: str = "keyword-embedding",
    ) -> None:
        self._dimension = dimension
        self._batch_size = batch_size
        self._name = name
        self._vocabulary: dict[str, int] = {}
        self.calls: list[list[str]] = []

    def vector_for(self, text: str) -> list[float]:
        vector = [0.0] * self._dimension
        for token in _TOKEN_RE.findall(text.lower()):
            if token not in self._vocabulary:
                # Wraps only once the vocabulary outgrows the dimension.
                self._vocabulary[token] = len(self._vocabulary) % (self._dimension - 1)
            vector[self._vocabulary[token]] += 1.0
        vector[-1] = 0.1
        return vector

    async def embed_many(self, texts: list[str]) -> list[list[float]]:
        self.calls.append(list(texts))
        return [self.vector_for(text) for text in texts]

    async def embed_one(self, text: str) -> list[float]:
        result = await self.embed_many([text])
        return result[0]

    def get_dimension(self) -> int:
        return self._dimension

    def get_batch_size(self) -> int:
        return self._batch_size

    def get_provider_name(self) -> str:
        return self._name

    def is_available(self) -> bool:
        return True


def corpus_line(
    headline: str,
    category: str = "SCIENCE",
    link: str | None = None,
    short_description: str = "",
    authors: str = "Staff Writer",
    day: str = "2022-09-23",
) -> str:
    """Return one JSON-lines corpus entry in the news dataset's format."""
    slug = re.sub(r"[^a-z0-9]+", "-", headline.lower()).strip("-") or "untitled"
    return json.dumps(
        {
            "link": link or f"https://news.example.com/{slug}",
            "headline": headline,
            "category": category,
            "short_description": short_description,
            "authors": authors,
            "date": day,
        }
    )


def make_record(headline: str, category: str = "SCIENCE", record_id: int | None = None) -> NewsRecord:
    return NewsRecord(
        id=record_id,
        link=f"https://news.example.com/{record_id or 0}",
        headline=headline,
        category=category,
        short_description="",
        authors="Staff Writer",
        date=date(2022, 9, 23),
    )


def make_embedded(
    headline: str,
    vector: list[float],
    category: str = "SCIENCE",
    provider: str = "keyword-embedding",
) -> EmbeddedRecord:
    return EmbeddedRecord(record=make_record(headline, category), vector=tuple(vector), provider=provider)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session", autouse=True)
def _session_logging() -> None:
    """Configure structlog once against the session's stderr.

    Otherwise the first lazy ``get_logger()`` call may happen inside a
    ``capsys`` test and bind the logger to that test's (later closed) stream.
    """
    configure_logging()


@pytest.fixture
def keyword_provider() -> KeywordEmbeddingProvider:
    """Local-style provider: one text per call."""
    return KeywordEmbeddingProvider()


@pytest.fixture
def batched_keyword_provider() -> KeywordEmbeddingProvider:
    """Remote-style provider: chunks of up to 100 texts per call."""
    return KeywordEmbeddingProvider(batch_size=100, name="batched-keyword-embedding")


@pytest.fixture
def sample_corpus_lines() -> list[str]:
    """Mixed-category corpus with a blank line in the middle."""
    return [
        corpus_line("Senate passes sweeping climate bill", category="POLITICS"),
        corpus_line("New smartphone chip doubles battery life", category="tech"),
        corpus_line("Local team wins championship final", category="SPORTS"),
        "",
        corpus_line("Space telescope captures distant galaxy", category="Science"),
        corpus_line("Hidden beaches of the Greek islands", category="TRAVEL"),
    ]


@pytest.fixture
def corpus_file(tmp_path: Path, sample_corpus_lines: list[str]) -> Path:
    path = tmp_path / "News.json"
    path.write_text("\n".join(sample_corpus_lines) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def make_settings(tmp_path: Path):
    """Factory for Settings pointing every backend at ``tmp_path``."""

    def _make(**overrides: Any) -> Settings:
        defaults: dict[str, Any] = {
            "openai_api_key": "",
            "openai_base_url": "",
            "openai_embedding_model": "text-embedding-3-small",
            "corpus_path": str(tmp_path / "News.json"),
            "storage_backends": [
                StorageBackendConfig(
                    name="sqlite-local",
                    kind="sqlite",
                    target=str(tmp_path / "news.db"),
                    dimension=KEYWORD_DIM,
                    embedding="local",
                ),
            ],
            "snapshot_backend": "sqlite-local",
            "app_env": "test",
        }
        defaults.update(overrides)
        return Settings(**defaults)

    return _make
