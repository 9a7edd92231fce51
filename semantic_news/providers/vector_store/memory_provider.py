"""In-memory vector store: the session's exact working set.

Records live in a Python list in insertion order and are ranked with
:class:`ExactSearchEngine`.  The engine's normalised matrix is built on the
first query and reused until the next insert.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from semantic_news.interfaces.vector_store_provider import IVectorStoreProvider
from semantic_news.models.news import EmbeddedRecord, SimilarityResult
from semantic_news.services.similarity_search import ExactSearchEngine
from semantic_news.utils.errors import DimensionMismatchError
from semantic_news.utils.vectors import ensure_dimension

logger = structlog.get_logger(logger_name=__name__)


class InMemoryVectorStore(IVectorStoreProvider):
    """Exact linear-scan store held entirely in process memory."""

    def __init__(self, dimension: int, name: str = "in-memory") -> None:
        if dimension <= 0:
            raise ValueError(f"dimension must be positive, got {dimension}")
        self._dimension = dimension
        self._name = name
        self._records: list[EmbeddedRecord] = []
        self._next_id = 1
        self._engine: ExactSearchEngine[EmbeddedRecord] | None = None

    @classmethod
    def from_records(
        cls,
        records: Sequence[EmbeddedRecord],
        dimension: int,
        name: str = "in-memory",
    ) -> InMemoryVectorStore:
        """Build a store around records that already carry backend ids.

        Used for the snapshot loaded from a persistent store at session
        start, so the ids match the ones that store assigned.
        """
        store = cls(dimension=dimension, name=name)
        for embedded in records:
            store._check_vector(embedded)
        store._records = list(records)
        known_ids = [embedded.record.id for embedded in records if embedded.record.id is not None]
        store._next_id = max(known_ids, default=0) + 1
        logger.info("memory_store_loaded", store=name, count=len(records))
        return store

    def _check_vector(self, embedded: EmbeddedRecord) -> None:
        if embedded.dimension != self._dimension:
            raise DimensionMismatchError(
                expected=self._dimension,
                actual=embedded.dimension,
                message=(
                    f"Record '{embedded.record.headline[:40]}' has a "
                    f"{embedded.dimension}-dimension vector; store holds {self._dimension}"
                ),
                provider_name=self._name,
            )

    async def insert_batch(self, records: list[EmbeddedRecord]) -> int:
        for embedded in records:
            self._check_vector(embedded)
        for embedded in records:
            stored = EmbeddedRecord(
                record=embedded.record.with_id(self._next_id),
                vector=tuple(embedded.vector),
                provider=embedded.provider,
            )
            self._records.append(stored)
            self._next_id += 1
        self._engine = None
        return len(records)

    async def count(self) -> int:
        return len(self._records)

    async def top_k_by_cosine(
        self,
        query_vector: Sequence[float],
        k: int,
    ) -> list[SimilarityResult]:
        ensure_dimension(query_vector, self._dimension, provider_name=self._name)
        if self._engine is None:
            self._engine = ExactSearchEngine(
                [(embedded, embedded.vector) for embedded in self._records],
                dimension=self._dimension,
            )
        return [
            SimilarityResult(score=score, record=embedded.record)
            for score, embedded in self._engine.search(query_vector, k)
        ]

    async def load_all(self) -> list[EmbeddedRecord]:
        return list(self._records)

    def get_dimension(self) -> int:
        return self._dimension

    def is_exact(self) -> bool:
        return True

    def get_provider_name(self) -> str:
        return self._name

    def is_available(self) -> bool:
        return True
