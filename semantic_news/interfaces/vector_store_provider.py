"""Abstract base class for vector-store providers.

One storage interface, several backends selected by configuration
(``StorageBackendConfig.kind``): an in-memory exact store, a SQLite store
that persists float32 vectors and scans them exactly, and two externally
indexed stores (ChromaDB and PostgreSQL/pgvector, both HNSW) whose
``top_k_by_cosine`` is an opaque, possibly approximate oracle.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from semantic_news.models.news import EmbeddedRecord, SimilarityResult


# Concrete implementations (semantic_news/providers/vector_store/):
#   InMemoryVectorStore -- exact linear scan, the session's working set
#   SQLiteVectorStore   -- exact, persisted, source of the in-memory snapshot
#   ChromaDBVectorStore -- HNSW index, cosine space
#   PgVectorStore       -- PostgreSQL + pgvector, HNSW vector_cosine_ops index
class IVectorStoreProvider(ABC):
    """Contract for storing embedded news records and ranking them by cosine.

    Every store holds vectors of exactly one dimension
    (:meth:`get_dimension`).  Each call acquires its own connection or
    session and releases it before returning.
    """

    @abstractmethod
    async def insert_batch(self, records: list[EmbeddedRecord]) -> int:
        """Persist embedded records; the backend assigns integer ids.

        Returns
        -------
        int
            Number of records written.

        Raises
        ------
        semantic_news.utils.errors.DimensionMismatchError
            If any vector's length differs from :meth:`get_dimension`.
        semantic_news.utils.errors.VectorStoreError
            If the backend write fails.
        """

    @abstractmethod
    async def count(self) -> int:
        """Return the number of stored records."""

    @abstractmethod
    async def top_k_by_cosine(
        self,
        query_vector: Sequence[float],
        k: int,
    ) -> list[SimilarityResult]:
        """Return up to *k* records ranked by non-increasing cosine similarity.

        Indexed backends may be approximate and do not guarantee any order
        among ties.  Each result's ``distance`` is ``1 - score``.

        Raises
        ------
        semantic_news.utils.errors.DimensionMismatchError
            If ``len(query_vector) != get_dimension()``; raised before any
            distance is computed.
        semantic_news.utils.errors.VectorStoreError
            If the backend query fails.
        """

    @abstractmethod
    async def load_all(self) -> list[EmbeddedRecord]:
        """Return every stored record with its vector, ordered by id.

        Used to build the read-only in-memory snapshot at session start.
        """

    @abstractmethod
    def get_dimension(self) -> int:
        """Return the declared vector dimension of this store."""

    @abstractmethod
    def is_exact(self) -> bool:
        """Return ``True`` if :meth:`top_k_by_cosine` is an exact linear scan."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return the configured backend name, e.g. ``"chromadb-local"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the backend is reachable, without running a query."""
