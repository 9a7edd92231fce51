"""ChromaDB vector store provider adapter.

Wraps ``chromadb.PersistentClient`` to implement :class:`IVectorStoreProvider`.
Each store is one collection in cosine space (``hnsw:space = cosine``), so
ChromaDB answers queries from its HNSW index and reports cosine distance;
results are approximate.  Fully local, no external service required.
"""

from __future__ import annotations

import datetime
import os
from collections.abc import Sequence
from typing import Any

# Opt out of ChromaDB's anonymous telemetry before the client is imported.
os.environ["ANONYMIZED_TELEMETRY"] = "False"

import chromadb
import structlog

from semantic_news.interfaces.vector_store_provider import IVectorStoreProvider
from semantic_news.models.news import EmbeddedRecord, NewsRecord, SimilarityResult
from semantic_news.utils.errors import DimensionMismatchError, SemanticNewsError, VectorStoreError
from semantic_news.utils.vectors import ensure_dimension

logger = structlog.get_logger(logger_name=__name__)

_PAGE_SIZE = 5000


class _NoopEmbeddingFunction(chromadb.EmbeddingFunction[list[str]]):
    """No-op embedding function that prevents ChromaDB from loading a model.

    Vectors always arrive pre-computed from an :class:`IEmbeddingProvider`,
    so ChromaDB's built-in embedding is never invoked.  Without this,
    ChromaDB downloads its default ONNX model on collection creation.
    """

    def __call__(self, input: list[str]) -> list[list[float]]:
        raise NotImplementedError(
            "semantic-news uses pre-computed embeddings; "
            "ChromaDB's built-in embedding should never be called."
        )

    def name(self) -> str:
        """Return function name (required by ChromaDB's EmbeddingFunction protocol)."""
        return "noop_precomputed"


class ChromaDBVectorStore(IVectorStoreProvider):
    """Vector store backed by a persistent ChromaDB collection.

    Record ids are the collection's string ids parsed back to integers;
    new records are numbered on from the current collection size.

    The client and collection are opened on first use, so constructing a
    store never touches disk; a broken or mismatched collection surfaces as
    an error from the first operation instead.
    """

    def __init__(
        self,
        dimension: int,
        persist_directory: str = "./data/chromadb",
        collection_name: str = "news_items",
        name: str = "chromadb",
    ) -> None:
        self._dimension = dimension
        self._persist_directory = persist_directory
        self._collection_name = collection_name
        self._name = name
        self._collection: Any = None  # Lazy-opened

    # ------------------------------------------------------------------
    # Collection access and validation
    # ------------------------------------------------------------------

    def _get_collection(self) -> Any:
        """Open the collection once and check its stored dimension."""
        if self._collection is not None:
            return self._collection

        try:
            client = chromadb.PersistentClient(
                path=self._persist_directory,
                settings=chromadb.config.Settings(anonymized_telemetry=False),
            )
            # Collections created by other tools may have a persisted embedding
            # function that conflicts with ours; open those as-is.
            try:
                collection = client.get_or_create_collection(
                    name=self._collection_name,
                    metadata={"hnsw:space": "cosine"},
                    embedding_function=_NoopEmbeddingFunction(),
                )
            except ValueError:
                collection = client.get_or_create_collection(
                    name=self._collection_name,
                    metadata={"hnsw:space": "cosine"},
                )
            stored_dim = self._stored_dimension(collection)
        except Exception as exc:
            raise VectorStoreError(
                message=f"Cannot open ChromaDB collection '{self._collection_name}': {exc}",
                provider_name=self._name,
            ) from exc

        self._validate_embedding_dimensions(stored_dim)
        self._collection = collection
        return collection

    @staticmethod
    def _stored_dimension(collection: Any) -> int | None:
        """Return the length of one stored vector, or ``None`` when empty."""
        if collection.count() == 0:
            return None
        sample = collection.peek(limit=1)
        embeddings = sample.get("embeddings") if sample else None
        if embeddings is None or len(embeddings) == 0:
            return None
        return len(embeddings[0])

    def _validate_embedding_dimensions(self, stored_dim: int | None) -> None:
        """Fail if the collection already holds vectors of another dimension."""
        if stored_dim is None or stored_dim == self._dimension:
            return
        logger.error(
            "embedding_dimension_mismatch",
            store=self._name,
            collection=self._collection_name,
            stored_dim=stored_dim,
            expected_dim=self._dimension,
        )
        raise DimensionMismatchError(
            expected=self._dimension,
            actual=stored_dim,
            message=(
                f"Collection '{self._collection_name}' holds {stored_dim}-dimension "
                f"vectors but the store is configured for {self._dimension}"
            ),
            provider_name=self._name,
        )

    # ------------------------------------------------------------------
    # IVectorStoreProvider implementation
    # ------------------------------------------------------------------

    async def insert_batch(self, records: list[EmbeddedRecord]) -> int:
        if not records:
            return 0
        for embedded in records:
            if embedded.dimension != self._dimension:
                raise DimensionMismatchError(
                    expected=self._dimension,
                    actual=embedded.dimension,
                    provider_name=self._name,
                )

        collection = self._get_collection()
        try:
            first_id = collection.count() + 1
            collection.add(
                ids=[str(first_id + offset) for offset in range(len(records))],
                embeddings=[list(embedded.vector) for embedded in records],
                documents=[embedded.record.headline for embedded in records],
                metadatas=[self._record_to_metadata(embedded.record) for embedded in records],
            )
        except Exception as exc:
            raise VectorStoreError(
                message=f"ChromaDB insert failed: {exc}",
                provider_name=self._name,
            ) from exc

        logger.info("chromadb_insert_batch", store=self._name, count=len(records))
        return len(records)

    async def count(self) -> int:
        collection = self._get_collection()
        try:
            return collection.count()
        except Exception as exc:
            raise VectorStoreError(
                message=f"ChromaDB count failed: {exc}",
                provider_name=self._name,
            ) from exc

    async def top_k_by_cosine(
        self,
        query_vector: Sequence[float],
        k: int,
    ) -> list[SimilarityResult]:
        """Query the HNSW index; similarity is ``1 - cosine distance``."""
        if k <= 0:
            raise ValueError(f"k must be positive, got {k}")
        ensure_dimension(query_vector, self._dimension, provider_name=self._name)

        collection = self._get_collection()
        try:
            total = collection.count()
            if total == 0:
                return []

            results = collection.query(
                query_embeddings=[list(query_vector)],
                n_results=min(k, total),
                include=["metadatas", "documents", "distances"],
            )
            if not results["ids"] or not results["ids"][0]:
                return []

            ids = results["ids"][0]
            metadatas = results["metadatas"][0]
            documents = results["documents"][0]
            distances = results["distances"][0]

            hits = [
                SimilarityResult(
                    score=max(-1.0, min(1.0, 1.0 - float(distance))),
                    record=self._metadata_to_record(record_id, meta, document),
                )
                for record_id, meta, document, distance in zip(
                    ids, metadatas, documents, distances, strict=True
                )
            ]
        except SemanticNewsError:
            raise
        except Exception as exc:
            raise VectorStoreError(
                message=f"ChromaDB query failed: {exc}",
                provider_name=self._name,
            ) from exc

        hits.sort(key=lambda hit: hit.score, reverse=True)
        logger.debug(
            "chromadb_query",
            store=self._name,
            results_count=len(hits),
            top_score=hits[0].score if hits else 0.0,
        )
        return hits

    async def load_all(self) -> list[EmbeddedRecord]:
        """Page through the collection in 5K-row pages, then order by id."""
        collection = self._get_collection()
        try:
            loaded: list[EmbeddedRecord] = []
            offset = 0
            while True:
                page = collection.get(
                    include=["embeddings", "metadatas", "documents"],
                    limit=_PAGE_SIZE,
                    offset=offset,
                )
                ids = page["ids"] or []
                if not ids:
                    break
                embeddings = page["embeddings"] if page["embeddings"] is not None else []
                for record_id, vector, meta, document in zip(
                    ids, embeddings, page["metadatas"], page["documents"], strict=True
                ):
                    loaded.append(
                        EmbeddedRecord(
                            record=self._metadata_to_record(record_id, meta, document),
                            vector=tuple(float(value) for value in vector),
                        )
                    )
                if len(ids) < _PAGE_SIZE:
                    break
                offset += _PAGE_SIZE
        except SemanticNewsError:
            raise
        except Exception as exc:
            raise VectorStoreError(
                message=f"ChromaDB read failed: {exc}",
                provider_name=self._name,
            ) from exc

        loaded.sort(key=lambda embedded: embedded.record.id or 0)
        return loaded

    def get_dimension(self) -> int:
        return self._dimension

    def is_exact(self) -> bool:
        return False

    def get_provider_name(self) -> str:
        return self._name

    def is_available(self) -> bool:
        """Return ``True`` if the ChromaDB collection is accessible."""
        try:
            self._get_collection()
            return True
        except Exception:
            return False

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _record_to_metadata(record: NewsRecord) -> dict[str, str]:
        """ChromaDB metadata values must be str, int, float, or bool."""
        return {
            "link": record.link,
            "category": record.category,
            "short_description": record.short_description,
            "authors": record.authors,
            "date": record.date.isoformat(),
        }

    @staticmethod
    def _metadata_to_record(record_id: str, meta: dict[str, Any], headline: str) -> NewsRecord:
        return NewsRecord(
            id=int(record_id),
            link=meta.get("link", ""),
            headline=headline or "",
            category=meta.get("category", ""),
            short_description=meta.get("short_description", ""),
            authors=meta.get("authors", ""),
            date=datetime.date.fromisoformat(meta["date"]),
        )
