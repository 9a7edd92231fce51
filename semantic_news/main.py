"""Composition root for semantic-news.

Wires embedding providers, vector stores, the ingestion service and the
comparison harness from a :class:`Settings` instance.  Every factory takes
its settings explicitly; nothing here reads configuration from a global.

Heavy client libraries (sentence-transformers, fastembed, chromadb,
SQLAlchemy/pgvector) are imported inside the factories so that a command
only loads the backends it actually uses.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from semantic_news.config.settings import EmbeddingKind, Settings, StorageBackendConfig
from semantic_news.providers.vector_store.memory_provider import InMemoryVectorStore
from semantic_news.services.benchmark_service import BenchmarkHarness, SearchPairing
from semantic_news.services.ingestion.ingestion_service import IngestionService
from semantic_news.utils.errors import ConfigurationError, SemanticNewsError

if TYPE_CHECKING:
    from semantic_news.interfaces.embedding_provider import IEmbeddingProvider
    from semantic_news.interfaces.vector_store_provider import IVectorStoreProvider

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_TABLE = "news_items"


# ---------------------------------------------------------------------------
# Embedding provider selection
# ---------------------------------------------------------------------------


def build_embedding_provider(kind: EmbeddingKind, settings: Settings) -> IEmbeddingProvider:
    """Return the provider for *kind* (``"local"`` or ``"openai"``).

    The local variant is chosen by ``local_embedding_backend``:
    sentence-transformers (PyTorch) or fastembed (ONNX).
    """
    if kind == "openai":
        from semantic_news.providers.embedding.openai_embedding_provider import (
            OpenAIEmbeddingProvider,
        )

        return OpenAIEmbeddingProvider(settings=settings)

    if kind == "local":
        model_name = settings.local_embedding_model or None
        if settings.local_embedding_backend == "fastembed":
            from semantic_news.providers.embedding.fastembed_embedding_provider import (
                FastEmbedEmbeddingProvider,
            )

            return FastEmbedEmbeddingProvider(model_name=model_name)

        from semantic_news.providers.embedding.sentence_transformer_embedding_provider import (
            SentenceTransformerEmbeddingProvider,
        )

        return SentenceTransformerEmbeddingProvider(model_name=model_name)

    raise ConfigurationError(message=f"Unknown embedding kind: {kind!r}")


# ---------------------------------------------------------------------------
# Vector store selection
# ---------------------------------------------------------------------------


def build_vector_store(backend: StorageBackendConfig) -> IVectorStoreProvider:
    """Instantiate the store described by one configured backend."""
    table = backend.table or _DEFAULT_TABLE

    if backend.kind == "memory":
        return InMemoryVectorStore(dimension=backend.dimension, name=backend.name)

    if backend.kind == "sqlite":
        from semantic_news.providers.vector_store.sqlite_provider import SQLiteVectorStore

        return SQLiteVectorStore(
            dimension=backend.dimension,
            db_path=backend.target or "data/news.db",
            table=table,
            name=backend.name,
        )

    if backend.kind == "chromadb":
        from semantic_news.providers.vector_store.chromadb_provider import ChromaDBVectorStore

        return ChromaDBVectorStore(
            dimension=backend.dimension,
            persist_directory=backend.target or "data/chromadb",
            collection_name=table,
            name=backend.name,
        )

    if backend.kind == "pgvector":
        if not backend.target:
            raise ConfigurationError(
                message=f"Backend '{backend.name}' needs a PostgreSQL URL in 'target'",
                provider_name=backend.name,
            )
        from semantic_news.providers.vector_store.pgvector_provider import PgVectorStore

        return PgVectorStore(
            dimension=backend.dimension,
            database_url=backend.target,
            table=table,
            name=backend.name,
        )

    raise ConfigurationError(message=f"Unknown backend kind: {backend.kind!r}")


def _check_backend_dimension(
    backend: StorageBackendConfig,
    provider: IEmbeddingProvider,
) -> None:
    if backend.dimension != provider.get_dimension():
        raise ConfigurationError(
            message=(
                f"Backend '{backend.name}' declares dimension {backend.dimension} but "
                f"'{provider.get_provider_name()}' produces {provider.get_dimension()}"
            ),
            provider_name=backend.name,
        )


def build_vector_stores(
    settings: Settings,
    embedding: EmbeddingKind,
) -> list[IVectorStoreProvider]:
    """Build every configured store that holds vectors from *embedding*."""
    return [build_vector_store(backend) for backend in settings.backends_for(embedding)]


# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------


def build_ingestion_service(settings: Settings, embedding: EmbeddingKind) -> IngestionService:
    """Assemble ingestion for one provider variant and all of its stores."""
    backends = settings.backends_for(embedding)
    if not backends:
        raise ConfigurationError(
            message=f"No storage backends are configured for '{embedding}' embeddings"
        )

    provider = build_embedding_provider(embedding, settings)
    if not provider.is_available():
        raise ConfigurationError(
            message=(
                f"Embedding provider '{provider.get_provider_name()}' is not available "
                "(missing API key or optional dependency)"
            ),
            provider_name=provider.get_provider_name(),
        )
    for backend in backends:
        _check_backend_dimension(backend, provider)

    stores = [build_vector_store(backend) for backend in backends]
    logger.info(
        "ingestion_service_built",
        provider=provider.get_provider_name(),
        stores=[store.get_provider_name() for store in stores],
    )
    return IngestionService(settings=settings, embedding_provider=provider, vector_stores=stores)


async def load_snapshot(settings: Settings) -> InMemoryVectorStore | None:
    """Load the read-only in-memory working set from ``snapshot_backend``.

    Returns ``None`` when no snapshot backend is configured.
    """
    if not settings.snapshot_backend:
        return None
    backend = settings.get_backend(settings.snapshot_backend)
    source = build_vector_store(backend)
    records = await source.load_all()
    snapshot = InMemoryVectorStore.from_records(
        records, dimension=backend.dimension, name="in-memory"
    )
    logger.info("snapshot_loaded", source=backend.name, count=len(records))
    return snapshot


async def build_harness(
    settings: Settings,
    snapshot: InMemoryVectorStore | None = None,
) -> BenchmarkHarness:
    """Pair the snapshot and every configured backend with its provider.

    Pairings whose provider is unavailable (no API key, optional library not
    installed) are left out with a warning.  Nothing here opens a store or
    compares dimensions: a mismatched or unreachable backend fails inside
    its own pairing when the harness runs, and the others still report.
    Pass an already loaded *snapshot* to avoid reading the snapshot
    backend twice.
    """
    providers: dict[str, IEmbeddingProvider] = {}

    def provider_for(kind: EmbeddingKind) -> IEmbeddingProvider | None:
        if kind not in providers:
            providers[kind] = build_embedding_provider(kind, settings)
        provider = providers[kind]
        return provider if provider.is_available() else None

    pairings: list[SearchPairing] = []

    if snapshot is None:
        try:
            snapshot = await load_snapshot(settings)
        except SemanticNewsError as exc:
            logger.warning(
                "snapshot_unavailable",
                backend=settings.snapshot_backend,
                error=str(exc),
            )
    if snapshot is not None:
        snapshot_backend = settings.get_backend(settings.snapshot_backend)
        provider = provider_for(snapshot_backend.embedding)
        if provider is not None:
            pairings.append(
                SearchPairing(
                    label=f"{snapshot_backend.embedding} / in-memory",
                    embedding_provider=provider,
                    vector_store=snapshot,
                )
            )

    for backend in settings.storage_backends:
        provider = provider_for(backend.embedding)
        if provider is None:
            logger.warning(
                "pairing_skipped_provider_unavailable",
                backend=backend.name,
                embedding=backend.embedding,
            )
            continue
        pairings.append(
            SearchPairing(
                label=f"{backend.embedding} / {backend.name}",
                embedding_provider=provider,
                vector_store=build_vector_store(backend),
            )
        )

    logger.info("harness_built", pairings=[pairing.label for pairing in pairings])
    return BenchmarkHarness(pairings, top_k=settings.search_top_k)
