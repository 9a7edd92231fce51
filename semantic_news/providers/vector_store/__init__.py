"""Vector store provider implementations.

Four implementations of IVectorStoreProvider, selected per configured
backend by ``StorageBackendConfig.kind``:

    memory   -- InMemoryVectorStore, exact, process-local
    sqlite   -- SQLiteVectorStore, exact, float32 BLOBs in a local file
    chromadb -- ChromaDBVectorStore, HNSW index in cosine space
    pgvector -- PgVectorStore, PostgreSQL with an HNSW vector_cosine_ops index

To add another vector database, implement IVectorStoreProvider and register
the new kind in main.build_vector_store().  ChromaDB and pgvector are
imported from their own modules so that their client libraries load only
when such a backend is configured.
"""

from semantic_news.providers.vector_store.memory_provider import InMemoryVectorStore
from semantic_news.providers.vector_store.sqlite_provider import SQLiteVectorStore

__all__ = ["InMemoryVectorStore", "SQLiteVectorStore"]
