"""Public interface definitions for embedding providers and vector stores.

Concrete adapters live in ``semantic_news/providers/`` and are selected at
runtime by the factories in ``semantic_news/main.py`` from the configured
``Settings``; services only ever see these interfaces.

CONCRETE PROVIDER MAP:
    Interface                  ->  Concrete implementations
    ---------------------------------------------------------------------
    IEmbeddingProvider         ->  SentenceTransformerEmbeddingProvider,
                                   FastEmbedEmbeddingProvider,
                                   OpenAIEmbeddingProvider
    IVectorStoreProvider       ->  InMemoryVectorStore, SQLiteVectorStore,
                                   ChromaDBVectorStore, PgVectorStore
"""

from semantic_news.interfaces.embedding_provider import IEmbeddingProvider
from semantic_news.interfaces.vector_store_provider import IVectorStoreProvider

__all__ = [
    "IEmbeddingProvider",
    "IVectorStoreProvider",
]
