"""Embedding provider implementations.

Embeddings convert a headline into a numeric vector that captures its
meaning; the vectors are stored by the vector stores and compared with
cosine similarity at query time.

Three implementations of IEmbeddingProvider:
    1. SentenceTransformerEmbeddingProvider -- PyTorch-based, local.
       all-MiniLM-L6-v2 (384 dims), one text per call during ingestion.
    2. FastEmbedEmbeddingProvider -- ONNX-based, local, no PyTorch.
       bge-small-en-v1.5 (384 dims).
    3. OpenAIEmbeddingProvider -- text-embedding-3-small (1536 dims).
       Remote, batched 100 texts per request, requires an API key.

Only the OpenAI provider is re-exported here.  The local providers are
imported where needed so their heavy optional dependencies are not
required to use the rest of the package.
"""

from semantic_news.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider

__all__ = ["OpenAIEmbeddingProvider"]
