"""Abstract base class for text-embedding service providers.

Defines the contract for turning text into fixed-length float vectors.
Implementations wrap a local sentence-transformers model, a local ONNX
model via fastembed, or the OpenAI embeddings API.  The variants produce
vectors of *different* dimensions (384 locally, 1536 for
``text-embedding-3-small``), so callers must check :meth:`get_dimension`
before pairing a provider with a vector store.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementations:
#   SentenceTransformerEmbeddingProvider -- all-MiniLM-L6-v2 (local, 384 dims)
#   FastEmbedEmbeddingProvider           -- bge-small-en-v1.5 (local ONNX, 384 dims)
#   OpenAIEmbeddingProvider              -- text-embedding-3-small (remote, 1536 dims)
# Located in: semantic_news/providers/embedding/
class IEmbeddingProvider(ABC):
    """Contract for text-embedding services used by ingestion and search.

    Providers are deterministic for a fixed model version and input.  They
    do not cache; every call may cost CPU time or a network round-trip.
    """

    @abstractmethod
    async def embed_many(self, texts: list[str]) -> list[list[float]]:
        """Generate embedding vectors for a batch of texts.

        Parameters
        ----------
        texts:
            Text strings to embed.  Remote providers split the input into
            chunks of :meth:`get_batch_size` per API call.

        Returns
        -------
        list[list[float]]
            Vectors corresponding positionally to *texts*, each of length
            :meth:`get_dimension`.

        Raises
        ------
        semantic_news.utils.errors.EmbeddingError
            If the provider is unreachable or rejects the input.
        """

    @abstractmethod
    async def embed_one(self, text: str) -> list[float]:
        """Generate an embedding vector for a single text (e.g. a search query)."""

    @abstractmethod
    def get_dimension(self) -> int:
        """Return the dimensionality of the vectors this provider produces.

        Constant for the lifetime of the provider; must equal the dimension
        declared by any vector store the provider is paired with.
        """

    @abstractmethod
    def get_batch_size(self) -> int:
        """Return how many texts the ingestion pipeline sends per call.

        ``1`` for in-process providers (one text at a time); the API's
        payload limit (100) for remote providers.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"openai_embedding"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider is configured and usable.

        Must not generate an embedding.
        """
