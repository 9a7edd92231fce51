"""Local ONNX-based embedding provider using fastembed.

Wraps the ``fastembed`` library to implement :class:`IEmbeddingProvider`
using ONNX Runtime -- **no PyTorch dependency required**.  Fully free,
runs on CPU with a small RAM footprint.

Default model: ``BAAI/bge-small-en-v1.5`` (384 dimensions), so its vectors
fit the same 384-dimension stores as the sentence-transformers provider
(though the two models' vectors must not be mixed within one store).
"""

from __future__ import annotations

import structlog

from semantic_news.interfaces.embedding_provider import IEmbeddingProvider
from semantic_news.utils.errors import EmbeddingError

logger = structlog.get_logger(logger_name=__name__)

# Known model dimensions for fastembed-supported models.
_MODEL_DIMENSIONS: dict[str, int] = {
    "BAAI/bge-small-en-v1.5": 384,
    "sentence-transformers/all-MiniLM-L6-v2": 384,
    "BAAI/bge-base-en-v1.5": 768,
}

_DEFAULT_MODEL = "BAAI/bge-small-en-v1.5"


class FastEmbedEmbeddingProvider(IEmbeddingProvider):
    """Embedding provider backed by fastembed (ONNX Runtime).

    Loads the ONNX model on first use (lazy initialization).
    Downloads model weights on first run, then caches locally.
    """

    def __init__(self, model_name: str | None = None) -> None:
        self._model_name = model_name or _DEFAULT_MODEL
        self._dimension = _MODEL_DIMENSIONS.get(self._model_name, 384)
        self._model = None  # Lazy-loaded

    def _load_model(self) -> None:
        """Lazy-load the fastembed model."""
        if self._model is not None:
            return
        try:
            from fastembed import TextEmbedding

            logger.info("loading_fastembed_model", model=self._model_name)
            self._model = TextEmbedding(model_name=self._model_name)
            logger.info(
                "fastembed_model_loaded",
                model=self._model_name,
                dimension=self._dimension,
            )
        except Exception as exc:
            raise EmbeddingError(
                message=f"Failed to load fastembed model '{self._model_name}': {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

    async def embed_many(self, texts: list[str]) -> list[list[float]]:
        """Generate embedding vectors for a batch of texts."""
        if not texts:
            return []

        self._load_model()

        try:
            # fastembed yields one numpy array per input text.
            return [vector.tolist() for vector in self._model.embed(texts)]
        except Exception as exc:
            raise EmbeddingError(
                message=f"Fastembed embedding error: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

    async def embed_one(self, text: str) -> list[float]:
        """Generate an embedding vector for a single text string."""
        result = await self.embed_many([text])
        return result[0]

    def get_dimension(self) -> int:
        return self._dimension

    def get_batch_size(self) -> int:
        return 1

    def get_provider_name(self) -> str:
        return f"fastembed_{self._model_name.split('/')[-1]}"

    def is_available(self) -> bool:
        """Return ``True`` if fastembed is installed."""
        try:
            import fastembed  # noqa: F401

            return True
        except ImportError:
            return False
