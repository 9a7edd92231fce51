"""Local sentence-transformers embedding provider adapter.

Wraps the ``sentence-transformers`` library to implement
:class:`IEmbeddingProvider` with a small HuggingFace model running
in-process.  Fully free -- runs on CPU/GPU with no API key required.

Default model: ``sentence-transformers/all-MiniLM-L6-v2`` (384 dimensions).
"""

from __future__ import annotations

import structlog

from semantic_news.interfaces.embedding_provider import IEmbeddingProvider
from semantic_news.utils.errors import EmbeddingError

logger = structlog.get_logger(logger_name=__name__)

# Known model dimensions.
_MODEL_DIMENSIONS: dict[str, int] = {
    "sentence-transformers/all-MiniLM-L6-v2": 384,
    "sentence-transformers/all-MiniLM-L12-v2": 384,
    "TaylorAI/bge-micro-v2": 384,
    "BAAI/bge-small-en-v1.5": 384,
    "BAAI/bge-base-en-v1.5": 768,
}

_DEFAULT_MODEL = "sentence-transformers/all-MiniLM-L6-v2"
_ENCODE_BATCH_LIMIT = 64  # Conservative batch size for CPU inference


class SentenceTransformerEmbeddingProvider(IEmbeddingProvider):
    """Embedding provider backed by a local sentence-transformers model.

    Loads the model into memory on first use (lazy initialization).  The
    ingestion pipeline feeds it one headline at a time.
    """

    def __init__(self, model_name: str | None = None) -> None:
        self._model_name = model_name or _DEFAULT_MODEL
        self._dimension = _MODEL_DIMENSIONS.get(self._model_name, 384)
        self._model = None  # Lazy-loaded

    def _load_model(self) -> None:
        """Lazy-load the sentence-transformers model."""
        if self._model is not None:
            return
        try:
            from sentence_transformers import SentenceTransformer

            logger.info("loading_sentence_transformer", model=self._model_name)
            self._model = SentenceTransformer(self._model_name)
            logger.info(
                "sentence_transformer_loaded",
                model=self._model_name,
                dimension=self._dimension,
            )
        except Exception as exc:
            raise EmbeddingError(
                message=f"Failed to load sentence-transformers model '{self._model_name}': {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

    async def embed_many(self, texts: list[str]) -> list[list[float]]:
        """Generate embedding vectors for a batch of texts."""
        if not texts:
            return []

        self._load_model()

        try:
            all_embeddings: list[list[float]] = []
            for start in range(0, len(texts), _ENCODE_BATCH_LIMIT):
                batch = texts[start : start + _ENCODE_BATCH_LIMIT]
                vectors = self._model.encode(
                    batch,
                    normalize_embeddings=True,
                    show_progress_bar=False,
                )
                all_embeddings.extend(vectors.tolist())
            return all_embeddings
        except Exception as exc:
            raise EmbeddingError(
                message=f"Sentence-transformers embedding error: {exc}",
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
        return f"sentence_transformer_{self._model_name.split('/')[-1]}"

    def is_available(self) -> bool:
        """Return ``True`` if sentence-transformers is installed."""
        try:
            import sentence_transformers  # noqa: F401
            return True
        except ImportError:
            return False
