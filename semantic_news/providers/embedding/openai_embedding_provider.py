"""OpenAI-compatible embedding provider adapter.

Wraps the ``openai`` async client to implement :class:`IEmbeddingProvider`.
Supports real OpenAI and OpenAI-compatible endpoints via a custom
``base_url``.  The embeddings endpoint caps the payload per request, so
input is sent in chunks of ``openai_batch_size`` texts (100 by default).
"""

from __future__ import annotations

import openai
import structlog

from semantic_news.config.settings import Settings
from semantic_news.interfaces.embedding_provider import IEmbeddingProvider
from semantic_news.utils.errors import EmbeddingError

logger = structlog.get_logger(logger_name=__name__)

# Known embedding model dimensions.
_MODEL_DIMENSIONS: dict[str, int] = {
    "text-embedding-3-small": 1536,
    "text-embedding-3-large": 3072,
    "text-embedding-ada-002": 1536,
}


class OpenAIEmbeddingProvider(IEmbeddingProvider):
    """Embedding provider backed by an OpenAI-compatible embeddings API.

    Uses ``text-embedding-3-small`` (1536 dims) by default.
    """

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._api_key = settings.openai_api_key

        # Build client kwargs -- add base_url only when configured.
        client_kwargs: dict = {"api_key": self._api_key}
        if settings.openai_base_url:
            client_kwargs["base_url"] = settings.openai_base_url

        self._client = openai.AsyncOpenAI(**client_kwargs)
        self._model = settings.openai_embedding_model or "text-embedding-3-small"
        self._dimension = _MODEL_DIMENSIONS.get(self._model, 1536)
        self._batch_size = settings.openai_batch_size
        self._provider_label = (
            "openai-compatible_embedding" if settings.openai_base_url else "openai_embedding"
        )

    # ------------------------------------------------------------------
    # IEmbeddingProvider implementation
    # ------------------------------------------------------------------

    async def embed_many(self, texts: list[str]) -> list[list[float]]:
        """Generate embedding vectors for a batch of texts.

        Splits the input into API calls of at most ``get_batch_size()`` texts.
        """
        if not texts:
            return []

        # The API rejects empty strings; fail before spending a request.
        empty = [index for index, text in enumerate(texts) if not text.strip()]
        if empty:
            raise EmbeddingError(
                message=f"Cannot embed empty text (input positions {empty[:5]})",
                provider_name=self.get_provider_name(),
            )

        try:
            all_embeddings: list[list[float]] = []
            for start in range(0, len(texts), self._batch_size):
                batch = texts[start : start + self._batch_size]
                response = await self._client.embeddings.create(
                    input=batch,
                    model=self._model,
                )
                if len(response.data) != len(batch):
                    raise EmbeddingError(
                        message=(
                            f"Expected {len(batch)} embeddings, API returned {len(response.data)}"
                        ),
                        provider_name=self.get_provider_name(),
                    )
                all_embeddings.extend(item.embedding for item in response.data)
                logger.info(
                    "openai_embedding_batch",
                    model=self._model,
                    provider=self._provider_label,
                    batch_size=len(batch),
                    tokens=response.usage.total_tokens if response.usage else None,
                )
            return all_embeddings
        except openai.APIError as exc:
            raise EmbeddingError(
                message=f"{self._provider_label} API error: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

    async def embed_one(self, text: str) -> list[float]:
        """Generate an embedding vector for a single text string."""
        result = await self.embed_many([text])
        return result[0]

    def get_dimension(self) -> int:
        return self._dimension

    def get_batch_size(self) -> int:
        return self._batch_size

    def get_provider_name(self) -> str:
        return self._provider_label

    def is_available(self) -> bool:
        """Return ``True`` if an API key is configured."""
        return bool(self._api_key)
