"""Custom exception hierarchy for semantic-news.

All application exceptions inherit from :class:`SemanticNewsError`, which
carries an optional ``provider_name`` so error handlers can identify which
embedding provider or storage backend (e.g. "openai_embedding",
"chromadb-local") caused the failure.

The hierarchy follows the failure kinds of the ingestion and search paths:

    SemanticNewsError  (base -- catch-all for any semantic-news error)
    +-- CorpusParseError        (malformed corpus line, aborts ingestion)
    +-- EmbeddingError          (provider unreachable or rejected input)
    +-- DimensionMismatchError  (vectors of different dimension compared)
    +-- DegenerateVectorError   (zero-norm vector passed to cosine similarity)
    +-- VectorStoreError        (backend unavailable or query failed)
    +-- ConfigurationError      (startup / invalid config)

None of these are retried automatically; callers decide whether to abort
(ingestion) or isolate the failure (benchmark harness).
"""


class SemanticNewsError(Exception):
    """Base exception for all semantic-news errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name``.  ``__str__`` prefixes the provider name in brackets,
    e.g. ``[pgvector-local] connection refused``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Ingestion errors
# ---------------------------------------------------------------------------

class CorpusParseError(SemanticNewsError):
    """Raised when a corpus line cannot be parsed into a news record."""

    def __init__(
        self,
        message: str = "Malformed corpus line",
        line_number: int | None = None,
        provider_name: str | None = None,
    ) -> None:
        self._line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message=message, provider_name=provider_name)

    @property
    def line_number(self) -> int | None:
        return self._line_number


class EmbeddingError(SemanticNewsError):
    """Raised when an embedding provider fails or rejects its input."""

    def __init__(
        self,
        message: str = "Embedding generation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Vector errors
# ---------------------------------------------------------------------------

class DimensionMismatchError(SemanticNewsError):
    """Raised when vectors of different dimensions would be compared.

    Always raised *before* any distance computation is attempted.
    """

    def __init__(
        self,
        expected: int,
        actual: int,
        message: str | None = None,
        provider_name: str | None = None,
    ) -> None:
        self._expected = expected
        self._actual = actual
        super().__init__(
            message=message or f"Dimension mismatch: expected {expected}, got {actual}",
            provider_name=provider_name,
        )

    @property
    def expected(self) -> int:
        return self._expected

    @property
    def actual(self) -> int:
        return self._actual


class DegenerateVectorError(SemanticNewsError):
    """Raised when a zero-norm vector is passed to cosine similarity."""

    def __init__(
        self,
        message: str = "Cosine similarity is undefined for a zero-norm vector",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Storage / configuration errors
# ---------------------------------------------------------------------------

class VectorStoreError(SemanticNewsError):
    """Raised when a storage backend is unreachable or a store operation fails."""

    def __init__(
        self,
        message: str = "Vector store operation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ConfigurationError(SemanticNewsError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
