"""Small helpers shared by every vector store for dimension checks and
float32 (de)serialisation of embedding vectors."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from semantic_news.utils.errors import DimensionMismatchError


def ensure_dimension(
    vector: Sequence[float],
    expected: int,
    provider_name: str | None = None,
) -> None:
    """Raise :class:`DimensionMismatchError` unless ``len(vector) == expected``."""
    actual = len(vector)
    if actual != expected:
        raise DimensionMismatchError(
            expected=expected,
            actual=actual,
            message=(
                f"Query vector has {actual} dimensions but the store holds "
                f"{expected}-dimension vectors"
            ),
            provider_name=provider_name,
        )


def vector_to_blob(vector: Sequence[float]) -> bytes:
    """Pack a vector as little-endian float32 bytes."""
    return np.asarray(vector, dtype="<f4").tobytes()


def blob_to_vector(blob: bytes) -> tuple[float, ...]:
    """Inverse of :func:`vector_to_blob`."""
    return tuple(np.frombuffer(blob, dtype="<f4").astype(float).tolist())
