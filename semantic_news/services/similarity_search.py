"""Exact in-memory cosine similarity search.

Given a query vector and a collection of ``(item, vector)`` pairs of one
dimension, return the K highest-scoring items.

    similarity = dot(q, c) / (|q| * |c|)

The collection is normalised once into an ``N x D`` numpy matrix when the
engine is built, so each query costs one matrix-vector product (O(N*D))
plus a bounded top-K selection with :func:`heapq.nlargest` (O(N log K))
instead of a full sort.  ``nlargest`` is documented to match
``sorted(..., reverse=True)[:k]``, which keeps equal scores in collection
order.

A zero-norm vector has no direction, so cosine similarity is undefined for
it; such vectors raise :class:`DegenerateVectorError` rather than scoring 0.
Vectors of different dimensions raise :class:`DimensionMismatchError`
before any arithmetic happens.
"""

from __future__ import annotations

import heapq
from collections.abc import Sequence
from typing import Generic, TypeVar

import numpy as np

from semantic_news.utils.errors import DegenerateVectorError, DimensionMismatchError

T = TypeVar("T")


def _as_unit_vector(vector: Sequence[float], label: str) -> np.ndarray:
    array = np.asarray(vector, dtype=np.float64)
    norm = float(np.linalg.norm(array))
    if norm == 0.0:
        raise DegenerateVectorError(
            message=f"Cosine similarity is undefined for zero-norm {label}"
        )
    return array / norm


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Return the cosine similarity of two equal-length vectors, in [-1, 1]."""
    if len(a) != len(b):
        raise DimensionMismatchError(expected=len(a), actual=len(b))
    score = float(np.dot(_as_unit_vector(a, "vector a"), _as_unit_vector(b, "vector b")))
    return max(-1.0, min(1.0, score))


class ExactSearchEngine(Generic[T]):
    """Read-only exact top-K index over a fixed collection.

    Parameters
    ----------
    items:
        ``(item, vector)`` pairs.  All vectors must share one dimension.
    dimension:
        Expected dimension.  Required to validate queries against an empty
        collection; inferred from the first vector otherwise.
    """

    def __init__(
        self,
        items: Sequence[tuple[T, Sequence[float]]],
        dimension: int | None = None,
    ) -> None:
        if dimension is None and items:
            dimension = len(items[0][1])
        self._dimension = dimension
        self._items: list[T] = [item for item, _ in items]

        for position, (_, vector) in enumerate(items):
            if len(vector) != dimension:
                raise DimensionMismatchError(
                    expected=dimension,
                    actual=len(vector),
                    message=(
                        f"Candidate {position} has {len(vector)} dimensions; "
                        f"a ranking needs every vector to have {dimension}"
                    ),
                )

        if not items:
            self._unit_matrix = np.empty((0, dimension or 0), dtype=np.float64)
            return

        matrix = np.asarray([vector for _, vector in items], dtype=np.float64)
        norms = np.linalg.norm(matrix, axis=1)
        zero_rows = np.flatnonzero(norms == 0.0)
        if zero_rows.size:
            raise DegenerateVectorError(
                message=f"Candidate {int(zero_rows[0])} is a zero-norm vector"
            )
        self._unit_matrix = matrix / norms[:, np.newaxis]

    def __len__(self) -> int:
        return len(self._items)

    @property
    def dimension(self) -> int | None:
        return self._dimension

    def search(self, query: Sequence[float], k: int) -> list[tuple[float, T]]:
        """Return up to *k* ``(similarity, item)`` pairs, best first.

        Returns ``min(len(self), k)`` results; ties keep collection order.
        """
        if k <= 0:
            raise ValueError(f"k must be positive, got {k}")
        if self._dimension is not None and len(query) != self._dimension:
            raise DimensionMismatchError(expected=self._dimension, actual=len(query))

        unit_query = _as_unit_vector(query, "query vector")
        if not self._items:
            return []

        # Rounding can push |score| a hair past 1 for near-identical vectors.
        scores = np.clip(self._unit_matrix @ unit_query, -1.0, 1.0)
        best = heapq.nlargest(k, range(len(self._items)), key=scores.__getitem__)
        return [(float(scores[index]), self._items[index]) for index in best]


def find_closest(
    query: Sequence[float],
    candidates: Sequence[tuple[T, Sequence[float]]],
    k: int,
) -> list[tuple[float, T]]:
    """One-shot exact search over *candidates*; see :class:`ExactSearchEngine`."""
    return ExactSearchEngine(candidates).search(query, k)
