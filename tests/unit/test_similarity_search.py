"""Unit tests for exact cosine similarity search."""

from __future__ import annotations

import math

import pytest

from semantic_news.services.similarity_search import (
    ExactSearchEngine,
    cosine_similarity,
    find_closest,
)
from semantic_news.utils.errors import DegenerateVectorError, DimensionMismatchError


class TestCosineSimilarity:
    def test_identical_vectors_score_one(self) -> None:
        assert cosine_similarity([0.3, -1.2, 4.0], [0.3, -1.2, 4.0]) == pytest.approx(1.0)

    def test_scale_invariant(self) -> None:
        assert cosine_similarity([1.0, 2.0], [10.0, 20.0]) == pytest.approx(1.0)

    def test_orthogonal_vectors_score_zero(self) -> None:
        assert cosine_similarity([1.0, 0.0], [0.0, 5.0]) == pytest.approx(0.0)

    def test_opposite_vectors_score_minus_one(self) -> None:
        assert cosine_similarity([1.0, 1.0], [-2.0, -2.0]) == pytest.approx(-1.0)

    def test_known_angle(self) -> None:
        assert cosine_similarity([1.0, 0.0], [1.0, 1.0]) == pytest.approx(1 / math.sqrt(2))

    def test_result_clamped_to_unit_interval(self) -> None:
        vector = [1e-3, 1e-3, 1e-3]
        score = cosine_similarity(vector, vector)
        assert -1.0 <= score <= 1.0

    def test_zero_vector_is_degenerate(self) -> None:
        with pytest.raises(DegenerateVectorError):
            cosine_similarity([0.0, 0.0], [1.0, 0.0])

    def test_dimension_mismatch(self) -> None:
        with pytest.raises(DimensionMismatchError) as exc_info:
            cosine_similarity([1.0, 0.0, 0.0], [1.0, 0.0])
        assert exc_info.value.expected == 3
        assert exc_info.value.actual == 2

    def test_dimension_checked_before_norm(self) -> None:
        # A zero vector of the wrong length is a dimension error, not a degenerate one.
        with pytest.raises(DimensionMismatchError):
            cosine_similarity([1.0, 0.0], [0.0, 0.0, 0.0])


class TestExactSearchEngine:
    @pytest.fixture()
    def items(self) -> list[tuple[str, list[float]]]:
        return [
            ("east", [1.0, 0.0]),
            ("north", [0.0, 1.0]),
            ("north-east", [1.0, 1.0]),
            ("west", [-1.0, 0.0]),
        ]

    def test_returns_min_of_n_and_k(self, items) -> None:
        engine = ExactSearchEngine(items)
        assert len(engine.search([1.0, 0.0], 2)) == 2
        assert len(engine.search([1.0, 0.0], 10)) == 4

    def test_scores_non_increasing(self, items) -> None:
        results = ExactSearchEngine(items).search([0.9, 0.2], 4)
        scores = [score for score, _ in results]
        assert scores == sorted(scores, reverse=True)

    def test_best_match_first(self, items) -> None:
        results = ExactSearchEngine(items).search([0.8, 0.75], 1)
        assert results[0][1] == "north-east"

    def test_self_similarity_is_one(self, items) -> None:
        engine = ExactSearchEngine(items)
        for name, vector in items:
            score, best = engine.search(vector, 1)[0]
            assert best == name
            assert score == pytest.approx(1.0)

    def test_ties_keep_collection_order(self) -> None:
        items = [("first", [1.0, 0.0]), ("second", [2.0, 0.0]), ("third", [3.0, 0.0])]
        results = ExactSearchEngine(items).search([1.0, 0.0], 3)
        assert [name for _, name in results] == ["first", "second", "third"]

    def test_result_is_a_materialised_list(self, items) -> None:
        results = ExactSearchEngine(items).search([1.0, 0.0], 2)
        assert isinstance(results, list)

    def test_empty_collection_returns_empty(self) -> None:
        engine = ExactSearchEngine([], dimension=2)
        assert engine.search([1.0, 0.0], 5) == []
        assert len(engine) == 0

    def test_empty_collection_still_checks_dimension(self) -> None:
        engine = ExactSearchEngine([], dimension=2)
        with pytest.raises(DimensionMismatchError):
            engine.search([1.0, 0.0, 0.0], 5)

    def test_query_dimension_mismatch(self, items) -> None:
        with pytest.raises(DimensionMismatchError):
            ExactSearchEngine(items).search([1.0, 0.0, 0.0], 1)

    def test_mixed_dimensions_in_collection(self) -> None:
        with pytest.raises(DimensionMismatchError):
            ExactSearchEngine([("a", [1.0, 0.0]), ("b", [1.0, 0.0, 0.0])])

    def test_zero_norm_candidate(self) -> None:
        with pytest.raises(DegenerateVectorError):
            ExactSearchEngine([("a", [1.0, 0.0]), ("zero", [0.0, 0.0])])

    def test_zero_norm_query(self, items) -> None:
        with pytest.raises(DegenerateVectorError):
            ExactSearchEngine(items).search([0.0, 0.0], 1)

    def test_non_positive_k_rejected(self, items) -> None:
        with pytest.raises(ValueError):
            ExactSearchEngine(items).search([1.0, 0.0], 0)

    def test_dimension_property(self, items) -> None:
        assert ExactSearchEngine(items).dimension == 2


def test_find_closest_one_shot() -> None:
    results = find_closest(
        [0.0, 1.0],
        [("x", [1.0, 0.0]), ("y", [0.0, 3.0]), ("xy", [1.0, 1.0])],
        k=2,
    )
    assert [name for _, name in results] == ["y", "xy"]
    assert results[0][0] == pytest.approx(1.0)
    assert results[1][0] == pytest.approx(1 / math.sqrt(2))
