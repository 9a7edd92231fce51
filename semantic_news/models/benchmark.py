"""Result models for the cross-backend comparison harness."""

from __future__ import annotations

from dataclasses import dataclass, field

from semantic_news.models.news import SimilarityResult


@dataclass
class PairingResult:
    """Outcome of running one query against one (provider, store) pairing.

    Exactly one of ``results`` (possibly empty) or ``error`` is meaningful:
    a failed pairing keeps ``results == []`` and records the error text and
    exception class name instead of aborting the comparison.
    """

    label: str
    provider_name: str
    store_name: str
    dimension: int
    exact: bool
    results: list[SimilarityResult] = field(default_factory=list)
    elapsed_ms: float = 0.0
    error: str | None = None
    error_type: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def top(self) -> SimilarityResult | None:
        return self.results[0] if self.results else None


@dataclass
class ComparisonReport:
    """All pairing results for a single query text, in pairing order.

    Scores from pairings with different dimensions sit side by side here
    but are not comparable with each other.
    """

    query: str
    top_k: int
    pairings: list[PairingResult] = field(default_factory=list)

    @property
    def failed(self) -> list[PairingResult]:
        return [p for p in self.pairings if not p.ok]

    def by_label(self, label: str) -> PairingResult:
        for pairing in self.pairings:
            if pairing.label == label:
                return pairing
        raise KeyError(label)
