"""Cross-backend comparison harness.

Runs one query text against several (embedding provider, vector store)
pairings and collects each pairing's top-K results and search latency.
Pairings run one after another.  Each provider embeds the query at most
once per comparison; the timer wraps only the store's ``top_k_by_cosine``
call, so embedding cost never leaks into a store's latency.

A failing pairing (provider error, dimension mismatch, unreachable backend)
is recorded in its :class:`PairingResult` and the remaining pairings still
run.
"""

from __future__ import annotations

import time
from collections.abc import Sequence
from dataclasses import dataclass

import structlog

from semantic_news.interfaces.embedding_provider import IEmbeddingProvider
from semantic_news.interfaces.vector_store_provider import IVectorStoreProvider
from semantic_news.models.benchmark import ComparisonReport, PairingResult
from semantic_news.utils.errors import DimensionMismatchError

logger = structlog.get_logger(logger_name=__name__)


@dataclass(frozen=True)
class SearchPairing:
    """One (provider, store) combination shown as one result table."""

    label: str
    embedding_provider: IEmbeddingProvider
    vector_store: IVectorStoreProvider


class BenchmarkHarness:
    """Compares search results and latency across pairings."""

    def __init__(self, pairings: Sequence[SearchPairing], top_k: int = 10) -> None:
        if top_k <= 0:
            raise ValueError(f"top_k must be positive, got {top_k}")
        labels = [pairing.label for pairing in pairings]
        if len(set(labels)) != len(labels):
            raise ValueError(f"Pairing labels must be unique: {labels}")
        self._pairings = list(pairings)
        self._top_k = top_k

    @property
    def pairings(self) -> list[SearchPairing]:
        return list(self._pairings)

    async def compare(self, query_text: str) -> ComparisonReport:
        """Run *query_text* against every pairing in order."""
        report = ComparisonReport(query=query_text, top_k=self._top_k)
        # Query vectors keyed by provider name, valid for this query only.
        query_vectors: dict[str, list[float]] = {}

        for pairing in self._pairings:
            report.pairings.append(await self._run_pairing(pairing, query_text, query_vectors))

        logger.info(
            "comparison_complete",
            pairings=len(report.pairings),
            failed=len(report.failed),
        )
        return report

    async def _run_pairing(
        self,
        pairing: SearchPairing,
        query_text: str,
        query_vectors: dict[str, list[float]],
    ) -> PairingResult:
        provider = pairing.embedding_provider
        store = pairing.vector_store
        result = PairingResult(
            label=pairing.label,
            provider_name=provider.get_provider_name(),
            store_name=store.get_provider_name(),
            dimension=store.get_dimension(),
            exact=store.is_exact(),
        )

        try:
            if provider.get_dimension() != store.get_dimension():
                raise DimensionMismatchError(
                    expected=store.get_dimension(),
                    actual=provider.get_dimension(),
                    message=(
                        f"Pairing '{pairing.label}' combines a {provider.get_dimension()}-dimension "
                        f"provider with a {store.get_dimension()}-dimension store"
                    ),
                    provider_name=store.get_provider_name(),
                )

            provider_name = provider.get_provider_name()
            if provider_name not in query_vectors:
                query_vectors[provider_name] = await provider.embed_one(query_text)
            query_vector = query_vectors[provider_name]

            started = time.perf_counter()
            hits = await store.top_k_by_cosine(query_vector, self._top_k)
            result.elapsed_ms = (time.perf_counter() - started) * 1000.0
            result.results = hits
        except Exception as exc:
            result.error = str(exc)
            result.error_type = type(exc).__name__
            logger.warning(
                "pairing_failed",
                label=pairing.label,
                error_type=result.error_type,
                error=result.error,
            )
            return result

        logger.info(
            "pairing_complete",
            label=pairing.label,
            results=len(result.results),
            elapsed_ms=round(result.elapsed_ms, 3),
        )
        return result
