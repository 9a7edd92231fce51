"""Orchestrator for corpus ingestion.

Pipeline stages: **read -> filter -> embed -> store**.

    1. CorpusReader -- parses JSON lines, keeps the allowed categories
    2. IEmbeddingProvider -- one call per record (local) or per chunk (remote)
    3. IVectorStoreProvider -- every target store that is still empty

Stores that already hold rows are skipped rather than upserted, so running
the same ingestion twice leaves every store unchanged.  All embedding work
finishes before the first write: a provider failure leaves every store
exactly as it was.
"""

from __future__ import annotations

import time
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from semantic_news.models.news import EmbeddedRecord, IngestionResult, NewsRecord
from semantic_news.services.ingestion.corpus_reader import CorpusReader
from semantic_news.utils.errors import DimensionMismatchError, EmbeddingError

if TYPE_CHECKING:
    from semantic_news.config.settings import Settings
    from semantic_news.interfaces.embedding_provider import IEmbeddingProvider
    from semantic_news.interfaces.vector_store_provider import IVectorStoreProvider

logger = structlog.get_logger(logger_name=__name__)


class IngestionService:
    """Embeds a news corpus with one provider and writes it to its stores.

    Parameters
    ----------
    settings:
        Supplies the default category filter, the store write batch size
        and the progress logging interval.
    embedding_provider:
        Produces one vector per retained record.
    vector_stores:
        Target stores; each must declare the provider's dimension.
    """

    def __init__(
        self,
        settings: Settings,
        embedding_provider: IEmbeddingProvider,
        vector_stores: Sequence[IVectorStoreProvider],
    ) -> None:
        self._settings = settings
        self._embedding_provider = embedding_provider
        self._vector_stores = list(vector_stores)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def ingest(
        self,
        corpus_lines: Iterable[str],
        allowed_categories: Iterable[str] | None = None,
    ) -> IngestionResult:
        """Run the full pipeline over *corpus_lines*.

        Raises
        ------
        DimensionMismatchError
            If a target store's dimension differs from the provider's.
        CorpusParseError
            On the first malformed line; nothing is written.
        EmbeddingError
            If the provider fails; nothing is written.
        """
        start = time.monotonic()
        provider_name = self._embedding_provider.get_provider_name()
        self._check_dimensions()

        pending, skipped = await self._partition_stores()
        if not pending:
            logger.info(
                "ingestion_skipped_all_stores_populated",
                provider=provider_name,
                stores=skipped,
            )
            return IngestionResult(
                provider_name=provider_name,
                stores_skipped=skipped,
                elapsed_seconds=time.monotonic() - start,
            )

        if allowed_categories is None:
            allowed_categories = self._settings.allowed_categories
        reader = CorpusReader(allowed_categories)
        records = list(reader.read(corpus_lines))
        logger.info(
            "corpus_loaded",
            lines_read=reader.lines_read,
            records_retained=reader.records_retained,
        )

        embedded = await self._embed_records(records)

        for store in pending:
            await self._write_store(store, embedded)

        elapsed = time.monotonic() - start
        logger.info(
            "ingestion_complete",
            provider=provider_name,
            records=len(embedded),
            stores_written=[store.get_provider_name() for store in pending],
            stores_skipped=skipped,
            elapsed_seconds=round(elapsed, 2),
        )
        return IngestionResult(
            provider_name=provider_name,
            records=embedded,
            lines_read=reader.lines_read,
            records_retained=reader.records_retained,
            stores_written=[store.get_provider_name() for store in pending],
            stores_skipped=skipped,
            elapsed_seconds=elapsed,
        )

    async def ingest_file(
        self,
        path: str | Path,
        allowed_categories: Iterable[str] | None = None,
    ) -> IngestionResult:
        """Ingest a JSON-lines corpus file."""
        path = Path(path)
        logger.info("ingest_file_start", path=str(path))
        with path.open(encoding="utf-8") as handle:
            return await self.ingest(handle, allowed_categories)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _check_dimensions(self) -> None:
        expected = self._embedding_provider.get_dimension()
        for store in self._vector_stores:
            if store.get_dimension() != expected:
                raise DimensionMismatchError(
                    expected=store.get_dimension(),
                    actual=expected,
                    message=(
                        f"Provider '{self._embedding_provider.get_provider_name()}' produces "
                        f"{expected}-dimension vectors but store "
                        f"'{store.get_provider_name()}' holds {store.get_dimension()}"
                    ),
                    provider_name=store.get_provider_name(),
                )

    async def _partition_stores(
        self,
    ) -> tuple[list[IVectorStoreProvider], list[str]]:
        pending: list[IVectorStoreProvider] = []
        skipped: list[str] = []
        for store in self._vector_stores:
            existing = await store.count()
            if existing > 0:
                logger.info(
                    "store_skipped_non_empty",
                    store=store.get_provider_name(),
                    existing=existing,
                )
                skipped.append(store.get_provider_name())
            else:
                pending.append(store)
        return pending, skipped

    async def _embed_records(self, records: list[NewsRecord]) -> list[EmbeddedRecord]:
        provider = self._embedding_provider
        batch_size = provider.get_batch_size()
        dimension = provider.get_dimension()
        provider_name = provider.get_provider_name()
        interval = self._settings.progress_interval

        # Remote batch endpoints reject empty input.
        if batch_size > 1:
            kept = [record for record in records if record.headline.strip()]
            if len(kept) != len(records):
                logger.warning(
                    "empty_headlines_skipped",
                    provider=provider_name,
                    skipped=len(records) - len(kept),
                )
            records = kept

        embedded: list[EmbeddedRecord] = []
        for start in range(0, len(records), batch_size):
            chunk = records[start : start + batch_size]
            vectors = await provider.embed_many([record.headline for record in chunk])
            if len(vectors) != len(chunk):
                raise EmbeddingError(
                    message=f"Expected {len(chunk)} vectors, provider returned {len(vectors)}",
                    provider_name=provider_name,
                )
            for record, vector in zip(chunk, vectors, strict=True):
                if len(vector) != dimension:
                    raise DimensionMismatchError(
                        expected=dimension,
                        actual=len(vector),
                        message=(
                            f"Provider returned a {len(vector)}-dimension vector "
                            f"but declares {dimension}"
                        ),
                        provider_name=provider_name,
                    )
                embedded.append(
                    EmbeddedRecord(record=record, vector=tuple(vector), provider=provider_name)
                )
                if len(embedded) % interval == 0:
                    logger.info("ingestion_progress", provider=provider_name, embedded=len(embedded))
        return embedded

    async def _write_store(
        self,
        store: IVectorStoreProvider,
        embedded: list[EmbeddedRecord],
    ) -> int:
        batch_size = self._settings.write_batch_size
        written = 0
        for start in range(0, len(embedded), batch_size):
            written += await store.insert_batch(embedded[start : start + batch_size])
        logger.info("store_written", store=store.get_provider_name(), count=written)
        return written
