"""SQLite-backed vector store.

Persists news records and their embeddings to a local SQLite database
(``data/news.db`` by default).  Uses ``aiosqlite`` for async I/O.  Vectors
are stored as little-endian float32 BLOBs; SQLite has no vector index, so
queries load every row and rank them with an exact linear scan.  This
store is also the usual source of the in-memory snapshot.
"""

from __future__ import annotations

import datetime
from collections.abc import Sequence
from pathlib import Path

import aiosqlite
import structlog

from semantic_news.interfaces.vector_store_provider import IVectorStoreProvider
from semantic_news.models.news import EmbeddedRecord, NewsRecord, SimilarityResult
from semantic_news.services.similarity_search import ExactSearchEngine
from semantic_news.utils.errors import DimensionMismatchError, VectorStoreError
from semantic_news.utils.vectors import blob_to_vector, ensure_dimension, vector_to_blob

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DB_PATH = Path("data/news.db")
_DEFAULT_TABLE = "news_items"

_CREATE_TABLE_SQL = """\
CREATE TABLE IF NOT EXISTS {table} (
    id                INTEGER PRIMARY KEY AUTOINCREMENT,
    link              TEXT    NOT NULL,
    headline          TEXT    NOT NULL,
    category          TEXT    NOT NULL,
    short_description TEXT    NOT NULL DEFAULT '',
    authors           TEXT    NOT NULL DEFAULT '',
    date              TEXT    NOT NULL,
    embedding         BLOB    NOT NULL
);
"""

_INSERT_SQL = """\
INSERT INTO {table} (link, headline, category, short_description, authors, date, embedding)
VALUES (?, ?, ?, ?, ?, ?, ?);
"""

_SELECT_ALL_SQL = """\
SELECT id, link, headline, category, short_description, authors, date, embedding
FROM {table}
ORDER BY id;
"""


class SQLiteVectorStore(IVectorStoreProvider):
    """Exact, persistent store: one row per record, vector as a float32 BLOB."""

    def __init__(
        self,
        dimension: int,
        db_path: str | Path = _DEFAULT_DB_PATH,
        table: str = _DEFAULT_TABLE,
        name: str = "sqlite",
    ) -> None:
        if not table.isidentifier():
            raise ValueError(f"Invalid table name: {table!r}")
        self._dimension = dimension
        self._db_path = Path(db_path)
        self._table = table
        self._name = name
        self._initialized = False

    async def initialize(self) -> None:
        """Create the table if needed and check any stored vector's dimension."""
        if self._initialized:
            return
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                await db.execute(_CREATE_TABLE_SQL.format(table=self._table))
                await db.commit()
                cursor = await db.execute(
                    f"SELECT length(embedding) FROM {self._table} LIMIT 1"
                )
                row = await cursor.fetchone()
        except aiosqlite.Error as exc:
            raise VectorStoreError(
                message=f"SQLite initialization failed for {self._db_path}: {exc}",
                provider_name=self._name,
            ) from exc

        if row is not None:
            stored_dim = row[0] // 4
            if stored_dim != self._dimension:
                logger.error(
                    "embedding_dimension_mismatch",
                    store=self._name,
                    stored_dim=stored_dim,
                    expected_dim=self._dimension,
                )
                raise DimensionMismatchError(
                    expected=self._dimension,
                    actual=stored_dim,
                    message=(
                        f"Table '{self._table}' holds {stored_dim}-dimension vectors "
                        f"but the store is configured for {self._dimension}"
                    ),
                    provider_name=self._name,
                )
        self._initialized = True
        logger.info("sqlite_store_initialized", store=self._name, path=str(self._db_path))

    async def insert_batch(self, records: list[EmbeddedRecord]) -> int:
        if not records:
            return 0
        for embedded in records:
            if embedded.dimension != self._dimension:
                raise DimensionMismatchError(
                    expected=self._dimension,
                    actual=embedded.dimension,
                    provider_name=self._name,
                )
        await self.initialize()

        rows = [
            (
                embedded.record.link,
                embedded.record.headline,
                embedded.record.category,
                embedded.record.short_description,
                embedded.record.authors,
                embedded.record.date.isoformat(),
                vector_to_blob(embedded.vector),
            )
            for embedded in records
        ]
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                await db.executemany(_INSERT_SQL.format(table=self._table), rows)
                await db.commit()
        except aiosqlite.Error as exc:
            raise VectorStoreError(
                message=f"SQLite insert failed: {exc}",
                provider_name=self._name,
            ) from exc

        logger.info("sqlite_insert_batch", store=self._name, count=len(rows))
        return len(rows)

    async def count(self) -> int:
        await self.initialize()
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                cursor = await db.execute(f"SELECT COUNT(*) FROM {self._table}")
                row = await cursor.fetchone()
        except aiosqlite.Error as exc:
            raise VectorStoreError(
                message=f"SQLite count failed: {exc}",
                provider_name=self._name,
            ) from exc
        return int(row[0])

    async def top_k_by_cosine(
        self,
        query_vector: Sequence[float],
        k: int,
    ) -> list[SimilarityResult]:
        ensure_dimension(query_vector, self._dimension, provider_name=self._name)
        stored = await self.load_all()
        engine = ExactSearchEngine(
            [(embedded.record, embedded.vector) for embedded in stored],
            dimension=self._dimension,
        )
        return [
            SimilarityResult(score=score, record=record)
            for score, record in engine.search(query_vector, k)
        ]

    async def load_all(self) -> list[EmbeddedRecord]:
        await self.initialize()
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                db.row_factory = aiosqlite.Row
                cursor = await db.execute(_SELECT_ALL_SQL.format(table=self._table))
                rows = await cursor.fetchall()
        except aiosqlite.Error as exc:
            raise VectorStoreError(
                message=f"SQLite read failed: {exc}",
                provider_name=self._name,
            ) from exc
        return [self._row_to_record(row) for row in rows]

    def get_dimension(self) -> int:
        return self._dimension

    def is_exact(self) -> bool:
        return True

    def get_provider_name(self) -> str:
        return self._name

    def is_available(self) -> bool:
        """Return ``False`` if the database path is unusable as a file."""
        return not self._db_path.is_dir() and not self._db_path.parent.is_file()

    def _row_to_record(self, row: aiosqlite.Row) -> EmbeddedRecord:
        record = NewsRecord(
            id=row["id"],
            link=row["link"],
            headline=row["headline"],
            category=row["category"],
            short_description=row["short_description"],
            authors=row["authors"],
            date=datetime.date.fromisoformat(row["date"]),
        )
        return EmbeddedRecord(record=record, vector=blob_to_vector(row["embedding"]))
