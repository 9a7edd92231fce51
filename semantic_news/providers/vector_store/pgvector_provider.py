"""PostgreSQL + pgvector vector store.

The table mirrors the corpus schema with a ``vector(N)`` column and an HNSW
index built with ``vector_cosine_ops``, so ``ORDER BY embedding <=> query``
is served by the index (approximate).  SQLAlchemy and psycopg2 are
synchronous; every operation runs in a worker thread via
:func:`asyncio.to_thread` and opens its own connection, which is closed
when the operation ends (``NullPool``: nothing is held between queries).
The engine is created lazily, so building the store never connects.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
from typing import TypeVar

import structlog
from pgvector.sqlalchemy import Vector
from sqlalchemy import (
    Column,
    Date,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    create_engine,
    func,
    insert,
    select,
    text,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import NullPool

from semantic_news.interfaces.vector_store_provider import IVectorStoreProvider
from semantic_news.models.news import (
    AUTHORS_MAX_LENGTH,
    CATEGORY_MAX_LENGTH,
    HEADLINE_MAX_LENGTH,
    LINK_MAX_LENGTH,
    SHORT_DESCRIPTION_MAX_LENGTH,
    EmbeddedRecord,
    NewsRecord,
    SimilarityResult,
)
from semantic_news.utils.errors import DimensionMismatchError, SemanticNewsError, VectorStoreError
from semantic_news.utils.vectors import ensure_dimension

logger = structlog.get_logger(logger_name=__name__)

T = TypeVar("T")

_DEFAULT_TABLE = "news_items"
_VECTOR_COLUMN = "embedding_vector"


def build_news_table(metadata: MetaData, table_name: str, dimension: int) -> Table:
    """Return the news table definition with a ``vector(dimension)`` column."""
    return Table(
        table_name,
        metadata,
        Column("id", Integer, primary_key=True, autoincrement=True),
        Column("link", String(LINK_MAX_LENGTH), nullable=False),
        Column("headline", String(HEADLINE_MAX_LENGTH), nullable=False),
        Column("category", String(CATEGORY_MAX_LENGTH), nullable=False),
        Column("short_description", String(SHORT_DESCRIPTION_MAX_LENGTH), nullable=False),
        Column("authors", String(AUTHORS_MAX_LENGTH), nullable=False),
        Column("date", Date, nullable=False),
        Column(_VECTOR_COLUMN, Vector(dimension), nullable=False),
        Index(
            f"ix_{table_name}_{_VECTOR_COLUMN}_hnsw",
            _VECTOR_COLUMN,
            postgresql_using="hnsw",
            postgresql_with={"m": 16, "ef_construction": 64},
            postgresql_ops={_VECTOR_COLUMN: "vector_cosine_ops"},
        ),
    )


class PgVectorStore(IVectorStoreProvider):
    """Vector store backed by a PostgreSQL table with an HNSW cosine index."""

    def __init__(
        self,
        dimension: int,
        database_url: str,
        table: str = _DEFAULT_TABLE,
        name: str = "pgvector",
    ) -> None:
        if not database_url:
            raise ValueError("database_url is required for a pgvector store")
        self._dimension = dimension
        self._database_url = database_url
        self._name = name
        self._metadata = MetaData()
        self._table = build_news_table(self._metadata, table, dimension)
        self._engine: Engine | None = None
        self._initialized = False

    @property
    def table(self) -> Table:
        return self._table

    def _get_engine(self) -> Engine:
        if self._engine is None:
            self._engine = create_engine(self._database_url, poolclass=NullPool)
        return self._engine

    # ------------------------------------------------------------------
    # Schema
    # ------------------------------------------------------------------

    def _initialize_sync(self) -> None:
        engine = self._get_engine()
        with engine.begin() as conn:
            conn.execute(text("CREATE EXTENSION IF NOT EXISTS vector"))
            self._metadata.create_all(conn)
            # pgvector stores the declared dimension as the column's typmod.
            stored_dim = conn.execute(
                text(
                    "SELECT atttypmod FROM pg_attribute "
                    "WHERE attrelid = to_regclass(:table) AND attname = :column"
                ),
                {"table": self._table.name, "column": _VECTOR_COLUMN},
            ).scalar()
        if stored_dim is not None and stored_dim > 0 and stored_dim != self._dimension:
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
                    f"Table '{self._table.name}' declares vector({stored_dim}) "
                    f"but the store is configured for {self._dimension}"
                ),
                provider_name=self._name,
            )

    async def initialize(self) -> None:
        """Create the extension, table and HNSW index if they do not exist."""
        if self._initialized:
            return
        await self._run(self._initialize_sync, "initialization")
        self._initialized = True
        logger.info("pgvector_store_initialized", store=self._name, table=self._table.name)

    async def _run(self, operation: Callable[[], T], action: str) -> T:
        try:
            return await asyncio.to_thread(operation)
        except SemanticNewsError:
            raise
        except SQLAlchemyError as exc:
            raise VectorStoreError(
                message=f"PostgreSQL {action} failed: {exc}",
                provider_name=self._name,
            ) from exc

    # ------------------------------------------------------------------
    # IVectorStoreProvider implementation
    # ------------------------------------------------------------------

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
            {
                "link": embedded.record.link,
                "headline": embedded.record.headline,
                "category": embedded.record.category,
                "short_description": embedded.record.short_description,
                "authors": embedded.record.authors,
                "date": embedded.record.date,
                _VECTOR_COLUMN: list(embedded.vector),
            }
            for embedded in records
        ]

        def _insert() -> None:
            with self._get_engine().begin() as conn:
                conn.execute(insert(self._table), rows)

        await self._run(_insert, "insert")
        logger.info("pgvector_insert_batch", store=self._name, count=len(rows))
        return len(rows)

    async def count(self) -> int:
        await self.initialize()

        def _count() -> int:
            with self._get_engine().connect() as conn:
                return int(conn.execute(select(func.count()).select_from(self._table)).scalar_one())

        return await self._run(_count, "count")

    async def top_k_by_cosine(
        self,
        query_vector: Sequence[float],
        k: int,
    ) -> list[SimilarityResult]:
        """Rank by the ``<=>`` cosine distance operator; similarity is ``1 - distance``."""
        if k <= 0:
            raise ValueError(f"k must be positive, got {k}")
        ensure_dimension(query_vector, self._dimension, provider_name=self._name)
        await self.initialize()

        distance = self._table.c[_VECTOR_COLUMN].cosine_distance(list(query_vector)).label("distance")
        stmt = (
            select(*self._record_columns(), distance)
            .order_by(distance)
            .limit(k)
        )

        def _query() -> list[SimilarityResult]:
            with self._get_engine().connect() as conn:
                rows = conn.execute(stmt).mappings().all()
            return [
                SimilarityResult(
                    score=max(-1.0, min(1.0, 1.0 - float(row["distance"]))),
                    record=self._row_to_record(row),
                )
                for row in rows
            ]

        return await self._run(_query, "query")

    async def load_all(self) -> list[EmbeddedRecord]:
        await self.initialize()
        stmt = select(*self._record_columns(), self._table.c[_VECTOR_COLUMN]).order_by(
            self._table.c.id
        )

        def _load() -> list[EmbeddedRecord]:
            with self._get_engine().connect() as conn:
                rows = conn.execute(stmt).mappings().all()
            return [
                EmbeddedRecord(
                    record=self._row_to_record(row),
                    vector=tuple(float(value) for value in row[_VECTOR_COLUMN]),
                )
                for row in rows
            ]

        return await self._run(_load, "read")

    def get_dimension(self) -> int:
        return self._dimension

    def is_exact(self) -> bool:
        return False

    def get_provider_name(self) -> str:
        return self._name

    def is_available(self) -> bool:
        """Return ``True`` if a connection to the database can be opened."""
        try:
            with self._get_engine().connect():
                return True
        except SQLAlchemyError:
            return False

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _record_columns(self) -> list[Column]:
        columns = self._table.c
        return [
            columns.id,
            columns.link,
            columns.headline,
            columns.category,
            columns.short_description,
            columns.authors,
            columns.date,
        ]

    @staticmethod
    def _row_to_record(row) -> NewsRecord:
        return NewsRecord(
            id=row["id"],
            link=row["link"],
            headline=row["headline"],
            category=row["category"],
            short_description=row["short_description"],
            authors=row["authors"],
            date=row["date"],
        )
