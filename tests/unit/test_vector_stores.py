"""Unit tests for the in-memory, SQLite and ChromaDB vector stores.

SQLite and ChromaDB run for real against ``tmp_path``.  The pgvector store
is only exercised up to the point where it would open a connection.
"""

from __future__ import annotations

from datetime import date
from pathlib import Path
from unittest.mock import patch

import pytest

from conftest import make_embedded, make_record
from semantic_news.models.news import EmbeddedRecord
from semantic_news.providers.vector_store.chromadb_provider import ChromaDBVectorStore
from semantic_news.providers.vector_store.memory_provider import InMemoryVectorStore
from semantic_news.providers.vector_store.pgvector_provider import PgVectorStore, build_news_table
from semantic_news.providers.vector_store.sqlite_provider import SQLiteVectorStore
from semantic_news.utils.errors import DimensionMismatchError

_DIM = 4


def _records() -> list[EmbeddedRecord]:
    return [
        make_embedded("Markets rally on rate cut", [1.0, 0.0, 0.0, 0.0], category="POLITICS"),
        make_embedded("Rover finds water ice", [0.0, 1.0, 0.0, 0.0]),
        make_embedded("Chip maker beats forecasts", [0.0, 0.0, 1.0, 0.0], category="TECH"),
        make_embedded("Island hopping on a budget", [0.6, 0.8, 0.0, 0.0], category="TRAVEL"),
    ]


@pytest.fixture(params=["memory", "sqlite", "chromadb"])
def store(request, tmp_path: Path):
    if request.param == "memory":
        return InMemoryVectorStore(_DIM)
    if request.param == "sqlite":
        return SQLiteVectorStore(_DIM, db_path=tmp_path / "news.db", name="sqlite-test")
    return ChromaDBVectorStore(
        _DIM,
        persist_directory=str(tmp_path / "chroma"),
        collection_name="news_test",
        name="chromadb-test",
    )


class TestStoreContract:
    @pytest.mark.asyncio
    async def test_empty_store(self, store) -> None:
        assert await store.count() == 0
        assert await store.load_all() == []
        assert await store.top_k_by_cosine([1.0, 0.0, 0.0, 0.0], 3) == []

    @pytest.mark.asyncio
    async def test_insert_and_count(self, store) -> None:
        assert await store.insert_batch(_records()) == 4
        assert await store.count() == 4

    @pytest.mark.asyncio
    async def test_insert_empty_batch(self, store) -> None:
        assert await store.insert_batch([]) == 0
        assert await store.count() == 0

    @pytest.mark.asyncio
    async def test_backend_assigns_sequential_ids(self, store) -> None:
        await store.insert_batch(_records()[:2])
        await store.insert_batch(_records()[2:])
        loaded = await store.load_all()
        assert [embedded.record.id for embedded in loaded] == [1, 2, 3, 4]

    @pytest.mark.asyncio
    async def test_load_all_round_trips_fields(self, store) -> None:
        await store.insert_batch(_records())
        loaded = await store.load_all()

        first = loaded[0]
        assert first.record.headline == "Markets rally on rate cut"
        assert first.record.category == "POLITICS"
        assert first.record.authors == "Staff Writer"
        assert first.record.date == date(2022, 9, 23)
        assert first.vector == pytest.approx((1.0, 0.0, 0.0, 0.0))

    @pytest.mark.asyncio
    async def test_top_k_ranking(self, store) -> None:
        await store.insert_batch(_records())

        results = await store.top_k_by_cosine([0.0, 1.0, 0.0, 0.0], 2)

        assert [r.record.headline for r in results] == [
            "Rover finds water ice",
            "Island hopping on a budget",
        ]
        assert results[0].score == pytest.approx(1.0, abs=1e-4)
        assert results[1].score == pytest.approx(0.8, abs=1e-4)
        assert results[0].distance == pytest.approx(0.0, abs=1e-4)

    @pytest.mark.asyncio
    async def test_k_larger_than_store(self, store) -> None:
        await store.insert_batch(_records())
        results = await store.top_k_by_cosine([1.0, 1.0, 1.0, 0.0], 50)
        assert len(results) == 4
        scores = [r.score for r in results]
        assert scores == sorted(scores, reverse=True)

    @pytest.mark.asyncio
    async def test_query_dimension_mismatch(self, store) -> None:
        await store.insert_batch(_records())
        with pytest.raises(DimensionMismatchError):
            await store.top_k_by_cosine([1.0, 0.0], 3)

    @pytest.mark.asyncio
    async def test_insert_dimension_mismatch(self, store) -> None:
        with pytest.raises(DimensionMismatchError):
            await store.insert_batch([make_embedded("Wrong size", [1.0, 0.0])])
        assert await store.count() == 0

    def test_reports_dimension(self, store) -> None:
        assert store.get_dimension() == _DIM
        assert store.is_available() is True


class TestInMemoryVectorStore:
    def test_is_exact(self) -> None:
        assert InMemoryVectorStore(_DIM).is_exact() is True

    def test_rejects_non_positive_dimension(self) -> None:
        with pytest.raises(ValueError):
            InMemoryVectorStore(0)

    @pytest.mark.asyncio
    async def test_from_records_keeps_ids(self) -> None:
        source = InMemoryVectorStore(_DIM)
        await source.insert_batch(_records())
        snapshot = InMemoryVectorStore.from_records(await source.load_all(), dimension=_DIM)

        assert await snapshot.count() == 4
        await snapshot.insert_batch([make_embedded("Late addition", [0.0, 0.0, 0.0, 1.0])])
        loaded = await snapshot.load_all()
        assert [embedded.record.id for embedded in loaded] == [1, 2, 3, 4, 5]

    def test_from_records_rejects_mixed_dimensions(self) -> None:
        with pytest.raises(DimensionMismatchError):
            InMemoryVectorStore.from_records(
                [make_embedded("Too long", [1.0, 0.0, 0.0, 0.0, 0.0])], dimension=_DIM
            )

    @pytest.mark.asyncio
    async def test_insert_after_query_is_searchable(self) -> None:
        store = InMemoryVectorStore(_DIM)
        await store.insert_batch(_records()[:1])
        await store.top_k_by_cosine([1.0, 0.0, 0.0, 0.0], 1)
        await store.insert_batch([make_embedded("Fresh", [0.0, 0.0, 0.0, 1.0])])

        results = await store.top_k_by_cosine([0.0, 0.0, 0.0, 1.0], 1)
        assert results[0].record.headline == "Fresh"

    @pytest.mark.asyncio
    async def test_ties_keep_insertion_order(self) -> None:
        store = InMemoryVectorStore(2)
        await store.insert_batch(
            [
                make_embedded("one", [1.0, 0.0]),
                make_embedded("two", [2.0, 0.0]),
                make_embedded("three", [0.0, 1.0]),
            ]
        )
        results = await store.top_k_by_cosine([1.0, 0.0], 2)
        assert [r.record.headline for r in results] == ["one", "two"]


class TestSQLiteVectorStore:
    def test_is_exact(self, tmp_path: Path) -> None:
        assert SQLiteVectorStore(_DIM, db_path=tmp_path / "n.db").is_exact() is True

    def test_rejects_unsafe_table_name(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError):
            SQLiteVectorStore(_DIM, db_path=tmp_path / "n.db", table="news; DROP TABLE x")

    @pytest.mark.asyncio
    async def test_data_persists_across_instances(self, tmp_path: Path) -> None:
        db_path = tmp_path / "news.db"
        await SQLiteVectorStore(_DIM, db_path=db_path).insert_batch(_records())

        reopened = SQLiteVectorStore(_DIM, db_path=db_path)
        assert await reopened.count() == 4

    @pytest.mark.asyncio
    async def test_reopening_with_other_dimension_fails(self, tmp_path: Path) -> None:
        db_path = tmp_path / "news.db"
        await SQLiteVectorStore(_DIM, db_path=db_path).insert_batch(_records())

        with pytest.raises(DimensionMismatchError):
            await SQLiteVectorStore(8, db_path=db_path).count()

    @pytest.mark.asyncio
    async def test_vectors_stored_as_float32(self, tmp_path: Path) -> None:
        store = SQLiteVectorStore(3, db_path=tmp_path / "news.db")
        await store.insert_batch([make_embedded("Precise", [0.1, 0.2, 0.3])])
        loaded = await store.load_all()
        assert loaded[0].vector == pytest.approx((0.1, 0.2, 0.3), rel=1e-6)


class TestChromaDBVectorStore:
    def test_is_not_exact(self, tmp_path: Path) -> None:
        store = ChromaDBVectorStore(_DIM, persist_directory=str(tmp_path / "chroma"))
        assert store.is_exact() is False
        assert store.get_provider_name() == "chromadb"

    @pytest.mark.asyncio
    async def test_reopening_with_other_dimension_fails(self, tmp_path: Path) -> None:
        directory = str(tmp_path / "chroma")
        await ChromaDBVectorStore(_DIM, persist_directory=directory).insert_batch(_records())

        reopened = ChromaDBVectorStore(8, persist_directory=directory)
        with pytest.raises(DimensionMismatchError):
            await reopened.count()
        assert reopened.is_available() is False

    def test_construction_does_not_open_collection(self, tmp_path: Path) -> None:
        directory = tmp_path / "chroma"
        ChromaDBVectorStore(_DIM, persist_directory=str(directory))
        assert not directory.exists()

    @pytest.mark.asyncio
    async def test_separate_collections_per_dimension(self, tmp_path: Path) -> None:
        directory = str(tmp_path / "chroma")
        small = ChromaDBVectorStore(_DIM, persist_directory=directory, collection_name="small")
        large = ChromaDBVectorStore(8, persist_directory=directory, collection_name="large")
        await small.insert_batch(_records())

        assert await small.count() == 4
        assert await large.count() == 0

    def test_metadata_round_trip(self) -> None:
        record = make_record("Headline", category="TECH")
        meta = ChromaDBVectorStore._record_to_metadata(record)
        restored = ChromaDBVectorStore._metadata_to_record("12", meta, "Headline")
        assert restored.id == 12
        assert restored.category == "TECH"
        assert restored.date == record.date


class TestPgVectorStore:
    def test_table_schema(self) -> None:
        from sqlalchemy import MetaData

        table = build_news_table(MetaData(), "news_items", 384)
        assert table.c.link.type.length == 400
        assert table.c.category.type.length == 30
        assert table.c.short_description.type.length == 4000
        assert table.c.embedding_vector.type.dim == 384
        index = next(iter(table.indexes))
        assert index.dialect_options["postgresql"]["using"] == "hnsw"
        assert index.dialect_options["postgresql"]["ops"] == {"embedding_vector": "vector_cosine_ops"}

    def test_requires_database_url(self) -> None:
        with pytest.raises(ValueError):
            PgVectorStore(384, database_url="")

    def test_construction_does_not_connect(self) -> None:
        with patch(
            "semantic_news.providers.vector_store.pgvector_provider.create_engine"
        ) as create_engine:
            store = PgVectorStore(384, database_url="postgresql+psycopg2://u:p@localhost/db")
        create_engine.assert_not_called()
        assert store.is_exact() is False
        assert store.get_dimension() == 384

    def test_connections_are_not_pooled(self) -> None:
        from sqlalchemy.pool import NullPool

        store = PgVectorStore(4, database_url="postgresql+psycopg2://u:p@localhost:1/db")
        engine = store._get_engine()
        assert isinstance(engine.pool, NullPool)
        engine.dispose()

    @pytest.mark.asyncio
    async def test_query_dimension_checked_before_connecting(self) -> None:
        with patch(
            "semantic_news.providers.vector_store.pgvector_provider.create_engine"
        ) as create_engine:
            store = PgVectorStore(384, database_url="postgresql+psycopg2://u:p@localhost/db")
            with pytest.raises(DimensionMismatchError):
                await store.top_k_by_cosine([0.1] * 1536, 10)
        create_engine.assert_not_called()

    @pytest.mark.asyncio
    async def test_insert_dimension_checked_before_connecting(self) -> None:
        with patch(
            "semantic_news.providers.vector_store.pgvector_provider.create_engine"
        ) as create_engine:
            store = PgVectorStore(384, database_url="postgresql+psycopg2://u:p@localhost/db")
            with pytest.raises(DimensionMismatchError):
                await store.insert_batch([make_embedded("Wrong", [0.1] * 1536)])
        create_engine.assert_not_called()
