"""Unit tests for SQLiteVectorStore."""

import sqlite3

import pytest

from ragvault.adapters.outbound.sqlite_vector_store import SQLiteVectorStore
from ragvault.core.domain.exceptions import EmbeddingDimensionError, VectorStoreWriteError

pytestmark = pytest.mark.unit


def test_init_db(tmp_path):
    """Schema is created with WAL journaling."""
    db_file = tmp_path / "vectors.db"
    SQLiteVectorStore(db_file)

    with sqlite3.connect(db_file) as conn:
        table = conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name='chunks'"
        ).fetchone()
        mode = conn.execute("PRAGMA journal_mode").fetchone()[0]

    assert table == ("chunks",)
    assert mode.lower() == "wal"


async def test_search_returns_best_match_first(vector_store, chunk_factory):
    """[1,0] and [0,1] chunks: a [1,0] query ranks the first chunk on top."""
    await vector_store.add_vectors(
        [chunk_factory("doc", 0, (1.0, 0.0)), chunk_factory("doc", 1, (0.0, 1.0))]
    )

    top = await vector_store.search([1.0, 0.0], 1)
    both = await vector_store.search([1.0, 0.0], 10)

    assert len(top) == 1
    assert top[0].chunk.id == "doc:00000"
    assert top[0].score == pytest.approx(1.0)
    assert [r.chunk.chunk_index for r in both] == [0, 1]
    assert both[1].score == pytest.approx(0.0)


async def test_ties_keep_insertion_order(vector_store, chunk_factory):
    await vector_store.add_vectors([chunk_factory("doc", i, (0.5, 0.5)) for i in range(3)])

    results = await vector_store.search([1.0, 1.0], 3)

    assert [r.chunk.chunk_index for r in results] == [0, 1, 2]


async def test_search_in_documents_isolation(vector_store, chunk_factory):
    await vector_store.add_vectors([chunk_factory("A", 0, (1.0, 0.0))])
    await vector_store.add_vectors([chunk_factory("B", 0, (1.0, 0.0))])

    results = await vector_store.search_in_documents([1.0, 0.0], ["A"], 10)

    assert [r.chunk.document_id for r in results] == ["A"]
    assert await vector_store.search_in_documents([1.0, 0.0], [], 10) == []


async def test_limit_zero_returns_nothing(vector_store, chunk_factory):
    await vector_store.add_vectors([chunk_factory("doc", 0)])
    assert await vector_store.search([1.0, 0.0], 0) == []


async def test_empty_store_search(vector_store):
    assert await vector_store.search([1.0, 0.0], 5) == []


async def test_mismatched_dimension_rejects_whole_batch(vector_store, chunk_factory):
    batch = [chunk_factory("doc", 0, (1.0, 0.0)), chunk_factory("doc", 1, (1.0, 0.0, 0.0))]

    with pytest.raises(EmbeddingDimensionError):
        await vector_store.add_vectors(batch)

    assert await vector_store.count_vectors() == 0


async def test_dimension_fixed_by_first_write(vector_store, chunk_factory):
    await vector_store.add_vectors([chunk_factory("A", 0, (1.0, 0.0))])

    with pytest.raises(EmbeddingDimensionError):
        await vector_store.add_vectors([chunk_factory("B", 0, (1.0, 0.0, 0.0))])
    with pytest.raises(EmbeddingDimensionError):
        await vector_store.search([1.0, 0.0, 0.0], 5)

    assert await vector_store.count_vectors() == 1


async def test_dimension_inferred_by_new_instance(tmp_path, chunk_factory):
    db_file = tmp_path / "vectors.db"
    await SQLiteVectorStore(db_file).add_vectors([chunk_factory("A", 0, (1.0, 0.0))])

    reopened = SQLiteVectorStore(db_file)

    assert await reopened.count_vectors() == 1
    with pytest.raises(EmbeddingDimensionError):
        await reopened.search([1.0, 0.0, 0.0], 5)


async def test_configured_dimension(tmp_path, chunk_factory):
    store = SQLiteVectorStore(tmp_path / "vectors.db", embedding_dimension=3)

    with pytest.raises(EmbeddingDimensionError):
        await store.add_vectors([chunk_factory("A", 0, (1.0, 0.0))])


async def test_unembedded_chunk_rejected(vector_store, chunk_factory):
    with pytest.raises(EmbeddingDimensionError):
        await vector_store.add_vectors([chunk_factory("A", 0, ())])


async def test_add_replaces_document_chunk_set(vector_store, chunk_factory):
    await vector_store.add_vectors([chunk_factory("A", i) for i in range(3)])
    await vector_store.add_vectors([chunk_factory("A", 0, (0.0, 1.0))])

    chunks = await vector_store.get_chunks_for_document("A")

    assert len(chunks) == 1
    assert chunks[0].embedding == (0.0, 1.0)


async def test_failed_write_rolls_back(vector_store, chunk_factory):
    """A duplicate chunk id fails the batch; the earlier chunk set survives."""
    await vector_store.add_vectors([chunk_factory("A", 0), chunk_factory("A", 1)])

    with pytest.raises(VectorStoreWriteError) as exc_info:
        await vector_store.add_vectors([chunk_factory("A", 5), chunk_factory("A", 5)])

    assert isinstance(exc_info.value.cause, sqlite3.IntegrityError)
    assert await vector_store.count_vectors("A") == 2


async def test_remove_vectors(vector_store, chunk_factory):
    await vector_store.add_vectors([chunk_factory("A", 0), chunk_factory("A", 1)])
    await vector_store.add_vectors([chunk_factory("B", 0)])

    assert await vector_store.remove_vectors("A") == 2
    assert await vector_store.remove_vectors("A") == 0
    assert await vector_store.remove_vectors("unknown") == 0
    assert await vector_store.count_vectors() == 1


async def test_get_chunk_by_id_round_trip(vector_store, chunk_factory):
    chunk = chunk_factory(
        "A",
        0,
        (0.5, 0.25),
        content="Some content",
        section_path="Guide > Setup",
        chunk_type="Section",
        heading_level=2,
    )
    await vector_store.add_vectors([chunk])

    loaded = await vector_store.get_chunk_by_id("A:00000")

    assert loaded == chunk
    assert await vector_store.get_chunk_by_id("missing") is None


async def test_get_chunks_for_document_in_order(vector_store, chunk_factory):
    await vector_store.add_vectors([chunk_factory("A", i) for i in (2, 0, 1)])

    chunks = await vector_store.get_chunks_for_document("A")

    assert [c.chunk_index for c in chunks] == [0, 1, 2]


async def test_embeddings_keep_full_precision(vector_store, chunk_factory):
    chunk = chunk_factory("A", 0, (0.1, 0.2, 1 / 3))
    await vector_store.add_vectors([chunk])

    loaded = await vector_store.get_chunk_by_id("A:00000")

    assert loaded.embedding == (0.1, 0.2, 1 / 3)
