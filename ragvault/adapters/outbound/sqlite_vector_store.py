"""SQLite-backed vector store for document chunks.

Vectors are stored as float64 BLOBs next to the chunk text and scored in
process with cosine similarity. Each call opens its own connection in a
worker thread; writes are serialized through a single asyncio lock.
"""

import asyncio
import logging
import sqlite3
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from pathlib import Path

import numpy as np

from ...core.domain import DocumentChunk, SearchResult
from ...core.domain.exceptions import (
    EmbeddingDimensionError,
    VectorStoreQueryError,
    VectorStoreWriteError,
)
from ...core.ports.vector_store_port import VectorStorePort
from ...core.services.similarity import VECTOR_DTYPE, as_vector, cosine_scores

CHUNK_COLUMNS = (
    "chunk_id, document_id, chunk_index, content, source, "
    "section_path, chunk_type, heading_level, dimension, vector"
)


def _row_to_chunk(row: sqlite3.Row) -> DocumentChunk:
    vector = np.frombuffer(row["vector"], dtype=VECTOR_DTYPE)
    return DocumentChunk(
        id=row["chunk_id"],
        document_id=row["document_id"],
        content=row["content"],
        chunk_index=row["chunk_index"],
        embedding=tuple(vector.tolist()),
        source=row["source"] or "",
        section_path=row["section_path"] or "",
        chunk_type=row["chunk_type"],
        heading_level=row["heading_level"],
    )


class SQLiteVectorStore(VectorStorePort):
    """Vector store persisted in a single SQLite file."""

    def __init__(
        self,
        db_path: str | Path = "data/vectors.db",
        embedding_dimension: int | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize the store and create the schema if needed.

        Args:
            db_path: Path to the SQLite database file.
            embedding_dimension: Fixed vector length. When None, the
                dimension of the first stored row is used.
            logger: Diagnostics sink; defaults to this module's logger.
        """
        self.db_path = Path(db_path)
        self._dimension = embedding_dimension
        self._write_lock = asyncio.Lock()
        self._logger = logger or logging.getLogger(__name__)
        self._ensure_db_dir()
        self._init_db()

    @property
    def dimension(self) -> int | None:
        return self._dimension

    def _ensure_db_dir(self) -> None:
        """Ensure the database directory exists."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    def _init_db(self) -> None:
        """Initialize the database schema."""
        try:
            with self._connect() as conn:
                conn.execute("PRAGMA journal_mode=WAL")
                with conn:
                    conn.execute("""
                        CREATE TABLE IF NOT EXISTS chunks (
                            chunk_id TEXT PRIMARY KEY,
                            document_id TEXT NOT NULL,
                            chunk_index INTEGER NOT NULL,
                            content TEXT NOT NULL,
                            source TEXT,
                            section_path TEXT,
                            chunk_type TEXT,
                            heading_level INTEGER,
                            dimension INTEGER NOT NULL,
                            vector BLOB NOT NULL
                        )
                    """)
                    conn.execute("""
                        CREATE INDEX IF NOT EXISTS idx_chunks_document
                        ON chunks(document_id)
                    """)
        except sqlite3.Error as e:
            self._logger.error("Failed to initialize vector database: %s", e)
            raise VectorStoreWriteError(
                "Failed to initialize vector database",
                cause=e,
                context={"db_path": str(self.db_path)},
            ) from e

    def _stored_dimension(self, conn: sqlite3.Connection) -> int | None:
        if self._dimension is None:
            row = conn.execute("SELECT dimension FROM chunks LIMIT 1").fetchone()
            if row is not None:
                self._dimension = int(row["dimension"])
        return self._dimension

    def _validate_batch(self, conn: sqlite3.Connection, chunks: Sequence[DocumentChunk]) -> int:
        """Check every chunk carries a vector of the store's dimension.

        Returns:
            The dimension the batch will be written with.
        """
        expected = self._stored_dimension(conn)
        for chunk in chunks:
            if not chunk.has_embedding:
                raise EmbeddingDimensionError(
                    "Chunk has no embedding",
                    context={"chunk_id": chunk.id, "document_id": chunk.document_id},
                )
            if expected is None:
                expected = len(chunk.embedding)
            if len(chunk.embedding) != expected:
                raise EmbeddingDimensionError(
                    f"Embedding dimension {len(chunk.embedding)} does not match "
                    f"store dimension {expected}",
                    context={"chunk_id": chunk.id, "expected": expected},
                )
        return expected

    def _validate_query(self, conn: sqlite3.Connection, query_vector: Sequence[float]) -> bool:
        """Return False when the store holds nothing to compare against."""
        expected = self._stored_dimension(conn)
        if len(query_vector) == 0:
            raise EmbeddingDimensionError("Query vector is empty")
        if expected is None:
            return False
        if len(query_vector) != expected:
            raise EmbeddingDimensionError(
                f"Query dimension {len(query_vector)} does not match store dimension {expected}",
                context={"expected": expected},
            )
        return True

    # --- writes -------------------------------------------------------

    async def add_vectors(self, chunks: Sequence[DocumentChunk]) -> None:
        """Replace the chunk sets of every document in the batch atomically.

        Raises:
            EmbeddingDimensionError: A chunk has no vector or the wrong length.
                Nothing is written.
            VectorStoreWriteError: The transaction failed and was rolled back.
        """
        if not chunks:
            return
        async with self._write_lock:
            await asyncio.to_thread(self._add_vectors_sync, list(chunks))

    def _add_vectors_sync(self, chunks: list[DocumentChunk]) -> None:
        document_ids = list(dict.fromkeys(chunk.document_id for chunk in chunks))
        try:
            with self._connect() as conn:
                dimension = self._validate_batch(conn, chunks)
                rows = [
                    (
                        chunk.id,
                        chunk.document_id,
                        chunk.chunk_index,
                        chunk.content,
                        chunk.source,
                        chunk.section_path,
                        chunk.chunk_type,
                        chunk.heading_level,
                        dimension,
                        as_vector(chunk.embedding).tobytes(),
                    )
                    for chunk in chunks
                ]
                with conn:
                    conn.executemany(
                        "DELETE FROM chunks WHERE document_id = ?",
                        [(doc_id,) for doc_id in document_ids],
                    )
                    conn.executemany(
                        f"INSERT INTO chunks ({CHUNK_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                        rows,
                    )
        except sqlite3.Error as e:
            self._logger.error("Failed to write %d chunk vectors: %s", len(chunks), e)
            raise VectorStoreWriteError(
                "Failed to write chunk vectors",
                cause=e,
                context={"document_ids": document_ids, "chunk_count": len(chunks)},
            ) from e

        if self._dimension is None:
            self._dimension = dimension
        self._logger.debug(
            "Stored %d chunk vectors for %d documents", len(chunks), len(document_ids)
        )

    async def remove_vectors(self, document_id: str) -> int:
        async with self._write_lock:
            return await asyncio.to_thread(self._remove_vectors_sync, document_id)

    def _remove_vectors_sync(self, document_id: str) -> int:
        try:
            with self._connect() as conn:
                with conn:
                    cursor = conn.execute("DELETE FROM chunks WHERE document_id = ?", (document_id,))
                removed = cursor.rowcount
        except sqlite3.Error as e:
            self._logger.error("Failed to remove vectors for %s: %s", document_id, e)
            raise VectorStoreWriteError(
                "Failed to remove chunk vectors",
                cause=e,
                context={"document_id": document_id},
            ) from e
        self._logger.debug("Removed %d chunk vectors for %s", removed, document_id)
        return removed

    # --- reads --------------------------------------------------------

    async def search(self, query_vector: Sequence[float], limit: int = 5) -> list[SearchResult]:
        if limit <= 0:
            return []
        return await asyncio.to_thread(self._search_sync, list(query_vector), None, limit)

    async def search_in_documents(
        self,
        query_vector: Sequence[float],
        document_ids: Sequence[str],
        limit: int = 5,
    ) -> list[SearchResult]:
        if limit <= 0 or not document_ids:
            return []
        ids = list(dict.fromkeys(document_ids))
        return await asyncio.to_thread(self._search_sync, list(query_vector), ids, limit)

    def _search_sync(
        self,
        query_vector: list[float],
        document_ids: list[str] | None,
        limit: int,
    ) -> list[SearchResult]:
        try:
            with self._connect() as conn:
                if not self._validate_query(conn, query_vector):
                    return []
                if document_ids is None:
                    rows = conn.execute(
                        f"SELECT {CHUNK_COLUMNS} FROM chunks ORDER BY rowid"
                    ).fetchall()
                else:
                    placeholders = ", ".join("?" for _ in document_ids)
                    rows = conn.execute(
                        f"SELECT {CHUNK_COLUMNS} FROM chunks "
                        f"WHERE document_id IN ({placeholders}) ORDER BY rowid",
                        document_ids,
                    ).fetchall()
        except sqlite3.Error as e:
            self._logger.error("Vector search failed: %s", e)
            raise VectorStoreQueryError(
                "Failed to read chunk vectors",
                cause=e,
                context={"document_ids": document_ids},
            ) from e

        if not rows:
            return []

        matrix = np.vstack([np.frombuffer(row["vector"], dtype=VECTOR_DTYPE) for row in rows])
        scores = cosine_scores(as_vector(query_vector), matrix)
        # Stable sort keeps insertion order among equal scores
        order = np.argsort(-scores, kind="stable")[:limit]
        results = [SearchResult(chunk=_row_to_chunk(rows[i]), score=float(scores[i])) for i in order]
        self._logger.debug(
            "Scored %d candidates, returning %d results", len(rows), len(results)
        )
        return results

    async def get_chunk_by_id(self, chunk_id: str) -> DocumentChunk | None:
        rows = await asyncio.to_thread(
            self._select_sync,
            f"SELECT {CHUNK_COLUMNS} FROM chunks WHERE chunk_id = ?",
            (chunk_id,),
        )
        return _row_to_chunk(rows[0]) if rows else None

    async def get_chunks_for_document(self, document_id: str) -> list[DocumentChunk]:
        rows = await asyncio.to_thread(
            self._select_sync,
            f"SELECT {CHUNK_COLUMNS} FROM chunks WHERE document_id = ? ORDER BY chunk_index",
            (document_id,),
        )
        return [_row_to_chunk(row) for row in rows]

    async def count_vectors(self, document_id: str | None = None) -> int:
        if document_id is None:
            rows = await asyncio.to_thread(self._select_sync, "SELECT COUNT(*) FROM chunks", ())
        else:
            rows = await asyncio.to_thread(
                self._select_sync,
                "SELECT COUNT(*) FROM chunks WHERE document_id = ?",
                (document_id,),
            )
        return int(rows[0][0])

    def _select_sync(self, query: str, params: tuple) -> list[sqlite3.Row]:
        try:
            with self._connect() as conn:
                return conn.execute(query, params).fetchall()
        except sqlite3.Error as e:
            self._logger.error("Vector store query failed: %s", e)
            raise VectorStoreQueryError(
                "Failed to query chunk vectors", cause=e, context={"params": list(params)}
            ) from e
