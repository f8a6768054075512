"""Document repository: keeps content, chunk vectors and metadata consistent.

The three stores fail independently and share no transaction, so every
multi-store operation runs its steps in a fixed order. A failure aborts the
sequence, is logged with the step that failed and is re-raised unchanged.
Completed steps are never undone; the step order tells a caller which
partial state is left behind:

Save (Metadata placeholder -> Content -> Embeddings -> Metadata finalize)
    - fails at CONTENT: a placeholder record with has_embeddings=False
    - fails at EMBEDDINGS: placeholder plus new content, old vectors intact
    - fails at METADATA_FINALIZE: all data written, record still a placeholder

Delete (Content -> Embeddings -> Metadata)
    - fails at CONTENT: nothing removed
    - fails at EMBEDDINGS: content gone, vectors and metadata intact
    - fails at METADATA: a metadata-only orphan

Re-running delete on the same id is always safe.
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Collection
from contextlib import asynccontextmanager
from dataclasses import replace
from datetime import datetime
from enum import Enum

from ..domain import Document, DocumentChunk, DocumentMetadata
from ..domain.exceptions import EmbeddingDimensionError, ValidationError
from ..ports.content_store_port import ContentStorePort
from ..ports.metadata_store_port import MetadataStorePort
from ..ports.vector_store_port import VectorStorePort


class SaveStep(str, Enum):
    METADATA_PLACEHOLDER = "metadata_placeholder"
    CONTENT = "content"
    EMBEDDINGS = "embeddings"
    METADATA_FINALIZE = "metadata_finalize"


class DeleteStep(str, Enum):
    CONTENT = "content"
    EMBEDDINGS = "embeddings"
    METADATA = "metadata"


class KeyedLock:
    """One asyncio.Lock per key, dropped once nobody holds or waits on it."""

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._users[key] = self._users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if self._users[key] == 0:
                del self._users[key]
                del self._locks[key]


class DocumentRepository:
    """Cross-store orchestrator for documents."""

    def __init__(
        self,
        content_store: ContentStorePort,
        vector_store: VectorStorePort,
        metadata_store: MetadataStorePort,
        logger: logging.Logger | None = None,
    ) -> None:
        self._content = content_store
        self._vectors = vector_store
        self._metadata = metadata_store
        self._logger = logger or logging.getLogger(__name__)
        self._locks = KeyedLock()

    # --- reads --------------------------------------------------------

    async def get_all_documents(self) -> list[Document]:
        """Summary-mode listing of every document, oldest first."""
        records = await self._metadata.load_all()
        documents = [record.to_document() for record in records.values()]
        documents.sort(key=lambda doc: doc.date_added)
        return documents

    async def get_document_by_id(self, document_id: str) -> Document | None:
        """Summary-mode read. Returns None when no metadata exists for the id."""
        record = await self._metadata.get_by_id(document_id)
        return record.to_document() if record else None

    async def load_full_content(self, document_id: str) -> Document | None:
        """Load metadata, content and the persisted chunk set of a document.

        Returned chunks come from the vector store and carry their embeddings.

        Returns:
            The fully loaded document, or None when no metadata exists.
        """
        record = await self._metadata.get_by_id(document_id)
        if record is None:
            return None

        content = await self._content.load_content(document_id)
        chunks = await self._vectors.get_chunks_for_document(document_id)

        if content is None:
            self._logger.warning(
                "Content missing for document %s",
                document_id,
                extra={"operation": "load_full_content", "document_id": document_id},
            )
        if record.chunk_count != len(chunks):
            self._logger.warning(
                "Metadata records %d chunks for %s but the vector store holds %d",
                record.chunk_count,
                document_id,
                len(chunks),
                extra={"operation": "load_full_content", "document_id": document_id},
            )

        document = record.to_document()
        document.content = content if content is not None else ""
        document.chunks = chunks
        return document

    async def get_chunk_by_id(
        self,
        chunk_id: str,
        allowed_document_ids: Collection[str] | None = None,
    ) -> DocumentChunk | None:
        """Look up one chunk, optionally scoped to an allow-list of documents.

        Without an allow-list the lookup spans every stored document. With
        one, a chunk owned by any other document is reported as absent.
        """
        if allowed_document_ids is not None and not allowed_document_ids:
            return None

        chunk = await self._vectors.get_chunk_by_id(chunk_id)
        if chunk is None:
            return None
        if allowed_document_ids is not None and chunk.document_id not in allowed_document_ids:
            self._logger.debug("Chunk %s is outside the allowed documents", chunk_id)
            return None
        return chunk

    # --- writes -------------------------------------------------------

    async def save_document(self, document: Document) -> None:
        """Persist a document in the order metadata, content, embeddings.

        ``document.content`` of None leaves stored content untouched.
        ``document.chunks`` of None leaves stored vectors untouched; a list
        (possibly empty) replaces the stored chunk set.

        Raises:
            ValidationError: A chunk belongs to another document.
            EmbeddingDimensionError: A chunk has no embedding.
            Exception: Any store failure, re-raised unchanged.
        """
        self._validate_chunks(document)

        async with self._locks.hold(document.id):
            step = SaveStep.METADATA_PLACEHOLDER
            try:
                existing = await self._metadata.get_by_id(document.id)
                placeholder = DocumentMetadata.from_document(document)
                await self._metadata.save(placeholder)
                self._logger.debug("Saved metadata placeholder for %s", document.id)

                step = SaveStep.CONTENT
                if document.content is not None:
                    await self._content.save_content(document.id, document.content)
                    self._logger.debug("Saved content for %s", document.id)

                step = SaveStep.EMBEDDINGS
                if document.chunks is None:
                    has_embeddings = existing.has_embeddings if existing else False
                    chunk_count = existing.chunk_count if existing else 0
                    processed_at = existing.processed_at if existing else None
                else:
                    if document.chunks:
                        await self._vectors.add_vectors(document.chunks)
                    else:
                        await self._vectors.remove_vectors(document.id)
                    has_embeddings = bool(document.chunks)
                    chunk_count = len(document.chunks)
                    processed_at = datetime.now() if document.is_processed else None
                    self._logger.debug("Stored %d chunks for %s", chunk_count, document.id)

                step = SaveStep.METADATA_FINALIZE
                await self._metadata.save(
                    replace(
                        placeholder,
                        has_embeddings=has_embeddings,
                        chunk_count=chunk_count,
                        processed_at=processed_at,
                    )
                )
            except Exception:
                self._logger.critical(
                    "Save of document %s aborted at step %s",
                    document.id,
                    step.value,
                    extra={
                        "operation": "save_document",
                        "document_id": document.id,
                        "step": step.value,
                    },
                    exc_info=True,
                )
                raise

        self._logger.info(
            "Saved document %s (%s)",
            document.id,
            document.name,
            extra={"operation": "save_document", "document_id": document.id},
        )

    def _validate_chunks(self, document: Document) -> None:
        for chunk in document.chunks or ():
            if chunk.document_id != document.id:
                raise ValidationError(
                    "Chunk belongs to a different document",
                    context={
                        "document_id": document.id,
                        "chunk_id": chunk.id,
                        "chunk_document_id": chunk.document_id,
                    },
                )
            if not chunk.has_embedding:
                raise EmbeddingDimensionError(
                    "Chunk must be embedded before it is saved",
                    context={"document_id": document.id, "chunk_id": chunk.id},
                )

    async def delete_document(self, document_id: str) -> None:
        """Delete a document in the order content, embeddings, metadata.

        Deleting an id that exists in no store is a successful no-op.

        Raises:
            Exception: The failing store's error, re-raised unchanged.
        """
        async with self._locks.hold(document_id):
            step = DeleteStep.CONTENT
            extra = {"operation": "delete_document", "document_id": document_id}
            try:
                await self._content.delete_content(document_id)

                step = DeleteStep.EMBEDDINGS
                removed = await self._vectors.remove_vectors(document_id)

                step = DeleteStep.METADATA
                await self._metadata.delete(document_id)
            except Exception:
                if step is DeleteStep.METADATA:
                    self._logger.error(
                        "Metadata delete failed for %s; content and embeddings are "
                        "already removed, metadata record is orphaned",
                        document_id,
                        extra={**extra, "step": step.value},
                        exc_info=True,
                    )
                else:
                    self._logger.critical(
                        "Delete of document %s aborted at step %s",
                        document_id,
                        step.value,
                        extra={**extra, "step": step.value},
                        exc_info=True,
                    )
                raise

        self._logger.info(
            "Deleted document %s (%d chunk vectors removed)", document_id, removed, extra=extra
        )

    async def update_selection(self, document_id: str, is_selected: bool) -> bool:
        """Set the selection flag. Returns False when the document is unknown."""
        async with self._locks.hold(document_id):
            record = await self._metadata.get_by_id(document_id)
            if record is None:
                return False
            await self._metadata.save(replace(record, is_selected=is_selected))
        self._logger.debug("Document %s selected=%s", document_id, is_selected)
        return True
