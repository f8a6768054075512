"""Document ingestion: text extraction, chunking and embedding."""

import logging
from collections.abc import Sequence
from pathlib import Path

from ..domain import Document, DocumentChunk, StructuredDocument
from ..domain.exceptions import (
    DocumentError,
    DocumentNotFoundError,
    EmbeddingError,
    UnsupportedDocumentTypeError,
)
from ..ports.document_processor_port import DocumentProcessorPort
from ..ports.embedding_port import EmbeddingPort
from .chunking import ChunkingService
from .document_repository import DocumentRepository


class DocumentProcessorRegistry:
    """Fixed-priority list of document processors.

    The first processor that can handle an extension wins.
    """

    def __init__(self, processors: Sequence[DocumentProcessorPort]) -> None:
        self._processors = tuple(processors)

    @property
    def supported_extensions(self) -> list[str]:
        extensions: list[str] = []
        for processor in self._processors:
            extensions.extend(e for e in processor.supported_extensions if e not in extensions)
        return extensions

    def get_processor(self, extension: str) -> DocumentProcessorPort:
        """Return the processor for a file extension such as ``.md``.

        Raises:
            UnsupportedDocumentTypeError: If no processor handles it.
        """
        for processor in self._processors:
            if processor.can_process(extension):
                return processor
        raise UnsupportedDocumentTypeError(
            f"Unsupported document type: {extension or '<none>'}",
            context={"extension": extension, "supported": self.supported_extensions},
        )


class DocumentProcessingService:
    """Adds documents to the library and turns them into embedded chunks."""

    def __init__(
        self,
        repository: DocumentRepository,
        registry: DocumentProcessorRegistry,
        chunker: ChunkingService,
        embedder: EmbeddingPort,
        embedding_batch_size: int = 10,
        logger: logging.Logger | None = None,
    ) -> None:
        self.repository = repository
        self.registry = registry
        self.chunker = chunker
        self.embedder = embedder
        self.embedding_batch_size = max(1, embedding_batch_size)
        self._logger = logger or logging.getLogger(__name__)

    async def add_document(self, path: str | Path) -> Document:
        """Extract a file's text and store it as a new, unprocessed document.

        Raises:
            DocumentNotFoundError: If the file does not exist.
            UnsupportedDocumentTypeError: If no processor handles the file.
        """
        path = Path(path)
        if not path.is_file():
            raise DocumentNotFoundError(
                f"File not found: {path}", context={"path": str(path)}
            )

        processor = self.registry.get_processor(path.suffix)
        content = await processor.extract_text(path)

        document = Document(
            name=path.name,
            source_path=str(path.resolve()),
            file_size=path.stat().st_size,
            document_type=path.suffix.lower(),
            content=content,
        )
        await self.repository.save_document(document)
        self._logger.info(
            "Added document %s (%s, %d characters)",
            document.id,
            document.name,
            len(content),
            extra={"operation": "add_document", "document_id": document.id},
        )
        return document

    async def process_document(self, document_id: str) -> Document:
        """Chunk and embed a stored document, replacing its previous chunks.

        Raises:
            DocumentNotFoundError: If the document id is unknown.
            EmbeddingError: If a chunk cannot be embedded. Nothing is saved.
        """
        document = await self.repository.load_full_content(document_id)
        if document is None:
            raise DocumentNotFoundError(
                f"Document not found: {document_id}", context={"document_id": document_id}
            )

        structured = await self._extract_structure(document)
        if not document.content and structured is not None and structured.has_content:
            self._logger.warning(
                "Stored content missing for %s, rebuilding it from the source file", document_id
            )
            document.content = structured.to_plain_text()
        chunks = self.chunker.chunk(document, structured)
        if not chunks:
            self._logger.warning("Document %s produced no chunks", document_id)

        document.chunks = await self._embed_chunks(chunks)
        document.is_processed = True
        await self.repository.save_document(document)

        self._logger.info(
            "Processed document %s into %d chunks",
            document_id,
            len(document.chunks),
            extra={"operation": "process_document", "document_id": document_id},
        )
        return document

    async def set_selected(self, document_id: str, selected: bool) -> bool:
        return await self.repository.update_selection(document_id, selected)

    async def _extract_structure(self, document: Document) -> StructuredDocument | None:
        """Structured extraction from the source file, or None to chunk plain text."""
        source = Path(document.source_path)
        processor = self.registry.get_processor(source.suffix)
        if not processor.supports_structured_extraction:
            return None
        if not source.is_file():
            self._logger.warning(
                "Source file %s is gone, chunking stored text for %s", source, document.id
            )
            return None
        try:
            return await processor.extract_structured_content(source)
        except (DocumentError, NotImplementedError) as e:
            self._logger.warning(
                "Structure extraction failed for %s, falling back to plain text: %s",
                document.id,
                e,
            )
            return None

    async def _embed_chunks(self, chunks: list[DocumentChunk]) -> list[DocumentChunk]:
        embedded: list[DocumentChunk] = []
        for start in range(0, len(chunks), self.embedding_batch_size):
            batch = chunks[start : start + self.embedding_batch_size]
            vectors = await self.embedder.embed_many([chunk.content for chunk in batch])
            if len(vectors) != len(batch):
                raise EmbeddingError(
                    f"Expected {len(batch)} embeddings, got {len(vectors)}",
                    context={"batch_start": start},
                )
            embedded.extend(chunk.with_embedding(vector) for chunk, vector in zip(batch, vectors))
            self._logger.debug(
                "Embedded chunks %d-%d of %d", start, start + len(batch) - 1, len(chunks)
            )
        return embedded
