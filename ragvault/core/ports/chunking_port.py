"""Chunking Strategy Port Interface."""

from abc import ABC, abstractmethod

from ..domain import Document, DocumentChunk, StructuredDocument


class ChunkingStrategy(ABC):
    """One way of splitting a document into chunks.

    Strategies are tried in a fixed priority order; the first one whose
    ``can_chunk`` returns True is used.
    """

    @property
    def name(self) -> str:
        return type(self).__name__

    @abstractmethod
    def can_chunk(self, document: Document, structured_doc: StructuredDocument | None) -> bool: ...

    @abstractmethod
    def chunk(
        self, document: Document, structured_doc: StructuredDocument | None
    ) -> list[DocumentChunk]: ...
