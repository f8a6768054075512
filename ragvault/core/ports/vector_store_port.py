"""Vector Store Port Interface."""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from ..domain import DocumentChunk, SearchResult


class VectorStorePort(ABC):
    """Abstract interface for chunk vector storage and similarity search.

    Scores returned by the search methods are cosine similarities in
    [-1.0, 1.0], ordered descending, ties kept in insertion order.
    """

    @abstractmethod
    async def add_vectors(self, chunks: Sequence[DocumentChunk]) -> None:
        """Insert or replace chunk rows as one atomic batch."""
        ...

    @abstractmethod
    async def remove_vectors(self, document_id: str) -> int:
        """Delete every chunk owned by a document. Returns rows removed."""
        ...

    @abstractmethod
    async def search(self, query_vector: Sequence[float], limit: int = 5) -> list[SearchResult]:
        """Rank all persisted chunks against the query vector."""
        ...

    @abstractmethod
    async def search_in_documents(
        self,
        query_vector: Sequence[float],
        document_ids: Sequence[str],
        limit: int = 5,
    ) -> list[SearchResult]:
        """Rank only the chunks owned by the given documents."""
        ...

    @abstractmethod
    async def get_chunk_by_id(self, chunk_id: str) -> DocumentChunk | None:
        """Point lookup; None when absent."""
        ...

    @abstractmethod
    async def get_chunks_for_document(self, document_id: str) -> list[DocumentChunk]:
        """All chunks of a document in chunk order."""
        ...

    @abstractmethod
    async def count_vectors(self, document_id: str | None = None) -> int:
        """Count stored chunk rows, optionally for one document."""
        ...
