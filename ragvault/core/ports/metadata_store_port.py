"""Metadata Store Port Interface."""

from abc import ABC, abstractmethod

from ..domain import DocumentMetadata


class MetadataStorePort(ABC):
    """Persistence for document bookkeeping records."""

    @abstractmethod
    async def load_all(self) -> dict[str, DocumentMetadata]: ...

    @abstractmethod
    async def save_all(self, metadata: dict[str, DocumentMetadata]) -> None: ...

    @abstractmethod
    async def get_by_id(self, document_id: str) -> DocumentMetadata | None: ...

    @abstractmethod
    async def save(self, metadata: DocumentMetadata) -> None: ...

    @abstractmethod
    async def delete(self, document_id: str) -> None:
        """Remove a record. Deleting a missing id is not an error."""
        ...
