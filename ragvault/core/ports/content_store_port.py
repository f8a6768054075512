"""Content Store Port Interface."""

from abc import ABC, abstractmethod


class ContentStorePort(ABC):
    """Persistence for raw document text, keyed by document id."""

    @abstractmethod
    async def load_content(self, document_id: str) -> str | None:
        """Return stored text, or None when nothing is stored for the id."""
        ...

    @abstractmethod
    async def save_content(self, document_id: str, content: str) -> None: ...

    @abstractmethod
    async def delete_content(self, document_id: str) -> None:
        """Remove stored text. Deleting a missing id is not an error."""
        ...
