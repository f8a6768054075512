"""Document Processor Port Interface."""

from abc import ABC, abstractmethod
from pathlib import Path

from ..domain import StructuredDocument


class DocumentProcessorPort(ABC):
    """Extracts text, and optionally structure, from files of given types."""

    supported_extensions: tuple[str, ...] = ()
    supports_structured_extraction: bool = False

    def can_process(self, extension: str) -> bool:
        return extension.lower() in self.supported_extensions

    @abstractmethod
    async def extract_text(self, path: Path) -> str: ...

    async def extract_structured_content(self, path: Path) -> StructuredDocument:
        raise NotImplementedError(f"{type(self).__name__} does not extract structure")
