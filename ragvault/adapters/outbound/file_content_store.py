"""File-per-document content store."""

import asyncio
import logging
from pathlib import Path

from ...core.domain.exceptions import ContentStoreError
from ...core.ports.content_store_port import ContentStorePort


class FileContentStore(ContentStorePort):
    """Stores each document's text as ``<documents_dir>/<id>.txt``."""

    def __init__(self, documents_dir: str | Path, logger: logging.Logger | None = None) -> None:
        self.documents_dir = Path(documents_dir)
        self._logger = logger or logging.getLogger(__name__)
        self.documents_dir.mkdir(parents=True, exist_ok=True)

    def _path_for(self, document_id: str) -> Path:
        return self.documents_dir / f"{document_id}.txt"

    async def load_content(self, document_id: str) -> str | None:
        return await asyncio.to_thread(self._load_sync, document_id)

    def _load_sync(self, document_id: str) -> str | None:
        path = self._path_for(document_id)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise ContentStoreError(
                "Failed to read document content",
                cause=e,
                context={"document_id": document_id, "path": str(path)},
            ) from e

    async def save_content(self, document_id: str, content: str) -> None:
        await asyncio.to_thread(self._save_sync, document_id, content)

    def _save_sync(self, document_id: str, content: str) -> None:
        path = self._path_for(document_id)
        tmp_path = path.with_suffix(".tmp")
        try:
            tmp_path.write_text(content, encoding="utf-8")
            tmp_path.replace(path)
        except OSError as e:
            raise ContentStoreError(
                "Failed to write document content",
                cause=e,
                context={"document_id": document_id, "path": str(path)},
            ) from e
        self._logger.debug("Saved %d characters of content for %s", len(content), document_id)

    async def delete_content(self, document_id: str) -> None:
        await asyncio.to_thread(self._delete_sync, document_id)

    def _delete_sync(self, document_id: str) -> None:
        path = self._path_for(document_id)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise ContentStoreError(
                "Failed to delete document content",
                cause=e,
                context={"document_id": document_id, "path": str(path)},
            ) from e
