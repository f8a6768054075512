"""Metadata store backed by a single JSON library file."""

import asyncio
import json
import logging
from pathlib import Path

from ...core.domain import DocumentMetadata
from ...core.domain.exceptions import MetadataStoreError
from ...core.ports.metadata_store_port import MetadataStorePort


class JsonMetadataStore(MetadataStorePort):
    """Keeps every DocumentMetadata record in one JSON array on disk.

    The file is read once and cached. Each mutation rewrites the whole file
    through a temporary file, under a lock so concurrent read-modify-write
    cycles do not lose updates.
    """

    def __init__(self, metadata_file: str | Path, logger: logging.Logger | None = None) -> None:
        self.metadata_file = Path(metadata_file)
        self._logger = logger or logging.getLogger(__name__)
        self._cache: dict[str, DocumentMetadata] | None = None
        self._lock = asyncio.Lock()

    async def load_all(self) -> dict[str, DocumentMetadata]:
        async with self._lock:
            return dict(await self._ensure_loaded())

    async def save_all(self, metadata: dict[str, DocumentMetadata]) -> None:
        async with self._lock:
            await self._write(dict(metadata))

    async def get_by_id(self, document_id: str) -> DocumentMetadata | None:
        async with self._lock:
            return (await self._ensure_loaded()).get(document_id)

    async def save(self, metadata: DocumentMetadata) -> None:
        async with self._lock:
            records = dict(await self._ensure_loaded())
            records[metadata.id] = metadata
            await self._write(records)

    async def delete(self, document_id: str) -> None:
        async with self._lock:
            records = dict(await self._ensure_loaded())
            if records.pop(document_id, None) is None:
                return
            await self._write(records)

    async def _ensure_loaded(self) -> dict[str, DocumentMetadata]:
        if self._cache is None:
            self._cache = await asyncio.to_thread(self._read_sync)
        return self._cache

    async def _write(self, records: dict[str, DocumentMetadata]) -> None:
        await asyncio.to_thread(self._write_sync, records)
        # Only a successful write updates the cache
        self._cache = records

    def _read_sync(self) -> dict[str, DocumentMetadata]:
        if not self.metadata_file.exists():
            return {}
        try:
            data = json.loads(self.metadata_file.read_text(encoding="utf-8"))
            records = [DocumentMetadata.from_dict(item) for item in data]
        except (OSError, ValueError, KeyError, TypeError) as e:
            raise MetadataStoreError(
                "Failed to read metadata library",
                cause=e,
                context={"path": str(self.metadata_file)},
            ) from e
        self._logger.debug("Loaded %d metadata records", len(records))
        return {record.id: record for record in records}

    def _write_sync(self, records: dict[str, DocumentMetadata]) -> None:
        tmp_path = self.metadata_file.with_suffix(".tmp")
        try:
            self.metadata_file.parent.mkdir(parents=True, exist_ok=True)
            payload = [record.to_dict() for record in records.values()]
            tmp_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
            tmp_path.replace(self.metadata_file)
        except OSError as e:
            raise MetadataStoreError(
                "Failed to write metadata library",
                cause=e,
                context={"path": str(self.metadata_file)},
            ) from e
