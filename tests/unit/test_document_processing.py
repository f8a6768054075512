"""Unit tests for document processing: registry, add and process."""

import math
from unittest.mock import AsyncMock

import pytest

from ragvault.adapters.outbound.text_document_processor import TextDocumentProcessor
from ragvault.core.domain.exceptions import (
    DocumentNotFoundError,
    EmbeddingUnavailableError,
    UnsupportedDocumentTypeError,
)
from ragvault.core.services.chunking import ChunkingService
from ragvault.core.services.document_processing import (
    DocumentProcessingService,
    DocumentProcessorRegistry,
)

pytestmark = pytest.mark.unit

NOTES = """Release Notes

Version one adds the importer.

Version two adds the exporter.

Version three adds search across every stored document.

Version four adds selection of documents for retrieval.
"""


@pytest.fixture
def registry():
    return DocumentProcessorRegistry([TextDocumentProcessor()])


@pytest.fixture
def service(repository, registry, embedder):
    return DocumentProcessingService(
        repository,
        registry,
        ChunkingService(chunk_size=60, chunk_overlap=10),
        embedder,
        embedding_batch_size=2,
    )


@pytest.fixture
def notes_file(tmp_path):
    path = tmp_path / "notes.txt"
    path.write_text(NOTES, encoding="utf-8")
    return path


class TestRegistry:
    def test_first_matching_processor(self, registry):
        assert isinstance(registry.get_processor(".md"), TextDocumentProcessor)

    def test_unsupported_extension(self, registry):
        with pytest.raises(UnsupportedDocumentTypeError) as exc_info:
            registry.get_processor(".pdf")

        assert exc_info.value.extra_context["supported"] == [".txt", ".md", ".markdown"]


class TestAddDocument:
    async def test_add_stores_unprocessed_document(self, service, repository, notes_file):
        document = await service.add_document(notes_file)

        stored = await repository.load_full_content(document.id)
        assert stored.name == "notes.txt"
        assert stored.document_type == ".txt"
        assert stored.file_size == notes_file.stat().st_size
        assert stored.content == NOTES
        assert not stored.is_processed
        assert stored.chunks == []

    async def test_missing_file(self, service, tmp_path):
        with pytest.raises(DocumentNotFoundError):
            await service.add_document(tmp_path / "missing.txt")

    async def test_unsupported_file(self, service, tmp_path):
        path = tmp_path / "slides.pdf"
        path.write_bytes(b"%PDF-1.7")

        with pytest.raises(UnsupportedDocumentTypeError):
            await service.add_document(path)


class TestProcessDocument:
    async def test_process_embeds_and_saves_chunks(
        self, service, repository, vector_store, embedder, notes_file
    ):
        added = await service.add_document(notes_file)

        processed = await service.process_document(added.id)

        chunk_count = len(processed.chunks)
        assert chunk_count > 1
        assert all(c.embedding == (1.0, 0.0) for c in processed.chunks)
        assert len(embedder.batches) == math.ceil(chunk_count / 2)
        assert await vector_store.count_vectors(added.id) == chunk_count

        summary = await repository.get_document_by_id(added.id)
        assert summary.is_processed

    async def test_structure_drives_section_paths(self, service, notes_file):
        added = await service.add_document(notes_file)

        processed = await service.process_document(added.id)

        assert processed.chunks[0].section_path == "Release Notes"
        assert processed.chunks[0].chunk_type == "Section"

    async def test_missing_content_is_rebuilt_from_source(
        self, service, repository, content_store, notes_file
    ):
        added = await service.add_document(notes_file)
        await content_store.delete_content(added.id)

        await service.process_document(added.id)

        stored = await repository.load_full_content(added.id)
        assert stored.content.startswith("Release Notes\n\nVersion one adds the importer.")
        assert stored.content.endswith("Version four adds selection of documents for retrieval.")

    async def test_unknown_document(self, service):
        with pytest.raises(DocumentNotFoundError):
            await service.process_document("missing")

    async def test_embedding_failure_saves_nothing(
        self, repository, registry, vector_store, notes_file
    ):
        embedder = AsyncMock()
        embedder.embed_many.side_effect = EmbeddingUnavailableError("offline")
        service = DocumentProcessingService(
            repository, registry, ChunkingService(60, 10), embedder
        )
        added = await service.add_document(notes_file)

        with pytest.raises(EmbeddingUnavailableError):
            await service.process_document(added.id)

        assert not (await repository.get_document_by_id(added.id)).is_processed
        assert await vector_store.count_vectors(added.id) == 0

    async def test_set_selected(self, service, repository, notes_file):
        added = await service.add_document(notes_file)

        assert await service.set_selected(added.id, True)
        assert (await repository.get_document_by_id(added.id)).is_selected
