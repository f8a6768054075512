"""
Pytest configuration and shared fixtures.
"""

import pytest

from ragvault.adapters.outbound.file_content_store import FileContentStore
from ragvault.adapters.outbound.json_metadata_store import JsonMetadataStore
from ragvault.adapters.outbound.sqlite_vector_store import SQLiteVectorStore
from ragvault.core.domain import Document, DocumentChunk, make_chunk_id
from ragvault.core.ports.embedding_port import EmbeddingPort
from ragvault.core.services.document_repository import DocumentRepository


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no external dependencies)")
    config.addinivalue_line("markers", "integration: Integration tests (require a running Ollama)")


class StaticEmbedder(EmbeddingPort):
    """Embedder returning canned vectors.

    Texts listed in ``vectors`` get their vector; anything else gets
    ``default``. Every call is recorded.
    """

    def __init__(self, vectors=None, default=(1.0, 0.0)):
        self.vectors = dict(vectors or {})
        self.default = list(default)
        self.calls = []
        self.batches = []

    async def embed(self, text):
        self.calls.append(text)
        return list(self.vectors.get(text, self.default))

    async def embed_many(self, texts):
        self.batches.append(list(texts))
        return [await self.embed(text) for text in texts]


def make_chunk(document_id, index, embedding=(1.0, 0.0), content=None, **kwargs):
    """Build an embedded chunk with a deterministic id."""
    return DocumentChunk(
        id=make_chunk_id(document_id, index),
        document_id=document_id,
        content=content if content is not None else f"chunk {index} of {document_id}",
        chunk_index=index,
        embedding=tuple(embedding),
        source=f"{document_id}.txt",
        **kwargs,
    )


def make_document(document_id, chunk_vectors=(), content="Some document text."):
    """Build a processed document whose chunks carry the given vectors."""
    document = Document(
        id=document_id,
        name=f"{document_id}.txt",
        source_path=f"/tmp/{document_id}.txt",
        document_type=".txt",
        file_size=len(content),
        content=content,
    )
    if chunk_vectors:
        document.chunks = [make_chunk(document_id, i, v) for i, v in enumerate(chunk_vectors)]
        document.is_processed = True
    return document


@pytest.fixture
def vector_store(tmp_path):
    """SQLite vector store in a temporary directory."""
    return SQLiteVectorStore(tmp_path / "vectors.db")


@pytest.fixture
def content_store(tmp_path):
    return FileContentStore(tmp_path / "documents")


@pytest.fixture
def metadata_store(tmp_path):
    return JsonMetadataStore(tmp_path / "library.json")


@pytest.fixture
def repository(content_store, vector_store, metadata_store):
    """Repository over real stores rooted in tmp_path."""
    return DocumentRepository(content_store, vector_store, metadata_store)


@pytest.fixture
def embedder():
    return StaticEmbedder()


@pytest.fixture
def chunk_factory():
    return make_chunk


@pytest.fixture
def document_factory():
    return make_document


@pytest.fixture
def embedder_factory():
    return StaticEmbedder
