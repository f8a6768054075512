"""Document, chunk, and search result models for the RAG engine."""

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any

DEFAULT_CHUNK_TYPE = "ParagraphGroup"


def new_document_id() -> str:
    """Allocate a fresh, never-reused document identifier."""
    return uuid.uuid4().hex


def make_chunk_id(document_id: str, chunk_index: int) -> str:
    """Derive a chunk id from its owning document and position.

    The id depends only on its inputs so re-chunking identical content
    reproduces identical ids.
    """
    return f"{document_id}:{chunk_index:05d}"


@dataclass(frozen=True)
class DocumentChunk:
    """A contiguous slice of a document used as the unit of retrieval.

    Chunks are immutable once created; re-processing a document replaces
    its chunk set wholesale.

    Attributes:
        id: Stable chunk identifier (see :func:`make_chunk_id`).
        document_id: Owning document id (back-reference only).
        content: The text slice.
        chunk_index: Position of the chunk in document order.
        embedding: Fixed-length vector; empty until the chunk is embedded.
        source: Display label, usually the document name.
        section_path: Heading lineage the chunk belongs to, if known.
        chunk_type: Kind of content the chunk was built from.
        heading_level: Heading level of the originating section, if any.
    """

    id: str
    document_id: str
    content: str
    chunk_index: int
    embedding: tuple[float, ...] = ()
    source: str = ""
    section_path: str = ""
    chunk_type: str = DEFAULT_CHUNK_TYPE
    heading_level: int | None = None

    @property
    def has_embedding(self) -> bool:
        return len(self.embedding) > 0

    def with_embedding(self, embedding: list[float] | tuple[float, ...]) -> "DocumentChunk":
        """Return a copy of this chunk carrying the given embedding."""
        return replace(self, embedding=tuple(float(x) for x in embedding))


@dataclass
class Document:
    """A document tracked by the repository.

    ``content`` and ``chunks`` are ``None`` for documents loaded in summary
    mode; only a full load allocates them.
    """

    name: str
    source_path: str
    id: str = field(default_factory=new_document_id)
    is_processed: bool = False
    is_selected: bool = False
    date_added: datetime = field(default_factory=datetime.now)
    file_size: int = 0
    document_type: str = ""
    content: str | None = None
    chunks: list[DocumentChunk] | None = None
    metadata: dict[str, str] = field(default_factory=dict)

    @property
    def is_fully_loaded(self) -> bool:
        return self.content is not None


@dataclass
class DocumentMetadata:
    """Bookkeeping record persisted independently of a document's content."""

    id: str
    name: str
    source_path: str
    date_added: datetime = field(default_factory=datetime.now)
    is_processed: bool = False
    is_selected: bool = False
    file_size: int = 0
    document_type: str = ""
    has_embeddings: bool = False
    processed_at: datetime | None = None
    chunk_count: int = 0

    @classmethod
    def from_document(cls, document: Document) -> "DocumentMetadata":
        return cls(
            id=document.id,
            name=document.name,
            source_path=document.source_path,
            date_added=document.date_added,
            is_processed=document.is_processed,
            is_selected=document.is_selected,
            file_size=document.file_size,
            document_type=document.document_type,
        )

    def to_document(self) -> Document:
        """Build a summary-mode Document (no content, no chunks)."""
        return Document(
            id=self.id,
            name=self.name,
            source_path=self.source_path,
            date_added=self.date_added,
            is_processed=self.is_processed,
            is_selected=self.is_selected,
            file_size=self.file_size,
            document_type=self.document_type,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "source_path": self.source_path,
            "date_added": self.date_added.isoformat(),
            "is_processed": self.is_processed,
            "is_selected": self.is_selected,
            "file_size": self.file_size,
            "document_type": self.document_type,
            "has_embeddings": self.has_embeddings,
            "processed_at": self.processed_at.isoformat() if self.processed_at else None,
            "chunk_count": self.chunk_count,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DocumentMetadata":
        processed_at = data.get("processed_at")
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            source_path=data.get("source_path", ""),
            date_added=datetime.fromisoformat(data["date_added"])
            if data.get("date_added")
            else datetime.now(),
            is_processed=bool(data.get("is_processed", False)),
            is_selected=bool(data.get("is_selected", False)),
            file_size=int(data.get("file_size", 0)),
            document_type=data.get("document_type", ""),
            has_embeddings=bool(data.get("has_embeddings", False)),
            processed_at=datetime.fromisoformat(processed_at) if processed_at else None,
            chunk_count=int(data.get("chunk_count", 0)),
        )


@dataclass
class SearchResult:
    """A chunk paired with its relevance score.

    Attributes:
        chunk: The matched chunk, embedding included.
        score: Cosine similarity in [-1.0, 1.0], higher is more relevant.
    """

    chunk: DocumentChunk
    score: float
