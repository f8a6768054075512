"""Domain models for ragvault.

- document: Document, DocumentMetadata, DocumentChunk and SearchResult
- structured: StructuredDocument, DocumentElement and ElementType

All models are re-exported here for convenient importing:

    from ragvault.core.domain import Document, DocumentChunk, SearchResult
"""

from .document import (
    DEFAULT_CHUNK_TYPE,
    Document,
    DocumentChunk,
    DocumentMetadata,
    SearchResult,
    make_chunk_id,
    new_document_id,
)
from .structured import DocumentElement, ElementType, StructuredDocument

__all__ = [
    # Document models
    "Document",
    "DocumentChunk",
    "DocumentMetadata",
    "SearchResult",
    "DEFAULT_CHUNK_TYPE",
    "make_chunk_id",
    "new_document_id",
    # Structured document models
    "StructuredDocument",
    "DocumentElement",
    "ElementType",
]
