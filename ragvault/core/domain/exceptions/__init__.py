"""Exception hierarchy for ragvault.

Each exception includes:
- Error codes for quick identification
- Automatic capture of class, method, file, and line number
- Cause chaining for underlying exceptions
- JSON serialization for structured logging

Import from this package directly:

    from ragvault.core.domain.exceptions import RagVaultError, VectorStoreWriteError
"""

# Base classes
from .base import RagVaultError, RaiseSite

# Configuration exceptions
from .configuration import ConfigurationError, InvalidConfigurationError

# Document exceptions
from .document import (
    DocumentError,
    DocumentNotFoundError,
    DocumentProcessingError,
    UnsupportedDocumentTypeError,
)

# Embedding exceptions
from .embedding import EmbeddingError, EmbeddingUnavailableError

# Retrieval exceptions
from .retrieval import RetrievalError

# Storage exceptions
from .storage import ContentStoreError, MetadataStoreError, StorageError

# Validation exceptions
from .validation import (
    EmbeddingDimensionError,
    EmptyQueryError,
    InvalidChunkingConfigurationError,
    ValidationError,
)

# Vector store exceptions
from .vector_store import VectorStoreError, VectorStoreQueryError, VectorStoreWriteError

__all__ = [
    # Base
    "RaiseSite",
    "RagVaultError",
    # Configuration
    "ConfigurationError",
    "InvalidConfigurationError",
    # Document
    "DocumentError",
    "DocumentNotFoundError",
    "UnsupportedDocumentTypeError",
    "DocumentProcessingError",
    # Embedding
    "EmbeddingError",
    "EmbeddingUnavailableError",
    # Retrieval
    "RetrievalError",
    # Storage
    "StorageError",
    "ContentStoreError",
    "MetadataStoreError",
    # Validation
    "ValidationError",
    "EmptyQueryError",
    "InvalidChunkingConfigurationError",
    "EmbeddingDimensionError",
    # Vector Store
    "VectorStoreError",
    "VectorStoreWriteError",
    "VectorStoreQueryError",
]
