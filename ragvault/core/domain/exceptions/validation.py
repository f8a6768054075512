"""Validation exceptions for ragvault."""

from .base import RagVaultError


class ValidationError(RagVaultError):
    """Input validation failed."""

    error_code = "RV_VAL_001"


class EmptyQueryError(ValidationError):
    """Query cannot be empty or whitespace only."""

    error_code = "RV_VAL_002"


class InvalidChunkingConfigurationError(ValidationError):
    """Chunk size/overlap combination cannot produce chunks.

    Raised before any chunk is produced, e.g. when the overlap is not
    strictly smaller than the chunk size.
    """

    error_code = "RV_VAL_003"


class EmbeddingDimensionError(ValidationError):
    """Vector length does not match the dimension of the vector store.

    Common causes:
    - The embedding model was switched without re-processing documents
    - A chunk was saved before being embedded
    """

    error_code = "RV_VAL_004"
