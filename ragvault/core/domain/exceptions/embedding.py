"""Embedding exceptions for ragvault."""

from .base import RagVaultError


class EmbeddingError(RagVaultError):
    """Failed to generate embeddings."""

    error_code = "RV_EMB_001"


class EmbeddingUnavailableError(EmbeddingError):
    """Embedding endpoint is unreachable or returned an error."""

    error_code = "RV_EMB_002"
