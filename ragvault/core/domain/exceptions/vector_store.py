"""Vector store exceptions for ragvault."""

from .base import RagVaultError


class VectorStoreError(RagVaultError):
    """Base error for vector store operations."""

    error_code = "RV_VEC_001"


class VectorStoreWriteError(VectorStoreError):
    """Failed to insert or delete chunk vectors.

    The write is rolled back; no rows of the failed batch are persisted.
    """

    error_code = "RV_VEC_002"


class VectorStoreQueryError(VectorStoreError):
    """Failed to read chunk vectors from the database."""

    error_code = "RV_VEC_003"
