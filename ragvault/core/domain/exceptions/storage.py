"""Content and metadata storage exceptions for ragvault."""

from .base import RagVaultError


class StorageError(RagVaultError):
    """Storage medium is unavailable or failed an I/O operation."""

    error_code = "RV_STO_001"


class ContentStoreError(StorageError):
    """Failed to read, write, or delete document content."""

    error_code = "RV_STO_002"


class MetadataStoreError(StorageError):
    """Failed to read or write the metadata library file."""

    error_code = "RV_STO_003"
