"""Document lifecycle exceptions for ragvault."""

from .base import RagVaultError


class DocumentError(RagVaultError):
    """Base error for document ingestion and processing."""

    error_code = "RV_DOC_001"


class DocumentNotFoundError(DocumentError):
    """Source file or document record does not exist."""

    error_code = "RV_DOC_002"


class UnsupportedDocumentTypeError(DocumentError):
    """No document processor handles the file extension."""

    error_code = "RV_DOC_003"


class DocumentProcessingError(DocumentError):
    """Text extraction or structure extraction failed."""

    error_code = "RV_DOC_004"
