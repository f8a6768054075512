"""Retrieval exceptions for ragvault."""

from .base import RagVaultError


class RetrievalError(RagVaultError):
    """Error during chunk retrieval."""

    error_code = "RV_RET_001"
