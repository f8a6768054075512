"""Configuration-related exceptions for ragvault."""

from .base import RagVaultError


class ConfigurationError(RagVaultError):
    """Configuration or environment variable errors.

    Raised when required configuration is missing or invalid.
    """

    error_code = "RV_CFG_001"


class InvalidConfigurationError(ConfigurationError):
    """Configuration value is invalid."""

    error_code = "RV_CFG_002"
