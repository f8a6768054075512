"""Unit tests for exception handling system.

Tests both the exception hierarchy and the exception handler utilities.
"""

import json

import pytest

from ragvault.adapters.common.exception_handler import (
    format_exception_json,
    get_error_code,
    log_exception,
)
from ragvault.core.domain.exceptions import (
    ConfigurationError,
    ContentStoreError,
    DocumentError,
    DocumentNotFoundError,
    DocumentProcessingError,
    EmbeddingDimensionError,
    EmbeddingError,
    EmbeddingUnavailableError,
    EmptyQueryError,
    InvalidChunkingConfigurationError,
    InvalidConfigurationError,
    MetadataStoreError,
    RagVaultError,
    RetrievalError,
    StorageError,
    UnsupportedDocumentTypeError,
    ValidationError,
    VectorStoreError,
    VectorStoreQueryError,
    VectorStoreWriteError,
)

# Apply @pytest.mark.unit to all tests in this module
pytestmark = pytest.mark.unit

ALL_EXCEPTIONS = [
    RagVaultError,
    ConfigurationError,
    InvalidConfigurationError,
    ValidationError,
    EmptyQueryError,
    InvalidChunkingConfigurationError,
    EmbeddingDimensionError,
    VectorStoreError,
    VectorStoreWriteError,
    VectorStoreQueryError,
    StorageError,
    ContentStoreError,
    MetadataStoreError,
    EmbeddingError,
    EmbeddingUnavailableError,
    RetrievalError,
    DocumentError,
    DocumentNotFoundError,
    UnsupportedDocumentTypeError,
    DocumentProcessingError,
]


class TestExceptionHierarchy:
    """Tests for the exception class hierarchy."""

    def test_rag_vault_error_is_base(self):
        """RagVaultError should be the base for all custom exceptions."""
        for exc_type in ALL_EXCEPTIONS:
            assert issubclass(exc_type, RagVaultError)

    def test_validation_errors(self):
        assert issubclass(InvalidChunkingConfigurationError, ValidationError)
        assert issubclass(EmbeddingDimensionError, ValidationError)
        assert issubclass(EmptyQueryError, ValidationError)

    def test_storage_errors(self):
        assert issubclass(ContentStoreError, StorageError)
        assert issubclass(MetadataStoreError, StorageError)
        assert issubclass(VectorStoreWriteError, VectorStoreError)

    def test_each_exception_has_unique_error_code(self):
        codes = {exc_type("test").error_code for exc_type in ALL_EXCEPTIONS}
        assert len(codes) == len(ALL_EXCEPTIONS)


class TestExceptionCreation:
    """Tests for creating and using exceptions."""

    def test_basic_exception_creation(self):
        exc = RagVaultError("Test error message")
        assert str(exc) == "Test error message"
        assert exc.message == "Test error message"
        assert exc.error_code == "RV_ERR_001"

    def test_exception_with_context(self):
        exc = VectorStoreWriteError("Write failed", context={"document_id": "doc1", "chunks": 3})
        assert exc.extra_context["document_id"] == "doc1"
        assert exc.extra_context["chunks"] == 3

    def test_exception_with_cause(self):
        original = OSError("Disk unavailable")
        exc = ContentStoreError("Read failed", cause=original)
        assert exc.cause is original

    def test_exception_captures_raise_site(self):
        def failing_operation():
            raise DocumentNotFoundError("missing")

        with pytest.raises(DocumentNotFoundError) as exc_info:
            failing_operation()

        assert exc_info.value.location.method_name == "failing_operation"
        assert exc_info.value.location.file_name == "test_exceptions.py"
        assert exc_info.value.location.line_number > 0


    def test_raise_site_skips_subclass_init(self):
        class WrappedError(ValidationError):
            def __init__(self, message):
                super().__init__(message, context={"wrapped": True})

        def validate():
            raise WrappedError("bad")

        with pytest.raises(WrappedError) as exc_info:
            validate()

        assert exc_info.value.location.method_name == "validate"
        assert exc_info.value.location.class_name == "<module>"


class TestExceptionToDict:
    """Tests for exception JSON serialization."""

    def test_to_dict_basic_structure(self):
        result = VectorStoreQueryError("Test error").to_dict()

        assert result["error"] == {
            "type": "VectorStoreQueryError",
            "code": "RV_VEC_003",
            "message": "Test error",
        }
        assert set(result["location"]) >= {"class", "method", "file", "line"}

    def test_to_dict_includes_cause(self):
        exc = ValidationError("Invalid input", cause=ValueError("Bad value"))
        result = exc.to_dict()

        assert result["cause"] == {"type": "ValueError", "message": "Bad value"}

    def test_to_dict_is_json_serializable(self):
        exc = EmbeddingUnavailableError("Offline", context={"url": "http://localhost:11434"})
        assert isinstance(json.dumps(exc.to_dict()), str)


class TestExceptionHandler:
    """Tests for exception handler utilities."""

    def test_format_custom_exception(self):
        result = format_exception_json(MetadataStoreError("Test", context={"path": "x"}))

        assert result["error"]["type"] == "MetadataStoreError"
        assert result["error"]["code"] == "RV_STO_003"

    def test_format_standard_exception(self):
        try:
            raise ValueError("Standard error")
        except ValueError as e:
            result = format_exception_json(e, include_trace=True)

        assert result["error"]["type"] == "ValueError"
        assert result["error"]["code"] == "PYTHON_ERR"
        assert result["error"]["message"] == "Standard error"
        assert result["location"]["method"] == "test_format_standard_exception"
        assert result["stack_trace"]

    def test_format_adds_extra_context(self):
        exc = DocumentNotFoundError("Test", context={"path": "original"})
        result = format_exception_json(exc, extra_context={"command": "add"})

        assert result["context"] == {"path": "original", "command": "add"}

    def test_get_error_code(self):
        assert get_error_code(InvalidChunkingConfigurationError("test")) == "RV_VAL_003"
        assert get_error_code(RuntimeError("test")) == "PYTHON_ERR"

    def test_log_exception_writes_json(self, caplog):
        with caplog.at_level("ERROR"):
            log_exception(RetrievalError("boom"), extra_context={"query": "q"})

        payload = json.loads(caplog.records[-1].getMessage())
        assert payload["error"]["code"] == "RV_RET_001"
        assert payload["context"]["query"] == "q"
