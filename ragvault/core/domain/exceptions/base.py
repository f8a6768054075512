"""Root of the ragvault exception hierarchy.

A :class:`RagVaultError` records where it was raised, the lower-level error
it wraps (if any) and a context mapping, and renders all of that with
``to_dict()`` for the CLI and JSON logs. Subclasses only set ``error_code``.
"""

import inspect
import traceback
from dataclasses import dataclass, field
from datetime import UTC, datetime
from types import FrameType
from typing import Any


@dataclass
class RaiseSite:
    """Where an error was raised."""

    class_name: str
    method_name: str
    file_name: str
    line_number: int
    timestamp: str = field(default_factory=lambda: datetime.now(UTC).isoformat())

    @classmethod
    def from_frame(cls, frame: FrameType | None) -> "RaiseSite":
        if frame is None:
            return cls("<unknown>", "<unknown>", "<unknown>", 0)
        owner = frame.f_locals.get("self")
        return cls(
            class_name=type(owner).__name__ if owner is not None else "<module>",
            method_name=frame.f_code.co_name,
            file_name=frame.f_code.co_filename.replace("\\", "/").rsplit("/", 1)[-1],
            line_number=frame.f_lineno,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "class": self.class_name,
            "method": self.method_name,
            "file": self.file_name,
            "line": self.line_number,
            "timestamp": self.timestamp,
        }


def _caller_of_error_init() -> FrameType | None:
    # Skip this helper, then every RagVaultError.__init__ in a subclass chain
    frame = inspect.currentframe()
    frame = frame.f_back if frame else None
    while (
        frame is not None
        and frame.f_code.co_name == "__init__"
        and isinstance(frame.f_locals.get("self"), RagVaultError)
    ):
        frame = frame.f_back
    return frame


class RagVaultError(Exception):
    """Base class for every error ragvault raises.

    Adapters wrap the medium's own error::

        except sqlite3.Error as e:
            raise VectorStoreWriteError(
                "Failed to write chunk vectors",
                cause=e,
                context={"document_id": document_id},
            ) from e
    """

    error_code: str = "RV_ERR_001"

    def __init__(
        self,
        message: str,
        *,
        cause: Exception | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.extra_context = context or {}
        self.location = RaiseSite.from_frame(_caller_of_error_init())
        # Only meaningful while the wrapped exception is being handled
        self.stack_trace = traceback.format_exc() if cause else None

    def to_dict(self, include_trace: bool = False) -> dict[str, Any]:
        """Render as ``error``/``location`` plus ``context``, ``cause`` and trace when present."""
        result: dict[str, Any] = {
            "error": {
                "type": type(self).__name__,
                "code": self.error_code,
                "message": self.message,
            },
            "location": self.location.to_dict(),
        }
        if self.extra_context:
            result["context"] = self.extra_context
        if self.cause:
            result["cause"] = {"type": type(self.cause).__name__, "message": str(self.cause)}
        if include_trace and self.stack_trace:
            result["stack_trace"] = [line for line in self.stack_trace.splitlines() if line.strip()]
        return result
