"""Base exception for archgraph."""

from typing import Any, Dict, Optional

from .taxonomy import ErrorCode


class ArchGraphError(Exception):
    """Base exception for all archgraph errors.

    ``recoverable`` errors degrade a pass (the offending input is skipped and
    reported); non-recoverable ones abort the whole operation.
    """

    code: ErrorCode = ErrorCode.AG501
    recoverable: bool = False

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, str]] = None,
        code: Optional[ErrorCode] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        if code is not None:
            self.code = code

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message

    def to_json(self) -> Dict[str, Any]:
        """Structured logging format."""
        return {
            "error_code": self.code.value,
            "category": self.code.category,
            "message": self.message,
            "details": dict(self.details),
            "recoverable": self.recoverable,
        }
