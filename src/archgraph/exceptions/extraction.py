"""Extraction-related exceptions: unparseable files and external tools."""

from pathlib import Path
from typing import Optional, Sequence, Union

from .base import ArchGraphError
from .taxonomy import ErrorCode


class ExtractionError(ArchGraphError):
    """Raised when a single source file cannot be read or parsed.

    Recoverable: the file contributes no facts and the pass continues.
    """

    code = ErrorCode.AG101
    recoverable = True

    def __init__(self, path: Union[str, Path], reason: str, code: Optional[ErrorCode] = None):
        super().__init__(
            f"Failed to extract facts from {path}: {reason}",
            details={"path": str(path), "reason": reason},
            code=code,
        )
        self.path = str(path)
        self.reason = reason


# The per-file failure is what other tools call a parse error.
ParseError = ExtractionError


class ToolInvocationError(ArchGraphError):
    """Raised when an external extraction tool cannot be run at all."""

    code = ErrorCode.AG103

    def __init__(
        self,
        tool: str,
        reason: str,
        command: Optional[Sequence[str]] = None,
        code: Optional[ErrorCode] = None,
    ):
        details = {"tool": tool, "reason": reason}
        if command:
            details["command"] = " ".join(command)
        super().__init__(f"Could not run {tool}: {reason}", details=details, code=code)
        self.tool = tool
        self.reason = reason
