"""Persistence and artifact exceptions."""

from pathlib import Path
from typing import Optional, Union

from .base import ArchGraphError
from .taxonomy import ErrorCode


class PersistenceError(ArchGraphError):
    """Raised when the fingerprint store cannot be read or written."""

    code = ErrorCode.AG400

    def __init__(self, path: Union[str, Path], reason: str, code: Optional[ErrorCode] = None):
        super().__init__(
            f"Fingerprint store unusable: {path}",
            details={"path": str(path), "reason": reason},
            code=code,
        )
        self.path = str(path)
        self.reason = reason


class ArtifactError(ArchGraphError):
    """Raised when a diagram artifact or graph snapshot cannot be read or written."""

    code = ErrorCode.AG300

    def __init__(self, path: Union[str, Path], reason: str, code: Optional[ErrorCode] = None):
        super().__init__(
            f"Artifact unusable: {path}",
            details={"path": str(path), "reason": reason},
            code=code,
        )
        self.path = str(path)
        self.reason = reason
