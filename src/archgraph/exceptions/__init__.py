"""Exception hierarchy for archgraph."""

from .base import ArchGraphError
from .config import ConfigurationError, InvalidConfigError
from .extraction import ExtractionError, ParseError, ToolInvocationError
from .gate import ArtifactError, PersistenceError
from .taxonomy import ErrorCode

__all__ = [
    "ArchGraphError",
    "ErrorCode",
    "ExtractionError",
    "ParseError",
    "ToolInvocationError",
    "PersistenceError",
    "ArtifactError",
    "ConfigurationError",
    "InvalidConfigError",
]
