"""Configuration exceptions."""

from typing import Any

from .base import ArchGraphError
from .taxonomy import ErrorCode


class ConfigurationError(ArchGraphError):
    """Base class for configuration-related errors."""

    code = ErrorCode.AG500


class InvalidConfigError(ConfigurationError):
    """Raised when a configuration value is invalid."""

    code = ErrorCode.AG501

    def __init__(self, key: str, value: Any, reason: str):
        super().__init__(
            f"Invalid configuration for {key}: {value}",
            details={"key": key, "value": str(value), "reason": reason},
        )
        self.key = key
        self.value = value
        self.reason = reason
