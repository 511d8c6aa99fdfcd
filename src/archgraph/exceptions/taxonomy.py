"""Error codes for archgraph failures.

Error Code Convention:
    AG1xx - Extraction errors
    AG2xx - Graph errors
    AG3xx - Change detection errors
    AG4xx - Gate / persistence errors
    AG5xx - Configuration errors
"""

from __future__ import annotations

from enum import Enum


class ErrorCode(Enum):
    """Structured error codes for logs and JSON output."""

    # Extraction errors (AG1xx)
    AG100 = "AG100"  # Source file unreadable
    AG101 = "AG101"  # Source file failed to parse
    AG102 = "AG102"  # External tool missing
    AG103 = "AG103"  # External tool failed
    AG104 = "AG104"  # No adapter for file type

    # Graph errors (AG2xx)
    AG200 = "AG200"  # Import did not resolve to a known module
    AG201 = "AG201"  # Graph snapshot unreadable

    # Change detection errors (AG3xx)
    AG300 = "AG300"  # Artifact unreadable
    AG301 = "AG301"  # Artifact write failed

    # Gate / persistence errors (AG4xx)
    AG400 = "AG400"  # Fingerprint store unreadable
    AG401 = "AG401"  # Fingerprint store unwritable
    AG402 = "AG402"  # Git change set unavailable

    # Configuration errors (AG5xx)
    AG500 = "AG500"  # Config file unreadable
    AG501 = "AG501"  # Invalid config value

    @property
    def category(self) -> str:
        return _CATEGORIES[self.value[2]]


_CATEGORIES = {
    "1": "extraction",
    "2": "graph",
    "3": "detection",
    "4": "gate",
    "5": "configuration",
}
