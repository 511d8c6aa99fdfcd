"""Exact and fuzzy change detection for diagram artifacts."""

from .change_detector import (
    ArtifactCheck,
    ChangeDetector,
    Determinism,
    byte_histogram,
    fingerprint,
    has_changed,
    histogram_fingerprint,
    read_artifact,
    stable_fingerprint,
)

__all__ = [
    "ArtifactCheck",
    "ChangeDetector",
    "Determinism",
    "byte_histogram",
    "fingerprint",
    "has_changed",
    "histogram_fingerprint",
    "read_artifact",
    "stable_fingerprint",
]
