"""Fingerprint tracking and the review gate."""

from .controller import GateController, GateDecision, GateState, changed_kinds
from .store import FingerprintStore, InMemoryFingerprintStore, JsonFingerprintStore, TrackedState
from .vcs import find_project_root, staged_files

__all__ = [
    "GateController",
    "GateDecision",
    "GateState",
    "changed_kinds",
    "FingerprintStore",
    "InMemoryFingerprintStore",
    "JsonFingerprintStore",
    "TrackedState",
    "find_project_root",
    "staged_files",
]
