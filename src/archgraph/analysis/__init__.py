"""Structural diff, consumer, dead-end and orphan analysis."""

from .review import (
    ConsumerSet,
    DeadEnd,
    ModuleDelta,
    ReviewReport,
    StructuralDiffAnalyzer,
    TypeDelta,
    is_entry_point,
)

__all__ = [
    "ConsumerSet",
    "DeadEnd",
    "ModuleDelta",
    "ReviewReport",
    "StructuralDiffAnalyzer",
    "TypeDelta",
    "is_entry_point",
]
