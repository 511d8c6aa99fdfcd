"""Deterministic diagram serializers."""

from .base import DiagramSerializer
from .graph_data import GraphDataSnapshot
from .mermaid import ClassHierarchyDiagram, ModuleDependencyDiagram, mermaid_id


def default_serializers() -> list[DiagramSerializer]:
    """Serializers run on every pass, in artifact-name order."""
    return [ClassHierarchyDiagram(), GraphDataSnapshot(), ModuleDependencyDiagram()]


__all__ = [
    "DiagramSerializer",
    "GraphDataSnapshot",
    "ClassHierarchyDiagram",
    "ModuleDependencyDiagram",
    "default_serializers",
    "mermaid_id",
]
