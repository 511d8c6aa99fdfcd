"""Graph model, builder and snapshot serialization."""

from .builder import build_graph, match_module, resolve_specifier
from .models import DroppedImport, Graph, ImportEdge, InheritsEdge, Module, TypeEntity, TypeKey
from .serialization import dumps_graph, graph_from_data, graph_to_data, load_graph, loads_graph

__all__ = [
    "build_graph",
    "match_module",
    "resolve_specifier",
    "DroppedImport",
    "Graph",
    "ImportEdge",
    "InheritsEdge",
    "Module",
    "TypeEntity",
    "TypeKey",
    "dumps_graph",
    "graph_from_data",
    "graph_to_data",
    "load_graph",
    "loads_graph",
]
