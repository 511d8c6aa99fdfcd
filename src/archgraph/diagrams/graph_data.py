"""graph-data.json as a diagram artifact."""

from ..graph.models import Graph
from ..graph.serialization import dumps_graph
from .base import DiagramSerializer


class GraphDataSnapshot(DiagramSerializer):
    kind = "graph-data"
    filename = "graph-data.json"
    gated = False

    def render(self, graph: Graph) -> str:
        return dumps_graph(graph)
