"""Base interface for diagram serializers."""

from abc import ABC, abstractmethod

from ..detection import Determinism
from ..graph.models import Graph


class DiagramSerializer(ABC):
    """Renders a Graph into the text of one artifact file.

    Implementations must be deterministic: the same Graph always yields
    byte-identical text.
    """

    #: Diagram kind, used as the fingerprint key
    kind: str = ""
    #: Artifact file name inside the diagrams directory
    filename: str = ""
    determinism: Determinism = Determinism.EXACT
    #: Whether the gate tracks this artifact's fingerprint
    gated: bool = True

    @abstractmethod
    def render(self, graph: Graph) -> str:
        """Return the artifact text, newline-terminated."""
