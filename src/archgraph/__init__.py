"""
archgraph - Architecture diagrams derived from source code

Extracts structural facts (imports, types, exports) from a source tree,
builds a closed module/type graph, renders it to deterministic Mermaid
diagrams, detects when committed diagrams went stale, and gates commits
that change structure without a staged architecture review.
"""

__version__ = "0.1.0"
__author__ = "Naman Agarwal"

from .analysis import ReviewReport, StructuralDiffAnalyzer
from .config import DiagramConfig, load_config
from .detection import ChangeDetector, Determinism
from .gate import GateController, GateDecision, GateState
from .graph import Graph, build_graph
from .pipeline import DiagramPipeline

__all__ = [
    "DiagramPipeline",  # Main entry point
    "DiagramConfig",
    "load_config",
    "Graph",
    "build_graph",
    "ChangeDetector",
    "Determinism",
    "StructuralDiffAnalyzer",
    "ReviewReport",
    "GateController",
    "GateDecision",
    "GateState",
]
