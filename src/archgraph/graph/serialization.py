"""graph-data.json: the machine-readable snapshot written next to the diagrams.

The snapshot doubles as the "old" graph for the next run's structural diff,
so ``graph_from_data`` rebuilds a Graph from it. Facts are not persisted; a
reloaded Module has an empty ``facts`` tuple.
"""

from __future__ import annotations

import json
from pathlib import Path
from types import MappingProxyType
from typing import Any

from ..exceptions import ArtifactError, ErrorCode
from ..logging_config import get_logger
from .models import Graph, ImportEdge, InheritsEdge, Module, TypeEntity

logger = get_logger(__name__)

SNAPSHOT_VERSION = 1


def graph_to_data(graph: Graph) -> dict[str, Any]:
    modules: dict[str, Any] = {}
    for path in graph.paths:
        module = graph.modules[path]
        modules[path] = {
            "exports": list(module.exports),
            "functions": list(module.functions),
            "imports": [
                {
                    "target": edge.target,
                    "specifiers": list(edge.names),
                    "whole_module": edge.whole_module,
                }
                for edge in graph.edges_from(path)
            ],
            "classes": [
                {
                    "name": t.name,
                    "extends": t.parent,
                    "extends_key": list(t.parent_key) if t.parent_key else None,
                    "relations": list(t.relations),
                    "methods": list(t.methods),
                    "properties": list(t.properties),
                }
                for t in sorted(graph.types_in(path), key=lambda t: t.name)
            ],
        }
    return {"version": SNAPSHOT_VERSION, "modules": modules}


def dumps_graph(graph: Graph) -> str:
    """Deterministic JSON text: sorted keys, 2-space indent, trailing newline."""
    return json.dumps(graph_to_data(graph), indent=2, sort_keys=True) + "\n"


def graph_from_data(data: dict[str, Any]) -> Graph:
    raw_modules = data.get("modules", {})
    modules: dict[str, Module] = {}
    edges: list[ImportEdge] = []
    types: list[TypeEntity] = []
    inherits: list[InheritsEdge] = []

    for path in sorted(raw_modules):
        entry = raw_modules[path]
        for imp in entry.get("imports", []):
            edges.append(
                ImportEdge(
                    path,
                    imp["target"],
                    tuple(sorted(imp.get("specifiers", []))),
                    bool(imp.get("whole_module", False)),
                )
            )
        for cls in entry.get("classes", []):
            raw_key = cls.get("extends_key")
            parent_key = (raw_key[0], raw_key[1]) if raw_key else None
            entity = TypeEntity(
                name=cls["name"],
                module=path,
                parent=cls.get("extends"),
                parent_key=parent_key,
                relations=tuple(cls.get("relations", [])),
                properties=tuple(sorted(cls.get("properties", []))),
                methods=tuple(sorted(cls.get("methods", []))),
            )
            types.append(entity)
            if parent_key is not None:
                inherits.append(InheritsEdge(parent=parent_key, child=entity.key))
        modules[path] = Module(
            path=path,
            imports=tuple(sorted({imp["target"] for imp in entry.get("imports", [])})),
            exports=tuple(sorted(set(entry.get("exports", [])))),
            functions=tuple(sorted(set(entry.get("functions", [])))),
            types=tuple(sorted({cls["name"] for cls in entry.get("classes", [])})),
        )

    return Graph(
        modules=MappingProxyType(modules),
        types=tuple(sorted(types, key=lambda t: (t.name, t.module))),
        import_edges=tuple(sorted(edges)),
        inherits_edges=tuple(sorted(set(inherits))),
    )


def loads_graph(text: str) -> Graph:
    return graph_from_data(json.loads(text))


def load_graph(path: Path) -> Graph:
    """Graph from a snapshot file; an empty Graph when the file does not exist.

    Raises:
        ArtifactError: If the file exists but is not a readable snapshot.
    """
    path = Path(path)
    if not path.exists():
        logger.info(f"No graph snapshot at {path}")
        return Graph.empty()
    try:
        return loads_graph(path.read_text(encoding="utf-8"))
    except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
        raise ArtifactError(path, f"invalid graph snapshot: {e}", code=ErrorCode.AG201) from e
