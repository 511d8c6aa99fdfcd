"""Mermaid renderings of the module and type graphs.

Ordering rules (all lexicographic):
    - module diagram: one subgraph per directory, subgraphs by directory
      path, nodes by file name, then edges by (source, target)
    - type diagram: class blocks by name, properties then methods each
      sorted inside a block, then inheritance edges by (parent, child)
"""

from __future__ import annotations

import re
from collections import Counter, defaultdict

from ..graph.models import Graph, TypeEntity, TypeKey
from .base import DiagramSerializer

_ID_UNSAFE = re.compile(r"[/\\.\-]")


def mermaid_id(path: str) -> str:
    """Node id for a module path: ``pkg/sub-mod.js`` -> ``pkg_sub_mod_js``."""
    return _ID_UNSAFE.sub("_", path)


class ModuleDependencyDiagram(DiagramSerializer):
    """``graph LR`` flowchart of import edges, grouped by directory."""

    kind = "module-dependencies"
    filename = "module-dependencies.mmd"

    def render(self, graph: Graph) -> str:
        lines = ["graph LR"]

        groups: dict[str, list[str]] = defaultdict(list)
        for module in graph.modules.values():
            groups[module.directory].append(module.path)

        for directory in sorted(groups):
            lines.append(f"    subgraph {directory}")
            for path in sorted(groups[directory]):
                label = graph.modules[path].basename
                lines.append(f'        {mermaid_id(path)}["{label}"]')
            lines.append("    end")

        edges = sorted({(e.source, e.target) for e in graph.import_edges})
        for source, target in edges:
            lines.append(f"    {mermaid_id(source)} --> {mermaid_id(target)}")

        return "\n".join(lines) + "\n"


class ClassHierarchyDiagram(DiagramSerializer):
    """``classDiagram`` of declared types and their single parent edge."""

    kind = "class-hierarchy"
    filename = "class-hierarchy.mmd"

    def render(self, graph: Graph) -> str:
        lines = ["classDiagram"]
        ids = self._class_ids(graph)

        for entity in sorted(graph.types, key=lambda t: (t.name, t.module)):
            class_id = ids[entity.key]
            lines.append(f"    class {class_id} {{")
            for prop in sorted(entity.properties):
                lines.append(f"        +{prop}")
            for method in sorted(entity.methods):
                lines.append(f"        +{method}")
            lines.append("    }")
            lines.append(f'    note for {class_id} "{self._note(entity)}"')

        edges = sorted({(ids[e.parent], ids[e.child]) for e in graph.inherits_edges})
        for parent, child in edges:
            lines.append(f"    {parent} <|-- {child}")

        return "\n".join(lines) + "\n"

    @staticmethod
    def _class_ids(graph: Graph) -> dict[TypeKey, str]:
        """Type name, suffixed with the module id when the name is declared twice."""
        counts = Counter(t.name for t in graph.types)
        return {
            t.key: t.name if counts[t.name] == 1 else f"{t.name}__{mermaid_id(t.module)}"
            for t in graph.types
        }

    @staticmethod
    def _note(entity: TypeEntity) -> str:
        parts = [entity.module]
        if entity.external_parent:
            parts.append(f"extends {entity.external_parent}")
        if entity.relations:
            parts.append(f"with {', '.join(sorted(entity.relations))}")
        return "; ".join(parts)
