"""Structural diff between two graph snapshots.

Given the old Graph (empty if none existed) and the new one, the analyzer
reports:

    1. Module delta: added/removed by path; modified when exports, resolved
       imports or owned types differ.
    2. Type delta: matched by (name, module); properties, methods and
       parent reference compared separately and labelled.
    3. Consumers: for every added or modified module/type, who imports it
       or inherits from it in the new Graph.
    4. Dead ends: exported symbols nothing imports, minus entry points.
    5. Orphans: modules with no resolved imports and no exports.

Everything here reads the two graphs only; no tool is invoked.
"""

from __future__ import annotations

from dataclasses import dataclass
from fnmatch import fnmatchcase
from typing import Any, Iterable, Optional, Sequence

from ..graph.models import Graph, TypeEntity, TypeKey
from ..logging_config import get_logger

logger = get_logger(__name__)

PROPERTIES = "properties"
METHODS = "methods"
PARENT = "parent"
EXPORTS = "exports"
IMPORTS = "imports"
TYPES = "types"


def _diff(old: Iterable[str], new: Iterable[str]) -> tuple[tuple[str, ...], tuple[str, ...]]:
    old_set, new_set = set(old), set(new)
    return tuple(sorted(new_set - old_set)), tuple(sorted(old_set - new_set))


def type_label(key: TypeKey) -> str:
    return f"{key[1]} ({key[0]})"


@dataclass(frozen=True)
class TypeDelta:
    """Labelled change to a type present in both snapshots."""

    key: TypeKey
    changes: tuple[str, ...]
    added_properties: tuple[str, ...] = ()
    removed_properties: tuple[str, ...] = ()
    added_methods: tuple[str, ...] = ()
    removed_methods: tuple[str, ...] = ()
    old_parent: Optional[str] = None
    new_parent: Optional[str] = None

    @property
    def label(self) -> str:
        return type_label(self.key)


@dataclass(frozen=True)
class ModuleDelta:
    """Labelled change to a module present in both snapshots."""

    path: str
    changes: tuple[str, ...]
    added_exports: tuple[str, ...] = ()
    removed_exports: tuple[str, ...] = ()
    added_imports: tuple[str, ...] = ()
    removed_imports: tuple[str, ...] = ()
    added_types: tuple[str, ...] = ()
    removed_types: tuple[str, ...] = ()


@dataclass(frozen=True)
class ConsumerSet:
    """Reverse edges of one changed entity in the new graph.

    ``kind`` is "module" or "type"; ``importers`` are module paths and
    ``subclasses`` type keys.
    """

    entity: str
    kind: str
    importers: tuple[str, ...] = ()
    subclasses: tuple[TypeKey, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.importers and not self.subclasses


@dataclass(frozen=True)
class DeadEnd:
    module: str
    symbol: str


@dataclass(frozen=True)
class ReviewReport:
    added_modules: tuple[str, ...] = ()
    removed_modules: tuple[str, ...] = ()
    modified_modules: tuple[ModuleDelta, ...] = ()
    added_types: tuple[TypeKey, ...] = ()
    removed_types: tuple[TypeKey, ...] = ()
    modified_types: tuple[TypeDelta, ...] = ()
    consumers: tuple[ConsumerSet, ...] = ()
    dead_ends: tuple[DeadEnd, ...] = ()
    orphans: tuple[str, ...] = ()

    @property
    def has_structural_changes(self) -> bool:
        return bool(
            self.added_modules
            or self.removed_modules
            or self.modified_modules
            or self.added_types
            or self.removed_types
            or self.modified_types
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "modules": {
                "added": list(self.added_modules),
                "removed": list(self.removed_modules),
                "modified": [
                    {
                        "path": d.path,
                        "changes": list(d.changes),
                        "added_exports": list(d.added_exports),
                        "removed_exports": list(d.removed_exports),
                        "added_imports": list(d.added_imports),
                        "removed_imports": list(d.removed_imports),
                        "added_types": list(d.added_types),
                        "removed_types": list(d.removed_types),
                    }
                    for d in self.modified_modules
                ],
            },
            "types": {
                "added": [type_label(k) for k in self.added_types],
                "removed": [type_label(k) for k in self.removed_types],
                "modified": [
                    {
                        "type": d.label,
                        "changes": list(d.changes),
                        "added_properties": list(d.added_properties),
                        "removed_properties": list(d.removed_properties),
                        "added_methods": list(d.added_methods),
                        "removed_methods": list(d.removed_methods),
                        "old_parent": d.old_parent,
                        "new_parent": d.new_parent,
                    }
                    for d in self.modified_types
                ],
            },
            "consumers": [
                {
                    "entity": c.entity,
                    "kind": c.kind,
                    "importers": list(c.importers),
                    "subclasses": [type_label(k) for k in c.subclasses],
                }
                for c in self.consumers
            ],
            "dead_ends": [{"module": d.module, "symbol": d.symbol} for d in self.dead_ends],
            "orphans": list(self.orphans),
        }


def is_entry_point(symbol: str, module: str, patterns: Sequence[str]) -> bool:
    """True when the symbol name, module path or module file name matches a pattern."""
    basename = module.rsplit("/", 1)[-1]
    return any(
        fnmatchcase(symbol, p) or fnmatchcase(module, p) or fnmatchcase(basename, p)
        for p in patterns
    )


def diff_type(old: TypeEntity, new: TypeEntity) -> Optional[TypeDelta]:
    added_props, removed_props = _diff(old.properties, new.properties)
    added_methods, removed_methods = _diff(old.methods, new.methods)
    changes = []
    if added_props or removed_props:
        changes.append(PROPERTIES)
    if added_methods or removed_methods:
        changes.append(METHODS)
    if (old.parent, old.parent_key) != (new.parent, new.parent_key):
        changes.append(PARENT)
    if not changes:
        return None
    return TypeDelta(
        key=new.key,
        changes=tuple(changes),
        added_properties=added_props,
        removed_properties=removed_props,
        added_methods=added_methods,
        removed_methods=removed_methods,
        old_parent=old.parent,
        new_parent=new.parent,
    )


class StructuralDiffAnalyzer:
    """Computes a ReviewReport from two graph snapshots."""

    def __init__(self, entry_point_patterns: Sequence[str] = ()) -> None:
        self.entry_point_patterns = tuple(entry_point_patterns)

    def analyze(self, old: Optional[Graph], new: Graph) -> ReviewReport:
        old = old if old is not None else Graph.empty()

        added_modules, removed_modules = _diff(old.modules, new.modules)

        old_types = {t.key: t for t in old.types}
        new_types = {t.key: t for t in new.types}
        added_types = tuple(sorted(set(new_types) - set(old_types), key=lambda k: (k[1], k[0])))
        removed_types = tuple(sorted(set(old_types) - set(new_types), key=lambda k: (k[1], k[0])))
        modified_types = []
        for key in sorted(set(old_types) & set(new_types), key=lambda k: (k[1], k[0])):
            delta = diff_type(old_types[key], new_types[key])
            if delta is not None:
                modified_types.append(delta)
        changed_type_modules = {d.key[0] for d in modified_types}

        modified_modules = []
        for path in sorted(set(old.modules) & set(new.modules)):
            delta = self._diff_module(old, new, path, path in changed_type_modules)
            if delta is not None:
                modified_modules.append(delta)

        report = ReviewReport(
            added_modules=added_modules,
            removed_modules=removed_modules,
            modified_modules=tuple(modified_modules),
            added_types=added_types,
            removed_types=removed_types,
            modified_types=tuple(modified_types),
            consumers=self._consumers(
                new,
                list(added_modules) + [d.path for d in modified_modules],
                list(added_types) + [d.key for d in modified_types],
            ),
            dead_ends=self.dead_ends(new),
            orphans=self.orphans(new),
        )
        logger.info(
            f"Review: +{len(added_modules)} -{len(removed_modules)} "
            f"~{len(modified_modules)} modules, "
            f"+{len(added_types)} -{len(removed_types)} ~{len(modified_types)} types, "
            f"{len(report.dead_ends)} dead ends, {len(report.orphans)} orphans"
        )
        return report

    @staticmethod
    def _diff_module(
        old: Graph, new: Graph, path: str, types_changed: bool
    ) -> Optional[ModuleDelta]:
        before, after = old.modules[path], new.modules[path]
        added_exports, removed_exports = _diff(before.exports, after.exports)
        added_imports, removed_imports = _diff(before.imports, after.imports)
        added_types, removed_types = _diff(before.types, after.types)
        changes = []
        if added_exports or removed_exports:
            changes.append(EXPORTS)
        if added_imports or removed_imports:
            changes.append(IMPORTS)
        if added_types or removed_types or types_changed:
            changes.append(TYPES)
        if not changes:
            return None
        return ModuleDelta(
            path=path,
            changes=tuple(changes),
            added_exports=added_exports,
            removed_exports=removed_exports,
            added_imports=added_imports,
            removed_imports=removed_imports,
            added_types=added_types,
            removed_types=removed_types,
        )

    @staticmethod
    def _consumers(
        graph: Graph, modules: Iterable[str], types: Iterable[TypeKey]
    ) -> tuple[ConsumerSet, ...]:
        found = []
        for path in sorted(set(modules)):
            importers = tuple(graph.importers_of(path))
            found.append(ConsumerSet(entity=path, kind="module", importers=importers))
        for key in sorted(set(types), key=lambda k: (k[1], k[0])):
            importers = sorted(
                {
                    e.source
                    for e in graph.edges_into(key[0])
                    if e.whole_module or key[1] in e.names
                }
            )
            found.append(
                ConsumerSet(
                    entity=type_label(key),
                    kind="type",
                    importers=tuple(importers),
                    subclasses=tuple(graph.subclasses_of(key)),
                )
            )
        return tuple(found)

    def dead_ends(self, graph: Graph) -> tuple[DeadEnd, ...]:
        """Exported symbols with no importer, entry points excluded."""
        found = []
        for path in graph.paths:
            module = graph.modules[path]
            if not module.exports:
                continue
            incoming = graph.edges_into(path)
            if any(e.whole_module for e in incoming):
                continue
            consumed = {name for e in incoming for name in e.names}
            for symbol in module.exports:
                if symbol in consumed:
                    continue
                if is_entry_point(symbol, path, self.entry_point_patterns):
                    continue
                found.append(DeadEnd(path, symbol))
        return tuple(found)

    @staticmethod
    def orphans(graph: Graph) -> tuple[str, ...]:
        """Modules with an empty resolved-import set and an empty export set."""
        return tuple(
            path
            for path, module in sorted(graph.modules.items())
            if not module.imports and not module.exports
        )
