"""Graph snapshot: modules, types and the edges between them.

A Graph is built once per extraction pass and never mutated afterwards;
the previous pass's Graph is the "old" side of every comparison, so both
sides must stay untouched.

Edges:
    imports   Module -> Module, only between modules in the same snapshot
    inherits  TypeEntity -> TypeEntity (parent, child), at most one per child

Imports that could not be resolved are kept as DroppedImport records, never
as edges.
"""

from __future__ import annotations

import posixpath
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

from ..extraction.facts import Fact, MemberFact

# (module path, type name)
TypeKey = tuple[str, str]


@dataclass(frozen=True)
class Module:
    """One source file, identified by its canonical path.

    Attributes:
        path: Path relative to the base directory, forward slashes
        facts: Facts observed in the file (empty when reloaded from a snapshot)
        imports: Resolved import targets, sorted and de-duplicated
        exports: Exported symbol names, sorted and de-duplicated
        functions: Exported names that are functions, sorted
        types: Names of types declared here, sorted
    """

    path: str
    facts: tuple[Fact, ...] = ()
    imports: tuple[str, ...] = ()
    exports: tuple[str, ...] = ()
    functions: tuple[str, ...] = ()
    types: tuple[str, ...] = ()

    @property
    def directory(self) -> str:
        return posixpath.dirname(self.path) or "."

    @property
    def basename(self) -> str:
        return posixpath.basename(self.path)


@dataclass(frozen=True)
class TypeEntity:
    """A declared class/struct/interface.

    ``parent`` is the raw reference as written; ``parent_key`` is set only
    when that reference resolved to another type in the same graph. An
    unresolved parent stays as a display label.
    """

    name: str
    module: str
    parent: Optional[str] = None
    parent_key: Optional[TypeKey] = None
    relations: tuple[str, ...] = ()
    properties: tuple[str, ...] = ()
    methods: tuple[str, ...] = ()
    members: tuple[MemberFact, ...] = ()

    @property
    def key(self) -> TypeKey:
        return (self.module, self.name)

    @property
    def external_parent(self) -> Optional[str]:
        """Parent label when it did not resolve to a known type."""
        return self.parent if self.parent and self.parent_key is None else None


@dataclass(frozen=True, order=True)
class ImportEdge:
    """``source`` imports ``target``.

    ``names`` are the imported symbol names; ``whole_module`` is set when at
    least one import took the module as a whole (namespace import, module
    object, side-effect import).
    """

    source: str
    target: str
    names: tuple[str, ...] = ()
    whole_module: bool = False


@dataclass(frozen=True, order=True)
class InheritsEdge:
    parent: TypeKey
    child: TypeKey


@dataclass(frozen=True, order=True)
class DroppedImport:
    """An import that produced no edge.

    ``reason`` is "external" for bare/package specifiers and "unresolved"
    for relative specifiers that matched no known module.
    """

    module: str
    specifier: str
    reason: str


@dataclass(frozen=True)
class Graph:
    """Closed, immutable snapshot of one extraction pass."""

    modules: Mapping[str, Module] = field(default_factory=lambda: MappingProxyType({}))
    types: tuple[TypeEntity, ...] = ()
    import_edges: tuple[ImportEdge, ...] = ()
    inherits_edges: tuple[InheritsEdge, ...] = ()
    dropped: tuple[DroppedImport, ...] = ()

    @classmethod
    def empty(cls) -> "Graph":
        return cls()

    def __contains__(self, path: object) -> bool:
        return path in self.modules

    @property
    def paths(self) -> list[str]:
        return sorted(self.modules)

    def module(self, path: str) -> Optional[Module]:
        return self.modules.get(path)

    def type(self, key: TypeKey) -> Optional[TypeEntity]:
        for entity in self.types:
            if entity.key == key:
                return entity
        return None

    def types_in(self, path: str) -> list[TypeEntity]:
        return [t for t in self.types if t.module == path]

    def edges_into(self, path: str) -> list[ImportEdge]:
        return [e for e in self.import_edges if e.target == path]

    def edges_from(self, path: str) -> list[ImportEdge]:
        return [e for e in self.import_edges if e.source == path]

    def importers_of(self, path: str) -> list[str]:
        """Modules with an import edge into ``path``, sorted."""
        return sorted({e.source for e in self.import_edges if e.target == path})

    def subclasses_of(self, key: TypeKey) -> list[TypeKey]:
        """Types whose hierarchy parent is ``key``, sorted."""
        return sorted(e.child for e in self.inherits_edges if e.parent == key)
