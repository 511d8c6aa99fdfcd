"""Structural facts extracted from a single source file.

A fact is one observation made by an extraction adapter:
    - ImportFact: a raw import specifier plus the names it binds
    - TypeDeclarationFact: a class/struct/interface with its members
    - MemberFact: a property or method inside a type declaration
    - ExportedSymbolFact: a name the module makes available to importers

Facts are immutable and carry no resolved information; resolution into
edges is the graph builder's job.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Mapping, Optional, Union

# Exported-symbol sentinel for an unnamed default export (``export default ...``).
DEFAULT_EXPORT = "default"

# Imported-name marker for a namespace import (``import * as ns``).
NAMESPACE_IMPORT = "*"


class FactKind(Enum):
    IMPORT = "import"
    TYPE_DECLARATION = "type_declaration"
    MEMBER = "member"
    EXPORTED_SYMBOL = "exported_symbol"


class MemberKind(Enum):
    PROPERTY = "property"
    METHOD = "method"


class Accessor(Enum):
    GET = "get"
    SET = "set"


@dataclass(frozen=True)
class ImportFact:
    """An import statement as written in source.

    Attributes:
        specifier: Raw module specifier ("./models", "../util/io", "react").
            Relative specifiers start with "."; "/" anchors at the base
            directory or a source root (Python absolute imports use this).
        names: Imported symbol names, in source order. DEFAULT_EXPORT for a
            default import, NAMESPACE_IMPORT for a namespace import. Empty
            when the whole module is imported for its side effects or as a
            module object.
        bindings: Local names bound by the import, parallel to ``names``.
    """

    specifier: str
    names: tuple[str, ...] = ()
    bindings: tuple[str, ...] = ()

    kind = FactKind.IMPORT

    @property
    def is_relative(self) -> bool:
        return self.specifier.startswith((".", "/"))


@dataclass(frozen=True)
class MemberFact:
    """A property or method declared in a type body."""

    name: str
    member_kind: MemberKind
    is_static: bool = False
    accessor: Optional[Accessor] = None

    kind = FactKind.MEMBER

    @property
    def label(self) -> str:
        """Display form: ``[static ][get |set ]name[()]``."""
        prefix = "static " if self.is_static else ""
        if self.member_kind is MemberKind.PROPERTY:
            return f"{prefix}{self.name}"
        accessor = f"{self.accessor.value} " if self.accessor else ""
        return f"{prefix}{accessor}{self.name}()"


@dataclass(frozen=True)
class TypeDeclarationFact:
    """A declared class/struct/interface.

    Attributes:
        name: Declared name
        parent: Raw reference to the hierarchy parent (simple or dotted name)
        members: Members in declaration order
        relations: Further supertypes (extra bases, implemented interfaces);
            kept for display only, they never become hierarchy edges
    """

    name: str
    parent: Optional[str] = None
    members: tuple[MemberFact, ...] = ()
    relations: tuple[str, ...] = ()

    kind = FactKind.TYPE_DECLARATION

    @property
    def properties(self) -> list[str]:
        return sorted(m.label for m in self.members if m.member_kind is MemberKind.PROPERTY)

    @property
    def methods(self) -> list[str]:
        return sorted(m.label for m in self.members if m.member_kind is MemberKind.METHOD)


@dataclass(frozen=True)
class ExportedSymbolFact:
    """A name exported by a module.

    ``symbol_kind`` is "function", "class", "variable" or None when the
    declaration kind is unknown (re-exports, ``__all__`` entries).
    """

    name: str
    symbol_kind: Optional[str] = None

    kind = FactKind.EXPORTED_SYMBOL

    @property
    def is_default(self) -> bool:
        return self.name == DEFAULT_EXPORT


Fact = Union[ImportFact, TypeDeclarationFact, MemberFact, ExportedSymbolFact]


@dataclass(frozen=True)
class ExtractionWarning:
    """A per-file extraction failure surfaced alongside a partial result."""

    path: str
    message: str


@dataclass(frozen=True)
class FileFacts:
    """All facts observed in one file during one extraction pass."""

    path: str
    facts: tuple[Fact, ...] = field(default_factory=tuple)

    def of_kind(self, kind: FactKind) -> list[Any]:
        return [f for f in self.facts if f.kind is kind]

    @property
    def imports(self) -> list[ImportFact]:
        return self.of_kind(FactKind.IMPORT)

    @property
    def types(self) -> list[TypeDeclarationFact]:
        return self.of_kind(FactKind.TYPE_DECLARATION)

    @property
    def exports(self) -> list[ExportedSymbolFact]:
        return self.of_kind(FactKind.EXPORTED_SYMBOL)


def fact_to_dict(fact: Fact) -> dict[str, Any]:
    """Canonical, JSON-ready form of a fact."""
    if isinstance(fact, ImportFact):
        return {
            "kind": fact.kind.value,
            "specifier": fact.specifier,
            "names": list(fact.names),
            "bindings": list(fact.bindings),
        }
    if isinstance(fact, MemberFact):
        return {
            "kind": fact.kind.value,
            "name": fact.name,
            "member_kind": fact.member_kind.value,
            "static": fact.is_static,
            "accessor": fact.accessor.value if fact.accessor else None,
        }
    if isinstance(fact, TypeDeclarationFact):
        return {
            "kind": fact.kind.value,
            "name": fact.name,
            "parent": fact.parent,
            "members": [fact_to_dict(m) for m in fact.members],
            "relations": list(fact.relations),
        }
    return {"kind": fact.kind.value, "name": fact.name, "symbol_kind": fact.symbol_kind}


def fact_set_digest(facts_by_path: Union[Mapping[str, Iterable[Fact]], Iterable[FileFacts]]) -> str:
    """SHA-256 over the canonical JSON of every file's facts, ordered by path.

    Facts keep their in-file order (it is part of the observation); files are
    sorted so traversal order never changes the digest.
    """
    if isinstance(facts_by_path, Mapping):
        items = facts_by_path.items()
    else:
        items = ((ff.path, ff.facts) for ff in facts_by_path)
    payload = {path: [fact_to_dict(f) for f in facts] for path, facts in items}
    canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
