"""Graph construction from per-file facts.

Usage:
    graph = build_graph(result.facts_by_path, extractor.resolution)

The builder is a pure function of the fact set: modules are processed in
sorted path order and every output collection is sorted, so the order in
which files were discovered or extracted never shows up in the Graph.
"""

from __future__ import annotations

import posixpath
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from ..extraction.base import ResolutionRules
from ..extraction.facts import (
    DEFAULT_EXPORT,
    NAMESPACE_IMPORT,
    Fact,
    FactKind,
    ImportFact,
    TypeDeclarationFact,
)
from ..logging_config import get_logger
from .models import (
    DroppedImport,
    Graph,
    ImportEdge,
    InheritsEdge,
    Module,
    TypeEntity,
    TypeKey,
)

logger = get_logger(__name__)


def resolve_specifier(specifier: str, importer: str) -> Optional[str]:
    """Resolve a relative specifier against the importing module's directory.

    Returns a normalized path relative to the base directory, or None for
    bare (package-style) specifiers. A leading "/" anchors at the base
    directory or at one of the source roots passed to ``build_graph``.

    >>> resolve_specifier("./b", "pkg/a.js")
    'pkg/b'
    >>> resolve_specifier("../util/io", "pkg/sub/a.js")
    'pkg/util/io'
    >>> resolve_specifier("react", "pkg/a.js") is None
    True
    """
    if specifier.startswith("/"):
        joined = specifier.lstrip("/")
    elif specifier.startswith("."):
        joined = posixpath.join(posixpath.dirname(importer), specifier)
    else:
        return None
    return posixpath.normpath(joined or ".")


def match_module(resolved: str, known: Iterable[str], rules: ResolutionRules) -> Optional[str]:
    """First known module path the resolved path names under ``rules``."""
    known_set = known if isinstance(known, (set, frozenset, Mapping)) else set(known)
    for suffix in rules.suffixes:
        if suffix.startswith("/"):
            candidate = posixpath.normpath(resolved + suffix)
        else:
            candidate = resolved + suffix
        if candidate in known_set:
            return candidate
    return None


class _EdgeAccumulator:
    """Merges repeated imports of the same target into one edge."""

    def __init__(self) -> None:
        self._names: dict[tuple[str, str], set[str]] = {}
        self._whole: dict[tuple[str, str], bool] = {}

    def add(self, source: str, target: str, names: Iterable[str], whole_module: bool) -> None:
        key = (source, target)
        self._names.setdefault(key, set()).update(names)
        self._whole[key] = self._whole.get(key, False) or whole_module

    def edges(self) -> list[ImportEdge]:
        return [
            ImportEdge(key[0], key[1], tuple(sorted(self._names[key])), self._whole[key])
            for key in sorted(self._names)
        ]


def _names_project_package(top: str, known: frozenset[str], roots: tuple[str, ...]) -> bool:
    """Whether the first segment of an anchored path is a module or package under some root."""
    for root in roots:
        prefix = posixpath.join(root, top) if root else top
        if any(p == prefix or p.startswith((prefix + "/", prefix + ".")) for p in known):
            return True
    return False


def _lookup(
    resolved: str,
    anchored: bool,
    known: frozenset[str],
    rules: ResolutionRules,
    roots: tuple[str, ...],
) -> Optional[str]:
    if not anchored:
        return match_module(resolved, known, rules)
    for root in roots:
        found = match_module(posixpath.join(root, resolved) if root else resolved, known, rules)
        if found is not None:
            return found
    return None


def _resolve_imports(
    path: str,
    imports: list[ImportFact],
    known: frozenset[str],
    rules: ResolutionRules,
    edges: _EdgeAccumulator,
    dropped: list[DroppedImport],
    roots: tuple[str, ...] = ("",),
) -> dict[str, list[tuple[str, str]]]:
    """Add this module's import edges; return binding -> [(target, imported name)]."""
    bindings: dict[str, list[tuple[str, str]]] = {}

    def bind(fact: ImportFact, index: int, target: str, imported: str) -> None:
        if index < len(fact.bindings):
            bindings.setdefault(fact.bindings[index], []).append((target, imported))

    for fact in imports:
        base = resolve_specifier(fact.specifier, path)
        if base is None:
            dropped.append(DroppedImport(path, fact.specifier, "external"))
            continue

        anchored = fact.specifier.startswith("/")
        target = _lookup(base, anchored, known, rules, roots)
        remaining: list[tuple[int, str]] = []
        for index, name in enumerate(fact.names):
            submodule = None
            if rules.names_may_be_modules and name != NAMESPACE_IMPORT:
                submodule = _lookup(posixpath.join(base, name), anchored, known, rules, roots)
            if submodule is not None and submodule != path:
                edges.add(path, submodule, (), True)
                bind(fact, index, submodule, NAMESPACE_IMPORT)
            else:
                remaining.append((index, name))

        if not fact.names or remaining:
            if target is None:
                if anchored and not _names_project_package(base.split("/")[0], known, roots):
                    dropped.append(DroppedImport(path, fact.specifier, "external"))
                    continue
                dropped.append(DroppedImport(path, fact.specifier, "unresolved"))
                logger.debug(f"{path}: import '{fact.specifier}' matches no known module")
                continue
            if target == path:
                continue
            names = [name for _, name in remaining]
            whole = not fact.names or NAMESPACE_IMPORT in names
            edges.add(path, target, (n for n in names if n != NAMESPACE_IMPORT), whole)
            for index, name in remaining:
                bind(fact, index, target, name)
    return bindings


def _resolve_parent(
    ref: str,
    child_module: str,
    bindings: dict[str, list[tuple[str, str]]],
    by_key: dict[TypeKey, TypeEntity],
    by_name: dict[str, list[TypeKey]],
) -> Optional[TypeKey]:
    """Find the type a parent reference names, or None.

    Tried in order: an import binding (``Base``, ``ns.Base``, ``mod.Base``),
    a type of that name in the same module, then a unique type of that
    simple name anywhere in the graph.
    """
    head, _, rest = ref.partition(".")
    simple = ref.rsplit(".", 1)[-1]

    for target, imported in bindings.get(head, []):
        if rest:
            wanted = rest.rsplit(".", 1)[-1]
        elif imported in (DEFAULT_EXPORT, NAMESPACE_IMPORT):
            candidates = [k for k in by_name.get(head, []) if k[0] == target]
            if len(candidates) == 1:
                return candidates[0]
            defaults = [k for k in by_key if k[0] == target]
            if imported == DEFAULT_EXPORT and len(defaults) == 1:
                return defaults[0]
            continue
        else:
            wanted = imported
        if (target, wanted) in by_key:
            return (target, wanted)

    if not rest and (child_module, simple) in by_key:
        return (child_module, simple)

    candidates = by_name.get(simple, [])
    if rest:
        qualifier = ref.rsplit(".", 1)[0].rsplit(".", 1)[-1]
        qualified = [k for k in candidates if _module_stem(k[0]) == qualifier]
        if len(qualified) == 1:
            return qualified[0]
    if len(candidates) == 1:
        return candidates[0]
    return None


def _module_stem(path: str) -> str:
    stem = posixpath.splitext(posixpath.basename(path))[0]
    if stem in ("__init__", "index"):
        return posixpath.basename(posixpath.dirname(path))
    return stem


def build_graph(
    facts_by_path: Mapping[str, Iterable[Fact]],
    rules: ResolutionRules = ResolutionRules(),
    roots: Iterable[str] = ("",),
) -> Graph:
    """Build a closed Graph from every module's facts.

    Args:
        facts_by_path: Canonical module path -> facts observed in that file
        rules: Language rules for matching resolved paths to module files
        roots: Directories (relative to the base directory) that "/"-anchored
            specifiers are tried under, in order

    Returns:
        Immutable Graph; imports that did not resolve are in ``graph.dropped``.
    """
    paths = sorted(facts_by_path)
    known = frozenset(paths)
    facts = {path: tuple(facts_by_path[path]) for path in paths}
    root_order = tuple(dict.fromkeys(roots))

    edges = _EdgeAccumulator()
    dropped: list[DroppedImport] = []
    bindings_by_module: dict[str, dict[str, list[tuple[str, str]]]] = {}
    for path in paths:
        imports = [f for f in facts[path] if f.kind is FactKind.IMPORT]
        bindings_by_module[path] = _resolve_imports(
            path, imports, known, rules, edges, dropped, root_order
        )
    import_edges = edges.edges()

    declarations: list[tuple[str, TypeDeclarationFact]] = []
    for path in paths:
        for fact in facts[path]:
            if fact.kind is FactKind.TYPE_DECLARATION:
                declarations.append((path, fact))

    # first declaration wins when a module declares the same name twice
    by_key: dict[TypeKey, TypeEntity] = {}
    by_name: dict[str, list[TypeKey]] = {}
    for path, decl in declarations:
        key = (path, decl.name)
        if key in by_key:
            continue
        by_key[key] = TypeEntity(
            name=decl.name,
            module=path,
            parent=decl.parent,
            relations=decl.relations,
            properties=tuple(decl.properties),
            methods=tuple(decl.methods),
            members=decl.members,
        )
        by_name.setdefault(decl.name, []).append(key)

    types: list[TypeEntity] = []
    inherits: set[InheritsEdge] = set()
    for key in sorted(by_key, key=lambda k: (k[1], k[0])):
        entity = by_key[key]
        parent_key = None
        if entity.parent:
            parent_key = _resolve_parent(
                entity.parent, entity.module, bindings_by_module[entity.module], by_key, by_name
            )
            if parent_key == key:
                parent_key = None
        if parent_key is not None:
            inherits.add(InheritsEdge(parent=parent_key, child=key))
            entity = TypeEntity(
                name=entity.name,
                module=entity.module,
                parent=entity.parent,
                parent_key=parent_key,
                relations=entity.relations,
                properties=entity.properties,
                methods=entity.methods,
                members=entity.members,
            )
        types.append(entity)

    modules: dict[str, Module] = {}
    for path in paths:
        exported = [f for f in facts[path] if f.kind is FactKind.EXPORTED_SYMBOL]
        modules[path] = Module(
            path=path,
            facts=facts[path],
            imports=tuple(sorted({e.target for e in import_edges if e.source == path})),
            exports=tuple(sorted({f.name for f in exported})),
            functions=tuple(sorted({f.name for f in exported if f.symbol_kind == "function"})),
            types=tuple(sorted({k[1] for k in by_key if k[0] == path})),
        )

    graph = Graph(
        modules=MappingProxyType(modules),
        types=tuple(types),
        import_edges=tuple(import_edges),
        inherits_edges=tuple(sorted(inherits)),
        dropped=tuple(sorted(set(dropped))),
    )
    logger.info(
        f"Built graph: {len(modules)} modules, {len(import_edges)} imports, "
        f"{len(types)} types, {len(graph.inherits_edges)} inherits, {len(graph.dropped)} dropped"
    )
    return graph
