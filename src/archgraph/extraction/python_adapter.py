"""In-process fact extraction for Python using the standard ``ast`` module."""

from __future__ import annotations

import ast
from typing import Optional

from ..exceptions import ExtractionError
from .base import ResolutionRules
from .facts import (
    Accessor,
    ExportedSymbolFact,
    Fact,
    ImportFact,
    MemberFact,
    MemberKind,
    NAMESPACE_IMPORT,
    TypeDeclarationFact,
)

_STATIC_DECORATORS = {"staticmethod", "classmethod"}
_GETTER_DECORATORS = {"property", "cached_property", "functools.cached_property"}
_IGNORED_BASES = {"object"}


def relative_specifier(level: int, module: Optional[str]) -> str:
    """Translate a relative ``from`` import into a path-style specifier.

    >>> relative_specifier(1, "models")
    './models'
    >>> relative_specifier(2, "a.b")
    '../a/b'
    >>> relative_specifier(1, None)
    '.'
    """
    prefix = "./" if level == 1 else "../" * (level - 1)
    if not module:
        return prefix.rstrip("/") or "."
    return prefix + module.replace(".", "/")


def absolute_specifier(module: str) -> str:
    """Anchor an absolute import at the source roots: ``pkg.b`` -> ``/pkg/b``."""
    return "/" + module.replace(".", "/")


def dotted_name(node: ast.expr) -> Optional[str]:
    """Name of a base-class expression: ``Base``, ``pkg.Base``, ``Generic[T]`` -> ``Generic``."""
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        owner = dotted_name(node.value)
        return f"{owner}.{node.attr}" if owner else node.attr
    if isinstance(node, ast.Subscript):
        return dotted_name(node.value)
    if isinstance(node, ast.Call):
        return dotted_name(node.func)
    return None


def _is_private(name: str) -> bool:
    return name.startswith("_") and not (name.startswith("__") and name.endswith("__"))


def _decorator_names(node: ast.AST) -> list[str]:
    return [dotted_name(d) or "" for d in getattr(node, "decorator_list", [])]


class PythonFactExtractor:
    """Walks a module's AST and reports imports, classes and exports."""

    language = "python"
    extensions = (".py",)
    resolution = ResolutionRules(suffixes=(".py", "/__init__.py"), names_may_be_modules=True)

    def extract(self, path: str, text: str) -> list[Fact]:
        try:
            tree = ast.parse(text, filename=path)
        except SyntaxError as e:
            raise ExtractionError(path, f"line {e.lineno}: {e.msg}") from e
        except ValueError as e:
            # null bytes and similar
            raise ExtractionError(path, str(e)) from e

        facts: list[Fact] = []
        facts.extend(self._imports(tree))
        facts.extend(self._types(tree))
        facts.extend(self._exports(tree))
        return facts

    # ── imports ─────────────────────────────────────────────────────

    def _imports(self, tree: ast.Module) -> list[ImportFact]:
        found: list[ImportFact] = []
        for node in ast.walk(tree):
            if isinstance(node, ast.Import):
                for alias in node.names:
                    binding = alias.asname or alias.name.split(".")[0]
                    found.append(ImportFact(absolute_specifier(alias.name), (), (binding,)))
            elif isinstance(node, ast.ImportFrom):
                if node.level:
                    specifier = relative_specifier(node.level, node.module)
                else:
                    specifier = absolute_specifier(node.module or "")
                names = tuple(
                    NAMESPACE_IMPORT if a.name == "*" else a.name for a in node.names
                )
                bindings = tuple(a.asname or a.name for a in node.names)
                found.append(ImportFact(specifier, names, bindings))
        return found

    # ── classes ─────────────────────────────────────────────────────

    def _types(self, tree: ast.Module) -> list[TypeDeclarationFact]:
        types = []
        for node in ast.walk(tree):
            if isinstance(node, ast.ClassDef):
                types.append(self._type_declaration(node))
        return types

    def _type_declaration(self, node: ast.ClassDef) -> TypeDeclarationFact:
        bases = [name for name in (dotted_name(b) for b in node.bases) if name]
        bases = [b for b in bases if b not in _IGNORED_BASES]
        parent = bases[0] if bases else None
        return TypeDeclarationFact(
            name=node.name,
            parent=parent,
            members=tuple(self._members(node)),
            relations=tuple(bases[1:]),
        )

    def _members(self, node: ast.ClassDef) -> list[MemberFact]:
        members: list[MemberFact] = []
        seen_properties: set[str] = set()

        def add_property(name: str) -> None:
            if _is_private(name) or name in seen_properties:
                return
            seen_properties.add(name)
            members.append(MemberFact(name, MemberKind.PROPERTY))

        for item in node.body:
            if isinstance(item, (ast.FunctionDef, ast.AsyncFunctionDef)):
                if _is_private(item.name):
                    continue
                decorators = _decorator_names(item)
                accessor = None
                if _GETTER_DECORATORS.intersection(decorators):
                    accessor = Accessor.GET
                elif any(d.endswith(".setter") for d in decorators):
                    accessor = Accessor.SET
                members.append(
                    MemberFact(
                        item.name,
                        MemberKind.METHOD,
                        is_static=bool(_STATIC_DECORATORS.intersection(decorators)),
                        accessor=accessor,
                    )
                )
            elif isinstance(item, ast.AnnAssign) and isinstance(item.target, ast.Name):
                add_property(item.target.id)
            elif isinstance(item, ast.Assign):
                for target in item.targets:
                    if isinstance(target, ast.Name):
                        add_property(target.id)
        return members

    # ── exports ─────────────────────────────────────────────────────

    def _exports(self, tree: ast.Module) -> list[ExportedSymbolFact]:
        declared = self._declared_all(tree)
        kinds: dict[str, str] = {}
        for node in tree.body:
            if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
                kinds.setdefault(node.name, "function")
            elif isinstance(node, ast.ClassDef):
                kinds.setdefault(node.name, "class")
            elif isinstance(node, (ast.Assign, ast.AnnAssign)):
                targets = node.targets if isinstance(node, ast.Assign) else [node.target]
                for target in targets:
                    if isinstance(target, ast.Name):
                        kinds.setdefault(target.id, "variable")

        if declared is not None:
            return [ExportedSymbolFact(name, kinds.get(name)) for name in declared]
        return [
            ExportedSymbolFact(name, kind)
            for name, kind in kinds.items()
            if not name.startswith("_")
        ]

    @staticmethod
    def _declared_all(tree: ast.Module) -> Optional[list[str]]:
        """Literal ``__all__`` contents, or None when the module has none."""
        for node in tree.body:
            if not isinstance(node, (ast.Assign, ast.AnnAssign)):
                continue
            targets = node.targets if isinstance(node, ast.Assign) else [node.target]
            if not any(isinstance(t, ast.Name) and t.id == "__all__" for t in targets):
                continue
            if isinstance(node.value, (ast.List, ast.Tuple)):
                return [
                    elt.value
                    for elt in node.value.elts
                    if isinstance(elt, ast.Constant) and isinstance(elt.value, str)
                ]
        return None
