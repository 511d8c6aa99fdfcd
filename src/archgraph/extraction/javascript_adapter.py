"""Fact extraction for ES modules using tree-sitter.

Usage:
    extractor = JavaScriptFactExtractor()
    facts = extractor.extract("src/app.js", source_text)

Covers ES import/export syntax, class declarations with ``extends`` and
class members (static, get/set accessors). Private ``#name`` members are
skipped. CommonJS ``require`` is not followed.
"""

from __future__ import annotations

import threading
from typing import Any, Iterator, Optional

import tree_sitter_javascript
from tree_sitter import Language, Parser

from ..exceptions import ExtractionError
from .base import ResolutionRules
from .facts import (
    Accessor,
    DEFAULT_EXPORT,
    ExportedSymbolFact,
    Fact,
    ImportFact,
    MemberFact,
    MemberKind,
    NAMESPACE_IMPORT,
    TypeDeclarationFact,
)

JS_LANGUAGE = Language(tree_sitter_javascript.language())

_DECLARATION_KINDS = {
    "function_declaration": "function",
    "generator_function_declaration": "function",
    "class_declaration": "class",
}


def _text(node: Any) -> str:
    return node.text.decode("utf-8") if node is not None and node.text is not None else ""


def _string_value(node: Any) -> str:
    """Contents of a string literal node without its quotes."""
    return "".join(_text(c) for c in node.named_children if c.type in ("string_fragment", "escape_sequence"))


def _child_tokens(node: Any) -> set[str]:
    return {c.type for c in node.children if not c.is_named}


def _walk(node: Any) -> Iterator[Any]:
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def expression_name(node: Any) -> str:
    """Name of a superclass expression: ``Base`` or ``ns.Base``."""
    if node.type == "identifier":
        return _text(node)
    if node.type == "member_expression":
        obj = expression_name(node.child_by_field_name("object"))
        return f"{obj}.{_text(node.child_by_field_name('property'))}"
    if node.type == "parenthesized_expression" and node.named_children:
        return expression_name(node.named_children[0])
    return "(unknown)"


class JavaScriptFactExtractor:
    """tree-sitter based adapter for ``.js``/``.mjs`` sources."""

    language = "javascript"
    extensions = (".js", ".mjs")
    resolution = ResolutionRules(suffixes=("", ".js", ".mjs", "/index.js"))

    def __init__(self) -> None:
        # Parser instances are not thread-safe; one per worker thread
        self._local = threading.local()

    def _parser(self) -> Parser:
        parser = getattr(self._local, "parser", None)
        if parser is None:
            parser = Parser(JS_LANGUAGE)
            self._local.parser = parser
        return parser

    def extract(self, path: str, text: str) -> list[Fact]:
        tree = self._parser().parse(text.encode("utf-8"))
        root = tree.root_node
        if root.has_error:
            raise ExtractionError(path, f"syntax error near line {self._first_error_line(root)}")

        facts: list[Fact] = []
        for node in root.named_children:
            if node.type == "import_statement":
                facts.append(self._import(node))
            elif node.type == "export_statement":
                reexport = self._reexport(node)
                if reexport is not None:
                    facts.append(reexport)
        for node in _walk(root):
            if node.type == "class_declaration":
                facts.append(self._type_declaration(node))
        for node in root.named_children:
            if node.type == "export_statement":
                facts.extend(self._exports(node))
        return facts

    @staticmethod
    def _first_error_line(root: Any) -> int:
        for node in _walk(root):
            if node.type == "ERROR" or node.is_missing:
                return node.start_point[0] + 1
        return root.start_point[0] + 1

    # ── imports ─────────────────────────────────────────────────────

    def _import(self, node: Any) -> ImportFact:
        specifier = _string_value(node.child_by_field_name("source"))
        names: list[str] = []
        bindings: list[str] = []
        for clause in node.named_children:
            if clause.type != "import_clause":
                continue
            for part in clause.named_children:
                if part.type == "identifier":
                    names.append(DEFAULT_EXPORT)
                    bindings.append(_text(part))
                elif part.type == "namespace_import":
                    local = next((c for c in part.named_children if c.type == "identifier"), None)
                    names.append(NAMESPACE_IMPORT)
                    bindings.append(_text(local))
                elif part.type == "named_imports":
                    for spec in part.named_children:
                        if spec.type != "import_specifier":
                            continue
                        imported = self._specifier_name(spec.child_by_field_name("name"))
                        alias = spec.child_by_field_name("alias")
                        names.append(imported)
                        bindings.append(self._specifier_name(alias) if alias else imported)
        return ImportFact(specifier, tuple(names), tuple(bindings))

    def _reexport(self, node: Any) -> Optional[ImportFact]:
        """``export {a} from './x'`` and ``export * from './x'`` also import."""
        source = node.child_by_field_name("source")
        if source is None:
            return None
        names: list[str] = []
        clause = next((c for c in node.named_children if c.type == "export_clause"), None)
        if clause is not None:
            for spec in clause.named_children:
                if spec.type == "export_specifier":
                    names.append(self._specifier_name(spec.child_by_field_name("name")))
        else:
            names.append(NAMESPACE_IMPORT)
        return ImportFact(_string_value(source), tuple(names), ())

    @staticmethod
    def _specifier_name(node: Any) -> str:
        if node is None:
            return ""
        if node.type == "string":
            return _string_value(node)
        return _text(node)

    # ── classes ─────────────────────────────────────────────────────

    def _type_declaration(self, node: Any) -> TypeDeclarationFact:
        name_node = node.child_by_field_name("name")
        parent = None
        for child in node.named_children:
            if child.type == "class_heritage":
                expr = next((c for c in child.named_children if c.type != "comment"), None)
                if expr is not None:
                    parent = expression_name(expr)
        body = node.child_by_field_name("body")
        members = tuple(self._members(body)) if body is not None else ()
        return TypeDeclarationFact(
            name=_text(name_node) if name_node is not None else "(anonymous)",
            parent=parent,
            members=members,
        )

    def _members(self, body: Any) -> Iterator[MemberFact]:
        for item in body.named_children:
            if item.type == "method_definition":
                key = item.child_by_field_name("name")
                if key is None or key.type == "private_property_identifier":
                    continue
                tokens = _child_tokens(item)
                accessor = None
                if "get" in tokens:
                    accessor = Accessor.GET
                elif "set" in tokens:
                    accessor = Accessor.SET
                yield MemberFact(
                    self._key_name(key),
                    MemberKind.METHOD,
                    is_static="static" in tokens,
                    accessor=accessor,
                )
            elif item.type == "field_definition":
                key = item.child_by_field_name("property")
                if key is None or key.type == "private_property_identifier":
                    continue
                yield MemberFact(
                    self._key_name(key),
                    MemberKind.PROPERTY,
                    is_static="static" in _child_tokens(item),
                )

    @staticmethod
    def _key_name(key: Any) -> str:
        if key.type == "string":
            return _string_value(key)
        if key.type == "computed_property_name":
            return "(computed)"
        return _text(key)

    # ── exports ─────────────────────────────────────────────────────

    def _exports(self, node: Any) -> list[ExportedSymbolFact]:
        if "default" in _child_tokens(node):
            return [ExportedSymbolFact(DEFAULT_EXPORT)]

        exported: list[ExportedSymbolFact] = []
        declaration = node.child_by_field_name("declaration")
        if declaration is not None:
            kind = _DECLARATION_KINDS.get(declaration.type)
            if kind is not None:
                name = declaration.child_by_field_name("name")
                if name is not None:
                    exported.append(ExportedSymbolFact(_text(name), kind))
            elif declaration.type in ("lexical_declaration", "variable_declaration"):
                for declarator in declaration.named_children:
                    if declarator.type != "variable_declarator":
                        continue
                    name = declarator.child_by_field_name("name")
                    if name is not None and name.type == "identifier":
                        exported.append(ExportedSymbolFact(_text(name), "variable"))

        for child in node.named_children:
            if child.type == "export_clause":
                for spec in child.named_children:
                    if spec.type != "export_specifier":
                        continue
                    alias = spec.child_by_field_name("alias")
                    target = alias if alias is not None else spec.child_by_field_name("name")
                    exported.append(ExportedSymbolFact(self._specifier_name(target)))
            elif child.type == "namespace_export":
                local = next((c for c in child.named_children if c.type != "comment"), None)
                if local is not None:
                    exported.append(ExportedSymbolFact(self._specifier_name(local)))
        return exported
