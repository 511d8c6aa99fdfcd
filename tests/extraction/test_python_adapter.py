"""Tests for extraction/python_adapter.py."""

import pytest

from archgraph.exceptions import ExtractionError
from archgraph.extraction import (
    Accessor,
    ExportedSymbolFact,
    FactKind,
    ImportFact,
    MemberKind,
    PythonFactExtractor,
    TypeDeclarationFact,
)
from archgraph.extraction.python_adapter import absolute_specifier, relative_specifier


def _extract(text, path="pkg/mod.py"):
    return PythonFactExtractor().extract(path, text)


def _of(facts, kind):
    return [f for f in facts if f.kind is kind]


class TestRelativeSpecifier:
    def test_single_dot_module(self):
        assert relative_specifier(1, "models") == "./models"

    def test_parent_dotted_module(self):
        assert relative_specifier(2, "a.b") == "../a/b"

    def test_package_itself(self):
        assert relative_specifier(1, None) == "."
        assert relative_specifier(2, None) == ".."

    def test_three_levels(self):
        assert relative_specifier(3, "x") == "../../x"


class TestImports:
    def test_relative_from_import(self):
        facts = _extract("from .models import Base, Derived as D\n")
        assert _of(facts, FactKind.IMPORT) == [
            ImportFact("./models", ("Base", "Derived"), ("Base", "D"))
        ]

    def test_absolute_import_is_anchored(self):
        (imp,) = _of(_extract("import os.path\n"), FactKind.IMPORT)
        assert imp.specifier == "/os/path"
        assert imp.bindings == ("os",)

    def test_absolute_from_import_is_anchored(self):
        (imp,) = _of(_extract("from pkg.b import foo as f\n"), FactKind.IMPORT)
        assert imp == ImportFact("/pkg/b", ("foo",), ("f",))
        assert absolute_specifier("pkg.b") == "/pkg/b"

    def test_star_import_is_namespace(self):
        (imp,) = _of(_extract("from .util import *\n"), FactKind.IMPORT)
        assert imp.names == ("*",)

    def test_from_package_import(self):
        (imp,) = _of(_extract("from . import models\n"), FactKind.IMPORT)
        assert imp.specifier == "."
        assert imp.names == ("models",)


class TestClasses:
    def test_first_base_is_parent_rest_are_relations(self):
        facts = _extract("class C(Base, Mixin, abc.ABC):\n    pass\n")
        (cls,) = _of(facts, FactKind.TYPE_DECLARATION)
        assert cls.parent == "Base"
        assert cls.relations == ("Mixin", "abc.ABC")

    def test_object_base_is_ignored(self):
        (cls,) = _of(_extract("class C(object):\n    pass\n"), FactKind.TYPE_DECLARATION)
        assert cls.parent is None

    def test_generic_base_uses_origin_name(self):
        (cls,) = _of(_extract("class C(Generic[T]):\n    pass\n"), FactKind.TYPE_DECLARATION)
        assert cls.parent == "Generic"

    def test_members_and_flags(self):
        source = (
            "class C:\n"
            "    limit = 3\n"
            "    name: str\n"
            "    _hidden = 1\n"
            "    def run(self): pass\n"
            "    def _private(self): pass\n"
            "    def __init__(self): pass\n"
            "    @staticmethod\n"
            "    def build(): pass\n"
            "    @classmethod\n"
            "    def create(cls): pass\n"
            "    @property\n"
            "    def size(self): return 1\n"
            "    @size.setter\n"
            "    def size(self, value): pass\n"
        )
        (cls,) = _of(_extract(source), FactKind.TYPE_DECLARATION)
        assert cls.properties == ["limit", "name"]
        assert cls.methods == [
            "__init__()",
            "get size()",
            "run()",
            "set size()",
            "static build()",
            "static create()",
        ]

    def test_declaration_order_retained_in_members(self):
        source = "class C:\n    def b(self): pass\n    def a(self): pass\n"
        (cls,) = _of(_extract(source), FactKind.TYPE_DECLARATION)
        assert [m.name for m in cls.members] == ["b", "a"]
        assert cls.methods == ["a()", "b()"]

    def test_member_accessor_kinds(self):
        source = "class C:\n    @property\n    def x(self): return 1\n"
        (cls,) = _of(_extract(source), FactKind.TYPE_DECLARATION)
        (member,) = cls.members
        assert member.member_kind is MemberKind.METHOD
        assert member.accessor is Accessor.GET


class TestExports:
    def test_dunder_all_wins(self):
        source = "__all__ = ['a']\ndef a(): pass\ndef b(): pass\n"
        assert _of(_extract(source), FactKind.EXPORTED_SYMBOL) == [
            ExportedSymbolFact("a", "function")
        ]

    def test_public_top_level_names(self):
        source = "X = 1\n_y = 2\ndef f(): pass\nclass K: pass\n"
        exported = {f.name: f.symbol_kind for f in _of(_extract(source), FactKind.EXPORTED_SYMBOL)}
        assert exported == {"X": "variable", "f": "function", "K": "class"}

    def test_empty_module_exports_nothing(self):
        assert _extract("") == []


class TestParseErrors:
    def test_syntax_error_names_file(self):
        with pytest.raises(ExtractionError) as exc_info:
            _extract("def broken(:\n", path="pkg/bad.py")
        assert exc_info.value.path == "pkg/bad.py"
        assert exc_info.value.recoverable
        assert "pkg/bad.py" in str(exc_info.value)

    def test_extract_is_pure(self):
        source = "from .a import b\nclass C(b):\n    pass\n"
        assert _extract(source) == _extract(source)
        assert isinstance(_of(_extract(source), FactKind.TYPE_DECLARATION)[0], TypeDeclarationFact)
