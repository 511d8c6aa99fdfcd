"""Tests for the Mermaid diagram serializers."""

import random

from archgraph.diagrams import (
    ClassHierarchyDiagram,
    GraphDataSnapshot,
    ModuleDependencyDiagram,
    default_serializers,
    mermaid_id,
)
from archgraph.extraction import (
    Accessor,
    ExportedSymbolFact,
    ImportFact,
    JavaScriptFactExtractor,
    MemberFact,
    MemberKind,
    TypeDeclarationFact,
)
from archgraph.graph import Graph, build_graph

RULES = JavaScriptFactExtractor.resolution


def _facts():
    return {
        "src/app.js": [
            ImportFact("./models/user.js", ("User",), ("User",)),
            ImportFact("./util.js", ("log",)),
            ExportedSymbolFact("main", "function"),
        ],
        "src/util.js": [ExportedSymbolFact("log", "function")],
        "src/models/base.js": [
            TypeDeclarationFact(
                "Model",
                members=(
                    MemberFact("save", MemberKind.METHOD),
                    MemberFact("id", MemberKind.PROPERTY),
                    MemberFact("create", MemberKind.METHOD, is_static=True),
                ),
            ),
        ],
        "src/models/user.js": [
            ImportFact("./base.js", ("Model",), ("Model",)),
            TypeDeclarationFact(
                "User",
                parent="Model",
                members=(
                    MemberFact("name", MemberKind.PROPERTY),
                    MemberFact("email", MemberKind.METHOD, accessor=Accessor.GET),
                ),
            ),
        ],
    }


class TestMermaidId:
    def test_replaces_separators(self):
        assert mermaid_id("src/my-mod.test.js") == "src_my_mod_test_js"
        assert mermaid_id("a\\b") == "a_b"


class TestModuleDependencyDiagram:
    def test_layout(self):
        text = ModuleDependencyDiagram().render(build_graph(_facts(), RULES))
        assert text == (
            "graph LR\n"
            "    subgraph src\n"
            '        src_app_js["app.js"]\n'
            '        src_util_js["util.js"]\n'
            "    end\n"
            "    subgraph src/models\n"
            '        src_models_base_js["base.js"]\n'
            '        src_models_user_js["user.js"]\n'
            "    end\n"
            "    src_app_js --> src_models_user_js\n"
            "    src_app_js --> src_util_js\n"
            "    src_models_user_js --> src_models_base_js\n"
        )

    def test_empty_graph(self):
        assert ModuleDependencyDiagram().render(Graph.empty()) == "graph LR\n"


class TestClassHierarchyDiagram:
    def test_layout(self):
        text = ClassHierarchyDiagram().render(build_graph(_facts(), RULES))
        assert text == (
            "classDiagram\n"
            "    class Model {\n"
            "        +id\n"
            "        +save()\n"
            "        +static create()\n"
            "    }\n"
            '    note for Model "src/models/base.js"\n'
            "    class User {\n"
            "        +name\n"
            "        +get email()\n"
            "    }\n"
            '    note for User "src/models/user.js"\n'
            "    Model <|-- User\n"
        )

    def test_external_parent_and_relations_in_note(self):
        facts = {
            "w.js": [TypeDeclarationFact("Widget", parent="HTMLElement", relations=("B", "A"))],
        }
        text = ClassHierarchyDiagram().render(build_graph(facts, RULES))
        assert '    note for Widget "w.js; extends HTMLElement; with A, B"\n' in text
        assert "<|--" not in text

    def test_duplicate_names_get_module_suffix(self):
        facts = {
            "a/item.js": [TypeDeclarationFact("Item")],
            "b/item.js": [TypeDeclarationFact("Item")],
        }
        text = ClassHierarchyDiagram().render(build_graph(facts, RULES))
        assert "    class Item__a_item_js {\n" in text
        assert "    class Item__b_item_js {\n" in text


class TestDeterminism:
    def test_byte_identical_for_shuffled_input(self):
        facts = _facts()
        for seed in range(5):
            items = list(facts.items())
            random.Random(seed).shuffle(items)
            shuffled = {path: list(reversed(fs)) for path, fs in items}
            for serializer in default_serializers():
                first = serializer.render(build_graph(facts, RULES))
                second = serializer.render(build_graph(shuffled, RULES))
                assert first == second, serializer.kind

    def test_member_declaration_order_is_irrelevant(self):
        members = (
            MemberFact("b", MemberKind.METHOD),
            MemberFact("a", MemberKind.METHOD),
            MemberFact("z", MemberKind.PROPERTY),
            MemberFact("y", MemberKind.PROPERTY),
        )
        one = {"t.js": [TypeDeclarationFact("T", members=members)]}
        two = {"t.js": [TypeDeclarationFact("T", members=tuple(reversed(members)))]}
        diagram = ClassHierarchyDiagram()
        assert diagram.render(build_graph(one, RULES)) == diagram.render(build_graph(two, RULES))


class TestDefaultSerializers:
    def test_kinds_and_gating(self):
        serializers = {s.kind: s for s in default_serializers()}
        assert set(serializers) == {"class-hierarchy", "graph-data", "module-dependencies"}
        assert not serializers["graph-data"].gated
        assert isinstance(serializers["graph-data"], GraphDataSnapshot)
        assert serializers["module-dependencies"].filename == "module-dependencies.mmd"
