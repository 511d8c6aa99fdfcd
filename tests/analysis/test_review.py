"""Tests for analysis/review.py - structural diff between graphs."""

from archgraph.analysis import StructuralDiffAnalyzer, is_entry_point
from archgraph.analysis.review import METHODS, PARENT, PROPERTIES, TYPES, DeadEnd
from archgraph.extraction import (
    ExportedSymbolFact,
    ImportFact,
    JavaScriptFactExtractor,
    MemberFact,
    MemberKind,
    TypeDeclarationFact,
)
from archgraph.graph import Graph, build_graph

RULES = JavaScriptFactExtractor.resolution


def graph(facts):
    return build_graph(facts, RULES)


def _two_modules():
    return {
        "a.js": [ImportFact("./b.js", ("foo",))],
        "b.js": [ExportedSymbolFact("foo", "function")],
    }


class TestModuleDelta:
    def test_initial_run_adds_everything(self):
        report = StructuralDiffAnalyzer().analyze(None, graph(_two_modules()))
        assert report.added_modules == ("a.js", "b.js")
        assert report.removed_modules == ()
        assert report.has_structural_changes

    def test_identical_graphs(self):
        g = graph(_two_modules())
        report = StructuralDiffAnalyzer().analyze(g, g)
        assert not report.has_structural_changes
        assert report.consumers == ()

    def test_deleted_importer(self):
        old = graph(_two_modules())
        new = graph({"b.js": [ExportedSymbolFact("foo", "function")]})
        report = StructuralDiffAnalyzer().analyze(old, new)
        assert report.removed_modules == ("a.js",)
        assert report.modified_modules == ()
        assert report.dead_ends == (DeadEnd("b.js", "foo"),)

    def test_modified_exports_and_imports(self):
        old = graph(_two_modules())
        new_facts = _two_modules()
        new_facts["b.js"].append(ExportedSymbolFact("bar", "function"))
        new_facts["c.js"] = []
        new_facts["a.js"].append(ImportFact("./c.js"))
        report = StructuralDiffAnalyzer().analyze(old, graph(new_facts))
        assert report.added_modules == ("c.js",)
        deltas = {d.path: d for d in report.modified_modules}
        assert deltas["b.js"].added_exports == ("bar",)
        assert deltas["a.js"].added_imports == ("c.js",)
        assert deltas["a.js"].changes == ("imports",)


class TestTypeDelta:
    def _facts(self, members, parent=None):
        return {
            "base.js": [TypeDeclarationFact("Base"), TypeDeclarationFact("Other")],
            "shape.js": [TypeDeclarationFact("Shape", parent=parent, members=members)],
        }

    def test_members_and_parent_are_labelled(self):
        old = graph(self._facts((MemberFact("x", MemberKind.PROPERTY),), parent="Base"))
        new = graph(
            self._facts(
                (MemberFact("y", MemberKind.PROPERTY), MemberFact("area", MemberKind.METHOD)),
                parent="Other",
            )
        )
        report = StructuralDiffAnalyzer().analyze(old, new)
        (delta,) = report.modified_types
        assert delta.key == ("shape.js", "Shape")
        assert delta.changes == (PROPERTIES, METHODS, PARENT)
        assert delta.added_properties == ("y",)
        assert delta.removed_properties == ("x",)
        assert delta.added_methods == ("area()",)
        assert (delta.old_parent, delta.new_parent) == ("Base", "Other")
        (module_delta,) = report.modified_modules
        assert module_delta.path == "shape.js"
        assert module_delta.changes == (TYPES,)

    def test_added_and_removed_types(self):
        old = graph({"m.js": [TypeDeclarationFact("Old")]})
        new = graph({"m.js": [TypeDeclarationFact("New")]})
        report = StructuralDiffAnalyzer().analyze(old, new)
        assert report.added_types == (("m.js", "New"),)
        assert report.removed_types == (("m.js", "Old"),)

    def test_type_moved_between_modules(self):
        old = graph({"a.js": [TypeDeclarationFact("T")], "b.js": []})
        new = graph({"a.js": [], "b.js": [TypeDeclarationFact("T")]})
        report = StructuralDiffAnalyzer().analyze(old, new)
        assert report.added_types == (("b.js", "T"),)
        assert report.removed_types == (("a.js", "T"),)


class TestConsumers:
    def test_importers_and_subclasses_of_changed_type(self):
        base_v1 = [TypeDeclarationFact("Base"), ExportedSymbolFact("Base", "class")]
        base_v2 = [
            TypeDeclarationFact("Base", members=(MemberFact("run", MemberKind.METHOD),)),
            ExportedSymbolFact("Base", "class"),
        ]
        rest = {
            "child.js": [
                ImportFact("./base.js", ("Base",), ("Base",)),
                TypeDeclarationFact("Child", parent="Base"),
            ],
            "ns.js": [ImportFact("./base.js", ("*",), ("base",))],
            "other.js": [ImportFact("./base.js", ("helper",))],
        }
        old = graph({"base.js": base_v1, **rest})
        new = graph({"base.js": base_v2, **rest})
        report = StructuralDiffAnalyzer().analyze(old, new)
        consumers = {c.entity: c for c in report.consumers}
        type_consumers = consumers["Base (base.js)"]
        assert type_consumers.kind == "type"
        assert type_consumers.importers == ("child.js", "ns.js")
        assert type_consumers.subclasses == (("child.js", "Child"),)
        module_consumers = consumers["base.js"]
        assert module_consumers.importers == ("child.js", "ns.js", "other.js")

    def test_added_module_without_importers(self):
        report = StructuralDiffAnalyzer().analyze(Graph.empty(), graph({"x.js": []}))
        (consumer,) = report.consumers
        assert consumer.entity == "x.js"
        assert consumer.is_empty


class TestDeadEnds:
    def test_consumed_export_is_not_a_dead_end(self):
        assert StructuralDiffAnalyzer().dead_ends(graph(_two_modules())) == ()

    def test_unconsumed_export(self):
        facts = _two_modules()
        facts["b.js"].append(ExportedSymbolFact("unused", "function"))
        assert StructuralDiffAnalyzer().dead_ends(graph(facts)) == (DeadEnd("b.js", "unused"),)

    def test_namespace_import_consumes_everything(self):
        facts = {
            "a.js": [ImportFact("./b.js", ("*",), ("b",))],
            "b.js": [ExportedSymbolFact("x", "const"), ExportedSymbolFact("y", "const")],
        }
        assert StructuralDiffAnalyzer().dead_ends(graph(facts)) == ()

    def test_entry_points_are_excluded(self):
        facts = {
            "index.js": [ExportedSymbolFact("start", "function")],
            "cli.js": [ExportedSymbolFact("main", "function"), ExportedSymbolFact("helper", "function")],
        }
        analyzer = StructuralDiffAnalyzer(["main", "index.js"])
        assert analyzer.dead_ends(graph(facts)) == (DeadEnd("cli.js", "helper"),)

    def test_is_entry_point(self):
        assert is_entry_point("main", "pkg/app.py", ["main"])
        assert is_entry_point("run", "pkg/__main__.py", ["__main__.py"])
        assert is_entry_point("run", "bin/tool.js", ["bin/*"])
        assert not is_entry_point("run", "pkg/app.py", ["main"])


class TestOrphans:
    def test_isolated_module(self):
        facts = {**_two_modules(), "lonely.js": []}
        assert StructuralDiffAnalyzer.orphans(graph(facts)) == ("lonely.js",)

    def test_unresolved_imports_do_not_count(self):
        facts = {"x.js": [ImportFact("react", ("default",)), ImportFact("./gone.js")]}
        assert StructuralDiffAnalyzer.orphans(graph(facts)) == ("x.js",)
