"""Tests for exact and fuzzy change detection."""

from archgraph.detection import (
    ChangeDetector,
    Determinism,
    byte_histogram,
    fingerprint,
    has_changed,
    histogram_fingerprint,
    read_artifact,
    stable_fingerprint,
)

DOT = 'digraph G {\n  a [label="A", shape=box];\n  b [label="B", shape=box];\n  a -> b;\n}\n'
DOT_REORDERED = 'digraph G {\n  b [shape=box, label="B"];\n  a [shape=box, label="A"];\n  a -> b;\n}\n'


class TestExact:
    def test_identical_is_unchanged(self):
        assert not has_changed(DOT, DOT, Determinism.EXACT)

    def test_reorder_is_a_change(self):
        assert has_changed(DOT, DOT_REORDERED, Determinism.EXACT)

    def test_str_and_bytes_agree(self):
        assert fingerprint(DOT) == fingerprint(DOT.encode("utf-8"))
        assert not has_changed(DOT.encode("utf-8"), DOT, Determinism.EXACT)

    def test_missing_old_is_changed(self):
        assert has_changed(None, DOT, Determinism.EXACT)
        assert has_changed(None, "", Determinism.FUZZY)


class TestFuzzy:
    def test_attribute_reorder_is_unchanged(self):
        assert byte_histogram(DOT) == byte_histogram(DOT_REORDERED)
        assert not has_changed(DOT, DOT_REORDERED, Determinism.FUZZY)

    def test_single_token_change_is_detected(self):
        edited = DOT.replace('label="B"', 'label="C"')
        assert has_changed(DOT, edited, Determinism.FUZZY)

    def test_length_change_is_detected(self):
        assert has_changed(DOT, DOT + "\n", Determinism.FUZZY)

    def test_identical_is_unchanged(self):
        assert not has_changed(DOT, DOT, Determinism.FUZZY)


class TestStableFingerprint:
    def test_fuzzy_fingerprint_ignores_order(self):
        assert histogram_fingerprint(DOT) == histogram_fingerprint(DOT_REORDERED)
        assert stable_fingerprint(DOT, Determinism.FUZZY) == stable_fingerprint(
            DOT_REORDERED, Determinism.FUZZY
        )

    def test_exact_fingerprint_is_sha256(self):
        assert stable_fingerprint(DOT, Determinism.EXACT) == fingerprint(DOT)
        assert len(fingerprint(DOT)) == 64


class TestChangeDetector:
    def test_missing_artifact_reports_changed(self, tmp_path):
        check = ChangeDetector(tmp_path).check("classes.dot", DOT, Determinism.EXACT)
        assert check.changed
        assert check.name == "classes.dot"

    def test_check_all(self, tmp_path):
        (tmp_path / "exact.mmd").write_text("graph LR\n")
        (tmp_path / "fuzzy.gv").write_text(DOT)
        checks = ChangeDetector(tmp_path).check_all(
            [
                ("exact.mmd", "graph LR\n", Determinism.EXACT),
                ("fuzzy.gv", DOT_REORDERED, Determinism.FUZZY),
                ("new.mmd", "graph LR\n", Determinism.EXACT),
            ]
        )
        assert [c.changed for c in checks] == [False, False, True]

    def test_repeated_checks_are_idempotent(self, tmp_path):
        (tmp_path / "a.mmd").write_text("classDiagram\n")
        detector = ChangeDetector(tmp_path)
        first = detector.check("a.mmd", "classDiagram\n", Determinism.EXACT)
        second = detector.check("a.mmd", "classDiagram\n", Determinism.EXACT)
        assert first == second
        assert (tmp_path / "a.mmd").read_text() == "classDiagram\n"

    def test_read_artifact_missing(self, tmp_path):
        assert read_artifact(tmp_path / "nope.mmd") is None
