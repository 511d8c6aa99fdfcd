"""Tests for extraction/external.py - subprocess diagram tools."""

import subprocess
from pathlib import Path

import pytest

from archgraph.detection import Determinism
from archgraph.exceptions import ErrorCode, ToolInvocationError
from archgraph.extraction import ToolRequest, get_tool
from archgraph.extraction.external import (
    ExternalDiagramTool,
    GoCallvisTool,
    GoPlantUMLTool,
    PyreverseTool,
)


def _request(tmp_path):
    return ToolRequest(project_root=tmp_path, source_dirs=(tmp_path / "src",), project_name="demo")


def _locate_anywhere(monkeypatch):
    monkeypatch.setattr("archgraph.extraction.external.shutil.which", lambda name: f"/usr/bin/{name}")


class TestToolRegistry:
    def test_known_tools(self):
        assert isinstance(get_tool("pyreverse"), PyreverseTool)
        assert isinstance(get_tool("go-callvis"), GoCallvisTool)

    def test_unknown_tool(self):
        with pytest.raises(ToolInvocationError):
            get_tool("doxygen")

    def test_base_adapter_is_abstract(self):
        with pytest.raises(TypeError):
            ExternalDiagramTool(name="x", binary="x", install_hint="")

    def test_determinism_classes(self):
        assert get_tool("pyreverse").artifacts["classes.dot"] is Determinism.EXACT
        assert get_tool("goplantuml").artifacts["classes.puml"] is Determinism.EXACT
        assert get_tool("go-callvis").artifacts["callgraph.gv"] is Determinism.FUZZY


class TestInvocation:
    def test_missing_binary_is_fatal(self, monkeypatch, tmp_path):
        monkeypatch.setattr("archgraph.extraction.external.shutil.which", lambda name: None)
        with pytest.raises(ToolInvocationError) as exc_info:
            PyreverseTool().run(_request(tmp_path))
        assert exc_info.value.code is ErrorCode.AG102
        assert not exc_info.value.recoverable

    def test_pyreverse_collects_dot_files(self, monkeypatch, tmp_path):
        _locate_anywhere(monkeypatch)

        def fake_run(cmd, **kwargs):
            outdir = Path(cmd[cmd.index("-d") + 1])
            (outdir / "classes_demo.dot").write_text("digraph classes {}\n")
            (outdir / "packages_demo.dot").write_text("digraph packages {}\n")
            return subprocess.CompletedProcess(cmd, 0, "", "")

        artifacts = PyreverseTool().run(_request(tmp_path), runner=fake_run)
        assert [(a.name, a.text) for a in artifacts] == [
            ("classes.dot", "digraph classes {}\n"),
            ("packages.dot", "digraph packages {}\n"),
        ]

    def test_nonzero_exit_is_fatal(self, monkeypatch, tmp_path):
        _locate_anywhere(monkeypatch)

        def fake_run(cmd, **kwargs):
            return subprocess.CompletedProcess(cmd, 2, "", "boom\n")

        with pytest.raises(ToolInvocationError) as exc_info:
            GoPlantUMLTool().run(_request(tmp_path), runner=fake_run)
        assert "boom" in str(exc_info.value)

    def test_goplantuml_reads_stdout(self, monkeypatch, tmp_path):
        _locate_anywhere(monkeypatch)

        def fake_run(cmd, **kwargs):
            assert "-recursive" in cmd
            return subprocess.CompletedProcess(cmd, 0, "@startuml\n@enduml\n", "")

        (artifact,) = GoPlantUMLTool().run(_request(tmp_path), runner=fake_run)
        assert artifact.text == "@startuml\n@enduml\n"

    def test_callvis_nonzero_exit_with_output_is_accepted(self, monkeypatch, tmp_path):
        _locate_anywhere(monkeypatch)

        def fake_run(cmd, **kwargs):
            base = Path(cmd[cmd.index("-file") + 1])
            base.with_name(base.name + ".gv").write_text("digraph g {}\n")
            return subprocess.CompletedProcess(cmd, 1, "", "")

        (artifact,) = GoCallvisTool().run(_request(tmp_path), runner=fake_run)
        assert artifact.determinism is Determinism.FUZZY

    def test_timeout_is_fatal(self, monkeypatch, tmp_path):
        _locate_anywhere(monkeypatch)

        def fake_run(cmd, **kwargs):
            raise subprocess.TimeoutExpired(cmd, 300)

        with pytest.raises(ToolInvocationError, match="timed out"):
            PyreverseTool().run(_request(tmp_path), runner=fake_run)

    def test_pyreverse_missing_package_diagram_is_fatal(self, monkeypatch, tmp_path, caplog):
        _locate_anywhere(monkeypatch)

        def fake_run(cmd, **kwargs):
            outdir = Path(cmd[cmd.index("-d") + 1])
            (outdir / "classes_demo.dot").write_text("digraph classes {}\n")
            return subprocess.CompletedProcess(cmd, 0, "", "")

        with pytest.raises(ToolInvocationError, match="did not produce packages.dot"):
            PyreverseTool().run(_request(tmp_path), runner=fake_run)
        assert not [r for r in caplog.records if r.levelname == "WARNING"]
