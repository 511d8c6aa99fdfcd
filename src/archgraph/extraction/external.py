"""Adapters for external diagram generators run as subprocesses.

These tools emit diagram text directly rather than facts, so each one
declares which artifacts it produces and how stable its output is:

    pyreverse    classes.dot, packages.dot    exact
    goplantuml   classes.puml                 exact
    go-callvis   callgraph.gv                 fuzzy (attribute order varies)

A tool that is missing or fails is fatal for the pass: nothing it would
have produced can be trusted.
"""

from __future__ import annotations

import shutil
import subprocess
import tempfile
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

from ..detection import Determinism
from ..exceptions import ErrorCode, ToolInvocationError
from ..logging_config import get_logger

logger = get_logger(__name__)

Runner = Callable[..., "subprocess.CompletedProcess[str]"]

_TIMEOUT_SECONDS = 300


@dataclass(frozen=True)
class ToolRequest:
    """What a tool needs to know about the project being diagrammed."""

    project_root: Path
    source_dirs: tuple[Path, ...]
    project_name: str
    flags: tuple[str, ...] = ()


@dataclass(frozen=True)
class GeneratedArtifact:
    name: str
    text: str
    determinism: Determinism


@dataclass
class ExternalDiagramTool(ABC):
    """Base adapter: locate the binary, run it, collect its artifacts."""

    name: str
    binary: str
    install_hint: str
    artifacts: dict[str, Determinism] = field(default_factory=dict)
    default_flags: tuple[str, ...] = ()

    @abstractmethod
    def command(self, binary_path: str, request: ToolRequest, workdir: Path) -> list[str]:
        """Full argv; output files, if any, go under ``workdir``."""

    @abstractmethod
    def collect(
        self, completed: subprocess.CompletedProcess, request: ToolRequest, workdir: Path
    ) -> dict[str, str]:
        """Artifact name -> text for whatever the run produced."""

    def accepts_exit(self, completed: subprocess.CompletedProcess, workdir: Path) -> bool:
        return completed.returncode == 0

    def locate(self) -> str:
        found = shutil.which(self.binary)
        if found is None:
            raise ToolInvocationError(
                self.name,
                f"'{self.binary}' not found on PATH (install: {self.install_hint})",
                code=ErrorCode.AG102,
            )
        return found

    def run(self, request: ToolRequest, runner: Runner = subprocess.run) -> list[GeneratedArtifact]:
        """Invoke the tool and return its artifacts, ordered by name.

        Raises:
            ToolInvocationError: Binary missing, non-zero exit, timeout, or an
                expected artifact was not produced.
        """
        binary_path = self.locate()
        with tempfile.TemporaryDirectory(prefix=f"archgraph-{self.name}-") as tmp:
            workdir = Path(tmp)
            cmd = self.command(binary_path, request, workdir)
            logger.debug(f"Running {' '.join(cmd)}")
            try:
                completed = runner(
                    cmd,
                    cwd=str(request.project_root),
                    capture_output=True,
                    text=True,
                    timeout=_TIMEOUT_SECONDS,
                )
            except subprocess.TimeoutExpired as e:
                raise ToolInvocationError(self.name, f"timed out after {e.timeout}s", cmd) from e
            except OSError as e:
                raise ToolInvocationError(self.name, str(e), cmd) from e

            if not self.accepts_exit(completed, workdir):
                stderr = (completed.stderr or "").strip().splitlines()
                reason = f"exit status {completed.returncode}"
                if stderr:
                    reason += f": {stderr[-1]}"
                raise ToolInvocationError(self.name, reason, cmd)

            texts = self.collect(completed, request, workdir)

        missing = sorted(set(self.artifacts) - set(texts))
        if missing:
            raise ToolInvocationError(self.name, f"did not produce {', '.join(missing)}")
        return [
            GeneratedArtifact(name, texts[name], self.artifacts[name]) for name in sorted(texts)
        ]


class PyreverseTool(ExternalDiagramTool):
    """pylint's pyreverse: class and package diagrams as Graphviz dot."""

    def __init__(self) -> None:
        super().__init__(
            name="pyreverse",
            binary="pyreverse",
            install_hint="pip install pylint",
            artifacts={"classes.dot": Determinism.EXACT, "packages.dot": Determinism.EXACT},
        )

    def command(self, binary_path, request, workdir):
        return [
            binary_path,
            "-o",
            "dot",
            "-p",
            request.project_name,
            *request.flags,
            "-d",
            str(workdir),
            *(str(d) for d in request.source_dirs),
        ]

    def collect(self, completed, request, workdir):
        texts = {}
        for kind in ("classes", "packages"):
            produced = workdir / f"{kind}_{request.project_name}.dot"
            if produced.exists():
                texts[f"{kind}.dot"] = produced.read_text(encoding="utf-8")
        return texts


class GoPlantUMLTool(ExternalDiagramTool):
    """goplantuml: PlantUML class diagram written to stdout."""

    def __init__(self) -> None:
        super().__init__(
            name="goplantuml",
            binary="goplantuml",
            install_hint="go install github.com/jfeliu007/goplantuml/cmd/goplantuml@latest",
            artifacts={"classes.puml": Determinism.EXACT},
            default_flags=("-recursive",),
        )

    def command(self, binary_path, request, workdir):
        return [binary_path, *(request.flags or self.default_flags), str(request.project_root)]

    def collect(self, completed, request, workdir):
        return {"classes.puml": completed.stdout}


class GoCallvisTool(ExternalDiagramTool):
    """go-callvis: call graph in Graphviz format. Attribute order is unstable."""

    def __init__(self) -> None:
        super().__init__(
            name="go-callvis",
            binary="go-callvis",
            install_hint="go install github.com/ofabry/go-callvis@latest",
            artifacts={"callgraph.gv": Determinism.FUZZY},
            default_flags=("-format", "dot"),
        )

    def command(self, binary_path, request, workdir):
        flags = request.flags or self.default_flags
        return [binary_path, *flags, "-file", str(workdir / "callgraph"), "."]

    def accepts_exit(self, completed, workdir):
        # go-callvis can exit non-zero after writing a complete graph
        return completed.returncode == 0 or (workdir / "callgraph.gv").exists()

    def collect(self, completed, request, workdir):
        produced = workdir / "callgraph.gv"
        if not produced.exists():
            return {}
        return {"callgraph.gv": produced.read_text(encoding="utf-8")}


EXTERNAL_TOOLS: dict[str, Callable[[], ExternalDiagramTool]] = {
    "pyreverse": PyreverseTool,
    "goplantuml": GoPlantUMLTool,
    "go-callvis": GoCallvisTool,
}


def get_tool(name: str) -> ExternalDiagramTool:
    factory: Optional[Callable[[], ExternalDiagramTool]] = EXTERNAL_TOOLS.get(name)
    if factory is None:
        known = ", ".join(sorted(EXTERNAL_TOOLS))
        raise ToolInvocationError(name, f"unknown tool (known: {known})", code=ErrorCode.AG102)
    return factory()
