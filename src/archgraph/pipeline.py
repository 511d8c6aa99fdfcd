"""End-to-end passes: check, generate and review.

    source files -> facts -> Graph -> artifacts
                                   -> ReviewReport (old snapshot vs new Graph)
    artifacts -> change detection (vs committed files) -> gate (vs tracked fingerprints)

``check`` never writes. ``generate`` writes every artifact to ``<name>.new``,
keeps the ones that changed (or all of them with ``force``) by renaming over
the committed file, deletes the rest, and then runs the gate against the
staged change set. The graph-data.json snapshot is held back until the gate
is CLEAN, so it always holds the last approved graph.
"""

from __future__ import annotations

import os
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

from .analysis import ReviewReport, StructuralDiffAnalyzer
from .config import DiagramConfig, compute_base_dir, detect_language, detect_project_name
from .detection import ArtifactCheck, ChangeDetector, Determinism
from .diagrams import GraphDataSnapshot, default_serializers
from .exceptions import ArtifactError, ErrorCode
from .extraction import (
    ExtractionResult,
    SourceScanner,
    ToolRequest,
    fact_set_digest,
    get_extractor,
    get_tool,
)
from .extraction.external import Runner
from .gate import FingerprintStore, GateController, GateDecision, JsonFingerprintStore, staged_files
from .graph import Graph, build_graph, load_graph
from .logging_config import get_logger

logger = get_logger(__name__)

NEW_SUFFIX = ".new"


@dataclass(frozen=True)
class Artifact:
    """One generated file.

    ``kind`` keys the fingerprint store; ``gated`` artifacts take part in
    the review gate.
    """

    name: str
    kind: str
    text: str
    determinism: Determinism = Determinism.EXACT
    gated: bool = True


@dataclass(frozen=True)
class PassResult:
    """Everything one extraction pass produced."""

    language: str
    base_dir: Path
    extraction: ExtractionResult
    graph: Graph
    artifacts: tuple[Artifact, ...]
    fact_digest: str

    @property
    def warnings(self) -> list[str]:
        return [f"{w.path}: {w.message}" for w in self.extraction.warnings]


@dataclass(frozen=True)
class CheckResult:
    checks: tuple[ArtifactCheck, ...]
    warnings: tuple[str, ...] = ()

    @property
    def stale(self) -> list[str]:
        return [c.name for c in self.checks if c.changed]

    @property
    def is_stale(self) -> bool:
        return any(c.changed for c in self.checks)


@dataclass(frozen=True)
class GenerateResult:
    checks: tuple[ArtifactCheck, ...]
    written: tuple[str, ...]
    decision: GateDecision
    report: ReviewReport
    warnings: tuple[str, ...] = field(default_factory=tuple)


class DiagramPipeline:
    """Runs passes over one project.

    Args:
        config: Loaded configuration
        project_root: Directory config paths are relative to
        store: Fingerprint store; a JSON store at ``config.tracking_path`` when None
        change_set: Callable returning the pending change set; staged git files by default
        tool_runner: subprocess runner handed to external tools
    """

    def __init__(
        self,
        config: DiagramConfig,
        project_root: Path,
        store: Optional[FingerprintStore] = None,
        change_set: Optional[Callable[[], list[str]]] = None,
        tool_runner: Runner = subprocess.run,
    ) -> None:
        self.config = config
        self.project_root = Path(project_root).resolve()
        self.diagrams_dir = config.diagrams_path(self.project_root)
        if store is None:
            store = JsonFingerprintStore(config.tracking_path(self.project_root))
        self.store = store
        self._change_set = change_set or (lambda: staged_files(self.project_root))
        self._tool_runner = tool_runner

    # ── extraction ──────────────────────────────────────────────────

    def extract(self) -> PassResult:
        """Extract facts, build the graph and render every artifact (no writes).

        Raises:
            ToolInvocationError: If a configured external tool cannot run.
        """
        language = detect_language(self.config, self.project_root)
        extractor = get_extractor(language)
        extractor.extensions = self.config.file_extensions(language)
        base_dir = compute_base_dir(self.config, self.project_root)

        scanner = SourceScanner(
            extractor,
            base_dir=base_dir,
            exclude_dirs=self.config.exclude_dirs,
            max_workers=self.config.workers,
        )
        extraction = scanner.scan(self.config.scan_paths(self.project_root))
        graph = build_graph(
            extraction.facts_by_path, extractor.resolution, roots=self._source_roots(base_dir)
        )

        artifacts = [
            Artifact(s.filename, s.kind, s.render(graph), s.determinism, s.gated)
            for s in default_serializers()
        ]
        artifacts.extend(self._external_artifacts())

        return PassResult(
            language=language,
            base_dir=base_dir,
            extraction=extraction,
            graph=graph,
            artifacts=tuple(sorted(artifacts, key=lambda a: a.name)),
            fact_digest=fact_set_digest(extraction.files),
        )

    def _source_roots(self, base_dir: Path) -> list[str]:
        """Base dir first, then each scan dir under it, as anchors for absolute imports."""
        roots = [""]
        for scan_path in self.config.scan_paths(self.project_root):
            try:
                relative = scan_path.resolve().relative_to(base_dir)
            except ValueError:
                continue
            roots.append(relative.as_posix() if relative.parts else "")
        return roots

    def _external_artifacts(self) -> list[Artifact]:
        if not self.config.external_tools:
            return []
        request = ToolRequest(
            project_root=self.project_root,
            source_dirs=tuple(self.config.scan_paths(self.project_root)),
            project_name=self.config.project_name or detect_project_name(self.project_root),
            flags=tuple(self.config.tool_flags),
        )
        artifacts = []
        for name in self.config.external_tools:
            tool = get_tool(name)
            for generated in tool.run(request, runner=self._tool_runner):
                artifacts.append(
                    Artifact(generated.name, generated.name, generated.text, generated.determinism)
                )
        return artifacts

    # ── passes ──────────────────────────────────────────────────────

    def check(self, pass_result: Optional[PassResult] = None) -> CheckResult:
        """Compare freshly rendered artifacts with the committed ones."""
        pass_result = pass_result or self.extract()
        detector = ChangeDetector(self.diagrams_dir)
        checks = detector.check_all((a.name, a.text, a.determinism) for a in pass_result.artifacts)
        return CheckResult(tuple(checks), tuple(pass_result.warnings))

    def old_graph(self) -> Graph:
        """Graph from the last approved graph-data.json (empty if none)."""
        return load_graph(self.diagrams_dir / GraphDataSnapshot.filename)

    def review(self, pass_result: Optional[PassResult] = None) -> ReviewReport:
        """Structural diff between the committed snapshot and the current tree."""
        pass_result = pass_result or self.extract()
        analyzer = StructuralDiffAnalyzer(self.config.entry_point_patterns)
        return analyzer.analyze(self.old_graph(), pass_result.graph)

    def generate(self, force: bool = False) -> GenerateResult:
        """Write changed artifacts and run the review gate.

        graph-data.json is the snapshot reviews diff against, so it is only
        replaced once the gate is CLEAN; a blocked run leaves the last
        approved snapshot in place.

        Raises:
            ToolInvocationError: If a configured external tool cannot run.
            PersistenceError: If the fingerprint store cannot be used.
            ArtifactError: If an artifact cannot be written.
        """
        pass_result = self.extract()
        report = self.review(pass_result)
        checks = self.check(pass_result).checks
        snapshot = [a for a in pass_result.artifacts if a.name == GraphDataSnapshot.filename]
        rendered = [a for a in pass_result.artifacts if a.name != GraphDataSnapshot.filename]
        written = self._write(rendered, checks, force)

        gated = [a for a in pass_result.artifacts if a.gated]
        controller = GateController(self.store, self.config.review_artifact)
        decision = controller.evaluate(
            {a.kind: a.text for a in gated},
            self._change_set(),
            report=report,
            fact_digest=pass_result.fact_digest,
            determinism={a.kind: a.determinism for a in gated},
        )
        if decision.blocked:
            logger.debug(f"Keeping approved {GraphDataSnapshot.filename} until review")
        else:
            written.extend(self._write(snapshot, checks, force))
        return GenerateResult(
            checks=checks,
            written=tuple(sorted(written)),
            decision=decision,
            report=report,
            warnings=tuple(pass_result.warnings),
        )

    def _write(
        self, artifacts: list[Artifact], checks: tuple[ArtifactCheck, ...], force: bool
    ) -> list[str]:
        changed = {c.name for c in checks if c.changed}
        staged: list[tuple[Path, Path]] = []
        try:
            self.diagrams_dir.mkdir(parents=True, exist_ok=True)
            for artifact in artifacts:
                target = self.diagrams_dir / artifact.name
                pending = target.with_name(target.name + NEW_SUFFIX)
                pending.write_text(artifact.text, encoding="utf-8", newline="\n")
                staged.append((pending, target))

            written = []
            for pending, target in staged:
                if force or target.name in changed:
                    os.replace(pending, target)
                    written.append(target.name)
                    logger.info(f"Wrote {target}")
                else:
                    pending.unlink()
            return written
        except OSError as e:
            for pending, _ in staged:
                pending.unlink(missing_ok=True)
            raise ArtifactError(self.diagrams_dir, str(e), code=ErrorCode.AG301) from e
