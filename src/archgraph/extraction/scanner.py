"""File discovery and parallel fact extraction.

Usage:
    scanner = SourceScanner(PythonFactExtractor(), base_dir=root / "src")
    result = scanner.scan([root / "src" / "pkg"])
    # result.files: tuple[FileFacts] sorted by canonical path
    # result.warnings: files that failed to parse

Each file is extracted independently, so extraction runs on a thread pool.
Results are keyed and sorted by canonical path afterwards; completion order
never leaks into the output.
"""

from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

from ..exceptions import ErrorCode, ExtractionError
from ..logging_config import get_logger
from .base import FactExtractor
from .facts import ExtractionWarning, FileFacts

logger = get_logger(__name__)

_DEFAULT_WORKERS = min(os.cpu_count() or 4, 8)

DEFAULT_EXCLUDE_DIRS = (
    "node_modules",
    ".git",
    "dist",
    "build",
    "__pycache__",
    ".venv",
    "venv",
    ".tox",
)


@dataclass(frozen=True)
class ExtractionResult:
    """Facts for every discovered file plus the per-file failures."""

    files: tuple[FileFacts, ...]
    warnings: tuple[ExtractionWarning, ...] = ()

    @property
    def facts_by_path(self) -> dict[str, tuple]:
        return {ff.path: ff.facts for ff in self.files}

    @property
    def paths(self) -> list[str]:
        return [ff.path for ff in self.files]


def canonical_path(path: Path, base_dir: Path) -> str:
    """Path relative to ``base_dir`` with forward slashes."""
    return Path(os.path.relpath(path, base_dir)).as_posix()


def discover_files(
    scan_dirs: Iterable[Path],
    extensions: Iterable[str],
    exclude_dirs: Iterable[str] = DEFAULT_EXCLUDE_DIRS,
) -> list[Path]:
    """All files under ``scan_dirs`` with a matching extension, sorted."""
    wanted = tuple(extensions)
    skipped = set(exclude_dirs)
    found: set[Path] = set()
    for scan_dir in scan_dirs:
        scan_dir = Path(scan_dir)
        if scan_dir.is_file():
            if scan_dir.name.endswith(wanted):
                found.add(scan_dir.resolve())
            continue
        if not scan_dir.is_dir():
            logger.warning(f"Scan directory does not exist: {scan_dir}")
            continue
        for dirpath, dirnames, filenames in os.walk(scan_dir):
            dirnames[:] = sorted(d for d in dirnames if d not in skipped)
            for filename in filenames:
                if filename.endswith(wanted):
                    found.add((Path(dirpath) / filename).resolve())
    return sorted(found)


class SourceScanner:
    """Runs one extractor over a file tree."""

    def __init__(
        self,
        extractor: FactExtractor,
        base_dir: Path,
        exclude_dirs: Iterable[str] = DEFAULT_EXCLUDE_DIRS,
        max_workers: Optional[int] = None,
    ) -> None:
        self.extractor = extractor
        self.base_dir = Path(base_dir).resolve()
        self.exclude_dirs = tuple(exclude_dirs)
        self._max_workers = max_workers or _DEFAULT_WORKERS

    def extract_file(self, file_path: Path) -> FileFacts:
        """Facts for one file.

        Raises:
            ExtractionError: If the file cannot be read or parsed.
        """
        rel_path = canonical_path(file_path, self.base_dir)
        try:
            text = file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ExtractionError(rel_path, str(e), code=ErrorCode.AG100) from e
        return FileFacts(rel_path, tuple(self.extractor.extract(rel_path, text)))

    def scan(self, scan_dirs: Iterable[Path], parallel: bool = True) -> ExtractionResult:
        files = discover_files(scan_dirs, self.extractor.extensions, self.exclude_dirs)
        logger.info(f"Found {len(files)} {self.extractor.language} files to parse")
        return self.extract_all(files, parallel=parallel)

    def extract_all(self, file_paths: list[Path], parallel: bool = True) -> ExtractionResult:
        results: dict[str, FileFacts] = {}
        warnings: list[ExtractionWarning] = []

        def record_failure(err: ExtractionError) -> None:
            logger.warning(str(err))
            warnings.append(ExtractionWarning(err.path, err.reason))
            # the file still exists as a module, it just contributes no facts
            results[err.path] = FileFacts(err.path, ())

        if not parallel or len(file_paths) < 10:
            for file_path in file_paths:
                try:
                    facts = self.extract_file(file_path)
                    results[facts.path] = facts
                except ExtractionError as e:
                    record_failure(e)
        else:
            with ThreadPoolExecutor(max_workers=self._max_workers) as executor:
                futures = {executor.submit(self.extract_file, fp): fp for fp in file_paths}
                for future in as_completed(futures):
                    try:
                        facts = future.result()
                        results[facts.path] = facts
                    except ExtractionError as e:
                        record_failure(e)

        ordered = tuple(results[path] for path in sorted(results))
        warnings.sort(key=lambda w: w.path)
        return ExtractionResult(files=ordered, warnings=tuple(warnings))
