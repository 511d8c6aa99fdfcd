"""Git helpers: project root and the staged change set."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Optional

from ..logging_config import get_logger

logger = get_logger(__name__)


def find_project_root(start: Optional[Path] = None) -> Path:
    """Top level of the enclosing git work tree, or ``start`` (cwd) outside git."""
    start = Path(start) if start is not None else Path.cwd()
    try:
        result = subprocess.run(
            ["git", "-C", str(start), "rev-parse", "--show-toplevel"],
            capture_output=True,
            text=True,
            timeout=10,
        )
        if result.returncode == 0 and result.stdout.strip():
            return Path(result.stdout.strip())
    except (FileNotFoundError, subprocess.TimeoutExpired):
        pass
    return start.resolve()


def staged_files(repo_path: Path) -> list[str]:
    """Paths staged for commit, relative to the repository root.

    Returns an empty list when git is unavailable or ``repo_path`` is not a
    repository.
    """
    try:
        result = subprocess.run(
            ["git", "-C", str(repo_path), "diff", "--cached", "--name-only"],
            capture_output=True,
            text=True,
            timeout=10,
        )
    except (FileNotFoundError, subprocess.TimeoutExpired) as e:
        logger.warning(f"Could not read staged files: {e}")
        return []
    if result.returncode != 0:
        logger.warning(f"git diff --cached failed: {result.stderr.strip()}")
        return []
    return [f for f in result.stdout.strip().split("\n") if f]
