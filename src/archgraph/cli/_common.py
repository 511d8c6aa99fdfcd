"""Shared CLI helpers."""

from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console

from ..config import load_config
from ..gate import find_project_root
from ..pipeline import DiagramPipeline

console = Console()

EXIT_CLEAN = 0
EXIT_ERROR = 1
EXIT_STALE = 2
EXIT_BLOCKED = 3

RootOption = typer.Option(
    None, "--root", "-r",
    help="Project root (default: enclosing git work tree)",
    file_okay=False, dir_okay=True,
)
ConfigOption = typer.Option(
    None, "--config", "-c",
    help="Configuration file path (TOML format)",
    exists=True, file_okay=True, dir_okay=False, readable=True,
)
ScanDirOption = typer.Option(
    None, "--scan-dir", "-s",
    help="Directory to scan (repeatable; overrides config)",
)
VerboseOption = typer.Option(False, "--verbose", "-v", help="Enable debug logging")
QuietOption = typer.Option(False, "--quiet", "-q", help="Only log errors")
LogFileOption = typer.Option(None, "--log-file", help="Also append plain-text logs to this file")


def build_pipeline(
    root: Optional[Path],
    config_file: Optional[Path],
    scan_dirs: Optional[List[str]] = None,
) -> DiagramPipeline:
    """Pipeline for the project at ``root`` with CLI overrides applied."""
    project_root = Path(root).resolve() if root is not None else find_project_root()
    config = load_config(project_root, config_file=config_file, scan_dirs=scan_dirs or None)
    return DiagramPipeline(config, project_root)


def print_warnings(warnings) -> None:
    for warning in warnings:
        console.print(f"[yellow]warning:[/yellow] {warning}", highlight=False)
