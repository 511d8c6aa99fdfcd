"""Review command: structural diff against the committed graph snapshot."""

from pathlib import Path
from typing import List, Optional

import typer

from . import app
from ._common import (
    EXIT_ERROR,
    ConfigOption,
    LogFileOption,
    QuietOption,
    RootOption,
    ScanDirOption,
    VerboseOption,
    build_pipeline,
    console,
)
from ..exceptions import ArchGraphError
from ..formatters import get_formatter
from ..logging_config import setup_logging


@app.command()
def review(
    root: Optional[Path] = RootOption,
    config: Optional[Path] = ConfigOption,
    scan_dir: Optional[List[str]] = ScanDirOption,
    json_output: bool = typer.Option(False, "--json", help="Print the report as JSON"),
    verbose: bool = VerboseOption,
    quiet: bool = QuietOption,
    log_file: Optional[str] = LogFileOption,
):
    """Show added/removed/modified modules and types, consumers, dead ends and orphans."""
    setup_logging(verbose=verbose, quiet=quiet, log_file=log_file)
    try:
        pipeline = build_pipeline(root, config, scan_dir)
        report = pipeline.review()
    except ArchGraphError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(EXIT_ERROR)

    get_formatter("json" if json_output else "rich", console).render(report)
