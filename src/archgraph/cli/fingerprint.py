"""Fingerprint command: current vs tracked fingerprints per diagram kind."""

from pathlib import Path
from typing import List, Optional

import typer
from rich.table import Table

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
from ..detection import stable_fingerprint
from ..exceptions import ArchGraphError
from ..logging_config import setup_logging


@app.command()
def fingerprint(
    root: Optional[Path] = RootOption,
    config: Optional[Path] = ConfigOption,
    scan_dir: Optional[List[str]] = ScanDirOption,
    verbose: bool = VerboseOption,
    quiet: bool = QuietOption,
    log_file: Optional[str] = LogFileOption,
):
    """Print the fingerprint of each gated diagram next to the tracked one."""
    setup_logging(verbose=verbose, quiet=quiet, log_file=log_file)
    try:
        pipeline = build_pipeline(root, config, scan_dir)
        pass_result = pipeline.extract()
        tracked = pipeline.store.load()
    except ArchGraphError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(EXIT_ERROR)

    table = Table(title="Diagram fingerprints")
    table.add_column("Kind")
    table.add_column("Current")
    table.add_column("Tracked")
    table.add_column("")
    for artifact in pass_result.artifacts:
        if not artifact.gated:
            continue
        current = stable_fingerprint(artifact.text, artifact.determinism)
        previous = tracked.fingerprints.get(artifact.kind)
        status = "[green]match[/green]" if current == previous else "[yellow]differs[/yellow]"
        table.add_row(artifact.kind, current[:16], (previous or "-")[:16], status)
    console.print(table)
    console.print(f"Fact digest: {pass_result.fact_digest[:16]}")
