"""Check command: are the committed diagrams current?"""

from pathlib import Path
from typing import List, Optional

import typer

from . import app
from ._common import (
    EXIT_CLEAN,
    EXIT_ERROR,
    EXIT_STALE,
    ConfigOption,
    LogFileOption,
    QuietOption,
    RootOption,
    ScanDirOption,
    VerboseOption,
    build_pipeline,
    console,
    print_warnings,
)
from ..exceptions import ArchGraphError
from ..logging_config import setup_logging


@app.command()
def check(
    root: Optional[Path] = RootOption,
    config: Optional[Path] = ConfigOption,
    scan_dir: Optional[List[str]] = ScanDirOption,
    verbose: bool = VerboseOption,
    quiet: bool = QuietOption,
    log_file: Optional[str] = LogFileOption,
):
    """Regenerate diagrams in memory and compare with the committed ones.

    Exit status: [green]0[/green] current, [yellow]2[/yellow] stale, [red]1[/red] error.
    """
    setup_logging(verbose=verbose, quiet=quiet, log_file=log_file)
    try:
        pipeline = build_pipeline(root, config, scan_dir)
        result = pipeline.check()
    except ArchGraphError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(EXIT_ERROR)

    print_warnings(result.warnings)
    for item in result.checks:
        status = "[yellow]stale[/yellow]" if item.changed else "[green]current[/green]"
        console.print(f"  {status}  {item.name} [dim]({item.determinism.value})[/dim]")

    if result.is_stale:
        console.print(
            f"[yellow]Diagrams are out of date:[/yellow] {', '.join(result.stale)}. "
            "Run [bold]archgraph generate[/bold]."
        )
        raise typer.Exit(EXIT_STALE)
    console.print("[green]Diagrams are up to date.[/green]")
    raise typer.Exit(EXIT_CLEAN)
