"""Generate command: write diagrams and run the review gate."""

from pathlib import Path
from typing import List, Optional

import typer

from . import app
from ._common import (
    EXIT_BLOCKED,
    EXIT_CLEAN,
    EXIT_ERROR,
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
from ..formatters import get_formatter
from ..logging_config import setup_logging


@app.command()
def generate(
    root: Optional[Path] = RootOption,
    config: Optional[Path] = ConfigOption,
    scan_dir: Optional[List[str]] = ScanDirOption,
    force: bool = typer.Option(
        False, "--force", "-f",
        help="Rewrite every artifact even when unchanged",
    ),
    verbose: bool = VerboseOption,
    quiet: bool = QuietOption,
    log_file: Optional[str] = LogFileOption,
):
    """Write changed diagrams, then gate on the review artifact.

    Exit status: [green]0[/green] clean, [red]3[/red] blocked, [red]1[/red] error.
    """
    setup_logging(verbose=verbose, quiet=quiet, log_file=log_file)
    try:
        pipeline = build_pipeline(root, config, scan_dir)
        result = pipeline.generate(force=force)
    except ArchGraphError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(EXIT_ERROR)

    print_warnings(result.warnings)
    if result.written:
        for name in result.written:
            console.print(f"  [green]wrote[/green] {name}")
    else:
        console.print("[dim]All diagrams already up to date.[/dim]")

    decision = result.decision
    if decision.blocked:
        console.print(
            f"\n[red bold]Blocked:[/red bold] structural change in "
            f"{', '.join(decision.changed_kinds)} needs review. "
            f"Update and stage [bold]{decision.review_artifact}[/bold], then retry."
        )
        if decision.report is not None:
            get_formatter("rich", console).render(decision.report)
        raise typer.Exit(EXIT_BLOCKED)

    if decision.persisted:
        console.print(
            f"[green]Review found ({decision.review_artifact}); "
            "diagram fingerprints updated.[/green]"
        )
    raise typer.Exit(EXIT_CLEAN)
