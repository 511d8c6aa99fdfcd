"""CLI entry point: registers all subcommands."""

import typer

app = typer.Typer(
    name="archgraph",
    help="archgraph - Architecture diagrams from source, with a review gate for structural change",
    add_completion=False,
    rich_markup_mode="rich",
)


# Import subcommands to register them
from .check import check as _check  # noqa: F401, E402
from .generate import generate as _generate  # noqa: F401, E402
from .review import review as _review  # noqa: F401, E402
from .fingerprint import fingerprint as _fingerprint  # noqa: F401, E402
