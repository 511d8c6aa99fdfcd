"""Output formatters for review reports."""

from typing import Optional

from rich.console import Console

from .base import BaseFormatter
from .json_formatter import JsonFormatter
from .rich_formatter import RichFormatter


def get_formatter(name: str, console: Optional[Console] = None) -> BaseFormatter:
    """Get a formatter instance by name ("rich" or "json").

    ``console`` is where the rich formatter prints; JSON always goes to stdout.

    Raises:
        ValueError: If name is not recognized
    """
    formatters = {
        "rich": RichFormatter,
        "json": JsonFormatter,
    }
    cls = formatters.get(name)
    if cls is None:
        raise ValueError(f"Unknown formatter: {name!r}. Choose from: {', '.join(sorted(formatters))}")
    if cls is RichFormatter:
        return RichFormatter(console)
    return cls()


__all__ = [
    "BaseFormatter",
    "RichFormatter",
    "JsonFormatter",
    "get_formatter",
]
