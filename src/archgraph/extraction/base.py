"""Extraction contract shared by every language adapter.

An adapter is anything with ``language``, ``extensions``, ``resolution`` and
an ``extract(path, text)`` method returning a list of facts; no base class is
required. Adapters must be pure functions of file content so the scanner can
run them concurrently.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from .facts import Fact


@dataclass(frozen=True)
class ResolutionRules:
    """How a language maps a resolved relative path onto a module file.

    Attributes:
        suffixes: Candidates appended to the normalized path, tried in order
            ("" means the path may already name the file exactly).
        names_may_be_modules: ``from . import x`` style imports, where an
            imported name can itself be a sibling module.
    """

    suffixes: tuple[str, ...] = ("",)
    names_may_be_modules: bool = False


@runtime_checkable
class FactExtractor(Protocol):
    """Fact-producing capability for one source language."""

    language: str
    extensions: tuple[str, ...]
    resolution: ResolutionRules

    def extract(self, path: str, text: str) -> list[Fact]:
        """Produce the facts for one file.

        Raises:
            ExtractionError: If the file cannot be parsed.
        """
        ...
