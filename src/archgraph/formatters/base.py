"""Base formatter interface for review output."""

from abc import ABC, abstractmethod

from ..analysis import ReviewReport


class BaseFormatter(ABC):
    """Abstract base class for ReviewReport formatters."""

    @abstractmethod
    def render(self, report: ReviewReport) -> None:
        """Write the report to the terminal."""

    @abstractmethod
    def format(self, report: ReviewReport) -> str:
        """Return the formatted report."""
