"""JSON formatter for review reports."""

import json

from ..analysis import ReviewReport
from .base import BaseFormatter


class JsonFormatter(BaseFormatter):
    """Render a ReviewReport as JSON on stdout."""

    def render(self, report: ReviewReport) -> None:
        print(self.format(report))

    def format(self, report: ReviewReport) -> str:
        return json.dumps(report.to_dict(), indent=2, sort_keys=True)
