"""Rich terminal formatter for review reports."""

from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..analysis import ReviewReport
from ..analysis.review import type_label
from .base import BaseFormatter


def _change_tags(changes) -> str:
    return ", ".join(f"[yellow]{c}[/yellow]" for c in changes)


class RichFormatter(BaseFormatter):
    """Summary panel, change tables, consumers, dead ends and orphans."""

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console()

    def render(self, report: ReviewReport) -> None:
        self._print_summary(report)
        if report.added_modules or report.removed_modules or report.modified_modules:
            self.console.print(self._module_table(report))
        if report.added_types or report.removed_types or report.modified_types:
            self.console.print(self._type_table(report))
        consumers = [c for c in report.consumers if not c.is_empty]
        if consumers:
            self.console.print(self._consumer_table(report))
        if report.dead_ends:
            self.console.print("\n[bold]Dead ends[/bold] (exported, never imported)")
            for dead in report.dead_ends:
                self.console.print(f"  {dead.module}: [cyan]{dead.symbol}[/cyan]")
        if report.orphans:
            self.console.print("\n[bold]Orphans[/bold] (no imports, no exports)")
            for path in report.orphans:
                self.console.print(f"  {path}")

    def format(self, report: ReviewReport) -> str:
        with self.console.capture() as capture:
            self.render(report)
        return capture.get()

    def _print_summary(self, report: ReviewReport) -> None:
        if not report.has_structural_changes:
            body = "[green]No structural changes[/green]"
        else:
            body = (
                f"Modules: [green]+{len(report.added_modules)}[/green] "
                f"[red]-{len(report.removed_modules)}[/red] "
                f"[yellow]~{len(report.modified_modules)}[/yellow]\n"
                f"Types:   [green]+{len(report.added_types)}[/green] "
                f"[red]-{len(report.removed_types)}[/red] "
                f"[yellow]~{len(report.modified_types)}[/yellow]"
            )
        body += f"\nDead ends: {len(report.dead_ends)}   Orphans: {len(report.orphans)}"
        self.console.print(Panel(body, title="[bold cyan]Structural review[/bold cyan]", expand=False))

    @staticmethod
    def _module_table(report: ReviewReport) -> Table:
        table = Table(title="Modules", show_lines=False)
        table.add_column("Status")
        table.add_column("Module")
        table.add_column("Details")
        for path in report.added_modules:
            table.add_row("[green]added[/green]", path, "")
        for path in report.removed_modules:
            table.add_row("[red]removed[/red]", path, "")
        for delta in report.modified_modules:
            details = []
            if delta.added_exports or delta.removed_exports:
                details.append(_pm("exports", delta.added_exports, delta.removed_exports))
            if delta.added_imports or delta.removed_imports:
                details.append(_pm("imports", delta.added_imports, delta.removed_imports))
            if delta.added_types or delta.removed_types:
                details.append(_pm("types", delta.added_types, delta.removed_types))
            table.add_row(
                f"[yellow]modified[/yellow] ({_change_tags(delta.changes)})",
                delta.path,
                "\n".join(details),
            )
        return table

    @staticmethod
    def _type_table(report: ReviewReport) -> Table:
        table = Table(title="Types")
        table.add_column("Status")
        table.add_column("Type")
        table.add_column("Details")
        for key in report.added_types:
            table.add_row("[green]added[/green]", type_label(key), "")
        for key in report.removed_types:
            table.add_row("[red]removed[/red]", type_label(key), "")
        for delta in report.modified_types:
            details = []
            if delta.added_properties or delta.removed_properties:
                details.append(_pm("properties", delta.added_properties, delta.removed_properties))
            if delta.added_methods or delta.removed_methods:
                details.append(_pm("methods", delta.added_methods, delta.removed_methods))
            if "parent" in delta.changes:
                details.append(f"parent: {delta.old_parent or '-'} -> {delta.new_parent or '-'}")
            table.add_row(
                f"[yellow]modified[/yellow] ({_change_tags(delta.changes)})",
                delta.label,
                "\n".join(details),
            )
        return table

    @staticmethod
    def _consumer_table(report: ReviewReport) -> Table:
        table = Table(title="Consumers of changed entities")
        table.add_column("Entity")
        table.add_column("Imported by")
        table.add_column("Inherited by")
        for consumer in report.consumers:
            if consumer.is_empty:
                continue
            table.add_row(
                consumer.entity,
                "\n".join(consumer.importers),
                "\n".join(type_label(k) for k in consumer.subclasses),
            )
        return table


def _pm(label: str, added, removed) -> str:
    parts = [f"+{x}" for x in added] + [f"-{x}" for x in removed]
    return f"{label}: {' '.join(parts)}"
