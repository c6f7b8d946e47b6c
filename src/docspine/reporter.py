"""Diagnostics report printed with rich."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from docspine.resolver.diagnostics import DiagnosticReport, Severity

SEVERITY_STYLES = {
    Severity.ERROR: "bold red",
    Severity.WARNING: "yellow",
    Severity.INFO: "dim",
}


def build_table(report: DiagnosticReport, min_severity: Severity = Severity.INFO) -> Table:
    """One row per diagnostic at or above ``min_severity``."""
    order = list(Severity)
    threshold = order.index(min_severity)

    table = Table(title="Documentation Report")
    table.add_column("Severity", justify="center", no_wrap=True)
    table.add_column("Code", style="cyan", no_wrap=True)
    table.add_column("Record")
    table.add_column("Location")
    table.add_column("Message")

    for diagnostic in report:
        if order.index(diagnostic.severity) < threshold:
            continue
        style = SEVERITY_STYLES[diagnostic.severity]
        table.add_row(
            f"[{style}]{diagnostic.severity.value}[/]",
            diagnostic.code,
            escape(diagnostic.record_id or "-"),
            escape(", ".join(str(loc) for loc in diagnostic.locations) or "-"),
            escape(diagnostic.message),
        )
    return table


def print_report(
    report: DiagnosticReport,
    console: Console | None = None,
    min_severity: Severity = Severity.INFO,
) -> None:
    """Print the diagnostics table and a per-severity summary."""
    console = console or Console()
    if not len(report):
        console.print("[bold green]✅ No diagnostics[/bold green]")
        return

    console.print(build_table(report, min_severity))
    counts = report.counts()
    console.print(
        f"[bold]Errors:[/bold] {counts['error']}  "
        f"[bold]Warnings:[/bold] {counts['warning']}  "
        f"[bold]Info:[/bold] {counts['info']}"
    )


__all__ = ["build_table", "print_report"]
