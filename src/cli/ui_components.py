"""Componentes de UI para CLI (Rich).

Separa los detalles visuales (tablas/paneles) de la lógica de comandos para
reutilizarlos en `run` y `check`.
"""

from __future__ import annotations

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import IterationReport, ReportEntry, RunReport


def print_banner(console: Console) -> None:
    """Imprime el banner de bienvenida (se omite en modo `--quiet`)."""

    title = Text("geocheck", style="bold cyan")
    subtitle = Text("Contract checks • Geocoding • Map links", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def _status_text(entry: ReportEntry) -> Text:
    if not entry.passed:
        return Text("FAIL", style="bold red")
    if entry.skipped:
        return Text("SKIP", style="dim")
    return Text("PASS", style="green")


def build_iteration_table(report: IterationReport, *, index: int | None = None) -> Table:
    """Tabla con un check por fila, en el orden del reporte."""

    prefix = f"{index}. " if index is not None else ""
    table = Table(title=f"{prefix}{report.description}", title_justify="left")
    table.add_column("Check", style="cyan")
    table.add_column("Result", no_wrap=True)
    table.add_column("Message", style="white", overflow="fold")

    if report.aborted:
        table.add_row("Arrange", Text("ABORTED", style="bold red"), report.error or "")
        return table

    for entry in report.entries:
        table.add_row(entry.check_name, _status_text(entry), entry.message or "")
    return table


def build_summary_panel(report: RunReport) -> Panel:
    """Panel con los totales de la ejecución."""

    ok = report.passed
    body = Text()
    body.append(f"Iterations: {len(report.iterations)}")
    body.append(f"  (failed: {report.failed_iterations})\n", style="red" if report.failed_iterations else "dim")
    body.append(f"Checks: {report.total_checks}")
    body.append(f"  (failed: {report.failed_checks})", style="red" if report.failed_checks else "dim")

    title = Text("PASSED" if ok else "FAILED", style="bold green" if ok else "bold red")
    return Panel(body, title=title, border_style="green" if ok else "red")
