"""geocheck command line interface.

Thin Typer front-end over `core.services.iteration_pipeline`: it loads
settings and datasets, builds the HTTP transport, prints Rich tables and
exports reports. Exit codes: 0 all iterations passed, 1 some iteration
failed or aborted, 2 unusable dataset.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from adapters.dataset_loader import DatasetError, load_dataset
from adapters.http_client import HttpxTransport
from adapters.json_exporter import export_run_json
from adapters.report_exporter import export_run_html
from cli import doctor
from cli.ui_components import build_iteration_table, build_summary_panel, print_banner
from core.config import AppSettings
from core.domain.models import DatasetItem, IterationReport, RunReport
from core.interfaces.transport import Transport
from core.services.iteration_pipeline import PipelineHooks, build_record, describe, run_dataset

app = typer.Typer(
    no_args_is_help=True,
    help="Contract checks for the maps-bridge geocoding API.",
)
app.add_typer(doctor.app, name="doctor")

console = Console()
logger = logging.getLogger(__name__)


def setup_logging(*, verbose: bool = False, quiet: bool = False) -> None:
    """Configure logging with Rich handler."""
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO

    handler = RichHandler(
        console=None,  # Use default stderr
        show_time=True,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name in ("httpx", "httpcore"):
        logging.getLogger(name).setLevel(logging.WARNING)


def sanitize_for_filename(value: str) -> str:
    """Generate a filesystem-friendly slug for reports."""

    out: list[str] = []
    for ch in value.strip():
        if ch.isalnum() or ch in ("-", "_", "."):
            out.append(ch)
        else:
            out.append("-")
    cleaned = "".join(out).strip("-_.")
    return cleaned or "run"


def build_transport(settings: AppSettings) -> Transport:
    return HttpxTransport.from_settings(settings)


def _settings(base_url: Optional[str], endpoint: Optional[str]) -> AppSettings:
    settings = AppSettings()
    updates: dict[str, str] = {}
    if base_url:
        updates["base_url"] = base_url
    if endpoint:
        updates["endpoint_path"] = endpoint
    return settings.model_copy(update=updates) if updates else settings


async def _execute(
    records: list[DatasetItem],
    settings: AppSettings,
    hooks: PipelineHooks,
) -> RunReport:
    transport = build_transport(settings)
    try:
        return await run_dataset(records=records, transport=transport, hooks=hooks)
    finally:
        close = getattr(transport, "aclose", None)
        if close is not None:
            await close()


def _hooks(*, quiet: bool) -> PipelineHooks:
    def on_start(index: int, record: DatasetItem) -> None:
        if not quiet:
            console.print(f"[cyan]>[/cyan] {index}. {describe(record)}  [dim]{record.input or ''}[/dim]")

    def on_done(index: int, report: IterationReport) -> None:
        if not quiet or not report.passed:
            console.print(build_iteration_table(report, index=index))

    def on_warning(message: str) -> None:
        console.print(f"[yellow]Warning:[/yellow] {message}")

    return PipelineHooks(iteration_start=on_start, iteration_done=on_done, warning=on_warning)


def _finish(
    report: RunReport,
    *,
    settings: AppSettings,
    label: str,
    json_out: Optional[Path],
    html_out: Optional[Path],
    export: bool,
) -> None:
    if export:
        stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        stem = f"{sanitize_for_filename(label)}_{stamp}"
        json_out = json_out or settings.report_dir / f"{stem}.json"
        html_out = html_out or settings.report_dir / f"{stem}.html"

    if json_out:
        path = export_run_json(report=report, output_path=json_out)
        console.print(f"[green]JSON report:[/green] {path}")
    if html_out:
        path = export_run_html(report=report, output_path=html_out, target=settings.endpoint_url)
        console.print(f"[green]HTML report:[/green] {path}")

    console.print(build_summary_panel(report))
    if not report.passed:
        raise typer.Exit(code=1)


@app.command("run")
def run_command(
    dataset: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="JSON dataset of iterations."),
    base_url: Optional[str] = typer.Option(None, "--base-url", help="Override GEOCHECK_BASE_URL."),
    endpoint: Optional[str] = typer.Option(None, "--endpoint", help="Override GEOCHECK_ENDPOINT_PATH."),
    json_out: Optional[Path] = typer.Option(None, "--json-out", help="Write the JSON report here."),
    html_out: Optional[Path] = typer.Option(None, "--html-out", help="Write the HTML report here."),
    export: bool = typer.Option(False, "--export", help="Write JSON and HTML reports into the report dir."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only print failures and the summary."),
) -> None:
    """Run every iteration of DATASET against the service."""

    setup_logging(verbose=verbose, quiet=quiet)
    if not quiet:
        print_banner(console)

    try:
        records = load_dataset(dataset)
    except DatasetError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=2) from exc

    settings = _settings(base_url, endpoint)
    logger.info("Running %d iteration(s) against %s", len(records), settings.endpoint_url)
    report = asyncio.run(_execute(records, settings, _hooks(quiet=quiet)))
    _finish(
        report,
        settings=settings,
        label=dataset.stem,
        json_out=json_out,
        html_out=html_out,
        export=export,
    )


@app.command("check")
def check_command(
    input: str = typer.Argument(..., help="Map URL, coordinates or query to convert."),
    lat: Optional[float] = typer.Option(None, "--lat", help="Expected latitude."),
    lon: Optional[float] = typer.Option(None, "--lon", help="Expected longitude."),
    name: Optional[str] = typer.Option(None, "--name", help="Expected name fragment."),
    address: Optional[str] = typer.Option(None, "--address", help="Expected address fragment."),
    description: Optional[str] = typer.Option(None, "--description", "-d", help="Label for the report."),
    skip_name: bool = typer.Option(False, "--skip-name", help="Skip name validation."),
    skip_address: bool = typer.Option(False, "--skip-address", help="Skip address comparison."),
    base_url: Optional[str] = typer.Option(None, "--base-url", help="Override GEOCHECK_BASE_URL."),
    endpoint: Optional[str] = typer.Option(None, "--endpoint", help="Override GEOCHECK_ENDPOINT_PATH."),
    json_out: Optional[Path] = typer.Option(None, "--json-out", help="Write the JSON report here."),
    html_out: Optional[Path] = typer.Option(None, "--html-out", help="Write the HTML report here."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only print failures and the summary."),
) -> None:
    """Run a single ad-hoc iteration for INPUT."""

    setup_logging(verbose=verbose, quiet=quiet)

    record = build_record(
        input=input,
        lat=lat,
        lon=lon,
        name=name,
        address=address,
        description=description or input,
        skip_name_validation=skip_name,
        skip_address_validation=skip_address,
    )
    settings = _settings(base_url, endpoint)
    report = asyncio.run(_execute([record], settings, _hooks(quiet=quiet)))
    _finish(
        report,
        settings=settings,
        label=description or input,
        json_out=json_out,
        html_out=html_out,
        export=False,
    )


def run() -> None:
    app()


if __name__ == "__main__":
    run()
