"""Exportación de reportes HTML.

Notas:
- El HTML es un detalle de infraestructura (Jinja2); el Core solo conoce
  `RunReport`.
- La plantilla vive en `adapters/templates/run_report.html`.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from core.domain.models import RunReport


_TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"


def _get_env() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(_TEMPLATES_DIR)),
        autoescape=select_autoescape(["html", "xml"]),
    )


def render_run_html(*, report: RunReport, target: str | None = None) -> str:
    """Renderiza un HTML autocontenido para el reporte."""

    generated_at = datetime.now(timezone.utc).isoformat(timespec="seconds")
    template = _get_env().get_template("run_report.html")
    return template.render(
        report=report,
        target=target,
        generated_at=generated_at,
        iterations_total=len(report.iterations),
        iterations_failed=report.failed_iterations,
        checks_total=report.total_checks,
        checks_failed=report.failed_checks,
    )


def export_run_html(*, report: RunReport, output_path: Path, target: str | None = None) -> Path:
    """Exporta el reporte como HTML."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    html = render_run_html(report=report, target=target)
    output_path.write_text(html, encoding="utf-8")
    return output_path
