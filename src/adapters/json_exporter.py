"""Exportación JSON del reporte de ejecución.

Formato estable (claves ordenadas, UTF-8) para que el harness externo pueda
comparar ejecuciones o calcular su propio estado agregado.
"""

from __future__ import annotations

import json
from pathlib import Path

from core.domain.models import RunReport


def run_report_payload(report: RunReport) -> dict:
    return report.model_dump(mode="json", by_alias=True)


def export_run_json(*, report: RunReport, output_path: Path) -> Path:
    """Exporta `RunReport` a JSON UTF-8 con formato estable."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    payload = run_report_payload(report)
    output_path.write_text(
        json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True) + "\n",
        encoding="utf-8",
    )
    return output_path
