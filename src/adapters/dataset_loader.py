"""Carga del dataset de iteraciones (JSON).

Soporta formatos tipo:
- Lista:  [{"input": ..., "expected": {...}, "testConfig": {...}}, ...]
- Objeto: {"iterations": [...]}

Reglas:
- Cada registro se valida por separado: uno inválido se devuelve como
  `RejectedRecord` (iteración abortada) y no invalida el resto.
- Un registro sin `input` se carga igualmente; la fase Arrange lo rechaza.
- Un fichero ilegible, con JSON inválido o sin lista de iteraciones es un
  `DatasetError`.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from core.domain.models import DatasetItem, IterationRecord, RejectedRecord

logger = logging.getLogger(__name__)


class DatasetError(ValueError):
    """El dataset no se puede leer o no tiene la forma esperada."""


def _raw_text(value: Any) -> str | None:
    return None if value is None else str(value)


def _reject(index: int, raw: Any, exc: ValidationError) -> RejectedRecord:
    details = "; ".join(
        f"{'.'.join(str(part) for part in error['loc']) or 'record'}: {error['msg']}"
        for error in exc.errors()
    )
    description = None
    raw_input = None
    if isinstance(raw, dict):
        raw_input = _raw_text(raw.get("input"))
        config = raw.get("testConfig")
        if isinstance(config, dict) and isinstance(config.get("description"), str):
            description = config["description"]
    logger.warning("Dataset record %d is invalid: %s", index, details)
    return RejectedRecord(
        description=description,
        input=raw_input,
        error=f"Invalid dataset record {index}: {details}",
    )


def parse_dataset(data: Any) -> list[DatasetItem]:
    if isinstance(data, dict):
        data = data.get("iterations", [])
    if not isinstance(data, list):
        raise DatasetError("Dataset must be a JSON array or an object with an 'iterations' array")

    items: list[DatasetItem] = []
    for index, raw in enumerate(data, start=1):
        try:
            items.append(IterationRecord.model_validate(raw))
        except ValidationError as exc:
            items.append(_reject(index, raw, exc))
    return items


def load_dataset(path: Path) -> list[DatasetItem]:
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise DatasetError(f"Cannot read dataset {path}: {exc}") from exc
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise DatasetError(f"Dataset {path} is not valid JSON: {exc}") from exc
    return parse_dataset(data)
