"""Modelos del dominio (Pydantic v2).

Aquí viven los contratos que cruzan las fases de una iteración:
- `IterationRecord`: un caso de prueba tal y como llega del dataset.
- `RequestDescriptor`: la petición que construye la fase Arrange.
- `ServiceResponse` / `ResponseContract`: lo que devuelve el servicio.
- `CheckResult` y los modelos de reporte: lo que produce la fase Assert.

Nota:
- Estos modelos describen *qué* se valida, no *cómo* se transporta.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, Field, computed_field
from pydantic.config import ConfigDict

URL_PATTERN = r"^https?://.+"


class ExpectedCoordinates(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    lat: float | None = Field(default=None, description="Latitud esperada.")
    lon: float | None = Field(default=None, description="Longitud esperada.")


class Expectations(BaseModel):
    """Valores esperados de una iteración (todos opcionales)."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    coordinates: ExpectedCoordinates | None = Field(
        default=None,
        description="Coordenadas esperadas (tolerancia absoluta 0.0001).",
    )
    address: str | None = Field(
        default=None,
        description="Fragmento que debe aparecer en la dirección (sin distinguir mayúsculas).",
    )
    name: str | None = Field(
        default=None,
        description="Fragmento que debe aparecer en el nombre del lugar.",
    )


class CaseConfig(BaseModel):
    """Configuración por iteración (descripción y flags de omisión)."""

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    description: str | None = Field(
        default=None,
        description="Nombre legible del caso; prefija cada resultado del reporte.",
    )
    skip_address_validation: bool = Field(
        default=False,
        alias="skipAddressValidation",
        description="Omite la comparación de dirección (la dirección sigue siendo obligatoria).",
    )
    skip_name_validation: bool = Field(
        default=False,
        alias="skipNameValidation",
        description="Omite por completo la validación del nombre.",
    )


class IterationRecord(BaseModel):
    """Un caso de prueba del dataset.

    Reglas:
    - `input` es opcional a nivel de modelo: la fase Arrange es quien rechaza
      un registro sin input (error fatal de la iteración).
    - Es de solo lectura durante toda la iteración.
    """

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    input: str | None = Field(
        default=None,
        description="URL de mapa, coordenadas o texto libre a resolver.",
    )
    expected: Expectations = Field(
        default_factory=Expectations,
        description="Resultado esperado (opcional).",
    )
    test_config: CaseConfig = Field(
        default_factory=CaseConfig,
        alias="testConfig",
        description="Descripción y flags de omisión.",
    )


class RejectedRecord(BaseModel):
    """Registro del dataset que no cumple el modelo `IterationRecord`.

    Reglas:
    - El loader lo conserva en su posición; la ejecución lo reporta como
      iteración abortada y sigue con el resto del dataset.
    """

    model_config = ConfigDict(frozen=True)

    description: str | None = Field(default=None, description="`testConfig.description` si era legible.")
    input: str | None = Field(default=None, description="`input` en bruto, si existía.")
    error: str = Field(..., min_length=1, description="Motivo del rechazo.")


DatasetItem = IterationRecord | RejectedRecord


class RequestDescriptor(BaseModel):
    """Petición derivada de un `IterationRecord` (la consume el transporte)."""

    model_config = ConfigDict(frozen=True)

    method: str = Field(default="POST", description="Método HTTP.")
    body: str = Field(..., description="Cuerpo JSON ya serializado.")
    headers: dict[str, str] = Field(
        default_factory=lambda: {"Content-Type": "application/json"},
        description="Cabeceras de la petición.",
    )

    def payload(self) -> dict[str, Any]:
        return json.loads(self.body)


class ServiceResponse(BaseModel):
    """Respuesta cruda del servicio tal y como la entrega el transporte."""

    model_config = ConfigDict(frozen=True)

    status_code: int = Field(..., ge=0, description="Código HTTP (0 si no hubo respuesta).")
    elapsed_ms: float = Field(..., ge=0, description="Latencia de ida y vuelta en milisegundos.")
    body: str = Field(default="", description="Cuerpo de la respuesta sin decodificar.")

    def parsed_json(self) -> Any | None:
        """Decodifica el cuerpo (best-effort): `None` si no es JSON válido."""

        if not self.body:
            return None
        try:
            return json.loads(self.body)
        except ValueError:
            return None


class ResponseCoordinates(BaseModel):
    """Coordenadas de la respuesta.

    Reglas:
    - Modo estricto: `"37.4"` no es un número ni `"true"` un booleano.
    - Claves adicionales dentro de `coordinates` se ignoran.
    """

    model_config = ConfigDict(extra="ignore")

    lat: float = Field(..., ge=-90, le=90, strict=True)
    lon: float = Field(..., ge=-180, le=180, strict=True)
    valid: bool = Field(..., strict=True)


class ResponseLinks(BaseModel):
    """Enlaces por proveedor: exactamente las seis claves conocidas."""

    model_config = ConfigDict(extra="forbid")

    apple: str = Field(..., pattern=URL_PATTERN, strict=True)
    komoot: str = Field(..., pattern=URL_PATTERN, strict=True)
    bing: str = Field(..., pattern=URL_PATTERN, strict=True)
    osm: str = Field(..., pattern=URL_PATTERN, strict=True)
    waze: str = Field(..., pattern=URL_PATTERN, strict=True)
    google: str = Field(..., pattern=URL_PATTERN, strict=True)


class ResponseContract(BaseModel):
    """Esquema estricto de la respuesta del servicio (4 claves de primer nivel)."""

    model_config = ConfigDict(extra="forbid")

    coordinates: ResponseCoordinates
    name: str | None = None
    address: str
    links: ResponseLinks


# Derivadas del contrato: los checks no repiten la lista de claves.
PROVIDERS: tuple[str, ...] = tuple(ResponseLinks.model_fields)
TOP_LEVEL_KEYS: tuple[str, ...] = tuple(ResponseContract.model_fields)


class CheckResult(BaseModel):
    """Resultado de un check individual de la fase Assert.

    Reglas:
    - Un check omitido (`skipped`) cuenta como superado.
    - Los `warnings` son avisos suaves: se registran pero nunca fallan.
    """

    name: str = Field(..., min_length=1, description="Nombre legible del check.")
    passed: bool = Field(..., description="Resultado del check.")
    message: str | None = Field(
        default=None,
        description="Detalle (valor real vs. esperado) o resumen.",
    )
    skipped: bool = Field(default=False, description="El check no aplicaba a esta iteración.")
    warnings: list[str] = Field(default_factory=list, description="Avisos suaves.")


class ReportEntry(BaseModel):
    """Línea del reporte: un check con la descripción de la iteración como prefijo."""

    check_name: str = Field(..., serialization_alias="checkName")
    passed: bool
    skipped: bool = False
    message: str | None = None


class IterationReport(BaseModel):
    """Reporte ordenado de una iteración."""

    description: str = Field(..., description="Descripción de la iteración.")
    input: str | None = Field(default=None, description="Input enviado al servicio.")
    entries: list[ReportEntry] = Field(default_factory=list)
    aborted: bool = Field(
        default=False,
        description="La iteración se abortó antes de ejecutar los checks.",
    )
    error: str | None = Field(default=None, description="Causa del aborto, si lo hubo.")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def passed(self) -> bool:
        return not self.aborted and all(entry.passed for entry in self.entries)

    @property
    def failed_entries(self) -> list[ReportEntry]:
        return [entry for entry in self.entries if not entry.passed]


class RunReport(BaseModel):
    """Agregado de todas las iteraciones de una ejecución (lo calcula el harness)."""

    iterations: list[IterationReport] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_checks(self) -> int:
        return sum(len(it.entries) for it in self.iterations)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def failed_checks(self) -> int:
        return sum(len(it.failed_entries) for it in self.iterations)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def failed_iterations(self) -> int:
        return sum(1 for it in self.iterations if not it.passed)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def passed(self) -> bool:
        return self.failed_iterations == 0
