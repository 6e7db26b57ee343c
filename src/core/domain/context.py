"""Contexto compartido entre las fases Arrange y Assert.

Reglas:
- Solo admite las siete claves de `CONTEXT_KEYS`; cualquier otra es un error.
- Una clave ausente y una clave con valor `None` son distintas: `clear()`
  deja el contexto vacío (sin claves), no con valores nulos.
- Se pasa explícitamente por referencia: una iteración a la vez.
"""

from __future__ import annotations

import math
from typing import Any

EXPECTED_LAT = "expectedLat"
EXPECTED_LON = "expectedLon"
EXPECTED_ADDRESS = "expectedAddress"
EXPECTED_NAME = "expectedName"
TEST_DESCRIPTION = "testDescription"
SKIP_ADDRESS_VALIDATION = "skipAddressValidation"
SKIP_NAME_VALIDATION = "skipNameValidation"

CONTEXT_KEYS: tuple[str, ...] = (
    EXPECTED_LAT,
    EXPECTED_LON,
    EXPECTED_ADDRESS,
    EXPECTED_NAME,
    TEST_DESCRIPTION,
    SKIP_ADDRESS_VALIDATION,
    SKIP_NAME_VALIDATION,
)

DEFAULT_DESCRIPTION = "Unknown Test"


class SharedContext:
    """Almacén clave/valor con ciclo de vida de una iteración."""

    def __init__(self) -> None:
        self._values: dict[str, Any] = {}

    def set(self, key: str, value: Any) -> None:
        self._require_known(key)
        self._values[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        self._require_known(key)
        return self._values.get(key, default)

    def unset(self, key: str) -> None:
        self._require_known(key)
        self._values.pop(key, None)

    def clear(self) -> None:
        for key in CONTEXT_KEYS:
            self.unset(key)

    def is_empty(self) -> bool:
        return not self._values

    def snapshot(self) -> dict[str, Any]:
        """Copia superficial de las entradas presentes (para logs y tests)."""

        return dict(self._values)

    # Accesores tipados usados por los checks.

    @property
    def expected_lat(self) -> float | None:
        return _as_float(self.get(EXPECTED_LAT))

    @property
    def expected_lon(self) -> float | None:
        return _as_float(self.get(EXPECTED_LON))

    @property
    def expected_address(self) -> str | None:
        return self.get(EXPECTED_ADDRESS)

    @property
    def expected_name(self) -> str | None:
        return self.get(EXPECTED_NAME)

    @property
    def description(self) -> str:
        return self.get(TEST_DESCRIPTION) or DEFAULT_DESCRIPTION

    @property
    def skip_address_validation(self) -> bool:
        return bool(self.get(SKIP_ADDRESS_VALIDATION))

    @property
    def skip_name_validation(self) -> bool:
        return bool(self.get(SKIP_NAME_VALIDATION))

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"SharedContext({self._values!r})"

    @staticmethod
    def _require_known(key: str) -> None:
        if key not in CONTEXT_KEYS:
            raise KeyError(f"Unknown shared context key: {key!r}")


def _as_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(parsed) else parsed
