"""Configuración del harness.

Notas:
- Centraliza variables de entorno (pydantic-settings) para la CLI y los
  adaptadores HTTP.
- Los servicios del Core (Arrange/Assert/Cleanup) no leen configuración:
  reciben todo por parámetro.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

APP_DIR_NAME = "geocheck"
CONFIG_DIR_ENV = "GEOCHECK_CONFIG_DIR"


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario.

    `GEOCHECK_CONFIG_DIR` tiene prioridad (útil en CI); si no, se usa la
    ubicación habitual de cada plataforma.
    """

    override = os.environ.get(CONFIG_DIR_ENV)
    if override:
        return Path(override)
    if sys.platform.startswith("win"):
        return Path(os.environ.get("APPDATA") or Path.home()) / APP_DIR_NAME
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / APP_DIR_NAME
    return Path(os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config") / APP_DIR_NAME


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def _parse_env_lines(text: str) -> dict[str, str]:
    """Lee pares `CLAVE=valor`; ignora comentarios y líneas sin `=`."""

    data: dict[str, str] = {}
    for line in (raw.strip() for raw in text.splitlines()):
        if line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        key = key.strip()
        if sep and key:
            data[key] = value.strip().strip("\"'")
    return data


def write_user_env_vars(values: dict[str, str | None], env_path: Path | None = None) -> Path:
    """Fusiona `values` en el .env de usuario (las claves `None` se ignoran).

    Las claves se escriben ordenadas para que el fichero sea estable.
    """

    env_path = env_path or get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    merged = _parse_env_lines(env_path.read_text(encoding="utf-8")) if env_path.exists() else {}
    merged.update({key: value for key, value in values.items() if value is not None})

    body = "\n".join(f"{key}={merged[key]}" for key in sorted(merged))
    env_path.write_text(f"# geocheck user config (.env)\n{body}\n", encoding="utf-8")
    return env_path


class AppSettings(BaseSettings):
    """Configuración central del harness de validación."""

    model_config = SettingsConfigDict(
        env_prefix="GEOCHECK_",
        extra="ignore",
        case_sensitive=False,
        # Orden: proyecto primero, luego config global de usuario.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    base_url: str = Field(
        default="http://localhost:8080",
        min_length=8,
        description="URL base del servicio de geocodificación.",
    )
    endpoint_path: str = Field(
        default="/api/web/location/convert",
        min_length=1,
        description="Ruta del endpoint de conversión (POST).",
    )
    http_timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Timeout por request (segundos); mayor que el techo de latencia de 10 s.",
    )
    user_agent: str = Field(
        default="geocheck/0.1",
        min_length=1,
        description="User-Agent de las peticiones.",
    )
    api_key: str | None = Field(
        default=None,
        description="API key opcional (cabecera X-API-Key).",
    )
    report_dir: Path = Field(
        default=Path("reports"),
        description="Directorio por defecto para los reportes exportados.",
    )

    @property
    def endpoint_url(self) -> str:
        return self.base_url.rstrip("/") + "/" + self.endpoint_path.lstrip("/")
