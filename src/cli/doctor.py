"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from adapters.http_client import build_async_client
from core.config import AppSettings, get_user_env_file, write_user_env_vars

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_http(settings: AppSettings) -> tuple[bool, str]:
    try:
        async with build_async_client(settings) as client:
            response = await client.get(settings.base_url)
        return True, f"HTTP {response.status_code}"
    except Exception as exc:
        return False, str(exc)


@app.command()
def run() -> None:
    """Show the effective configuration and test the connection to the service."""

    settings = AppSettings()

    table = Table(title="geocheck doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    table.add_row("Endpoint", "OK", settings.endpoint_url)
    if settings.api_key:
        table.add_row("API key", "OK", "X-API-Key header will be sent")
    else:
        table.add_row("API key", "OPTIONAL", "No key set -> anonymous requests")
    table.add_row("HTTP timeout", "OK", f"{settings.http_timeout_seconds:g} s")
    table.add_row("Report dir", "OK", str(settings.report_dir))
    table.add_row("User config", "OK" if get_user_env_file().exists() else "MISSING", str(get_user_env_file()))

    ok_http, detail_http = asyncio.run(_check_http(settings))
    table.add_row("Service connectivity", "OK" if ok_http else "FAIL", detail_http)

    _console.print(table)

    if not ok_http:
        _console.print(
            "\n[yellow]Note:[/yellow] set GEOCHECK_BASE_URL or run `geocheck doctor setup`."
        )
        raise typer.Exit(code=1)


@app.command(name="setup")
def setup() -> None:
    """Interactive setup (stores config in the user config .env)."""

    current = AppSettings()

    base_url = typer.prompt("Service base URL", default=current.base_url, show_default=True).strip()
    endpoint = typer.prompt("Endpoint path", default=current.endpoint_path, show_default=True).strip()
    api_key = typer.prompt("API key (empty for none)", default="", hide_input=True, show_default=False).strip()

    if not base_url or not endpoint:
        raise typer.BadParameter("base_url and endpoint are required")

    values = {
        "GEOCHECK_BASE_URL": base_url,
        "GEOCHECK_ENDPOINT_PATH": endpoint,
    }
    if api_key:
        values["GEOCHECK_API_KEY"] = api_key
    env_path = write_user_env_vars(values)

    _console.print(f"[green]Saved config to:[/green] {env_path}")
