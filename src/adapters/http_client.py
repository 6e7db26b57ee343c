"""Wrapper de httpx.

Notas:
- Estandariza timeouts, headers y la medición de latencia del transporte.
- `HttpxTransport` cumple `core.interfaces.transport.Transport`; en tests se
  sustituye el cliente por uno con `httpx.MockTransport`.
"""

from __future__ import annotations

import logging
import time

import httpx

from core.config import AppSettings
from core.domain.models import RequestDescriptor, ServiceResponse
from core.interfaces.transport import Transport, TransportError

logger = logging.getLogger(__name__)

API_KEY_HEADER = "X-API-Key"


def build_async_client(
    settings: AppSettings | None = None,
    *,
    extra_headers: dict[str, str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Crea un `httpx.AsyncClient` con defaults seguros.

    El timeout viene de `AppSettings.http_timeout_seconds`: una respuesta lenta
    se espera completa y el check de latencia decide.
    """

    settings = settings or AppSettings()
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Accept": "application/json",
    }
    if settings.api_key:
        headers[API_KEY_HEADER] = settings.api_key
    if extra_headers:
        headers.update(extra_headers)
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=True,
        headers=headers,
        transport=transport,
    )


class HttpxTransport(Transport):
    """Envía un `RequestDescriptor` al endpoint configurado."""

    def __init__(self, client: httpx.AsyncClient, url: str) -> None:
        self._client = client
        self._url = url

    @classmethod
    def from_settings(
        cls,
        settings: AppSettings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> HttpxTransport:
        settings = settings or AppSettings()
        client = build_async_client(settings, transport=transport)
        return cls(client, settings.endpoint_url)

    @property
    def url(self) -> str:
        return self._url

    async def send(self, request: RequestDescriptor) -> ServiceResponse:
        started = time.perf_counter()
        try:
            response = await self._client.request(
                request.method,
                self._url,
                content=request.body.encode("utf-8"),
                headers=request.headers,
            )
        except httpx.HTTPError as exc:
            logger.debug("Request to %s failed", self._url, exc_info=True)
            raise TransportError(f"{type(exc).__name__}: {exc}") from exc
        elapsed_ms = (time.perf_counter() - started) * 1000.0

        return ServiceResponse(
            status_code=response.status_code,
            elapsed_ms=elapsed_ms,
            body=response.text,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> HttpxTransport:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
