"""Contrato del transporte HTTP.

Reglas de diseño:
- El Core no hace I/O: solo construye la petición y consume la respuesta.
- Cualquier adaptador que cumpla `Transport` (httpx, un stub en tests) es
  intercambiable sin tocar la lógica de validación.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from core.domain.models import RequestDescriptor, ServiceResponse


class TransportError(RuntimeError):
    """El transporte no obtuvo ninguna respuesta del servicio."""


@runtime_checkable
class Transport(Protocol):
    """Contrato mínimo para enviar una petición al servicio.

    Reglas:
    - `send` es asíncrono: es el único punto de suspensión de una iteración.
    - Debe esperar la respuesta completa aunque supere el techo de latencia.
    - Los fallos de red se elevan como `TransportError`.
    """

    async def send(self, request: RequestDescriptor) -> ServiceResponse:
        """Envía `request` y devuelve la respuesta con su latencia medida."""

        ...
