"""Shared pytest fixtures for geocheck tests.

Provides factory fixtures for iteration records, conforming service payloads
and responses, plus an in-memory transport that stands in for httpx.
"""

from __future__ import annotations

import json
from typing import Any

import pytest

from core.domain.context import SharedContext
from core.domain.models import IterationRecord, RequestDescriptor, ServiceResponse
from core.interfaces.transport import TransportError
from tests.payloads import conforming_payload


@pytest.fixture()
def make_payload():
    """Factory for a response payload that satisfies the contract."""

    return conforming_payload


@pytest.fixture()
def make_response():
    """Factory for ServiceResponse with sensible defaults."""

    def _factory(
        payload: Any = None,
        *,
        status_code: int = 200,
        elapsed_ms: float = 120.0,
        body: str | None = None,
    ) -> ServiceResponse:
        if body is None:
            body = json.dumps(payload if payload is not None else conforming_payload())
        return ServiceResponse(status_code=status_code, elapsed_ms=elapsed_ms, body=body)

    return _factory


@pytest.fixture()
def make_record():
    """Factory for IterationRecord from dataset-shaped (camelCase) data."""

    def _factory(data: dict[str, Any] | None = None, **overrides: Any) -> IterationRecord:
        raw: dict[str, Any] = {
            "input": "1600 Amphitheatre Parkway",
            "expected": {"coordinates": {"lat": 37.4224, "lon": -122.0841}, "name": "Googleplex"},
            "testConfig": {"description": "Googleplex by address"},
        }
        if data is not None:
            raw = data
        raw.update(overrides)
        return IterationRecord.model_validate(raw)

    return _factory


@pytest.fixture()
def context() -> SharedContext:
    return SharedContext()


class FakeTransport:
    """In-memory Transport: replays queued responses and records requests."""

    def __init__(self, *responses: ServiceResponse | Exception) -> None:
        self._responses = list(responses)
        self.requests: list[RequestDescriptor] = []
        self.closed = False

    def queue(self, response: ServiceResponse | Exception) -> None:
        self._responses.append(response)

    async def send(self, request: RequestDescriptor) -> ServiceResponse:
        self.requests.append(request)
        if not self._responses:
            raise TransportError("no response queued")
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture()
def fake_transport() -> type[FakeTransport]:
    return FakeTransport
