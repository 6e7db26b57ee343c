"""Arrange phase: turn one dataset record into a request and seed the context."""

from __future__ import annotations

import json
import logging

from core.domain.context import (
    DEFAULT_DESCRIPTION,
    EXPECTED_ADDRESS,
    EXPECTED_LAT,
    EXPECTED_LON,
    EXPECTED_NAME,
    SKIP_ADDRESS_VALIDATION,
    SKIP_NAME_VALIDATION,
    TEST_DESCRIPTION,
    SharedContext,
)
from core.domain.models import IterationRecord, RequestDescriptor

logger = logging.getLogger(__name__)


class MissingInputError(ValueError):
    """The iteration record has no usable `input`; no request can be built."""


def build_request(record: IterationRecord, context: SharedContext) -> RequestDescriptor:
    """Build the outgoing request for `record` and publish its expectations.

    Absent optional fields are stored as ``None`` (coordinates, address,
    name) or ``False`` (skip flags); the description falls back to
    ``"Unknown Test"``. Existing context entries are overwritten.

    Raises:
        MissingInputError: when `record.input` is missing or empty. A
            whitespace-only input is still sent. The context is left
            untouched in that case.
    """

    if not record.input:
        raise MissingInputError("Input URL is required in data file")

    expected = record.expected
    coordinates = expected.coordinates
    config = record.test_config
    description = config.description or DEFAULT_DESCRIPTION

    context.set(EXPECTED_LAT, coordinates.lat if coordinates else None)
    context.set(EXPECTED_LON, coordinates.lon if coordinates else None)
    context.set(EXPECTED_ADDRESS, expected.address)
    context.set(EXPECTED_NAME, expected.name)
    context.set(TEST_DESCRIPTION, description)
    context.set(SKIP_ADDRESS_VALIDATION, config.skip_address_validation)
    context.set(SKIP_NAME_VALIDATION, config.skip_name_validation)

    logger.info("Running test: %s", description)
    logger.debug("Input: %s", record.input)
    if coordinates:
        logger.debug("Expected coordinates: %s, %s", coordinates.lat, coordinates.lon)

    return RequestDescriptor(
        body=json.dumps({"input": record.input}),
        headers={"Content-Type": "application/json"},
    )
