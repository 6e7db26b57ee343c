"""Iteration orchestration utilities.

This module drives the Arrange -> send -> Assert -> Report -> Cleanup cycle
for one record and sequences it over a whole dataset. Entry-points (CLI,
tests, batch jobs) delegate here and keep printing and progress concerns to
the optional hooks.

Iterations never overlap: the shared context is cleared in a ``finally``
block before the next record is arranged.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable

from core.domain.context import DEFAULT_DESCRIPTION, SharedContext
from core.domain.models import (
    CaseConfig,
    DatasetItem,
    Expectations,
    ExpectedCoordinates,
    IterationRecord,
    IterationReport,
    RejectedRecord,
    RunReport,
)
from core.interfaces.transport import Transport, TransportError
from core.services.arrange import MissingInputError, build_request
from core.services.checks import validate_response
from core.services.cleanup import cleanup
from core.services.reporter import Reporter

logger = logging.getLogger(__name__)


@dataclass
class PipelineHooks:
    """Optional callbacks for UI layers (progress, warnings)."""

    iteration_start: Callable[[int, DatasetItem], None] | None = None
    iteration_done: Callable[[int, IterationReport], None] | None = None
    warning: Callable[[str], None] | None = None


def describe(record: DatasetItem) -> str:
    if isinstance(record, RejectedRecord):
        return record.description or DEFAULT_DESCRIPTION
    return record.test_config.description or DEFAULT_DESCRIPTION


async def run_iteration(
    *,
    record: IterationRecord,
    transport: Transport,
    context: SharedContext,
) -> IterationReport:
    """Run one full iteration and return its ordered report.

    Raises:
        MissingInputError: the record has no input; no request was sent.
        TransportError: the service could not be reached.

    In both cases the shared context is already empty when the error
    propagates.
    """

    reporter = Reporter(describe(record))
    try:
        request = build_request(record, context)
        response = await transport.send(request)
        logger.debug("HTTP %s in %.0f ms", response.status_code, response.elapsed_ms)
        reporter.record_all(validate_response(response, context))
    finally:
        cleanup_result = cleanup(context)
    reporter.record(cleanup_result)
    return reporter.build(input=record.input)


async def run_dataset(
    *,
    records: Iterable[DatasetItem],
    transport: Transport,
    context: SharedContext | None = None,
    hooks: PipelineHooks | None = None,
) -> RunReport:
    """Run every record sequentially and aggregate the iteration reports.

    An aborted iteration (rejected dataset record, missing input,
    unreachable service) is recorded with no check entries and the run
    continues with the next record.
    """

    hooks = hooks or PipelineHooks()
    context = context if context is not None else SharedContext()
    reports: list[IterationReport] = []

    for index, record in enumerate(records, start=1):
        if hooks.iteration_start:
            hooks.iteration_start(index, record)
        if isinstance(record, RejectedRecord):
            report = _aborted(index, record, record.error, hooks)
        else:
            try:
                report = await run_iteration(record=record, transport=transport, context=context)
            except (MissingInputError, TransportError) as exc:
                report = _aborted(index, record, str(exc), hooks)
        reports.append(report)
        if hooks.iteration_done:
            hooks.iteration_done(index, report)

    return RunReport(iterations=reports)


def _aborted(index: int, record: DatasetItem, error: str, hooks: PipelineHooks) -> IterationReport:
    message = f"Iteration {index} ({describe(record)}) aborted: {error}"
    logger.error("%s", message)
    if hooks.warning:
        hooks.warning(message)
    return Reporter(describe(record)).build(input=record.input, aborted=True, error=error)


def build_record(
    *,
    input: str,
    lat: float | None = None,
    lon: float | None = None,
    name: str | None = None,
    address: str | None = None,
    description: str | None = None,
    skip_name_validation: bool = False,
    skip_address_validation: bool = False,
) -> IterationRecord:
    """Assemble an ad-hoc record (e.g. from CLI flags)."""

    coordinates = None
    if lat is not None or lon is not None:
        coordinates = ExpectedCoordinates(lat=lat, lon=lon)
    return IterationRecord(
        input=input,
        expected=Expectations(coordinates=coordinates, name=name, address=address),
        test_config=CaseConfig(
            description=description,
            skip_name_validation=skip_name_validation,
            skip_address_validation=skip_address_validation,
        ),
    )

