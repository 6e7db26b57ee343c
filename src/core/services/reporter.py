"""Per-iteration reporter.

Collects `CheckResult`s in the order they are recorded and prefixes each one
with the iteration description, so failures stay attributable when several
iterations run back to back. Aggregation across iterations is left to the
pipeline.
"""

from __future__ import annotations

import logging

from core.domain.models import CheckResult, IterationReport, ReportEntry

logger = logging.getLogger(__name__)

SUMMARY_CHECK_NAME = "Log test results"


def entry_name(description: str, check: str) -> str:
    return f"[{description}] {check}"


class Reporter:
    """Ordered report for a single iteration."""

    def __init__(self, description: str) -> None:
        self._description = description
        self._entries: list[ReportEntry] = []

    @property
    def description(self) -> str:
        return self._description

    @property
    def entries(self) -> list[ReportEntry]:
        return list(self._entries)

    def record(self, result: CheckResult) -> ReportEntry:
        entry = ReportEntry(
            check_name=entry_name(self._description, result.name),
            passed=result.passed,
            skipped=result.skipped,
            message=result.message,
        )
        self._entries.append(entry)

        for warning in result.warnings:
            logger.warning("%s: %s", entry.check_name, warning)
        if not result.passed:
            logger.warning("FAIL %s: %s", entry.check_name, result.message)
        elif result.name == SUMMARY_CHECK_NAME:
            logger.info("%s", result.message)
        else:
            logger.debug("%s %s", "SKIP" if result.skipped else "PASS", entry.check_name)
        return entry

    def record_all(self, results: list[CheckResult]) -> None:
        for result in results:
            self.record(result)

    def build(
        self,
        *,
        input: str | None = None,
        aborted: bool = False,
        error: str | None = None,
    ) -> IterationReport:
        return IterationReport(
            description=self._description,
            input=input,
            entries=self.entries,
            aborted=aborted,
            error=error,
        )
