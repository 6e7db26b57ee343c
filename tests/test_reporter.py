"""Tests for the per-iteration reporter."""

import logging

from core.domain.models import CheckResult
from core.services.reporter import Reporter, entry_name


class TestReporter:
    def test_entries_prefixed_with_description(self):
        reporter = Reporter("Eiffel Tower")
        entry = reporter.record(CheckResult(name="Status code is 200", passed=True))
        assert entry.check_name == "[Eiffel Tower] Status code is 200"
        assert entry_name("x", "y") == "[x] y"

    def test_preserves_recording_order(self):
        reporter = Reporter("order")
        reporter.record_all(
            [
                CheckResult(name="first", passed=True),
                CheckResult(name="second", passed=False, message="bad"),
                CheckResult(name="third", passed=True, skipped=True),
            ]
        )
        names = [entry.check_name for entry in reporter.entries]
        assert names == ["[order] first", "[order] second", "[order] third"]

    def test_entries_property_is_a_copy(self):
        reporter = Reporter("copy")
        reporter.record(CheckResult(name="one", passed=True))
        reporter.entries.clear()
        assert len(reporter.entries) == 1

    def test_build_report(self):
        reporter = Reporter("build")
        reporter.record(CheckResult(name="one", passed=True))
        reporter.record(CheckResult(name="two", passed=False, message="nope"))
        report = reporter.build(input="48.8584,2.2945")

        assert report.description == "build"
        assert report.input == "48.8584,2.2945"
        assert not report.passed
        assert [e.message for e in report.failed_entries] == ["nope"]

    def test_aborted_report_fails_without_entries(self):
        report = Reporter("aborted").build(aborted=True, error="Input URL is required in data file")
        assert report.entries == []
        assert not report.passed

    def test_skipped_entry_counts_as_passed(self):
        reporter = Reporter("skip")
        reporter.record(CheckResult(name="one", passed=True, skipped=True, message="skipped: n/a"))
        report = reporter.build()
        assert report.passed
        assert report.entries[0].skipped

    def test_warnings_and_failures_are_logged(self, caplog):
        reporter = Reporter("logs")
        with caplog.at_level(logging.DEBUG, logger="core.services.reporter"):
            reporter.record(CheckResult(name="soft", passed=True, warnings=["name was null"]))
            reporter.record(CheckResult(name="hard", passed=False, message="wrong"))

        warnings = [r.getMessage() for r in caplog.records if r.levelno == logging.WARNING]
        assert "[logs] soft: name was null" in warnings
        assert "FAIL [logs] hard: wrong" in warnings

    def test_serialized_entry_uses_camel_case_name(self):
        entry = Reporter("json").record(CheckResult(name="one", passed=True))
        assert entry.model_dump(by_alias=True)["checkName"] == "[json] one"
