"""Tests for the domain models."""

import pytest
from pydantic import ValidationError

from core.domain.models import (
    PROVIDERS,
    TOP_LEVEL_KEYS,
    IterationRecord,
    IterationReport,
    ReportEntry,
    ResponseContract,
    ResponseLinks,
    RunReport,
    ServiceResponse,
)


class TestIterationRecord:
    def test_camel_case_aliases(self):
        record = IterationRecord.model_validate(
            {"input": "x", "testConfig": {"skipNameValidation": True, "skipAddressValidation": True}}
        )
        assert record.test_config.skip_name_validation
        assert record.test_config.skip_address_validation

    def test_defaults(self):
        record = IterationRecord.model_validate({})
        assert record.input is None
        assert record.expected.coordinates is None
        assert record.test_config.description is None
        assert record.test_config.skip_name_validation is False

    def test_is_read_only(self):
        record = IterationRecord(input="x")
        with pytest.raises(ValidationError):
            record.input = "y"


class TestServiceResponse:
    def test_parsed_json(self):
        assert ServiceResponse(status_code=200, elapsed_ms=1, body='{"a": 1}').parsed_json() == {"a": 1}

    @pytest.mark.parametrize("body", ["", "<html></html>", "{"])
    def test_parsed_json_none_for_non_json(self, body):
        assert ServiceResponse(status_code=500, elapsed_ms=1, body=body).parsed_json() is None


class TestResponseContract:
    def test_conforming_payload(self, make_payload):
        contract = ResponseContract.model_validate(make_payload())
        assert contract.coordinates.valid
        assert contract.links.waze.startswith("https://")

    def test_null_name_allowed(self, make_payload):
        assert ResponseContract.model_validate(make_payload(name=None)).name is None

    def test_extra_key_forbidden(self, make_payload):
        payload = make_payload()
        payload["extra"] = True
        with pytest.raises(ValidationError):
            ResponseContract.model_validate(payload)

    def test_missing_provider_rejected(self, make_payload):
        payload = make_payload()
        del payload["links"]["komoot"]
        with pytest.raises(ValidationError):
            ResponseContract.model_validate(payload)

    def test_latitude_range(self, make_payload):
        with pytest.raises(ValidationError):
            ResponseContract.model_validate(make_payload(lat=91))

    def test_string_coordinate_not_coerced(self, make_payload):
        payload = make_payload()
        payload["coordinates"]["lat"] = "37.4224"
        with pytest.raises(ValidationError):
            ResponseContract.model_validate(payload)

    def test_key_lists_follow_the_models(self):
        assert TOP_LEVEL_KEYS == ("coordinates", "name", "address", "links")
        assert PROVIDERS == ("apple", "komoot", "bing", "osm", "waze", "google")
        assert PROVIDERS == tuple(ResponseLinks.model_fields)


class TestReports:
    def test_run_report_aggregates(self):
        passing = IterationReport(description="a", entries=[ReportEntry(check_name="[a] x", passed=True)])
        failing = IterationReport(
            description="b",
            entries=[
                ReportEntry(check_name="[b] x", passed=True),
                ReportEntry(check_name="[b] y", passed=False, message="bad"),
            ],
        )
        aborted = IterationReport(description="c", aborted=True, error="Input URL is required in data file")
        report = RunReport(iterations=[passing, failing, aborted])

        assert report.total_checks == 3
        assert report.failed_checks == 1
        assert report.failed_iterations == 2
        assert not report.passed

    def test_empty_run_passes(self):
        assert RunReport().passed

    def test_dump_includes_computed_fields(self):
        dumped = RunReport(iterations=[IterationReport(description="a")]).model_dump(by_alias=True)
        assert dumped["passed"] is True
        assert dumped["iterations"][0]["passed"] is True
