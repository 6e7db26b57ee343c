"""Tests for dataset loading."""

import json

import pytest

from adapters.dataset_loader import DatasetError, load_dataset, parse_dataset
from core.domain.models import IterationRecord, RejectedRecord


SCENARIO = {
    "input": "https://maps.google.com/?q=48.8584,2.2945",
    "expected": {
        "coordinates": {"lat": 48.8584, "lon": 2.2945},
        "name": "Eiffel",
        "address": "Paris",
    },
    "testConfig": {
        "description": "Eiffel Tower",
        "skipNameValidation": False,
        "skipAddressValidation": True,
    },
}


class TestParseDataset:
    def test_array_form(self):
        [record] = parse_dataset([SCENARIO])
        assert record.input == SCENARIO["input"]
        assert record.expected.coordinates.lat == 48.8584
        assert record.expected.name == "Eiffel"
        assert record.test_config.description == "Eiffel Tower"
        assert record.test_config.skip_address_validation is True

    def test_object_form(self):
        records = parse_dataset({"iterations": [SCENARIO, {"input": "Paris"}]})
        assert [r.input for r in records] == [SCENARIO["input"], "Paris"]

    def test_record_without_input_is_loaded(self):
        [record] = parse_dataset([{"testConfig": {"description": "broken"}}])
        assert record.input is None

    def test_unknown_fields_ignored(self):
        [record] = parse_dataset([{"input": "x", "comment": "ignored"}])
        assert record.input == "x"

    def test_rejects_scalar(self):
        with pytest.raises(DatasetError):
            parse_dataset("not a dataset")

    def test_invalid_record_is_rejected_in_place(self):
        good, bad, last = parse_dataset(
            [
                {"input": "ok"},
                {"input": 123, "testConfig": {"description": "numeric input"}},
                {"input": "still runs"},
            ]
        )

        assert isinstance(good, IterationRecord)
        assert isinstance(bad, RejectedRecord)
        assert bad.description == "numeric input"
        assert bad.input == "123"
        assert bad.error.startswith("Invalid dataset record 2: input:")
        assert isinstance(last, IterationRecord)

    def test_non_object_record_is_rejected(self):
        [rejected] = parse_dataset(["just a string"])
        assert isinstance(rejected, RejectedRecord)
        assert rejected.description is None

    def test_iterations_must_be_a_list(self):
        with pytest.raises(DatasetError):
            parse_dataset({"iterations": "nope"})


class TestLoadDataset:
    def test_loads_file(self, tmp_path):
        path = tmp_path / "data.json"
        path.write_text(json.dumps([SCENARIO]), encoding="utf-8")
        assert len(load_dataset(path)) == 1

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("[{", encoding="utf-8")
        with pytest.raises(DatasetError, match="not valid JSON"):
            load_dataset(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(DatasetError, match="Cannot read dataset"):
            load_dataset(tmp_path / "missing.json")
