"""Tests for rundown_api/contract.py: JSON-Schema wire contracts."""
from __future__ import annotations

import jsonschema
import pytest

from conftest import rundown_detail
from rundown_api.contract import contract_errors, load_schema, validate_payload

_CREATE = {
    "show_name": "Morning Show",
    "air_date": "2026-10-19",
    "target_duration": 1200,
    "class_id": None,
    "share_with_class": True,
}


class TestLoadSchema:

    @pytest.mark.parametrize("name", [
        "RundownDetail.v1.json", "RundownCreate.v1.json", "StoryIntegration.v1.json",
    ])
    def test_shipped_schemas_are_valid_draft_2020_12(self, name):
        jsonschema.Draft202012Validator.check_schema(load_schema(name))

    def test_missing_schema(self):
        with pytest.raises(FileNotFoundError, match="Missing contract schema"):
            load_schema("Nope.v1.json")


class TestRundownCreate:

    def test_valid(self):
        validate_payload("RundownCreate.v1.json", _CREATE)

    def test_class_id_optional(self):
        payload = {k: v for k, v in _CREATE.items() if k != "class_id"}
        assert contract_errors("RundownCreate.v1.json", payload) == []

    def test_extra_field_rejected(self):
        errors = contract_errors("RundownCreate.v1.json", {**_CREATE, "segments": []})
        assert len(errors) == 1 and "segments" in errors[0]

    def test_negative_target_rejected(self):
        with pytest.raises(jsonschema.ValidationError):
            validate_payload("RundownCreate.v1.json", {**_CREATE, "target_duration": -5})


class TestRundownDetail:

    def test_fixture_is_valid(self):
        assert contract_errors("RundownDetail.v1.json", rundown_detail()) == []

    def test_bad_status_reported_with_path(self):
        detail = rundown_detail()
        detail["segments"][1]["status"] = "Published"
        assert contract_errors("RundownDetail.v1.json", detail) == [
            "segments/1/status: 'Published' is not one of ['Draft', 'Needs Review', 'Ready']"
        ]

    def test_errors_sorted_by_path(self):
        detail = rundown_detail(status="Nope")
        del detail["segments"][0]["title"]
        errors = contract_errors("RundownDetail.v1.json", detail)
        assert errors[0].startswith("segments/0")
        assert errors[1].startswith("status")

    def test_root_error_label(self):
        errors = contract_errors("RundownDetail.v1.json", {"id": 1})
        assert errors == ["<root>: 'show_name' is a required property"]
