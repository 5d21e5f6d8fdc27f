"""Tests for rundown_api/errors.py and rundown_api/credentials.py."""
from __future__ import annotations

import json

import pytest

from rundown_api.credentials import CredentialStore
from rundown_api.errors import ApiError, ErrorKind, classify_error


# ---------------------------------------------------------------------------
# classify_error
# ---------------------------------------------------------------------------

class TestClassifyError:

    @pytest.mark.parametrize("status,kind", [
        (400, ErrorKind.VALIDATION),
        (401, ErrorKind.UNAUTHORIZED),
        (404, ErrorKind.NOT_FOUND),
        (409, ErrorKind.CONFLICT),
        (422, ErrorKind.VALIDATION),
        (500, ErrorKind.UNKNOWN),
    ])
    def test_status_mapping(self, status, kind):
        assert classify_error(status, "something failed") is kind

    def test_no_status_is_network(self):
        assert classify_error(None, "timed out") is ErrorKind.NETWORK

    @pytest.mark.parametrize("message", [
        "Story already exists in this rundown",
        "Story already integrated",
        "STORY ALREADY INTEGRATED",
    ])
    def test_legacy_duplicate_text_is_conflict(self, message):
        assert classify_error(400, message) is ErrorKind.CONFLICT

    def test_legacy_text_only_applies_to_client_errors(self):
        assert classify_error(500, "already exists") is ErrorKind.UNKNOWN

    def test_code_beats_status(self):
        assert classify_error(400, "x", code="not_found") is ErrorKind.NOT_FOUND
        assert classify_error(400, "x", code="CONFLICT") is ErrorKind.CONFLICT

    def test_unknown_code_falls_through(self):
        assert classify_error(404, "x", code="E_WEIRD") is ErrorKind.NOT_FOUND

    def test_api_error_carries_fields(self):
        err = ApiError(ErrorKind.CONFLICT, "dup", 409)
        assert str(err) == "dup"
        assert "conflict" in repr(err)


# ---------------------------------------------------------------------------
# CredentialStore
# ---------------------------------------------------------------------------

class TestCredentialStore:

    def test_missing_file_has_no_token(self, tmp_path):
        assert CredentialStore(tmp_path / "c.json").load_token() is None

    def test_save_and_load(self, tmp_path):
        store = CredentialStore(tmp_path / "nested" / "c.json")
        store.save_token("abc")
        assert store.load_token() == "abc"
        assert store.path.read_text(encoding="utf-8") == '{\n  "token": "abc"\n}\n'

    def test_repeated_saves_are_byte_identical(self, tmp_path):
        store = CredentialStore(tmp_path / "c.json")
        store.save_token("abc")
        first = store.path.read_bytes()
        store.save_token("abc")
        assert store.path.read_bytes() == first

    def test_empty_token_rejected(self, tmp_path):
        with pytest.raises(ValueError):
            CredentialStore(tmp_path / "c.json").save_token("")

    def test_corrupt_file_is_ignored(self, tmp_path, caplog):
        path = tmp_path / "c.json"
        path.write_text("{not json", encoding="utf-8")
        assert CredentialStore(path).load_token() is None
        assert "corrupt credentials" in caplog.text

    def test_non_object_file_has_no_token(self, tmp_path):
        path = tmp_path / "c.json"
        path.write_text(json.dumps(["abc"]), encoding="utf-8")
        assert CredentialStore(path).load_token() is None

    def test_clear(self, tmp_path):
        store = CredentialStore(tmp_path / "c.json")
        store.save_token("abc")
        store.clear()
        assert not store.path.exists()
        store.clear()
