"""Tests for config import/export."""

import json
from datetime import datetime
from pathlib import Path

import pytest

from fanpanel.core.codec import (
    ImportExportCodec,
    ImportRejectedError,
    sanitize_value,
)
from fanpanel.store.config_store import JsonConfigStore
from fanpanel.store.staging import StagingArea


@pytest.fixture
def store(tmp_path: Path) -> JsonConfigStore:
    return JsonConfigStore(tmp_path / "argononev3.json")


@pytest.fixture
def staging(store: JsonConfigStore) -> StagingArea:
    return StagingArea(store)


@pytest.fixture
def codec(store: JsonConfigStore, staging: StagingArea) -> ImportExportCodec:
    return ImportExportCodec(store, staging, version="1.2.3")


class TestExport:
    def test_stamps_metadata(self, codec: ImportExportCodec) -> None:
        document = codec.export_document()
        assert document["_version"] == "1.2.3"
        assert datetime.fromisoformat(document["_exported"]).tzinfo is not None
        assert document["temp_high"] == "60"

    def test_exports_persisted_not_staged(self, codec, staging: StagingArea) -> None:
        staging.stage({"temp_high": "70"})
        assert codec.export_document()["temp_high"] == "60"

    def test_json_round_trips_through_import(self, codec, staging: StagingArea) -> None:
        result = codec.import_document(codec.export_json())
        assert "_version" not in staging.staged
        assert "_exported" not in staging.staged
        assert result.applied == 19


class TestImportFiltering:
    def test_unknown_keys_silently_dropped(self, codec, staging: StagingArea) -> None:
        doc = {"mode": "manual", "manual_speed": 70, "admin_password": "hunter2"}
        result = codec.import_document(json.dumps(doc))
        assert result.applied == 2
        assert result.keys == ["manual_speed", "mode"]
        assert "admin_password" not in staging.staged

    def test_values_sanitized(self, codec, staging: StagingArea) -> None:
        codec.import_document(json.dumps({"mode": "auto; rm -rf /", "night_end": "07$(reboot)"}))
        assert staging.staged == {"mode": "autorm-rf", "night_end": "07reboot"}

    def test_non_scalar_values_dropped(self, codec, staging: StagingArea) -> None:
        result = codec.import_document(json.dumps({"mode": ["auto"], "log_level": None, "enabled": True}))
        assert result.applied == 1
        assert staging.staged == {"enabled": "1"}

    def test_accepts_bytes(self, codec, staging: StagingArea) -> None:
        codec.import_document(b'{"hysteresis": 3}')
        assert staging.staged == {"hysteresis": "3"}

    def test_does_not_touch_store(self, codec, store: JsonConfigStore) -> None:
        codec.import_document(json.dumps({"temp_high": 70}))
        assert store.get("temp_high") == "60"
        assert not store.path.exists()


class TestImportRejection:
    def test_out_of_order_thresholds_apply_nothing(self, codec, staging: StagingArea) -> None:
        staging.stage({"speed_high": "90"})
        doc = {"temp_quiet": 50, "temp_low": 50, "temp_med": 65, "temp_high": 72, "mode": "manual"}
        with pytest.raises(ImportRejectedError) as excinfo:
            codec.import_document(json.dumps(doc))
        assert staging.staged == {"speed_high": "90"}
        assert "Low" in excinfo.value.issues[0].message
        assert "Quiet" in excinfo.value.issues[0].message

    def test_partial_thresholds_checked_against_persisted(self, codec, staging: StagingArea) -> None:
        # Persisted defaults: quiet 40, low 45, med 55, high 60
        with pytest.raises(ImportRejectedError):
            codec.import_document('{"temp_low": 38}')
        result = codec.import_document('{"temp_low": 42}')
        assert result.applied == 1

    def test_partial_thresholds_checked_against_staged(self, codec, staging: StagingArea) -> None:
        staging.stage({"temp_quiet": "30"})
        codec.import_document('{"temp_low": 38}')
        assert staging.staged["temp_low"] == "38"

    def test_non_numeric_threshold_rejected(self, codec, staging: StagingArea) -> None:
        with pytest.raises(ImportRejectedError):
            codec.import_document('{"temp_med": "hot"}')
        assert staging.staged == {}

    @pytest.mark.parametrize("text", ["{not json", "[1, 2, 3]", '"config"', ""])
    def test_malformed_documents(self, codec, staging: StagingArea, text: str) -> None:
        with pytest.raises(ImportRejectedError):
            codec.import_document(text)
        assert staging.staged == {}


class TestSanitizeValue:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("auto", "auto"),
            ("0.5_a-b", "0.5_a-b"),
            ("<script>", "script"),
            (55, "55"),
            (12.5, "12.5"),
            (True, "1"),
            (False, "0"),
            ("!!!", None),
            (None, None),
            ({"a": 1}, None),
        ],
    )
    def test_sanitize(self, value, expected) -> None:
        assert sanitize_value(value) == expected
