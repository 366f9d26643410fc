"""Tests for settings validation and loading."""

from __future__ import annotations

import json

import pytest

from refcache.errors import SettingsLoadError, SettingsValidationError
from refcache.settings import DEFAULT_SETTINGS, load_settings, merge_with_defaults


class TestMergeWithDefaults:
    def test_none_gives_defaults(self):
        assert merge_with_defaults(None) == DEFAULT_SETTINGS

    def test_defaults_are_not_mutated(self):
        merge_with_defaults({"memory": {"warning_bytes": 1}})
        assert DEFAULT_SETTINGS["memory"]["warning_bytes"] != 1

    def test_nested_sections_merge(self):
        merged = merge_with_defaults(
            {"memory": {"critical_bytes": 10}, "caches": {"methods": {"policy": "soft"}}}
        )
        assert merged["memory"]["critical_bytes"] == 10
        assert merged["memory"]["warning_bytes"] == DEFAULT_SETTINGS["memory"]["warning_bytes"]
        assert merged["caches"]["methods"]["policy"] == "soft"
        assert merged["caches"]["fields"]["policy"] == "weak"


class TestLoadSettings:
    def test_missing_file_gives_defaults(self, tmp_path):
        assert load_settings(tmp_path / "absent.json") == DEFAULT_SETTINGS

    def test_none_path_gives_defaults(self):
        assert load_settings(None) == DEFAULT_SETTINGS

    def test_valid_file(self, tmp_path):
        path = tmp_path / "refcache.json"
        path.write_text(json.dumps({"purge_batch_size": 8}), encoding="utf-8")
        assert load_settings(path)["purge_batch_size"] == 8

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "refcache.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(SettingsLoadError):
            load_settings(path)

    def test_non_object_payload(self, tmp_path):
        path = tmp_path / "refcache.json"
        path.write_text("[]", encoding="utf-8")
        with pytest.raises(SettingsLoadError):
            load_settings(path)

    @pytest.mark.parametrize(
        "payload",
        [
            {"purge_batch_size": 0},
            {"caches": {"fields": {"policy": "phantom"}}},
            {"memory": {"warning_bytes": -1}},
            {"unknown": True},
        ],
    )
    def test_schema_violations(self, tmp_path, payload):
        path = tmp_path / "refcache.json"
        path.write_text(json.dumps(payload), encoding="utf-8")
        with pytest.raises(SettingsValidationError):
            load_settings(path)
