"""Tests for the Typer CLI."""

from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

from refcache.cli import app

runner = CliRunner()


def test_inspect_python_class():
    result = runner.invoke(app, ["inspect", "json.decoder:JSONDecoder"])
    assert result.exit_code == 0, result.output
    assert "Fields of" in result.output
    assert "decode" in result.output


def test_inspect_without_methods():
    result = runner.invoke(app, ["inspect", "json.decoder:JSONDecoder", "--no-methods"])
    assert result.exit_code == 0, result.output
    assert "Methods of" not in result.output


def test_inspect_rejects_non_type():
    result = runner.invoke(app, ["inspect", "json:dumps"])
    assert result.exit_code == 1
    assert "Expected a type" in result.output


def test_inspect_bad_target():
    result = runner.invoke(app, ["inspect", "no-colon"])
    assert result.exit_code != 0


def test_check_settings_valid(tmp_path):
    path = tmp_path / "refcache.json"
    path.write_text(json.dumps({"purge_batch_size": 4}), encoding="utf-8")
    result = runner.invoke(app, ["check-settings", str(path)])
    assert result.exit_code == 0, result.output
    assert "is valid" in result.output


def test_check_settings_invalid(tmp_path):
    path = tmp_path / "refcache.json"
    path.write_text(json.dumps({"purge_batch_size": 0}), encoding="utf-8")
    result = runner.invoke(app, ["check-settings", str(path)])
    assert result.exit_code == 1


def test_inspect_reads_settings_from_working_directory():
    with runner.isolated_filesystem():
        Path("refcache.json").write_text(json.dumps({"purge_batch_size": 0}), encoding="utf-8")
        result = runner.invoke(app, ["inspect", "json.decoder:JSONDecoder"])
    assert result.exit_code == 1
    assert "Error" in result.output
