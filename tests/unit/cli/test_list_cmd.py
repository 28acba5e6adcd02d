"""Tests for unipilot list."""

from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

from unipilot.cli.main import app

runner = CliRunner()


def test_list_empty(snapshot_path: Path) -> None:
    result = runner.invoke(app, ["list", "--snapshot", str(snapshot_path)])
    assert result.exit_code == 0
    assert "No documents loaded yet" in result.output


def test_list_json(seeded_snapshot: Path) -> None:
    result = runner.invoke(app, ["list", "--json", "--snapshot", str(seeded_snapshot)])
    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data["totalDocuments"] == 1
    entry = data["perDocument"][0]
    assert entry["sourceName"] == "uct.pdf"
    assert entry["displayName"] == "University of Cape Town"
    assert entry["wordCount"] == 12
    assert entry["chunks"] == 1


def test_list_table(seeded_snapshot: Path) -> None:
    result = runner.invoke(app, ["list", "--snapshot", str(seeded_snapshot)])
    assert result.exit_code == 0
    assert "uct.pdf" in result.output
    assert "1 document(s)" in result.output


def test_version() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert result.output.startswith("unipilot ")
