"""Fixtures for CLI tests: isolated cwd, no global config, quiet logging."""

from __future__ import annotations

from pathlib import Path

import pytest

from unipilot.store.repository import DocumentStore


@pytest.fixture(autouse=True)
def cli_env(tmp_path: Path, monkeypatch) -> Path:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr("unipilot.config._GLOBAL_CONFIG_PATH", tmp_path / "no-global.yaml")
    monkeypatch.setenv("UNIPILOT_LOG_LEVEL", "WARNING")
    monkeypatch.delenv("UNIPILOT_GENERATION_MODEL", raising=False)
    monkeypatch.delenv("UNIPILOT_SNAPSHOT_PATH", raising=False)
    return tmp_path


@pytest.fixture
def seeded_snapshot(snapshot_path: Path, make_doc) -> Path:
    """Snapshot with one UCT record that mentions fees."""
    s = DocumentStore(snapshot_path)
    s.add(
        "uct.pdf",
        make_doc(
            "uct.pdf",
            content="The University of Cape Town charges tuition fees of R65000 per year.",
            display_name="University of Cape Town",
            fees="Tuition fees of R65000 per year.",
        ),
    )
    return snapshot_path
