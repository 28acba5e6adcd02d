"""Tests for unipilot remove."""

from __future__ import annotations

from pathlib import Path

from typer.testing import CliRunner

from unipilot.cli.main import app
from unipilot.store.repository import DocumentStore

runner = CliRunner()


def _count(snapshot: Path) -> int:
    s = DocumentStore(snapshot)
    return s.load()


def test_remove_unknown_source_exits_0(seeded_snapshot: Path) -> None:
    result = runner.invoke(
        app, ["remove", "--source", "wits.pdf", "--yes", "--snapshot", str(seeded_snapshot)]
    )
    assert result.exit_code == 0
    assert "Source not found" in result.output
    assert _count(seeded_snapshot) == 1


def test_remove_with_yes(seeded_snapshot: Path) -> None:
    result = runner.invoke(
        app, ["remove", "--source", "uct.pdf", "--yes", "--snapshot", str(seeded_snapshot)]
    )
    assert result.exit_code == 0
    assert "Removed: uct.pdf" in result.output
    assert _count(seeded_snapshot) == 0


def test_remove_cancelled_at_prompt(seeded_snapshot: Path) -> None:
    result = runner.invoke(
        app, ["remove", "--source", "uct.pdf", "--snapshot", str(seeded_snapshot)], input="n\n"
    )
    assert result.exit_code == 0
    assert "Cancelled" in result.output
    assert _count(seeded_snapshot) == 1


def test_remove_confirmed_at_prompt(seeded_snapshot: Path) -> None:
    result = runner.invoke(
        app, ["remove", "--source", "uct.pdf", "--snapshot", str(seeded_snapshot)], input="y\n"
    )
    assert result.exit_code == 0
    assert _count(seeded_snapshot) == 0
