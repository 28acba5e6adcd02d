"""Helpers shared by the unipilot CLI commands."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from unipilot.cli.errors import err_config
from unipilot.config import ConfigError, UnipilotConfig, load_config
from unipilot.logging_setup import configure_logging
from unipilot.service import UniversitySearchService

console = Console()


def load_cli_config(
    snapshot: Path | None = None,
    data_dir: Path | None = None,
) -> UnipilotConfig:
    """Load config, apply CLI flag overrides, and install logging. Exits 1 on bad config."""
    try:
        cfg = load_config()
    except ConfigError as exc:
        console.print(err_config(str(exc)))
        raise typer.Exit(1)

    if snapshot is not None:
        cfg.storage.snapshot_path = str(snapshot)
    if data_dir is not None:
        cfg.storage.data_dir = str(data_dir)

    configure_logging(cfg.logging.level)
    return cfg


def open_service(cfg: UnipilotConfig) -> UniversitySearchService:
    """Build and start the service for *cfg*. The caller must close it."""
    service = UniversitySearchService.from_config(cfg)
    service.start()
    return service
