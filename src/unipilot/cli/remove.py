"""unipilot remove — delete a source and all of its chunks from the store.

Usage:
  unipilot remove --source uct-prospectus.pdf
  unipilot remove --source uct-prospectus.pdf --yes
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from unipilot.cli.common import console, load_cli_config, open_service
from unipilot.cli.errors import err_source_not_found


def remove_cmd(
    source: Annotated[
        str,
        typer.Option("--source", "-s", help="Source file name to remove."),
    ],
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompt."),
    ] = False,
    snapshot: Annotated[
        Path | None,
        typer.Option("--snapshot", help="Path to the document snapshot JSON."),
    ] = None,
) -> None:
    """Remove a source and all its documents from the store."""
    cfg = load_cli_config(snapshot=snapshot)
    service = open_service(cfg)
    try:
        entry = next(
            (d for d in service.list_documents().per_document if d.source_name == source),
            None,
        )
        if entry is None:
            console.print(err_source_not_found(source))
            raise typer.Exit(0)

        console.print(f"\nRemove source: [bold]{source}[/]")
        console.print(f"  University: {entry.display_name}  |  Chunks: {entry.chunks}")

        if not yes:
            if not typer.confirm("Confirm removal?", default=False):
                console.print("[dim]Cancelled.[/]")
                raise typer.Exit(0)

        service.remove_document(source)
        console.print(f"\n[green]✓[/] Removed: {source}")
    finally:
        service.close()
