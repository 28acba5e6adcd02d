"""unipilot list — show what is in the document store."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated

import typer
from rich.table import Table

from unipilot.cli.common import console, load_cli_config, open_service


def list_cmd(
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Print the listing as JSON."),
    ] = False,
    snapshot: Annotated[
        Path | None,
        typer.Option("--snapshot", help="Path to the document snapshot JSON."),
    ] = None,
) -> None:
    """List ingested sources with word counts and update times."""
    cfg = load_cli_config(snapshot=snapshot)
    service = open_service(cfg)
    try:
        listing = service.list_documents()
    finally:
        service.close()

    if json_output:
        typer.echo(json.dumps(listing.to_dict(), indent=2, ensure_ascii=False))
        return

    if not listing.per_document:
        console.print("[yellow]No documents loaded yet.[/]\n  Run:  unipilot ingest --source FILE.pdf")
        return

    table = Table(title=f"{listing.total_documents} document(s)")
    table.add_column("Source")
    table.add_column("University")
    table.add_column("Chunks", justify="right")
    table.add_column("Words", justify="right")
    table.add_column("Last updated")
    for doc in listing.per_document:
        table.add_row(
            doc.source_name,
            doc.display_name,
            str(doc.chunks),
            str(doc.word_count),
            doc.last_updated,
        )
    console.print(table)
