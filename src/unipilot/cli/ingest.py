"""unipilot ingest — load prospectus PDFs into the document store.

Usage:
  unipilot ingest --source uct-prospectus.pdf --institution "University of Cape Town"
  unipilot ingest                 # ingest.sources, else every PDF in the data directory
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.table import Table

from unipilot.cli.common import console, load_cli_config, open_service
from unipilot.cli.errors import err_no_sources, err_source_file
from unipilot.ingest.pipeline import is_placeholder
from unipilot.service import UniversitySearchService


def ingest_cmd(
    source: Annotated[
        list[str] | None,
        typer.Option(
            "--source", "-s",
            help="PDF path, or file name under the data directory (repeatable).",
        ),
    ] = None,
    institution: Annotated[
        str | None,
        typer.Option("--institution", "-i", help="University name for the source(s)."),
    ] = None,
    data_dir: Annotated[
        Path | None,
        typer.Option("--data-dir", help="Directory PDFs are read from."),
    ] = None,
    snapshot: Annotated[
        Path | None,
        typer.Option("--snapshot", help="Path to the document snapshot JSON."),
    ] = None,
) -> None:
    """Ingest prospectus PDFs into the document store."""
    cfg = load_cli_config(snapshot=snapshot, data_dir=data_dir)
    sources = source or []

    service = open_service(cfg)
    try:
        if sources:
            failed = _ingest_explicit(service, sources, institution)
        else:
            report = service.ingest_sources()
            if not report.ingested and not report.failed:
                console.print(err_no_sources(cfg.storage.data_dir))
                raise typer.Exit(1)
            _print_report(report.ingested, report.placeholders, report.failed)
            failed = len(report.failed)
    finally:
        service.close()

    if failed:
        raise typer.Exit(1)


def _ingest_explicit(
    service: UniversitySearchService, sources: list[str], institution: str | None
) -> int:
    failed = 0
    for src in sources:
        console.print(f"\n[bold]→ {src}[/]")
        path = Path(src)
        try:
            if path.is_file():
                docs = service.add_pdf(path.name, path.read_bytes(), institution)
            else:
                docs = service.ingest_file(src, institution)
        except (OSError, ValueError) as exc:
            console.print(err_source_file(src, str(exc)))
            failed += 1
            continue

        if is_placeholder(docs):
            console.print("  [yellow]⚠ No text could be extracted; stored a placeholder.[/]")
        else:
            console.print(
                f"  [green]✓[/] {len(docs)} document(s) stored for {docs[0].display_name}"
            )
    return failed


def _print_report(
    ingested: dict[str, int], placeholders: list[str], failed: dict[str, str]
) -> None:
    table = Table(title="Ingestion summary")
    table.add_column("Source")
    table.add_column("Result")
    for name, count in ingested.items():
        status = "[yellow]placeholder[/]" if name in placeholders else f"[green]{count} document(s)[/]"
        table.add_row(name, status)
    for name, reason in failed.items():
        table.add_row(name, f"[red]failed:[/] {reason}")
    console.print(table)
