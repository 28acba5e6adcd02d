"""Unipilot CLI entry point."""

from __future__ import annotations

import importlib.metadata
from typing import Annotated

import typer

from unipilot.cli.ask import ask_cmd
from unipilot.cli.documents import list_cmd
from unipilot.cli.ingest import ingest_cmd
from unipilot.cli.remove import remove_cmd


def _installed_version() -> str:
    try:
        return importlib.metadata.version("unipilot")
    except importlib.metadata.PackageNotFoundError:
        return "dev"


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"unipilot {_installed_version()}")
        raise typer.Exit()


app = typer.Typer(
    name="unipilot",
    help=(
        "Unipilot — ask questions about university prospectuses.\n\n"
        "  unipilot ingest  Load prospectus PDFs into the document store.\n"
        "  unipilot ask     Answer a question with cited sources."
    ),
    add_completion=False,
)


@app.callback()
def main_callback(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = False,
) -> None:
    """Unipilot — ask questions about university prospectuses."""


app.command("ingest")(ingest_cmd)
app.command("ask")(ask_cmd)
app.command("list")(list_cmd)
app.command("remove")(remove_cmd)


@app.command("version")
def version_cmd() -> None:
    """Show the installed unipilot version."""
    typer.echo(f"unipilot {_installed_version()}")


if __name__ == "__main__":
    app()
