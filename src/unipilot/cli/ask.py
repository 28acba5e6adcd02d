"""unipilot ask — answer a question from the ingested prospectuses."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated

import typer
from rich.table import Table

from unipilot.cli.common import console, load_cli_config, open_service
from unipilot.cli.errors import err_model, err_no_api_key
from unipilot.rag.answer import Answered, ModelError
from unipilot.rag.llm_client import provider_env_var, validate_api_key


def ask_cmd(
    question: Annotated[str, typer.Argument(help="Question about the universities.")],
    top_k: Annotated[
        int | None,
        typer.Option("--top-k", "-k", min=1, help="Maximum number of documents to use."),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Print the result as JSON."),
    ] = False,
    snapshot: Annotated[
        Path | None,
        typer.Option("--snapshot", help="Path to the document snapshot JSON."),
    ] = None,
) -> None:
    """Ask a question; the answer cites the prospectus excerpts it used."""
    cfg = load_cli_config(snapshot=snapshot)
    service = open_service(cfg)
    try:
        if service.document_count:
            try:
                validate_api_key(cfg.generation.model)
            except EnvironmentError:
                provider = cfg.generation.model.split("/")[0]
                console.print(err_no_api_key(provider, provider_env_var(cfg.generation.model) or ""))
                raise typer.Exit(1)
        result = service.search_with_ai(question, top_k=top_k)
    finally:
        service.close()

    if json_output:
        typer.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    elif isinstance(result, ModelError):
        console.print(err_model(result.error_kind, result.error))
    elif isinstance(result, Answered):
        console.print(result.answer)
        table = Table(title=f"Sources ({result.relevant_documents} of {result.documents_searched})")
        table.add_column("#", justify="right")
        table.add_column("University")
        table.add_column("File")
        table.add_column("Excerpt")
        for i, src in enumerate(result.sources, start=1):
            table.add_row(str(i), src.display_name, src.source_name, src.excerpt)
        console.print(table)
    else:
        console.print(f"[yellow]{result.answer}[/]")

    if isinstance(result, ModelError):
        raise typer.Exit(1)
