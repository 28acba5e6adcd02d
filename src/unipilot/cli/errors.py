"""Unipilot rich error messages — actionable feedback.

Every error shown to the user must contain:
  1. What went wrong (clear cause)
  2. The exact action the user should take to fix it

Usage:
    from unipilot.cli.errors import err_no_api_key
    console.print(err_no_api_key("openai", "OPENAI_API_KEY"))
    raise typer.Exit(1)
"""

from __future__ import annotations

from unipilot.rag.answer import ErrorKind


def err_no_api_key(provider: str, env_var: str) -> str:
    """No API key for *provider*."""
    return (
        f"[red]Error:[/] No API key for '{provider}'.\n"
        f"  Set:  export {env_var}=sk-..."
    )


def err_config(message: str) -> str:
    """unipilot.yaml or the global config is invalid."""
    return (
        f"[red]Error:[/] Invalid configuration.\n"
        f"  {message}\n"
        "  Fix unipilot.yaml (or ~/.unipilot/config.yaml) and retry."
    )


def err_no_sources(data_dir: str) -> str:
    """No --source, no ingest.sources in unipilot.yaml, and no PDFs in the data directory."""
    return (
        "[red]Error:[/] Nothing to ingest.\n"
        "  Pass --source FILE.pdf, list files under ingest.sources in unipilot.yaml,\n"
        f"  or put PDFs in the data directory ({data_dir})."
    )


def err_source_file(source: str, reason: str) -> str:
    """A PDF could not be read from the data directory."""
    return (
        f"[red]Error:[/] Could not read '{source}': {reason}\n"
        "  Check the file name and storage.data_dir in unipilot.yaml."
    )


def err_source_not_found(source: str) -> str:
    """Source not in the document store."""
    return (
        f"[yellow]Source not found:[/] '{source}' is not in the document store.\n"
        "  Run:  unipilot list  to see all ingested sources."
    )


def err_model(kind: ErrorKind, detail: str) -> str:
    """Completion model failure, with a hint per error kind."""
    hints = {
        ErrorKind.TIMEOUT: "The model did not answer in time. Retry, or raise generation.timeout_seconds.",
        ErrorKind.CONNECTIVITY: "Could not reach the model provider. Check your network connection.",
        ErrorKind.QUOTA: "The provider rejected the request for quota or rate limits. Wait and retry.",
        ErrorKind.UNKNOWN: "Check the model name in generation.model and your API key.",
    }
    return (
        f"[red]Model error ({kind.value}):[/] {detail}\n"
        f"  {hints[kind]}"
    )
