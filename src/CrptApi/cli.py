"""Typer-based CLI for submitting documents through the rate-limited client."""

import json
import logging
import time
from collections import Counter
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from CrptApi.client import CrptApi
from CrptApi.documents import Document
from CrptApi.errors import ConfigurationError, CrptApiError
from CrptApi.logging_config import setup_logging
from CrptApi.settings import CrptSettings, LogFormat, LogLevel

console = Console()
app = typer.Typer(help="Submit documents to the traceability service")

LOGGER = logging.getLogger("CrptApi.cli")


def _load_settings() -> CrptSettings:
    try:
        return CrptSettings()
    except ValidationError as exc:
        console.print(f"[red]✗ Invalid CRPT_* configuration:[/red]\n{exc}")
        raise typer.Exit(code=2) from exc


def _load_document(path: Path) -> Document:
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        console.print(f"[red]✗ Cannot read document {path}: {exc}[/red]")
        raise typer.Exit(code=2) from exc
    try:
        return Document.model_validate(raw)
    except ValidationError as exc:
        console.print(f"[red]✗ Invalid document {path}:[/red]\n{exc}")
        raise typer.Exit(code=2) from exc


@app.command()
def submit(
    document: Path = typer.Argument(..., help="Path to a JSON document"),
    signature: str = typer.Option(..., "--signature", "-s", help="Document signature"),
    time_unit: str = typer.Option("seconds", "--time-unit", help="Rate limit window unit"),
    limit: int = typer.Option(10, "--limit", min=1, help="Requests admitted per window"),
    repeat: int = typer.Option(1, "--repeat", min=1, help="Submit the document N times"),
    workers: int = typer.Option(1, "--workers", min=1, help="Concurrent submitters"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Debug logging"),
    json_logs: bool = typer.Option(False, "--json-logs", help="Emit logs as JSON lines"),
) -> None:
    """Submit DOCUMENT, honouring LIMIT requests per TIME_UNIT."""
    settings = _load_settings()
    setup_logging(
        level=LogLevel.DEBUG if verbose else settings.log_level,
        fmt=LogFormat.JSON if json_logs else settings.log_format,
    )

    doc = _load_document(document)
    try:
        api = CrptApi(time_unit, limit, settings=settings)
    except ConfigurationError as exc:
        console.print(f"[red]✗ {exc}[/red]")
        raise typer.Exit(code=2) from exc

    started = time.monotonic()
    try:
        with api:
            responses = api.submit_many([(doc, signature)] * repeat, max_workers=workers)
    except CrptApiError as exc:
        console.print(f"[red]✗ Submission failed: {exc}[/red]")
        raise typer.Exit(code=1) from exc
    elapsed = time.monotonic() - started
    LOGGER.info("Submitted %d document(s) in %.2fs", len(responses), elapsed)

    for response in responses:
        console.print(response.text, markup=False, highlight=False)

    statuses = Counter(response.status_code for response in responses)
    table = Table(title="Submissions")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Calls", str(len(responses)))
    table.add_row("Elapsed (s)", f"{elapsed:.2f}")
    table.add_row(
        "Status codes", ", ".join(f"{code}×{count}" for code, count in sorted(statuses.items()))
    )
    console.print(table)


@app.command("show-config")
def show_config() -> None:
    """Print the effective client settings as JSON."""
    settings = _load_settings()
    payload = settings.model_dump(mode="json")
    payload["config_hash"] = settings.config_hash()
    typer.echo(json.dumps(payload, indent=2, sort_keys=True))


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point for ``crpt-api``."""
    app(args=argv)


if __name__ == "__main__":
    main()
