from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from enum import Enum
from pathlib import Path
from typing import Iterator, Optional

import typer
from typing_extensions import Annotated

from .api import CrptClient
from ..core.domain.enums import DocumentFormat, DocumentType
from ..errors import ConfigurationError, CrptClientError


app = typer.Typer(add_completion=False, help="Rate-limited document submission client for the CRPT registry")


class LogLevel(str, Enum):
    OFF = "OFF"
    CRITICAL = "CRITICAL"
    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"
    DEBUG = "DEBUG"


@app.callback()
def main(
    log_level: Annotated[
        Optional[LogLevel],
        typer.Option("--log-level", help="Set log level (OFF, CRITICAL, ERROR, WARNING, INFO, DEBUG). Default: OFF"),
    ] = None,
) -> None:
    """Configure package logging. Settings are read from CRPT_CLIENT_* environment variables."""
    if log_level in (None, LogLevel.OFF):
        return

    level = logging.getLevelName(log_level.value)
    package_name = __package__.split(".", 1)[0] if __package__ else "crpt_client"
    logger = logging.getLogger(package_name)

    # avoid stacking handlers when invoked repeatedly in one process
    has_stream = any(isinstance(h, logging.StreamHandler) for h in logger.handlers)
    if not has_stream:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(levelname)s | %(name)s | %(message)s"))
        logger.addHandler(handler)

    logger.propagate = False
    logger.setLevel(level)


@contextmanager
def provide_client() -> Iterator[CrptClient]:
    try:
        client = CrptClient()
    except ConfigurationError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(code=2)
    try:
        yield client
    finally:
        client.close()


@app.command(help="Submit a signed document (JSON file) and print the registry response as JSON.")
def submit(
    document: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Document JSON file"),
    signature_file: Path = typer.Option(
        ..., "--signature-file", "-s", exists=True, dir_okay=False, readable=True, help="File holding the detached signature"
    ),
    document_format: DocumentFormat = typer.Option(DocumentFormat.MANUAL, "--format", help="Document format tag"),
    document_type: DocumentType = typer.Option(DocumentType.LP_INTRODUCE_GOODS, "--type", help="Document type"),
) -> None:
    try:
        payload = json.loads(document.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        typer.echo(f"Invalid document JSON: {e}", err=True)
        raise typer.Exit(code=2)
    signature = signature_file.read_text(encoding="utf-8").strip()

    with provide_client() as client:
        try:
            resp = client.submit(payload, signature, document_format=document_format, document_type=document_type)
        except CrptClientError as e:
            typer.echo(f"Submission failed: {e}", err=True)
            raise typer.Exit(code=1)
    print(json.dumps(resp.model_dump(), ensure_ascii=False, indent=2))
    if not resp.ok:
        raise typer.Exit(code=1)


@app.command(help="Authenticate once and print when the obtained token expires.")
def auth() -> None:
    with provide_client() as client:
        try:
            credential = client.authenticate()
        except CrptClientError as e:
            typer.echo(f"Authentication failed: {e}", err=True)
            raise typer.Exit(code=1)
    typer.echo(f"Token valid until {credential.expires_at.isoformat()}")


if __name__ == "__main__":  # pragma: no cover
    app()
