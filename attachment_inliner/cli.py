"""
Main CLI entry point for the attachment inliner.

This module provides the command-line interface, loading configuration,
setting up logging and dispatching to the command handlers.
"""

import asyncio
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import typer
from pydantic import ValidationError

from attachment_inliner import __version__
from attachment_inliner.commands import transform_ndjson_command
from attachment_inliner.config import AttachmentConfig, MainConfig, load_config
from attachment_inliner.exceptions import ConfigurationError, InlinerError
from attachment_inliner.utils import get_logger, setup_logging

logger = get_logger(__name__)

app = typer.Typer(help="Rewrite DocumentReference attachments in FHIR NDJSON files.")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"attachment-inliner v{__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit.",
    ),
) -> None:
    """Attachment inliner."""


def build_config(
    config_path: Optional[Path],
    base_url: Optional[str] = None,
    download: Optional[bool] = None,
) -> MainConfig:
    """
    Load the configuration file, if any, and apply command-line overrides.

    Raises:
        ConfigurationError: If the configuration or an override is invalid.
    """
    config = load_config(str(config_path)) if config_path else MainConfig()

    overrides: Dict[str, Any] = {}
    if base_url is not None:
        overrides["base_url"] = base_url
    if download is not None:
        overrides["download_attachments"] = download
    if not overrides:
        return config

    try:
        attachments = AttachmentConfig(**{**config.attachments.model_dump(), **overrides})
    except ValidationError as e:
        raise ConfigurationError(f"Invalid command-line option: {e}") from e
    return config.model_copy(update={"attachments": attachments})


@app.command()
def transform(
    input_file: Path = typer.Argument(
        ...,
        exists=True,
        file_okay=True,
        dir_okay=False,
        help="NDJSON file with FHIR resources",
    ),
    output_file: Path = typer.Argument(
        ...,
        dir_okay=False,
        help="NDJSON file to write the transformed resources to",
    ),
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to a TOML or YAML configuration file",
    ),
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        help="Base URL for relative attachment URLs",
    ),
    download: Optional[bool] = typer.Option(
        None,
        "--download/--no-download",
        help="Save attachments that cannot be inlined",
    ),
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Override the configured log level",
    ),
) -> None:
    """Inline or download the attachments of DocumentReference resources."""
    try:
        config = build_config(config_path, base_url, download)
    except ConfigurationError as e:
        setup_logging(level="INFO", structured=False)
        logger.error("configuration_error", error=e.message)
        raise typer.Exit(code=e.exit_code)

    try:
        setup_logging(
            level=log_level or config.logging.level,
            structured=config.logging.structured,
        )
    except ValueError as e:
        print(f"Warning: Failed to set up logging: {e}", file=sys.stderr)
        setup_logging(level="INFO", structured=False)

    try:
        summary = asyncio.run(
            transform_ndjson_command(config, str(input_file), str(output_file))
        )
    except KeyboardInterrupt:
        print("Operation cancelled by user", file=sys.stderr)
        raise typer.Exit(code=130)
    except InlinerError as e:
        logger.error("transform_failed", error=e.message)
        raise typer.Exit(code=e.exit_code)

    typer.echo(
        f"Processed {summary.resources} resources, "
        f"{summary.attachments} attachments "
        f"({summary.downloads} downloads, {summary.downloaded_bytes} bytes)"
    )


def main() -> None:
    """Console script entry point."""
    app()


if __name__ == "__main__":
    main()
