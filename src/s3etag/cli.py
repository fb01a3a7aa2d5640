"""Command-line entry point: ``s3etag FILE...``."""

from __future__ import annotations

import logging
import sys
from enum import Enum
from pathlib import Path
from typing import List, Optional

import typer

from s3etag import __version__
from s3etag.config import ConfigError, load_config
from s3etag.driver import process_files
from s3etag.util.logging import configure_logging
from s3etag.util.sizes import SizeError, format_size, parse_size

app = typer.Typer(add_completion=False, help="Compute Amazon S3 ETags")

CHUNKSIZE_HELP = "multipart_chunksize used for upload in bytes or with a size suffix KB, MB, GB, or TB"
THRESHOLD_HELP = "multipart_threshold used for upload in bytes or with a size suffix KB, MB, GB, or TB"


class EngineName(str, Enum):
    hashlib = "hashlib"
    pure = "pure"


def _size_option(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        return parse_size(value)
    except SizeError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"s3etag {__version__}")
        raise typer.Exit()


@app.command()
def main_command(
    files: List[Path] = typer.Argument(..., metavar="FILE...", help="filenames"),
    chunksize: Optional[str] = typer.Option(
        None, "--chunksize", metavar="SIZE", callback=_size_option, help=CHUNKSIZE_HELP + " [default: 8MB]"
    ),
    threshold: Optional[str] = typer.Option(
        None, "--threshold", metavar="SIZE", callback=_size_option, help=THRESHOLD_HELP + " [default: 8MB]"
    ),
    engine: Optional[EngineName] = typer.Option(None, "--engine", help="MD5 implementation [default: hashlib]"),
    no_mmap: bool = typer.Option(False, "--no-mmap", help="disable memory-mapped I/O in reading files"),
    config: Optional[Path] = typer.Option(None, "--config", help="YAML/TOML/JSON config file"),
    log_file: Optional[Path] = typer.Option(None, "--log-file", help="Also write log messages to this file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log per-file details"),
    version: Optional[bool] = typer.Option(
        None, "--version", callback=_version_callback, is_eager=True, help="Show the version and exit"
    ),
) -> None:
    """Print the S3 ETag of each FILE as it would be after an AWS CLI upload."""

    logger = configure_logging(level=logging.DEBUG if verbose else logging.INFO, log_path=log_file)
    overrides = {
        "chunksize": chunksize,
        "threshold": threshold,
        "engine": engine.value if engine else None,
        "use_mmap": False if no_mmap else None,
    }
    try:
        cfg = load_config(config, overrides=overrides)
    except ConfigError as exc:
        logger.error("%s", exc)
        raise typer.Exit(code=2)

    logger.debug(
        "chunksize=%s threshold=%s engine=%s", format_size(cfg.chunksize), format_size(cfg.threshold), cfg.engine
    )
    if not process_files(files, cfg, sys.stdout.buffer):
        raise typer.Exit(code=1)


def main() -> None:
    app()


__all__ = ["main", "app"]
