"""Logging setup utilities."""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import TextIO


def configure_logging(
    *,
    level: int = logging.INFO,
    log_path: Path | None = None,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Configure project-wide logging handlers.

    Messages go to stderr by default; stdout is reserved for ETag lines.
    Calling again replaces the stream handler, so it always writes to the
    current `stream` (or ``sys.stderr``).
    """

    logger = logging.getLogger("s3etag")
    logger.setLevel(level)

    target = stream or sys.stderr
    stream_handlers = [
        h for h in logger.handlers if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
    ]
    existing_files = {getattr(h, "baseFilename", None) for h in logger.handlers}

    formatter = logging.Formatter(fmt="%(asctime)s %(levelname)s %(name)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S")

    for handler in stream_handlers:
        logger.removeHandler(handler)
    stream_handler = logging.StreamHandler(stream=target)
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    if log_path and os.path.abspath(log_path) not in existing_files:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


__all__ = ["configure_logging"]
