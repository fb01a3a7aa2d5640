"""Per-file ETag computation and output for the command line."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from pathlib import Path
from typing import BinaryIO

from s3etag.config import ETagConfig
from s3etag.hashing.engine import engine_factory
from s3etag.hashing.etag import ETag, MultipartETagHasher, SingleETagHasher
from s3etag.io.reader import HashSource, feed, iter_sources, open_for_hashing

logger = logging.getLogger(__name__)


def select_hasher(size: int, config: ETagConfig) -> SingleETagHasher | MultipartETagHasher:
    """Pick the hasher an ``aws s3 cp`` upload of `size` bytes would match.

    Files below the multipart threshold are uploaded in one request and get
    the plain MD5; anything else goes through the part accumulator.
    """

    factory = engine_factory(config.engine)
    if size < config.threshold:
        return SingleETagHasher(factory)
    return MultipartETagHasher(config.chunksize, factory)


class _Tee:
    """Forward every chunk to several hashers."""

    def __init__(self, *hashers: SingleETagHasher | MultipartETagHasher) -> None:
        self._hashers = hashers

    def update(self, data: bytes | bytearray | memoryview) -> None:
        for hasher in self._hashers:
            hasher.update(data)


def hash_source(source: HashSource, config: ETagConfig) -> ETag:
    if source.size is None:
        return _hash_unsized(source, config)

    hasher = select_hasher(source.size, config)
    logger.debug(
        "Hashing %s (%d bytes) with %s, mmap=%s",
        source.path,
        source.size,
        type(hasher).__name__,
        config.use_mmap,
    )
    feed(source, hasher, use_mmap=config.use_mmap, buffer_size=config.read_buffer_size)
    return hasher.finalize()


def _hash_unsized(source: HashSource, config: ETagConfig) -> ETag:
    # the upload form depends on a length only known once the stream ends
    factory = engine_factory(config.engine)
    single = SingleETagHasher(factory)
    multi = MultipartETagHasher(config.chunksize, factory)
    total = feed(source, _Tee(single, multi), use_mmap=False, buffer_size=config.read_buffer_size)
    logger.debug("Hashed %s (%d bytes read, size unknown up front)", source.path, total)
    if total < config.threshold:
        return single.finalize()
    return multi.finalize()


def hash_file(path: Path, config: ETagConfig | None = None) -> ETag:
    """Return the ETag S3 would report for `path` uploaded with `config`."""

    config = config or ETagConfig()
    with open_for_hashing(path) as source:
        return hash_source(source, config)


def format_line(etag: ETag, filename: Path | str, *, width: int = 39) -> bytes:
    """Render one output line as raw bytes, keeping the filename's OS encoding."""

    column = str(etag).ljust(width).encode("ascii")
    return column + b" " + os.fsencode(filename) + b"\n"


def process_files(paths: Iterable[Path], config: ETagConfig, out: BinaryIO) -> bool:
    """Hash every path in order, writing one line per success.

    Failures are logged with the filename and do not stop the run. Returns
    True only if every file was hashed.
    """

    ok = True
    for path, source in iter_sources(paths):
        if isinstance(source, OSError):
            _report_failure(path, source)
            ok = False
            continue
        try:
            etag = hash_source(source, config)
        except OSError as exc:
            _report_failure(path, exc)
            ok = False
            continue
        out.write(format_line(etag, path, width=config.column_width))
        out.flush()
    return ok


def _report_failure(path: Path, exc: OSError) -> None:
    logger.error("%s: %s", path, exc.strerror or exc)


__all__ = ["format_line", "hash_file", "hash_source", "process_files", "select_hasher"]
