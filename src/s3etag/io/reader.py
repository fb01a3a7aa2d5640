"""File reading strategies feeding bytes into an ETag hasher."""

from __future__ import annotations

import logging
import mmap
import os
import stat
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Protocol

from s3etag.util.retry import retry

logger = logging.getLogger(__name__)

DEFAULT_BUFFER_SIZE = 1 << 20
INTERRUPTED_READ_ATTEMPTS = 16


class SupportsUpdate(Protocol):
    def update(self, data: bytes | bytearray | memoryview | mmap.mmap) -> None:
        ...


@dataclass
class HashSource:
    """An open file together with the size observed when it was opened.

    `size` is None for pipes, devices and other non-regular files, whose
    stat size says nothing about how many bytes reading them will return.
    """

    path: Path
    handle: BinaryIO = field(repr=False)
    size: int | None

    def fileno(self) -> int:
        return self.handle.fileno()

    def close(self) -> None:
        self.handle.close()

    def __enter__(self) -> "HashSource":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def open_for_hashing(path: Path) -> HashSource:
    """Open `path` for a single sequential pass."""

    handle = open(path, "rb", buffering=0)
    try:
        st = os.fstat(handle.fileno())
    except OSError:
        handle.close()
        raise
    size = st.st_size if stat.S_ISREG(st.st_mode) else None
    _advise_sequential(handle.fileno(), path)
    return HashSource(path=Path(path), handle=handle, size=size)


def feed(
    source: HashSource,
    hasher: SupportsUpdate,
    *,
    use_mmap: bool = True,
    buffer_size: int = DEFAULT_BUFFER_SIZE,
) -> int:
    """Stream the whole of `source` into `hasher`, returning the bytes read."""

    if use_mmap and source.size:
        try:
            mapped = mmap.mmap(source.fileno(), 0, access=mmap.ACCESS_READ)
        except (OSError, ValueError) as exc:
            logger.debug("Cannot map %s (%s); using buffered reads", source.path, exc)
        else:
            with mapped:
                if hasattr(mmap, "MADV_SEQUENTIAL"):
                    mapped.madvise(mmap.MADV_SEQUENTIAL)
                hasher.update(mapped)
                return len(mapped)

    return _feed_buffered(source.handle, hasher, buffer_size)


def _feed_buffered(handle: BinaryIO, hasher: SupportsUpdate, buffer_size: int) -> int:
    buffer = bytearray(buffer_size)
    view = memoryview(buffer)
    total = 0

    def _read() -> int | None:
        return handle.readinto(buffer)

    while True:
        count = retry(_read, attempts=INTERRUPTED_READ_ATTEMPTS, retry_on=(InterruptedError,))
        if not count:
            break
        hasher.update(view[:count])
        total += count
    return total


def iter_sources(paths: Iterable[Path]) -> Iterator[tuple[Path, HashSource | OSError]]:
    """Yield ``(path, source)`` pairs in input order, opening one file ahead.

    The next file is opened before the current one is handed out, so its
    open and stat latency overlaps with hashing. A file that cannot be
    opened is yielded with the `OSError` in place of a source. Every source
    is closed once the consumer moves past it.
    """

    opened: list[tuple[Path, HashSource | OSError]] = []
    try:
        for path in paths:
            opened.append((path, _open_or_error(path)))
            if len(opened) > 1:
                yield from _hand_out(opened.pop(0))
        while opened:
            yield from _hand_out(opened.pop(0))
    finally:
        for _, source in opened:
            if isinstance(source, HashSource):
                source.close()


def _hand_out(item: tuple[Path, HashSource | OSError]) -> Iterator[tuple[Path, HashSource | OSError]]:
    try:
        yield item
    finally:
        if isinstance(item[1], HashSource):
            item[1].close()


def _open_or_error(path: Path) -> HashSource | OSError:
    try:
        return open_for_hashing(path)
    except OSError as exc:
        return exc


def _advise_sequential(fd: int, path: Path) -> None:
    if not hasattr(os, "posix_fadvise"):
        return
    try:
        os.posix_fadvise(fd, 0, 0, os.POSIX_FADV_SEQUENTIAL)
    except OSError as exc:
        # pipes and some special files reject read-ahead hints
        logger.debug("posix_fadvise failed for %s: %s", path, exc)


__all__ = [
    "DEFAULT_BUFFER_SIZE",
    "HashSource",
    "feed",
    "iter_sources",
    "open_for_hashing",
]
