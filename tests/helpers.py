from __future__ import annotations

import hashlib
import random
import threading
from collections.abc import Iterator
from pathlib import Path


def md5(data: bytes) -> bytes:
    return hashlib.md5(data).digest()


def reference_etag(data: bytes, part_size: int) -> str:
    """Compute the expected ETag text straight from the definition."""

    if len(data) <= part_size:
        return md5(data).hex()
    parts = [data[i : i + part_size] for i in range(0, len(data), part_size)]
    combined = b"".join(md5(part) for part in parts)
    return f"{md5(combined).hex()}-{len(parts)}"


def random_splits(data: bytes, rng: random.Random, *, max_piece: int) -> Iterator[bytes]:
    """Cut `data` into consecutive pieces of random length (empty pieces included)."""

    pos = 0
    while pos < len(data):
        step = rng.randint(0, max_piece)
        yield data[pos : pos + step]
        pos += step


def make_file(path: Path, content: bytes) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    return path


def serve_fifo(path: Path, content: bytes) -> threading.Thread:
    """Write `content` into the named pipe at `path` once a reader opens it."""

    def _write() -> None:
        with open(path, "wb") as handle:
            handle.write(content)

    thread = threading.Thread(target=_write, daemon=True)
    thread.start()
    return thread
