"""MD5 digest engines consumed by the ETag hashers."""

from __future__ import annotations

import hashlib
import mmap
from collections.abc import Callable
from typing import Protocol, runtime_checkable

from s3etag.hashing.md5 import MD5

DIGEST_SIZE = 16

BytesLike = bytes | bytearray | memoryview | mmap.mmap


@runtime_checkable
class DigestEngine(Protocol):
    """Minimal interface the ETag hashers need from an MD5 implementation."""

    name: str
    digest_size: int

    def update(self, data: BytesLike) -> None:
        """Feed `data` into the running hash."""
        ...

    def finalize(self) -> bytes:
        """Return the digest and retire the engine."""
        ...

    def finalize_reset(self) -> bytes:
        """Return the digest and leave the engine in its initial state."""
        ...


class _EngineBase:
    name = "base"
    digest_size = DIGEST_SIZE

    def __init__(self) -> None:
        self._finalized = False

    def _check_open(self) -> None:
        if self._finalized:
            raise RuntimeError(f"{self.name} engine used after finalize()")

    def __repr__(self) -> str:
        state = "finalized" if self._finalized else "open"
        return f"<{type(self).__name__} {state}>"


class HashlibMd5Engine(_EngineBase):
    """Engine backed by the interpreter's OpenSSL MD5."""

    name = "hashlib"

    def __init__(self) -> None:
        super().__init__()
        self._hash = hashlib.md5(usedforsecurity=False)

    def update(self, data: BytesLike) -> None:
        self._check_open()
        self._hash.update(data)

    def finalize(self) -> bytes:
        self._check_open()
        self._finalized = True
        return self._hash.digest()

    def finalize_reset(self) -> bytes:
        self._check_open()
        digest = self._hash.digest()
        self._hash = hashlib.md5(usedforsecurity=False)
        return digest


class PureMd5Engine(_EngineBase):
    """Portable engine running the pure-Python MD5 in `s3etag.hashing.md5`."""

    name = "pure"

    def __init__(self) -> None:
        super().__init__()
        self._hash = MD5()

    def update(self, data: BytesLike) -> None:
        self._check_open()
        self._hash.update(data)

    def finalize(self) -> bytes:
        self._check_open()
        self._finalized = True
        return self._hash.digest()

    def finalize_reset(self) -> bytes:
        self._check_open()
        digest = self._hash.digest()
        self._hash = MD5()
        return digest


EngineFactory = Callable[[], DigestEngine]

ENGINES: dict[str, EngineFactory] = {
    HashlibMd5Engine.name: HashlibMd5Engine,
    PureMd5Engine.name: PureMd5Engine,
}

DEFAULT_ENGINE = HashlibMd5Engine.name


def engine_factory(name: str = DEFAULT_ENGINE) -> EngineFactory:
    """Return the constructor registered under `name`."""

    try:
        return ENGINES[name]
    except KeyError as exc:
        available = ", ".join(sorted(ENGINES))
        raise KeyError(f"Unknown digest engine '{name}' (available: {available}).") from exc


__all__ = [
    "DEFAULT_ENGINE",
    "BytesLike",
    "DIGEST_SIZE",
    "DigestEngine",
    "ENGINES",
    "EngineFactory",
    "HashlibMd5Engine",
    "PureMd5Engine",
    "engine_factory",
]
