"""S3 ETag values and the streaming hashers that produce them.

An S3 object uploaded in one request carries the plain MD5 of its body as
ETag. An object uploaded through the multipart API carries the MD5 of the
concatenated per-part MD5 digests, followed by ``-<number of parts>``.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from s3etag.hashing.engine import DIGEST_SIZE, BytesLike, EngineFactory, HashlibMd5Engine

logger = logging.getLogger(__name__)

_ETAG_PATTERN = re.compile(r'^(?P<quote>"?)(?P<digest>[0-9A-Fa-f]{32})(?:-(?P<parts>[1-9][0-9]*))?(?P=quote)$')


@dataclass(frozen=True)
class ETag:
    """Immutable ETag result: a 16-byte digest and an optional part count."""

    digest: bytes
    part_count: int | None = None

    def __post_init__(self) -> None:
        if len(self.digest) != DIGEST_SIZE:
            raise ValueError(f"ETag digest must be {DIGEST_SIZE} bytes, got {len(self.digest)}.")
        if self.part_count is not None and self.part_count < 1:
            raise ValueError(f"ETag part count must be positive, got {self.part_count}.")

    @property
    def is_multipart(self) -> bool:
        return self.part_count is not None and self.part_count > 1

    def hexdigest(self) -> str:
        return self.digest.hex()

    def __str__(self) -> str:
        if self.is_multipart:
            return f"{self.hexdigest()}-{self.part_count}"
        return self.hexdigest()

    @classmethod
    def parse(cls, text: str) -> "ETag":
        """Parse a rendered ETag, optionally quoted as S3 returns it in headers.

        Hex digits are accepted in either case. A missing suffix, as well as
        ``-1``, yields the simple form.
        """

        match = _ETAG_PATTERN.match(text.strip())
        if match is None:
            raise ValueError(f"Malformed ETag: {text!r}")
        parts = match.group("parts")
        part_count = int(parts) if parts and int(parts) > 1 else None
        return cls(bytes.fromhex(match.group("digest")), part_count)


class SingleETagHasher:
    """Hashes the whole input with one engine, always yielding the simple form."""

    def __init__(self, engine_factory: EngineFactory = HashlibMd5Engine) -> None:
        self._engine = engine_factory()
        self._finalized = False

    def update(self, data: BytesLike) -> None:
        if self._finalized:
            raise RuntimeError("update() called on a finalized hasher")
        self._engine.update(data)

    def write(self, data: BytesLike) -> int:
        self.update(data)
        return len(data)

    def flush(self) -> None:
        pass

    def finalize(self) -> ETag:
        if self._finalized:
            raise RuntimeError("finalize() called twice")
        self._finalized = True
        return ETag(self._engine.finalize())


class MultipartETagHasher:
    """Streaming accumulator reproducing the ETag of a multipart upload.

    Part boundaries depend only on the cumulative number of bytes consumed,
    so any split of the input across ``update`` calls gives the same result.
    Two engines are kept: one for the part being filled, one fed with the
    digest of every completed part.
    """

    def __init__(self, part_size: int, engine_factory: EngineFactory = HashlibMd5Engine) -> None:
        if isinstance(part_size, bool) or not isinstance(part_size, int) or part_size <= 0:
            raise ValueError(f"part_size must be a positive integer, got {part_size!r}.")
        self._part_size = part_size
        self._part_count = 0
        self._part_engine = engine_factory()
        self._whole_engine = engine_factory()
        self._remaining = part_size
        self._last_part_digest = b""
        self._finalized = False

    @property
    def part_size(self) -> int:
        return self._part_size

    @property
    def part_count(self) -> int:
        """Number of completed parts folded into the whole-object digest so far."""
        return self._part_count

    @property
    def remaining_capacity(self) -> int:
        """Bytes still needed to complete the current part."""
        return self._remaining

    def update(self, data: BytesLike) -> None:
        if self._finalized:
            raise RuntimeError("update() called on a finalized hasher")
        self._check_remaining()

        with memoryview(data) as view:
            buf = view.cast("B")
            while len(buf) >= self._remaining:
                used = self._remaining
                self._part_engine.update(buf[:used])
                self._last_part_digest = self._part_engine.finalize_reset()
                self._whole_engine.update(self._last_part_digest)
                self._part_count += 1
                self._remaining = self._part_size
                buf = buf[used:]
            if len(buf):
                self._part_engine.update(buf)
                self._remaining -= len(buf)

    def _check_remaining(self) -> None:
        if not (0 < self._remaining <= self._part_size):
            raise AssertionError(
                f"part accumulator out of range: {self._remaining} bytes remaining of {self._part_size}"
            )

    def write(self, data: BytesLike) -> int:
        self.update(data)
        return len(data)

    def flush(self) -> None:
        pass

    def finalize(self) -> ETag:
        """Return the ETag, retiring the hasher.

        An empty input, an input shorter than one part, and an input of
        exactly one part all give the plain MD5 of the data: multipart
        semantics do not apply below one part plus one byte.
        """

        if self._finalized:
            raise RuntimeError("finalize() called twice")
        self._finalized = True
        self._check_remaining()

        has_partial = self._remaining < self._part_size
        if self._part_count == 0:
            return ETag(self._part_engine.finalize())
        if self._part_count == 1 and not has_partial:
            # the part engine was reset when the part completed
            return ETag(self._last_part_digest)

        if has_partial:
            self._part_count += 1
            self._whole_engine.update(self._part_engine.finalize())
        logger.debug("Folded %d parts of %d bytes", self._part_count, self._part_size)
        return ETag(self._whole_engine.finalize(), self._part_count)

    def __repr__(self) -> str:
        return (
            f"<MultipartETagHasher part_size={self._part_size} "
            f"parts={self._part_count} remaining={self._remaining}>"
        )


__all__ = ["ETag", "MultipartETagHasher", "SingleETagHasher"]
