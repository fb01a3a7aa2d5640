"""Pure-Python MD5 (RFC 1321).

Slow compared to ``hashlib`` but free of any native dependency, which makes
it usable on interpreters built without OpenSSL MD5 (FIPS builds, some
embedded Pythons).
"""

from __future__ import annotations

import math
import struct

_MASK = 0xFFFFFFFF
_BLOCK = struct.Struct("<16I")

_SHIFTS = (
    [7, 12, 17, 22] * 4
    + [5, 9, 14, 20] * 4
    + [4, 11, 16, 23] * 4
    + [6, 10, 15, 21] * 4
)
_SINES = [int(abs(math.sin(i + 1)) * 2**32) & _MASK for i in range(64)]
_INITIAL = (0x67452301, 0xEFCDAB89, 0x98BADCFE, 0x10325476)


def _rotl(value: int, count: int) -> int:
    return ((value << count) | (value >> (32 - count))) & _MASK


def _compress(state: tuple[int, int, int, int], block: bytes | memoryview) -> tuple[int, int, int, int]:
    words = _BLOCK.unpack(block)
    a, b, c, d = state
    for i in range(64):
        if i < 16:
            f = (b & c) | (~b & d)
            g = i
        elif i < 32:
            f = (d & b) | (~d & c)
            g = (5 * i + 1) % 16
        elif i < 48:
            f = b ^ c ^ d
            g = (3 * i + 5) % 16
        else:
            f = c ^ (b | ~d)
            g = (7 * i) % 16
        f = (f + a + _SINES[i] + words[g]) & _MASK
        a, d, c = d, c, b
        b = (b + _rotl(f, _SHIFTS[i])) & _MASK
    return (
        (state[0] + a) & _MASK,
        (state[1] + b) & _MASK,
        (state[2] + c) & _MASK,
        (state[3] + d) & _MASK,
    )


class MD5:
    """Incremental MD5 with the ``hashlib`` object surface."""

    name = "md5"
    digest_size = 16
    block_size = 64

    def __init__(self, data: bytes | bytearray | memoryview = b"") -> None:
        self._state = _INITIAL
        self._pending = bytearray()
        self._length = 0
        if data:
            self.update(data)

    def update(self, data: bytes | bytearray | memoryview) -> None:
        view = memoryview(data).cast("B")
        self._length += len(view)
        offset = 0
        if self._pending:
            take = min(self.block_size - len(self._pending), len(view))
            self._pending += view[:take]
            offset = take
            if len(self._pending) < self.block_size:
                return
            self._state = _compress(self._state, bytes(self._pending))
            self._pending.clear()

        state = self._state
        end = len(view) - (len(view) - offset) % self.block_size
        for start in range(offset, end, self.block_size):
            state = _compress(state, view[start : start + self.block_size])
        self._state = state
        self._pending += view[end:]

    def digest(self) -> bytes:
        tail = bytes(self._pending) + b"\x80"
        tail += b"\x00" * ((56 - len(tail)) % self.block_size)
        tail += struct.pack("<Q", (self._length * 8) & 0xFFFFFFFFFFFFFFFF)
        state = self._state
        for start in range(0, len(tail), self.block_size):
            state = _compress(state, tail[start : start + self.block_size])
        return struct.pack("<4I", *state)

    def hexdigest(self) -> str:
        return self.digest().hex()

    def copy(self) -> "MD5":
        clone = MD5()
        clone._state = self._state
        clone._pending = bytearray(self._pending)
        clone._length = self._length
        return clone


__all__ = ["MD5"]
