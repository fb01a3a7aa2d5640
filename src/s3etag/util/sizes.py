"""Human-readable size parsing for ``--chunksize`` and ``--threshold``."""

from __future__ import annotations

SIZE_SUFFIXES: dict[str, int] = {
    "": 1,
    "KB": 1 << 10,
    "MB": 1 << 20,
    "GB": 1 << 30,
    "TB": 1 << 40,
}

MAX_SIZE = (1 << 64) - 1


class SizeError(ValueError):
    """Raised when a size value cannot be interpreted."""


def parse_size(value: str | int) -> int:
    """Return the byte count for `value`, e.g. ``"8MB"`` -> 8388608.

    Suffixes are 1024-based and case-sensitive. Integers pass through when
    positive so that structured config files may give plain numbers.
    """

    if isinstance(value, bool):
        raise SizeError(f"invalid size {value!r}")
    if isinstance(value, int):
        if value <= 0:
            raise SizeError("size must be positive")
        if value > MAX_SIZE:
            raise SizeError("too large size")
        return value

    text = value.strip()
    split = len(text)
    for pos, char in enumerate(text):
        if not ("0" <= char <= "9"):
            split = pos
            break
    digits, suffix = text[:split], text[split:]

    if not digits:
        raise SizeError(f"invalid size {value!r}")
    if suffix not in SIZE_SUFFIXES:
        raise SizeError(f"unknown size suffix {suffix!r}")

    number = int(digits)
    if number == 0:
        raise SizeError("size must be positive")
    result = number * SIZE_SUFFIXES[suffix]
    if result > MAX_SIZE:
        raise SizeError("too large size")
    return result


def format_size(value: int) -> str:
    """Render `value` with the largest suffix dividing it exactly."""

    for suffix in ("TB", "GB", "MB", "KB"):
        unit = SIZE_SUFFIXES[suffix]
        if value % unit == 0:
            return f"{value // unit}{suffix}"
    return str(value)


__all__ = ["MAX_SIZE", "SIZE_SUFFIXES", "SizeError", "format_size", "parse_size"]
