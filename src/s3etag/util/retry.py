"""Retry helpers for transient I/O conditions."""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import TypeVar

T = TypeVar("T")


def retry(
    operation: Callable[[], T],
    *,
    attempts: int,
    backoff_seconds: float = 0.0,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
) -> T:
    """Execute `operation`, retrying when it raises one of `retry_on`.

    Other exceptions propagate immediately. After `attempts` failures the
    last error is re-raised.
    """
    if attempts < 1:
        raise ValueError("attempts must be >= 1")

    last_error: BaseException | None = None
    for attempt in range(attempts):
        try:
            return operation()
        except retry_on as exc:
            last_error = exc
            if attempt == attempts - 1:
                break
            delay = backoff_seconds * (2**attempt)
            if delay:
                time.sleep(delay)
    assert last_error is not None  # for type checkers
    raise last_error


__all__ = ["retry"]
