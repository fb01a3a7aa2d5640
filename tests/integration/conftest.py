from __future__ import annotations

import os

import pytest


@pytest.fixture(autouse=True)
def _clean_s3etag_environment(monkeypatch) -> None:
    """Keep the caller's S3ETAG_* settings out of CLI runs."""

    for name in list(os.environ):
        if name.startswith("S3ETAG_"):
            monkeypatch.delenv(name, raising=False)
