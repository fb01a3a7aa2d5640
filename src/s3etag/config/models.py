"""Pydantic models describing s3etag configuration."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from s3etag.util.sizes import parse_size

DEFAULT_CHUNKSIZE = 8 << 20
DEFAULT_THRESHOLD = 8 << 20


class ETagConfig(BaseModel):
    """Settings shared by the CLI and library entry points.

    `chunksize` and `threshold` mirror the AWS CLI's ``multipart_chunksize``
    and ``multipart_threshold`` and accept the same ``8MB`` style values.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    chunksize: int = DEFAULT_CHUNKSIZE
    threshold: int = DEFAULT_THRESHOLD
    engine: Literal["hashlib", "pure"] = "hashlib"
    use_mmap: bool = True
    read_buffer_size: int = Field(default=1 << 20, gt=0)
    column_width: int = Field(default=39, ge=0)

    @field_validator("chunksize", "threshold", "read_buffer_size", mode="before")
    @classmethod
    def _parse_size(cls, value: Any) -> Any:
        if isinstance(value, (str, int)) and not isinstance(value, bool):
            return parse_size(value)
        return value


__all__ = ["DEFAULT_CHUNKSIZE", "DEFAULT_THRESHOLD", "ETagConfig"]
