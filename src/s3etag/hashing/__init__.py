"""Digest engines and ETag hashers."""

from .engine import DEFAULT_ENGINE, ENGINES, DigestEngine, HashlibMd5Engine, PureMd5Engine, engine_factory
from .etag import ETag, MultipartETagHasher, SingleETagHasher

__all__ = [
    "DEFAULT_ENGINE",
    "DigestEngine",
    "ENGINES",
    "ETag",
    "HashlibMd5Engine",
    "MultipartETagHasher",
    "PureMd5Engine",
    "SingleETagHasher",
    "engine_factory",
]
