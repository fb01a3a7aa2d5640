"""Compute Amazon S3 ETags, including the multipart ``<md5>-<parts>`` form."""

from s3etag.hashing.etag import ETag, MultipartETagHasher, SingleETagHasher

__version__ = "0.4.4"

__all__ = ["ETag", "MultipartETagHasher", "SingleETagHasher", "__version__"]
