"""Configuration models and loaders for s3etag."""

from .loader import ConfigError, DEFAULT_CONFIG_PATH, ENV_PREFIX, load_config
from .models import DEFAULT_CHUNKSIZE, DEFAULT_THRESHOLD, ETagConfig

__all__ = [
    "ConfigError",
    "DEFAULT_CHUNKSIZE",
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_THRESHOLD",
    "ENV_PREFIX",
    "ETagConfig",
    "load_config",
]
