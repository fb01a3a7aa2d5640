"""Config loading entry points for s3etag."""

from __future__ import annotations

import json
import os
import tomllib
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import ValidationError

from .models import ETagConfig

DEFAULT_CONFIG_PATH = Path(__file__).resolve().with_name("s3etag.default.yaml")
ENV_PREFIX = "S3ETAG_"

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off", ""}


class ConfigError(RuntimeError):
    """Raised when configuration files cannot be loaded or validated."""


def load_config(
    path: Path | None = None,
    *,
    overrides: Mapping[str, Any] | None = None,
    environ: Mapping[str, str] | None = None,
) -> ETagConfig:
    """Load the s3etag configuration.

    Layers, lowest precedence first: packaged defaults, the config file at
    `path` (or ``$S3ETAG_CONFIG``), ``S3ETAG_*`` environment variables,
    then `overrides`.
    """

    env = os.environ if environ is None else environ
    default_data = _expect_mapping(_read_structured_file(DEFAULT_CONFIG_PATH), DEFAULT_CONFIG_PATH)

    if path is None and env.get(f"{ENV_PREFIX}CONFIG"):
        path = Path(env[f"{ENV_PREFIX}CONFIG"]).expanduser()

    if path:
        config_data = _expect_mapping(_read_structured_file(path), path)
    else:
        config_data = {}

    merged: dict[str, Any] = _deep_merge(default_data, config_data)
    merged = _deep_merge(merged, _env_overrides(env))

    if overrides:
        merged = _deep_merge(merged, _drop_unset(overrides))

    try:
        return ETagConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(_describe_validation_error(exc)) from exc


def _env_overrides(env: Mapping[str, str]) -> dict[str, Any]:
    """Collect ``S3ETAG_*`` variables that map onto config fields."""

    result: dict[str, Any] = {}
    for field in ("chunksize", "threshold", "engine"):
        value = env.get(f"{ENV_PREFIX}{field.upper()}")
        if value:
            result[field] = value

    no_mmap = env.get(f"{ENV_PREFIX}NO_MMAP")
    if no_mmap is not None:
        flag = no_mmap.strip().lower()
        if flag in _TRUTHY:
            result["use_mmap"] = False
        elif flag not in _FALSY:
            raise ConfigError(f"{ENV_PREFIX}NO_MMAP: expected a boolean, got {no_mmap!r}.")
    return result


def _describe_validation_error(exc: ValidationError) -> str:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "config"
        problems.append(f"{location}: {error['msg']}")
    return "Invalid configuration: " + "; ".join(problems)


def _expect_mapping(payload: Any, source: Path) -> dict[str, Any]:
    if payload is None:
        return {}
    if not isinstance(payload, Mapping):
        raise ConfigError(f"Expected mapping data in {source}, got {type(payload)!r}.")
    return dict(payload)


def _read_structured_file(path: Path) -> Any:
    """Return the parsed contents of a YAML/TOML/JSON file."""

    if not path.exists():
        raise ConfigError(f"Config file {path} does not exist.")

    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")

    try:
        if suffix in {".yaml", ".yml"}:
            return yaml.safe_load(text) or {}
        if suffix == ".toml":
            return tomllib.loads(text)
        if suffix == ".json":
            return json.loads(text)
    except (yaml.YAMLError, tomllib.TOMLDecodeError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Cannot parse config file {path}: {exc}") from exc

    raise ConfigError(f"Unsupported config format for {path}")


def _deep_merge(base: Mapping[str, Any], extra: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively merge two mappings returning a new dictionary."""

    result: dict[str, Any] = {key: value for key, value in base.items()}
    for key, value in extra.items():
        if (
            key in result
            and isinstance(result[key], Mapping)
            and isinstance(value, Mapping)
        ):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _drop_unset(overrides: Mapping[str, Any]) -> dict[str, Any]:
    """Drop unset (None) override values so lower layers stay visible."""

    return {key: value for key, value in overrides.items() if value is not None}


__all__ = [
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "ENV_PREFIX",
    "load_config",
]
