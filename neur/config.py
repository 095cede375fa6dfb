"""Configuration loading and resolution for neur.

The effective configuration is merged from three layers, highest first:
command-line overrides, the ``neur.toml`` file, and built-in defaults.

Key functions:
- load_config_file: Read and type-check the TOML config file.
- resolve_config: Merge the layers into an immutable Config.
"""

from __future__ import annotations

import logging
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "neur.toml"

DEFAULT_CONFIG: dict[str, Any] = {
    "source": "src",
    "output": "dist",
    "minify": False,
}

_FIELD_TYPES: dict[str, type] = {
    "source": str,
    "output": str,
    "minify": bool,
}


@dataclass(frozen=True)
class Config:
    """Effective build configuration.

    Attributes:
        source: Directory holding the site sources.
        output: Directory the site is written to.
        minify: Whether stylesheets are minified.
    """

    source: Path
    output: Path
    minify: bool = False


def load_config_file(path: Path | None = None, root: Path | None = None) -> dict[str, Any]:
    """Load configuration values from a TOML file.

    Args:
        path: Explicit config file. It must exist when given.
        root: Directory searched for ``neur.toml`` when no path is given.

    Returns:
        Dictionary of the recognised keys present in the file.

    Raises:
        ConfigError: If the file is missing, unparsable, or holds values of
            the wrong type.
    """
    if path is None:
        candidate = (root or Path.cwd()) / CONFIG_FILENAME
        if not candidate.exists():
            return {}
        path = candidate
    elif not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    try:
        with open(path, "rb") as f:
            loaded = tomllib.load(f)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Could not read {path}: {exc}") from exc

    values: dict[str, Any] = {}
    for key, value in loaded.items():
        expected = _FIELD_TYPES.get(key)
        if expected is None:
            logger.debug("Ignoring unknown config key %r in %s", key, path)
            continue
        if not isinstance(value, expected):
            raise ConfigError(
                f"{path}: '{key}' must be a {expected.__name__}, got {type(value).__name__}"
            )
        values[key] = value
    return values


def resolve_config(
    file_values: Mapping[str, Any] | None = None,
    cli_values: Mapping[str, Any] | None = None,
    defaults: Mapping[str, Any] = DEFAULT_CONFIG,
) -> Config:
    """Merge defaults, file values and CLI overrides into a Config.

    A CLI value of ``None`` means "not given" and falls through to the file,
    then to the defaults.

    Raises:
        ConfigError: If a directory is empty, or source and output overlap.
    """
    file_values = file_values or {}
    cli_values = cli_values or {}

    merged: dict[str, Any] = {}
    for key, default in defaults.items():
        value = cli_values.get(key)
        if value is None:
            value = file_values.get(key, default)
        merged[key] = value

    source = str(merged["source"])
    output = str(merged["output"])
    if not source.strip():
        raise ConfigError("Source directory must not be empty.")
    if not output.strip():
        raise ConfigError("Output directory must not be empty.")

    config = Config(source=Path(source), output=Path(output), minify=bool(merged["minify"]))
    _validate_directories(config)
    return config


def _validate_directories(config: Config) -> None:
    source = config.source.resolve()
    output = config.output.resolve()
    if source == output:
        raise ConfigError(
            f"Source and output resolve to the same directory: {source}"
        )
    if output.is_relative_to(source):
        raise ConfigError("Output directory can't be under source directory.")
    if source.is_relative_to(output):
        raise ConfigError("Source directory can't be under output directory.")
