"""Utility helpers shared by the octoblog configuration loader."""

from __future__ import annotations

import tomllib
import typing as typ
from pathlib import Path

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .models import DEFAULT_MARKUP_EXTENSIONS, ConfigError

CONFIG_CANDIDATES: tuple[str, ...] = ("_config.yml", "_config.yaml", "_config.toml")


def _yaml_loader() -> YAML:
    """Return a safe YAML 1.2 loader."""
    loader = YAML(typ="safe")
    loader.version = (1, 2)
    return loader


def _read_config_mapping(path: Path) -> dict[str, typ.Any]:
    """Parse a YAML or TOML config file into a plain mapping.

    Raises
    ------
    ConfigError
        If the file cannot be read or parsed, or its top level is not a mapping.
    """
    try:
        if path.suffix.lower() == ".toml":
            with path.open("rb") as handle:
                loaded: object = tomllib.load(handle)
        else:
            with path.open("r", encoding="utf-8") as handle:
                loaded = _yaml_loader().load(handle) or {}
    except (OSError, tomllib.TOMLDecodeError, YAMLError) as exc:
        msg = f"Unable to read configuration file '{path}': {exc}"
        raise ConfigError(msg) from exc
    if not isinstance(loaded, dict):
        msg = f"Top-level structure of '{path}' must be a mapping."
        raise ConfigError(msg)
    return dict(loaded)


def _find_config_file(source: Path) -> Path | None:
    """Return the first ``_config.*`` file present in ``source``."""
    for name in CONFIG_CANDIDATES:
        candidate = source / name
        if candidate.is_file():
            return candidate
    return None


def _normalize_extensions(value: object) -> frozenset[str]:
    """Turn a comma separated string or a list into lowercase suffixes."""
    match value:
        case str() as text:
            items: list[object] = list(text.split(","))
        case list() | tuple() | set() | frozenset():
            items = list(value)
        case _:
            return DEFAULT_MARKUP_EXTENSIONS
    normalized = {str(item).strip().lstrip(".").lower() for item in items}
    normalized.discard("")
    return frozenset(normalized) or DEFAULT_MARKUP_EXTENSIONS


def _optional_str(value: object | None) -> str | None:
    """Return a stripped string value or None when empty."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _coerce_int(key: str, value: object, *, minimum: int | None = None) -> int:
    """Return ``value`` as an integer or raise ConfigError."""
    if isinstance(value, bool):
        msg = f"'{key}' must be an integer, not a boolean."
        raise ConfigError(msg)
    try:
        number = int(typ.cast("typ.Any", value))
    except (TypeError, ValueError) as exc:
        msg = f"'{key}' must be an integer, got {value!r}."
        raise ConfigError(msg) from exc
    if minimum is not None and number < minimum:
        msg = f"'{key}' must be >= {minimum}, got {number}."
        raise ConfigError(msg)
    return number


def _is_relative_to(path: Path, other: Path) -> bool:
    """Return True when ``path`` equals or lives beneath ``other``."""
    try:
        path.relative_to(other)
    except ValueError:
        return False
    return True


__all__ = [
    "CONFIG_CANDIDATES",
    "_coerce_int",
    "_find_config_file",
    "_is_relative_to",
    "_normalize_extensions",
    "_optional_str",
    "_read_config_mapping",
    "_yaml_loader",
]
