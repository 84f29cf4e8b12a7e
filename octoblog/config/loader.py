"""Resolve the effective site configuration from defaults, file and overrides."""

from __future__ import annotations

import logging
import typing as typ
from pathlib import Path

from .helpers import (
    _coerce_int,
    _find_config_file,
    _is_relative_to,
    _normalize_extensions,
    _optional_str,
    _read_config_mapping,
)
from .models import ConfigError, SiteConfig, SiteMetadata

logger = logging.getLogger(__name__)

_KNOWN_KEYS = frozenset(
    {
        "source",
        "destination",
        "layouts_dir",
        "data_dir",
        "includes_dir",
        "posts_dir",
        "markdown_ext",
        "permalink",
        "paginate",
        "excerpt_separator",
        "host",
        "port",
        "baseurl",
        "title",
        "subtitle",
        "description",
        "author",
        "url",
        "data",
    }
)


def load_site_config(
    config_path: Path | None = None,
    *,
    source: Path | None = None,
    destination: Path | None = None,
    overrides: typ.Mapping[str, typ.Any] | None = None,
) -> SiteConfig:
    """Load the site configuration for a source tree.

    Parameters
    ----------
    config_path : Path, optional
        Explicit configuration file. When omitted the loader searches
        ``<source>/_config.yml``, ``_config.yaml`` and ``_config.toml`` in
        that order.
    source : Path, optional
        Source directory override; defaults to the current directory.
    destination : Path, optional
        Destination directory override. A relative destination coming from
        the config file (or the default ``_site``) is resolved against the
        source directory.
    overrides : Mapping[str, Any], optional
        Final key/value overrides using the config file's key names (for
        example ``{"port": 8080, "baseurl": "/blog"}``).

    Returns
    -------
    SiteConfig
        The validated, immutable configuration.

    Raises
    ------
    ConfigError
        If the file is missing, unreadable or malformed, a value has the wrong
        type, or the source/destination pair is unusable.

    Examples
    --------
    >>> from pathlib import Path
    >>> from octoblog.config import load_site_config
    >>> config = load_site_config(source=Path("blog"))  # doctest: +SKIP
    >>> config.destination  # doctest: +SKIP
    PosixPath('blog/_site')
    """
    source_dir = Path(source) if source is not None else Path(".")
    raw: dict[str, typ.Any] = {}
    if config_path is not None:
        if not Path(config_path).is_file():
            msg = f"Configuration file '{config_path}' not found."
            raise ConfigError(msg)
        raw = _read_config_mapping(Path(config_path))
        logger.debug("loaded configuration from %s", config_path)
    else:
        found = _find_config_file(source_dir)
        if found is not None:
            raw = _read_config_mapping(found)
            logger.debug("loaded configuration from %s", found)
    if overrides:
        raw.update({key: value for key, value in overrides.items() if value is not None})

    unknown = sorted(set(raw) - _KNOWN_KEYS)
    if unknown:
        logger.debug("ignoring unknown configuration keys: %s", ", ".join(unknown))

    if source is None and _optional_str(raw.get("source")):
        source_dir = Path(str(raw["source"]))
    if destination is not None:
        dest_dir = Path(destination)
    else:
        dest_dir = Path(_optional_str(raw.get("destination")) or "_site")
        if not dest_dir.is_absolute():
            dest_dir = source_dir / dest_dir

    config = SiteConfig(
        source=source_dir,
        destination=dest_dir,
        layouts_dir=_optional_str(raw.get("layouts_dir")) or "_layouts",
        data_dir=_optional_str(raw.get("data_dir")) or "_data",
        includes_dir=_optional_str(raw.get("includes_dir")) or "_includes",
        posts_dir=_optional_str(raw.get("posts_dir")) or "_posts",
        markup_extensions=_normalize_extensions(raw.get("markdown_ext")),
        permalink=_optional_str(raw.get("permalink")) or "date",
        paginate=_coerce_int("paginate", raw.get("paginate") or 0, minimum=0),
        excerpt_separator=_excerpt_separator(raw.get("excerpt_separator")),
        host=_optional_str(raw.get("host")) or "127.0.0.1",
        port=_coerce_int("port", raw.get("port") or 4000, minimum=0),
        baseurl=(_optional_str(raw.get("baseurl")) or "").rstrip("/"),
        metadata=_build_metadata(raw),
        data=_build_data(raw.get("data")),
    )
    _validate_paths(config)
    return config


def _excerpt_separator(value: object) -> str:
    """Return the configured separator, keeping whitespace-only markers."""
    if isinstance(value, str) and value:
        return value
    return "\n\n"


def _build_metadata(raw: typ.Mapping[str, typ.Any]) -> SiteMetadata:
    """Build SiteMetadata from top-level keys, falling back to defaults."""
    base = SiteMetadata()
    return SiteMetadata(
        title=_optional_str(raw.get("title")) or base.title,
        subtitle=_optional_str(raw.get("subtitle")) or base.subtitle,
        description=_optional_str(raw.get("description")) or base.description,
        author=_optional_str(raw.get("author")) or base.author,
        url=(_optional_str(raw.get("url")) or base.url).rstrip("/"),
    )


def _build_data(value: object) -> dict[str, typ.Any]:
    match value:
        case None:
            return {}
        case dict():
            return dict(value)
        case _:
            msg = "'data' must be a mapping."
            raise ConfigError(msg)


def _validate_paths(config: SiteConfig) -> None:
    """Reject missing sources and destinations that would swallow the source."""
    if not config.source.is_dir():
        msg = f"Source directory '{config.source}' does not exist."
        raise ConfigError(msg)
    source = config.source.resolve()
    dest = config.destination.resolve()
    if dest == source:
        msg = "Destination must differ from the source directory."
        raise ConfigError(msg)
    if _is_relative_to(source, dest):
        msg = f"Destination '{config.destination}' must not contain the source."
        raise ConfigError(msg)
    if _is_relative_to(dest, source) and dest.name != "_site":
        msg = (
            f"Destination '{config.destination}' is inside the source tree; "
            "only a directory named '_site' may be nested there."
        )
        raise ConfigError(msg)


__all__ = ["load_site_config"]
