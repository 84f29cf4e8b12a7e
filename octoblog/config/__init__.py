"""Resolve octoblog configuration from ``_config`` files and CLI overrides.

The primary entry point is :func:`load_site_config`, which starts from built-in
defaults, merges the first ``_config.{yml,yaml,toml}`` found in the source tree
(or an explicit file), applies caller overrides, validates the
source/destination pair and returns an immutable :class:`SiteConfig`.

Examples
--------
>>> from pathlib import Path
>>> from octoblog.config import load_site_config
>>> config = load_site_config(source=Path("blog"))  # doctest: +SKIP
>>> config.permalink  # doctest: +SKIP
'date'
"""

from .loader import load_site_config
from .models import (
    DEFAULT_MARKUP_EXTENSIONS,
    ConfigError,
    PermalinkStyle,
    SiteConfig,
    SiteMetadata,
)

__all__ = [
    "DEFAULT_MARKUP_EXTENSIONS",
    "ConfigError",
    "PermalinkStyle",
    "SiteConfig",
    "SiteMetadata",
    "load_site_config",
]
