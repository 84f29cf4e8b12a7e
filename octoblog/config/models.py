"""Typed dataclasses describing the effective octoblog site configuration."""

from __future__ import annotations

import dataclasses as dc
import enum
import typing as typ
from pathlib import Path

DEFAULT_MARKUP_EXTENSIONS: frozenset[str] = frozenset(
    {"markdown", "mkdown", "mkdn", "mkd", "md"}
)


class ConfigError(ValueError):
    """Raised when the site configuration is invalid or incomplete."""


class PermalinkStyle(enum.StrEnum):
    """Named permalink policies; anything else is a custom pattern."""

    DATE = "date"
    PRETTY = "pretty"
    NONE = "none"
    CUSTOM = "custom"


@dc.dataclass(frozen=True, slots=True)
class SiteMetadata:
    """Descriptive fields exposed to templates under ``site``."""

    title: str = "Octopress 文档"
    subtitle: str = ""
    description: str = "Octopress 静态博客框架文档"
    author: str = "Octopress"
    url: str = "http://localhost:4000"


@dc.dataclass(frozen=True, slots=True)
class SiteConfig:
    """Immutable configuration resolved from defaults, file and overrides.

    Attributes
    ----------
    source : Path
        Root of the source tree.
    destination : Path
        Directory receiving the generated site.
    layouts_dir, data_dir, includes_dir, posts_dir : str
        Framework subdirectory names relative to ``source``.
    markup_extensions : frozenset[str]
        Lowercase suffixes (without dots) treated as markup documents.
    permalink : str
        ``date``, ``pretty``, ``none`` or a custom pattern string.
    paginate : int
        Posts per index page; zero disables pagination.
    excerpt_separator : str
        Marker separating the excerpt from the rest of a post.
    host, port : str, int
        Preview server bind address.
    baseurl : str
        Path prefix the preview server is mounted under.
    metadata : SiteMetadata
        Title, description, author and absolute base URL.
    data : Mapping[str, Any]
        Free-form values from the config file's ``data`` key.
    """

    source: Path = Path(".")
    destination: Path = Path("_site")
    layouts_dir: str = "_layouts"
    data_dir: str = "_data"
    includes_dir: str = "_includes"
    posts_dir: str = "_posts"
    markup_extensions: frozenset[str] = DEFAULT_MARKUP_EXTENSIONS
    permalink: str = "date"
    paginate: int = 0
    excerpt_separator: str = "\n\n"
    host: str = "127.0.0.1"
    port: int = 4000
    baseurl: str = ""
    metadata: SiteMetadata = dc.field(default_factory=SiteMetadata)
    data: typ.Mapping[str, typ.Any] = dc.field(default_factory=dict)

    @property
    def permalink_style(self) -> PermalinkStyle:
        """Classify ``permalink`` into one of the named policies."""
        try:
            return PermalinkStyle(self.permalink)
        except ValueError:
            return PermalinkStyle.CUSTOM

    @property
    def layouts_path(self) -> Path:
        return self.source / self.layouts_dir

    @property
    def includes_path(self) -> Path:
        return self.source / self.includes_dir

    @property
    def data_path(self) -> Path:
        return self.source / self.data_dir

    @property
    def posts_path(self) -> Path:
        return self.source / self.posts_dir

    def is_markup(self, path: Path) -> bool:
        """Return ``True`` when ``path`` carries a configured markup suffix."""
        return path.suffix.lstrip(".").lower() in self.markup_extensions


__all__ = [
    "DEFAULT_MARKUP_EXTENSIONS",
    "ConfigError",
    "PermalinkStyle",
    "SiteConfig",
    "SiteMetadata",
]
