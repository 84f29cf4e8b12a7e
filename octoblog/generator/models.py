"""Typed records for the documents and listings that make up a site."""

from __future__ import annotations

import dataclasses as dc
import datetime as dt
import posixpath
import typing as typ
from pathlib import Path

from octoblog._constants import ARCHIVES_DIR, HOME_INDEX_PATH, PAGINATION_PATH_TEMPLATE
from octoblog.frontmatter import FrontMatter


@dc.dataclass(slots=True)
class Page:
    """A standalone document rendered through a layout.

    Attributes
    ----------
    source_path : Path
        File the page was loaded from.
    body : str
        Markup after the front-matter block.
    front_matter : FrontMatter
        Parsed header values.
    title : str
        Header title, or the filename stem.
    layout : str
        Layout template name.
    url : str
        Site-relative output path such as ``/about/index.html``.
    date : datetime
        Header date, or the file's modification time.
    description : str
        Header description, possibly empty.
    excerpt : str
        Body text before the excerpt separator, stripped.
    content : str
        Converted body HTML; set during rendering.
    rendered : str
        Full layout output; set during rendering.
    """

    source_path: Path
    body: str
    front_matter: FrontMatter
    title: str
    layout: str
    url: str
    date: dt.datetime
    description: str = ""
    excerpt: str = ""
    content: str = ""
    rendered: str = ""

    @property
    def output_path(self) -> str:
        """Destination-relative path the rendered page is written to."""
        return self.url.lstrip("/")

    @property
    def comments(self) -> bool:
        return self.front_matter.get_bool("comments", default=False)

    def __getitem__(self, key: str) -> typ.Any:  # noqa: ANN401
        return self.front_matter.get(key)


@dc.dataclass(slots=True)
class Post:
    """A dated article addressed by its permalink.

    ``url`` is absolute (it carries the configured site URL) and
    ``relative_url`` is its path component, including any path the site URL
    itself has. The post is written to and served from ``relative_url``.
    """

    source_path: Path
    body: str
    front_matter: FrontMatter
    title: str
    layout: str
    slug: str
    date: dt.datetime
    url: str = ""
    relative_url: str = ""
    permalink: str | None = None
    description: str = ""
    excerpt: str = ""
    categories: list[str] = dc.field(default_factory=list)
    tags: list[str] = dc.field(default_factory=list)
    content: str = ""
    rendered: str = ""

    @property
    def output_path(self) -> str:
        """Destination-relative canonical path."""
        return self.relative_url.lstrip("/")

    @property
    def archive_path(self) -> str:
        """Destination-relative archive mirror path."""
        return archive_path_for(self.date, self.relative_url, self.slug)

    @property
    def comments(self) -> bool:
        return self.front_matter.get_bool("comments", default=True)

    def __getitem__(self, key: str) -> typ.Any:  # noqa: ANN401
        return self.front_matter.get(key)


def archive_path_for(date: dt.datetime, relative_url: str, slug: str) -> str:
    """Return ``archives/Y/M/D/<basename>`` for a post's relative URL.

    Indexed permalinks (``.../<slug>/index.html``) are mirrored at
    ``archives/Y/M/D/<slug>/index.html`` rather than at the bare basename
    ``archives/Y/M/D/index.html``, so posts published on the same day do not
    overwrite each other's mirror.
    """
    basename = posixpath.basename(relative_url.rstrip("/")) or "index.html"
    if basename == "index.html":
        basename = f"{slug}/index.html"
    return f"{ARCHIVES_DIR}/{date:%Y}/{date:%m}/{date:%d}/{basename}"


@dc.dataclass(slots=True)
class Paginator:
    """Navigation data for one index page."""

    number: int
    total: int
    posts: list[Post]
    previous_url: str | None = None
    next_url: str | None = None

    @property
    def output_path(self) -> str:
        if self.number == 1:
            return HOME_INDEX_PATH
        return PAGINATION_PATH_TEMPLATE.format(number=self.number)


@dc.dataclass(slots=True)
class BuildReport:
    """Counts and timing gathered by a completed build."""

    pages_written: int = 0
    posts_written: int = 0
    listings_written: int = 0
    files_copied: int = 0
    duration: float = 0.0
    written: list[Path] = dc.field(default_factory=list)


__all__ = ["BuildReport", "Page", "Paginator", "Post", "archive_path_for"]
