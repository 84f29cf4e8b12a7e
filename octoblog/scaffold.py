"""Create new post and page documents with a starter front-matter block."""

from __future__ import annotations

import datetime as dt
import io
import logging
import re
import typing as typ
from pathlib import Path, PurePath

from ruamel.yaml import YAML

if typ.TYPE_CHECKING:
    from octoblog.config import SiteConfig

logger = logging.getLogger(__name__)

POST_BODY = "这里是正文内容。\n"
PAGE_BODY = "这里是页面内容。\n"
HEADER_DATE_FORMAT = "%Y-%m-%d %H:%M:%S %z"
_UNSAFE_SLUG_CHARS = re.compile(r"[\\/:*?\"<>|#]+")


def slugify(title: str) -> str:
    """Return a filename-safe slug, keeping non-ASCII letters.

    Examples
    --------
    >>> slugify("Hello World")
    'hello-world'
    >>> slugify("  你好 世界 ")
    '你好-世界'
    """
    slug = _UNSAFE_SLUG_CHARS.sub("", title.strip().lower())
    return re.sub(r"\s+", "-", slug).strip("-")


def post_header(title: str, now: dt.datetime) -> dict[str, typ.Any]:
    return {
        "layout": "post",
        "title": title,
        "date": now.strftime(HEADER_DATE_FORMAT),
        "categories": [],
        "tags": [],
        "comments": True,
    }


def page_header(title: str, now: dt.datetime) -> dict[str, typ.Any]:
    return {
        "layout": "page",
        "title": title,
        "date": now.strftime(HEADER_DATE_FORMAT),
        "comments": True,
        "sharing": True,
        "footer": True,
    }


def render_document(header: typ.Mapping[str, typ.Any], body: str) -> str:
    """Serialize ``header`` as a ``---`` block followed by ``body``."""
    yaml = YAML(typ="safe")
    yaml.default_flow_style = False
    yaml.allow_unicode = True
    buffer = io.StringIO()
    yaml.dump(dict(header), buffer)
    return f"---\n{buffer.getvalue()}---\n\n{body}"


def _write_new(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("x", encoding="utf-8") as handle:
        handle.write(text)
    logger.info("created %s", path)
    return path


def new_post(config: SiteConfig, title: str, *, now: dt.datetime | None = None) -> Path:
    """Write ``_posts/YYYY-MM-DD-<slug>.md`` for ``title``.

    Parameters
    ----------
    config : SiteConfig
        Site whose posts directory receives the file.
    title : str
        Post title; the slug is derived from it.
    now : datetime, optional
        Creation time; defaults to the current local time.

    Returns
    -------
    Path
        The created file.

    Raises
    ------
    ValueError
        If ``title`` produces an empty slug.
    FileExistsError
        If a post with the same date and slug already exists.
    """
    stamp = now or dt.datetime.now().astimezone()
    slug = slugify(title)
    if not slug:
        msg = f"Cannot derive a file name from title {title!r}."
        raise ValueError(msg)
    path = config.posts_path / f"{stamp:%Y-%m-%d}-{slug}.md"
    return _write_new(path, render_document(post_header(title, stamp), POST_BODY))


def new_page(config: SiteConfig, name: str, *, now: dt.datetime | None = None) -> Path:
    """Write ``<name>/index.md`` below the source directory.

    ``name`` may contain slashes; the final component becomes the title.

    Raises
    ------
    ValueError
        If ``name`` is empty or escapes the source directory.
    FileExistsError
        If the page already exists.
    """
    parts = PurePath(name.strip().replace("\\", "/")).parts
    if not parts or any(part in ("..", ".", "/") for part in parts):
        msg = f"Invalid page name {name!r}."
        raise ValueError(msg)
    stamp = now or dt.datetime.now().astimezone()
    path = config.source.joinpath(*parts) / "index.md"
    return _write_new(path, render_document(page_header(parts[-1], stamp), PAGE_BODY))


__all__ = ["new_page", "new_post", "page_header", "post_header", "render_document", "slugify"]
