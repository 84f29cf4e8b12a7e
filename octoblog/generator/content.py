"""Load data files, pages and posts from a source tree.

Every loader is tolerant: a file that cannot be read or decoded is skipped
with a warning, and missing header fields fall back to filename-derived
defaults. Walks are sorted so repeated builds see files in the same order.
"""

from __future__ import annotations

import datetime as dt
import logging
import os
import re
import typing as typ
from pathlib import Path

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from octoblog._constants import DATA_SUFFIXES
from octoblog.frontmatter import FrontMatter, parse_front_matter
from octoblog.markdown_checks import validate_markdown

from .models import Page, Post
from .urls import page_relative_url, post_relative_url, post_url, url_path

if typ.TYPE_CHECKING:
    from octoblog.config import SiteConfig

logger = logging.getLogger(__name__)

POST_FILENAME_PATTERN = re.compile(r"^([0-9]{4})-([0-9]{2})-([0-9]{2})-(.+)\.(.+)$")
DATE_PREFIX_PATTERN = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}-")
H1_LINE_PATTERN = re.compile(r"^#[ \t]")


def load_data(config: SiteConfig) -> dict[str, typ.Any]:
    """Return ``_data`` YAML files keyed by filename stem.

    The config file's own ``data`` mapping is the starting point; data files
    with the same key replace it. Unparsable files are skipped.
    """
    data: dict[str, typ.Any] = dict(config.data)
    root = config.data_path
    if not root.is_dir():
        return data
    loader = YAML(typ="safe")
    for path in _walk_files(root):
        if path.suffix.lower() not in DATA_SUFFIXES:
            continue
        try:
            with path.open("r", encoding="utf-8") as handle:
                data[path.stem] = loader.load(handle)
        except (OSError, UnicodeDecodeError, YAMLError) as exc:
            logger.warning("skipping data file %s: %s", path, exc)
            continue
        logger.debug("loaded data file %s", path)
    return data


def load_pages(config: SiteConfig) -> list[Page]:
    """Load every markup document outside the framework directories."""
    pages: list[Page] = []
    for path in _walk_pages(config):
        text = _read_text(path)
        if text is None:
            continue
        pages.append(build_page(path, text, config))
        logger.debug("loaded page %s", path)
    return pages


def load_posts(config: SiteConfig) -> list[Post]:
    """Load every markup document under the posts directory."""
    root = config.posts_path
    if not root.is_dir():
        return []
    posts: list[Post] = []
    for path in _walk_files(root):
        if not config.is_markup(path):
            continue
        text = _read_text(path)
        if text is None:
            continue
        post = build_post(path, text, config)
        if post is None:
            continue
        posts.append(post)
        logger.debug("loaded post %s", path)
    return posts


def build_page(path: Path, text: str, config: SiteConfig) -> Page:
    """Create a Page from document text, filling defaults from the filename."""
    header, body = parse_front_matter(text, source=path)
    _report_format_issues(path, text)
    date = header.get_datetime("date") or _modified_time(path)
    return Page(
        source_path=path,
        body=body,
        front_matter=header,
        title=header.get_str("title") or path.stem,
        layout=header.get_str("layout") or "default",
        url=page_relative_url(path, config.source),
        date=date,
        description=header.get_str("description"),
        excerpt=excerpt_of(body, _separator(header, config)),
    )


def build_post(path: Path, text: str, config: SiteConfig) -> Post | None:
    """Create a Post, or return None when no date can be determined.

    The header ``date`` wins; otherwise the ``YYYY-MM-DD-`` filename prefix
    supplies it. The slug always comes from the filename.
    """
    header, body = parse_front_matter(text, source=path)
    _report_format_issues(path, text)
    match = POST_FILENAME_PATTERN.match(path.name)
    if match:
        slug = DATE_PREFIX_PATTERN.sub("", match.group(4))
        filename_date = _filename_date(match)
    else:
        slug = path.stem
        filename_date = None
    date = header.get_datetime("date") or filename_date
    if date is None:
        logger.warning("skipping post %s: no date in header or filename", path)
        return None
    if not slug:
        logger.warning("skipping post %s: empty slug", path)
        return None
    layout = header.get_str("layout")
    override = header.get_str("permalink") or None
    relative = post_relative_url(
        date=date,
        slug=slug,
        style=config.permalink_style,
        pattern=config.permalink,
        override=override,
    )
    url = post_url(relative, config)
    return Post(
        source_path=path,
        body=body,
        front_matter=header,
        title=header.get_str("title") or slug.replace("-", " "),
        layout=layout if layout and layout != "default" else "post",
        slug=slug,
        date=date,
        url=url,
        relative_url=url_path(url),
        permalink=override,
        description=header.get_str("description"),
        excerpt=excerpt_of(body, _separator(header, config)),
        categories=header.get_list("categories"),
        tags=header.get_list("tags"),
    )


def excerpt_of(body: str, separator: str) -> str:
    """Return the stripped text preceding the first ``separator``."""
    if not separator:
        return ""
    return body.split(separator, 1)[0].strip()


def strip_leading_h1(body: str) -> str:
    """Drop the first level-one heading line so it does not repeat the title."""
    lines = body.split("\n")
    for index, line in enumerate(lines):
        if H1_LINE_PATTERN.match(line.strip()):
            return "\n".join(lines[:index] + lines[index + 1 :])
    return body


def _separator(header: FrontMatter, config: SiteConfig) -> str:
    value = header.get("excerpt_separator")
    return value if isinstance(value, str) and value else config.excerpt_separator


def _filename_date(match: re.Match[str]) -> dt.datetime | None:
    year, month, day = (int(match.group(index)) for index in (1, 2, 3))
    try:
        return dt.datetime(year, month, day)  # noqa: DTZ001 - local calendar date
    except ValueError:
        return None


def _modified_time(path: Path) -> dt.datetime:
    try:
        return dt.datetime.fromtimestamp(path.stat().st_mtime)  # noqa: DTZ006
    except OSError:
        return dt.datetime.now()  # noqa: DTZ005


def _read_text(path: Path) -> str | None:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("skipping %s: %s", path, exc)
        return None


def _report_format_issues(path: Path, text: str) -> None:
    issues = validate_markdown(text)
    if issues:
        logger.warning(
            "formatting issues in %s: %s", path, "; ".join(str(issue) for issue in issues)
        )


def _walk_files(root: Path) -> typ.Iterator[Path]:
    """Yield files below ``root`` in sorted order, skipping hidden entries."""
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(name for name in dirnames if not name.startswith("."))
        for name in sorted(filenames):
            if not name.startswith("."):
                yield Path(dirpath) / name


def _walk_pages(config: SiteConfig) -> typ.Iterator[Path]:
    """Yield page candidates, pruning ``_``/``.`` entries and the destination."""
    destination = config.destination.resolve()
    for dirpath, dirnames, filenames in os.walk(config.source):
        current = Path(dirpath)
        dirnames[:] = sorted(
            name
            for name in dirnames
            if not name.startswith(("_", "."))
            and (current / name).resolve() != destination
        )
        for name in sorted(filenames):
            path = current / name
            if name.startswith(("_", ".")) or not config.is_markup(path):
                continue
            yield path


__all__ = [
    "POST_FILENAME_PATTERN",
    "build_page",
    "build_post",
    "excerpt_of",
    "load_data",
    "load_pages",
    "load_posts",
    "strip_leading_h1",
]
