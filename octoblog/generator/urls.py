"""Permalink policy: map posts and pages to site paths and absolute URLs."""

from __future__ import annotations

import datetime as dt
import re
from pathlib import Path, PurePosixPath
from urllib.parse import urlsplit

from octoblog.config import PermalinkStyle, SiteConfig

ABSOLUTE_URL_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*://")
PLACEHOLDER_PATTERN = re.compile(r":(year|month|day|title|slug)\b")


def is_absolute_url(value: str) -> bool:
    """Return True when ``value`` carries a scheme prefix such as ``https://``."""
    return bool(ABSOLUTE_URL_PATTERN.match(value))


def make_absolute(relative_url: str, site_url: str) -> str:
    """Prefix ``relative_url`` with the site URL, leaving absolute URLs alone.

    Examples
    --------
    >>> make_absolute("2024/01/15/a.html", "http://example.com/")
    'http://example.com/2024/01/15/a.html'
    >>> make_absolute("https://cdn.example/x.html", "http://example.com")
    'https://cdn.example/x.html'
    """
    if is_absolute_url(relative_url):
        return relative_url
    path = relative_url if relative_url.startswith("/") else f"/{relative_url}"
    return f"{site_url.rstrip('/')}{path}"


def url_path(url: str) -> str:
    """Return the path component of ``url``, which may be absolute or relative."""
    if is_absolute_url(url):
        return urlsplit(url).path or "/"
    return url


def post_relative_url(
    *,
    date: dt.datetime | None,
    slug: str,
    style: PermalinkStyle,
    pattern: str = "",
    override: str | None = None,
) -> str:
    """Return the site-relative path for a post.

    Parameters
    ----------
    date : datetime or None
        Publication date; ``None`` degrades to a date-less path.
    slug : str
        Filename slug.
    style : PermalinkStyle
        Configured policy.
    pattern : str, optional
        Custom pattern used when ``style`` is ``CUSTOM``.
    override : str, optional
        Header ``permalink``; used verbatim apart from a ``.html`` suffix.

    Examples
    --------
    >>> import datetime as dt
    >>> post_relative_url(
    ...     date=dt.datetime(2024, 1, 15), slug="hello", style=PermalinkStyle.PRETTY
    ... )
    '/2024/01/15/hello/index.html'
    """
    if override:
        url = override if override.endswith(".html") else f"{override}.html"
        if is_absolute_url(url):
            return url
        return url if url.startswith("/") else f"/{url}"
    if style is PermalinkStyle.CUSTOM and pattern:
        return _expand_pattern(pattern, date, slug)
    indexed = style in (PermalinkStyle.PRETTY, PermalinkStyle.NONE)
    if date is None:
        return f"/{slug}/index.html" if indexed else f"/{slug}.html"
    prefix = f"/{date:%Y}/{date:%m}/{date:%d}/{slug}"
    return f"{prefix}/index.html" if indexed else f"{prefix}.html"


def _expand_pattern(pattern: str, date: dt.datetime | None, slug: str) -> str:
    values = {
        "year": f"{date:%Y}" if date else "",
        "month": f"{date:%m}" if date else "",
        "day": f"{date:%d}" if date else "",
        "title": slug,
        "slug": slug,
    }
    expanded = PLACEHOLDER_PATTERN.sub(lambda match: values[match.group(1)], pattern)
    expanded = re.sub(r"/{2,}", "/", f"/{expanded.lstrip('/')}")
    if expanded.endswith("/"):
        return f"{expanded}index.html"
    if not expanded.endswith(".html"):
        return f"{expanded}.html"
    return expanded


def page_relative_url(source_path: Path, source_root: Path) -> str:
    """Return ``/<relative path without markup suffix>.html`` for a page.

    Examples
    --------
    >>> page_relative_url(Path("site/about/index.md"), Path("site"))
    '/about/index.html'
    """
    relative = PurePosixPath(source_path.relative_to(source_root).as_posix())
    return f"/{relative.with_suffix('.html').as_posix()}"


def post_url(relative_url: str, config: SiteConfig) -> str:
    """Return the absolute URL of a post."""
    return make_absolute(relative_url, config.metadata.url)


__all__ = [
    "is_absolute_url",
    "make_absolute",
    "page_relative_url",
    "post_relative_url",
    "post_url",
    "url_path",
]
