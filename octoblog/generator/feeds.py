"""Render the RSS feed and the XML sitemap from the built post set."""

from __future__ import annotations

import datetime as dt
import email.utils
import typing as typ
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from octoblog._constants import FEED_SIZE

from .urls import make_absolute

if typ.TYPE_CHECKING:
    from octoblog.config import SiteMetadata

    from .models import Page, Post

TEMPLATES_DIR = Path(__file__).resolve().parents[1] / "templates"


def _environment() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=select_autoescape(["xml", "jinja"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )


def format_rfc1123z(value: dt.datetime) -> str:
    """Format a timestamp as ``Mon, 02 Jan 2006 15:04:05 -0700``.

    Naive values are interpreted as local time.
    """
    return email.utils.format_datetime(value.astimezone())


def _cdata(text: str) -> str:
    return text.replace("]]>", "]]]]><![CDATA[>")


def render_feed(
    metadata: SiteMetadata,
    posts: typ.Sequence[Post],
    *,
    now: dt.datetime | None = None,
) -> str:
    """Return the RSS 2.0 document for the newest posts.

    Parameters
    ----------
    metadata : SiteMetadata
        Channel title, description and base URL.
    posts : Sequence[Post]
        Posts sorted newest first; only the first twenty are included.
    now : datetime, optional
        Build time used for ``lastBuildDate``; defaults to the current time.
    """
    items = [
        {
            "title": post.title,
            "link": post.url or make_absolute(post.relative_url, metadata.url),
            "pub_date": format_rfc1123z(post.date),
            "excerpt": _cdata(post.excerpt),
        }
        for post in list(posts)[:FEED_SIZE]
    ]
    template = _environment().get_template("feed.xml.jinja")
    return template.render(
        site=metadata,
        items=items,
        last_build_date=format_rfc1123z(now or dt.datetime.now().astimezone()),
    )


def sitemap_locations(
    metadata: SiteMetadata,
    pages: typ.Iterable[Page],
    posts: typ.Iterable[Post],
    *,
    listings: typ.Iterable[str] = ("/archives/",),
) -> list[str]:
    """Return absolute URLs: home, pages, posts, then listing pages."""
    paths = ["/"]
    paths.extend(page.url for page in pages)
    paths.extend(post.url for post in posts)
    paths.extend(listings)
    return [make_absolute(path, metadata.url) for path in paths]


def render_sitemap(
    locations: typ.Sequence[str], *, today: dt.date | None = None
) -> str:
    """Return the sitemap document listing ``locations``."""
    template = _environment().get_template("sitemap.xml.jinja")
    lastmod = (today or dt.date.today()).isoformat()  # noqa: DTZ011
    return template.render(locations=locations, lastmod=lastmod)


__all__ = [
    "format_rfc1123z",
    "render_feed",
    "render_sitemap",
    "sitemap_locations",
]
