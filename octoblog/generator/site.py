"""High-level orchestration of a full site build.

:class:`Site` runs the build pipeline in a fixed order: data files, layouts
and includes, pages, posts, template wiring, collection derivation, rendering,
emission, feed and sitemap, and finally the static asset copy. Each build
assembles a fresh :class:`SiteState` and only swaps it in once every stage has
succeeded, so the preview server and the watcher always read a complete
snapshot.

Example
-------
>>> from pathlib import Path
>>> from octoblog.config import load_site_config
>>> from octoblog.generator import Site
>>> site = Site(load_site_config(source=Path("blog")))  # doctest: +SKIP
>>> report = site.build()  # doctest: +SKIP
>>> report.posts_written  # doctest: +SKIP
14
"""

from __future__ import annotations

import dataclasses as dc
import logging
import threading
import time
import typing as typ

from markupsafe import Markup

from octoblog._constants import (
    ARCHIVE_INDEX_PATH,
    ARCHIVE_TITLE,
    CATEGORIES_INDEX_PATH,
    CATEGORIES_TITLE,
    FEED_PATH,
    SITEMAP_PATH,
    TAGS_INDEX_PATH,
    TAGS_TITLE,
)
from octoblog.errors import BuildError, LayoutError, UrlCollisionError
from octoblog.routing import UrlTrie

from .content import load_data, load_pages, load_posts, strip_leading_h1
from .emitter import copy_static_trees, write_output
from .feeds import render_feed, render_sitemap, sitemap_locations
from .layouts import load_layouts
from .listings import (
    archive_buckets,
    category_buckets,
    paginate,
    sort_posts,
    tag_cloud,
)
from .models import BuildReport, Page, Paginator, Post
from .renderer import MarkdownConverter
from .templates import TemplateEngine

if typ.TYPE_CHECKING:
    from octoblog.config import SiteConfig

logger = logging.getLogger(__name__)


@dc.dataclass(slots=True)
class SiteState:
    """Snapshot of everything one build produced.

    Attributes
    ----------
    pages : list[Page]
        Standalone documents in source walk order.
    posts : list[Post]
        Posts sorted newest first.
    data : dict[str, Any]
        Config ``data`` merged with ``_data`` files.
    templates : dict[str, str]
        Layout and include sources keyed by name.
    paginators : list[Paginator]
        Index pages; empty when pagination is disabled.
    archives : dict[str, list[Post]]
        ``YYYY-MM`` buckets in newest-first order.
    categories : dict[str, list[Post]]
        Posts keyed by header category.
    tags : list[str]
        Tag cloud terms.
    trie : UrlTrie[Post]
        Canonical and archive paths of every post.
    listings : list[str]
        Site paths of the listing pages that were rendered.
    """

    pages: list[Page] = dc.field(default_factory=list)
    posts: list[Post] = dc.field(default_factory=list)
    data: dict[str, typ.Any] = dc.field(default_factory=dict)
    templates: dict[str, str] = dc.field(default_factory=dict)
    paginators: list[Paginator] = dc.field(default_factory=list)
    archives: dict[str, list[Post]] = dc.field(default_factory=dict)
    categories: dict[str, list[Post]] = dc.field(default_factory=dict)
    tags: list[str] = dc.field(default_factory=list)
    trie: UrlTrie[Post] = dc.field(default_factory=UrlTrie)
    listings: list[str] = dc.field(default_factory=list)


class Site:
    """Own the configuration, the converter and the latest build snapshot."""

    def __init__(
        self, config: SiteConfig, *, converter: MarkdownConverter | None = None
    ) -> None:
        """Initialize the site with configuration and an optional converter.

        Parameters
        ----------
        config : SiteConfig
            Resolved site configuration.
        converter : MarkdownConverter, optional
            Markup converter; a default instance is created when omitted.
        """
        self.config = config
        self.converter = converter or MarkdownConverter()
        self._build_lock = threading.Lock()
        self._state = SiteState()

    @property
    def state(self) -> SiteState:
        """Return the snapshot published by the last successful build."""
        return self._state

    @property
    def pages(self) -> list[Page]:
        return self._state.pages

    @property
    def posts(self) -> list[Post]:
        return self._state.posts

    @property
    def trie(self) -> UrlTrie[Post]:
        return self._state.trie

    def build(self) -> BuildReport:
        """Run the full pipeline and publish the new snapshot.

        Returns
        -------
        BuildReport
            Counts of written documents and copied files plus elapsed time.

        Raises
        ------
        BuildError
            Raised for structural failures: a missing or duplicate layout,
            colliding output paths, template errors, write failures or a
            missing ``stylesheets`` directory. The previous snapshot stays
            published when a build fails.
        """
        with self._build_lock:
            started = time.perf_counter()
            logger.info("building %s -> %s", self.config.source, self.config.destination)
            state = self._load()
            engine = TemplateEngine(state.templates)
            self._derive_collections(state)
            self._render_documents(state, engine)
            report = self._emit(state, engine)
            report.duration = time.perf_counter() - started
            self._state = state
        logger.info(
            "built %d pages and %d posts in %.2fs",
            len(state.pages),
            len(state.posts),
            report.duration,
        )
        return report

    def _load(self) -> SiteState:
        config = self.config
        state = SiteState()
        state.data = load_data(config)
        state.templates = load_layouts(config)
        state.pages = load_pages(config)
        state.posts = load_posts(config)
        logger.info(
            "loaded %d templates, %d pages, %d posts",
            len(state.templates),
            len(state.pages),
            len(state.posts),
        )
        return state

    def _derive_collections(self, state: SiteState) -> None:
        state.posts = sort_posts(state.posts)
        state.paginators = paginate(state.posts, self.config.paginate)
        state.archives = archive_buckets(state.posts)
        state.categories = category_buckets(state.posts)
        state.tags = tag_cloud(post.title for post in state.posts)
        state.trie = self._build_trie(state)

    def _build_trie(self, state: SiteState) -> UrlTrie[Post]:
        """Index every post under its canonical and archive paths.

        Raises
        ------
        UrlCollisionError
            If two documents claim the same output file.
        """
        claimed: dict[str, str] = {}

        def claim(path: str, owner: str) -> None:
            key = path.lstrip("/")
            previous = claimed.get(key)
            if previous is not None:
                msg = f"Output path '/{key}' is claimed by both {previous} and {owner}."
                raise UrlCollisionError(msg)
            claimed[key] = owner

        for page in state.pages:
            claim(page.output_path, str(page.source_path))
        trie: UrlTrie[Post] = UrlTrie()
        for post in state.posts:
            owner = str(post.source_path)
            claim(post.output_path, owner)
            claim(post.archive_path, owner)
            trie.insert(post.relative_url, post)
            trie.insert(f"/{post.archive_path}", post)
        for paginator in state.paginators:
            claim(paginator.output_path, "the post index")
        claim(ARCHIVE_INDEX_PATH, "the archive page")
        if "tag" in state.templates:
            claim(TAGS_INDEX_PATH, "the tags page")
        if "category" in state.templates:
            claim(CATEGORIES_INDEX_PATH, "the categories page")
        return trie

    def site_bag(self, state: SiteState) -> dict[str, typ.Any]:
        """Return the ``site`` mapping shared by every template execution."""
        metadata = self.config.metadata
        return {
            "title": metadata.title,
            "subtitle": metadata.subtitle,
            "description": metadata.description,
            "author": metadata.author,
            "url": metadata.url,
            "baseurl": self.config.baseurl,
            "posts": state.posts,
            "pages": state.pages,
            "data": state.data,
            "archives": state.archives,
            "categories": state.categories,
            "tags": state.tags,
        }

    def _render_documents(self, state: SiteState, engine: TemplateEngine) -> None:
        site = self.site_bag(state)
        for page in state.pages:
            page.content = self.converter.convert(page.body)
            bag = {"site": site, "page": page, "content": Markup(page.content)}  # noqa: S704
            page.rendered = _render(engine, page.layout, bag, str(page.source_path))
        for post in state.posts:
            post.content = self.converter.convert(strip_leading_h1(post.body))
            bag = {
                "site": site,
                "post": post,
                "page": post,
                "content": Markup(post.content),  # noqa: S704
            }
            post.rendered = _render(engine, post.layout, bag, str(post.source_path))

    def _emit(self, state: SiteState, engine: TemplateEngine) -> BuildReport:
        config = self.config
        destination = config.destination
        report = BuildReport()
        site = self.site_bag(state)
        for page in state.pages:
            report.written.append(write_output(destination, page.output_path, page.rendered))
            report.pages_written += 1
        for post in state.posts:
            report.written.append(write_output(destination, post.output_path, post.rendered))
            report.written.append(write_output(destination, post.archive_path, post.rendered))
            report.posts_written += 2

        for relative, html in self._render_listings(state, engine, site):
            report.written.append(write_output(destination, relative, html))
            report.listings_written += 1

        feed = render_feed(config.metadata, state.posts)
        report.written.append(write_output(destination, FEED_PATH, feed))
        locations = sitemap_locations(
            config.metadata, state.pages, state.posts, listings=state.listings
        )
        report.written.append(write_output(destination, SITEMAP_PATH, render_sitemap(locations)))
        report.files_copied = copy_static_trees(config)
        return report

    def _render_listings(
        self,
        state: SiteState,
        engine: TemplateEngine,
        site: dict[str, typ.Any],
    ) -> typ.Iterator[tuple[str, str]]:
        """Yield ``(relative path, html)`` for index, archive and taxonomy pages."""
        title = self.config.metadata.title
        if state.paginators and not engine.has("index"):
            msg = "Pagination is enabled but the 'index' layout does not exist."
            raise LayoutError(msg)
        for paginator in state.paginators:
            bag = {
                "site": site,
                "layout": "index",
                "title": title,
                "posts": paginator.posts,
                "page": {"number": paginator.number, "total": paginator.total},
                "paginator": paginator,
            }
            yield paginator.output_path, _render(engine, "index", bag, "index page")

        archives = state.archives or {"": []}
        bag = {
            "site": {**site, "archives": archives},
            "layout": "archive",
            "title": ARCHIVE_TITLE,
            "archives": archives,
            "page": {"title": ARCHIVE_TITLE},
        }
        yield ARCHIVE_INDEX_PATH, _render(engine, "archive", bag, "archive page")
        state.listings = ["/archives/"]

        if engine.has("tag"):
            bag = {
                "site": site,
                "layout": "tag",
                "title": TAGS_TITLE,
                "tags": state.tags,
                "posts": state.posts,
                "page": {"title": TAGS_TITLE},
            }
            yield TAGS_INDEX_PATH, _render(engine, "tag", bag, "tags page")
            state.listings.append("/tags/")
        if engine.has("category"):
            bag = {
                "site": site,
                "layout": "category",
                "title": CATEGORIES_TITLE,
                "categories": state.categories,
                "page": {"title": CATEGORIES_TITLE},
            }
            yield CATEGORIES_INDEX_PATH, _render(engine, "category", bag, "categories page")
            state.listings.append("/categories/")


def _render(
    engine: TemplateEngine, layout: str, bag: typ.Mapping[str, typ.Any], label: str
) -> str:
    """Render ``layout`` and prefix any build error with the document label."""
    try:
        return engine.render(layout, bag)
    except BuildError as exc:
        msg = f"{label}: {exc}"
        raise type(exc)(msg) from exc


__all__ = ["Site", "SiteState"]
