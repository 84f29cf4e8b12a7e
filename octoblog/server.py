"""Preview server for a built site.

The FastAPI application serves static asset prefixes straight from the
destination tree, answers ``/api/search`` with posts whose URL starts with the
query, and resolves every other path through the routing trie before falling
back to files on disk.

Examples
--------
>>> from octoblog.server import create_app
>>> app = create_app(site)  # doctest: +SKIP
>>> serve(site, host="127.0.0.1", port=4000)  # doctest: +SKIP
"""

from __future__ import annotations

import logging
import typing as typ
from pathlib import Path

import msgspec
import msgspec.json as msgspec_json
import uvicorn
from fastapi import FastAPI, Query, Response, status
from fastapi.responses import FileResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles

from ._constants import EMPTY_QUERY_MESSAGE, NOT_FOUND_BODY, STATIC_DIRS

if typ.TYPE_CHECKING:
    from .generator import Post, Site

logger = logging.getLogger(__name__)

HTML_MEDIA_TYPE = "text/html; charset=utf-8"
CORS_HEADERS: dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


class SearchHit(msgspec.Struct):
    """One post matched by a search query."""

    title: str
    url: str
    date: str


class SearchResults(msgspec.Struct):
    """Envelope returned by ``GET /api/search``."""

    query: str
    results: list[SearchHit]
    count: int


class SearchFailure(msgspec.Struct):
    error: str


def search_posts(site: Site, query: str) -> SearchResults:
    """Collect distinct posts stored at or below the ``query`` path prefix."""
    seen: set[int] = set()
    hits: list[SearchHit] = []
    for post in site.state.trie.prefix_search(query):
        if id(post) in seen:
            continue
        seen.add(id(post))
        hits.append(SearchHit(title=post.title, url=post.url, date=f"{post.date:%Y-%m-%d}"))
    return SearchResults(query=query, results=hits, count=len(hits))


def _json(payload: msgspec.Struct, status_code: int = status.HTTP_200_OK) -> Response:
    return Response(
        content=msgspec_json.encode(payload),
        status_code=status_code,
        media_type="application/json",
        headers=CORS_HEADERS,
    )


def _contained_file(root: Path, relative: str) -> Path | None:
    """Return ``root/relative`` when it is an existing file inside ``root``."""
    base = root.resolve()
    candidate = (base / relative.lstrip("/")).resolve()
    if candidate != base and base not in candidate.parents:
        return None
    return candidate if candidate.is_file() else None


def resolve_request(site: Site, path: str) -> tuple[Path, str | None] | None:
    """Map a request path to ``(file, media type)`` following the dispatch order.

    1. a post found in the routing trie;
    2. the file itself;
    3. ``<path>.html`` when the path has no ``.html`` suffix;
    4. ``<path>/index.html``.

    Returns None when nothing matches. A ``None`` media type lets the
    response guess it from the file name.
    """
    destination = site.config.destination
    request_path = f"/{path.lstrip('/')}"
    post: Post | None = site.state.trie.lookup(request_path)
    if post is not None:
        found = _contained_file(destination, post.output_path)
        if found is not None:
            return found, HTML_MEDIA_TYPE
    found = _contained_file(destination, request_path)
    if found is not None:
        return found, None
    if not request_path.endswith(".html"):
        found = _contained_file(destination, f"{request_path.rstrip('/')}.html")
        if found is not None:
            return found, HTML_MEDIA_TYPE
    found = _contained_file(destination, f"{request_path.rstrip('/')}/index.html")
    if found is not None:
        return found, HTML_MEDIA_TYPE
    return None


def create_app(site: Site) -> FastAPI:
    """Build the FastAPI application serving ``site``'s destination tree."""
    app = FastAPI(title=site.config.metadata.title, docs_url=None, redoc_url=None)
    destination = site.config.destination
    baseurl = site.config.baseurl.rstrip("/")

    @app.get("/api/search")
    async def search(q: str = Query(default="")) -> Response:
        if not q.strip():
            return _json(SearchFailure(error=EMPTY_QUERY_MESSAGE), status.HTTP_400_BAD_REQUEST)
        return _json(search_posts(site, q.strip()))

    @app.options("/api/search")
    async def search_preflight() -> Response:
        return Response(status_code=status.HTTP_204_NO_CONTENT, headers=CORS_HEADERS)

    for name in STATIC_DIRS:
        app.mount(
            f"{baseurl}/{name}",
            StaticFiles(directory=destination / name, check_dir=False),
            name=name,
        )

    @app.get("/{path:path}")
    def catch_all(path: str) -> Response:
        relative = f"/{path}"
        if baseurl and (relative == baseurl or relative.startswith(f"{baseurl}/")):
            relative = relative[len(baseurl) :]
        resolved = resolve_request(site, relative)
        if resolved is None:
            return PlainTextResponse(NOT_FOUND_BODY, status_code=status.HTTP_404_NOT_FOUND)
        file_path, media_type = resolved
        return FileResponse(file_path, media_type=media_type)

    return app


def serve(site: Site, *, host: str, port: int) -> None:
    """Serve the built site with uvicorn until interrupted."""
    logger.info("serving %s at http://%s:%d/", site.config.destination, host, port)
    uvicorn.run(create_app(site), host=host, port=port, log_level="info")


__all__ = [
    "CORS_HEADERS",
    "SearchHit",
    "SearchResults",
    "create_app",
    "resolve_request",
    "search_posts",
    "serve",
]
