"""Shared fixtures that lay out a small blog source tree on disk.

``site_root`` writes a complete, buildable tree (config, layouts, an include,
a stylesheet, one page and one post) below ``tmp_path``. ``write_post`` and
``write_file`` add further documents to it, and ``build_site`` loads the
configuration and runs a full build.
"""

from __future__ import annotations

import typing as typ
from pathlib import Path

import pytest

from octoblog.config import load_site_config
from octoblog.generator import Site

if typ.TYPE_CHECKING:
    from octoblog.generator import BuildReport

DEFAULT_LAYOUT = """<!DOCTYPE html>
<html>
<head><title>{{ page.title }} - {{ site.title }}</title></head>
<body>
{{ include("header") }}
<main>{{ content }}</main>
</body>
</html>
"""

POST_LAYOUT = """<!DOCTYPE html>
<html>
<head><title>{{ post.title }}</title></head>
<body>
{{ include("header") }}
<article>
<h1 class="post-title">{{ post.title }}</h1>
<time>{{ date("%Y-%m-%d", post.date) }}</time>
<div class="post-body">{{ content }}</div>
</article>
</body>
</html>
"""

INDEX_LAYOUT = """<!DOCTYPE html>
<html>
<head><title>{{ title }}</title></head>
<body>
<ul class="index" data-page="{{ page.number }}" data-total="{{ page.total }}">
{% for item in posts %}
<li class="entry" data-slug="{{ item.slug }}"><a href="{{ item.url }}">{{ item.title }}</a></li>
{% endfor %}
</ul>
{% if paginator.previous_url %}<a class="previous" href="{{ paginator.previous_url }}">prev</a>{% endif %}
{% if paginator.next_url %}<a class="next" href="{{ paginator.next_url }}">next</a>{% endif %}
</body>
</html>
"""

ARCHIVE_LAYOUT = """<!DOCTYPE html>
<html>
<head><title>{{ title }}</title></head>
<body>
{% for month, items in archives.items() %}
<section class="month" data-month="{{ month }}">
{% for item in items %}<a class="archived" href="{{ item.url }}">{{ item.title }}</a>{% endfor %}
</section>
{% endfor %}
</body>
</html>
"""

HEADER_INCLUDE = '{{ define "header" }}<header class="site-header">{{ site.title }}</header>{{ end }}\n'

CONFIG = """title: Test Blog
description: A blog used by the test suite
author: Tester
url: http://example.com
permalink: date
"""

BASE_TREE: dict[str, str] = {
    "_config.yml": CONFIG,
    "_layouts/default.html": DEFAULT_LAYOUT,
    "_layouts/post.html": POST_LAYOUT,
    "_layouts/index.html": INDEX_LAYOUT,
    "_layouts/archive.html": ARCHIVE_LAYOUT,
    "_includes/header.html": HEADER_INCLUDE,
    "stylesheets/site.css": "body { margin: 0; }\n",
    "about.md": "---\ntitle: About\n---\n\nAbout this blog.\n",
    "_posts/2024-01-15-hello-world.md": (
        '---\nlayout: post\ntitle: "Hello"\n---\n\nFirst paragraph.\n\nSecond paragraph.\n'
    ),
}


def _write(root: Path, relative: str, text: str) -> Path:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def site_root(tmp_path: Path) -> Path:
    """Return a buildable blog source tree."""
    root = tmp_path / "blog"
    for relative, text in BASE_TREE.items():
        _write(root, relative, text)
    return root


@pytest.fixture
def write_file(site_root: Path) -> typ.Callable[[str, str], Path]:
    """Return a helper writing ``text`` to a path relative to the source tree."""

    def _write_file(relative: str, text: str) -> Path:
        return _write(site_root, relative, text)

    return _write_file


@pytest.fixture
def write_post(site_root: Path) -> typ.Callable[..., Path]:
    """Return a helper adding a post under ``_posts``."""

    def _write_post(name: str, *, title: str | None = None, body: str = "Body.\n") -> Path:
        header = f'---\ntitle: "{title}"\n---\n\n' if title is not None else ""
        return _write(site_root, f"_posts/{name}", f"{header}{body}")

    return _write_post


@pytest.fixture
def build_site(site_root: Path) -> typ.Callable[..., tuple[Site, BuildReport]]:
    """Return a helper that loads the config and builds the tree once."""

    def _build(**overrides: typ.Any) -> tuple[Site, BuildReport]:  # noqa: ANN401
        config = load_site_config(source=site_root, overrides=overrides or None)
        site = Site(config)
        return site, site.build()

    return _build
