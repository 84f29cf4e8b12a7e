"""Tests for post ordering, pagination, archive buckets and the tag cloud."""

from __future__ import annotations

import datetime as dt
from pathlib import Path

from octoblog.frontmatter import FrontMatter
from octoblog.generator import Post
from octoblog.generator.listings import (
    archive_buckets,
    category_buckets,
    paginate,
    sort_posts,
    tag_cloud,
)


def _post(
    slug: str,
    date: dt.datetime,
    *,
    title: str = "",
    categories: list[str] | None = None,
) -> Post:
    return Post(
        source_path=Path(f"_posts/{slug}.md"),
        body="",
        front_matter=FrontMatter(),
        title=title or slug,
        layout="post",
        slug=slug,
        date=date,
        categories=categories or [],
    )


def test_sort_posts_newest_first_with_slug_tiebreak() -> None:
    day = dt.datetime(2024, 1, 15)
    posts = [
        _post("b", day),
        _post("old", dt.datetime(2023, 5, 1)),
        _post("a", day),
        _post("new", dt.datetime(2024, 2, 1)),
    ]

    assert [post.slug for post in sort_posts(posts)] == ["new", "a", "b", "old"]


def test_paginate_splits_into_contiguous_pages() -> None:
    posts = sort_posts(_post(f"p{day}", dt.datetime(2024, 1, day)) for day in range(1, 8))

    pages = paginate(posts, 3)

    assert [len(page.posts) for page in pages] == [3, 3, 1]
    assert [page.output_path for page in pages] == [
        "index.html",
        "page/2/index.html",
        "page/3/index.html",
    ]
    assert [post.slug for post in pages[0].posts] == ["p7", "p6", "p5"]
    assert (pages[0].previous_url, pages[0].next_url) == (None, "/page/2/")
    assert (pages[1].previous_url, pages[1].next_url) == ("/", "/page/3/")
    assert pages[2].next_url is None
    assert all(page.total == 3 for page in pages)
    assert [post for page in pages for post in page.posts] == posts


def test_paginate_disabled_or_empty() -> None:
    posts = [_post("a", dt.datetime(2024, 1, 1))]

    assert paginate(posts, 0) == []
    assert paginate([], 5) == []


def test_archive_buckets_by_month() -> None:
    posts = sort_posts(
        [
            _post("jan-a", dt.datetime(2024, 1, 3)),
            _post("feb", dt.datetime(2024, 2, 9)),
            _post("jan-b", dt.datetime(2024, 1, 20)),
        ]
    )

    buckets = archive_buckets(posts)

    assert list(buckets) == ["2024-02", "2024-01"]
    assert [post.slug for post in buckets["2024-01"]] == ["jan-b", "jan-a"]


def test_category_buckets_sorted_by_name() -> None:
    posts = [
        _post("a", dt.datetime(2024, 1, 1), categories=["zeta", "alpha"]),
        _post("b", dt.datetime(2024, 1, 2), categories=["alpha"]),
    ]

    buckets = category_buckets(posts)

    assert list(buckets) == ["alpha", "zeta"]
    assert [post.slug for post in buckets["alpha"]] == ["a", "b"]


def test_tag_cloud_ranks_frequent_tokens() -> None:
    tags = tag_cloud(["Python 入门", "Python 进阶", "Go 入门"])

    assert tags[:2] == ["python", "入门"]
    assert "go" in tags


def test_tag_cloud_drops_single_characters() -> None:
    assert tag_cloud(["a b c", "x"]) == ["无标签"]


def test_tag_cloud_respects_limit() -> None:
    titles = [f"word{index} common" for index in range(30)]

    tags = tag_cloud(titles, limit=5)

    assert len(tags) == 5
    assert tags[0] == "common"
