"""Derive ordered post collections: pagination, archives, categories, tags."""

from __future__ import annotations

import collections
import logging
import math
import typing as typ

import jieba

from octoblog._constants import EMPTY_TAG, TAG_CLOUD_SIZE

from .models import Paginator, Post

logger = logging.getLogger(__name__)

jieba.setLogLevel(logging.WARNING)


def sort_posts(posts: typ.Iterable[Post]) -> list[Post]:
    """Return posts newest first; equal dates are ordered by slug ascending."""
    by_slug = sorted(posts, key=lambda post: post.slug)
    return sorted(by_slug, key=lambda post: post.date, reverse=True)


def paginate(posts: typ.Sequence[Post], per_page: int) -> list[Paginator]:
    """Split sorted posts into contiguous index pages.

    Returns an empty list when ``per_page`` is zero or there are no posts.
    Page 1 is written to ``/index.html`` and page ``k`` to
    ``/page/k/index.html``.
    """
    if per_page <= 0:
        return []
    total = math.ceil(len(posts) / per_page)
    pages: list[Paginator] = []
    for index in range(total):
        number = index + 1
        pages.append(
            Paginator(
                number=number,
                total=total,
                posts=list(posts[index * per_page : number * per_page]),
                previous_url=_index_url(number - 1) if number > 1 else None,
                next_url=_index_url(number + 1) if number < total else None,
            )
        )
    return pages


def _index_url(number: int) -> str:
    return "/" if number == 1 else f"/page/{number}/"


def archive_buckets(posts: typ.Iterable[Post]) -> dict[str, list[Post]]:
    """Group sorted posts by ``YYYY-MM`` in order of first appearance."""
    buckets: dict[str, list[Post]] = {}
    for post in posts:
        buckets.setdefault(f"{post.date:%Y-%m}", []).append(post)
    return buckets


def category_buckets(posts: typ.Iterable[Post]) -> dict[str, list[Post]]:
    """Group posts by header category, categories sorted by name."""
    buckets: dict[str, list[Post]] = collections.defaultdict(list)
    for post in posts:
        for category in post.categories:
            buckets[category].append(post)
    return dict(sorted(buckets.items()))


def tag_cloud(titles: typ.Iterable[str], limit: int = TAG_CLOUD_SIZE) -> list[str]:
    """Return the most frequent title tokens via Chinese-aware segmentation.

    Titles are segmented in search mode, lowercased, and tokens shorter than
    two characters are dropped. Ties are broken by token order. When no token
    survives the single placeholder tag is returned.

    Examples
    --------
    >>> tag_cloud([])
    ['无标签']
    """
    counts: collections.Counter[str] = collections.Counter()
    for title in titles:
        for token in jieba.cut_for_search(title):
            word = token.strip().lower()
            if len(word) >= 2:
                counts[word] += 1
    ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    tags = [word for word, _count in ranked[:limit]]
    return tags or [EMPTY_TAG]


__all__ = [
    "archive_buckets",
    "category_buckets",
    "paginate",
    "sort_posts",
    "tag_cloud",
]
