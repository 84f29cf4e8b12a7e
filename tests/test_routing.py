"""Tests for the path-segment routing trie."""

from __future__ import annotations

import pytest

from octoblog.routing import UrlTrie, split_segments


@pytest.fixture
def trie() -> UrlTrie[str]:
    routes: UrlTrie[str] = UrlTrie()
    routes.insert("/2024/01/15/a.html", "a")
    routes.insert("/2024/01/16/b.html", "b")
    routes.insert("/2023/12/01/c.html", "c")
    return routes


def test_lookup_exact_path(trie: UrlTrie[str]) -> None:
    assert trie.lookup("/2024/01/15/a.html") == "a"
    assert trie.lookup("/nope") is None
    assert trie.lookup("/2024/01") is None


def test_prefix_search_collects_subtree(trie: UrlTrie[str]) -> None:
    assert set(trie.prefix_search("/2024/01")) == {"a", "b"}
    assert set(trie.prefix_search("/")) == {"a", "b", "c"}
    assert trie.prefix_search("/1999") == []


def test_paths_are_compared_by_segment(trie: UrlTrie[str]) -> None:
    assert trie.lookup("2024//01/15/a.html") == "a"
    assert trie.lookup("/2024/01/15/a.html?ref=feed") == "a"
    assert trie.prefix_search("/2024/0") == []


def test_last_insert_wins(trie: UrlTrie[str]) -> None:
    trie.insert("/2024/01/15/a.html", "a2")

    assert trie.lookup("/2024/01/15/a.html") == "a2"
    assert len(trie) == 3


def test_root_value() -> None:
    routes: UrlTrie[str] = UrlTrie()
    routes.insert("/", "home")

    assert routes.lookup("") == "home"
    assert len(routes) == 1


def test_split_segments() -> None:
    assert split_segments("/a//b/c.html") == ["a", "b", "c.html"]
    assert split_segments("/") == []
