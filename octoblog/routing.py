"""Path-segment trie mapping request paths to posts.

The trie serves two callers: the preview server resolves request paths with
:meth:`UrlTrie.lookup`, and the search endpoint collects every post below a
path prefix with :meth:`UrlTrie.prefix_search`.

Examples
--------
>>> trie = UrlTrie()
>>> trie.insert("/2024/01/15/a.html", "a")
>>> trie.lookup("/2024/01/15/a.html")
'a'
>>> trie.prefix_search("/2024")
['a']
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ
from urllib.parse import urlsplit

T = typ.TypeVar("T")


def split_segments(path: str) -> list[str]:
    """Return the non-empty ``/``-separated components of a URL path."""
    return [segment for segment in urlsplit(path).path.split("/") if segment]


@dc.dataclass(slots=True)
class TrieNode(typ.Generic[T]):
    """One path segment; ``value`` is set when a path terminates here."""

    segment: str
    value: T | None = None
    children: dict[str, TrieNode[T]] = dc.field(default_factory=dict)


class UrlTrie(typ.Generic[T]):
    """Exact and prefix lookup over URL paths."""

    def __init__(self) -> None:
        self.root: TrieNode[T] = TrieNode("/")
        self._size = 0

    def __len__(self) -> int:
        return self._size

    def insert(self, path: str, value: T) -> None:
        """Record ``value`` at ``path``; a later insert at the same path wins."""
        node = self.root
        for segment in split_segments(path):
            child = node.children.get(segment)
            if child is None:
                child = TrieNode(segment)
                node.children[segment] = child
            node = child
        if node.value is None:
            self._size += 1
        node.value = value

    def lookup(self, path: str) -> T | None:
        """Return the value stored exactly at ``path``, if any."""
        node = self._walk(path)
        return None if node is None else node.value

    def prefix_search(self, prefix: str) -> list[T]:
        """Return every value stored at or below ``prefix`` in pre-order.

        Callers must not rely on the order of siblings. A value reachable by
        several paths is reported once per path.
        """
        node = self._walk(prefix)
        if node is None:
            return []
        results: list[T] = []
        stack = [node]
        while stack:
            current = stack.pop()
            if current.value is not None:
                results.append(current.value)
            stack.extend(reversed(list(current.children.values())))
        return results

    def _walk(self, path: str) -> TrieNode[T] | None:
        node = self.root
        for segment in split_segments(path):
            child = node.children.get(segment)
            if child is None:
                return None
            node = child
        return node


__all__ = ["TrieNode", "UrlTrie", "split_segments"]
