"""Markdown extension that fills in missing ``alt`` text on images."""

from __future__ import annotations

import posixpath
import typing as typ
from urllib.parse import unquote, urlsplit

from markdown.extensions import Extension
from markdown.treeprocessors import Treeprocessor

if typ.TYPE_CHECKING:
    from xml.etree.ElementTree import Element

    from markdown import Markdown
else:  # pragma: no cover - type-checking fallback
    Markdown = typ.Any
    Element = typ.Any


class ImageAltExtension(Extension):
    """Give every converted ``<img>`` a non-empty ``alt`` attribute.

    Markdown images written as ``![](diagram.png)`` render with an empty alt
    text. This extension derives one from the image title when present, and
    otherwise from the file stem (``diagram``).
    """

    def extendMarkdown(self, md: Markdown) -> None:  # type: ignore[override]  # noqa: N802
        """Register the alt-text treeprocessor on the Markdown instance."""
        md.treeprocessors.register(ImageAltTreeprocessor(md), "octoblog_image_alt", 14)


class ImageAltTreeprocessor(Treeprocessor):
    """Populate empty ``alt`` attributes on image elements."""

    def run(self, root: Element) -> Element:
        for element in root.iter("img"):
            if (element.get("alt") or "").strip():
                continue
            element.set("alt", _derive_alt(element.get("title"), element.get("src")))
        return root


def _derive_alt(title: str | None, src: str | None) -> str:
    """Return the image title, else a readable form of the file stem."""
    if title and title.strip():
        return title.strip()
    if not src:
        return "image"
    path = unquote(urlsplit(src).path)
    stem, _ext = posixpath.splitext(posixpath.basename(path))
    readable = stem.replace("-", " ").replace("_", " ").strip()
    return readable or "image"


__all__ = ["ImageAltExtension", "ImageAltTreeprocessor"]
