"""Convert post and page markup into sanitized, syntax-highlighted HTML."""

from __future__ import annotations

import html
import logging
import re
import typing as typ

from markdown import Markdown
from markdown.extensions.toc import slugify_unicode

from .images import ImageAltExtension

if typ.TYPE_CHECKING:
    from markdown.extensions import Extension
else:  # pragma: no cover - type-checking fallback
    Extension = typ.Any

logger = logging.getLogger(__name__)

CODE_BLOCK_PATTERN = re.compile(r"```([A-Za-z0-9_+#.-]+)?[^\n]*\n(.*?)```", re.DOTALL)
FENCED_INDENT_PATTERN = re.compile(r"^[ ]{1,3}([`~]{3,})", re.MULTILINE)
FENCE_LABEL_PATTERN = re.compile(
    r"^([`~]{3,})([A-Za-z0-9_+#.-]+)?(,[^\r\n]+)$", re.MULTILINE
)
FENCE_OPEN_PATTERN = re.compile(r"^[ ]{0,3}(`{3,}|~{3,})")
HEADING_NO_SPACE_PATTERN = re.compile(r"^(#{1,6})(?=[^#\s])")
BULLET_NO_SPACE_PATTERN = re.compile(r"^([ \t]*)([-+*])(?=[^\s\-+*])")
CODEHILITE_OPEN_TAG = re.compile(r'<div class="codehilite">')
SCRIPT_OPEN_PATTERN = re.compile(r"<script", re.IGNORECASE)
SCRIPT_CLOSE_PATTERN = re.compile(r"</script>", re.IGNORECASE)
JAVASCRIPT_SCHEME_PATTERN = re.compile(r"javascript:", re.IGNORECASE)

MARKDOWN_EXTENSIONS: tuple[str, ...] = (
    "fenced_code",
    "codehilite",
    "tables",
    "sane_lists",
    "def_list",
    "footnotes",
    "smarty",
    "nl2br",
    "toc",
    "pymdownx.tilde",
    "pymdownx.tasklist",
    "pymdownx.magiclink",
)


class MarkdownConverter:
    """Render markup into HTML with a fixed, permissive feature set.

    The converter enables tables, strikethrough, task lists, definition
    lists, footnotes, autolinks, typographic quotes, hard line breaks, raw
    HTML and heading anchors. Before conversion the input is normalized so
    sloppy documents still render; afterwards script tags and
    ``javascript:`` URIs are neutralized. Conversion never raises: on failure
    the escaped input is returned instead.
    """

    def __init__(self, pygments_style: str = "monokai") -> None:
        """Initialize a converter with the Pygments style for code blocks.

        Parameters
        ----------
        pygments_style : str, optional
            Name of the Pygments style used for syntax highlighting. Defaults
            to ``"monokai"``.
        """
        self.pygments_style = pygments_style

    def convert(self, text: str) -> str:
        """Return sanitized HTML for ``text``; never raises."""
        if not text.strip():
            return ""
        try:
            normalized = preprocess(text)
            converted = self._markdown().convert(normalized)
            converted = self._annotate_codehilite(converted, normalized)
        except Exception as exc:  # noqa: BLE001 - conversion must not fail a build
            logger.warning("markup conversion failed, using escaped text: %s", exc)
            return html.escape(text)
        return sanitize(converted)

    def _markdown(self) -> Markdown:
        extensions: list[Extension | str] = [*MARKDOWN_EXTENSIONS, ImageAltExtension()]
        return Markdown(
            extensions=extensions,
            extension_configs={
                "codehilite": {
                    "linenums": False,
                    "guess_lang": False,
                    "css_class": "codehilite",
                    "pygments_style": self.pygments_style,
                },
                "toc": {"slugify": slugify_unicode, "permalink": False},
                "smarty": {"smart_angled_quotes": False},
            },
        )

    def _annotate_codehilite(self, converted: str, source_markdown: str) -> str:
        """Attach language metadata to each highlighted block in converted markup."""
        languages = [
            match.group(1) or "text"
            for match in CODE_BLOCK_PATTERN.finditer(source_markdown)
        ]
        if not languages:
            return converted
        lang_iter = iter(languages)

        def _repl(match: re.Match[str]) -> str:
            lang = next(lang_iter, "text")
            return (
                f'<div class="codehilite" data-language="{html.escape(lang, quote=True)}">'
            )

        return CODEHILITE_OPEN_TAG.sub(_repl, converted, len(languages))


def preprocess(text: str) -> str:
    """Normalize line endings and repair common markup slips.

    Outside fenced code blocks a space is inserted after heading hashes and
    list bullets that lack one; an unterminated fence is closed at the end of
    the document.
    """
    normalized = text.replace("\r\n", "\n").replace("\r", "\n")
    normalized = _normalize_fenced_blocks(normalized)
    lines: list[str] = []
    open_fence: str | None = None
    for line in normalized.split("\n"):
        fence = FENCE_OPEN_PATTERN.match(line)
        if open_fence is not None:
            if fence and fence.group(1)[0] == open_fence[0] and len(
                fence.group(1)
            ) >= len(open_fence):
                open_fence = None
            lines.append(line)
            continue
        if fence:
            open_fence = fence.group(1)
            lines.append(line)
            continue
        line = HEADING_NO_SPACE_PATTERN.sub(r"\1 ", line)
        lines.append(_fix_bullet(line))
    if open_fence is not None:
        lines.append(open_fence)
    return "\n".join(lines)


def _fix_bullet(line: str) -> str:
    match = BULLET_NO_SPACE_PATTERN.match(line)
    if match is None:
        return line
    if match.group(2) == "*" and line.count("*") > 1:
        return line
    return f"{match.group(1)}{match.group(2)} {line[match.end():]}"


def _normalize_fenced_blocks(text: str) -> str:
    without_indent = FENCED_INDENT_PATTERN.sub(r"\1", text)

    def _strip_labels(match: re.Match[str]) -> str:
        fence, language, _extras = match.groups()
        label = language or ""
        return f"{fence}{label}"

    return FENCE_LABEL_PATTERN.sub(_strip_labels, without_indent)


def sanitize(converted: str) -> str:
    """Neutralize script tags and ``javascript:`` URIs in generated HTML."""
    cleaned = SCRIPT_OPEN_PATTERN.sub("&lt;script", converted)
    cleaned = SCRIPT_CLOSE_PATTERN.sub("&lt;/script&gt;", cleaned)
    return JAVASCRIPT_SCHEME_PATTERN.sub("", cleaned)


__all__ = [
    "CODE_BLOCK_PATTERN",
    "MARKDOWN_EXTENSIONS",
    "MarkdownConverter",
    "preprocess",
    "sanitize",
]
