"""Split source documents into a YAML header mapping and a markup body.

The parser never fails a load: a malformed header logs a warning and yields an
empty mapping so the build can carry on with filename-derived defaults.
"""

from __future__ import annotations

import dataclasses as dc
import datetime as dt
import logging
import typing as typ
from pathlib import Path

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

logger = logging.getLogger(__name__)

DELIMITER = "---"
DATE_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d %H:%M:%S %z",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d",
)


@dc.dataclass(frozen=True, slots=True)
class FrontMatter:
    """Read-only view over a parsed document header.

    Values keep the shapes YAML produced (strings, numbers, booleans,
    timestamps, sequences, mappings). The typed accessors degrade to the
    supplied default when a key is missing or holds the wrong shape.
    """

    values: typ.Mapping[str, typ.Any] = dc.field(default_factory=dict)

    def __contains__(self, key: object) -> bool:
        return key in self.values

    def __bool__(self) -> bool:
        return bool(self.values)

    def get(self, key: str, default: typ.Any = None) -> typ.Any:  # noqa: ANN401
        return self.values.get(key, default)

    def as_dict(self) -> dict[str, typ.Any]:
        return dict(self.values)

    def get_str(self, key: str, default: str = "") -> str:
        """Return a non-empty string value, stringifying scalars."""
        match self.values.get(key):
            case str() as text if text.strip():
                return text
            case bool() | None:
                return default
            case int() | float() as number:
                return str(number)
            case _:
                return default

    def get_bool(self, key: str, *, default: bool = False) -> bool:
        value = self.values.get(key)
        return value if isinstance(value, bool) else default

    def get_list(self, key: str) -> list[str]:
        """Return a list of strings; a scalar becomes a one-element list."""
        match self.values.get(key):
            case None:
                return []
            case list() | tuple() as items:
                return [str(item).strip() for item in items if str(item).strip()]
            case str() as text:
                return [text.strip()] if text.strip() else []
            case other:
                return [str(other)]

    def get_datetime(self, key: str) -> dt.datetime | None:
        """Return the header date as a naive local datetime, if parseable."""
        return parse_date(self.values.get(key))


def parse_date(value: object) -> dt.datetime | None:
    """Normalize a header date value into a naive local datetime.

    Accepts ``datetime`` and ``date`` objects produced by the YAML loader as
    well as strings in ``YYYY-MM-DD``, ``YYYY-MM-DD HH:MM:SS`` (optionally
    followed by a numeric offset) and ISO 8601 forms.
    """
    parsed: dt.datetime | None = None
    match value:
        case dt.datetime():
            parsed = value
        case dt.date():
            parsed = dt.datetime(value.year, value.month, value.day)
        case str() as text:
            parsed = _parse_date_text(text.strip())
        case _:
            return None
    if parsed is None:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def _parse_date_text(text: str) -> dt.datetime | None:
    if not text:
        return None
    for fmt in DATE_FORMATS:
        try:
            return dt.datetime.strptime(text, fmt)  # noqa: DTZ007 - local time
        except ValueError:
            continue
    try:
        return dt.datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None


def split_front_matter(text: str) -> tuple[str, str] | None:
    """Return ``(header, body)`` or ``None`` when no complete block exists.

    The opening delimiter must be the first line of the document; the block
    ends at the next line whose trimmed content is exactly ``---``.
    """
    lines = text.split("\n")
    if not lines or lines[0].strip() != DELIMITER:
        return None
    for index in range(1, len(lines)):
        if lines[index].strip() == DELIMITER:
            header = "\n".join(lines[1:index])
            body = "\n".join(lines[index + 1 :])
            return header, body
    return None


def parse_front_matter(
    text: str, *, source: Path | str | None = None
) -> tuple[FrontMatter, str]:
    """Split ``text`` into a header mapping and the remaining body.

    Parameters
    ----------
    text : str
        Full document contents.
    source : Path or str, optional
        Origin of the document, used only in warning messages.

    Returns
    -------
    tuple[FrontMatter, str]
        The parsed header and the body. Without a complete ``---`` block the
        header is empty and the body is ``text`` unchanged. When the block's
        payload is malformed, or not a mapping, a warning is logged and the
        header is empty while the body after the block is kept intact.

    Examples
    --------
    >>> header, body = parse_front_matter("---\\ntitle: Hi\\n---\\nBody\\n")
    >>> header.get_str("title"), body
    ('Hi', 'Body\\n')
    """
    if not text.strip():
        return FrontMatter(), ""
    normalized = text.removeprefix("\ufeff").replace("\r\n", "\n").replace("\r", "\n")
    parts = split_front_matter(normalized)
    if parts is None:
        return FrontMatter(), text
    header, body = parts
    label = str(source) if source is not None else "<document>"
    loader = YAML(typ="safe")
    try:
        loaded = loader.load(header) if header.strip() else {}
    except YAMLError as exc:
        logger.warning("malformed front matter in %s, using defaults: %s", label, exc)
        return FrontMatter(), body
    if loaded is None:
        loaded = {}
    if not isinstance(loaded, dict):
        logger.warning(
            "front matter in %s is not a mapping, using defaults", label
        )
        return FrontMatter(), body
    return FrontMatter({str(key): value for key, value in loaded.items()}), body


__all__ = [
    "DATE_FORMATS",
    "DELIMITER",
    "FrontMatter",
    "parse_date",
    "parse_front_matter",
    "split_front_matter",
]
