"""Load layout and include templates into a single named template set."""

from __future__ import annotations

import logging
import re
import typing as typ

from octoblog._constants import LAYOUT_SUFFIXES
from octoblog.errors import LayoutError

if typ.TYPE_CHECKING:
    from pathlib import Path

    from octoblog.config import SiteConfig

logger = logging.getLogger(__name__)

DEFINE_OPEN_PATTERN = re.compile(r'^\s*\{\{-?\s*define\s*"([^"]+)"\s*-?\}\}\s*')
DEFINE_CLOSE_PATTERN = re.compile(r"\s*\{\{-?\s*end\s*-?\}\}\s*$")


def strip_define_wrapper(text: str) -> str:
    """Remove a ``{{ define "name" }}`` ... ``{{ end }}`` wrapper, if present.

    Examples
    --------
    >>> strip_define_wrapper('{{ define "nav" }}<nav></nav>{{ end }}')
    '<nav></nav>'
    """
    opened = DEFINE_OPEN_PATTERN.match(text)
    if opened is None:
        return text
    return DEFINE_CLOSE_PATTERN.sub("", text[opened.end() :])


def load_layouts(config: SiteConfig) -> dict[str, str]:
    """Return layouts and includes keyed by filename stem.

    Raises
    ------
    LayoutError
        If the layouts directory is missing, a file cannot be read, or a name
        is defined twice across the two directories.
    """
    layouts_dir = config.layouts_path
    if not layouts_dir.is_dir():
        msg = f"Layouts directory '{layouts_dir}' does not exist."
        raise LayoutError(msg)
    templates: dict[str, str] = {}
    origins: dict[str, Path] = {}
    _register_dir(layouts_dir, templates, origins, include=False)
    if config.includes_path.is_dir():
        _register_dir(config.includes_path, templates, origins, include=True)
    logger.debug("registered %d templates", len(templates))
    return templates


def _register_dir(
    directory: Path,
    templates: dict[str, str],
    origins: dict[str, Path],
    *,
    include: bool,
) -> None:
    for path in sorted(directory.rglob("*")):
        if not path.is_file() or path.suffix.lower() not in LAYOUT_SUFFIXES:
            continue
        name = path.stem
        if name in templates:
            msg = f"Template name '{name}' is defined by both {origins[name]} and {path}."
            raise LayoutError(msg)
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            msg = f"Unable to read template {path}: {exc}"
            raise LayoutError(msg) from exc
        templates[name] = strip_define_wrapper(text) if include else text
        origins[name] = path


__all__ = ["load_layouts", "strip_define_wrapper"]
