"""Write rendered documents and mirror static asset trees into the destination."""

from __future__ import annotations

import logging
import shutil
import typing as typ
from pathlib import Path, PurePosixPath

from octoblog._constants import REQUIRED_STATIC_DIR, STATIC_DIRS
from octoblog.errors import EmitError

if typ.TYPE_CHECKING:
    from octoblog.config import SiteConfig

logger = logging.getLogger(__name__)


def output_file(destination: Path, relative: str) -> Path:
    """Return the file under ``destination`` for a site-relative path.

    Raises
    ------
    EmitError
        If ``relative`` would escape the destination directory.
    """
    parts = PurePosixPath(relative.lstrip("/")).parts
    if not parts or any(part in ("..", ".") for part in parts):
        msg = f"Refusing to write outside the destination: '{relative}'."
        raise EmitError(msg)
    return destination.joinpath(*parts)


def write_output(destination: Path, relative: str, content: str) -> Path:
    """Write ``content`` to ``destination/relative``, creating parents."""
    target = output_file(destination, relative)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
    except OSError as exc:
        msg = f"Unable to write {target}: {exc}"
        raise EmitError(msg) from exc
    logger.debug("wrote %s", target)
    return target


def copy_static_trees(config: SiteConfig) -> int:
    """Mirror the static asset directories and return the number of files copied.

    Raises
    ------
    EmitError
        If the required ``stylesheets`` directory is missing or a copy fails.
    """
    if not (config.source / REQUIRED_STATIC_DIR).is_dir():
        msg = f"Required directory '{config.source / REQUIRED_STATIC_DIR}' is missing."
        raise EmitError(msg)
    copied = 0
    for name in STATIC_DIRS:
        source_dir = config.source / name
        if not source_dir.is_dir():
            continue
        try:
            shutil.copytree(source_dir, config.destination / name, dirs_exist_ok=True)
        except (OSError, shutil.Error) as exc:
            msg = f"Unable to copy {source_dir}: {exc}"
            raise EmitError(msg) from exc
        copied += sum(1 for path in source_dir.rglob("*") if path.is_file())
        logger.debug("copied %s", source_dir)
    return copied


__all__ = ["copy_static_trees", "output_file", "write_output"]
