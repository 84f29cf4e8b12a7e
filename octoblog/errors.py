"""Exception hierarchy for fatal build failures.

Per-file problems (unreadable documents, malformed headers, markup that fails
to convert) are logged and recovered from where they occur. The exceptions
here are reserved for structural problems that abort the current build.
"""

from __future__ import annotations


class BuildError(RuntimeError):
    """Base class for errors that abort a site build."""


class LayoutError(BuildError):
    """Raised for a missing layouts directory, duplicate or unknown layout."""


class RenderError(BuildError):
    """Raised when a template fails to compile or execute."""


class EmitError(BuildError):
    """Raised when generated output cannot be written or copied."""


class UrlCollisionError(BuildError):
    """Raised when two documents resolve to the same output path."""


__all__ = [
    "BuildError",
    "EmitError",
    "LayoutError",
    "RenderError",
    "UrlCollisionError",
]
