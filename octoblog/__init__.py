"""Static blog generator with a watch-and-rebuild loop and a preview server.

The package turns a tree of Markdown posts and pages, Jinja layouts and static
assets into a browsable site, and can keep serving and rebuilding it while the
sources change.

Exports
-------
- ``app``: Cyclopts application behind the ``octoblog`` command.
- ``main``: Convenience function that invokes ``app``.

Examples
--------
>>> from octoblog import main
>>> main()  # doctest: +SKIP
>>> from octoblog import app
>>> app(["--source", "blog"])  # doctest: +SKIP
"""

from __future__ import annotations

from .cli import app, main

__all__ = ["app", "main"]
