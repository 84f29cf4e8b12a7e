"""Jinja environment that renders layouts against a per-call data bag.

Layouts and includes share one namespace. The ``include`` helper renders a
named template with the calling template's own context, so recursive includes
see the same ``site``/``page``/``content`` values without any shared state.
"""

from __future__ import annotations

import datetime as dt
import html
import typing as typ
from urllib.parse import quote

from jinja2 import (
    DictLoader,
    Environment,
    TemplateError,
    TemplateNotFound,
    pass_context,
)
from markupsafe import Markup

from octoblog.errors import LayoutError, RenderError

if typ.TYPE_CHECKING:
    from jinja2.runtime import Context


def _date(fmt: str, value: object) -> str:
    if isinstance(value, dt.date):
        return value.strftime(fmt)
    return ""


def _escape(value: object) -> Markup:
    return Markup(html.escape(str(value)))  # noqa: S704 - already escaped


def _safe(value: object) -> Markup:
    return Markup(str(value))  # noqa: S704 - explicit opt-in


def _strip(value: object) -> str:
    return str(value).strip()


def _truncate(value: object, length: int) -> str:
    text = str(value)
    if len(text) <= length:
        return text
    return f"{text[:length]}..."


def _first(count: int, items: object) -> list[typ.Any]:
    if not isinstance(items, list | tuple):
        return []
    if count < 0 or count > len(items):
        count = len(items)
    return list(items[:count])


def _join(separator: str, items: object) -> str:
    if not isinstance(items, list | tuple):
        return ""
    return separator.join(item for item in items if isinstance(item, str))


def _add(left: int, right: int) -> int:
    return int(left) + int(right)


def _sub(left: int, right: int) -> int:
    return int(left) - int(right)


def _mul(left: int, right: int) -> int:
    return int(left) * int(right)


def _url_path_escape(value: object) -> str:
    return quote(str(value), safe="")


HELPERS: dict[str, typ.Callable[..., typ.Any]] = {
    "date": _date,
    "escape": _escape,
    "safe": _safe,
    "strip": _strip,
    "truncate": _truncate,
    "first": _first,
    "join": _join,
    "add": _add,
    "sub": _sub,
    "mul": _mul,
    "url_path_escape": _url_path_escape,
}


class TemplateEngine:
    """Compile a named template set once and render it on demand."""

    def __init__(self, templates: typ.Mapping[str, str]) -> None:
        """Compile every template eagerly.

        Parameters
        ----------
        templates : Mapping[str, str]
            Template source keyed by layout or include name.

        Raises
        ------
        RenderError
            If any template has a syntax error.
        """
        self.names = frozenset(templates)
        self.env = Environment(
            loader=DictLoader(dict(templates)),
            autoescape=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.globals.update(HELPERS)
        self.env.globals["include"] = self._make_include()
        for name in sorted(self.names):
            try:
                self.env.get_template(name)
            except TemplateError as exc:
                msg = f"Template '{name}' failed to compile: {exc}"
                raise RenderError(msg) from exc

    def has(self, name: str) -> bool:
        return name in self.names

    def render(self, name: str, bag: typ.Mapping[str, typ.Any]) -> str:
        """Execute template ``name`` against ``bag``.

        Raises
        ------
        LayoutError
            If no template called ``name`` is registered.
        RenderError
            If template execution fails.
        """
        if name not in self.names:
            msg = f"Layout '{name}' does not exist."
            raise LayoutError(msg)
        try:
            return self.env.get_template(name).render(bag)
        except RenderError:
            raise
        except TemplateNotFound as exc:
            msg = f"Template '{name}' includes unknown template '{exc.name}'."
            raise RenderError(msg) from exc
        except Exception as exc:
            msg = f"Template '{name}' failed to render: {exc}"
            raise RenderError(msg) from exc

    def _make_include(self) -> typ.Callable[..., Markup]:
        env = self.env

        @pass_context
        def include(context: Context, name: str) -> Markup:
            """Render ``name`` with the caller's context and return safe HTML."""
            return Markup(env.get_template(name).render(context.get_all()))  # noqa: S704

        return include


__all__ = ["HELPERS", "TemplateEngine"]
