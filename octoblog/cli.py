"""Cyclopts CLI entrypoint for building, serving and maintaining a blog.

Running ``octoblog`` with no flags builds the site once. ``--serve`` and
``--watch`` keep the process alive after the first build, ``--new-post`` and
``--new-page`` scaffold documents, ``--doctor`` lints the project layout and
``--test-markdown`` runs the markup validator against canned documents. Every
flag can also be supplied through an ``OCTOBLOG_`` environment variable, for
example ``OCTOBLOG_PORT=8080``.

Examples
--------
Build the site in ``blog/``:

>>> from octoblog.cli import app
>>> app(["--source", "blog"])  # doctest: +SKIP

Build, then serve and rebuild on change:

>>> app(["--source", "blog", "--serve", "--watch", "--port", "8080"])  # doctest: +SKIP
"""

from __future__ import annotations

import logging
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter

from ._constants import VERSION
from .config import ConfigError, SiteConfig, load_site_config
from .doctor import run_doctor
from .errors import BuildError
from .generator import Site
from .markdown_checks import run_markdown_self_test
from .scaffold import new_page, new_post
from .server import serve as serve_site
from .watcher import SiteWatcher

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(levelname)s: %(message)s"

app = App(
    name="octoblog",
    version=VERSION,
    help="Static blog generator with a watch-and-rebuild loop and a preview server.",
    config=cyclopts.config.Env("OCTOBLOG_", command=False),  # type: ignore[unknown-argument]
)


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the path as given."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:
            return str(path)
    return str(path)


def configure_logging(*, verbose: bool = False, quiet: bool = False) -> None:
    """Set the root logger level from the diagnostic flags."""
    level = logging.DEBUG if verbose else logging.WARNING if quiet else logging.INFO
    logging.basicConfig(format=LOG_FORMAT)
    logging.getLogger().setLevel(level)


def _self_test() -> int:
    results = run_markdown_self_test()
    for result in results:
        verdict = "PASS" if result.passed else "FAIL"
        print(
            f"{verdict} {result.case.name} "
            f"({len(result.issues)} issues, {result.html_length} chars)"
        )
        for issue in result.issues:
            print(f"    {issue}")
    failures = sum(1 for result in results if not result.passed)
    print(f"{len(results) - failures}/{len(results)} cases passed")
    return 1 if failures else 0


def _build(site: Site) -> None:
    report = site.build()
    for path in report.written:
        print(f"wrote {_format_path(path)}")
    logger.info(
        "%d pages, %d post files, %d listing pages, %d static files in %.2fs",
        report.pages_written,
        report.posts_written,
        report.listings_written,
        report.files_copied,
        report.duration,
    )


def _serve_and_watch(
    site: Site, config: SiteConfig, *, serve: bool, watch: bool
) -> None:
    if not serve:
        SiteWatcher(site).run_forever()
        return
    watcher = SiteWatcher(site) if watch else None
    if watcher is not None:
        watcher.start()
    try:
        serve_site(site, host=config.host, port=config.port)
    finally:
        if watcher is not None:
            watcher.stop()


@app.default
def run(
    *,
    serve: typ.Annotated[bool, Parameter(help="Serve the site after building")] = False,
    watch: typ.Annotated[bool, Parameter(help="Rebuild when sources change")] = False,
    port: typ.Annotated[int | None, Parameter(help="Preview server port")] = None,
    host: typ.Annotated[str | None, Parameter(help="Preview server host")] = None,
    baseurl: typ.Annotated[
        str | None, Parameter(help="Path prefix the site is served under")
    ] = None,
    config: typ.Annotated[
        Path | None, Parameter(help="Path to a _config.yml/.yaml/.toml file")
    ] = None,
    source: typ.Annotated[Path | None, Parameter(help="Source directory")] = None,
    destination: typ.Annotated[
        Path | None, Parameter(help="Output directory (default <source>/_site)")
    ] = None,
    new_post_title: typ.Annotated[
        str | None,
        Parameter(name=("--new-post", "--new_post"), help="Create a post with this title"),
    ] = None,
    new_page_name: typ.Annotated[
        str | None,
        Parameter(name=("--new-page", "--new_page"), help="Create <name>/index.md"),
    ] = None,
    doctor: typ.Annotated[
        bool, Parameter(help="Check the project structure and create missing folders")
    ] = False,
    test_markdown: typ.Annotated[
        bool, Parameter(help="Run the markup validator self-test")
    ] = False,
    verbose: typ.Annotated[bool, Parameter(help="Log debug output")] = False,
    quiet: typ.Annotated[bool, Parameter(help="Only log warnings and errors")] = False,
) -> None:
    """Build the site, then optionally serve it or watch for changes.

    Parameters
    ----------
    serve, watch : bool, optional
        Keep running after the first build to serve and/or rebuild.
    port, host, baseurl : optional
        Preview server overrides for the config file values.
    config, source, destination : Path, optional
        Configuration file and directory overrides.
    new_post_title, new_page_name : str, optional
        Scaffold a document instead of building.
    doctor, test_markdown : bool, optional
        Run a maintenance task instead of building.
    verbose, quiet : bool, optional
        Select DEBUG or WARNING logging instead of INFO.

    Raises
    ------
    SystemExit
        With status 1 when configuration, scaffolding or the build fails.
    """
    configure_logging(verbose=verbose, quiet=quiet)
    if test_markdown:
        status = _self_test()
        if status:
            raise SystemExit(status)
        return

    overrides = {"port": port, "host": host, "baseurl": baseurl}
    try:
        site_config = load_site_config(
            config, source=source, destination=destination, overrides=overrides
        )
        if new_post_title is not None:
            print(f"wrote {_format_path(new_post(site_config, new_post_title))}")
            return
        if new_page_name is not None:
            print(f"wrote {_format_path(new_page(site_config, new_page_name))}")
            return
        if doctor:
            report = run_doctor(site_config)
            for line in report.lines:
                print(line)
            if report.fixed:
                print("created missing directories")
            return
        site = Site(site_config)
        _build(site)
    except (ConfigError, BuildError, FileExistsError, ValueError) as exc:
        logger.error("%s", exc)  # noqa: TRY400
        raise SystemExit(1) from exc

    if serve or watch:
        _serve_and_watch(site, site_config, serve=serve, watch=watch)


def main() -> None:
    """Invoke the Cyclopts application behind the ``octoblog`` console command.

    Examples
    --------
    >>> main()  # doctest: +SKIP
    """
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
