"""Tests for the content-hash watcher and its debounced rebuild channel.

The handler methods are driven directly with watchdog event objects so the
tests do not depend on the platform observer's timing.
"""

from __future__ import annotations

import logging
import time
import typing as typ
from pathlib import Path

import pytest
from pytest_mock import MockerFixture
from watchdog.events import (
    FileCreatedEvent,
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
)

from octoblog.config import load_site_config
from octoblog.errors import LayoutError
from octoblog.generator import Site
from octoblog.watcher import SiteWatcher, file_digest

DEBOUNCE = 0.05
SETTLE = 0.3


@pytest.fixture
def watcher(site_root: Path) -> typ.Iterator[SiteWatcher]:
    handler = SiteWatcher(Site(load_site_config(source=site_root)), debounce=DEBOUNCE)
    handler.scan()
    yield handler
    handler.stop()


def _pending(handler: SiteWatcher) -> int:
    time.sleep(SETTLE)
    return handler.rebuilds.qsize()


def test_scan_indexes_sources_but_not_output(site_root: Path, watcher: SiteWatcher) -> None:
    (site_root / "_site").mkdir()
    (site_root / "_site" / "index.html").write_text("out", encoding="utf-8")
    (site_root / ".git").mkdir()
    (site_root / ".git" / "HEAD").write_text("ref", encoding="utf-8")

    count = watcher.scan()

    post = site_root / "_posts" / "2024-01-15-hello-world.md"
    assert watcher.digest_of(post) == file_digest(post)
    assert watcher.digest_of(site_root / "_site" / "index.html") is None
    assert watcher.digest_of(site_root / ".git" / "HEAD") is None
    assert count == 9


def test_unchanged_bytes_do_not_rebuild(site_root: Path, watcher: SiteWatcher) -> None:
    post = site_root / "_posts" / "2024-01-15-hello-world.md"
    post.write_bytes(post.read_bytes())

    watcher.on_modified(FileModifiedEvent(str(post)))

    assert _pending(watcher) == 0


def test_changed_bytes_request_one_rebuild(site_root: Path, watcher: SiteWatcher) -> None:
    post = site_root / "_posts" / "2024-01-15-hello-world.md"
    post.write_text(post.read_text(encoding="utf-8") + "\nMore.\n", encoding="utf-8")

    watcher.on_modified(FileModifiedEvent(str(post)))

    assert _pending(watcher) == 1
    assert watcher.digest_of(post) == file_digest(post)


def test_burst_of_changes_coalesces(site_root: Path, watcher: SiteWatcher) -> None:
    post = site_root / "_posts" / "2024-01-15-hello-world.md"
    for index in range(10):
        post.write_text(f"---\ntitle: v{index}\n---\nBody {index}\n", encoding="utf-8")
        watcher.on_modified(FileModifiedEvent(str(post)))

    assert _pending(watcher) == 1

    watcher.mark_dirty()
    assert _pending(watcher) == 1


def test_output_and_hidden_files_are_ignored(site_root: Path, watcher: SiteWatcher) -> None:
    output = site_root / "_site" / "2024" / "a.html"
    output.parent.mkdir(parents=True)
    output.write_text("generated", encoding="utf-8")
    swap = site_root / "_posts" / ".hello.md.swp"
    swap.write_text("editor", encoding="utf-8")

    watcher.on_created(FileCreatedEvent(str(output)))
    watcher.on_modified(FileModifiedEvent(str(output)))
    watcher.on_created(FileCreatedEvent(str(swap)))

    assert _pending(watcher) == 0


def test_create_delete_and_move_mark_dirty(site_root: Path, watcher: SiteWatcher) -> None:
    new = site_root / "_posts" / "2024-02-01-new.md"
    new.write_text("---\ntitle: New\n---\nBody\n", encoding="utf-8")
    watcher.on_created(FileCreatedEvent(str(new)))
    assert _pending(watcher) == 1
    watcher.rebuilds.get_nowait()

    moved = site_root / "_posts" / "2024-02-02-moved.md"
    new.rename(moved)
    watcher.on_moved(FileMovedEvent(str(new), str(moved)))
    assert watcher.digest_of(new) is None
    assert watcher.digest_of(moved) == file_digest(moved)
    assert _pending(watcher) == 1
    watcher.rebuilds.get_nowait()

    moved.unlink()
    watcher.on_deleted(FileDeletedEvent(str(moved)))
    assert watcher.digest_of(moved) is None
    assert _pending(watcher) == 1


def test_rebuild_reports_failure_and_recovers(
    site_root: Path, watcher: SiteWatcher, caplog: pytest.LogCaptureFixture
) -> None:
    layout = site_root / "_layouts" / "post.html"
    original = layout.read_text(encoding="utf-8")
    layout.unlink()

    with caplog.at_level(logging.INFO):
        assert watcher.rebuild() is False
    assert "[watch] rebuild failed" in caplog.text

    layout.write_text(original, encoding="utf-8")
    assert watcher.rebuild() is True
    assert (site_root / "_site" / "2024/01/15/hello-world.html").is_file()


def test_worker_drains_queue(watcher: SiteWatcher, mocker: MockerFixture) -> None:
    build = mocker.patch.object(watcher.site, "build")

    watcher.start()
    watcher.mark_dirty()
    deadline = time.monotonic() + 5
    while not build.called and time.monotonic() < deadline:
        time.sleep(0.05)

    assert build.call_count == 1


def test_unexpected_exception_does_not_escape(
    watcher: SiteWatcher, mocker: MockerFixture
) -> None:
    mocker.patch.object(watcher.site, "build", side_effect=LayoutError("gone"))
    assert watcher.rebuild() is False

    mocker.patch.object(watcher.site, "build", side_effect=KeyError("oops"))
    assert watcher.rebuild() is False


def test_roots_are_deduplicated(site_root: Path, watcher: SiteWatcher) -> None:
    assert watcher.roots == [site_root.absolute()]


def test_destination_named_like_source_outside_tree(
    site_root: Path, tmp_path: Path
) -> None:
    destination = tmp_path / "www" / site_root.name
    config = load_site_config(source=site_root, destination=destination)
    handler = SiteWatcher(Site(config), debounce=DEBOUNCE)
    try:
        assert handler.scan() == 9
        assert handler.is_ignored((destination / "index.html").absolute())

        post = site_root / "_posts" / "2024-01-15-hello-world.md"
        post.write_text(post.read_text(encoding="utf-8") + "\nEdited.\n", encoding="utf-8")
        handler.on_modified(FileModifiedEvent(str(post)))

        assert _pending(handler) == 1
    finally:
        handler.stop()
