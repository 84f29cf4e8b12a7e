"""Rebuild the site when source files change.

The watcher keeps a SHA-256 digest for every watched file so editor saves
that leave the bytes untouched do not trigger a rebuild. Real changes mark the
tree dirty; dirty marks restart a 500 ms debounce timer whose expiry posts a
token into a capacity-1 queue. A worker thread drains the queue and runs one
full build per token, so any burst of edits costs at most one follow-up build.
"""

from __future__ import annotations

import hashlib
import logging
import os
import queue
import threading
import time
import typing as typ
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .errors import BuildError

if typ.TYPE_CHECKING:
    from watchdog.observers.api import BaseObserver

    from .generator import Site

logger = logging.getLogger(__name__)

DEBOUNCE_SECONDS = 0.5
_CHUNK_SIZE = 64 * 1024


def file_digest(path: Path) -> str | None:
    """Return the SHA-256 hex digest of ``path``, or None when unreadable."""
    digest = hashlib.sha256()
    try:
        with path.open("rb") as handle:
            for chunk in iter(lambda: handle.read(_CHUNK_SIZE), b""):
                digest.update(chunk)
    except OSError:
        return None
    return digest.hexdigest()


def _event_path(raw: str | bytes) -> Path:
    return Path(os.fsdecode(raw)).absolute()


class SiteWatcher(FileSystemEventHandler):
    """Content-hash filesystem watcher with a debounced rebuild worker.

    Parameters
    ----------
    site : Site
        Site rebuilt on change.
    debounce : float, optional
        Quiet period in seconds before a rebuild is requested.
    """

    def __init__(self, site: Site, *, debounce: float = DEBOUNCE_SECONDS) -> None:
        super().__init__()
        self.site = site
        self.debounce = debounce
        self.rebuilds: queue.Queue[bool] = queue.Queue(maxsize=1)
        self._digests: dict[Path, str] = {}
        self._lock = threading.Lock()
        self._timer: threading.Timer | None = None
        self._stopping = threading.Event()
        self._observer: BaseObserver | None = None
        self._worker: threading.Thread | None = None
        config = site.config
        self._source = config.source.absolute()
        self._destination = config.destination.absolute()

    @property
    def roots(self) -> list[Path]:
        """Existing watch roots with roots nested in another root removed."""
        config = self.site.config
        candidates = [
            config.source,
            config.posts_path,
            config.layouts_path,
            config.includes_path,
            config.data_path,
        ]
        roots: list[Path] = []
        for candidate in (path.absolute() for path in candidates):
            if not candidate.is_dir():
                continue
            if any(candidate == root or root in candidate.parents for root in roots):
                continue
            roots.append(candidate)
        return roots

    def is_ignored(self, path: Path) -> bool:
        """Return True for paths the watcher must not react to.

        Hidden files and the destination tree are ignored, as are source paths
        below a directory named like the destination. Only the part of the
        path inside the source tree is checked for that name.
        """
        if path.name.startswith("."):
            return True
        if path == self._destination or self._destination in path.parents:
            return True
        try:
            relative = path.relative_to(self._source)
        except ValueError:
            return False
        if self._destination.name in relative.parts:
            return True
        return any(part.startswith(".") for part in relative.parts)

    def scan(self) -> int:
        """Record digests of every watched file and return how many were seen."""
        digests: dict[Path, str] = {}
        for root in self.roots:
            for dirpath, dirnames, filenames in os.walk(root):
                current = Path(dirpath)
                dirnames[:] = [
                    name for name in dirnames if not self.is_ignored(current / name)
                ]
                for name in filenames:
                    path = current / name
                    if self.is_ignored(path):
                        continue
                    digest = file_digest(path)
                    if digest is not None:
                        digests[path] = digest
        with self._lock:
            self._digests = digests
        logger.debug("indexed %d watched files", len(digests))
        return len(digests)

    def digest_of(self, path: Path) -> str | None:
        with self._lock:
            return self._digests.get(path.absolute())

    def on_modified(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        path = _event_path(event.src_path)
        if self.is_ignored(path):
            return
        digest = file_digest(path)
        if digest is None:
            return
        with self._lock:
            if self._digests.get(path) == digest:
                return
            self._digests[path] = digest
        logger.debug("changed: %s", path)
        self.mark_dirty()

    def on_created(self, event: FileSystemEvent) -> None:
        path = _event_path(event.src_path)
        if self.is_ignored(path):
            return
        if not event.is_directory:
            digest = file_digest(path)
            if digest is not None:
                with self._lock:
                    self._digests[path] = digest
        logger.debug("created: %s", path)
        self.mark_dirty()

    def on_deleted(self, event: FileSystemEvent) -> None:
        path = _event_path(event.src_path)
        if self.is_ignored(path):
            return
        with self._lock:
            self._digests.pop(path, None)
        logger.debug("removed: %s", path)
        self.mark_dirty()

    def on_moved(self, event: FileSystemEvent) -> None:
        source = _event_path(event.src_path)
        target = _event_path(getattr(event, "dest_path", "") or event.src_path)
        if self.is_ignored(source) and self.is_ignored(target):
            return
        with self._lock:
            self._digests.pop(source, None)
        if not event.is_directory and not self.is_ignored(target):
            digest = file_digest(target)
            if digest is not None:
                with self._lock:
                    self._digests[target] = digest
        logger.debug("moved: %s -> %s", source, target)
        self.mark_dirty()

    def mark_dirty(self) -> None:
        """Restart the debounce timer."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self.debounce, self._request_rebuild)
            self._timer.daemon = True
            self._timer.start()

    def _request_rebuild(self) -> None:
        try:
            self.rebuilds.put_nowait(True)
        except queue.Full:
            logger.debug("rebuild already pending; coalescing")

    def rebuild(self) -> bool:
        """Run one build, logging the outcome; return True on success."""
        logger.info("[watch] rebuilding site...")
        started = time.perf_counter()
        try:
            self.site.build()
        except BuildError as exc:
            logger.error("[watch] rebuild failed: %s", exc)  # noqa: TRY400
            return False
        except Exception:
            logger.exception("[watch] rebuild crashed")
            return False
        logger.info("[watch] rebuild finished in %.2fs", time.perf_counter() - started)
        return True

    def _drain(self) -> None:
        while not self._stopping.is_set():
            try:
                self.rebuilds.get(timeout=0.25)
            except queue.Empty:
                continue
            self.rebuild()

    def start(self) -> None:
        """Index files, schedule recursive watches and start the worker."""
        self.scan()
        observer = Observer()
        for root in self.roots:
            observer.schedule(self, str(root), recursive=True)
            logger.info("watching %s", root)
        observer.start()
        self._observer = observer
        self._stopping.clear()
        self._worker = threading.Thread(
            target=self._drain, name="octoblog-rebuild", daemon=True
        )
        self._worker.start()

    def stop(self) -> None:
        """Stop the observer, the debounce timer and the worker."""
        self._stopping.set()
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
        if self._observer is not None:
            self._observer.stop()
            self._observer.join()
            self._observer = None
        if self._worker is not None:
            self._worker.join()
            self._worker = None

    def run_forever(self) -> None:
        """Watch until interrupted with Ctrl-C."""
        self.start()
        try:
            while True:
                time.sleep(1)
        except KeyboardInterrupt:
            logger.info("stopping watcher")
        finally:
            self.stop()


__all__ = ["DEBOUNCE_SECONDS", "SiteWatcher", "file_digest"]
