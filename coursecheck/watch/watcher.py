"""File watcher that re-runs checks after the content tree settles."""

from __future__ import annotations

import logging
import signal
import threading
import time
from collections.abc import Callable, Iterable
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

logger = logging.getLogger(__name__)

# Editor swap, backup and probe files
_TEMP_SUFFIXES = frozenset({".swp", ".swo", ".swx", ".tmp", ".bak"})


class _DebouncedHandler(FileSystemEventHandler):
    """Collects filesystem events and fires the callback once after a quiet period."""

    def __init__(
        self,
        root: Path,
        debounce_seconds: float,
        ignore_parts: set[str],
        callback: Callable[[set[str]], None],
        content_suffixes: set[str] | None = None,
    ) -> None:
        super().__init__()
        self._root = root
        self._debounce = debounce_seconds
        self._ignore = ignore_parts
        self._content_suffixes = content_suffixes or {".md", ".markdown", ".mo"}
        self._callback = callback
        self._lock = threading.Lock()
        self._pending: set[str] = set()
        self._timer: threading.Timer | None = None

    def _should_ignore(self, path: str) -> bool:
        try:
            rel = Path(path).resolve().relative_to(self._root)
        except ValueError:
            return True
        if any(part in self._ignore for part in rel.parts):
            return True
        return self._is_temporary(rel)

    def _is_temporary(self, rel: Path) -> bool:
        name = rel.name
        if name.startswith(".") or name.endswith("~"):
            return True
        suffix = rel.suffix.lower()
        if suffix in self._content_suffixes:
            return False
        return not suffix or suffix in _TEMP_SUFFIXES

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory or event.event_type in ("opened", "closed", "closed_no_write"):
            return
        # Editors often save by renaming a temp file over the real one
        paths = [str(event.src_path)]
        if getattr(event, "dest_path", ""):
            paths.append(str(event.dest_path))
        changed = {p for p in paths if not self._should_ignore(p)}
        if not changed:
            return

        with self._lock:
            self._pending.update(changed)
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self._debounce, self._fire)
            self._timer.daemon = True
            self._timer.start()

    def _fire(self) -> None:
        with self._lock:
            changed = self._pending
            self._pending = set()
            self._timer = None
        if not changed:
            return
        try:
            self._callback(changed)
        except Exception:
            logger.exception("Check run failed after changes to %d file(s)", len(changed))

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None


class CheckWatcher:
    """Watches a content tree and calls ``on_change(changed_paths)`` after edits settle.

    Ignores paths with a component in *ignore_patterns* (e.g. ``_site``,
    ``.git``) so a running site build does not retrigger checks. Editor swap
    and backup files are ignored too; files ending in one of *extensions* or
    ``.mo`` always count as changes.
    """

    def __init__(
        self,
        root: str | Path,
        on_change: Callable[[set[str]], None],
        debounce_seconds: float = 0.5,
        ignore_patterns: Iterable[str] = (),
        extensions: Iterable[str] = (".md", ".markdown"),
    ) -> None:
        self.root = Path(root).resolve()
        suffixes = {ext.lower() for ext in extensions} | {".mo"}
        self._handler = _DebouncedHandler(
            self.root, debounce_seconds, set(ignore_patterns), on_change, suffixes,
        )
        self._observer: Observer | None = None

    def start(self) -> None:
        if self._observer is not None:
            return
        observer = Observer()
        observer.schedule(self._handler, str(self.root), recursive=True)
        observer.start()
        self._observer = observer
        logger.info("Watching %s for changes", self.root)

    def stop(self) -> None:
        self._handler.cancel()
        if self._observer is None:
            return
        self._observer.stop()
        self._observer.join()
        self._observer = None
        logger.info("Watcher stopped.")

    @property
    def running(self) -> bool:
        return self._observer is not None

    def run_forever(self) -> None:
        """Block until SIGINT/SIGTERM, then stop the observer."""
        stop = threading.Event()

        def _signal_handler(sig, frame):
            stop.set()

        signal.signal(signal.SIGINT, _signal_handler)
        signal.signal(signal.SIGTERM, _signal_handler)

        self.start()
        try:
            while not stop.is_set():
                time.sleep(0.5)
        finally:
            self.stop()
