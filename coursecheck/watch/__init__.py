"""Watch mode: re-run checks when the content tree changes."""

from coursecheck.watch.watcher import CheckWatcher

__all__ = ["CheckWatcher"]
