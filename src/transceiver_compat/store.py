"""Holds the current dataset snapshot for the running service."""

import logging
import threading
import time
from pathlib import Path
from typing import Any

from .config import RELOAD_MIN_INTERVAL
from .engine import search
from .errors import LoadError, ReloadThrottled
from .loader import load_snapshot
from .models import Database
from .result import QueryOutcome
from .stats import get_stats, list_switch_models

logger = logging.getLogger(__name__)

__all__ = [
    "SnapshotStore",
    "get_store",
    "close_store",
]


class SnapshotStore:
    """Owner of the shared read-only snapshot.

    Thread safety: the snapshot is immutable, so queries read it without
    locking. Loading and reloading build a complete new Database before the
    reference is swapped under _lock, so an in-flight query keeps whichever
    snapshot it captured and never sees a partial one.

    Reloads re-read the whole source (possibly over the network), so they are
    limited to one per min_reload_interval seconds. Queries are never limited.
    """

    def __init__(self, source: str | Path | None = None, min_reload_interval: float = RELOAD_MIN_INTERVAL):
        self.source = source
        self.min_reload_interval = min_reload_interval
        self._last_reload: float | None = None
        self._snapshot: Database | None = None
        self._load_error: LoadError | None = None
        self._loaded = False
        self._lock = threading.Lock()

    def _ensure_loaded(self) -> None:
        """Load on first use. Thread-safe."""
        if self._loaded:
            return

        with self._lock:
            # Double-check after acquiring lock
            if self._loaded:
                return
            try:
                self._snapshot = load_snapshot(self.source)
                self._load_error = None
            except LoadError as e:
                logger.warning(f"Dataset load failed: {e}")
                self._load_error = e
            self._loaded = True

    @property
    def snapshot(self) -> Database | None:
        self._ensure_loaded()
        return self._snapshot

    @property
    def load_error(self) -> LoadError | None:
        self._ensure_loaded()
        return self._load_error

    def reload(self) -> Database:
        """Load the dataset again and swap it in.

        On failure the previous snapshot (if any) stays in place. Failed
        attempts count towards the reload interval too.

        Raises:
            ReloadThrottled: If the previous reload was less than
                min_reload_interval seconds ago.
            LoadError: If the new dataset cannot be loaded.
        """
        with self._lock:
            now = time.monotonic()
            if self._last_reload is not None:
                elapsed = now - self._last_reload
                if elapsed < self.min_reload_interval:
                    raise ReloadThrottled(self.min_reload_interval - elapsed)
            self._last_reload = now

        # Load outside the lock; only the swap is serialized
        try:
            snapshot = load_snapshot(self.source)
        except LoadError as e:
            logger.warning(f"Dataset reload failed, keeping previous snapshot: {e}")
            with self._lock:
                if self._snapshot is None:
                    self._load_error = e
                self._loaded = True
            raise

        with self._lock:
            self._snapshot = snapshot
            self._load_error = None
            self._loaded = True
        return snapshot

    def search(self, query: str | None) -> QueryOutcome:
        """Resolve a switch model against the current snapshot."""
        self._ensure_loaded()
        with self._lock:
            snapshot, load_error = self._snapshot, self._load_error
        return search(snapshot, query, load_error=load_error)

    def list_switch_models(self) -> list[str]:
        snapshot = self.snapshot
        return list_switch_models(snapshot) if snapshot is not None else []

    def get_stats(self) -> dict[str, Any]:
        """Get snapshot statistics."""
        snapshot = self.snapshot
        if snapshot is None:
            message = self._load_error.message if self._load_error else "Dataset not loaded"
            return {"error": f"Dataset not available: {message}"}
        return get_stats(snapshot)

    def close(self) -> None:
        """Drop the snapshot. The next access loads it again."""
        with self._lock:
            self._snapshot = None
            self._load_error = None
            self._loaded = False


# Global instance with thread safety
_store: SnapshotStore | None = None
_store_lock = threading.Lock()


def get_store() -> SnapshotStore:
    """Get or create the global snapshot store (thread-safe)."""
    global _store
    if _store is None:
        with _store_lock:
            # Double-check locking pattern
            if _store is None:
                _store = SnapshotStore()
    return _store


def close_store() -> None:
    """Close the global snapshot store (thread-safe)."""
    global _store
    with _store_lock:
        if _store:
            _store.close()
            _store = None
