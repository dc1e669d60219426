"""Hot-reload watcher for rule files."""

import logging
import threading
import time
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)


class RulesReloader:
    """Rule-file mtime watcher that fires a callback on change."""

    def __init__(
        self,
        paths: Iterable,
        on_change: Optional[Callable] = None,
        check_interval: float = 2.0,
        clock: Callable[[], float] = time.time,
    ):
        self.paths = [Path(p) for p in paths]
        self.on_change = on_change  # callback e.g. cache.invalidate
        self.check_interval = check_interval
        self.clock = clock
        self._last_check: Optional[float] = None
        self._watch_mtimes: Dict[str, float] = {}
        self._lock = threading.Lock()
        self.refresh_snapshot()

    def _iter_watch_files(self):
        for path in self.paths:
            if path.is_dir():
                yield from path.glob("*.yaml")
                yield from path.glob("*.yml")
            else:
                yield path

    def _current_mtimes(self) -> Dict[str, float]:
        snapshot: Dict[str, float] = {}
        for path in self._iter_watch_files():
            if not path.exists() or not path.is_file():
                continue
            try:
                snapshot[str(path)] = path.stat().st_mtime
            except OSError:
                continue
        return snapshot

    def refresh_snapshot(self):
        """Capture latest file mtimes for watched files."""
        self._watch_mtimes = self._current_mtimes()

    def _detect_changed_files(self) -> List[Path]:
        """Return watched files that changed, appeared or vanished since the last snapshot."""
        current = self._current_mtimes()
        changed = [
            Path(key) for key, mtime in current.items()
            if self._watch_mtimes.get(key) != mtime
        ]
        changed.extend(Path(key) for key in self._watch_mtimes if key not in current)
        self._watch_mtimes = current
        return changed

    def check_and_apply(self, force: bool = False) -> List[Path]:
        """Fire on_change when a watched file changed. Runs at most once per interval.

        Safe to call from many threads: one change fires on_change once.
        """
        with self._lock:
            now = self.clock()
            if not force and self._last_check is not None and now - self._last_check < self.check_interval:
                return []
            self._last_check = now

            changed = self._detect_changed_files()
            if not changed:
                return []

            logger.info("Rule files changed, reloading: %s", [str(p) for p in changed])
            if self.on_change is not None:
                self.on_change()
            return changed
