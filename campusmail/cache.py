"""TTL snapshot cache for the rule book."""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from campusmail.config.rules import RuleBook

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Snapshot:
    rule_book: RuleBook
    loaded_at: float


class CategoryCache:
    """Holds one immutable RuleBook and reloads it after `ttl` seconds.

    Readers only dereference the current snapshot. The lock serializes
    loads so concurrent misses trigger a single load.
    """

    def __init__(
        self,
        loader: Callable[[], RuleBook],
        ttl: Optional[float] = 300.0,
        clock: Callable[[], float] = time.time,
    ):
        self.loader = loader
        self.ttl = ttl
        self.clock = clock
        self._snapshot: Optional[_Snapshot] = None
        self._lock = threading.Lock()

    @classmethod
    def preloaded(cls, rule_book: RuleBook) -> "CategoryCache":
        """Cache that always serves `rule_book` and never reloads."""
        cache = cls(loader=lambda: rule_book, ttl=None)
        cache.replace(rule_book)
        return cache

    def _is_fresh(self, snapshot: Optional[_Snapshot]) -> bool:
        if snapshot is None:
            return False
        if self.ttl is None:
            return True
        return self.clock() - snapshot.loaded_at < self.ttl

    def get(self) -> RuleBook:
        snapshot = self._snapshot
        if self._is_fresh(snapshot):
            return snapshot.rule_book

        with self._lock:
            # Another thread may have loaded while we waited.
            snapshot = self._snapshot
            if self._is_fresh(snapshot):
                return snapshot.rule_book
            return self._load()

    def refresh(self) -> RuleBook:
        with self._lock:
            return self._load()

    def invalidate(self):
        self._snapshot = None
        logger.info("Rule book cache invalidated")

    def replace(self, rule_book: RuleBook):
        self._snapshot = _Snapshot(rule_book=rule_book, loaded_at=self.clock())

    @property
    def loaded_at(self) -> Optional[float]:
        snapshot = self._snapshot
        return snapshot.loaded_at if snapshot else None

    def _load(self) -> RuleBook:
        rule_book = self.loader()
        self._snapshot = _Snapshot(rule_book=rule_book, loaded_at=self.clock())
        logger.info("Rule book cached: %d categories", len(rule_book))
        return rule_book
