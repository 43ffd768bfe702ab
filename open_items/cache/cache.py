"""Selection-scoped cache of unified item lists."""

import logging
import time
from collections import OrderedDict
from typing import Callable, Iterable, List, Optional

from .models import CacheEntry, UnifiedRecord

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class SelectionCache:
    """
    Holds the most recent unified list per selection key.

    Entries never expire on read: a stale entry is still returned and the
    caller decides whether to refresh it. With max_selections=1 the cache is a
    single slot and asking for a different selection evicts the previous one.
    """

    def __init__(self, max_selections: int = 1, clock: Optional[Clock] = None):
        """
        Initialize the cache.

        Args:
            max_selections: Number of selection keys held at once (least recently used evicted first)
            clock: Monotonic time source in seconds (defaults to time.monotonic)
        """
        if max_selections < 1:
            raise ValueError(f"max_selections must be at least 1, got {max_selections}")
        self.max_selections = max_selections
        self.clock: Clock = clock or time.monotonic
        # {selection_key: CacheEntry}, least recently used first
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()

    def now(self) -> float:
        return self.clock()

    def get(self, selection_key: str) -> Optional[CacheEntry]:
        """
        Get the entry for a selection key, stale or not.

        Returns:
            CacheEntry if present, None otherwise
        """
        entry = self._entries.get(selection_key)
        if entry is None:
            return None
        self._entries.move_to_end(selection_key)
        return entry

    def is_stale(self, entry: CacheEntry) -> bool:
        return entry.is_stale(self.now())

    def reserve(self, selection_key: str) -> None:
        """
        Make room for a selection that is about to be fetched.

        Evicts least recently used entries of other selections until the new
        key fits. In single-slot mode this drops the previous selection as
        soon as a different one is requested.
        """
        if selection_key in self._entries:
            return
        while len(self._entries) >= self.max_selections:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("Evicted cached selection %r for %r", evicted, selection_key)

    def store(self, selection_key: str, records: Iterable[UnifiedRecord], ttl: float) -> CacheEntry:
        """
        Store a freshly fetched list, replacing any entry for the same key.

        Args:
            selection_key: Canonical selection key
            records: Unified, deduplicated records
            ttl: Seconds before the entry counts as stale
        """
        self.reserve(selection_key)
        entry = CacheEntry(
            selection_key=selection_key,
            records=tuple(records),
            fetched_at=self.now(),
            ttl=ttl,
        )
        self._entries[selection_key] = entry
        self._entries.move_to_end(selection_key)
        return entry

    def invalidate(self, selection_key: Optional[str] = None) -> None:
        """
        Drop one entry, or every entry when no key is given.

        In-flight refreshes are not cancelled and may repopulate the cache.
        """
        if selection_key is None:
            self._entries.clear()
            logger.debug("Cache cleared")
            return
        self._entries.pop(selection_key, None)

    def keys(self) -> List[str]:
        return list(self._entries.keys())

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, selection_key: object) -> bool:
        return selection_key in self._entries
