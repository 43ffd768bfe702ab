"""The open items service: cached listing, refresh coalescing and activation."""

import asyncio
import logging
from typing import Callable, Iterable, Optional, Set, Tuple

from .activation import ActivationResolver
from .cache import InFlightRegistry, SelectionCache, UnifiedRecord
from .capabilities import ttl_for_selection
from .config import Config
from .exceptions import RefreshError
from .orchestrator import SourceOrchestrator
from .reconciler import reconcile
from .selection import build_selection_key, normalize_selection
from .sources import default_adapters
from .utils import AppleScriptExecutor

logger = logging.getLogger(__name__)


class OpenItemsService:
    """
    Stale-while-revalidate view of every open tab, window and document.

    One instance owns the cache, the in-flight refresh table and the
    activation resolver; construct it once and pass it to callers. All
    methods must run on the same event loop.
    """

    def __init__(
        self,
        orchestrator: SourceOrchestrator,
        config: Optional[Config] = None,
        cache: Optional[SelectionCache] = None,
        registry: Optional[InFlightRegistry] = None,
        defer_refresh: Optional[Callable[[], bool]] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        """
        Initialize the service.

        Args:
            orchestrator: Fan-out over the source adapters
            config: Configuration (defaults to the environment)
            cache: Selection cache (built from config and clock when omitted)
            registry: In-flight refresh table
            defer_refresh: Returns True while background refreshes should wait
                (e.g. while the user is typing a query)
            clock: Monotonic time source for TTL checks
        """
        self.config = config or Config()
        self.orchestrator = orchestrator
        self.cache = cache or SelectionCache(
            max_selections=self.config.cache_max_selections, clock=clock
        )
        self.registry = registry or InFlightRegistry()
        self.defer_refresh = defer_refresh
        self.resolver = ActivationResolver(
            orchestrator=orchestrator,
            fetch_fresh=self.refresh,
            invalidate=self.invalidate,
        )
        # Strong references to fire-and-forget refreshes
        self._background: Set["asyncio.Task[Tuple[UnifiedRecord, ...]]"] = set()

    async def list_items(self, selection: Optional[Iterable[str]] = None) -> Tuple[UnifiedRecord, ...]:
        """
        Current best-effort list of open items for a selection.

        A cached list is returned immediately, stale or not; a stale one also
        schedules a background refresh. The first request for a selection
        waits for a fetch.

        Args:
            selection: Application names to include (None or empty = all)
        """
        selection = normalize_selection(selection)
        key = build_selection_key(selection)

        entry = self.cache.get(key)
        if entry is not None:
            if self.cache.is_stale(entry):
                self._schedule_refresh(selection, key)
            else:
                logger.debug("Returning cached items for %r (instant)", key)
            return entry.records

        # A different selection evicts the previous one before fetching
        self.cache.reserve(key)
        logger.debug("No cache for %r, fetching synchronously", key)
        return await self.registry.run(key, lambda: self._fetch_and_store(selection, key))

    async def refresh(self, selection: Optional[Iterable[str]] = None) -> Tuple[UnifiedRecord, ...]:
        """
        Fetch fresh data now, bypassing the cache (joins a running refresh).

        The result is written to the cache on success.
        """
        selection = normalize_selection(selection)
        key = build_selection_key(selection)
        return await self.registry.run(key, lambda: self._fetch_and_store(selection, key))

    async def activate_item(
        self, record: UnifiedRecord, selection: Optional[Iterable[str]] = None
    ) -> bool:
        """Bring an item to the foreground; False if it cannot be found or activated."""
        return await self.resolver.activate(record, selection)

    def invalidate(self) -> None:
        """Forget cached lists so the next list_items call fetches synchronously."""
        self.cache.invalidate()

    def prewarm(self) -> None:
        """Start fetching the "all" selection in the background."""
        self._schedule_refresh((), build_selection_key(()), force=True)

    async def close(self) -> None:
        """Wait for outstanding background refreshes."""
        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)

    def _schedule_refresh(self, selection, key: str, force: bool = False) -> None:
        if self.registry.is_running(key):
            logger.debug("Cache stale for %r, refresh already running", key)
            return
        if not force and self.defer_refresh is not None and self.defer_refresh():
            logger.debug("Cache stale for %r but refresh deferred", key)
            return

        logger.debug("Cache stale for %r, triggering background refresh", key)
        task = self.registry.start(key, lambda: self._fetch_and_store(selection, key))
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _fetch_and_store(self, selection, key: str) -> Tuple[UnifiedRecord, ...]:
        """
        One refresh: fan out, reconcile, store.

        A failed refresh returns an empty list and leaves any cached entry
        untouched, so later reads keep getting the last good list.
        """
        try:
            results = await self.orchestrator.fetch(selection)
            records = reconcile(results)
        except RefreshError as e:
            logger.error("Refresh for %r failed, keeping cached items: %s", key, e)
            return ()
        except Exception:
            logger.exception("Error fetching items for %r", key)
            return ()

        ttl = ttl_for_selection(selection, self.config)
        entry = self.cache.store(key, records, ttl)
        logger.info("Cache updated for %r: %d items (ttl %.0fs)", key, len(records), ttl)
        return entry.records


def build_service(
    config: Optional[Config] = None,
    executor: Optional[AppleScriptExecutor] = None,
    defer_refresh: Optional[Callable[[], bool]] = None,
) -> OpenItemsService:
    """Wire the service with the standard adapters."""
    config = config or Config()
    orchestrator = SourceOrchestrator(default_adapters(config, executor))
    return OpenItemsService(orchestrator, config=config, defer_refresh=defer_refresh)
