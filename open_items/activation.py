"""Activation of a previously seen item, re-resolving it when it has moved."""

import logging
from typing import Awaitable, Callable, Iterable, Optional, Sequence

from .cache.models import UnifiedRecord
from .exceptions import ActivationError, ActivationNotFoundError, InvalidActivationTargetError
from .matching import find_matching_record
from .orchestrator import SourceOrchestrator
from .utils import validate_positive_int

logger = logging.getLogger(__name__)

FreshFetch = Callable[[Optional[Iterable[str]]], Awaitable[Sequence[UnifiedRecord]]]

# Resolver states, used in log messages
ATTEMPT_DIRECT = "ATTEMPT_DIRECT"
RESOLVE = "RESOLVE"
RETRY_DIRECT = "RETRY_DIRECT"
DONE = "DONE"
FAILED = "FAILED"


class ActivationResolver:
    """
    Brings an item to the foreground, tolerating shifted indices.

    ATTEMPT_DIRECT uses the stored position. If that fails, RESOLVE fetches
    fresh data (bypassing the cache), finds the best match and RETRY_DIRECT
    tries once more at the match's position. Every failed attempt
    invalidates the cache, since the cached positions can no longer be
    trusted.
    """

    def __init__(
        self,
        orchestrator: SourceOrchestrator,
        fetch_fresh: FreshFetch,
        invalidate: Callable[[], None],
    ):
        """
        Initialize the resolver.

        Args:
            orchestrator: Source of the adapter that owns each item
            fetch_fresh: Coroutine returning a fresh unified list for a selection
            invalidate: Drops cached lists after a failed activation
        """
        self.orchestrator = orchestrator
        self.fetch_fresh = fetch_fresh
        self.invalidate = invalidate

    async def activate(self, record: UnifiedRecord, selection: Optional[Iterable[str]] = None) -> bool:
        """
        Activate an item.

        Args:
            record: The item as previously listed
            selection: Selection the item was listed under (None = all apps)

        Returns:
            True once the item is frontmost, False otherwise (never raises)
        """
        try:
            self._validate(record)
        except InvalidActivationTargetError as e:
            logger.error("%s: %s", FAILED, e)
            return False

        try:
            if await self._attempt(ATTEMPT_DIRECT, record):
                return True
            match = await self._resolve(record, selection)
            return await self._attempt(RETRY_DIRECT, record.retarget(match))
        except ActivationError as e:
            logger.warning("%s: %s", FAILED, e)
            return False
        except Exception:
            logger.exception("%s: unexpected error activating %r", FAILED, record.title)
            return False

    @staticmethod
    def _validate(record: UnifiedRecord) -> None:
        """Reject targets whose indices are not positive integers before any script runs."""
        if record is None:
            raise InvalidActivationTargetError("no item given")
        window_index = validate_positive_int(record.window_index)
        tab_index = validate_positive_int(record.tab_index)
        if window_index is None or tab_index is None:
            raise InvalidActivationTargetError(
                f"invalid window/tab index: window={record.window_index!r}, tab={record.tab_index!r}"
            )

    async def _attempt(self, state: str, record: UnifiedRecord) -> bool:
        self._validate(record)
        adapter = self.orchestrator.adapter_for(record.source_label)
        if adapter is None:
            raise ActivationError(f"no adapter can activate items of {record.source_label!r}")

        logger.debug(
            "%s: %s window %r tab %r via %s",
            state, record.source_label, record.window_index, record.tab_index, adapter.name,
        )
        if await adapter.activate(record):
            logger.info("%s: activated %s item %r", DONE, record.source_label, record.title)
            return True

        logger.info("%s failed for %s item %r", state, record.source_label, record.title)
        self.invalidate()
        return False

    async def _resolve(
        self, record: UnifiedRecord, selection: Optional[Iterable[str]]
    ) -> UnifiedRecord:
        fresh = await self.fetch_fresh(selection)
        match = find_matching_record(record, fresh)
        if match is None:
            raise ActivationNotFoundError(
                f"{record.source_label} item {record.title!r} not found among {len(fresh)} fresh items"
            )
        logger.debug(
            "%s: %r moved to window %r tab %r",
            RESOLVE, record.title, match.window_index, match.tab_index,
        )
        return match
