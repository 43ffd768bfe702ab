"""Concurrent fan-out to every source adapter that applies to a selection."""

import asyncio
import logging
from typing import Iterable, List, Optional

from .selection import build_selection_key, normalize_selection
from .sources.base import SelectionContext, SourceAdapter, SourceResult

logger = logging.getLogger(__name__)


class SourceOrchestrator:
    """
    Runs all applicable adapters in parallel and collects their results.

    Adapters are kept dedicated-first, universal fallback last. A failing
    adapter contributes an empty, failed result; the others are unaffected.
    """

    def __init__(self, adapters: Iterable[SourceAdapter]):
        adapters = list(adapters)
        self.adapters: List[SourceAdapter] = (
            [adapter for adapter in adapters if adapter.dedicated]
            + [adapter for adapter in adapters if not adapter.dedicated]
        )

    def build_context(self, selection: Optional[Iterable[str]]) -> SelectionContext:
        """
        Describe a selection for the adapters.

        covered_apps lists every app (with aliases) a dedicated adapter will
        enumerate, so the universal adapter can leave those apps out.
        """
        apps = normalize_selection(selection)
        context = SelectionContext(apps=apps, key=build_selection_key(apps))
        covered = set()
        for adapter in self.adapters:
            if adapter.dedicated and adapter.is_applicable(context):
                covered |= adapter.identities()
        return SelectionContext(apps=apps, key=context.key, covered_apps=frozenset(covered))

    def applicable(self, context: SelectionContext) -> List[SourceAdapter]:
        return [adapter for adapter in self.adapters if adapter.is_applicable(context)]

    async def fetch(self, selection: Optional[Iterable[str]] = None) -> List[SourceResult]:
        """
        Query every applicable adapter concurrently and wait for all of them.

        Returns:
            One SourceResult per applicable adapter, in adapter order
        """
        context = self.build_context(selection)
        adapters = self.applicable(context)
        logger.debug(
            "Fetching %r from %s", context.key, ", ".join(adapter.name for adapter in adapters)
        )

        outcomes = await asyncio.gather(
            *(adapter.fetch(context, adapter.timeout) for adapter in adapters),
            return_exceptions=True,
        )

        results: List[SourceResult] = []
        for adapter, outcome in zip(adapters, outcomes):
            if isinstance(outcome, BaseException):
                if isinstance(outcome, asyncio.CancelledError):
                    raise outcome
                # fetch() should never raise; keep the other adapters' results anyway
                logger.error("%s raised past its boundary: %r", adapter.name, outcome)
                outcome = SourceResult(
                    adapter=adapter.name,
                    error=f"{type(outcome).__name__}: {outcome}",
                    dedicated=adapter.dedicated,
                )
            results.append(outcome)

        failed = [result.adapter for result in results if not result.ok]
        total = sum(len(result.records) for result in results)
        logger.info(
            "Fetched %d items for %r from %d sources (%d failed%s)",
            total,
            context.key,
            len(results),
            len(failed),
            f": {', '.join(failed)}" if failed else "",
        )
        return results

    def adapter_for(self, source_label: Optional[str]) -> Optional[SourceAdapter]:
        """
        The adapter responsible for activating items of an application.

        The dedicated owner wins; otherwise the first universal adapter.
        """
        for adapter in self.adapters:
            if adapter.dedicated and adapter.owns(source_label):
                return adapter
        for adapter in self.adapters:
            if not adapter.dedicated:
                return adapter
        return None
