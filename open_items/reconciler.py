"""Merging of adapter results into one duplicate-free list."""

import logging
from typing import Iterable, List, Sequence

from .cache.models import UnifiedRecord
from .exceptions import RefreshError
from .sources.base import SourceResult

logger = logging.getLogger(__name__)


def deduplicate(records: Iterable[UnifiedRecord]) -> List[UnifiedRecord]:
    """
    Drop repeated items, keeping the first copy.

    Two records are the same item when they share application (alias-aware),
    title, window index and tab index, missing indices counting as 1.
    """
    seen = set()
    deduplicated = []
    for record in records:
        key = record.identity()
        if key not in seen:
            seen.add(key)
            deduplicated.append(record)
    return deduplicated


def reconcile(results: Sequence[SourceResult]) -> List[UnifiedRecord]:
    """
    Merge per-adapter results into the unified list.

    Dedicated adapters are merged before the universal fallback so their copy
    of an overlapping item wins. Within each group adapter order and the
    adapters' own item order are preserved; nothing is sorted.

    Raises:
        RefreshError: if there were adapters to ask and every one of them failed
    """
    if results and not any(result.ok for result in results):
        raise RefreshError(
            "all sources failed: " + "; ".join(f"{r.adapter} ({r.error})" for r in results)
        )

    ordered = [result for result in results if result.dedicated]
    ordered += [result for result in results if not result.dedicated]

    merged: List[UnifiedRecord] = []
    for result in ordered:
        merged.extend(result.records)

    unified = deduplicate(merged)
    if len(unified) != len(merged):
        logger.debug("Dropped %d duplicate items", len(merged) - len(unified))
    return unified
