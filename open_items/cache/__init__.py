"""Cache package: selection-scoped entries and in-flight refresh coalescing."""

from .cache import SelectionCache
from .inflight import InFlightRegistry
from .models import (
    CacheEntry,
    ITEM_KINDS,
    KIND_DOCUMENT,
    KIND_TAB,
    KIND_WINDOW,
    RawRecord,
    UnifiedRecord,
)

__all__ = [
    'SelectionCache',
    'InFlightRegistry',
    'CacheEntry',
    'RawRecord',
    'UnifiedRecord',
    'ITEM_KINDS',
    'KIND_TAB',
    'KIND_WINDOW',
    'KIND_DOCUMENT',
]
