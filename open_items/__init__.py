"""Unified, cached index of open browser tabs, windows and documents."""

from .cache import RawRecord, UnifiedRecord
from .capabilities import CapabilityProfile, lookup
from .selection import build_selection_key, is_app_selected
from .service import OpenItemsService, build_service

__all__ = [
    "OpenItemsService",
    "build_service",
    "RawRecord",
    "UnifiedRecord",
    "CapabilityProfile",
    "lookup",
    "build_selection_key",
    "is_app_selected",
]
