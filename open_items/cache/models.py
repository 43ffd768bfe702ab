"""Data models for enumerated items and cache storage."""

from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional, Tuple

from ..capabilities import CapabilityProfile, UNIVERSAL_PROFILE, lookup
from ..selection import canonical_app_name

KIND_TAB = "tab"
KIND_WINDOW = "window"
KIND_DOCUMENT = "document"
ITEM_KINDS = (KIND_TAB, KIND_WINDOW, KIND_DOCUMENT)


@dataclass(frozen=True)
class RawRecord:
    """One item as reported by a source adapter."""
    title: str
    source_label: str
    url: Optional[str] = None
    window_index: Optional[int] = None
    tab_index: Optional[int] = None
    kind: str = KIND_TAB


@dataclass(frozen=True)
class UnifiedRecord:
    """
    A raw record enriched with its application's capability profile.

    Positional handles (window_index, tab_index) are 1-based and only
    meaningful inside the owning application; they go stale as the user
    opens, closes and reorders tabs.
    """
    title: str
    source_label: str
    url: Optional[str] = None
    window_index: Optional[int] = None
    tab_index: Optional[int] = None
    kind: str = KIND_TAB
    capability: CapabilityProfile = UNIVERSAL_PROFILE
    source: str = ""

    @classmethod
    def from_raw(cls, raw: RawRecord, source: str = "") -> "UnifiedRecord":
        return cls(
            title=raw.title,
            source_label=raw.source_label,
            url=raw.url or None,
            window_index=raw.window_index,
            tab_index=raw.tab_index,
            kind=raw.kind,
            capability=lookup(raw.source_label),
            source=source,
        )

    def identity(self) -> Tuple[str, str, int, int]:
        """Deduplication key: (application, title, window, tab), missing indices count as 1."""
        return (
            canonical_app_name(self.source_label),
            self.title,
            self.window_index or 1,
            self.tab_index or 1,
        )

    def retarget(self, fresh: "UnifiedRecord") -> "UnifiedRecord":
        """Copy of this record pointing at the position of a freshly fetched match."""
        return replace(
            self,
            source_label=fresh.source_label,
            window_index=fresh.window_index,
            tab_index=fresh.tab_index,
            url=fresh.url or self.url,
            title=fresh.title or self.title,
            kind=fresh.kind,
            capability=fresh.capability,
            source=fresh.source or self.source,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "source_label": self.source_label,
            "url": self.url,
            "window_index": self.window_index,
            "tab_index": self.tab_index,
            "kind": self.kind,
            "capability": self.capability.to_dict(),
            "source": self.source,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UnifiedRecord":
        """
        Rebuild a record sent back by a client.

        Indices are passed through untouched; activation validates them.
        """
        label = str(data.get("source_label") or data.get("app") or "")
        kind = data.get("kind") or KIND_TAB
        return cls(
            title=str(data.get("title") or ""),
            source_label=label,
            url=data.get("url") or None,
            window_index=data.get("window_index"),
            tab_index=data.get("tab_index"),
            kind=kind if kind in ITEM_KINDS else KIND_TAB,
            capability=lookup(label),
            source=str(data.get("source") or ""),
        )


@dataclass
class CacheEntry:
    """
    The unified list for one selection, with the time it was fetched.

    records is a tuple, so the list handed to callers cannot be changed in place.
    """
    selection_key: str
    records: Tuple[UnifiedRecord, ...]
    fetched_at: float
    ttl: float

    def age(self, now: float) -> float:
        return now - self.fetched_at

    def is_stale(self, now: float) -> bool:
        return self.age(now) > self.ttl
