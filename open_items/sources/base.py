"""Base class and shared types for source adapters."""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, List, Optional, Tuple

from ..cache.models import KIND_TAB, RawRecord, UnifiedRecord
from ..exceptions import (
    AdapterError,
    AdapterMalformedOutputError,
    AdapterTimeoutError,
    AppleScriptError,
)
from ..selection import app_identities, is_app_selected, normalize_app_name
from ..utils import AppleScriptExecutor

logger = logging.getLogger(__name__)

FIELD_SEPARATOR = "|||"


@dataclass(frozen=True)
class SelectionContext:
    """What an adapter is asked to enumerate."""
    apps: Tuple[str, ...] = ()
    key: str = ""
    # Normalized app names (aliases included) already covered by a dedicated adapter
    covered_apps: FrozenSet[str] = frozenset()

    @property
    def is_all(self) -> bool:
        return not self.apps

    def includes(self, app_name: Optional[str]) -> bool:
        return is_app_selected(app_name, self.apps)

    def is_covered(self, app_name: Optional[str]) -> bool:
        return normalize_app_name(app_name) in self.covered_apps


@dataclass
class SourceResult:
    """Outcome of one adapter call; failed calls carry an empty record list."""
    adapter: str
    records: List[UnifiedRecord] = field(default_factory=list)
    error: Optional[str] = None
    dedicated: bool = True

    @property
    def ok(self) -> bool:
        return self.error is None


class SourceAdapter(ABC):
    """
    Abstract base class for item sources.

    Subclasses implement fetch_records() and activate(); fetch_records may
    raise. fetch() is the boundary the orchestrator calls: it applies the
    timeout and turns every failure into an empty, failed SourceResult.
    """

    #: Dedicated adapters win over the universal fallback when both report an item
    dedicated: bool = True

    def __init__(
        self,
        name: str,
        owned_apps: Iterable[str] = (),
        timeout: float = 10.0,
        executor: Optional[AppleScriptExecutor] = None,
        activation_timeout: float = 10.0,
    ):
        self.name = name
        self.owned_apps = tuple(owned_apps)
        self.timeout = timeout
        self.activation_timeout = activation_timeout
        self.executor = executor or AppleScriptExecutor()

    @abstractmethod
    async def fetch_records(self, context: SelectionContext) -> List[RawRecord]:
        """
        Enumerate items for a selection.

        Returns:
            Raw records; may raise on any failure
        """
        pass

    @abstractmethod
    async def activate(self, record: UnifiedRecord) -> bool:
        """
        Bring a specific item to the foreground.

        Returns:
            True if successful, False on any failure (never raises)
        """
        pass

    def identities(self) -> FrozenSet[str]:
        """Normalized names (with aliases) of every app this adapter owns."""
        names = set()
        for app in self.owned_apps:
            names |= app_identities(app)
        return frozenset(names)

    def owns(self, app_name: Optional[str]) -> bool:
        return normalize_app_name(app_name) in self.identities()

    def is_applicable(self, context: SelectionContext) -> bool:
        return any(context.includes(app) for app in self.owned_apps)

    async def fetch(self, context: SelectionContext, timeout: Optional[float] = None) -> SourceResult:
        """
        Fetch records within a timeout, never raising.

        Args:
            context: Selection being refreshed
            timeout: Seconds allowed (defaults to the adapter's own timeout)
        """
        limit = timeout if timeout is not None else self.timeout
        try:
            try:
                raw = await asyncio.wait_for(self.fetch_records(context), limit)
            except asyncio.TimeoutError:
                raise AdapterTimeoutError(f"no answer within {limit}s")
            records = [UnifiedRecord.from_raw(item, source=self.name) for item in raw]
        except (AdapterError, AppleScriptError) as e:
            logger.warning("%s: %s: %s", self.name, type(e).__name__, e)
            return SourceResult(adapter=self.name, error=f"{type(e).__name__}: {e}", dedicated=self.dedicated)
        except Exception as e:
            logger.exception("%s: unexpected error while fetching", self.name)
            return SourceResult(adapter=self.name, error=f"{type(e).__name__}: {e}", dedicated=self.dedicated)

        logger.info("%s: found %d items", self.name, len(records))
        return SourceResult(adapter=self.name, records=records, dedicated=self.dedicated)

    async def run_script(self, script: str, timeout: Optional[float] = None, language: Optional[str] = None) -> str:
        """
        Run an enumeration script and return its stdout ("" when empty).

        Raises:
            AdapterError: if the script fails or times out
        """
        success, stdout, stderr = await self.executor.execute(
            script, timeout=timeout or self.timeout, language=language
        )
        if not success:
            raise AdapterError(stderr or "script failed")
        if stderr:
            logger.debug("%s: script stderr: %s", self.name, stderr)
        return stdout or ""

    async def run_activation(self, script: str) -> bool:
        """Run an activation script; success unless it fails or reports "failed"."""
        try:
            success, stdout, stderr = await self.executor.execute(script, timeout=self.activation_timeout)
        except Exception:
            logger.exception("%s: activation script crashed", self.name)
            return False
        if not success:
            logger.warning("%s: activation error: %s", self.name, stderr)
            return False
        if (stdout or "").strip() == "failed":
            logger.warning("%s: could not find the item to activate", self.name)
            return False
        return True


def parse_delimited_records(
    output: str,
    source_label: str,
    kind: str = KIND_TAB,
    require_url: bool = False,
) -> List[RawRecord]:
    """
    Parse linefeed-separated "title|||url|||window|||tab[|||app]" lines.

    Lines with too few fields, an empty title or non-numeric indices are
    skipped. Output that is not empty but yields no record at all is
    treated as malformed.

    Raises:
        AdapterMalformedOutputError: if nothing in a non-empty output parses
    """
    records = []
    lines = [line.strip() for line in output.strip().split("\n") if line.strip()]
    for line_num, line in enumerate(lines, 1):
        parts = [part.strip() for part in line.split(FIELD_SEPARATOR)]
        if len(parts) < 4:
            logger.debug("%s: skipping line %d with %d fields", source_label, line_num, len(parts))
            continue
        title, url, window_text, tab_text = parts[:4]
        label = parts[4] if len(parts) > 4 and parts[4] else source_label
        if not title or (require_url and not url):
            continue
        try:
            window_index = int(window_text)
            tab_index = int(tab_text)
        except ValueError:
            logger.debug("%s: skipping line %d with bad indices", source_label, line_num)
            continue
        records.append(RawRecord(
            title=title,
            source_label=label,
            url=url or None,
            window_index=window_index,
            tab_index=tab_index,
            kind=kind,
        ))

    if lines and not records:
        raise AdapterMalformedOutputError(f"could not parse output: {output[:200]!r}")
    return records
