"""Fakes shared by the test modules."""

import asyncio
from typing import Callable, List, Optional, Tuple

from open_items.cache.models import RawRecord, UnifiedRecord
from open_items.config import Config
from open_items.orchestrator import SourceOrchestrator
from open_items.service import OpenItemsService
from open_items.sources.base import SelectionContext, SourceAdapter


class ManualClock:
    """Monotonic clock advanced by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeAdapter(SourceAdapter):
    """Adapter returning canned records and activation results."""

    def __init__(
        self,
        name: str,
        records: Optional[List[RawRecord]] = None,
        owned_apps: Optional[List[str]] = None,
        dedicated: bool = True,
        error: Optional[Exception] = None,
        delay: float = 0.0,
        activate_results: Optional[List[bool]] = None,
        timeout: float = 1.0,
    ):
        super().__init__(
            name=name,
            owned_apps=owned_apps if owned_apps is not None else ([name] if dedicated else []),
            timeout=timeout,
        )
        self.dedicated = dedicated
        self.records = list(records or [])
        self.error = error
        self.delay = delay
        self.activate_results = list(activate_results or [])
        self.fetch_calls = 0
        self.contexts: List[SelectionContext] = []
        self.activated: List[UnifiedRecord] = []

    def is_applicable(self, context: SelectionContext) -> bool:
        if not self.dedicated:
            return True
        return super().is_applicable(context)

    def owns(self, app_name: Optional[str]) -> bool:
        if not self.dedicated:
            return True
        return super().owns(app_name)

    async def fetch_records(self, context: SelectionContext) -> List[RawRecord]:
        self.fetch_calls += 1
        self.contexts.append(context)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return list(self.records)

    async def activate(self, record: UnifiedRecord) -> bool:
        self.activated.append(record)
        if self.activate_results:
            return self.activate_results.pop(0)
        return False


class StubExecutor:
    """Stands in for AppleScriptExecutor; a handler maps (script, language) to a result tuple."""

    def __init__(self, handler: Callable[[str, Optional[str]], Tuple[bool, Optional[str], Optional[str]]]):
        self.handler = handler
        self.calls: List[Tuple[str, Optional[str]]] = []

    async def execute(self, script, timeout=10.0, language=None, check=False):
        self.calls.append((script, language))
        return self.handler(script, language)


def tab(title: str, app: str, url: Optional[str] = None, window: int = 1, tab_index: int = 1) -> RawRecord:
    return RawRecord(title=title, source_label=app, url=url, window_index=window, tab_index=tab_index)


def make_service(adapters, clock=None, config=None, defer_refresh=None) -> OpenItemsService:
    return OpenItemsService(
        SourceOrchestrator(adapters),
        config=config or Config(),
        clock=clock or ManualClock(),
        defer_refresh=defer_refresh,
    )
