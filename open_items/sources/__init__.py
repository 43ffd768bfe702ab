"""Source adapters: one per enumeration capability."""

from typing import List, Optional

from ..config import Config
from ..utils import AppleScriptExecutor
from .base import SelectionContext, SourceAdapter, SourceResult, parse_delimited_records
from .browsers import CHROMIUM_BROWSERS, ChromiumBrowserAdapter, SafariAdapter
from .terminal import TerminalAdapter
from .universal import UniversalWindowAdapter


def default_adapters(config: Config, executor: Optional[AppleScriptExecutor] = None) -> List[SourceAdapter]:
    """
    Build the standard adapter set, dedicated adapters first.

    Order matters: the reconciler keeps the first copy of a duplicate, so
    the universal fallback must come last.
    """
    executor = executor or AppleScriptExecutor()
    adapters: List[SourceAdapter] = [
        SafariAdapter(
            timeout=config.browser_timeout,
            executor=executor,
            activation_timeout=config.activation_timeout,
        ),
    ]
    adapters += [
        ChromiumBrowserAdapter(
            app_name,
            timeout=config.browser_timeout,
            executor=executor,
            activation_timeout=config.activation_timeout,
        )
        for app_name in CHROMIUM_BROWSERS
    ]
    adapters.append(TerminalAdapter(
        timeout=config.browser_timeout,
        executor=executor,
        activation_timeout=config.activation_timeout,
    ))
    adapters.append(UniversalWindowAdapter(
        timeout=config.window_discovery_timeout,
        document_timeout=config.document_timeout,
        executor=executor,
        activation_timeout=config.activation_timeout,
    ))
    return adapters


__all__ = [
    'SelectionContext',
    'SourceAdapter',
    'SourceResult',
    'parse_delimited_records',
    'ChromiumBrowserAdapter',
    'SafariAdapter',
    'TerminalAdapter',
    'UniversalWindowAdapter',
    'CHROMIUM_BROWSERS',
    'default_adapters',
]
