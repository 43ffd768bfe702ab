"""Dedicated tab sources for scriptable browsers."""

import logging
from typing import List, Optional

from ..cache.models import KIND_TAB, RawRecord, UnifiedRecord
from ..utils import AppleScriptExecutor, escape_applescript_string, validate_positive_int
from .base import SelectionContext, SourceAdapter, parse_delimited_records

logger = logging.getLogger(__name__)

# Browsers sharing the Chromium scripting dictionary (windows -> tabs, title, URL)
CHROMIUM_BROWSERS = ("Google Chrome", "Brave Browser", "Arc", "Comet")


def _tab_listing_script(app_name: str, title_property: str) -> str:
    """
    Script listing every tab as "title|||url|||window|||tab", one per line.

    Returns "" without launching the browser when it is not running.
    """
    app = escape_applescript_string(app_name)
    return f'''
    if application "{app}" is not running then return ""
    tell application "{app}"
        set tabData to ""
        set windowIndex to 1
        repeat with w in windows
            set tabIndex to 1
            repeat with t in tabs of w
                -- Use ||| as delimiter to avoid parsing issues with commas in titles/URLs
                if tabData is not "" then
                    set tabData to tabData & linefeed
                end if
                set tabData to tabData & ({title_property} of t) & "|||" & (URL of t) & "|||" & (windowIndex as text) & "|||" & (tabIndex as text)
                set tabIndex to tabIndex + 1
            end repeat
            set windowIndex to windowIndex + 1
        end repeat
        return tabData
    end tell
    '''


class ChromiumBrowserAdapter(SourceAdapter):
    """Tabs of one Chromium-family browser."""

    def __init__(
        self,
        app_name: str,
        timeout: float = 30.0,
        executor: Optional[AppleScriptExecutor] = None,
        activation_timeout: float = 10.0,
    ):
        super().__init__(
            name=app_name,
            owned_apps=[app_name],
            timeout=timeout,
            executor=executor,
            activation_timeout=activation_timeout,
        )
        self.app_name = app_name

    async def fetch_records(self, context: SelectionContext) -> List[RawRecord]:
        output = await self.run_script(_tab_listing_script(self.app_name, "title"))
        return parse_delimited_records(output, self.app_name, kind=KIND_TAB, require_url=True)

    async def activate(self, record: UnifiedRecord) -> bool:
        """
        Switch to a tab, verifying its URL when one is known.

        If the tab at the stored position shows a different URL, every
        window is searched for the URL before giving up.
        """
        window_index = validate_positive_int(record.window_index)
        tab_index = validate_positive_int(record.tab_index)
        if window_index is None or tab_index is None:
            logger.error(
                "Invalid window/tab index: window=%r, tab=%r", record.window_index, record.tab_index
            )
            return False

        logger.info("Activating %s tab: window %d, tab %d", self.app_name, window_index, tab_index)
        app = escape_applescript_string(self.app_name)
        target_url = escape_applescript_string(record.url or "")
        script = f'''
        tell application "{app}"
            activate
            delay 0.2
            set targetUrl to "{target_url}"

            try
                if targetUrl is not "" then
                    set t to tab {tab_index} of window {window_index}
                    if URL of t is targetUrl then
                        set active tab index of window {window_index} to {tab_index}
                        set index of window {window_index} to 1
                        return "success"
                    end if
                else
                    set active tab index of window {window_index} to {tab_index}
                    set index of window {window_index} to 1
                    return "success"
                end if
            end try

            if targetUrl is not "" then
                set winCount to count of windows
                repeat with i from 1 to winCount
                    set w to window i
                    set tabCount to count of tabs of w
                    repeat with j from 1 to tabCount
                        if URL of (tab j of w) is targetUrl then
                            set active tab index of window i to j
                            set index of window i to 1
                            return "success_search"
                        end if
                    end repeat
                end repeat
            end if

            return "failed"
        end tell
        '''
        return await self.run_activation(script)


class SafariAdapter(SourceAdapter):
    """Tabs of Safari."""

    def __init__(
        self,
        timeout: float = 30.0,
        executor: Optional[AppleScriptExecutor] = None,
        activation_timeout: float = 10.0,
    ):
        super().__init__(
            name="Safari",
            owned_apps=["Safari"],
            timeout=timeout,
            executor=executor,
            activation_timeout=activation_timeout,
        )

    async def fetch_records(self, context: SelectionContext) -> List[RawRecord]:
        output = await self.run_script(_tab_listing_script("Safari", "name"))
        return parse_delimited_records(output, "Safari", kind=KIND_TAB, require_url=True)

    async def activate(self, record: UnifiedRecord) -> bool:
        window_index = validate_positive_int(record.window_index)
        tab_index = validate_positive_int(record.tab_index)
        if window_index is None or tab_index is None:
            logger.error(
                "Invalid window/tab index: window=%r, tab=%r", record.window_index, record.tab_index
            )
            return False

        logger.info("Activating Safari tab: window %d, tab %d", window_index, tab_index)
        target_url = escape_applescript_string(record.url or "")
        script = f'''
        tell application "Safari"
            activate
            delay 0.2
            try
                set t to tab {tab_index} of window {window_index}
                if "{target_url}" is not "" and URL of t is not "{target_url}" then
                    return "failed"
                end if
                tell window {window_index} to set current tab to t
                set index of window {window_index} to 1
                return "success"
            on error
                return "failed"
            end try
        end tell
        '''
        return await self.run_activation(script)
