"""Dedicated tab source for Terminal."""

import logging
from typing import List, Optional

from ..cache.models import KIND_TAB, RawRecord, UnifiedRecord
from ..utils import AppleScriptExecutor, validate_positive_int
from .base import SelectionContext, SourceAdapter, parse_delimited_records

logger = logging.getLogger(__name__)

# Tabs without a custom title are named after their foreground process
_LIST_TABS_SCRIPT = '''
if application "Terminal" is not running then return ""
tell application "Terminal"
    set tabData to ""
    set windowIndex to 1
    repeat with w in windows
        set tabIndex to 1
        repeat with t in tabs of w
            set tabTitle to custom title of t
            if tabTitle is "" then
                try
                    set tabTitle to last item of (processes of t)
                on error
                    set tabTitle to name of w
                end try
            end if
            if tabData is not "" then
                set tabData to tabData & linefeed
            end if
            set tabData to tabData & tabTitle & "|||" & "" & "|||" & (windowIndex as text) & "|||" & (tabIndex as text)
            set tabIndex to tabIndex + 1
        end repeat
        set windowIndex to windowIndex + 1
    end repeat
    return tabData
end tell
'''


class TerminalAdapter(SourceAdapter):
    """Tabs of Terminal.app."""

    def __init__(
        self,
        timeout: float = 30.0,
        executor: Optional[AppleScriptExecutor] = None,
        activation_timeout: float = 10.0,
    ):
        super().__init__(
            name="Terminal",
            owned_apps=["Terminal"],
            timeout=timeout,
            executor=executor,
            activation_timeout=activation_timeout,
        )

    async def fetch_records(self, context: SelectionContext) -> List[RawRecord]:
        output = await self.run_script(_LIST_TABS_SCRIPT)
        return parse_delimited_records(output, "Terminal", kind=KIND_TAB)

    async def activate(self, record: UnifiedRecord) -> bool:
        window_index = validate_positive_int(record.window_index)
        tab_index = validate_positive_int(record.tab_index)
        if window_index is None or tab_index is None:
            logger.error(
                "Invalid window/tab index: window=%r, tab=%r", record.window_index, record.tab_index
            )
            return False

        logger.info("Activating Terminal tab: window %d, tab %d", window_index, tab_index)
        script = f'''
        tell application "Terminal"
            activate
            delay 0.2
            try
                set selected tab of window {window_index} to tab {tab_index} of window {window_index}
                set index of window {window_index} to 1
                return "success"
            on error
                return "failed"
            end try
        end tell
        '''
        return await self.run_activation(script)
