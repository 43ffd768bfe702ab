"""Universal window source: every titled window of every foreground app."""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..cache.models import KIND_DOCUMENT, KIND_TAB, KIND_WINDOW, RawRecord, UnifiedRecord
from ..capabilities import lookup
from ..exceptions import AdapterError, AdapterMalformedOutputError
from ..utils import AppleScriptExecutor, escape_applescript_string, validate_positive_int
from .base import SelectionContext, SourceAdapter, parse_delimited_records

logger = logging.getLogger(__name__)

IGNORED_PROCESSES = {"Window Server", "loginwindow"}

PERMISSION_MARKERS = ("Not authorized", "not allowed to send Apple events")

# Categories whose apps are asked for their open documents
DOCUMENT_CATEGORIES = {"editors", "productivity"}

_WINDOW_DISCOVERY_SCRIPT = '''
const se = Application('System Events')
const processes = se.applicationProcesses.whose({ backgroundOnly: false })
const results = []
for (let i = 0; i < processes.length; i++) {
  const p = processes[i]
  const appName = p.name()
  let windows = []
  try { windows = p.windows() } catch (e) { windows = [] }
  for (let j = 0; j < windows.length; j++) {
    let title = ''
    try { title = windows[j].name() } catch (e) { title = '' }
    if (title && title.length > 0) {
      results.push({ appName: appName, title: title, windowIndex: j + 1 })
    }
  }
}
JSON.stringify(results)
'''


def _document_listing_script(app_name: str) -> str:
    """Script listing open documents as "name|||path|||1|||position", one per line."""
    app = escape_applescript_string(app_name)
    return f'''
    if application "{app}" is not running then return ""
    tell application "{app}"
        set docData to ""
        set docIndex to 1
        repeat with d in documents
            set docPath to ""
            try
                set docPath to path of d
            end try
            if docData is not "" then
                set docData to docData & linefeed
            end if
            set docData to docData & (name of d) & "|||" & docPath & "|||1|||" & (docIndex as text)
            set docIndex to docIndex + 1
        end repeat
        return docData
    end tell
    '''


def _path_to_url(path: Optional[str]) -> Optional[str]:
    """Turn an absolute POSIX path into a file:// URL (other values pass through)."""
    if not path:
        return None
    if "://" in path:
        return path
    try:
        return Path(path).as_uri()
    except ValueError:
        return path


class UniversalWindowAdapter(SourceAdapter):
    """
    Fallback source built on System Events window discovery.

    Applies to every selection but skips apps already enumerated by a
    dedicated adapter in the same refresh.
    """

    dedicated = False

    def __init__(
        self,
        timeout: float = 5.0,
        document_timeout: float = 15.0,
        executor: Optional[AppleScriptExecutor] = None,
        activation_timeout: float = 10.0,
    ):
        super().__init__(
            name="Windows",
            owned_apps=(),
            # Discovery plus the per-app document queries that follow it
            timeout=timeout + document_timeout,
            executor=executor,
            activation_timeout=activation_timeout,
        )
        self.discovery_timeout = timeout
        self.document_timeout = document_timeout
        self._last_permission_error: Optional[str] = None

    def is_applicable(self, context: SelectionContext) -> bool:
        return True

    def owns(self, app_name: Optional[str]) -> bool:
        return True

    def permission_status(self) -> Dict[str, Any]:
        """Whether the last discovery run had the Automation/Accessibility permission."""
        return {
            "granted": self._last_permission_error is None,
            "error": self._last_permission_error,
        }

    async def fetch_records(self, context: SelectionContext) -> List[RawRecord]:
        windows = await self._discover_windows(context)

        by_app: Dict[str, List[Dict[str, Any]]] = {}
        for window in windows:
            by_app.setdefault(window["appName"], []).append(window)

        app_names = list(by_app)
        enriched = await asyncio.gather(*(self._app_records(app, by_app[app]) for app in app_names))

        records: List[RawRecord] = []
        for app_records in enriched:
            records.extend(app_records)

        logger.info("Found %d items from %d apps", len(records), len(app_names))
        return records

    async def _discover_windows(self, context: SelectionContext) -> List[Dict[str, Any]]:
        success, stdout, stderr = await self.executor.execute(
            _WINDOW_DISCOVERY_SCRIPT, timeout=self.discovery_timeout, language="JavaScript"
        )
        if not success:
            message = stderr or "window discovery failed"
            if any(marker in message for marker in PERMISSION_MARKERS):
                self._last_permission_error = message
                logger.warning("Accessibility/Automation permission missing for window discovery")
            raise AdapterError(message)

        try:
            parsed = json.loads(stdout or "[]")
        except json.JSONDecodeError as e:
            raise AdapterMalformedOutputError(f"window discovery returned invalid JSON: {e}")
        if not isinstance(parsed, list):
            raise AdapterMalformedOutputError("window discovery did not return a list")

        self._last_permission_error = None
        return [entry for entry in parsed if self._keep(entry, context)]

    @staticmethod
    def _keep(entry: Any, context: SelectionContext) -> bool:
        if not isinstance(entry, dict):
            return False
        app_name = entry.get("appName")
        title = entry.get("title")
        if not app_name or not title or app_name in IGNORED_PROCESSES:
            return False
        if context.is_covered(app_name):
            return False
        if context.is_all:
            return not str(title).startswith("Untitled")
        return context.includes(app_name)

    async def _app_records(self, app_name: str, windows: List[Dict[str, Any]]) -> List[RawRecord]:
        """Documents for document-aware apps, otherwise one record per window."""
        capability = lookup(app_name)
        if capability.supports_documents and capability.category in DOCUMENT_CATEGORIES:
            documents = await self._documents(app_name)
            if documents:
                return documents

        kind = KIND_DOCUMENT if capability.supports_documents else KIND_WINDOW
        records = []
        for position, window in enumerate(windows, 1):
            window_index = validate_positive_int(window.get("windowIndex")) or position
            records.append(RawRecord(
                title=str(window["title"]),
                source_label=app_name,
                window_index=window_index,
                tab_index=1,
                kind=kind,
            ))
        return records

    async def _documents(self, app_name: str) -> List[RawRecord]:
        """Open documents of one app; empty when the app cannot be asked."""
        try:
            output = await self.run_script(
                _document_listing_script(app_name), timeout=self.document_timeout
            )
            parsed = parse_delimited_records(output, app_name, kind=KIND_DOCUMENT)
        except AdapterError as e:
            logger.debug("No document data for %s: %s", app_name, e)
            return []
        return [
            RawRecord(
                title=record.title,
                source_label=app_name,
                url=_path_to_url(record.url),
                window_index=record.window_index,
                tab_index=record.tab_index,
                kind=KIND_DOCUMENT,
            )
            for record in parsed
        ]

    async def activate(self, record: UnifiedRecord) -> bool:
        """
        Raise a window or document of any app.

        Windows are raised by position through System Events, documents by
        title; anything else just activates the app. A window that is no
        longer there reports "failed".
        """
        if not record.source_label:
            logger.error("Cannot activate an item without an application")
            return False

        app = escape_applescript_string(record.source_label)
        window_index = validate_positive_int(record.window_index) or 1

        if record.kind == KIND_WINDOW:
            target = f"window {window_index}"
        elif record.kind in (KIND_DOCUMENT, KIND_TAB) and record.title:
            title = escape_applescript_string(record.title)
            target = f'(first window whose name contains "{title}")'
        else:
            target = ""

        raise_window = ""
        if target:
            raise_window = f'''
                try
                    perform action "AXRaise" of {target}
                on error
                    return "failed"
                end try'''

        logger.info("Activating %s %s %r", record.source_label, record.kind, record.title)
        script = f'''
        tell application "{app}" to activate
        delay 0.2
        tell application "System Events"
            tell process "{app}"
                set frontmost to true{raise_window}
            end tell
        end tell
        return "success"
        '''
        return await self.run_activation(script)
