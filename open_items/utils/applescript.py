"""AppleScript execution utilities."""

import asyncio
import logging
from typing import Any, Optional, Tuple

from ..exceptions import AppleScriptError

logger = logging.getLogger(__name__)


def escape_applescript_string(text: str) -> str:
    """
    Escape special characters for AppleScript string literals.

    Args:
        text: String to escape

    Returns:
        Escaped string safe for use in AppleScript
    """
    if not isinstance(text, str):
        return ""
    # Escape backslashes first (must be first)
    text = text.replace("\\", "\\\\")
    # Escape double quotes
    text = text.replace('"', '\\"')
    # Escape newlines
    text = text.replace("\n", "\\n")
    # Escape carriage returns
    text = text.replace("\r", "\\r")
    # Escape tabs
    text = text.replace("\t", "\\t")
    return text


def validate_positive_int(value: Any) -> Optional[int]:
    """
    Coerce a window/tab index to a positive integer.

    Args:
        value: Index as received (int, numeric string, or anything else)

    Returns:
        The index as an int, or None if it is not a positive integer
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 1 else None
    if isinstance(value, str):
        value = value.strip()
        if not value.isdigit():
            return None
        number = int(value)
        return number if number >= 1 else None
    return None


class AppleScriptExecutor:
    """Centralized osascript execution on the event loop with standardized error handling."""

    def __init__(self, binary: str = "osascript"):
        """
        Initialize the AppleScript executor.

        Args:
            binary: Interpreter to invoke (overridable for tests)
        """
        self.binary = binary

    async def execute(
        self,
        script: str,
        timeout: float = 10.0,
        language: Optional[str] = None,
        check: bool = False,
    ) -> Tuple[bool, Optional[str], Optional[str]]:
        """
        Execute an AppleScript (or JavaScript for Automation) snippet.

        Args:
            script: Script source passed with -e
            timeout: Seconds before the process is killed
            language: Optional OSA language, e.g. "JavaScript"
            check: If True, raise AppleScriptError instead of returning a failure

        Returns:
            Tuple of (success, stdout, stderr)
            - success: True if return code is 0, False otherwise
            - stdout: Standard output (None if empty)
            - stderr: Standard error (None if empty)
        """
        args = [self.binary]
        if language:
            args += ["-l", language]
        args += ["-e", script]

        try:
            process = await asyncio.create_subprocess_exec(
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            return self._fail(f"could not start {self.binary}: {e}", check)

        try:
            raw_out, raw_err = await asyncio.wait_for(process.communicate(), timeout)
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            return self._fail(f"{self.binary} timed out after {timeout}s", check)

        stdout = raw_out.decode("utf-8", errors="replace").strip() or None
        stderr = raw_err.decode("utf-8", errors="replace").strip() or None
        success = process.returncode == 0

        if not success and check:
            raise AppleScriptError(stderr or f"{self.binary} exited with {process.returncode}")
        return success, stdout, stderr

    @staticmethod
    def _fail(message: str, check: bool) -> Tuple[bool, Optional[str], Optional[str]]:
        if check:
            raise AppleScriptError(message)
        logger.debug("AppleScript failure: %s", message)
        return False, None, message
