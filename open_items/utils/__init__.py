"""Utility modules for the open items index."""

from .applescript import AppleScriptExecutor, escape_applescript_string, validate_positive_int

__all__ = ["AppleScriptExecutor", "escape_applescript_string", "validate_positive_int"]
