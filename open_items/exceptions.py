"""Custom exception classes for the open items index."""


class OpenItemsError(Exception):
    """Base exception for open items errors."""
    pass


class AdapterError(OpenItemsError):
    """Exception raised when a source adapter cannot enumerate its items."""
    pass


class AdapterTimeoutError(AdapterError):
    """Exception raised when a source adapter exceeds its timeout."""
    pass


class AdapterMalformedOutputError(AdapterError):
    """Exception raised when a source adapter returns output that cannot be parsed."""
    pass


class RefreshError(OpenItemsError):
    """Exception raised when a refresh produced nothing usable (every adapter failed)."""
    pass


class ActivationError(OpenItemsError):
    """Exception raised for item activation errors."""
    pass


class InvalidActivationTargetError(ActivationError):
    """Exception raised when an activation target has non-positive or non-numeric indices."""
    pass


class ActivationNotFoundError(ActivationError):
    """Exception raised when a moved item cannot be found in fresh data."""
    pass


class AppleScriptError(OpenItemsError):
    """Exception raised for AppleScript execution errors."""
    pass
