"""Slack Status Switcher exception classes."""

class StatusSwitcherError(Exception):
    """Base exception for all Slack Status Switcher errors."""
    pass


class RemoteError(StatusSwitcherError):
    """Raised when a call to the Slack profile API fails."""
    pass


class TransportError(RemoteError):
    """Raised when the request never got a response."""
    pass


class ProtocolError(RemoteError):
    """Raised when Slack answers with ok=false or an unreadable body."""
    
    def __init__(self, message: str, error_code: str = None, status_code: int = None):
        super().__init__(message)
        self.error_code = error_code
        self.status_code = status_code


class StoreError(StatusSwitcherError):
    """Raised when the keyring or the preferences file cannot be read or written."""
    pass


class ValidationError(StatusSwitcherError):
    """Raised when input validation fails."""
    pass


class BroadcastInProgressError(StatusSwitcherError):
    """Raised when a broadcast is started while another one is still updating."""
    pass
