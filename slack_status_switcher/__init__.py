"""Slack Status Switcher - set one status on every Slack workspace at once."""

from .client import AsyncSlackStatusClient, SlackStatusClient
from .coordinator import StatusCoordinator
from .exceptions import (
    StatusSwitcherError,
    RemoteError,
    TransportError,
    ProtocolError,
    StoreError,
    ValidationError,
    BroadcastInProgressError,
)
from .models import (
    StatusPreset,
    WorkspaceCredential,
    UpdateSuccess,
    UpdateFailure,
    StatusUpdateOutcome,
    RemoteProfile,
    ApplyPreset,
    ClearStatus,
    BroadcastOperation,
    DEFAULT_PRESETS,
)

__version__ = "1.0.0"
__all__ = [
    "SlackStatusClient",
    "AsyncSlackStatusClient",
    "StatusCoordinator",
    "StatusSwitcherError",
    "RemoteError",
    "TransportError",
    "ProtocolError",
    "StoreError",
    "ValidationError",
    "BroadcastInProgressError",
    "StatusPreset",
    "WorkspaceCredential",
    "UpdateSuccess",
    "UpdateFailure",
    "StatusUpdateOutcome",
    "RemoteProfile",
    "ApplyPreset",
    "ClearStatus",
    "BroadcastOperation",
    "DEFAULT_PRESETS",
]
