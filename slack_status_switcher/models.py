"""Slack Status Switcher data models."""

import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from .exceptions import ValidationError


def _new_id() -> str:
    return str(uuid.uuid4())


def _require_str(data: Dict[str, Any], key: str) -> str:
    value = data[key]
    if not isinstance(value, str):
        raise ValidationError(f"Invalid {key}: {value!r}")
    return value


@dataclass(frozen=True)
class StatusPreset:
    """A reusable status: Slack emoji code, display glyph, text and expiration."""
    emoji: str
    display_emoji: str
    text: str
    expiration_minutes: int = 0
    id: str = field(default_factory=_new_id)

    def __post_init__(self):
        if self.expiration_minutes < 0:
            raise ValidationError("Expiration must not be negative")

    @property
    def expiration_label(self) -> str:
        """Human readable expiration, e.g. "30 min" or "2h"."""
        if self.expiration_minutes == 0:
            return "No expiration"
        if self.expiration_minutes < 60:
            return f"{self.expiration_minutes} min"
        hours, mins = divmod(self.expiration_minutes, 60)
        return f"{hours}h {mins}m" if mins else f"{hours}h"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "emoji": self.emoji,
            "displayEmoji": self.display_emoji,
            "text": self.text,
            "expirationMinutes": self.expiration_minutes,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StatusPreset":
        try:
            expiration = data["expirationMinutes"]
            if not isinstance(expiration, int) or isinstance(expiration, bool):
                raise ValidationError(f"Invalid expiration: {expiration!r}")
            return cls(
                id=_require_str(data, "id"),
                emoji=_require_str(data, "emoji"),
                display_emoji=_require_str(data, "displayEmoji"),
                text=_require_str(data, "text"),
                expiration_minutes=expiration,
            )
        except (KeyError, TypeError) as e:
            raise ValidationError(f"Invalid preset data: {e}")


@dataclass(frozen=True)
class WorkspaceCredential:
    """A named Slack workspace and the user token that writes its profile."""
    name: str
    token: str = field(repr=False)
    id: str = field(default_factory=_new_id)

    @property
    def masked_token(self) -> str:
        """Token prefix (e.g. "xoxp-") and last 8 characters, the rest hidden."""
        prefix, sep, _ = self.token.partition("-")
        return f"{prefix}{sep}••••{self.token[-8:]}" if sep else f"••••{self.token[-8:]}"

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "token": self.token}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WorkspaceCredential":
        try:
            return cls(
                id=_require_str(data, "id"),
                name=_require_str(data, "name"),
                token=_require_str(data, "token"),
            )
        except (KeyError, TypeError) as e:
            raise ValidationError(f"Invalid workspace data: {e}")


@dataclass(frozen=True)
class UpdateSuccess:
    """Status was written to one workspace."""
    workspace_name: str

    @property
    def id(self) -> str:
        return f"success-{self.workspace_name}"


@dataclass(frozen=True)
class UpdateFailure:
    """Status could not be written to one workspace."""
    workspace_name: str
    error: str

    @property
    def id(self) -> str:
        return f"failure-{self.workspace_name}"


StatusUpdateOutcome = Union[UpdateSuccess, UpdateFailure]


@dataclass(frozen=True)
class RemoteProfile:
    """Status fields of a users.profile.get response."""
    status_text: Optional[str] = None
    status_emoji: Optional[str] = None
    status_expiration: Optional[int] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "RemoteProfile":
        return cls(
            status_text=data.get("status_text"),
            status_emoji=data.get("status_emoji"),
            status_expiration=data.get("status_expiration"),
        )


@dataclass(frozen=True)
class ApplyPreset:
    """Broadcast that sets a preset on every workspace."""
    preset: StatusPreset


@dataclass(frozen=True)
class ClearStatus:
    """Broadcast that clears the status on every workspace."""
    pass


BroadcastOperation = Union[ApplyPreset, ClearStatus]


DEFAULT_PRESETS = (
    StatusPreset(emoji=":house_with_garden:", display_emoji="🏡", text="Working remotely"),
    StatusPreset(emoji=":office:", display_emoji="🏢", text="In the office"),
    StatusPreset(emoji=":palm_tree:", display_emoji="🌴", text="Vacationing"),
    StatusPreset(emoji=":hamburger:", display_emoji="🍔", text="Lunch break", expiration_minutes=60),
    StatusPreset(emoji=":headphones:", display_emoji="🎧", text="Focus time — do not disturb", expiration_minutes=120),
    StatusPreset(emoji=":coffee:", display_emoji="☕", text="Coffee break", expiration_minutes=15),
    StatusPreset(emoji=":bus:", display_emoji="🚌", text="Commuting", expiration_minutes=60),
    StatusPreset(emoji=":face_with_thermometer:", display_emoji="🤒", text="Out sick"),
    StatusPreset(emoji=":calendar:", display_emoji="📅", text="In a meeting", expiration_minutes=30),
    StatusPreset(emoji=":zzz:", display_emoji="💤", text="Away"),
)


def default_presets() -> List[StatusPreset]:
    """Fresh list of the built-in presets."""
    return list(DEFAULT_PRESETS)
