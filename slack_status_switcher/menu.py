"""Text content of the tray menu, derived from coordinator state."""

from dataclasses import dataclass
from typing import List, Optional, Sequence

from .coordinator import StatusCoordinator
from .models import RemoteProfile, StatusUpdateOutcome, UpdateFailure, UpdateSuccess

APP_TITLE = "Slack Status Switcher"


@dataclass(frozen=True)
class PresetRow:
    preset_id: str
    title: str
    enabled: bool


def status_line(state: StatusCoordinator) -> str:
    if state.is_updating:
        return "Updating status…"
    if state.current_status_text:
        shown = " ".join(p for p in (state.current_status_emoji, state.current_status_text) if p)
        return f"Current: {shown}"
    return "No status set"


def workspace_warning(state: StatusCoordinator) -> Optional[str]:
    if not state.workspaces:
        return "⚠️ No workspaces configured. Open Settings to add one."
    return None


def preset_rows(state: StatusCoordinator) -> List[PresetRow]:
    rows = []
    for preset in state.presets:
        title = f"{preset.display_emoji}  {preset.text}"
        if preset.expiration_minutes > 0:
            title += f" ({preset.expiration_label})"
        rows.append(PresetRow(preset_id=preset.id, title=title, enabled=not state.is_updating))
    return rows


def can_clear(state: StatusCoordinator) -> bool:
    return not state.is_updating and bool(state.workspaces)


def results_banner(results: Sequence[StatusUpdateOutcome]) -> List[str]:
    """One summary line when everything worked, otherwise a line per workspace."""
    if all(isinstance(r, UpdateSuccess) for r in results):
        count = len(results)
        return [f"✓ Updated {count} workspace{'' if count == 1 else 's'}"]

    lines = []
    for result in results:
        if isinstance(result, UpdateFailure):
            lines.append(f"✗ {result.workspace_name}: {result.error}")
        else:
            lines.append(f"✓ {result.workspace_name}")
    return lines


def workspace_labels(state: StatusCoordinator) -> List[str]:
    return [f"{ws.name}  {ws.masked_token}" for ws in state.workspaces]


def connection_test_message(profile: Optional[RemoteProfile] = None, error: Optional[Exception] = None) -> str:
    """Result line shown by the add-workspace connection test."""
    if error is not None:
        return f"✗ Failed: {error}"
    profile = profile or RemoteProfile()
    return f"✓ Connected! Current status: {profile.status_emoji or ''} {profile.status_text or '(none)'}"
