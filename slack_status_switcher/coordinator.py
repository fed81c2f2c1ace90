"""
Fan-out coordinator and owner of the state the menu renders.

All state below is written from the event loop that runs the coordinator.
Per-workspace calls run concurrently and only return outcomes; the
coordinator writes shared state once every call has finished.
"""

import asyncio
from typing import Callable, List, Optional, Sequence

from keyring.backend import KeyringBackend

from .client import AsyncSlackStatusClient
from .config import Settings, get_settings
from .credentials import CredentialStore
from .exceptions import BroadcastInProgressError, RemoteError, ValidationError
from .logging_config import get_logger
from .models import (
    ApplyPreset,
    BroadcastOperation,
    ClearStatus,
    StatusPreset,
    StatusUpdateOutcome,
    UpdateFailure,
    UpdateSuccess,
    WorkspaceCredential,
    default_presets,
)
from .preferences import PreferenceFile, PresetStore

logger = get_logger(__name__)

Listener = Callable[["StatusCoordinator"], None]


class StatusCoordinator:
    """Applies presets across every workspace and tracks what the menu shows."""

    def __init__(
        self,
        client: AsyncSlackStatusClient,
        credential_store: CredentialStore,
        preset_store: PresetStore,
        results_display_seconds: float = 3.0,
        token_prefix: str = "xoxp-",
    ):
        self.client = client
        self.credential_store = credential_store
        self.preset_store = preset_store
        self.results_display_seconds = results_display_seconds
        self.token_prefix = token_prefix

        self.presets: List[StatusPreset] = default_presets()
        self.workspaces: List[WorkspaceCredential] = []
        self.is_updating = False
        self.last_results: List[StatusUpdateOutcome] = []
        self.show_results = False
        self.current_status_text = ""
        self.current_status_emoji = ""

        self.results_generation = 0
        self._dismiss_handle: Optional[asyncio.TimerHandle] = None
        self._listeners: List[Listener] = []

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        keyring_backend: Optional[KeyringBackend] = None,
    ) -> "StatusCoordinator":
        settings = settings or get_settings()
        return cls(
            client=AsyncSlackStatusClient(settings.api_base_url, timeout=settings.request_timeout),
            credential_store=CredentialStore(
                settings.keyring_service, settings.keyring_account, backend=keyring_backend
            ),
            preset_store=PresetStore(PreferenceFile(settings.preferences_path)),
            results_display_seconds=settings.results_display_seconds,
            token_prefix=settings.token_prefix,
        )

    # Listeners

    def add_listener(self, listener: Listener) -> None:
        """Register a callback run after every state change."""
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception("State listener failed")

    # Persistence

    def load(self) -> None:
        self.workspaces = self.credential_store.load()
        self.presets = self.preset_store.load()
        logger.info("Loaded settings", workspaces=len(self.workspaces), presets=len(self.presets))
        self._notify()

    # Workspace management

    def add_workspace(self, name: str, token: str) -> WorkspaceCredential:
        name = name.strip()
        token = token.strip()
        if not name:
            raise ValidationError("Workspace name must not be empty")
        if not token.startswith(self.token_prefix):
            raise ValidationError(f"Token must start with {self.token_prefix}")

        workspace = WorkspaceCredential(name=name, token=token)
        self.workspaces = self.workspaces + [workspace]
        self.credential_store.save(self.workspaces)
        logger.info("Added workspace", workspace=name)
        self._notify()
        return workspace

    def remove_workspace(self, workspace_id: str) -> None:
        self.workspaces = [ws for ws in self.workspaces if ws.id != workspace_id]
        self.credential_store.save(self.workspaces)
        self._notify()

    # Preset management

    def add_preset(self, preset: StatusPreset) -> None:
        if not preset.text or not preset.emoji:
            raise ValidationError("Preset needs both a status text and an emoji code")
        self.presets = self.presets + [preset]
        self.preset_store.save(self.presets)
        self._notify()

    def remove_preset(self, preset_id: str) -> None:
        self.presets = [p for p in self.presets if p.id != preset_id]
        self.preset_store.save(self.presets)
        self._notify()

    def move_preset(self, source: Sequence[int], destination: int) -> None:
        """Move the presets at the source offsets so they land before destination.

        Offsets refer to the list as it is before the move.
        """
        offsets = sorted(set(source))
        if any(not 0 <= i < len(self.presets) for i in offsets):
            raise ValidationError(f"Preset offsets out of range: {list(source)}")
        if not 0 <= destination <= len(self.presets):
            raise ValidationError(f"Destination out of range: {destination}")

        moving = [self.presets[i] for i in offsets]
        remaining = [p for i, p in enumerate(self.presets) if i not in offsets]
        insert_at = destination - sum(1 for i in offsets if i < destination)
        remaining[insert_at:insert_at] = moving

        self.presets = remaining
        self.preset_store.save(self.presets)
        self._notify()

    def reset_presets(self) -> None:
        self.presets = default_presets()
        self.preset_store.save(self.presets)
        self._notify()

    # Status actions

    async def refresh_current_status(self, credentials: Optional[Sequence[WorkspaceCredential]] = None) -> None:
        """Read the status of the first workspace. Errors are logged only."""
        credentials = self.workspaces if credentials is None else credentials
        if not credentials:
            return

        first = credentials[0]
        try:
            profile = await self.client.fetch_profile(first.token)
        except Exception as e:
            logger.warning("Failed to fetch current status", workspace=first.name, error=str(e))
            return

        self.current_status_text = profile.status_text or ""
        self.current_status_emoji = self._display_emoji_for(profile.status_emoji or "")
        self._notify()

    async def apply_status(self, preset: StatusPreset) -> List[StatusUpdateOutcome]:
        return await self.broadcast(ApplyPreset(preset), list(self.workspaces))

    async def clear_status(self) -> List[StatusUpdateOutcome]:
        return await self.broadcast(ClearStatus(), list(self.workspaces))

    async def broadcast(
        self,
        operation: BroadcastOperation,
        credentials: Sequence[WorkspaceCredential],
    ) -> List[StatusUpdateOutcome]:
        """Run one operation against every credential at once.

        Returns one outcome per credential. A failing workspace never stops
        the others. Raises BroadcastInProgressError if a broadcast is
        already updating.
        """
        if not credentials:
            return []
        if self.is_updating:
            raise BroadcastInProgressError("A status update is already in progress")

        credentials = list(credentials)
        self.is_updating = True
        self.last_results = []
        self._notify()
        logger.info("Broadcast started", operation=type(operation).__name__, workspaces=len(credentials))

        try:
            results = await asyncio.gather(*(self._run_one(operation, ws) for ws in credentials))
        finally:
            self.is_updating = False

        self._publish(list(results), operation)
        return list(results)

    async def _run_one(self, operation: BroadcastOperation, workspace: WorkspaceCredential) -> StatusUpdateOutcome:
        try:
            if isinstance(operation, ApplyPreset):
                preset = operation.preset
                await self.client.apply_status(
                    workspace.token, preset.text, preset.emoji, preset.expiration_minutes
                )
            else:
                await self.client.clear_status(workspace.token)
        except RemoteError as e:
            logger.warning("Status update failed", workspace=workspace.name, error=str(e))
            return UpdateFailure(workspace_name=workspace.name, error=str(e))
        except Exception as e:
            logger.exception("Unexpected error updating status", workspace=workspace.name)
            return UpdateFailure(workspace_name=workspace.name, error=str(e) or type(e).__name__)
        return UpdateSuccess(workspace_name=workspace.name)

    def _publish(self, results: List[StatusUpdateOutcome], operation: BroadcastOperation) -> None:
        self.last_results = results
        if isinstance(operation, ApplyPreset):
            self.current_status_text = operation.preset.text
            self.current_status_emoji = operation.preset.display_emoji
        else:
            self.current_status_text = ""
            self.current_status_emoji = ""

        self.results_generation += 1
        self.show_results = True
        if self._dismiss_handle is not None:
            self._dismiss_handle.cancel()
        self._dismiss_handle = asyncio.get_running_loop().call_later(
            self.results_display_seconds, self._hide_results, self.results_generation
        )

        failed = sum(1 for r in results if isinstance(r, UpdateFailure))
        logger.info("Broadcast finished", succeeded=len(results) - failed, failed=failed)
        self._notify()

    def _hide_results(self, generation: int) -> None:
        if generation != self.results_generation:
            return
        self.show_results = False
        self._dismiss_handle = None
        self._notify()

    def _display_emoji_for(self, emoji_code: str) -> str:
        for preset in self.presets:
            if preset.emoji == emoji_code:
                return preset.display_emoji
        return emoji_code

    async def close(self) -> None:
        if self._dismiss_handle is not None:
            self._dismiss_handle.cancel()
            self._dismiss_handle = None
        await self.client.close()
