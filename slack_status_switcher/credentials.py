"""Workspace token persistence in the operating system keyring."""

import json
from typing import List, Optional

import keyring
from keyring.backend import KeyringBackend

from .exceptions import StoreError, ValidationError
from .logging_config import get_logger
from .models import WorkspaceCredential

logger = get_logger(__name__)


class CredentialStore:
    """Keeps the whole workspace list as one JSON secret in the keyring.

    The list is never written to the plain preferences file.
    """

    def __init__(self, service: str, account: str, backend: Optional[KeyringBackend] = None):
        self.service = service
        self.account = account
        self._backend = backend

    @property
    def backend(self) -> KeyringBackend:
        return self._backend or keyring.get_keyring()

    def _read(self) -> Optional[str]:
        try:
            return self.backend.get_password(self.service, self.account)
        except Exception as e:
            raise StoreError(f"Cannot read workspaces from keyring: {e}")

    def _write(self, secret: str) -> None:
        try:
            self.backend.set_password(self.service, self.account, secret)
        except Exception as e:
            raise StoreError(f"Cannot write workspaces to keyring: {e}")

    def load(self) -> List[WorkspaceCredential]:
        try:
            secret = self._read()
        except StoreError as e:
            logger.warning("Failed to read workspaces", error=str(e))
            return []

        if not secret:
            return []

        try:
            raw = json.loads(secret)
            if not isinstance(raw, list):
                raise ValidationError("Stored workspaces are not a list")
            return [WorkspaceCredential.from_dict(item) for item in raw]
        except (ValueError, ValidationError) as e:
            logger.warning("Stored workspaces are corrupt, ignoring them", error=str(e))
            return []

    def save(self, workspaces: List[WorkspaceCredential]) -> bool:
        """Replace the stored list. Returns False if it could not be written."""
        secret = json.dumps([ws.to_dict() for ws in workspaces])
        try:
            self._write(secret)
        except StoreError as e:
            logger.error("Failed to save workspaces", error=str(e))
            return False
        return True
