"""Slack profile API client."""

import time
from typing import Any, Dict, Optional

import httpx

from .exceptions import ProtocolError, TransportError
from .models import RemoteProfile

DEFAULT_BASE_URL = "https://slack.com/api"


def expiration_timestamp(expiration_minutes: int, now: Optional[float] = None) -> int:
    """Absolute epoch seconds at which a status set now should expire.

    Returns 0, Slack's "never expires", when expiration_minutes is 0.
    """
    if expiration_minutes <= 0:
        return 0
    if now is None:
        now = time.time()
    return int(now) + expiration_minutes * 60


def _auth_headers(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def _profile_payload(text: str, emoji_code: str, expiration_minutes: int) -> Dict[str, Any]:
    return {
        "profile": {
            "status_text": text,
            "status_emoji": emoji_code,
            "status_expiration": expiration_timestamp(expiration_minutes),
        }
    }


def _handle_response(response: httpx.Response) -> Dict[str, Any]:
    """Decode a Slack Web API response and raise on anything but ok=true."""
    try:
        data = response.json()
    except ValueError as e:
        if response.status_code >= 400:
            raise ProtocolError(f"HTTP {response.status_code}", status_code=response.status_code)
        raise ProtocolError(f"Failed to parse response: {e}", status_code=response.status_code)

    if not isinstance(data, dict):
        raise ProtocolError("Unexpected response from Slack", status_code=response.status_code)

    if data.get("ok") is not True:
        error = data.get("error")
        raise ProtocolError(
            error or "Unknown error",
            error_code=error,
            status_code=response.status_code,
        )
    return data


def _parse_profile(data: Dict[str, Any]) -> RemoteProfile:
    profile = data.get("profile")
    if not isinstance(profile, dict):
        raise ProtocolError(data.get("error") or "Unknown error")
    return RemoteProfile.from_api(profile)


class SlackStatusClient:
    """Slack profile status client.

    Tokens are passed per call so a single client can serve every workspace.
    """

    def __init__(self, base_url: str = DEFAULT_BASE_URL, timeout: float = 30.0):
        """Initialize the client.

        Args:
            base_url: The base URL of the Slack Web API
            timeout: Transport timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.client = httpx.Client(timeout=timeout)

    def fetch_profile(self, token: str) -> RemoteProfile:
        """Read the current status of the token's user.

        Args:
            token: User OAuth token

        Returns:
            RemoteProfile with whatever status fields Slack returned
        """
        try:
            response = self.client.get(
                f"{self.base_url}/users.profile.get",
                headers=_auth_headers(token),
            )
        except httpx.RequestError as e:
            raise TransportError(f"Network error fetching profile: {e}")

        return _parse_profile(_handle_response(response))

    def apply_status(self, token: str, text: str, emoji_code: str, expiration_minutes: int = 0) -> None:
        """Set the status of the token's user.

        Args:
            token: User OAuth token
            text: Status text
            emoji_code: Slack emoji code, e.g. ":house:"
            expiration_minutes: Minutes from now until Slack clears the status, 0 for never
        """
        try:
            response = self.client.post(
                f"{self.base_url}/users.profile.set",
                headers=_auth_headers(token),
                json=_profile_payload(text, emoji_code, expiration_minutes),
            )
        except httpx.RequestError as e:
            raise TransportError(f"Network error setting status: {e}")

        _handle_response(response)

    def clear_status(self, token: str) -> None:
        """Clear the status of the token's user."""
        self.apply_status(token, "", "", 0)

    def close(self) -> None:
        """Close the HTTP client."""
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


class AsyncSlackStatusClient:
    """Async Slack profile status client."""

    def __init__(self, base_url: str = DEFAULT_BASE_URL, timeout: float = 30.0):
        """Initialize the async client.

        Args:
            base_url: The base URL of the Slack Web API
            timeout: Transport timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.client = httpx.AsyncClient(timeout=timeout)

    async def fetch_profile(self, token: str) -> RemoteProfile:
        """Read the current status of the token's user."""
        try:
            response = await self.client.get(
                f"{self.base_url}/users.profile.get",
                headers=_auth_headers(token),
            )
        except httpx.RequestError as e:
            raise TransportError(f"Network error fetching profile: {e}")

        return _parse_profile(_handle_response(response))

    async def apply_status(self, token: str, text: str, emoji_code: str, expiration_minutes: int = 0) -> None:
        """Set the status of the token's user.

        Args:
            token: User OAuth token
            text: Status text
            emoji_code: Slack emoji code, e.g. ":house:"
            expiration_minutes: Minutes from now until Slack clears the status, 0 for never
        """
        try:
            response = await self.client.post(
                f"{self.base_url}/users.profile.set",
                headers=_auth_headers(token),
                json=_profile_payload(text, emoji_code, expiration_minutes),
            )
        except httpx.RequestError as e:
            raise TransportError(f"Network error setting status: {e}")

        _handle_response(response)

    async def clear_status(self, token: str) -> None:
        """Clear the status of the token's user."""
        await self.apply_status(token, "", "", 0)

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
