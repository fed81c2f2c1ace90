"""Tests for the Slack profile API clients."""

import json
import time

import httpx
import pytest
import respx

from slack_status_switcher.client import (
    AsyncSlackStatusClient,
    SlackStatusClient,
    expiration_timestamp,
)
from slack_status_switcher.exceptions import ProtocolError, RemoteError, TransportError

from .conftest import API_URL

GET_URL = f"{API_URL}/users.profile.get"
SET_URL = f"{API_URL}/users.profile.set"


def _sent_profile(route) -> dict:
    return json.loads(route.calls.last.request.content)["profile"]


class TestExpirationTimestamp:
    """Tests for expiration_timestamp."""

    def test_zero_never_expires(self):
        """Should return 0 regardless of the clock."""
        assert expiration_timestamp(0) == 0
        assert expiration_timestamp(0, now=1_700_000_000) == 0

    def test_adds_minutes_to_now(self):
        """Should add the minutes, in seconds, to the current epoch time."""
        assert expiration_timestamp(30, now=1_700_000_000.7) == 1_700_000_000 + 1800


class TestSlackStatusClient:
    """Tests for the synchronous client."""

    @respx.mock
    def test_fetch_profile_success(self):
        """Should return the status fields of the profile."""
        route = respx.get(GET_URL).mock(
            return_value=httpx.Response(200, json={
                "ok": True,
                "profile": {"status_text": "Lunch", "status_emoji": ":hamburger:", "status_expiration": 0},
            })
        )

        with SlackStatusClient(API_URL) as client:
            profile = client.fetch_profile("xoxp-abc")

        assert profile.status_text == "Lunch"
        assert profile.status_emoji == ":hamburger:"
        assert profile.status_expiration == 0
        assert route.calls.last.request.headers["Authorization"] == "Bearer xoxp-abc"

    @respx.mock
    def test_fetch_profile_with_empty_profile(self):
        """Should accept a profile with no status fields."""
        respx.get(GET_URL).mock(return_value=httpx.Response(200, json={"ok": True, "profile": {}}))

        with SlackStatusClient(API_URL) as client:
            profile = client.fetch_profile("xoxp-abc")

        assert profile.status_text is None
        assert profile.status_emoji is None

    @respx.mock
    def test_fetch_profile_ok_false(self):
        """Should raise ProtocolError carrying Slack's error code."""
        respx.get(GET_URL).mock(return_value=httpx.Response(200, json={"ok": False, "error": "invalid_auth"}))

        with SlackStatusClient(API_URL) as client:
            with pytest.raises(ProtocolError) as exc_info:
                client.fetch_profile("xoxp-bad")

        assert str(exc_info.value) == "invalid_auth"
        assert exc_info.value.error_code == "invalid_auth"

    @respx.mock
    def test_fetch_profile_ok_without_profile(self):
        """Should raise a generic error when ok=true has no profile."""
        respx.get(GET_URL).mock(return_value=httpx.Response(200, json={"ok": True}))

        with SlackStatusClient(API_URL) as client:
            with pytest.raises(ProtocolError, match="Unknown error"):
                client.fetch_profile("xoxp-abc")

    @respx.mock
    def test_ok_false_without_error_uses_fallback(self):
        """Should fall back to a generic message when Slack sends no error."""
        respx.post(SET_URL).mock(return_value=httpx.Response(200, json={"ok": False}))

        with SlackStatusClient(API_URL) as client:
            with pytest.raises(ProtocolError, match="Unknown error"):
                client.apply_status("xoxp-abc", "Away", ":zzz:")

    @respx.mock
    def test_unparseable_body(self):
        """Should raise ProtocolError for a non-JSON body."""
        respx.get(GET_URL).mock(return_value=httpx.Response(200, text="<html>oops</html>"))

        with SlackStatusClient(API_URL) as client:
            with pytest.raises(ProtocolError, match="Failed to parse response"):
                client.fetch_profile("xoxp-abc")

    @respx.mock
    def test_http_error_without_body(self):
        """Should report the HTTP status when the body is not JSON."""
        respx.post(SET_URL).mock(return_value=httpx.Response(503, text="Service Unavailable"))

        with SlackStatusClient(API_URL) as client:
            with pytest.raises(ProtocolError, match="HTTP 503") as exc_info:
                client.apply_status("xoxp-abc", "Away", ":zzz:")

        assert exc_info.value.status_code == 503

    @respx.mock
    def test_transport_failure(self):
        """Should wrap connection errors in TransportError."""
        respx.get(GET_URL).mock(side_effect=httpx.ConnectError("connection refused"))

        with SlackStatusClient(API_URL) as client:
            with pytest.raises(TransportError) as exc_info:
                client.fetch_profile("xoxp-abc")

        assert isinstance(exc_info.value, RemoteError)
        assert "connection refused" in str(exc_info.value)

    @respx.mock
    def test_apply_status_without_expiration(self):
        """Should send status_expiration 0 when the preset never expires."""
        route = respx.post(SET_URL).mock(return_value=httpx.Response(200, json={"ok": True}))

        with SlackStatusClient(API_URL) as client:
            client.apply_status("xoxp-abc", "Working remotely", ":house_with_garden:", 0)

        assert _sent_profile(route) == {
            "status_text": "Working remotely",
            "status_emoji": ":house_with_garden:",
            "status_expiration": 0,
        }
        assert route.calls.last.request.headers["Authorization"] == "Bearer xoxp-abc"

    @respx.mock
    def test_apply_status_with_expiration(self):
        """Should send now plus the expiration in seconds."""
        route = respx.post(SET_URL).mock(return_value=httpx.Response(200, json={"ok": True}))

        before = int(time.time())
        with SlackStatusClient(API_URL) as client:
            client.apply_status("xoxp-abc", "Lunch break", ":hamburger:", 60)
        after = int(time.time())

        sent = _sent_profile(route)["status_expiration"]
        assert before + 3600 <= sent <= after + 3600

    @respx.mock
    def test_clear_status_sends_empty_status(self):
        """Should behave exactly like applying an empty status."""
        route = respx.post(SET_URL).mock(return_value=httpx.Response(200, json={"ok": True}))

        with SlackStatusClient(API_URL) as client:
            client.clear_status("xoxp-abc")

        assert _sent_profile(route) == {"status_text": "", "status_emoji": "", "status_expiration": 0}

    @respx.mock
    def test_base_url_trailing_slash(self):
        """Should not double the slash between base URL and method."""
        route = respx.get(GET_URL).mock(return_value=httpx.Response(200, json={"ok": True, "profile": {}}))

        with SlackStatusClient(API_URL + "/") as client:
            client.fetch_profile("xoxp-abc")

        assert route.called


class TestAsyncSlackStatusClient:
    """Tests for the async client."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_fetch_profile_success(self):
        """Should return the status fields of the profile."""
        respx.get(GET_URL).mock(
            return_value=httpx.Response(200, json={"ok": True, "profile": {"status_text": "Away"}})
        )

        async with AsyncSlackStatusClient(API_URL) as client:
            profile = await client.fetch_profile("xoxp-abc")

        assert profile.status_text == "Away"

    @pytest.mark.asyncio
    @respx.mock
    async def test_apply_status_ok_false(self):
        """Should raise ProtocolError with Slack's error."""
        respx.post(SET_URL).mock(return_value=httpx.Response(200, json={"ok": False, "error": "not_authed"}))

        async with AsyncSlackStatusClient(API_URL) as client:
            with pytest.raises(ProtocolError, match="not_authed"):
                await client.apply_status("xoxp-abc", "Away", ":zzz:")

    @pytest.mark.asyncio
    @respx.mock
    async def test_apply_status_with_expiration(self):
        """Should send now plus the expiration in seconds."""
        route = respx.post(SET_URL).mock(return_value=httpx.Response(200, json={"ok": True}))

        before = int(time.time())
        async with AsyncSlackStatusClient(API_URL) as client:
            await client.apply_status("xoxp-abc", "In a meeting", ":calendar:", 30)
        after = int(time.time())

        sent = _sent_profile(route)["status_expiration"]
        assert before + 1800 <= sent <= after + 1800

    @pytest.mark.asyncio
    @respx.mock
    async def test_clear_status_sends_empty_status(self):
        """Should behave exactly like applying an empty status."""
        route = respx.post(SET_URL).mock(return_value=httpx.Response(200, json={"ok": True}))

        async with AsyncSlackStatusClient(API_URL) as client:
            await client.clear_status("xoxp-abc")

        assert _sent_profile(route) == {"status_text": "", "status_emoji": "", "status_expiration": 0}

    @pytest.mark.asyncio
    @respx.mock
    async def test_transport_failure(self):
        """Should wrap timeouts in TransportError."""
        respx.post(SET_URL).mock(side_effect=httpx.ReadTimeout("timed out"))

        async with AsyncSlackStatusClient(API_URL) as client:
            with pytest.raises(TransportError):
                await client.clear_status("xoxp-abc")
