"""
Tests for the client façade: REST helpers, event streams and connection state.
"""

import json
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import UUID

import httpx
import pytest

from guildkit.client import BaseClient, BotClient, ClientEvents
from guildkit.config import ClientSettings
from guildkit.content import CalendarRsvpStatus, Member, Message
from guildkit.errors import GuildedRequestError
from guildkit.events.models import WelcomeEvent


def message_body(frames: Any, content: str = "hello") -> dict[str, Any]:
    return frames.message_payload(content)["message"]


class TestConstruction:
    """Tests for client construction."""

    def test_bot_requires_token(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test a missing or blank token is rejected."""
        monkeypatch.delenv("GUILDKIT_TOKEN", raising=False)
        with pytest.raises(ValueError):
            BotClient()
        with pytest.raises(ValueError):
            BotClient("   ", ClientSettings())

    def test_token_from_settings(self) -> None:
        """Test the token falls back to settings."""
        client = BotClient(settings=ClientSettings(token="from-settings"))
        assert client.token == "from-settings"

    @pytest.mark.asyncio
    async def test_owned_http_client_sends_auth(self, settings: ClientSettings) -> None:
        """Test the default HTTP client carries the bearer token and user agent."""
        client = BotClient("secret", settings)
        try:
            assert client.http.headers["Authorization"] == "Bearer secret"
            assert "guildkit/" in client.http.headers["User-Agent"]
            assert client.transport.headers["Authorization"] == "Bearer secret"
            assert str(client.http.base_url) == settings.api_url
        finally:
            await client.aclose()
        assert client.http.is_closed

    def test_base_client_has_no_auth(self, settings: ClientSettings) -> None:
        """Test the unauthenticated client only sends a user agent."""
        client = BaseClient(settings)
        assert "Authorization" not in client.headers

    @pytest.mark.asyncio
    async def test_injected_http_not_closed(self, client: BotClient) -> None:
        """Test a caller-provided HTTP client is left open."""
        await client.aclose()
        assert not client.http.is_closed


class TestEventStreams:
    """Tests for the typed event streams."""

    def test_every_stream_has_an_entry(self, client: BotClient) -> None:
        """Test streams and dispatch entries match one to one."""
        streams = ClientEvents.event_streams()
        assert {stream.key for stream in streams.values()} == set(client.events.keys())
        assert len(streams) == len(client.events)

    def test_stream_is_entry_channel(self, client: BotClient) -> None:
        """Test a stream attribute is the dispatch entry's channel."""
        assert client.message_created is client.events["ChatMessageCreated"].channel
        assert client.welcome is client.events[1].channel

    def test_item_completion_streams(self, client: BotClient) -> None:
        """Test completed and uncompleted items have their own streams."""
        assert client.item_completed is client.events["ListItemCompleted"].channel
        assert client.item_uncompleted is client.events["ListItemUncompleted"].channel

    def test_reaction_removed_streams(self, client: BotClient) -> None:
        """Test reaction removal streams follow the Deleted events."""
        assert client.message_reaction_removed is client.events["ChannelMessageReactionDeleted"].channel
        assert client.doc_reaction_removed is client.events["DocReactionDeleted"].channel

    def test_clients_do_not_share_channels(self, client: BotClient, settings: ClientSettings) -> None:
        """Test each client owns its streams."""
        other = BaseClient(settings)
        assert other.message_created is not client.message_created


class TestRequests:
    """Tests for request building and error handling."""

    def test_build_request_drops_none(self, client: BotClient) -> None:
        """Test None values are left out of bodies and queries."""
        request = client.build_request(
            "GET",
            "/channels/abc/messages",
            json={"a": 1, "b": None},
            params={"includePrivate": True, "limit": None, "before": datetime(2023, 6, 1, tzinfo=timezone.utc)},
        )
        assert request.url.path == "/api/v1/channels/abc/messages"
        assert request.url.params["includePrivate"] == "true"
        assert "limit" not in request.url.params
        assert request.url.params["before"] == "2023-06-01T00:00:00+00:00"
        assert json.loads(request.content) == {"a": 1}

    @pytest.mark.asyncio
    async def test_error_status(self, client: BotClient, api: Any) -> None:
        """Test API errors carry the status, message and code."""
        api.add("GET", "servers/wlVr3Ggl", 403, {"code": "ForbiddenError", "message": "Missing permissions"})

        with pytest.raises(GuildedRequestError) as exc_info:
            await client.get_server("wlVr3Ggl")

        assert exc_info.value.status_code == 403
        assert exc_info.value.code == "ForbiddenError"
        assert exc_info.value.message == "Missing permissions"

    @pytest.mark.asyncio
    async def test_error_without_body(self, client: BotClient, api: Any) -> None:
        """Test errors without a JSON body use the reason phrase."""
        api.add("DELETE", "channels/abc", 404)
        with pytest.raises(GuildedRequestError) as exc_info:
            await client.request("DELETE", "channels/abc")
        assert exc_info.value.message == "Not Found"

    @pytest.mark.asyncio
    async def test_transport_failure(self, settings: ClientSettings) -> None:
        """Test network errors become request errors."""

        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        http = httpx.AsyncClient(base_url=settings.api_url, transport=httpx.MockTransport(refuse))
        client = BotClient("token", settings, http=http)
        try:
            with pytest.raises(GuildedRequestError) as exc_info:
                await client.request("GET", "servers/abc")
            assert isinstance(exc_info.value.__cause__, httpx.ConnectError)
        finally:
            await http.aclose()

    @pytest.mark.asyncio
    async def test_missing_property(self, client: BotClient, api: Any) -> None:
        """Test a response without the expected key is an error."""
        api.add("GET", "servers/wlVr3Ggl", 200, {"unexpected": {}})
        with pytest.raises(GuildedRequestError):
            await client.get_server("wlVr3Ggl")

    @pytest.mark.asyncio
    async def test_empty_response(self, client: BotClient, api: Any) -> None:
        """Test 204 responses decode to None."""
        assert await client.request("PUT", "servers/a/members/b/roles/1") is None
        assert api.requests[-1].method == "PUT"


class TestChat:
    """Tests for message and reaction helpers."""

    @pytest.mark.asyncio
    async def test_create_message(self, client: BotClient, api: Any, frames: Any) -> None:
        """Test a message is posted with camelCase fields."""
        api.add("POST", f"channels/{frames.CHANNEL_ID}/messages", 201, {"message": message_body(frames)})

        message = await client.create_message(
            UUID(frames.CHANNEL_ID),
            "hello",
            reply_message_ids=[UUID(frames.MESSAGE_ID)],
            is_silent=True,
        )

        assert isinstance(message, Message)
        assert api.last_json == {
            "content": "hello",
            "replyMessageIds": [frames.MESSAGE_ID],
            "isSilent": True,
        }

    @pytest.mark.asyncio
    async def test_create_message_validation(self, client: BotClient, api: Any) -> None:
        """Test empty and oversized messages never reach the API."""
        channel = UUID(int=1)
        with pytest.raises(ValueError):
            await client.create_message(channel)
        with pytest.raises(ValueError):
            await client.create_message(channel, "x" * 4001)
        assert api.requests == []

    @pytest.mark.asyncio
    async def test_embeds_only(self, client: BotClient, api: Any, frames: Any) -> None:
        """Test a message may have embeds without content."""
        api.add("POST", f"channels/{frames.CHANNEL_ID}/messages", 201, {"message": message_body(frames, "")})
        await client.create_message(UUID(frames.CHANNEL_ID), embeds=[{"title": "Hi"}])
        assert api.last_json == {"embeds": [{"title": "Hi"}]}

    @pytest.mark.asyncio
    async def test_reactions(self, client: BotClient, api: Any, frames: Any) -> None:
        """Test reactions use the content's path."""
        message = Message.model_validate(message_body(frames))

        await client.add_reaction(message, 90001)
        await client.remove_reaction(message, 90001)

        path = f"/api/v1/channels/{frames.CHANNEL_ID}/messages/{frames.MESSAGE_ID}/emotes/90001"
        assert [(r.method, r.url.path) for r in api.requests] == [("PUT", path), ("DELETE", path)]

    @pytest.mark.asyncio
    async def test_reaction_on_unreactible_content(self, client: BotClient, frames: Any) -> None:
        """Test content without the reactible capability is rejected."""
        member = Member.model_validate({"user": {"id": frames.USER_ID, "name": "Ann"}})
        with pytest.raises(TypeError):
            await client.add_reaction(member, 90001)


class TestServers:
    """Tests for server helpers."""

    @pytest.mark.asyncio
    async def test_get_member_sets_server(self, client: BotClient, api: Any, frames: Any) -> None:
        """Test fetched members know their server."""
        api.add(
            "GET",
            f"servers/{frames.SERVER_ID}/members/{frames.USER_ID}",
            200,
            {"member": {"user": {"id": frames.USER_ID, "name": "Ann"}, "roleIds": [1, 2]}},
        )

        member = await client.get_member(frames.SERVER_ID, frames.USER_ID)

        assert member.server_id == frames.SERVER_ID
        assert member.role_ids == [1, 2]

    @pytest.mark.asyncio
    async def test_nickname_limits(self, client: BotClient, api: Any, frames: Any) -> None:
        """Test nicknames must be non-blank and at most 32 characters."""
        with pytest.raises(ValueError):
            await client.update_nickname(frames.SERVER_ID, frames.USER_ID, " ")
        with pytest.raises(ValueError):
            await client.update_nickname(frames.SERVER_ID, frames.USER_ID, "n" * 33)

        api.add("PUT", f"servers/{frames.SERVER_ID}/members/{frames.USER_ID}/nickname", 200, {"nickname": "Annie"})
        assert await client.update_nickname(frames.SERVER_ID, frames.USER_ID, "Annie") == "Annie"

    @pytest.mark.asyncio
    async def test_add_member_xp(self, client: BotClient, api: Any, frames: Any) -> None:
        """Test XP awards return the new total."""
        api.add("POST", f"servers/{frames.SERVER_ID}/members/{frames.USER_ID}/xp", 200, {"total": 150})
        assert await client.add_member_xp(frames.SERVER_ID, frames.USER_ID, 50) == 150
        assert api.last_json == {"amount": 50}

    @pytest.mark.asyncio
    async def test_ban_without_reason(self, client: BotClient, api: Any, frames: Any) -> None:
        """Test an absent reason is left out of the body."""
        api.add(
            "POST",
            f"servers/{frames.SERVER_ID}/bans/{frames.USER_ID}",
            200,
            {
                "serverMemberBan": {
                    "user": {"id": frames.USER_ID, "name": "Ann"},
                    "createdBy": frames.BOT_USER_ID,
                    "createdAt": frames.CREATED_AT,
                }
            },
        )
        ban = await client.ban_member(frames.SERVER_ID, frames.USER_ID)
        assert ban.created_by == frames.BOT_USER_ID
        assert api.last_json == {}

    @pytest.mark.asyncio
    async def test_create_channel_limits(self, client: BotClient, frames: Any) -> None:
        """Test channel name and topic limits."""
        with pytest.raises(ValueError):
            await client.create_channel(frames.SERVER_ID, "c" * 101)
        with pytest.raises(ValueError):
            await client.create_channel(frames.SERVER_ID, "general", topic="t" * 513)


class TestContent:
    """Tests for content helpers."""

    @pytest.mark.asyncio
    async def test_list_item_completion(self, client: BotClient, api: Any) -> None:
        """Test complete and uncomplete use POST and DELETE on the same path."""
        channel, item = UUID(int=1), UUID(int=2)
        await client.complete_item(channel, item)
        await client.uncomplete_item(channel, item)

        path = f"/api/v1/channels/{channel}/items/{item}/complete"
        assert [(r.method, r.url.path) for r in api.requests] == [("POST", path), ("DELETE", path)]

    @pytest.mark.asyncio
    async def test_calendar_event_body(self, client: BotClient, api: Any, frames: Any) -> None:
        """Test durations are sent in minutes and times as ISO 8601."""
        channel = UUID(frames.CHANNEL_ID)
        event = {
            "id": 1,
            "channelId": frames.CHANNEL_ID,
            "serverId": frames.SERVER_ID,
            "name": "Raid",
            "createdBy": frames.USER_ID,
            "createdAt": frames.CREATED_AT,
            "startsAt": frames.CREATED_AT,
            "duration": 90,
        }
        api.add("POST", f"channels/{channel}/events", 201, {"calendarEvent": event})
        api.add("PATCH", f"channels/{channel}/events/1", 200, {"calendarEvent": event})
        starts = datetime(2023, 6, 1, 12, tzinfo=timezone.utc)

        created = await client.create_event(channel, "Raid", starts_at=starts, duration=timedelta(hours=1, minutes=30))
        assert created.duration == timedelta(minutes=90)
        assert api.last_json == {"name": "Raid", "startsAt": starts.isoformat(), "duration": 90}

        await client.update_event(channel, 1, rsvp_limit=10, duration=timedelta(minutes=30))
        assert api.last_json == {"rsvpLimit": 10, "duration": 30}

    @pytest.mark.asyncio
    async def test_set_rsvp(self, client: BotClient, api: Any, frames: Any) -> None:
        """Test RSVP status is sent as its wire value."""
        channel = UUID(frames.CHANNEL_ID)
        api.add(
            "PUT",
            f"channels/{channel}/events/1/rsvps/{frames.USER_ID}",
            200,
            {
                "calendarEventRsvp": {
                    "calendarEventId": 1,
                    "channelId": frames.CHANNEL_ID,
                    "serverId": frames.SERVER_ID,
                    "userId": frames.USER_ID,
                    "status": "going",
                    "createdBy": frames.USER_ID,
                    "createdAt": frames.CREATED_AT,
                }
            },
        )

        rsvp = await client.set_rsvp(channel, 1, frames.USER_ID, CalendarRsvpStatus.GOING)

        assert rsvp.status == CalendarRsvpStatus.GOING
        assert api.last_json == {"status": "going"}


class TestConnection:
    """Tests for connect() and the prepared state."""

    @pytest.mark.asyncio
    async def test_welcome_prepares_client(
        self, client: BotClient, connector: Any, frames: Any, wait_until: Any
    ) -> None:
        """Test WELCOME sets the user and publishes prepared once."""
        prepared: list[BaseClient] = []
        welcomes: list[WelcomeEvent] = []
        client.prepared.subscribe(prepared.append)
        client.welcome.subscribe(welcomes.append)

        await client.connect()
        connector.websocket.feed(frames.welcome())
        await wait_until(lambda: client.is_prepared)

        assert client.me is not None and client.me.id == frames.BOT_USER_ID
        assert prepared == [client]
        assert welcomes[0].heartbeat_interval_ms == 30000

    @pytest.mark.asyncio
    async def test_resume_cursor_sent(self, client: BotClient, connector: Any) -> None:
        """Test connect() can resume from a cursor."""
        await client.connect(last_message_id="cursor-3")
        _, headers = connector.calls[0]
        assert headers["guilded-last-message-id"] == "cursor-3"

    @pytest.mark.asyncio
    async def test_events_reach_streams(
        self, client: BotClient, connector: Any, frames: Any, wait_until: Any
    ) -> None:
        """Test domain frames arrive on the matching stream."""
        received: list[Any] = []
        client.message_created.subscribe(received.append)

        await client.connect()
        connector.websocket.feed(frames.message("hi"))
        await wait_until(lambda: received)

        assert received[0].content == "hi"

    @pytest.mark.asyncio
    async def test_decode_errors_reach_error_stream(
        self, client: BotClient, connector: Any, frames: Any, wait_until: Any
    ) -> None:
        """Test undecodable events are reported on websocket_event_error."""
        errors: list[Any] = []
        client.websocket_event_error.subscribe(errors.append)

        await client.connect()
        connector.websocket.feed(frames.event("ChatMessageCreated", {"serverId": frames.SERVER_ID}))
        await wait_until(lambda: errors)

        assert str(errors[0].key) == "ChatMessageCreated"

    @pytest.mark.asyncio
    async def test_reconnect_after_protocol_error(
        self, client: BotClient, connector: Any, frames: Any, wait_until: Any
    ) -> None:
        """Test a client can connect again after the server sent ERROR."""
        socket_errors: list[BaseException] = []
        received: list[Any] = []
        client.message_created.subscribe(received.append)

        await client.connect()
        client.transport.frames.subscribe(lambda e: None, on_error=socket_errors.append)
        connector.websocket.feed(frames.error("Invalid cursor"))
        await wait_until(lambda: socket_errors)
        assert not client.is_prepared

        await client.connect()
        connector.websocket.feed(frames.message("back"))
        await wait_until(lambda: received)
        assert received[0].content == "back"

    @pytest.mark.asyncio
    async def test_disconnect(self, client: BotClient, connector: Any, frames: Any, wait_until: Any) -> None:
        """Test disconnect closes the socket and clears the prepared state."""
        await client.connect()
        connector.websocket.feed(frames.welcome())
        await wait_until(lambda: client.is_prepared)

        await client.disconnect()

        assert not client.transport.is_open
        assert not client.is_prepared
        assert connector.websocket.close_code == 1000
