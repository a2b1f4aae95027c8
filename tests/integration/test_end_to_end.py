"""
Integration tests for the full event path.

Tests: websocket frame -> transport -> dispatch table -> command tree -> REST reply
"""

from typing import Any

import pytest

from guildkit.client import BotClient
from guildkit.commands import CommandContext, CommandModule, CommandTree, FailedCommand, FallbackType, Parameter

pytestmark = pytest.mark.integration


@pytest.fixture
def commands() -> CommandModule:
    """A small command module with a reply and a capture-rest command."""
    module = CommandModule(prefix="!")

    @module.command("ping", aliases=("p",))
    async def ping(tree: CommandTree, context: CommandContext) -> None:
        """Reply with pong."""
        await context.reply("Pong!")

    @module.command("echo", params=[Parameter("text", rest=True)])
    async def echo(tree: CommandTree, context: CommandContext, text: str) -> None:
        """Repeat the text back."""
        await context.reply(text)

    return module


class TestCommandFlow:
    """Tests for messages arriving over the websocket and running commands."""

    @pytest.mark.asyncio
    async def test_ping_replies(
        self,
        client: BotClient,
        commands: CommandModule,
        connector: Any,
        api: Any,
        frames: Any,
        wait_until: Any,
    ) -> None:
        """Test a command message produces a reply to the same message."""
        reply = frames.message_payload("Pong!", created_by=frames.BOT_USER_ID)["message"]
        api.add("POST", f"channels/{frames.CHANNEL_ID}/messages", 201, {"message": reply})
        client.add_commands(commands)

        await client.connect()
        connector.websocket.feed(frames.welcome())
        connector.websocket.feed(frames.message("!ping", cursor="cursor-1"))
        await wait_until(lambda: api.requests)

        assert api.last_json == {"content": "Pong!", "replyMessageIds": [frames.MESSAGE_ID]}
        assert client.transport.last_message_id == "cursor-1"

    @pytest.mark.asyncio
    async def test_echo_keeps_spacing(
        self,
        client: BotClient,
        commands: CommandModule,
        connector: Any,
        api: Any,
        frames: Any,
        wait_until: Any,
    ) -> None:
        """Test capture-rest text is replied verbatim."""
        client.add_commands(commands)

        await client.connect()
        connector.websocket.feed(frames.message("!echo a  b   c"))
        await wait_until(lambda: api.requests)

        assert api.last_json["content"] == "a  b   c"

    @pytest.mark.asyncio
    async def test_own_reply_is_not_a_command(
        self,
        client: BotClient,
        commands: CommandModule,
        connector: Any,
        api: Any,
        frames: Any,
        wait_until: Any,
    ) -> None:
        """Test the bot's own messages are ignored once it knows who it is."""
        received: list[Any] = []
        client.message_created.subscribe(received.append)
        client.add_commands(commands)

        await client.connect()
        connector.websocket.feed(frames.welcome())
        connector.websocket.feed(frames.message("!ping", created_by=frames.BOT_USER_ID))
        await wait_until(lambda: received)

        assert api.requests == []

    @pytest.mark.asyncio
    async def test_unknown_command_reported(
        self,
        client: BotClient,
        commands: CommandModule,
        connector: Any,
        frames: Any,
        wait_until: Any,
    ) -> None:
        """Test an unknown command reaches the failure stream, not a handler."""
        failures: list[FailedCommand] = []
        commands.on_failed(failures.append)
        client.add_commands(commands)

        await client.connect()
        connector.websocket.feed(frames.message("!dance now"))
        await wait_until(lambda: failures)

        assert failures[0].reason == FallbackType.NOT_FOUND
        assert failures[0].context.root_command_name == "dance"
        assert failures[0].context.message.content == "!dance now"


class TestProtocolFrames:
    """Tests for protocol frames passing through the client."""

    @pytest.mark.asyncio
    async def test_welcome_sets_heartbeat_only(
        self,
        client: BotClient,
        connector: Any,
        frames: Any,
        wait_until: Any,
    ) -> None:
        """Test WELCOME reprograms the heartbeat and reaches only the welcome stream."""
        domain: list[Any] = []
        for name in client.event_streams():
            if name not in ("welcome", "resume"):
                getattr(client, name).subscribe(domain.append)

        await client.connect()
        connector.websocket.feed(frames.welcome(interval_ms=30000))
        await wait_until(lambda: client.is_prepared)

        assert client.transport.heartbeat_interval == 30.0
        assert domain == []

    @pytest.mark.asyncio
    async def test_unknown_events_are_ignored(
        self,
        client: BotClient,
        connector: Any,
        frames: Any,
        wait_until: Any,
    ) -> None:
        """Test events the client does not know are dropped without errors."""
        errors: list[Any] = []
        received: list[Any] = []
        client.websocket_event_error.subscribe(errors.append)
        client.message_created.subscribe(received.append)

        await client.connect()
        connector.websocket.feed(frames.event("SomethingBrandNew", {"x": 1}))
        connector.websocket.feed(frames.message("after"))
        await wait_until(lambda: received)

        assert errors == []
