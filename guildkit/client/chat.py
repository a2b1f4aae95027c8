"""
Chat REST helpers: messages and reactions.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import TYPE_CHECKING, Any
from uuid import UUID

from guildkit.client.servers import enforce_limit
from guildkit.content import Capability, Message, has_capability

if TYPE_CHECKING:
    from guildkit.client.base import BaseClient


def _reaction_path(content: Any, emote: int) -> str:
    if not has_capability(content, Capability.REACTIBLE):
        raise TypeError(f"{type(content).__name__} does not support reactions")
    return f"channels/{content.channel_id}/{content.content_path}/{content.id}/emotes/{emote}"


class ChatMixin:
    """Message and reaction endpoints."""

    async def create_message(
        self: BaseClient,
        channel: UUID,
        content: str | None = None,
        *,
        embeds: Sequence[dict[str, Any]] | None = None,
        reply_message_ids: Sequence[UUID] | None = None,
        is_private: bool | None = None,
        is_silent: bool | None = None,
    ) -> Message:
        """
        Send a message to a channel.

        Args:
            channel: Channel to send the message to
            content: Message text (at most 4000 characters)
            embeds: Rich embeds
            reply_message_ids: Messages this message replies to
            is_private: Only visible to the mentioned and replied-to users
            is_silent: Do not notify mentioned and replied-to users

        Raises:
            ValueError: If there is neither content nor embeds, or the content is too long
        """
        if not content and not embeds:
            raise ValueError("A message needs content or embeds")
        enforce_limit("content", content, Message.CONTENT_LIMIT)
        body = {
            "content": content,
            "embeds": list(embeds) if embeds else None,
            "replyMessageIds": [str(id) for id in reply_message_ids] if reply_message_ids else None,
            "isPrivate": is_private,
            "isSilent": is_silent,
        }
        return await self._get_model(Message, "POST", f"channels/{channel}/messages", "message", json=body)

    async def get_messages(
        self: BaseClient,
        channel: UUID,
        *,
        include_private: bool = False,
        before: datetime | None = None,
        after: datetime | None = None,
        limit: int | None = None,
    ) -> list[Message]:
        return await self._get_models(
            Message,
            "GET",
            f"channels/{channel}/messages",
            "messages",
            params={
                "includePrivate": include_private or None,
                "before": before,
                "after": after,
                "limit": limit,
            },
        )

    async def get_message(self: BaseClient, channel: UUID, message: UUID) -> Message:
        return await self._get_model(Message, "GET", f"channels/{channel}/messages/{message}", "message")

    async def update_message(
        self: BaseClient,
        channel: UUID,
        message: UUID,
        content: str | None = None,
        *,
        embeds: Sequence[dict[str, Any]] | None = None,
    ) -> Message:
        if not content and not embeds:
            raise ValueError("A message needs content or embeds")
        enforce_limit("content", content, Message.CONTENT_LIMIT)
        return await self._get_model(
            Message,
            "PUT",
            f"channels/{channel}/messages/{message}",
            "message",
            json={"content": content, "embeds": list(embeds) if embeds else None},
        )

    async def delete_message(self: BaseClient, channel: UUID, message: UUID) -> None:
        await self.request("DELETE", f"channels/{channel}/messages/{message}")

    async def add_reaction(self: BaseClient, content: Any, emote: int) -> None:
        """
        React to any reactible content (message, topic, comment, doc, calendar event).

        Raises:
            TypeError: If the content does not support reactions
        """
        await self.request("PUT", _reaction_path(content, emote))

    async def remove_reaction(self: BaseClient, content: Any, emote: int) -> None:
        """
        Remove the client's reaction from reactible content.

        Raises:
            TypeError: If the content does not support reactions
        """
        await self.request("DELETE", _reaction_path(content, emote))
