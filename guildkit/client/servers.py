"""
Server REST helpers: servers, members, roles, XP, bans, webhooks and channels.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from uuid import UUID

from guildkit.content import HashId, Member, MemberBan, MemberSummary, Server, ServerChannel, Webhook

if TYPE_CHECKING:
    from guildkit.client.base import BaseClient

NICKNAME_LIMIT = 32


def enforce_limit(name: str, value: str | None, limit: int) -> None:
    """
    Reject text longer than the API allows.

    Raises:
        ValueError: If value exceeds limit characters
    """
    if value is not None and len(value) > limit:
        raise ValueError(f"{name} exceeds the {limit} character limit")


def require_text(name: str, value: str | None) -> str:
    """
    Reject missing or blank text.

    Raises:
        ValueError: If value is None, empty or whitespace
    """
    if value is None or not value.strip():
        raise ValueError(f"{name} cannot be empty")
    return value


class ServersMixin:
    """Server, member and channel endpoints."""

    # Servers

    async def get_server(self: BaseClient, server: HashId) -> Server:
        return await self._get_model(Server, "GET", f"servers/{server}", "server")

    async def add_group_member(self: BaseClient, group: HashId, member: HashId) -> None:
        await self.request("PUT", f"groups/{group}/members/{member}")

    async def remove_group_member(self: BaseClient, group: HashId, member: HashId) -> None:
        await self.request("DELETE", f"groups/{group}/members/{member}")

    # Members

    async def get_members(self: BaseClient, server: HashId) -> list[MemberSummary]:
        return await self._get_models(MemberSummary, "GET", f"servers/{server}/members", "members")

    async def get_member(self: BaseClient, server: HashId, member: HashId) -> Member:
        """Get a server member; the returned record carries its server ID."""
        data = await self._get_property("GET", f"servers/{server}/members/{member}", "member")
        if isinstance(data, dict):
            data.setdefault("serverId", server)
        return Member.model_validate(data)

    async def get_member_roles(self: BaseClient, server: HashId, member: HashId) -> list[int]:
        return list(await self._get_property("GET", f"servers/{server}/members/{member}/roles", "roleIds"))

    async def update_nickname(self: BaseClient, server: HashId, member: HashId, nickname: str) -> str:
        """
        Set a member's nickname.

        Raises:
            ValueError: If the nickname is blank or longer than 32 characters
        """
        require_text("nickname", nickname)
        enforce_limit("nickname", nickname, NICKNAME_LIMIT)
        return await self._get_property(
            "PUT",
            f"servers/{server}/members/{member}/nickname",
            "nickname",
            json={"nickname": nickname},
        )

    async def delete_nickname(self: BaseClient, server: HashId, member: HashId) -> None:
        await self.request("DELETE", f"servers/{server}/members/{member}/nickname")

    async def add_role(self: BaseClient, server: HashId, member: HashId, role: int) -> None:
        await self.request("PUT", f"servers/{server}/members/{member}/roles/{role}")

    async def remove_role(self: BaseClient, server: HashId, member: HashId, role: int) -> None:
        await self.request("DELETE", f"servers/{server}/members/{member}/roles/{role}")

    async def add_member_xp(self: BaseClient, server: HashId, member: HashId, amount: int) -> int:
        """Give XP to a member; returns their new total."""
        return int(
            await self._get_property(
                "POST",
                f"servers/{server}/members/{member}/xp",
                "total",
                json={"amount": amount},
            )
        )

    async def add_role_xp(self: BaseClient, server: HashId, role: int, amount: int) -> None:
        await self.request("POST", f"servers/{server}/roles/{role}/xp", json={"amount": amount})

    # Moderation

    async def kick_member(self: BaseClient, server: HashId, member: HashId) -> None:
        await self.request("DELETE", f"servers/{server}/members/{member}")

    async def get_bans(self: BaseClient, server: HashId) -> list[MemberBan]:
        return await self._get_models(MemberBan, "GET", f"servers/{server}/bans", "serverMemberBans")

    async def get_ban(self: BaseClient, server: HashId, member: HashId) -> MemberBan:
        return await self._get_model(MemberBan, "GET", f"servers/{server}/bans/{member}", "serverMemberBan")

    async def ban_member(
        self: BaseClient,
        server: HashId,
        member: HashId,
        reason: str | None = None,
    ) -> MemberBan:
        return await self._get_model(
            MemberBan,
            "POST",
            f"servers/{server}/bans/{member}",
            "serverMemberBan",
            json={"reason": reason},
        )

    async def unban_member(self: BaseClient, server: HashId, member: HashId) -> None:
        await self.request("DELETE", f"servers/{server}/bans/{member}")

    # Webhooks

    async def get_webhooks(self: BaseClient, server: HashId, channel: UUID | None = None) -> list[Webhook]:
        return await self._get_models(
            Webhook,
            "GET",
            f"servers/{server}/webhooks",
            "webhooks",
            params={"channelId": channel},
        )

    async def get_webhook(self: BaseClient, server: HashId, webhook: UUID) -> Webhook:
        return await self._get_model(Webhook, "GET", f"servers/{server}/webhooks/{webhook}", "webhook")

    async def create_webhook(self: BaseClient, server: HashId, channel: UUID, name: str) -> Webhook:
        """
        Create a webhook in a channel.

        Raises:
            ValueError: If the name is blank
        """
        require_text("name", name)
        return await self._get_model(
            Webhook,
            "POST",
            f"servers/{server}/webhooks",
            "webhook",
            json={"name": name, "channelId": str(channel)},
        )

    async def update_webhook(
        self: BaseClient,
        server: HashId,
        webhook: UUID,
        name: str,
        channel: UUID | None = None,
    ) -> Webhook:
        require_text("name", name)
        return await self._get_model(
            Webhook,
            "PUT",
            f"servers/{server}/webhooks/{webhook}",
            "webhook",
            json={"name": name, "channelId": str(channel) if channel else None},
        )

    async def delete_webhook(self: BaseClient, server: HashId, webhook: UUID) -> None:
        await self.request("DELETE", f"servers/{server}/webhooks/{webhook}")

    # Channels

    async def get_channel(self: BaseClient, channel: UUID) -> ServerChannel:
        return await self._get_model(ServerChannel, "GET", f"channels/{channel}", "channel")

    async def create_channel(
        self: BaseClient,
        server: HashId,
        name: str,
        type: str = "chat",
        *,
        topic: str | None = None,
        group: HashId | None = None,
        category: int | None = None,
        is_public: bool | None = None,
    ) -> ServerChannel:
        """
        Create a channel in a server.

        Args:
            server: Server to create the channel in
            name: Channel name (at most 100 characters)
            type: Channel type, e.g. ``chat``, ``forums``, ``docs``
            topic: Channel topic (at most 512 characters)
            group: Group to create the channel in
            category: Category to create the channel in
            is_public: Whether the channel is visible to everyone

        Raises:
            ValueError: If the name is blank or a limit is exceeded
        """
        require_text("name", name)
        enforce_limit("name", name, ServerChannel.NAME_LIMIT)
        enforce_limit("topic", topic, ServerChannel.TOPIC_LIMIT)
        body: dict[str, Any] = {
            "serverId": server,
            "groupId": group,
            "categoryId": category,
            "name": name,
            "type": type,
            "topic": topic,
            "isPublic": is_public,
        }
        return await self._get_model(ServerChannel, "POST", "channels", "channel", json=body)

    async def update_channel(
        self: BaseClient,
        channel: UUID,
        *,
        name: str | None = None,
        topic: str | None = None,
        is_public: bool | None = None,
    ) -> ServerChannel:
        enforce_limit("name", name, ServerChannel.NAME_LIMIT)
        enforce_limit("topic", topic, ServerChannel.TOPIC_LIMIT)
        return await self._get_model(
            ServerChannel,
            "PATCH",
            f"channels/{channel}",
            "channel",
            json={"name": name, "topic": topic, "isPublic": is_public},
        )

    async def delete_channel(self: BaseClient, channel: UUID) -> None:
        await self.request("DELETE", f"channels/{channel}")
