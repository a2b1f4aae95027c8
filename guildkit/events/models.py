"""
Event Models

Typed payloads of websocket events. Each model matches the ``d`` body of
one or more wire events; unknown fields are kept as extras.
"""

from typing import Any

from pydantic import Field

from guildkit.content.models import (
    CalendarEvent,
    CalendarEventComment,
    CalendarEventSeries,
    CalendarRsvp,
    ClientUser,
    DeletedMessage,
    Doc,
    DocComment,
    GuildedModel,
    HashId,
    ListItem,
    Member,
    MemberBan,
    Message,
    Reaction,
    Server,
    ServerChannel,
    SocialLink,
    Topic,
    TopicComment,
    Webhook,
)


# Protocol events


class WelcomeEvent(GuildedModel):
    """Sent once a websocket is connected (opcode 1)."""

    heartbeat_interval_ms: int
    last_message_id: str | None = None
    user: ClientUser | None = None


class ResumeEvent(GuildedModel):
    """Sent after missed events were replayed (opcode 2)."""

    last_message_id: str | None = None


class ServerEvent(GuildedModel):
    """Base for events that happen inside a server."""

    server_id: HashId | None = None


# Servers


class ServerAddedEvent(GuildedModel):
    """The bot was added to or removed from a server."""

    server: Server
    created_by: HashId | None = None


class XpAddedEvent(ServerEvent):
    """XP was given to members."""

    user_ids: list[HashId]
    amount: int


class MemberRoleIds(GuildedModel):
    user_id: HashId
    role_ids: list[int] = Field(default_factory=list)


class RolesUpdatedEvent(ServerEvent):
    """Members received or lost roles."""

    member_role_ids: list[MemberRoleIds]


# Members


class MemberJoinedEvent(ServerEvent):
    """A member joined a server."""

    member: Member


class UserInfo(GuildedModel):
    id: HashId
    nickname: str | None = None


class MemberUpdatedEvent(ServerEvent):
    """A member's server profile changed."""

    user_info: UserInfo


class MemberRemovedEvent(ServerEvent):
    """A member left, or was kicked or banned."""

    user_id: HashId
    is_kick: bool = False
    is_ban: bool = False


class MemberBanEvent(ServerEvent):
    """A member was banned or unbanned."""

    server_member_ban: MemberBan

    @property
    def ban(self) -> MemberBan:
        return self.server_member_ban


class MemberSocialLinkEvent(ServerEvent):
    """A social link was added, changed or removed on a profile."""

    social_link: SocialLink


# Channels


class ChannelEvent(ServerEvent):
    """A channel was created, updated or deleted."""

    channel: ServerChannel


class WebhookEvent(ServerEvent):
    """A webhook was created or updated."""

    webhook: Webhook


# Chat


class MessageEvent(ServerEvent):
    """A message was created or updated."""

    message: Message

    @property
    def channel_id(self) -> Any:
        return self.message.channel_id

    @property
    def content(self) -> str:
        return self.message.content

    @property
    def created_by(self) -> HashId:
        return self.message.created_by


class MessageDeletedEvent(ServerEvent):
    """A message was deleted."""

    message: DeletedMessage


class ReactionEvent(ServerEvent):
    """A reaction was added to or removed from any reactible content."""

    reaction: Reaction


# Forums


class TopicEvent(ServerEvent):
    """A forum topic lifecycle event."""

    forum_topic: Topic


class TopicCommentEvent(ServerEvent):
    """A forum topic comment lifecycle event."""

    forum_topic_comment: TopicComment


# Lists


class ItemEvent(ServerEvent):
    """A list item lifecycle event."""

    list_item: ListItem


# Docs


class DocEvent(ServerEvent):
    """A doc lifecycle event."""

    doc: Doc


class DocCommentEvent(ServerEvent):
    """A doc comment lifecycle event."""

    doc_comment: DocComment


# Calendars


class CalendarEventEvent(ServerEvent):
    """A calendar event lifecycle event."""

    calendar_event: CalendarEvent


class CalendarEventRsvpEvent(ServerEvent):
    """An RSVP was updated or deleted."""

    calendar_event_rsvp: CalendarRsvp


class CalendarEventRsvpManyEvent(ServerEvent):
    """Several RSVPs were updated at once."""

    calendar_event_rsvps: list[CalendarRsvp]


class CalendarEventSeriesEvent(ServerEvent):
    """A calendar event series was updated or deleted."""

    calendar_event_series: CalendarEventSeries
    calendar_event_id: int | None = None


class CalendarEventCommentEvent(ServerEvent):
    """A calendar event comment lifecycle event."""

    calendar_event_comment: CalendarEventComment
