"""
Content Models

Records for Guilded entities. Instead of an inheritance chain, every record
declares the capabilities it supports (reactions, updates, server scope)
and callers check for a capability rather than for a base class.
"""

from datetime import datetime, timedelta
from enum import Enum
from typing import Any, ClassVar
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

HashId = str


class Capability(str, Enum):
    """Optional facets a content record can have."""

    REACTIBLE = "reactible"
    UPDATABLE = "updatable"
    SERVER_SCOPED = "server_scoped"


def has_capability(content: Any, capability: Capability) -> bool:
    """Check whether a record (or record type) supports a capability."""
    return capability in getattr(content, "capabilities", frozenset())


class GuildedModel(BaseModel):
    """Base for all wire records: camelCase aliases, unknown fields kept."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    capabilities: ClassVar[frozenset[Capability]] = frozenset()


# Users and servers


class User(GuildedModel):
    """A Guilded user."""

    id: HashId
    name: str
    type: str = "user"
    avatar: str | None = None
    banner: str | None = None
    created_at: datetime | None = None


class ClientUser(User):
    """The user the client is logged in as."""

    bot_id: UUID | None = None
    created_by: HashId | None = None


class Server(GuildedModel):
    """A Guilded server."""

    id: HashId
    owner_id: HashId
    name: str
    type: str | None = None
    url: str | None = None
    about: str | None = None
    avatar: str | None = None
    timezone: str | None = None
    is_verified: bool = False
    default_channel_id: UUID | None = None
    created_at: datetime | None = None


class Member(GuildedModel):
    """A member of a server."""

    capabilities: ClassVar[frozenset[Capability]] = frozenset({Capability.SERVER_SCOPED})

    user: User
    role_ids: list[int] = Field(default_factory=list)
    nickname: str | None = None
    joined_at: datetime | None = None
    is_owner: bool = False
    server_id: HashId | None = None


class MemberSummary(GuildedModel):
    """Shortened member info returned by member listings."""

    user: User
    role_ids: list[int] = Field(default_factory=list)


class MemberBan(GuildedModel):
    """A ban of a user from a server."""

    capabilities: ClassVar[frozenset[Capability]] = frozenset({Capability.SERVER_SCOPED})

    user: User
    created_by: HashId
    created_at: datetime
    reason: str | None = None
    server_id: HashId | None = None


class SocialLink(GuildedModel):
    """A social link on a member's profile."""

    type: str
    user_id: HashId
    handle: str | None = None
    service_id: str | None = None
    created_at: datetime | None = None


# Channels


class ServerChannel(GuildedModel):
    """A channel in a server."""

    capabilities: ClassVar[frozenset[Capability]] = frozenset(
        {Capability.SERVER_SCOPED, Capability.UPDATABLE}
    )

    # Character limits enforced by the API
    NAME_LIMIT: ClassVar[int] = 100
    TOPIC_LIMIT: ClassVar[int] = 512

    id: UUID
    type: str
    name: str
    server_id: HashId
    created_by: HashId
    created_at: datetime
    topic: str | None = None
    group_id: HashId | None = None
    category_id: int | None = None
    parent_id: UUID | None = None
    is_public: bool = False
    updated_at: datetime | None = None
    archived_at: datetime | None = None


class Webhook(GuildedModel):
    """A channel webhook."""

    capabilities: ClassVar[frozenset[Capability]] = frozenset(
        {Capability.SERVER_SCOPED, Capability.UPDATABLE}
    )

    id: UUID
    name: str
    server_id: HashId
    channel_id: UUID
    created_by: HashId
    created_at: datetime
    avatar: str | None = None
    token: str | None = None
    deleted_at: datetime | None = None


# Reactions


class Emote(GuildedModel):
    """A server emote or a built-in emoji."""

    id: int
    name: str
    url: str | None = None
    server_id: HashId | None = None


class Reaction(GuildedModel):
    """A reaction on any reactible content."""

    channel_id: UUID
    created_by: HashId
    emote: Emote
    message_id: UUID | None = None
    forum_topic_id: int | None = None
    forum_topic_comment_id: int | None = None
    doc_id: int | None = None
    doc_comment_id: int | None = None
    calendar_event_id: int | None = None
    calendar_event_comment_id: int | None = None

    @property
    def content_id(self) -> UUID | int | None:
        """The identifier of the reacted-to content, whichever kind it is."""
        for value in (
            self.message_id,
            self.forum_topic_comment_id,
            self.forum_topic_id,
            self.doc_comment_id,
            self.doc_id,
            self.calendar_event_comment_id,
            self.calendar_event_id,
        ):
            if value is not None:
                return value
        return None


# Chat


class Message(GuildedModel):
    """A chat message."""

    capabilities: ClassVar[frozenset[Capability]] = frozenset(
        {Capability.REACTIBLE, Capability.UPDATABLE, Capability.SERVER_SCOPED}
    )
    content_path: ClassVar[str] = "messages"

    CONTENT_LIMIT: ClassVar[int] = 4000

    id: UUID
    channel_id: UUID
    created_by: HashId
    created_at: datetime
    type: str = "default"
    content: str = ""
    server_id: HashId | None = None
    group_id: HashId | None = None
    reply_message_ids: list[UUID] = Field(default_factory=list)
    embeds: list[dict[str, Any]] = Field(default_factory=list)
    is_private: bool = False
    is_silent: bool = False
    is_pinned: bool = False
    created_by_webhook_id: UUID | None = None
    updated_at: datetime | None = None

    @property
    def is_system(self) -> bool:
        """Whether this message was generated by Guilded itself."""
        return self.type == "system"


class DeletedMessage(GuildedModel):
    """What remains of a message after deletion."""

    id: UUID
    channel_id: UUID
    deleted_at: datetime
    server_id: HashId | None = None
    is_private: bool = False


# Forums


class Topic(GuildedModel):
    """A forum topic."""

    capabilities: ClassVar[frozenset[Capability]] = frozenset(
        {Capability.REACTIBLE, Capability.UPDATABLE, Capability.SERVER_SCOPED}
    )
    content_path: ClassVar[str] = "topics"

    id: int
    channel_id: UUID
    server_id: HashId
    title: str
    created_by: HashId
    created_at: datetime
    content: str | None = None
    updated_at: datetime | None = None
    bumped_at: datetime | None = None
    is_pinned: bool = False
    is_locked: bool = False


class TopicComment(GuildedModel):
    """A comment on a forum topic."""

    capabilities: ClassVar[frozenset[Capability]] = frozenset(
        {Capability.REACTIBLE, Capability.UPDATABLE}
    )

    id: int
    topic_id: int = Field(..., alias="forumTopicId")
    channel_id: UUID
    content: str
    created_by: HashId
    created_at: datetime
    updated_at: datetime | None = None

    @property
    def content_path(self) -> str:
        return f"topics/{self.topic_id}/comments"


# Lists


class ListItemNote(GuildedModel):
    """The note attached to a list item."""

    content: str
    created_by: HashId | None = None
    created_at: datetime | None = None
    updated_by: HashId | None = None
    updated_at: datetime | None = None


class ListItem(GuildedModel):
    """An item in a list channel."""

    capabilities: ClassVar[frozenset[Capability]] = frozenset(
        {Capability.UPDATABLE, Capability.SERVER_SCOPED}
    )

    id: UUID
    channel_id: UUID
    server_id: HashId
    message: str
    created_by: HashId
    created_at: datetime
    note: ListItemNote | None = None
    parent_list_item_id: UUID | None = None
    updated_by: HashId | None = None
    updated_at: datetime | None = None
    completed_by: HashId | None = None
    completed_at: datetime | None = None

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None


# Docs


class Doc(GuildedModel):
    """A document in a docs channel."""

    capabilities: ClassVar[frozenset[Capability]] = frozenset(
        {Capability.REACTIBLE, Capability.UPDATABLE, Capability.SERVER_SCOPED}
    )
    content_path: ClassVar[str] = "docs"

    id: int
    channel_id: UUID
    server_id: HashId
    title: str
    content: str
    created_by: HashId
    created_at: datetime
    updated_by: HashId | None = None
    updated_at: datetime | None = None


class DocComment(GuildedModel):
    """A comment on a document."""

    capabilities: ClassVar[frozenset[Capability]] = frozenset(
        {Capability.REACTIBLE, Capability.UPDATABLE}
    )

    id: int
    doc_id: int
    channel_id: UUID
    content: str
    created_by: HashId
    created_at: datetime
    updated_at: datetime | None = None

    @property
    def content_path(self) -> str:
        return f"docs/{self.doc_id}/comments"


# Calendar


class CalendarCancellation(GuildedModel):
    """Why and by whom a calendar event was cancelled."""

    created_by: HashId
    description: str | None = None


class CalendarEvent(GuildedModel):
    """An event in a calendar channel."""

    capabilities: ClassVar[frozenset[Capability]] = frozenset(
        {Capability.REACTIBLE, Capability.UPDATABLE, Capability.SERVER_SCOPED}
    )
    content_path: ClassVar[str] = "events"

    id: int
    channel_id: UUID
    server_id: HashId
    name: str
    created_by: HashId
    created_at: datetime
    starts_at: datetime
    description: str | None = None
    location: str | None = None
    url: str | None = None
    color: int | None = None
    duration: timedelta | None = None
    is_private: bool = False
    rsvp_limit: int | None = None
    series_id: UUID | None = None
    cancellation: CalendarCancellation | None = None

    @field_validator("duration", mode="before")
    @classmethod
    def _duration_from_minutes(cls, value: Any) -> Any:
        # The API sends the duration in minutes
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return timedelta(minutes=value)
        return value

    @property
    def ends_at(self) -> datetime | None:
        if self.duration is None:
            return None
        return self.starts_at + self.duration

    @property
    def is_canceled(self) -> bool:
        return self.cancellation is not None

    @property
    def canceled_by(self) -> HashId | None:
        return self.cancellation.created_by if self.cancellation else None


class CalendarRsvpStatus(str, Enum):
    """RSVP answers."""

    GOING = "going"
    MAYBE = "maybe"
    DECLINED = "declined"
    INVITED = "invited"
    WAITLISTED = "waitlisted"
    NOT_RESPONDED = "not responded"


class CalendarRsvp(GuildedModel):
    """A user's RSVP to a calendar event."""

    capabilities: ClassVar[frozenset[Capability]] = frozenset({Capability.SERVER_SCOPED})

    calendar_event_id: int
    channel_id: UUID
    server_id: HashId
    user_id: HashId
    status: CalendarRsvpStatus
    created_by: HashId
    created_at: datetime
    updated_by: HashId | None = None
    updated_at: datetime | None = None


class CalendarEventSeries(GuildedModel):
    """A repeating series of calendar events."""

    capabilities: ClassVar[frozenset[Capability]] = frozenset({Capability.SERVER_SCOPED})

    id: UUID
    channel_id: UUID
    server_id: HashId


class CalendarEventComment(GuildedModel):
    """A comment on a calendar event."""

    capabilities: ClassVar[frozenset[Capability]] = frozenset(
        {Capability.REACTIBLE, Capability.UPDATABLE}
    )

    id: int
    calendar_event_id: int
    channel_id: UUID
    content: str
    created_by: HashId
    created_at: datetime
    updated_at: datetime | None = None

    @property
    def content_path(self) -> str:
        return f"events/{self.calendar_event_id}/comments"
