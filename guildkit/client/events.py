"""
Client Event Streams

One typed broadcast stream per supported event. Each stream is the
channel of the matching dispatch table entry, so subscribing to
``client.message_created`` is the same as subscribing to
``client.events["ChatMessageCreated"].channel``.
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar, overload

from guildkit.events.channel import Channel
from guildkit.events.keys import EventKey, event_key
from guildkit.events.models import (
    CalendarEventCommentEvent,
    CalendarEventEvent,
    CalendarEventRsvpEvent,
    CalendarEventRsvpManyEvent,
    CalendarEventSeriesEvent,
    ChannelEvent,
    DocCommentEvent,
    DocEvent,
    ItemEvent,
    MemberBanEvent,
    MemberJoinedEvent,
    MemberRemovedEvent,
    MemberSocialLinkEvent,
    MemberUpdatedEvent,
    MessageDeletedEvent,
    MessageEvent,
    ReactionEvent,
    ResumeEvent,
    RolesUpdatedEvent,
    ServerAddedEvent,
    TopicCommentEvent,
    TopicEvent,
    WebhookEvent,
    WelcomeEvent,
    XpAddedEvent,
)

T = TypeVar("T")


class EventStream(Generic[T]):
    """Descriptor exposing one dispatch table entry's channel."""

    def __init__(self, key: int | str) -> None:
        self.key: EventKey = event_key(key)
        self.name = ""

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    @overload
    def __get__(self, instance: None, owner: type) -> EventStream[T]: ...

    @overload
    def __get__(self, instance: Any, owner: type) -> Channel[T]: ...

    def __get__(self, instance: Any, owner: type) -> EventStream[T] | Channel[T]:
        if instance is None:
            return self
        return instance.events[self.key].channel

    def __repr__(self) -> str:
        return f"EventStream({self.name!r}, key={str(self.key)!r})"


class ClientEvents:
    """Typed event streams; the host class must provide ``events``."""

    # Protocol
    welcome: EventStream[WelcomeEvent] = EventStream(1)
    resume: EventStream[ResumeEvent] = EventStream(2)

    # Servers
    server_added: EventStream[ServerAddedEvent] = EventStream("BotServerMembershipCreated")
    server_removed: EventStream[ServerAddedEvent] = EventStream("BotServerMembershipDeleted")
    xp_added: EventStream[XpAddedEvent] = EventStream("ServerXpAdded")
    roles_updated: EventStream[RolesUpdatedEvent] = EventStream("ServerRolesUpdated")

    # Members
    member_joined: EventStream[MemberJoinedEvent] = EventStream("ServerMemberJoined")
    member_updated: EventStream[MemberUpdatedEvent] = EventStream("ServerMemberUpdated")
    member_removed: EventStream[MemberRemovedEvent] = EventStream("ServerMemberRemoved")
    member_banned: EventStream[MemberBanEvent] = EventStream("ServerMemberBanned")
    member_unbanned: EventStream[MemberBanEvent] = EventStream("ServerMemberUnbanned")
    social_link_created: EventStream[MemberSocialLinkEvent] = EventStream("ServerMemberSocialLinkCreated")
    social_link_updated: EventStream[MemberSocialLinkEvent] = EventStream("ServerMemberSocialLinkUpdated")
    social_link_deleted: EventStream[MemberSocialLinkEvent] = EventStream("ServerMemberSocialLinkDeleted")

    # Channels and webhooks
    channel_created: EventStream[ChannelEvent] = EventStream("ServerChannelCreated")
    channel_updated: EventStream[ChannelEvent] = EventStream("ServerChannelUpdated")
    channel_deleted: EventStream[ChannelEvent] = EventStream("ServerChannelDeleted")
    webhook_created: EventStream[WebhookEvent] = EventStream("ServerWebhookCreated")
    webhook_updated: EventStream[WebhookEvent] = EventStream("ServerWebhookUpdated")

    # Chat
    message_created: EventStream[MessageEvent] = EventStream("ChatMessageCreated")
    message_updated: EventStream[MessageEvent] = EventStream("ChatMessageUpdated")
    message_deleted: EventStream[MessageDeletedEvent] = EventStream("ChatMessageDeleted")
    message_reaction_added: EventStream[ReactionEvent] = EventStream("ChannelMessageReactionCreated")
    message_reaction_removed: EventStream[ReactionEvent] = EventStream("ChannelMessageReactionDeleted")

    # Forums
    topic_created: EventStream[TopicEvent] = EventStream("ForumTopicCreated")
    topic_updated: EventStream[TopicEvent] = EventStream("ForumTopicUpdated")
    topic_deleted: EventStream[TopicEvent] = EventStream("ForumTopicDeleted")
    topic_pinned: EventStream[TopicEvent] = EventStream("ForumTopicPinned")
    topic_unpinned: EventStream[TopicEvent] = EventStream("ForumTopicUnpinned")
    topic_locked: EventStream[TopicEvent] = EventStream("ForumTopicLocked")
    topic_unlocked: EventStream[TopicEvent] = EventStream("ForumTopicUnlocked")
    topic_reaction_added: EventStream[ReactionEvent] = EventStream("ForumTopicReactionCreated")
    topic_reaction_removed: EventStream[ReactionEvent] = EventStream("ForumTopicReactionDeleted")
    topic_comment_created: EventStream[TopicCommentEvent] = EventStream("ForumTopicCommentCreated")
    topic_comment_updated: EventStream[TopicCommentEvent] = EventStream("ForumTopicCommentUpdated")
    topic_comment_deleted: EventStream[TopicCommentEvent] = EventStream("ForumTopicCommentDeleted")
    topic_comment_reaction_added: EventStream[ReactionEvent] = EventStream("ForumTopicCommentReactionCreated")
    topic_comment_reaction_removed: EventStream[ReactionEvent] = EventStream("ForumTopicCommentReactionDeleted")

    # Lists
    item_created: EventStream[ItemEvent] = EventStream("ListItemCreated")
    item_updated: EventStream[ItemEvent] = EventStream("ListItemUpdated")
    item_deleted: EventStream[ItemEvent] = EventStream("ListItemDeleted")
    item_completed: EventStream[ItemEvent] = EventStream("ListItemCompleted")
    item_uncompleted: EventStream[ItemEvent] = EventStream("ListItemUncompleted")

    # Docs
    doc_created: EventStream[DocEvent] = EventStream("DocCreated")
    doc_updated: EventStream[DocEvent] = EventStream("DocUpdated")
    doc_deleted: EventStream[DocEvent] = EventStream("DocDeleted")
    doc_reaction_added: EventStream[ReactionEvent] = EventStream("DocReactionCreated")
    doc_reaction_removed: EventStream[ReactionEvent] = EventStream("DocReactionDeleted")
    doc_comment_created: EventStream[DocCommentEvent] = EventStream("DocCommentCreated")
    doc_comment_updated: EventStream[DocCommentEvent] = EventStream("DocCommentUpdated")
    doc_comment_deleted: EventStream[DocCommentEvent] = EventStream("DocCommentDeleted")
    doc_comment_reaction_added: EventStream[ReactionEvent] = EventStream("DocCommentReactionCreated")
    doc_comment_reaction_removed: EventStream[ReactionEvent] = EventStream("DocCommentReactionDeleted")

    # Calendars
    calendar_event_created: EventStream[CalendarEventEvent] = EventStream("CalendarEventCreated")
    calendar_event_updated: EventStream[CalendarEventEvent] = EventStream("CalendarEventUpdated")
    calendar_event_deleted: EventStream[CalendarEventEvent] = EventStream("CalendarEventDeleted")
    calendar_event_reaction_added: EventStream[ReactionEvent] = EventStream("CalendarEventReactionCreated")
    calendar_event_reaction_removed: EventStream[ReactionEvent] = EventStream("CalendarEventReactionDeleted")
    rsvp_updated: EventStream[CalendarEventRsvpEvent] = EventStream("CalendarEventRsvpUpdated")
    rsvps_updated: EventStream[CalendarEventRsvpManyEvent] = EventStream("CalendarEventRsvpManyUpdated")
    rsvp_deleted: EventStream[CalendarEventRsvpEvent] = EventStream("CalendarEventRsvpDeleted")
    calendar_event_series_updated: EventStream[CalendarEventSeriesEvent] = EventStream(
        "CalendarEventSeriesUpdated"
    )
    calendar_event_series_deleted: EventStream[CalendarEventSeriesEvent] = EventStream(
        "CalendarEventSeriesDeleted"
    )
    calendar_event_comment_created: EventStream[CalendarEventCommentEvent] = EventStream(
        "CalendarEventCommentCreated"
    )
    calendar_event_comment_updated: EventStream[CalendarEventCommentEvent] = EventStream(
        "CalendarEventCommentUpdated"
    )
    calendar_event_comment_deleted: EventStream[CalendarEventCommentEvent] = EventStream(
        "CalendarEventCommentDeleted"
    )
    calendar_event_comment_reaction_added: EventStream[ReactionEvent] = EventStream(
        "CalendarEventCommentReactionCreated"
    )
    calendar_event_comment_reaction_removed: EventStream[ReactionEvent] = EventStream(
        "CalendarEventCommentReactionDeleted"
    )

    @classmethod
    def event_streams(cls) -> dict[str, EventStream[Any]]:
        """All stream descriptors by attribute name."""
        streams: dict[str, EventStream[Any]] = {}
        for klass in reversed(cls.__mro__):
            for name, value in vars(klass).items():
                if isinstance(value, EventStream):
                    streams[name] = value
        return streams
