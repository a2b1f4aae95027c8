"""
Supported Events

The fixed table of (key, model, transform) triples that defines which
websocket events a client understands.
"""

from typing import Any

from pydantic import BaseModel

from guildkit.errors import EventHandlingError
from guildkit.events.channel import Channel
from guildkit.events.dispatch import DispatchTable, PayloadTransform
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


def nest_parent_field(parent: str, child: str) -> PayloadTransform:
    """
    Build a transform that copies a top-level field into a nested object.

    Guilded sends some identifiers next to the object they belong to,
    e.g. ``{"serverId": ..., "member": {...}}``; the nested model expects
    ``serverId`` inside ``member``.
    """

    def transform(model: type[BaseModel], payload: dict[str, Any]) -> dict[str, Any]:
        nested = payload.get(child)
        if isinstance(nested, dict) and parent in payload:
            nested.setdefault(parent, payload[parent])
        return payload

    return transform


EVENT_DEFINITIONS: list[tuple[int | str, type[BaseModel], PayloadTransform | None]] = [
    # Protocol opcodes (WELCOME, RESUME)
    (1, WelcomeEvent, None),
    (2, ResumeEvent, None),
    # Servers
    ("BotServerMembershipCreated", ServerAddedEvent, None),
    ("BotServerMembershipDeleted", ServerAddedEvent, None),
    ("ServerXpAdded", XpAddedEvent, None),
    ("ServerRolesUpdated", RolesUpdatedEvent, None),
    # Members
    ("ServerMemberJoined", MemberJoinedEvent, nest_parent_field("serverId", "member")),
    ("ServerMemberUpdated", MemberUpdatedEvent, None),
    ("ServerMemberRemoved", MemberRemovedEvent, None),
    ("ServerMemberBanned", MemberBanEvent, nest_parent_field("serverId", "serverMemberBan")),
    ("ServerMemberUnbanned", MemberBanEvent, nest_parent_field("serverId", "serverMemberBan")),
    ("ServerMemberSocialLinkCreated", MemberSocialLinkEvent, None),
    ("ServerMemberSocialLinkUpdated", MemberSocialLinkEvent, None),
    ("ServerMemberSocialLinkDeleted", MemberSocialLinkEvent, None),
    # Channels and webhooks
    ("ServerChannelCreated", ChannelEvent, None),
    ("ServerChannelUpdated", ChannelEvent, None),
    ("ServerChannelDeleted", ChannelEvent, None),
    ("ServerWebhookCreated", WebhookEvent, None),
    ("ServerWebhookUpdated", WebhookEvent, None),
    # Chat messages
    ("ChatMessageCreated", MessageEvent, None),
    ("ChatMessageUpdated", MessageEvent, None),
    ("ChatMessageDeleted", MessageDeletedEvent, None),
    ("ChannelMessageReactionCreated", ReactionEvent, None),
    ("ChannelMessageReactionDeleted", ReactionEvent, None),
    # Forum topics
    ("ForumTopicCreated", TopicEvent, None),
    ("ForumTopicUpdated", TopicEvent, None),
    ("ForumTopicDeleted", TopicEvent, None),
    ("ForumTopicPinned", TopicEvent, None),
    ("ForumTopicUnpinned", TopicEvent, None),
    ("ForumTopicLocked", TopicEvent, None),
    ("ForumTopicUnlocked", TopicEvent, None),
    ("ForumTopicReactionCreated", ReactionEvent, None),
    ("ForumTopicReactionDeleted", ReactionEvent, None),
    ("ForumTopicCommentCreated", TopicCommentEvent, None),
    ("ForumTopicCommentUpdated", TopicCommentEvent, None),
    ("ForumTopicCommentDeleted", TopicCommentEvent, None),
    ("ForumTopicCommentReactionCreated", ReactionEvent, None),
    ("ForumTopicCommentReactionDeleted", ReactionEvent, None),
    # List items
    ("ListItemCreated", ItemEvent, None),
    ("ListItemUpdated", ItemEvent, None),
    ("ListItemDeleted", ItemEvent, None),
    ("ListItemCompleted", ItemEvent, None),
    ("ListItemUncompleted", ItemEvent, None),
    # Docs
    ("DocCreated", DocEvent, None),
    ("DocUpdated", DocEvent, None),
    ("DocDeleted", DocEvent, None),
    ("DocReactionCreated", ReactionEvent, None),
    ("DocReactionDeleted", ReactionEvent, None),
    ("DocCommentCreated", DocCommentEvent, None),
    ("DocCommentUpdated", DocCommentEvent, None),
    ("DocCommentDeleted", DocCommentEvent, None),
    ("DocCommentReactionCreated", ReactionEvent, None),
    ("DocCommentReactionDeleted", ReactionEvent, None),
    # Calendar events
    ("CalendarEventCreated", CalendarEventEvent, None),
    ("CalendarEventUpdated", CalendarEventEvent, None),
    ("CalendarEventDeleted", CalendarEventEvent, None),
    ("CalendarEventReactionCreated", ReactionEvent, None),
    ("CalendarEventReactionDeleted", ReactionEvent, None),
    ("CalendarEventRsvpUpdated", CalendarEventRsvpEvent, None),
    ("CalendarEventRsvpManyUpdated", CalendarEventRsvpManyEvent, None),
    ("CalendarEventRsvpDeleted", CalendarEventRsvpEvent, None),
    ("CalendarEventSeriesUpdated", CalendarEventSeriesEvent, None),
    ("CalendarEventSeriesDeleted", CalendarEventSeriesEvent, None),
    ("CalendarEventCommentCreated", CalendarEventCommentEvent, None),
    ("CalendarEventCommentUpdated", CalendarEventCommentEvent, None),
    ("CalendarEventCommentDeleted", CalendarEventCommentEvent, None),
    ("CalendarEventCommentReactionCreated", ReactionEvent, None),
    ("CalendarEventCommentReactionDeleted", ReactionEvent, None),
]


def build_event_table(error_sink: Channel[EventHandlingError]) -> DispatchTable:
    """Create a dispatch table with every supported event registered."""
    table = DispatchTable(error_sink)
    for key, model, transform in EVENT_DEFINITIONS:
        table.register(key, model, transform)
    return table
