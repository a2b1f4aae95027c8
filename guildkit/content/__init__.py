"""
guildkit content records

Typed records for Guilded entities, with capability facets.
"""

from guildkit.content.models import (
    CalendarCancellation,
    CalendarEvent,
    CalendarEventComment,
    CalendarEventSeries,
    CalendarRsvp,
    CalendarRsvpStatus,
    Capability,
    ClientUser,
    DeletedMessage,
    Doc,
    DocComment,
    Emote,
    GuildedModel,
    HashId,
    ListItem,
    ListItemNote,
    Member,
    MemberBan,
    MemberSummary,
    Message,
    Reaction,
    Server,
    ServerChannel,
    SocialLink,
    Topic,
    TopicComment,
    User,
    Webhook,
    has_capability,
)

__all__ = [
    # Facets
    "Capability",
    "GuildedModel",
    "HashId",
    "has_capability",
    # Users and servers
    "ClientUser",
    "Member",
    "MemberBan",
    "MemberSummary",
    "Server",
    "SocialLink",
    "User",
    # Channels
    "ServerChannel",
    "Webhook",
    # Content
    "CalendarCancellation",
    "CalendarEvent",
    "CalendarEventComment",
    "CalendarEventSeries",
    "CalendarRsvp",
    "CalendarRsvpStatus",
    "DeletedMessage",
    "Doc",
    "DocComment",
    "Emote",
    "ListItem",
    "ListItemNote",
    "Message",
    "Reaction",
    "Topic",
    "TopicComment",
]
