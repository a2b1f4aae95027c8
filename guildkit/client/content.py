"""
Content REST helpers: forum topics, list items, docs and calendar events,
with their comments and RSVPs.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any
from uuid import UUID

from guildkit.client.servers import require_text
from guildkit.content import (
    CalendarEvent,
    CalendarEventComment,
    CalendarRsvp,
    CalendarRsvpStatus,
    Doc,
    DocComment,
    HashId,
    ListItem,
    Topic,
    TopicComment,
)

if TYPE_CHECKING:
    from guildkit.client.base import BaseClient


class ContentMixin:
    """Forum, list, doc and calendar endpoints."""

    # Forum topics

    async def create_topic(self: BaseClient, channel: UUID, title: str, content: str) -> Topic:
        require_text("title", title)
        return await self._get_model(
            Topic,
            "POST",
            f"channels/{channel}/topics",
            "forumTopic",
            json={"title": title, "content": content},
        )

    async def get_topics(
        self: BaseClient,
        channel: UUID,
        *,
        before: datetime | None = None,
        limit: int | None = None,
    ) -> list[Topic]:
        return await self._get_models(
            Topic,
            "GET",
            f"channels/{channel}/topics",
            "forumTopics",
            params={"before": before, "limit": limit},
        )

    async def get_topic(self: BaseClient, channel: UUID, topic: int) -> Topic:
        return await self._get_model(Topic, "GET", f"channels/{channel}/topics/{topic}", "forumTopic")

    async def update_topic(
        self: BaseClient,
        channel: UUID,
        topic: int,
        *,
        title: str | None = None,
        content: str | None = None,
    ) -> Topic:
        return await self._get_model(
            Topic,
            "PATCH",
            f"channels/{channel}/topics/{topic}",
            "forumTopic",
            json={"title": title, "content": content},
        )

    async def delete_topic(self: BaseClient, channel: UUID, topic: int) -> None:
        await self.request("DELETE", f"channels/{channel}/topics/{topic}")

    async def pin_topic(self: BaseClient, channel: UUID, topic: int) -> None:
        await self.request("PUT", f"channels/{channel}/topics/{topic}/pin")

    async def unpin_topic(self: BaseClient, channel: UUID, topic: int) -> None:
        await self.request("DELETE", f"channels/{channel}/topics/{topic}/pin")

    async def lock_topic(self: BaseClient, channel: UUID, topic: int) -> None:
        await self.request("PUT", f"channels/{channel}/topics/{topic}/lock")

    async def unlock_topic(self: BaseClient, channel: UUID, topic: int) -> None:
        await self.request("DELETE", f"channels/{channel}/topics/{topic}/lock")

    async def create_topic_comment(
        self: BaseClient, channel: UUID, topic: int, content: str
    ) -> TopicComment:
        require_text("content", content)
        return await self._get_model(
            TopicComment,
            "POST",
            f"channels/{channel}/topics/{topic}/comments",
            "forumTopicComment",
            json={"content": content},
        )

    async def get_topic_comments(self: BaseClient, channel: UUID, topic: int) -> list[TopicComment]:
        return await self._get_models(
            TopicComment,
            "GET",
            f"channels/{channel}/topics/{topic}/comments",
            "forumTopicComments",
        )

    async def get_topic_comment(
        self: BaseClient, channel: UUID, topic: int, comment: int
    ) -> TopicComment:
        return await self._get_model(
            TopicComment,
            "GET",
            f"channels/{channel}/topics/{topic}/comments/{comment}",
            "forumTopicComment",
        )

    async def update_topic_comment(
        self: BaseClient, channel: UUID, topic: int, comment: int, content: str
    ) -> TopicComment:
        require_text("content", content)
        return await self._get_model(
            TopicComment,
            "PATCH",
            f"channels/{channel}/topics/{topic}/comments/{comment}",
            "forumTopicComment",
            json={"content": content},
        )

    async def delete_topic_comment(self: BaseClient, channel: UUID, topic: int, comment: int) -> None:
        await self.request("DELETE", f"channels/{channel}/topics/{topic}/comments/{comment}")

    # List items

    async def create_item(
        self: BaseClient,
        channel: UUID,
        message: str,
        note: str | None = None,
    ) -> ListItem:
        require_text("message", message)
        return await self._get_model(
            ListItem,
            "POST",
            f"channels/{channel}/items",
            "listItem",
            json={"message": message, "note": {"content": note} if note else None},
        )

    async def get_items(self: BaseClient, channel: UUID) -> list[ListItem]:
        return await self._get_models(ListItem, "GET", f"channels/{channel}/items", "listItems")

    async def get_item(self: BaseClient, channel: UUID, item: UUID) -> ListItem:
        return await self._get_model(ListItem, "GET", f"channels/{channel}/items/{item}", "listItem")

    async def update_item(
        self: BaseClient,
        channel: UUID,
        item: UUID,
        message: str,
        note: str | None = None,
    ) -> ListItem:
        require_text("message", message)
        return await self._get_model(
            ListItem,
            "PUT",
            f"channels/{channel}/items/{item}",
            "listItem",
            json={"message": message, "note": {"content": note} if note else None},
        )

    async def delete_item(self: BaseClient, channel: UUID, item: UUID) -> None:
        await self.request("DELETE", f"channels/{channel}/items/{item}")

    async def complete_item(self: BaseClient, channel: UUID, item: UUID) -> None:
        await self.request("POST", f"channels/{channel}/items/{item}/complete")

    async def uncomplete_item(self: BaseClient, channel: UUID, item: UUID) -> None:
        await self.request("DELETE", f"channels/{channel}/items/{item}/complete")

    # Docs

    async def create_doc(self: BaseClient, channel: UUID, title: str, content: str) -> Doc:
        require_text("title", title)
        return await self._get_model(
            Doc,
            "POST",
            f"channels/{channel}/docs",
            "doc",
            json={"title": title, "content": content},
        )

    async def get_docs(
        self: BaseClient,
        channel: UUID,
        *,
        before: datetime | None = None,
        limit: int | None = None,
    ) -> list[Doc]:
        return await self._get_models(
            Doc,
            "GET",
            f"channels/{channel}/docs",
            "docs",
            params={"before": before, "limit": limit},
        )

    async def get_doc(self: BaseClient, channel: UUID, doc: int) -> Doc:
        return await self._get_model(Doc, "GET", f"channels/{channel}/docs/{doc}", "doc")

    async def update_doc(self: BaseClient, channel: UUID, doc: int, title: str, content: str) -> Doc:
        require_text("title", title)
        return await self._get_model(
            Doc,
            "PUT",
            f"channels/{channel}/docs/{doc}",
            "doc",
            json={"title": title, "content": content},
        )

    async def delete_doc(self: BaseClient, channel: UUID, doc: int) -> None:
        await self.request("DELETE", f"channels/{channel}/docs/{doc}")

    async def create_doc_comment(self: BaseClient, channel: UUID, doc: int, content: str) -> DocComment:
        require_text("content", content)
        return await self._get_model(
            DocComment,
            "POST",
            f"channels/{channel}/docs/{doc}/comments",
            "docComment",
            json={"content": content},
        )

    async def get_doc_comments(self: BaseClient, channel: UUID, doc: int) -> list[DocComment]:
        return await self._get_models(
            DocComment, "GET", f"channels/{channel}/docs/{doc}/comments", "docComments"
        )

    async def update_doc_comment(
        self: BaseClient, channel: UUID, doc: int, comment: int, content: str
    ) -> DocComment:
        require_text("content", content)
        return await self._get_model(
            DocComment,
            "PATCH",
            f"channels/{channel}/docs/{doc}/comments/{comment}",
            "docComment",
            json={"content": content},
        )

    async def delete_doc_comment(self: BaseClient, channel: UUID, doc: int, comment: int) -> None:
        await self.request("DELETE", f"channels/{channel}/docs/{doc}/comments/{comment}")

    # Calendar events

    async def create_event(
        self: BaseClient,
        channel: UUID,
        name: str,
        *,
        description: str | None = None,
        location: str | None = None,
        starts_at: datetime | None = None,
        url: str | None = None,
        color: int | None = None,
        duration: timedelta | None = None,
        rsvp_limit: int | None = None,
        is_private: bool | None = None,
    ) -> CalendarEvent:
        """
        Create a calendar event.

        Args:
            channel: Calendar channel
            name: Event name
            duration: Event length; sent to the API in whole minutes
        """
        require_text("name", name)
        body: dict[str, Any] = {
            "name": name,
            "description": description,
            "location": location,
            "startsAt": starts_at.isoformat() if starts_at else None,
            "url": url,
            "color": color,
            "duration": int(duration.total_seconds() // 60) if duration else None,
            "rsvpLimit": rsvp_limit,
            "isPrivate": is_private,
        }
        return await self._get_model(CalendarEvent, "POST", f"channels/{channel}/events", "calendarEvent", json=body)

    async def get_events(
        self: BaseClient,
        channel: UUID,
        *,
        before: datetime | None = None,
        after: datetime | None = None,
        limit: int | None = None,
    ) -> list[CalendarEvent]:
        return await self._get_models(
            CalendarEvent,
            "GET",
            f"channels/{channel}/events",
            "calendarEvents",
            params={"before": before, "after": after, "limit": limit},
        )

    async def get_event(self: BaseClient, channel: UUID, event: int) -> CalendarEvent:
        return await self._get_model(CalendarEvent, "GET", f"channels/{channel}/events/{event}", "calendarEvent")

    async def update_event(self: BaseClient, channel: UUID, event: int, **changes: Any) -> CalendarEvent:
        """Update a calendar event; keyword names follow create_event()."""
        body: dict[str, Any] = {}
        for name, value in changes.items():
            if isinstance(value, timedelta):
                value = int(value.total_seconds() // 60)
            elif isinstance(value, datetime):
                value = value.isoformat()
            body[_camel(name)] = value
        return await self._get_model(
            CalendarEvent, "PATCH", f"channels/{channel}/events/{event}", "calendarEvent", json=body
        )

    async def delete_event(self: BaseClient, channel: UUID, event: int) -> None:
        await self.request("DELETE", f"channels/{channel}/events/{event}")

    async def create_event_comment(
        self: BaseClient, channel: UUID, event: int, content: str
    ) -> CalendarEventComment:
        require_text("content", content)
        return await self._get_model(
            CalendarEventComment,
            "POST",
            f"channels/{channel}/events/{event}/comments",
            "calendarEventComment",
            json={"content": content},
        )

    async def delete_event_comment(self: BaseClient, channel: UUID, event: int, comment: int) -> None:
        await self.request("DELETE", f"channels/{channel}/events/{event}/comments/{comment}")

    # RSVPs

    async def get_rsvps(self: BaseClient, channel: UUID, event: int) -> list[CalendarRsvp]:
        return await self._get_models(
            CalendarRsvp, "GET", f"channels/{channel}/events/{event}/rsvps", "calendarEventRsvps"
        )

    async def get_rsvp(self: BaseClient, channel: UUID, event: int, user: HashId) -> CalendarRsvp:
        return await self._get_model(
            CalendarRsvp, "GET", f"channels/{channel}/events/{event}/rsvps/{user}", "calendarEventRsvp"
        )

    async def set_rsvp(
        self: BaseClient,
        channel: UUID,
        event: int,
        user: HashId,
        status: CalendarRsvpStatus,
    ) -> CalendarRsvp:
        return await self._get_model(
            CalendarRsvp,
            "PUT",
            f"channels/{channel}/events/{event}/rsvps/{user}",
            "calendarEventRsvp",
            json={"status": CalendarRsvpStatus(status).value},
        )

    async def delete_rsvp(self: BaseClient, channel: UUID, event: int, user: HashId) -> None:
        await self.request("DELETE", f"channels/{channel}/events/{event}/rsvps/{user}")


def _camel(name: str) -> str:
    first, *rest = name.split("_")
    return first + "".join(part.title() for part in rest)
