"""
Event Dispatch Table

Maps wire event keys (opcodes or event names) to the model each payload
is decoded into, and republishes decoded events on per-key channels.
"""

from __future__ import annotations

import copy
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable

import structlog
from pydantic import BaseModel

from guildkit.errors import DuplicateEventError, EventHandlingError
from guildkit.events.channel import Channel
from guildkit.events.keys import EventKey, event_key

if TYPE_CHECKING:
    from guildkit.connection.envelope import SocketEnvelope

logger = structlog.get_logger(__name__)

# Rewrites a raw payload before it is decoded: (model, payload) -> payload
PayloadTransform = Callable[[type[BaseModel], dict[str, Any]], dict[str, Any]]


@dataclass
class DispatchEntry:
    """How one wire event is decoded and where it is published."""

    key: EventKey
    model: type[BaseModel]
    transform: PayloadTransform | None = None
    channel: Channel[Any] = field(init=False)

    def __post_init__(self) -> None:
        self.channel = Channel(str(self.key))

    def decode(self, payload: dict[str, Any] | None) -> BaseModel:
        """Apply the transform (identity by default) and decode into the model."""
        data = copy.deepcopy(payload) if payload else {}
        if self.transform is not None:
            data = self.transform(self.model, data)
        return self.model.model_validate(data)


class DispatchTable:
    """
    Registry of every event the client understands.

    Entries are registered once at client construction. Frames whose key
    has no entry are dropped silently, so new server events never break
    an older client.

    Usage:
        errors: Channel[EventHandlingError] = Channel("event_errors")
        table = DispatchTable(errors)
        table.register("ChatMessageCreated", MessageEvent)

        table["ChatMessageCreated"].channel.subscribe(on_message)
        await table.dispatch(envelope)
    """

    def __init__(self, error_sink: Channel[EventHandlingError]) -> None:
        """
        Initialize an empty table.

        Args:
            error_sink: Channel that receives decode and subscriber failures
        """
        self.error_sink = error_sink
        self._entries: dict[EventKey, DispatchEntry] = {}

    def register(
        self,
        key: int | str | EventKey,
        model: type[BaseModel],
        transform: PayloadTransform | None = None,
    ) -> DispatchEntry:
        """
        Register a wire event.

        Args:
            key: Opcode (int) or event name (str)
            model: Model the payload is decoded into
            transform: Optional payload rewrite applied before decoding

        Returns:
            The new entry

        Raises:
            DuplicateEventError: If the key is already registered
        """
        resolved = event_key(key)
        if resolved in self._entries:
            raise DuplicateEventError(f"Event '{resolved}' is already registered")
        entry = DispatchEntry(resolved, model, transform)
        self._entries[resolved] = entry
        logger.debug("Registered event", key=str(resolved), model=model.__name__)
        return entry

    def get(self, key: int | str | EventKey) -> DispatchEntry | None:
        """Get an entry, or None if the key is not registered."""
        return self._entries.get(event_key(key))

    def keys(self) -> list[EventKey]:
        """All registered keys, in registration order."""
        return list(self._entries)

    async def dispatch(self, envelope: SocketEnvelope) -> BaseModel | None:
        """
        Decode one frame and publish it on its entry's channel.

        Never raises: failures go to the error sink and the next frame
        is processed as usual.

        Returns:
            The decoded event, or None if it was unsupported or failed
        """
        key = envelope.lookup_key
        entry = self._entries.get(key)
        if entry is None:
            return None

        try:
            event = entry.decode(envelope.payload)
        except Exception as e:
            await self._report(key, envelope, e)
            return None

        try:
            await entry.channel.publish(event)
        except Exception as e:
            await self._report(key, envelope, e)
        return event

    async def _report(self, key: EventKey, envelope: SocketEnvelope, error: Exception) -> None:
        logger.warning("Event handling failed", key=str(key), error=str(error))
        wrapped = EventHandlingError(key, envelope)
        wrapped.__cause__ = error
        try:
            await self.error_sink.publish(wrapped)
        except Exception as sink_error:
            logger.error("Event error handler failed", key=str(key), error=str(sink_error))

    def __getitem__(self, key: int | str | EventKey) -> DispatchEntry:
        return self._entries[event_key(key)]

    def __contains__(self, key: object) -> bool:
        try:
            return event_key(key) in self._entries  # type: ignore[arg-type]
        except TypeError:
            return False

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[DispatchEntry]:
        return iter(list(self._entries.values()))
