"""WebSocket envelope definitions."""

from enum import IntEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from guildkit.events.keys import EventKey, NameKey, OpcodeKey


class SocketOpcode(IntEnum):
    """Protocol opcodes of the Guilded websocket."""

    EVENT = 0
    WELCOME = 1
    RESUME = 2
    ERROR = 8


# Literal ping sent by the heartbeat
HEARTBEAT_MESSAGE = "2"

# Header carrying the resume cursor on connect
LAST_MESSAGE_ID_HEADER = "guilded-last-message-id"


class SocketEnvelope(BaseModel):
    """A single text frame received from the websocket."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    opcode: int = Field(..., alias="op", description="Protocol opcode")
    event_name: str | None = Field(default=None, alias="t", description="Domain event name")
    payload: dict[str, Any] | None = Field(default=None, alias="d", description="Event body")
    message_id: str | None = Field(
        default=None, alias="s", description="Cursor of this event, used to resume"
    )

    @classmethod
    def from_json(cls, text: str | bytes) -> "SocketEnvelope":
        """Decode an envelope from frame text."""
        return cls.model_validate_json(text)

    @property
    def lookup_key(self) -> EventKey:
        """Dispatch key: the event name if present, otherwise the opcode."""
        if self.event_name:
            return NameKey(self.event_name)
        return OpcodeKey(self.opcode)

    @property
    def is_protocol(self) -> bool:
        """Whether this frame is a protocol frame rather than a domain event."""
        return self.opcode in (SocketOpcode.WELCOME, SocketOpcode.ERROR)

    def to_json(self) -> dict[str, Any]:
        """Convert back to the wire shape."""
        return self.model_dump(by_alias=True, exclude_none=True)
