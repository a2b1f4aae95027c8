"""
Dispatch keys.

A wire event is identified either by its protocol opcode or by its event
name. The two live in separate key types so they can never collide.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class OpcodeKey:
    """Key for protocol-level frames (welcome, resume)."""

    opcode: int

    def __str__(self) -> str:
        return f"op:{self.opcode}"


@dataclass(frozen=True)
class NameKey:
    """Key for domain events, e.g. ``ChatMessageCreated``."""

    name: str

    def __str__(self) -> str:
        return self.name


EventKey = OpcodeKey | NameKey


def event_key(value: "int | str | EventKey") -> EventKey:
    """Coerce an opcode or an event name into an EventKey."""
    if isinstance(value, (OpcodeKey, NameKey)):
        return value
    # bool is an int subclass but never a valid opcode
    if isinstance(value, bool):
        raise TypeError("Event key cannot be a bool")
    if isinstance(value, int):
        return OpcodeKey(value)
    if isinstance(value, str):
        return NameKey(value)
    raise TypeError(f"Event key must be int or str, got {type(value).__name__}")
