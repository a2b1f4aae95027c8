"""Event keys, broadcast channels and the dispatch table."""

from .channel import Channel, Subscription
from .dispatch import DispatchEntry, DispatchTable, PayloadTransform
from .keys import EventKey, NameKey, OpcodeKey, event_key
from .table import EVENT_DEFINITIONS, build_event_table, nest_parent_field

__all__ = [
    # Channels
    "Channel",
    "Subscription",
    # Keys
    "EventKey",
    "NameKey",
    "OpcodeKey",
    "event_key",
    # Dispatch
    "DispatchEntry",
    "DispatchTable",
    "PayloadTransform",
    "EVENT_DEFINITIONS",
    "build_event_table",
    "nest_parent_field",
]
