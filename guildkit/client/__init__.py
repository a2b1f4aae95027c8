"""Guilded API clients."""

from .base import BaseClient
from .bot import BotClient
from .events import ClientEvents, EventStream

__all__ = [
    "BaseClient",
    "BotClient",
    "ClientEvents",
    "EventStream",
]
