"""
guildkit

Asyncio client library for the Guilded API: real-time events,
typed REST helpers and declarative bot commands.
"""

__version__ = "0.1.0"

from guildkit.client import BaseClient, BotClient
from guildkit.commands import CommandContext, CommandModule, CommandTree, FailedCommand, FallbackType, Parameter
from guildkit.config import ClientSettings
from guildkit.events import Channel, DispatchTable, NameKey, OpcodeKey

__all__ = [
    "__version__",
    # Client
    "BaseClient",
    "BotClient",
    "ClientSettings",
    # Events
    "Channel",
    "DispatchTable",
    "NameKey",
    "OpcodeKey",
    # Commands
    "CommandContext",
    "CommandModule",
    "CommandTree",
    "FailedCommand",
    "FallbackType",
    "Parameter",
]
