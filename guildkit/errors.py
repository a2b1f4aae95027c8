"""
Exceptions raised by guildkit.
"""

from typing import Any


class GuildkitError(Exception):
    """Base class for all guildkit errors."""

    pass


class GuildedConnectionError(GuildkitError):
    """Raised when a websocket cannot be opened (bad auth, bad cursor, network)."""

    pass


class GuildedProtocolError(GuildkitError):
    """Raised when the server sends an ERROR frame over the websocket."""

    def __init__(self, message: str, raw: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.raw = raw


class EventHandlingError(GuildkitError):
    """Wraps any exception raised while decoding or publishing one event."""

    def __init__(self, key: Any, envelope: Any) -> None:
        super().__init__(f"Failed to handle event {key}")
        self.key = key
        self.envelope = envelope


class DuplicateEventError(GuildkitError):
    """Raised when an event key is registered twice."""

    pass


class GuildedRequestError(GuildkitError):
    """Raised when a REST request fails or returns a non-2xx status."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        code: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code


class CommandDefinitionError(GuildkitError):
    """Raised when a command is declared with an invalid signature."""

    pass


class ArgumentBindingError(GuildkitError):
    """Raised when text tokens cannot be bound to a command's parameters."""

    pass
