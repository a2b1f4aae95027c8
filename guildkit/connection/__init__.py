"""Real-time websocket connection."""

from .envelope import HEARTBEAT_MESSAGE, LAST_MESSAGE_ID_HEADER, SocketEnvelope, SocketOpcode
from .transport import (
    DEFAULT_HEARTBEAT_INTERVAL,
    DisconnectInfo,
    DisconnectReason,
    SocketConnection,
    WebsocketTransport,
)

__all__ = [
    "DEFAULT_HEARTBEAT_INTERVAL",
    "HEARTBEAT_MESSAGE",
    "LAST_MESSAGE_ID_HEADER",
    "DisconnectInfo",
    "DisconnectReason",
    "SocketConnection",
    "SocketEnvelope",
    "SocketOpcode",
    "WebsocketTransport",
]
