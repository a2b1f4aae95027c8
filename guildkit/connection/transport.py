"""
WebSocket Transport

Keeps the real-time connections to Guilded alive: connect with retry,
resume after a drop using the last event cursor, and a heartbeat loop
reprogrammed by the server's WELCOME frame.
"""

from __future__ import annotations

import asyncio
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable

import structlog
from pydantic import ValidationError
from websockets.asyncio.client import connect as websocket_connect
from websockets.exceptions import ConnectionClosed, WebSocketException

from guildkit.connection.envelope import (
    HEARTBEAT_MESSAGE,
    LAST_MESSAGE_ID_HEADER,
    SocketEnvelope,
    SocketOpcode,
)
from guildkit.errors import GuildedConnectionError, GuildedProtocolError
from guildkit.events.channel import Channel

logger = structlog.get_logger(__name__)

DEFAULT_HEARTBEAT_INTERVAL = 22.5  # seconds

# Opens a websocket: (url, additional_headers=...) -> connection
Connector = Callable[..., Awaitable[Any]]


class DisconnectReason(str, Enum):
    """Why a socket went away."""

    LOST = "lost"
    CLOSED_BY_CLIENT = "closed_by_client"
    SERVER_ERROR = "server_error"


@dataclass
class DisconnectInfo:
    """Published on ``WebsocketTransport.disconnected``."""

    url: str
    reason: DisconnectReason
    error: BaseException | None = None


@dataclass
class SocketConnection:
    """One open websocket and its receive loop."""

    url: str
    websocket: Any
    task: asyncio.Task[None] | None = None
    closing: bool = False
    # Resume cursor for this socket only
    last_message_id: str | None = None
    frames_received: int = field(default=0)


class WebsocketTransport:
    """
    Manages one or more Guilded websockets.

    Frames are decoded into SocketEnvelope values and published on
    ``frames`` in the order they arrive on each socket.

    Usage:
        transport = WebsocketTransport(url, headers={"Authorization": "Bearer ..."})
        transport.frames.subscribe(on_frame)
        await transport.open()
        ...
        await transport.close()
    """

    def __init__(
        self,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        heartbeat_interval: float = DEFAULT_HEARTBEAT_INTERVAL,
        connect_attempts: int = 3,
        reconnect: bool = True,
        reconnect_delay: float = 1.0,
        max_reconnect_delay: float = 30.0,
        connector: Connector | None = None,
    ) -> None:
        self.url = url
        self.headers = dict(headers or {})
        self.heartbeat_interval = heartbeat_interval
        self.connect_attempts = max(1, connect_attempts)
        self.reconnect = reconnect
        self.reconnect_delay = reconnect_delay
        self.max_reconnect_delay = max_reconnect_delay
        self._connector = connector or websocket_connect

        self.sockets: dict[str, SocketConnection] = {}
        self.last_message_id: str | None = None

        # Decoded envelopes for the dispatch table
        self.frames: Channel[SocketEnvelope] = Channel("frames")
        # Malformed or unexpected frames; never fatal
        self.errors: Channel[BaseException] = Channel("transport_errors")
        self.disconnected: Channel[DisconnectInfo] = Channel("disconnected")
        self.reconnected: Channel[SocketConnection] = Channel("reconnected")

        self._heartbeat_task: asyncio.Task[None] | None = None
        self._interval_changed = asyncio.Event()

    @property
    def is_open(self) -> bool:
        """Whether at least one socket is open."""
        return bool(self.sockets)

    async def open(
        self,
        last_message_id: str | None = None,
        url: str | None = None,
    ) -> SocketConnection:
        """
        Open a websocket and start receiving frames.

        Args:
            last_message_id: Cursor of the last processed event; the server
                replays everything after it before live events resume
            url: Socket URL (defaults to the transport's URL)

        Returns:
            The opened connection

        Raises:
            GuildedConnectionError: If the handshake fails or the socket
                cannot be established within the retry budget
        """
        target = url or self.url
        if target in self.sockets:
            logger.warning("Socket already open", url=target)
            return self.sockets[target]

        websocket = await self._connect(target, last_message_id)
        connection = SocketConnection(url=target, websocket=websocket, last_message_id=last_message_id)
        self.sockets[target] = connection
        connection.task = asyncio.create_task(self._receive_loop(connection))
        self._arm_heartbeat()

        logger.info("WebSocket opened", url=target, resumed=bool(last_message_id))
        return connection

    async def _connect(self, url: str, last_message_id: str | None) -> Any:
        headers = dict(self.headers)
        if last_message_id:
            headers[LAST_MESSAGE_ID_HEADER] = last_message_id

        delay = self.reconnect_delay
        last_error: BaseException | None = None
        for attempt in range(1, self.connect_attempts + 1):
            try:
                return await self._connector(url, additional_headers=headers)
            except WebSocketException as e:
                # Rejected handshake (bad auth, bad cursor); retrying won't help
                raise GuildedConnectionError(f"WebSocket handshake failed: {e}") from e
            except (OSError, asyncio.TimeoutError) as e:
                last_error = e
                logger.warning(
                    "WebSocket connect attempt failed",
                    url=url,
                    attempt=attempt,
                    error=str(e),
                )
                if attempt < self.connect_attempts:
                    await asyncio.sleep(delay)
                    delay = min(delay * 2, self.max_reconnect_delay)

        raise GuildedConnectionError(
            f"Could not connect to {url} after {self.connect_attempts} attempts"
        ) from last_error

    async def _receive_loop(self, connection: SocketConnection) -> None:
        """Read frames from one socket, reconnecting when it drops."""
        while True:
            lost: BaseException | None = None
            try:
                async for message in connection.websocket:
                    if isinstance(message, str):
                        try:
                            await self.handle_text(message, connection)
                        except Exception as e:
                            logger.error("WebSocket frame handling failed", url=connection.url, error=str(e))
                            await self._report(e)
            except ConnectionClosed as e:
                lost = e

            if connection.closing:
                return

            logger.warning("WebSocket lost", url=connection.url, error=str(lost) if lost else None)
            await self.disconnected.publish(
                DisconnectInfo(url=connection.url, reason=DisconnectReason.LOST, error=lost)
            )

            if not self.reconnect:
                self._forget(connection)
                return

            try:
                websocket = await self._connect(connection.url, connection.last_message_id)
            except GuildedConnectionError as e:
                logger.error("WebSocket reconnect failed", url=connection.url, error=str(e))
                self._forget(connection)
                await self.frames.fail(e)
                return

            if connection.closing:
                # close() ran while reconnecting
                await websocket.close(code=1000, reason="manual")
                return

            connection.websocket = websocket
            logger.info("WebSocket resumed", url=connection.url, last_message_id=connection.last_message_id)
            await self.reconnected.publish(connection)

    async def handle_text(
        self,
        text: str,
        connection: SocketConnection | None = None,
    ) -> SocketEnvelope | None:
        """
        Decode one text frame and route it.

        Returns:
            The envelope published on ``frames``, or None if it was not published
        """
        try:
            envelope = SocketEnvelope.from_json(text)
        except ValidationError as e:
            logger.warning("Malformed websocket frame", error=str(e))
            await self._report(e)
            return None

        if connection is not None:
            connection.frames_received += 1

        if envelope.is_protocol and not self.sockets:
            await self._report(
                GuildedProtocolError(f"Opcode {envelope.opcode} received without an open socket", text)
            )
            return None

        payload = envelope.payload or {}

        if envelope.opcode == SocketOpcode.WELCOME:
            interval_ms = payload.get("heartbeatIntervalMs")
            if interval_ms is not None:
                try:
                    self.set_heartbeat_interval(float(interval_ms) / 1000)
                except (TypeError, ValueError) as e:
                    logger.warning("Invalid heartbeat interval", value=interval_ms, error=str(e))
                    await self._report(
                        GuildedProtocolError(f"Invalid heartbeat interval: {interval_ms!r}", text)
                    )
                    return None
            if payload.get("lastMessageId"):
                self._advance_cursor(str(payload["lastMessageId"]), connection)

        elif envelope.opcode == SocketOpcode.ERROR:
            message = str(payload.get("message", "Unknown websocket error"))
            logger.error("WebSocket error frame", message=message)
            if connection is not None:
                connection.closing = True
                self._forget(connection)
                await connection.websocket.close()
                await self.disconnected.publish(
                    DisconnectInfo(url=connection.url, reason=DisconnectReason.SERVER_ERROR)
                )
            await self.frames.fail(GuildedProtocolError(message, text))
            return None

        if envelope.message_id:
            self._advance_cursor(envelope.message_id, connection)

        logger.debug("WebSocket frame", opcode=envelope.opcode, event_name=envelope.event_name)
        try:
            await self.frames.publish(envelope)
        except Exception as e:
            # A failing subscriber must not stop the receive loop
            logger.error("Frame subscriber failed", event_name=envelope.event_name, error=str(e))
            await self._report(e)
        return envelope

    def _advance_cursor(self, message_id: str, connection: SocketConnection | None) -> None:
        # The transport keeps the newest cursor seen on any socket; each
        # socket resumes from its own
        self.last_message_id = message_id
        if connection is not None:
            connection.last_message_id = message_id

    async def _report(self, error: BaseException) -> None:
        try:
            await self.errors.publish(error)
        except Exception as e:
            logger.error("Error subscriber failed", error=str(e))

    def set_heartbeat_interval(self, seconds: float) -> None:
        """Change the heartbeat period; the running timer restarts with it."""
        if not 0 < seconds < math.inf:
            raise ValueError("Heartbeat interval must be a positive number of seconds")
        self.heartbeat_interval = seconds
        self._interval_changed.set()
        logger.debug("Heartbeat interval set", seconds=seconds)

    def _arm_heartbeat(self) -> None:
        if self._heartbeat_task is None or self._heartbeat_task.done():
            self._heartbeat_task = asyncio.create_task(self._heartbeat_loop())

    async def _heartbeat_loop(self) -> None:
        while self.sockets:
            self._interval_changed.clear()
            try:
                await asyncio.wait_for(self._interval_changed.wait(), timeout=self.heartbeat_interval)
                # Interval changed; start a new period
                continue
            except asyncio.TimeoutError:
                pass
            await self.send_heartbeat()

    async def send_heartbeat(self) -> None:
        """Send a ping through every open socket."""
        for connection in list(self.sockets.values()):
            try:
                await connection.websocket.send(HEARTBEAT_MESSAGE)
            except ConnectionClosed as e:
                # The receive loop sees the same drop and handles it
                logger.debug("Heartbeat not sent", url=connection.url, error=str(e))

    def _forget(self, connection: SocketConnection) -> None:
        if self.sockets.get(connection.url) is connection:
            del self.sockets[connection.url]

    async def close(self) -> None:
        """Close every socket, disarm the heartbeat and complete ``frames``."""
        connections = list(self.sockets.values())
        self.sockets.clear()
        for connection in connections:
            connection.closing = True

        if self._heartbeat_task is not None:
            self._heartbeat_task.cancel()
            try:
                await self._heartbeat_task
            except asyncio.CancelledError:
                pass
            self._heartbeat_task = None

        for connection in connections:
            try:
                await connection.websocket.close(code=1000, reason="manual")
            except ConnectionClosed:
                pass
            if connection.task is not None and connection.task is not asyncio.current_task():
                try:
                    await asyncio.wait_for(connection.task, timeout=5)
                except asyncio.TimeoutError:
                    connection.task.cancel()
            await self.disconnected.publish(
                DisconnectInfo(url=connection.url, reason=DisconnectReason.CLOSED_BY_CLIENT)
            )
            logger.info("WebSocket closed", url=connection.url)

        await self.frames.complete()
