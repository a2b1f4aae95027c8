"""
Base Client

Composes the websocket transport, the event dispatch table and an HTTP
client into one object. Typed event streams come from ClientEvents and
REST helpers from the mixins in this package.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar

import httpx
import structlog
from pydantic import BaseModel

from guildkit import __version__
from guildkit.client.chat import ChatMixin
from guildkit.client.content import ContentMixin
from guildkit.client.events import ClientEvents
from guildkit.client.servers import ServersMixin
from guildkit.config import ClientSettings, get_settings
from guildkit.connection import DisconnectInfo, SocketEnvelope, WebsocketTransport
from guildkit.content import ClientUser
from guildkit.errors import EventHandlingError, GuildedRequestError
from guildkit.events import Channel, DispatchTable, Subscription, build_event_table
from guildkit.events.models import WelcomeEvent

if TYPE_CHECKING:
    from guildkit.commands import CommandModule

logger = structlog.get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class BaseClient(ClientEvents, ServersMixin, ChatMixin, ContentMixin):
    """
    Client for the Guilded API without any authentication of its own.

    Usage:
        async with BotClient(token) as client:
            client.message_created.subscribe(on_message)
            await client.connect()
            await client.prepared.wait_for()
            ...
    """

    def __init__(
        self,
        settings: ClientSettings | None = None,
        *,
        http: httpx.AsyncClient | None = None,
        transport: WebsocketTransport | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            settings: Client settings (defaults to the shared settings)
            http: HTTP client to use instead of creating one
            transport: Websocket transport to use instead of creating one
        """
        self.settings = settings or get_settings()

        # Decode and subscriber failures from the dispatch table
        self.websocket_event_error: Channel[EventHandlingError] = Channel("websocket_event_error")
        self.events: DispatchTable = build_event_table(self.websocket_event_error)

        self._owns_http = http is None
        self.http = http or httpx.AsyncClient(
            base_url=self.settings.api_url,
            timeout=self.settings.request_timeout,
            headers=self.headers,
        )

        self.transport = transport or WebsocketTransport(
            self.settings.websocket_url,
            headers=self.headers,
            heartbeat_interval=self.settings.heartbeat_interval,
            connect_attempts=self.settings.connect_attempts,
            reconnect=self.settings.reconnect,
            reconnect_delay=self.settings.reconnect_delay,
            max_reconnect_delay=self.settings.max_reconnect_delay,
        )
        # Malformed frames and protocol errors from the transport
        self.socket_errors: Channel[BaseException] = self.transport.errors

        self.me: ClientUser | None = None
        self.is_prepared = False
        self.prepared: Channel[BaseClient] = Channel("prepared")

        self._frames_subscription: Subscription[SocketEnvelope] | None = None
        self.welcome.subscribe(self._on_welcome)
        self.transport.disconnected.subscribe(self._on_disconnected)

    @property
    def headers(self) -> dict[str, str]:
        """Headers sent with every HTTP request and websocket handshake."""
        return {"User-Agent": f"{self.settings.user_agent} guildkit/{__version__}"}

    # Connection

    async def connect(self, last_message_id: str | None = None) -> None:
        """
        Open the websocket and start dispatching events.

        Args:
            last_message_id: Resume after this event instead of starting live

        Raises:
            GuildedConnectionError: If the websocket cannot be opened
        """
        subscription = self._frames_subscription
        if subscription is None or not subscription.active:
            # A protocol error or close ends the previous frames subscription
            self._frames_subscription = self.transport.frames.subscribe(self._on_socket_message)

        await self.transport.open(last_message_id=last_message_id)
        logger.info("Client connected", url=self.transport.url)

    async def disconnect(self) -> None:
        """Close the websocket."""
        await self.transport.close()
        logger.info("Client disconnected")

    async def aclose(self) -> None:
        """Close the websocket and, if owned, the HTTP client."""
        if self.transport.is_open:
            await self.disconnect()
        if self._owns_http:
            await self.http.aclose()

    async def __aenter__(self) -> BaseClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def _on_socket_message(self, envelope: SocketEnvelope) -> None:
        await self.events.dispatch(envelope)

    async def _on_welcome(self, event: WelcomeEvent) -> None:
        self.me = event.user
        was_prepared = self.is_prepared
        self.is_prepared = True
        logger.info(
            "Client prepared",
            user=self.me.name if self.me else None,
            heartbeat_ms=event.heartbeat_interval_ms,
        )
        if not was_prepared:
            await self.prepared.publish(self)

    def _on_disconnected(self, info: DisconnectInfo) -> None:
        if not self.transport.is_open:
            self.is_prepared = False

    # Commands

    def add_commands(self, module: CommandModule) -> BaseClient:
        """Run a command module on every message this client receives."""
        module.add_to(self)
        return self

    # HTTP

    def build_request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> httpx.Request:
        """
        Build an API request.

        Args:
            method: HTTP method
            path: Path relative to the API URL, e.g. ``servers/abc12345``
            json: JSON body; None values are dropped from dict bodies
            params: Query parameters; None values are dropped

        Returns:
            The request, ready for execute_request()
        """
        if isinstance(json, dict):
            json = {key: value for key, value in json.items() if value is not None}
        query = {key: _query_value(value) for key, value in (params or {}).items() if value is not None}
        return self.http.build_request(
            method,
            path.lstrip("/"),
            json=json,
            params=query or None,
        )

    async def execute_request(self, request: httpx.Request) -> Any:
        """
        Send a request and decode its JSON body.

        Returns:
            The decoded body, or None if the response has no body

        Raises:
            GuildedRequestError: On a transport failure or a non-2xx status
        """
        try:
            response = await self.http.send(request)
        except httpx.HTTPError as e:
            logger.warning("HTTP request failed", method=request.method, url=str(request.url), error=str(e))
            raise GuildedRequestError(f"Request to {request.url} failed: {e}") from e

        logger.debug(
            "HTTP request",
            method=request.method,
            url=str(request.url),
            status=response.status_code,
        )

        if response.is_error:
            try:
                body = response.json()
            except ValueError:
                body = {}
            if not isinstance(body, dict):
                body = {}
            raise GuildedRequestError(
                body.get("message") or response.reason_phrase or "Request failed",
                status_code=response.status_code,
                code=body.get("code"),
            )

        if not response.content:
            return None
        return response.json()

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Build and execute a request in one step."""
        return await self.execute_request(self.build_request(method, path, json=json, params=params))

    async def _get_property(
        self,
        method: str,
        path: str,
        key: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        body = await self.request(method, path, json=json, params=params)
        if not isinstance(body, dict) or key not in body:
            raise GuildedRequestError(f"Response to {path} has no '{key}' property")
        return body[key]

    async def _get_model(self, model: type[ModelT], method: str, path: str, key: str, **kwargs: Any) -> ModelT:
        return model.model_validate(await self._get_property(method, path, key, **kwargs))

    async def _get_models(
        self, model: type[ModelT], method: str, path: str, key: str, **kwargs: Any
    ) -> list[ModelT]:
        return [model.model_validate(item) for item in await self._get_property(method, path, key, **kwargs)]


def _query_value(value: Any) -> Any:
    if isinstance(value, bool):
        return "true" if value else "false"
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)
