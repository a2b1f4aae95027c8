"""
Pytest configuration and shared fixtures.
"""

import asyncio
import json
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any

import httpx
import pytest
import pytest_asyncio
from websockets.exceptions import ConnectionClosedError, ConnectionClosedOK

from guildkit.client import BotClient
from guildkit.config import ClientSettings, reset_settings
from guildkit.connection import WebsocketTransport

API_URL = "https://www.guilded.gg/api/v1/"
SOCKET_URL = "wss://www.guilded.gg/websocket/v1"

SERVER_ID = "wlVr3Ggl"
USER_ID = "Ann6LewA"
BOT_USER_ID = "d0bz9XjA"
CHANNEL_ID = "00000000-0000-4000-8000-000000000001"
MESSAGE_ID = "00000000-0000-4000-8000-0000000000aa"
CREATED_AT = "2023-06-01T12:00:00.000Z"

_END = object()
_DROP = object()


class FakeWebsocket:
    """In-memory stand-in for a websockets client connection."""

    def __init__(self) -> None:
        self.incoming: asyncio.Queue[Any] = asyncio.Queue()
        self.sent: list[str] = []
        self.closed = False
        self.close_code: int | None = None

    def feed(self, frame: dict[str, Any] | str) -> None:
        """Queue a frame as if the server had sent it."""
        self.incoming.put_nowait(frame if isinstance(frame, str) else json.dumps(frame))

    def drop(self) -> None:
        """Simulate the server going away without a close handshake."""
        self.incoming.put_nowait(_DROP)

    def __aiter__(self) -> "FakeWebsocket":
        return self

    async def __anext__(self) -> str:
        item = await self.incoming.get()
        if item is _END:
            raise StopAsyncIteration
        if item is _DROP:
            raise ConnectionClosedError(None, None)
        return item

    async def send(self, message: str) -> None:
        if self.closed:
            raise ConnectionClosedOK(None, None)
        self.sent.append(message)

    async def close(self, code: int = 1000, reason: str = "") -> None:
        if not self.closed:
            self.closed = True
            self.close_code = code
            self.incoming.put_nowait(_END)


class FakeConnector:
    """Records connection attempts and hands out FakeWebsockets."""

    def __init__(self) -> None:
        self.sockets: list[FakeWebsocket] = []
        self.calls: list[tuple[str, dict[str, str]]] = []
        self.failures: list[BaseException] = []

    async def __call__(self, url: str, additional_headers: dict[str, str] | None = None) -> FakeWebsocket:
        self.calls.append((url, dict(additional_headers or {})))
        if self.failures:
            raise self.failures.pop(0)
        websocket = FakeWebsocket()
        self.sockets.append(websocket)
        return websocket

    @property
    def websocket(self) -> FakeWebsocket:
        """The most recently opened socket."""
        return self.sockets[-1]


class FakeApi:
    """Route table for httpx.MockTransport."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], httpx.Response] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, path: str, status: int = 200, json: Any = None) -> None:
        if json is None:
            response = httpx.Response(status)
        else:
            response = httpx.Response(status, json=json)
        self.routes[(method, path)] = response

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix("/api/v1/")
        return self.routes.get((request.method, path), httpx.Response(204))

    @property
    def last_json(self) -> Any:
        return json.loads(self.requests[-1].content)


class Frames:
    """Builders for wire payloads and envelopes."""

    SERVER_ID = SERVER_ID
    USER_ID = USER_ID
    BOT_USER_ID = BOT_USER_ID
    CHANNEL_ID = CHANNEL_ID
    MESSAGE_ID = MESSAGE_ID
    CREATED_AT = CREATED_AT

    @staticmethod
    def message_payload(content: str, created_by: str = USER_ID, **extra: Any) -> dict[str, Any]:
        """A ChatMessageCreated body."""
        message = {
            "id": MESSAGE_ID,
            "type": "default",
            "serverId": SERVER_ID,
            "channelId": CHANNEL_ID,
            "content": content,
            "createdAt": CREATED_AT,
            "createdBy": created_by,
            **extra,
        }
        return {"serverId": SERVER_ID, "message": message}

    @staticmethod
    def event(name: str, payload: dict[str, Any], cursor: str | None = None) -> dict[str, Any]:
        """A domain event envelope."""
        frame: dict[str, Any] = {"op": 0, "t": name, "d": payload}
        if cursor is not None:
            frame["s"] = cursor
        return frame

    @classmethod
    def message(cls, content: str, cursor: str | None = None, **kwargs: Any) -> dict[str, Any]:
        """A ChatMessageCreated envelope."""
        return cls.event("ChatMessageCreated", cls.message_payload(content, **kwargs), cursor)

    @staticmethod
    def welcome(interval_ms: int = 30000, last_message_id: str = "cursor-0") -> dict[str, Any]:
        """A WELCOME envelope."""
        return {
            "op": 1,
            "d": {
                "heartbeatIntervalMs": interval_ms,
                "lastMessageId": last_message_id,
                "user": {
                    "id": BOT_USER_ID,
                    "name": "Test Bot",
                    "type": "bot",
                    "botId": "00000000-0000-4000-8000-0000000000b0",
                    "createdBy": USER_ID,
                    "createdAt": CREATED_AT,
                },
            },
        }

    @staticmethod
    def error(message: str = "Invalid token") -> dict[str, Any]:
        """An ERROR envelope."""
        return {"op": 8, "d": {"message": message}}


@pytest.fixture
def frames() -> type[Frames]:
    """Wire payload builders."""
    return Frames


@pytest.fixture(autouse=True)
def clean_settings() -> None:
    """Shared settings are re-read for each test."""
    reset_settings()


@pytest.fixture
def settings() -> ClientSettings:
    """Settings that never sleep between connection attempts."""
    return ClientSettings(
        token="test-token",
        api_url=API_URL,
        websocket_url=SOCKET_URL,
        reconnect_delay=0,
        max_reconnect_delay=0,
    )


@pytest.fixture
def connector() -> FakeConnector:
    """Fake websocket connector."""
    return FakeConnector()


@pytest.fixture
def api() -> FakeApi:
    """Fake Guilded REST API."""
    return FakeApi()


@pytest.fixture
def wait_until() -> Callable[..., Awaitable[None]]:
    """Poll a condition until it holds, failing after a timeout."""

    async def wait(predicate: Callable[[], bool], timeout: float = 1.0) -> None:
        async def poll() -> None:
            while not predicate():
                await asyncio.sleep(0.005)

        await asyncio.wait_for(poll(), timeout=timeout)

    return wait


@pytest_asyncio.fixture
async def transport(connector: FakeConnector) -> AsyncIterator[WebsocketTransport]:
    """Transport wired to the fake connector; closed after the test."""
    transport = WebsocketTransport(
        SOCKET_URL,
        headers={"Authorization": "Bearer test-token"},
        reconnect_delay=0,
        max_reconnect_delay=0,
        connector=connector,
    )
    yield transport
    await transport.close()


@pytest_asyncio.fixture
async def client(
    settings: ClientSettings,
    connector: FakeConnector,
    api: FakeApi,
) -> AsyncIterator[BotClient]:
    """Bot client backed by the fake API and fake websocket."""
    http = httpx.AsyncClient(base_url=API_URL, transport=httpx.MockTransport(api.handler))
    socket = WebsocketTransport(
        SOCKET_URL,
        headers={"Authorization": "Bearer test-token"},
        reconnect_delay=0,
        max_reconnect_delay=0,
        connector=connector,
    )
    bot = BotClient("test-token", settings, http=http, transport=socket)
    yield bot
    await bot.aclose()
    await http.aclose()
