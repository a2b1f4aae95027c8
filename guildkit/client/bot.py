"""Client authenticated as a bot."""

from __future__ import annotations

import httpx

from guildkit.client.base import BaseClient
from guildkit.config import ClientSettings, get_settings
from guildkit.connection import WebsocketTransport


class BotClient(BaseClient):
    """
    Client that logs in with a bot token.

    The token is sent as ``Authorization: Bearer <token>`` on every HTTP
    request and on the websocket handshake.
    """

    def __init__(
        self,
        token: str | None = None,
        settings: ClientSettings | None = None,
        *,
        http: httpx.AsyncClient | None = None,
        transport: WebsocketTransport | None = None,
    ) -> None:
        """
        Initialize a bot client.

        Args:
            token: Bot auth token (defaults to GUILDKIT_TOKEN)
            settings: Client settings

        Raises:
            ValueError: If no token is given or configured
        """
        settings = settings or get_settings()
        token = token or settings.token
        if not token or not token.strip():
            raise ValueError("A bot token is required")
        self.token = token
        super().__init__(settings, http=http, transport=transport)

    @property
    def headers(self) -> dict[str, str]:
        return {**super().headers, "Authorization": f"Bearer {self.token}"}
