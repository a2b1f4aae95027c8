"""Client configuration."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class ClientSettings(BaseSettings):
    """Settings for a guildkit client."""

    model_config = SettingsConfigDict(env_prefix="GUILDKIT_")

    # Auth
    token: str | None = None

    # Endpoints
    api_url: str = "https://www.guilded.gg/api/v1/"
    websocket_url: str = "wss://www.guilded.gg/websocket/v1"
    user_agent: str = "guildkit (https://github.com/guildkit/guildkit)"

    # HTTP
    request_timeout: float = 30.0

    # WebSocket
    heartbeat_interval: float = 22.5  # seconds, replaced by the server's WELCOME
    connect_attempts: int = 3
    reconnect: bool = True
    reconnect_delay: float = 1.0
    max_reconnect_delay: float = 30.0

    # Commands
    command_prefix: str = "!"


_settings: ClientSettings | None = None


def get_settings() -> ClientSettings:
    """Get the shared settings instance (read from the environment once)."""
    global _settings
    if _settings is None:
        _settings = ClientSettings()
    return _settings


def reset_settings() -> None:
    """Reset the shared settings (mainly for testing)."""
    global _settings
    _settings = None
