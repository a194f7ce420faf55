"""Application configuration via environment variables.

Uses pydantic-settings to load config from env vars with RELAY_ prefix.
No YAML files, no file-based config — just env vars (12-factor app style).

Learn: The listening port also honours a plain PORT variable, which is
what most container platforms inject. A garbage port value falls back to
the default instead of refusing to start.
"""

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings

DEFAULT_PORT = 8000


class Settings(BaseSettings):
    """All relay configuration. Set via RELAY_* env vars."""

    # Server
    host: str = "0.0.0.0"
    port: int = Field(
        default=DEFAULT_PORT,
        validation_alias=AliasChoices("RELAY_PORT", "PORT", "port"),
    )
    server_name: str = "lepotilnica-ws"
    welcome_message: str = "Connected to Lepotilnica real-time server"

    # Fan-out
    subscriber_buffer: int = Field(default=256, ge=1)  # messages per client

    # CORS: the relay is called from browsers on any origin
    cors_origins: list[str] = ["*"]

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    # Publisher client
    broadcast_url: str = "http://localhost:8000/broadcast"
    broadcast_timeout: float = 3.0  # seconds

    model_config = {"env_prefix": "RELAY_", "populate_by_name": True}

    @field_validator("port", mode="before")
    @classmethod
    def fallback_port(cls, value):
        """Unset, unparsable, or out-of-range ports become DEFAULT_PORT."""
        try:
            port = int(str(value).strip())
        except (TypeError, ValueError):
            return DEFAULT_PORT
        if not 0 < port < 65536:
            return DEFAULT_PORT
        return port


# Singleton, import this everywhere
settings = Settings()
