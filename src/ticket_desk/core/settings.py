"""Application settings and configuration.

This module defines all configuration options for the Ticket Desk server.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Ticket Desk", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Database configuration (single local SQLite file)
    database_url: str = Field(default="sqlite:///./qms.db", alias="DATABASE_URL")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")
    init_db_on_startup: bool = Field(default=True, alias="INIT_DB_ON_STARTUP")

    # Network listener for buttons and screens
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=8765, alias="PORT")

    # Broadcast hub
    heartbeat_interval_seconds: float = Field(default=5.0, alias="HEARTBEAT_INTERVAL_SECONDS")
    heartbeat_message: str = Field(default="PING", alias="HEARTBEAT_MESSAGE")
    connected_message: str = Field(default="connected", alias="CONNECTED_MESSAGE")
    subscriber_queue_size: int = Field(default=100, alias="SUBSCRIBER_QUEUE_SIZE")

    # Queue behaviour
    recent_history_limit: int = Field(default=5, alias="RECENT_HISTORY_LIMIT")
    token_bytes: int = Field(default=16, alias="TOKEN_BYTES")
    announce_template: str = Field(
        default="Client {compteur}, to {guichet}",
        alias="ANNOUNCE_TEMPLATE",
    )

    # Administrative HTTP surface, reachable from the desktop shell only
    admin_api_enabled: bool = Field(default=True, alias="ADMIN_API_ENABLED")
    admin_allowed_hosts: list[str] = Field(
        default=["127.0.0.1", "::1", "localhost"],
        alias="ADMIN_ALLOWED_HOSTS",
    )

    # CORS configuration for the display web page
    cors_origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS")

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )


settings = Settings()
