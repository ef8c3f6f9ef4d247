"""Application settings and configuration.

This module defines all configuration options for the Embed Gate service.
Settings are loaded from environment variables with sensible defaults. The
abuse policy constants live here too so deployments (and tests) can tune the
duplicate window, ban length and retention without touching code.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ALLOWED_FIELD_NAMES = [
    "🪙 Name:",
    "📈 Generation:",
    "👥 Players:",
    "🔗 Server Link:",
    "📱 Job-ID (Mobile):",
    "💻 Job-ID (PC):",
    "📲 Join:",
]

DEFAULT_BLACKLIST = ["raided", "discord", "everyone", "lol", "raid", "fucked", "fuck"]


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Embed Gate", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Database configuration
    database_url: str = Field(default="sqlite:///./embed_gate.db", alias="DATABASE_URL")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")
    auto_create_tables: bool = Field(default=True, alias="AUTO_CREATE_TABLES")

    # Downstream notification channel
    webhook_url: str | None = Field(default=None, alias="DISCORD_WEBHOOK_URL")
    webhook_timeout_seconds: float = Field(default=10.0, alias="WEBHOOK_TIMEOUT_SECONDS")

    # Header carrying the original client address when running behind a proxy
    client_ip_header: str = Field(default="cf-connecting-ip", alias="CLIENT_IP_HEADER")

    # Duplicate detection and ban escalation
    duplicate_window_seconds: int = Field(default=60, alias="DUPLICATE_WINDOW_SECONDS")
    duplicate_threshold: int = Field(default=3, alias="DUPLICATE_THRESHOLD")
    ban_duration_seconds: int = Field(default=3 * 24 * 60 * 60, alias="BAN_DURATION_SECONDS")
    ban_purge_batch_size: int = Field(default=5, alias="BAN_PURGE_BATCH_SIZE")

    # Retention
    message_cap_per_address: int = Field(default=100, alias="MESSAGE_CAP_PER_ADDRESS")
    retention_seconds: int = Field(default=7 * 24 * 60 * 60, alias="RETENTION_SECONDS")
    sweep_on_request: bool = Field(default=True, alias="SWEEP_ON_REQUEST")

    # Payload schema allow-lists
    min_embed_fields: int = Field(default=5, alias="MIN_EMBED_FIELDS")
    allowed_colors: list[int] = Field(
        default=[6591981, 16711680],
        alias="ALLOWED_COLORS",
    )
    allowed_field_names: list[str] = Field(
        default=DEFAULT_ALLOWED_FIELD_NAMES,
        alias="ALLOWED_FIELD_NAMES",
    )
    blacklist: list[str] = Field(default=DEFAULT_BLACKLIST, alias="BLACKLIST")

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def webhook_enabled(self) -> bool:
        """Return True when a downstream webhook URL is configured."""
        return bool(self.webhook_url)


settings = Settings()
