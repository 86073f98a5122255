from __future__ import annotations

from typing import Any, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


def _validate_positive(name: str, value: float, maximum: Optional[float] = None) -> None:
    if value <= 0:
        raise RuntimeError(f"{name} must be > 0.")
    if maximum is not None and value > maximum:
        raise RuntimeError(f"{name} is too high (max {maximum:g}).")


class Settings(BaseSettings):
    """
    Bot settings.

    Rules:
    - BOT_TOKEN is the only hard requirement (checked by validate_startup(), not at import)
    - COMMANDS_TK is optional; without it Top.gg publishing is disabled
    - Knobs for the Top.gg publisher (timeout, interval, initial delay) live here
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
        populate_by_name=True,
    )

    # -------------------------
    # Credentials
    # -------------------------
    bot_token: str = Field(default="", alias="BOT_TOKEN")
    commands_token: str = Field(default="", alias="COMMANDS_TK")
    application_id: Optional[int] = Field(default=None, alias="APPLICATION_ID")

    # -------------------------
    # Command sync
    # -------------------------
    # If True, sync to a single guild (fast iteration). Requires DISCORD_GUILD_ID.
    discord_guild_id: Optional[int] = Field(default=None, alias="DISCORD_GUILD_ID")
    discord_sync_guild_only: bool = Field(default=False, alias="DISCORD_SYNC_GUILD_ONLY")

    # -------------------------
    # Logging
    # -------------------------
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_dir: str = Field(default="./logs", alias="LOG_DIR")
    log_retention_days: int = Field(default=14, alias="LOG_RETENTION_DAYS")
    # The file also rolls over early once it grows past this size.
    log_max_bytes: int = Field(default=20 * 1024 * 1024, alias="LOG_MAX_BYTES")

    # -------------------------
    # Top.gg publishing
    # -------------------------
    topgg_http_timeout_s: float = Field(default=20.0, alias="TOPGG_HTTP_TIMEOUT")
    topgg_publish_interval_s: float = Field(default=86400.0, alias="TOPGG_PUBLISH_INTERVAL")
    topgg_initial_delay_s: float = Field(default=2.0, alias="TOPGG_INITIAL_DELAY")
    http_user_agent: str = Field(default="topsync-bot/0.1", alias="HTTP_USER_AGENT")

    # -------------------------
    # Validators / normalizers
    # -------------------------

    @field_validator("bot_token", "commands_token", mode="before")
    @classmethod
    def _norm_secret(cls, v: Any) -> str:
        return ("" if v is None else str(v)).strip()

    @field_validator("application_id", "discord_guild_id", mode="before")
    @classmethod
    def _norm_snowflake(cls, v: Any) -> Optional[Any]:
        s = ("" if v is None else str(v)).strip()
        return s or None

    @field_validator("log_level", mode="before")
    @classmethod
    def _norm_log_level(cls, v: Any) -> str:
        s = ("" if v is None else str(v)).strip().upper()
        return s or "INFO"

    @field_validator("log_dir", mode="before")
    @classmethod
    def _norm_log_dir(cls, v: Any) -> str:
        s = ("" if v is None else str(v)).strip()
        return s or "./logs"

    @field_validator("http_user_agent", mode="before")
    @classmethod
    def _norm_user_agent(cls, v: Any) -> str:
        s = ("" if v is None else str(v)).strip()
        return s or "topsync-bot/0.1"

    # -------------------------
    # Derived helpers
    # -------------------------

    @property
    def topgg_enabled(self) -> bool:
        return bool(self.commands_token)

    @property
    def sync_guild_id(self) -> Optional[int]:
        """Guild to sync into, or None for global sync."""
        if self.discord_sync_guild_only:
            return self.discord_guild_id
        return None

    def validate_startup(self) -> None:
        """
        Strict validation for boot safety.
        """
        if not self.bot_token:
            raise RuntimeError("BOT_TOKEN is not set in environment (.env).")

        if self.log_level not in _LOG_LEVELS:
            raise RuntimeError(f"LOG_LEVEL must be one of: {', '.join(sorted(_LOG_LEVELS))}")

        if self.application_id is not None and self.application_id <= 0:
            raise RuntimeError("APPLICATION_ID must be a positive integer.")

        if self.discord_guild_id is not None and self.discord_guild_id <= 0:
            raise RuntimeError("DISCORD_GUILD_ID must be a positive integer.")

        if self.discord_sync_guild_only and not self.discord_guild_id:
            raise RuntimeError("DISCORD_SYNC_GUILD_ONLY is true but DISCORD_GUILD_ID is not set.")

        if self.log_retention_days < 1:
            raise RuntimeError("LOG_RETENTION_DAYS must be >= 1.")

        if self.log_max_bytes < 1:
            raise RuntimeError("LOG_MAX_BYTES must be >= 1.")

        _validate_positive("TOPGG_HTTP_TIMEOUT", self.topgg_http_timeout_s, maximum=120)
        _validate_positive("TOPGG_PUBLISH_INTERVAL", self.topgg_publish_interval_s)
        if self.topgg_initial_delay_s < 0:
            raise RuntimeError("TOPGG_INITIAL_DELAY must be >= 0.")


settings = Settings()

__all__ = ["Settings", "settings"]
