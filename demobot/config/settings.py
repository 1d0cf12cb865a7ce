"""
Application settings and configuration management.

Uses Pydantic Settings for validation and environment variable support.
Bot settings map to the flat variable names the bot has always used
(TOKEN / DISCORD_TOKEN, COMMAND_GUILD_ID, ...).
"""

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from demobot.errors import MissingConfig


class BotSettings(BaseSettings):
    """Discord bot configuration."""

    token: str | None = Field(
        default=None,
        validation_alias="TOKEN",
        description="Discord bot token. Leading/trailing whitespace is stripped.",
    )
    discord_token: str | None = Field(
        default=None,
        validation_alias="DISCORD_TOKEN",
        exclude=True,
        description="Fallback for TOKEN when that is unset or blank",
    )
    command_guild_id: int | None = Field(
        default=None,
        validation_alias="COMMAND_GUILD_ID",
        description="If set, registers commands in this guild only (instant). "
                    "If None, registers globally (may take a while to propagate).",
    )
    message_command_prefix: str = Field(
        default="?",
        validation_alias="MESSAGE_COMMAND_PREFIX",
        description="Prefix for plain-text message commands",
    )
    test_channel_id: int | None = Field(
        default=None,
        validation_alias="TEST_CHANNEL_ID",
        description="If set, a startup message is posted to this channel",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("token", "discord_token", mode="before")
    @classmethod
    def _strip_token(cls, value):
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    @field_validator("command_guild_id", "test_channel_id", mode="before")
    @classmethod
    def _blank_is_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("message_command_prefix")
    @classmethod
    def _prefix_not_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("MESSAGE_COMMAND_PREFIX must not be empty")
        return value

    @model_validator(mode="after")
    def _fall_back_to_discord_token(self) -> "BotSettings":
        if not self.token:
            self.token = self.discord_token
        return self

    def require_token(self) -> str:
        """Return the bot token, raising MissingConfig if it isn't set."""
        if not self.token:
            raise MissingConfig("TOKEN")
        return self.token


class Settings(BaseSettings):
    """Main application settings."""

    # Logging
    log_level: Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    log_file: Path | None = Field(default=None, description="Log file path")

    # Sub-configurations
    bot: BotSettings = Field(default_factory=BotSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, value):
        return value.upper() if isinstance(value, str) else value


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def load_settings(env_file: str | Path | None = None) -> Settings:
    """
    Load settings from file and environment.

    Args:
        env_file: Path to .env file (optional)

    Returns:
        Loaded settings instance
    """
    global _settings
    if env_file:
        _settings = Settings(
            _env_file=env_file,
            bot=BotSettings(_env_file=env_file),
        )
    else:
        _settings = Settings()
    return _settings
