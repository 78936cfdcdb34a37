# src/p2pex/config/settings.py
"""
Settings - Pydantic-based Configuration Management

Provides centralized configuration management using Pydantic Settings.
Values come from environment variables (or a .env file) and are validated
once at start-up.

Files that USE this module:
- p2pex.app (loads settings for logging, bot and engine configuration)
- p2pex.adapters.providers.open_er_api (feed URL and HTTP timeout)
- p2pex.adapters.persistence.file_store (state file path)
- p2pex.adapters.telegram.handlers (operator username)
- p2pex.application.engine (warning threshold, debounce, initial give amount)
- p2pex.shared.language (default language)

Files that this module USES:
- p2pex.shared.validators (validation functions for settings)
"""

from __future__ import annotations  # Enable postponed evaluation of annotations

from pathlib import Path  # Object-oriented filesystem paths
from typing import Optional  # Type hints for optional values

from pydantic import Field, field_validator  # Data validation and field configuration
from pydantic_settings import BaseSettings, SettingsConfigDict  # Settings management with Pydantic

from p2pex.shared.validators import (
    validate_bot_token,  # Validate Telegram bot token format
    validate_username,  # Validate Telegram username format
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # --- Telegram (operator chat) ---
    bot_token: str = Field(default="", alias="BOT_TOKEN")
    operator_username: str = Field(default="", alias="OPERATOR_USERNAME")

    # --- Reference-rate feed ---
    reference_feed_url: str = Field(
        default="https://open.er-api.com/v6/latest/USD", alias="REFERENCE_FEED_URL"
    )
    http_timeout_seconds: int = Field(default=10, alias="HTTP_TIMEOUT_SECONDS", ge=1, le=60)

    # --- Spread risk gate ---
    spread_warning_pct: float = Field(default=5.0, alias="SPREAD_WARNING_PCT", gt=0.0)
    spread_warning_delay_seconds: float = Field(
        default=3.0, alias="SPREAD_WARNING_DELAY_SECONDS", ge=0.0, le=60.0
    )

    # --- Calculator ---
    default_give_amount: str = Field(default="10 000", alias="DEFAULT_GIVE_AMOUNT")

    # --- Language Settings ---
    default_language: str = Field(default="en", alias="DEFAULT_LANGUAGE")

    # --- Persistence ---
    state_file: Path = Field(default=Path("./data/p2p_state.json"), alias="STATE_FILE")

    # --- Logging (for server deployment) ---
    log_file: Optional[str] = Field(default=None, alias="LOG_FILE")
    log_dir: Optional[str] = Field(default=None, alias="LOG_DIR")
    log_stdout: bool = Field(default=True, alias="P2PEX_LOG_STDOUT")
    log_max_bytes: int = Field(default=10 * 1024 * 1024, alias="LOG_MAX_BYTES")  # 10MB
    log_backup_count: int = Field(default=5, alias="LOG_BACKUP_COUNT")

    @field_validator("bot_token")
    @classmethod
    def validate_bot_token(cls, v: str) -> str:
        """Validate bot token format (empty is allowed; the bot just won't start)."""
        if v and not validate_bot_token(v):
            raise ValueError("Invalid BOT_TOKEN format")
        return v

    @field_validator("operator_username")
    @classmethod
    def validate_operator_username(cls, v: str) -> str:
        """Validate operator username format."""
        if v and not validate_username(v):
            raise ValueError("Invalid OPERATOR_USERNAME format")
        return v.lstrip("@")

    @field_validator("default_language")
    @classmethod
    def validate_language(cls, v: str) -> str:
        """Validate language code."""
        if v not in ["en", "ru"]:
            raise ValueError("DEFAULT_LANGUAGE must be 'en' or 'ru'")
        return v


# Global settings instance
settings = Settings()


# ============================================================================
# Deployment Instructions
# ============================================================================
#
# 1. Put BOT_TOKEN and OPERATOR_USERNAME in .env
#
# 2. Run the bot in the background:
#    nohup p2pex > bot.log 2>&1 &
#
# 3. Monitor logs in real-time:
#    tail -f bot.log
#
# 4. Stop the bot:
#    pkill -f p2pex
#
# ============================================================================
