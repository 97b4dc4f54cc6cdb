"""Configuration settings for the Injaz backend."""

from functools import lru_cache
from typing import Annotated, Literal

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class FlatSettings(BaseSettings):
    """Flat settings read from environment variables or a .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database
    database_url: str = Field(
        default="sqlite:///./injaz.db", validation_alias="DATABASE_URL"
    )
    database_echo: bool = Field(default=False, validation_alias="DATABASE_ECHO")

    # Organization defaults (single-tenant installs)
    default_org_id: str = Field(default="injaz-main", validation_alias="DEFAULT_ORG_ID")
    default_org_name: str = Field(default="Injaz", validation_alias="DEFAULT_ORG_NAME")
    default_currency: str = Field(default="EGP", validation_alias="DEFAULT_CURRENCY")

    # Identity provider uids that are auto-approved as admins
    admin_uids: Annotated[list[str], NoDecode] = Field(
        default_factory=list, validation_alias="ADMIN_UIDS"
    )

    # LLM
    google_api_key: SecretStr = Field(..., validation_alias="GOOGLE_API_KEY")
    gemini_model: str = Field(default="gemini-2.5-flash", validation_alias="GEMINI_MODEL")
    llm_max_tokens: int = Field(default=4096, validation_alias="LLM_MAX_TOKENS")
    llm_temperature: float = Field(default=0.7, validation_alias="LLM_TEMPERATURE")
    ai_max_tool_rounds: int = Field(default=1, ge=1, validation_alias="AI_MAX_TOOL_ROUNDS")

    # Telegram
    telegram_bot_token: SecretStr = Field(
        default=SecretStr(""), validation_alias="TELEGRAM_BOT_TOKEN"
    )
    telegram_api_url: str = Field(
        default="https://api.telegram.org", validation_alias="TELEGRAM_API_URL"
    )
    telegram_webhook_secret: SecretStr = Field(
        default=SecretStr(""), validation_alias="TELEGRAM_WEBHOOK_SECRET"
    )
    telegram_user_id: str | None = Field(default=None, validation_alias="TELEGRAM_USER_ID")
    telegram_timeout: float = Field(default=30.0, validation_alias="TELEGRAM_TIMEOUT")

    # HTTP API
    api_host: str = Field(default="0.0.0.0", validation_alias="API_HOST")
    api_port: int = Field(default=8000, validation_alias="API_PORT")

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", validation_alias="LOG_LEVEL"
    )
    log_format: Literal["json", "console"] = Field(
        default="console", validation_alias="LOG_FORMAT"
    )

    @field_validator("admin_uids", mode="before")
    @classmethod
    def _split_admin_uids(cls, value: object) -> object:
        """Accept a comma separated list of uids."""
        if isinstance(value, str):
            return [uid.strip() for uid in value.split(",") if uid.strip()]
        return value


@lru_cache
def get_settings() -> FlatSettings:
    """Get cached settings instance."""
    return FlatSettings()
