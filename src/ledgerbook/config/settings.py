"""Configuration settings for ledgerbook."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Flat settings read from environment variables and `.env`."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Ledger store (PostgREST-style REST API)
    ledger_api_url: str = Field(
        default="http://localhost:54321", validation_alias="LEDGER_API_URL"
    )
    ledger_api_key: SecretStr = Field(..., validation_alias="LEDGER_API_KEY")
    ledger_timeout: float = Field(default=30.0, validation_alias="LEDGER_TIMEOUT")

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", validation_alias="LOG_LEVEL"
    )
    log_format: Literal["json", "console"] = Field(
        default="console", validation_alias="LOG_FORMAT"
    )

    # GST portal export annotations (not derived from invoice data)
    gst_place_of_supply: str = Field(default="27", validation_alias="GST_PLACE_OF_SUPPLY")
    gst_export_rate: int = Field(default=18, validation_alias="GST_EXPORT_RATE")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
