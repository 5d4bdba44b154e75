"""
Application configuration using pydantic-settings.

Settings are read once from environment variables (or a .env file) and handed to whoever needs them.
"""

from functools import lru_cache

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Priority: environment variables > .env file > defaults"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Several variable names are accepted for the store connection. First one that is set wins.
    database_url: str = Field(
        default="sqlite:///./squares_board.db",
        validation_alias=AliasChoices("SQUARES_DATABASE_URL", "DATABASE_URL", "DB_URL"),
        description="SQLAlchemy URL of the backing store",
    )
    sql_echo: bool = Field(default=False, validation_alias="SQL_ECHO")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        value_upper = value.upper()
        if value_upper not in allowed:
            raise ValueError(f"LOG_LEVEL must be one of {allowed}")
        return value_upper


@lru_cache
def get_settings() -> Settings:
    """Settings are constructed once per process."""
    return Settings()
