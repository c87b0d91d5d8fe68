from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="",
        extra="ignore",
    )

    app_name: str = "shorts-analytics"
    environment: str = Field(default="local", validation_alias=AliasChoices("ENVIRONMENT", "SHORTS_ANALYTICS_ENVIRONMENT"))
    database_url: str = Field(
        default="postgresql+asyncpg://postgres:postgres@db:5432/shorts_analytics",
        validation_alias=AliasChoices("DATABASE_URL", "SHORTS_ANALYTICS_DATABASE_URL"),
    )
    youtube_api_key: str | None = Field(default=None, validation_alias=AliasChoices("YOUTUBE_API_KEY", "SHORTS_ANALYTICS_YOUTUBE_API_KEY"))
    youtube_channel_id: str = Field(
        default="UCkKQDuX3OteRGzQjnjXMCKA",
        validation_alias=AliasChoices("YOUTUBE_CHANNEL_ID", "SHORTS_ANALYTICS_YOUTUBE_CHANNEL_ID"),
    )
    youtube_timeout_sec: float = Field(default=15.0, validation_alias=AliasChoices("YOUTUBE_TIMEOUT_SEC", "SHORTS_ANALYTICS_YOUTUBE_TIMEOUT_SEC"))
    openai_api_key: str | None = Field(default=None, validation_alias=AliasChoices("OPENAI_API_KEY", "SHORTS_ANALYTICS_OPENAI_API_KEY"))
    openai_base_url: str = Field(
        default="https://api.openai.com/v1",
        validation_alias=AliasChoices("OPENAI_BASE_URL", "SHORTS_ANALYTICS_OPENAI_BASE_URL"),
    )
    openai_model: str = Field(default="gpt-3.5-turbo", validation_alias=AliasChoices("OPENAI_MODEL", "SHORTS_ANALYTICS_OPENAI_MODEL"))
    openai_temperature: float = Field(default=0.7, validation_alias=AliasChoices("OPENAI_TEMPERATURE", "SHORTS_ANALYTICS_OPENAI_TEMPERATURE"))
    openai_max_tokens: int = Field(default=2048, validation_alias=AliasChoices("OPENAI_MAX_TOKENS", "SHORTS_ANALYTICS_OPENAI_MAX_TOKENS"))
    openai_timeout_sec: float = Field(default=60.0, validation_alias=AliasChoices("OPENAI_TIMEOUT_SEC", "SHORTS_ANALYTICS_OPENAI_TIMEOUT_SEC"))
    cors_origins: list[str] = Field(default=["*"], validation_alias=AliasChoices("CORS_ORIGINS", "SHORTS_ANALYTICS_CORS_ORIGINS"))
    log_level: str = Field(default="INFO", validation_alias=AliasChoices("LOG_LEVEL", "SHORTS_ANALYTICS_LOG_LEVEL"))

    @property
    def async_database_url(self) -> str:
        if self.database_url.startswith("postgresql+"):
            return self.database_url
        if self.database_url.startswith("postgresql://"):
            return self.database_url.replace("postgresql://", "postgresql+asyncpg://", 1)
        if self.database_url.startswith("postgres://"):
            return self.database_url.replace("postgres://", "postgresql+asyncpg://", 1)
        return self.database_url


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
