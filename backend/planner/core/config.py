from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Literal["development", "staging", "production"] = Field(
        default="development"
    )
    log_level: str = Field(default="INFO")
    database_url: str = Field(default="sqlite:///./planner.db")
    # Key of the persisted planner state row
    state_key: str = Field(default="ai_planner_state_v1")

    ai_provider: Literal["openai", "gemini"] = Field(default="openai")
    openai_api_key: str | None = Field(default=None)
    gemini_api_key: str | None = Field(default=None)
    openai_model: str = Field(default="gpt-4o-mini")
    gemini_model: str = Field(default="gemini-1.5-flash")
    oracle_timeout_seconds: float = Field(default=30.0, gt=0)

    confirmation_secret_key: str = Field(default="change-me")
    confirmation_algorithm: str = Field(default="HS256")
    confirmation_token_expire_minutes: int = Field(default=30, ge=1)

    cors_origins: list[str] = Field(
        default=[
            "http://localhost:3000",
            "http://127.0.0.1:3000",
            "http://localhost:3001",
            "http://127.0.0.1:3001",
        ]
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
