"""Application configuration."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables."""

    auth_provider: Literal["mock", "jwt"] = "jwt"
    session_secret: str | None = None
    session_algorithm: str = "HS256"
    session_cookie_name: str = "alex.session-token"

    desktop: bool = False
    desktop_auth_token: str | None = None

    library_poll_interval_seconds: float = Field(default=2.0, gt=0)
    library_keepalive_interval_seconds: float = Field(default=15.0, gt=0)
    shared_page_size: int = Field(default=24, ge=1)

    model_config = SettingsConfigDict(env_prefix="ALEX_", extra="ignore")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
