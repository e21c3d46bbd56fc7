"""Configuration for the discovery HTTP service."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Service settings loaded from environment variables."""

    # OpenAI
    OPENAI_API_KEY: str = ""
    OPENAI_SEARCH_MODEL: str = "gpt-4.1-mini"

    # Mail service webhook
    MAIL_WEBHOOK_URL: str = ""
    MAIL_API_KEY: str = ""
    MAIL_SENDER: str = "grant-discovery@localhost"
    MAIL_TIMEOUT_SECONDS: float = Field(default=30.0, gt=0, le=120)

    # Auth for mutating endpoints
    SERVICE_API_KEY: str

    # Logging
    LOG_JSON: bool = False
    LOG_LEVEL: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Cached settings singleton."""
    return Settings()
