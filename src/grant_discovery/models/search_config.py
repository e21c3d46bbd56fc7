"""
Run parameters for a discovery run.

Owned by the caller and read-only to the orchestrator during a run.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_KEYWORDS = [
    'grant application',
    'call for proposals',
    'research funding',
    'tech innovation grant',
]


class SearchConfig(BaseModel):
    """Keywords, target year and notification settings for one run."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    keywords: list[str] = Field(
        default_factory=lambda: list(DEFAULT_KEYWORDS),
        min_length=1,
        description='Search keywords, in prompt order',
    )
    year: int = Field(
        default_factory=lambda: datetime.now().year,
        ge=1900,
        le=9999,
        description='Funding cycle year to search for',
    )
    email_recipient: str = Field(default='', alias='emailRecipient')
    notification_enabled: bool = Field(default=False, alias='notificationEnabled')

    @field_validator('keywords')
    @classmethod
    def _strip_keywords(cls, value: list[str]) -> list[str]:
        keywords = [k.strip() for k in value if k.strip()]
        if not keywords:
            raise ValueError('at least one non-blank keyword is required')
        return keywords

    @field_validator('email_recipient')
    @classmethod
    def _strip_recipient(cls, value: str) -> str:
        return value.strip()
