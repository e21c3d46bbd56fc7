"""
Models for the extraction service contract.

ExtractedGrant is the per-element schema the provider is asked to emit. The
parser coerces each raw JSON element through it before building a Grant.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..utils import url_host
from .grant import GrantStatus

# Fields the provider must emit for each opportunity, in prompt order
GRANT_JSON_FIELDS = (
    'agency_name',
    'program_title',
    'funding_type',
    'brief_description',
    'eligibility_criteria',
    'application_deadline',
    'funding_amount',
    'geographic_scope',
    'official_application_link',
    'status',
)

_OPTIONAL_FIELDS = ('application_deadline', 'funding_amount')


def _as_text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (dict, list)):
        return None
    return str(value)


class GroundingSource(BaseModel):
    """A reference the provider cited as evidence. Logged, never validated."""

    model_config = ConfigDict(frozen=True)

    title: str = ''
    url: str

    @property
    def host(self) -> str:
        return url_host(self.url)


class ExtractedGrant(BaseModel):
    """One opportunity as emitted by the extraction provider, after coercion."""

    agency_name: str = ''
    program_title: str
    funding_type: str = ''
    brief_description: str = ''
    eligibility_criteria: str = ''
    application_deadline: str | None = None
    funding_amount: str | None = None
    geographic_scope: str = ''
    official_application_link: str = ''
    status: GrantStatus = GrantStatus.UNKNOWN

    @field_validator(
        'agency_name',
        'funding_type',
        'brief_description',
        'eligibility_criteria',
        'geographic_scope',
        'official_application_link',
        mode='before',
    )
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        return _as_text(value) or ''

    @field_validator(*_OPTIONAL_FIELDS, mode='before')
    @classmethod
    def _coerce_optional_text(cls, value: Any) -> str | None:
        text = _as_text(value)
        if not text or text.lower() in ('null', 'none', 'unknown', 'n/a'):
            return None
        return text

    @field_validator('program_title', mode='before')
    @classmethod
    def _require_title(cls, value: Any) -> str:
        text = _as_text(value)
        if not text:
            raise ValueError('program_title is required')
        return text

    @field_validator('status', mode='before')
    @classmethod
    def _coerce_status(cls, value: Any) -> GrantStatus:
        if isinstance(value, str):
            try:
                return GrantStatus(value.strip().upper())
            except ValueError:
                pass
        return GrantStatus.UNKNOWN
