"""
Grant model: one discovered funding opportunity.

Grants are created only by the response parser during a run and are never
mutated afterwards. The lower-cased program title is the sole identity used
for deduplication within a repository.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

# Confidence bounds assigned by the parser, [low, high)
CONFIDENCE_FLOOR = 0.90
CONFIDENCE_CEILING = 0.99


class GrantStatus(str, Enum):
    """Status lifecycle for grants. CLOSED is only ever assigned by the host."""

    OPEN = 'OPEN'
    UPCOMING = 'UPCOMING'
    CLOSED = 'CLOSED'
    UNKNOWN = 'UNKNOWN'


def dedup_key(program_title: str) -> str:
    """Normalized identity of a grant: its program title, lower-cased."""
    return program_title.lower()


class Grant(BaseModel):
    """A structured record describing one funding opportunity."""

    model_config = ConfigDict(frozen=True)

    # Identity
    id: str = Field(..., description='Opaque unique identifier, generated at parse time')

    # Extracted content
    agency_name: str = Field(default='', description='Name of the funding agency')
    program_title: str = Field(..., description='Title of the grant program')
    funding_type: str = Field(default='', description='e.g. Research, Project, Fellowship')
    brief_description: str = Field(default='', description='Concise summary')
    eligibility_criteria: str = Field(default='', description='Who can apply')
    application_deadline: str | None = Field(
        default=None, description="ISO date, 'Rolling', or None when unknown"
    )
    funding_amount: str | None = Field(default=None, description='e.g. $50,000 - $100,000')
    geographic_scope: str = Field(default='', description='e.g. National, Global, a region')
    official_application_link: str = Field(
        default='', description='Application page URL taken from grounding data'
    )
    status: GrantStatus = Field(default=GrantStatus.UNKNOWN)

    # Heuristic trust weight, not supplied by the extraction service
    confidence_score: float = Field(..., ge=CONFIDENCE_FLOOR, lt=CONFIDENCE_CEILING)

    @property
    def dedup_key(self) -> str:
        return dedup_key(self.program_title)
