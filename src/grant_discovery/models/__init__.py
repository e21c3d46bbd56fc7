"""
Data models for the Grant Discovery pipeline.
"""

from .grant import Grant, GrantStatus, dedup_key
from .search_config import SearchConfig
from .extraction import ExtractedGrant, GroundingSource, GRANT_JSON_FIELDS

__all__ = [
    'Grant',
    'GrantStatus',
    'dedup_key',
    'SearchConfig',
    'ExtractedGrant',
    'GroundingSource',
    'GRANT_JSON_FIELDS',
]
