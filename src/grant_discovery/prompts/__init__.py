"""
LLM prompts for the Grant Discovery pipeline.
"""

from .discover_grants import (
    DISCOVERY_INSTRUCTIONS,
    GRANT_SCHEMA_TEMPLATE,
    build_discovery_prompt,
)

__all__ = [
    'DISCOVERY_INSTRUCTIONS',
    'GRANT_SCHEMA_TEMPLATE',
    'build_discovery_prompt',
]
