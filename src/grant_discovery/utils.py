"""
Utility helpers for the Grant Discovery pipeline.

uuid7() wraps fastuuid.uuid7() to return a stdlib uuid.UUID instance.
fastuuid.UUID is a Rust-backed type that is NOT isinstance-compatible with
uuid.UUID, so we roundtrip through the string representation.
"""

from urllib.parse import urlparse
from uuid import UUID

import fastuuid


def uuid7() -> UUID:
    """Generate a UUIDv7 (time-sortable) as a stdlib uuid.UUID."""
    return UUID(str(fastuuid.uuid7()))


def new_id() -> str:
    """String form of uuid7(), used for Grant and LogEntry identifiers."""
    return str(uuid7())


def url_host(url: str) -> str:
    """Hostname of a URL, or the URL itself when it has none."""
    return urlparse(url).hostname or url
