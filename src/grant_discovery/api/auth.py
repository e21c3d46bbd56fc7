"""Bearer token authentication for the discovery API."""

from fastapi import Header, HTTPException

from .config import get_settings


async def verify_service_token(authorization: str = Header(...)) -> None:
    """Validate the bearer token on mutating requests."""
    expected = f"Bearer {get_settings().SERVICE_API_KEY}"
    if authorization != expected:
        raise HTTPException(status_code=401, detail="Invalid or missing bearer token")
