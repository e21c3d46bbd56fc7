"""Accumulated grants: listing, JSON export and clearing."""

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import Response

from grant_discovery.log_stream import LogLevel
from grant_discovery.repository import EXPORT_FILENAME

from ..auth import verify_service_token

router = APIRouter()


@router.get("/grants")
async def list_grants(request: Request):
    """All grants discovered so far, newest first."""
    return request.app.state.repository.to_export()


@router.get("/grants/export")
async def export_grants(request: Request):
    """Download the full repository as a JSON document."""
    body = request.app.state.repository.export_json()
    request.app.state.log_stream.emit("Data exported to JSON.", LogLevel.SUCCESS)
    return Response(
        content=body,
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{EXPORT_FILENAME}"'},
    )


@router.delete("/grants")
async def clear_grants(
    request: Request,
    _auth: None = Depends(verify_service_token),
):
    """Drop every accumulated grant. Refused while a run is in flight."""
    if request.app.state.orchestrator.is_running:
        raise HTTPException(status_code=409, detail="A discovery run is in progress")

    repository = request.app.state.repository
    removed = len(repository)
    repository.clear()
    return {"removed": removed}
