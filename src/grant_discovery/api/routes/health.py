"""Health check endpoint."""

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health")
async def health(request: Request):
    """Report service state. Does not call the extraction provider."""
    return {
        "status": "ok",
        "extraction_configured": request.app.state.openai.is_available(),
        "running": request.app.state.orchestrator.is_running,
        "grant_count": len(request.app.state.repository),
    }
