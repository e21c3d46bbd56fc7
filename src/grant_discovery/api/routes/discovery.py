"""POST /discover runs one discovery sequence; GET /logs returns the progress log."""

import structlog
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from grant_discovery.errors import GrantDiscoveryError
from grant_discovery.models.search_config import SearchConfig

from ..auth import verify_service_token

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.post("/discover")
async def discover(
    config_data: dict[str, Any],
    request: Request,
    _auth: None = Depends(verify_service_token),
):
    """Validate a SearchConfig and run the discovery pipeline once."""
    try:
        config = SearchConfig.model_validate(config_data)
    except Exception as e:
        raise HTTPException(status_code=422, detail=str(e))

    orchestrator = request.app.state.orchestrator
    log_stream = request.app.state.log_stream

    if orchestrator.is_running:
        raise HTTPException(status_code=409, detail="A discovery run is already in progress")

    # New run, new log
    log_stream.clear()

    log = logger.bind(year=config.year, keyword_count=len(config.keywords))
    log.info("discover.received")

    try:
        result = await orchestrator.run(config)
    except GrantDiscoveryError as e:
        log.error("discover.failed", error=str(e), error_type=type(e).__name__)
        return JSONResponse(
            status_code=502,
            content={
                "error": e.message,
                "error_type": type(e).__name__,
                "logs": [entry.model_dump(mode="json") for entry in log_stream.snapshot()],
            },
        )

    if result is None:
        raise HTTPException(status_code=409, detail="A discovery run is already in progress")

    log.info(
        "discover.complete",
        new_count=result.new_count,
        filtered=result.filtered_count,
        processing_time_ms=result.processing_time_ms,
    )
    return result.to_dict()


@router.get("/logs")
async def get_logs(request: Request):
    """Progress log of the current (or most recent) run."""
    return [entry.model_dump(mode="json") for entry in request.app.state.log_stream.snapshot()]
