"""FastAPI application for the grant discovery service."""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from grant_discovery.clients.mail_client import MailClient
from grant_discovery.clients.openai_client import OpenAIClient
from grant_discovery.log_stream import LogStream
from grant_discovery.logging import configure_logging
from grant_discovery.pipeline.orchestrator import DiscoveryOrchestrator
from grant_discovery.repository import GrantRepository

from .config import get_settings
from .routes.discovery import router as discovery_router
from .routes.grants import router as grants_router
from .routes.health import router as health_router

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the in-memory repository, log stream and orchestrator for the process."""
    settings = get_settings()
    configure_logging(json_output=settings.LOG_JSON, log_level=settings.LOG_LEVEL)

    logger.info(
        "lifespan.startup",
        search_model=settings.OPENAI_SEARCH_MODEL,
        mail_configured=bool(settings.MAIL_WEBHOOK_URL),
    )

    openai = OpenAIClient(
        api_key=settings.OPENAI_API_KEY,
        search_model=settings.OPENAI_SEARCH_MODEL,
    )
    mail = MailClient(
        webhook_url=settings.MAIL_WEBHOOK_URL,
        api_key=settings.MAIL_API_KEY,
        sender=settings.MAIL_SENDER,
        timeout_seconds=settings.MAIL_TIMEOUT_SECONDS,
    )
    if not openai.is_available():
        logger.warning("lifespan.openai_key_missing")

    repository = GrantRepository()
    log_stream = LogStream()
    log_stream.emit("System initialized. Ready for discovery run.")

    # Store on app.state for request handlers
    app.state.openai = openai
    app.state.repository = repository
    app.state.log_stream = log_stream
    app.state.orchestrator = DiscoveryOrchestrator.build(
        openai,
        mail,
        repository=repository,
        log_stream=log_stream,
    )

    logger.info("lifespan.ready")
    yield

    # Shutdown
    logger.info("lifespan.shutdown")
    await openai.close()


app = FastAPI(
    title="grant-discovery",
    description="Discovers funding opportunities with a search-augmented LLM and tracks new finds",
    lifespan=lifespan,
)

app.include_router(health_router)
app.include_router(discovery_router)
app.include_router(grants_router)
