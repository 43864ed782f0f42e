"""FastAPI application entry point for Omnisync."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from omnisync import __version__
from omnisync.api.routes import router
from omnisync.config import get_settings
from omnisync.utils.logging import get_logger, setup_logging

DESCRIPTION = (
    "Lists the Omnivore inbox and saves articles as self-contained HTML files "
    "with their images embedded as data URIs."
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Configure logging and report where articles will be written."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.json_logs)
    logger = get_logger(__name__)
    logger.info(
        "Omnisync starting",
        version=__version__,
        api_endpoint=settings.api_endpoint,
        directory=str(settings.directory),
        page_size=settings.page_size,
        max_pages=settings.max_pages,
        strict_listing=settings.strict_listing,
    )
    if not settings.api_key.get_secret_value():
        logger.warning(
            "Omnivore API key is not set; listing and downloads will be refused",
            env_var="OMNISYNC_API_KEY",
        )
    yield
    logger.info("Omnisync shutting down", directory=str(settings.directory))


app = FastAPI(
    title="Omnisync",
    description=DESCRIPTION,
    version=__version__,
    lifespan=lifespan,
)

app.include_router(router)


@app.get("/")
async def root() -> dict[str, str]:
    """Service name, what it does, and where articles are saved."""
    return {
        "name": "Omnisync",
        "version": __version__,
        "description": DESCRIPTION,
        "directory": str(get_settings().directory),
        "docs": "/docs",
    }
