"""API routes for Omnisync."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import APIRouter, Depends, HTTPException, status

from omnisync import __version__
from omnisync.api.models import (
    ArticleItem,
    ArticleListResponse,
    DownloadRequest,
    DownloadResponse,
    HealthResponse,
)
from omnisync.clients.graphql import GraphQLClient
from omnisync.clients.images import ImageFetcher
from omnisync.config import SyncConfig, get_settings
from omnisync.models import ArticleSummary
from omnisync.services.orchestrator import NO_ARTICLES_MESSAGE, SyncOrchestrator
from omnisync.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1", tags=["api"])


def get_sync_config() -> SyncConfig:
    """Snapshot of the current settings for one request."""
    return get_settings().to_sync_config()


@asynccontextmanager
async def open_orchestrator(config: SyncConfig) -> AsyncIterator[SyncOrchestrator]:
    """Create an orchestrator with its HTTP clients for the duration of a request."""
    async with GraphQLClient(
        config.api_key,
        endpoint=config.api_endpoint,
        timeout=config.request_timeout,
    ) as graphql:
        async with ImageFetcher(
            timeout=config.image_timeout,
            max_bytes=config.max_image_bytes,
        ) as images:
            yield SyncOrchestrator(config, graphql, images)


def _require_api_key(config: SyncConfig) -> None:
    if not config.api_key.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="API key is not set. Configure OMNISYNC_API_KEY.",
        )


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(status="healthy", version=__version__)


@router.get("/articles", response_model=ArticleListResponse)
async def list_articles(config: SyncConfig = Depends(get_sync_config)) -> ArticleListResponse:
    """List every article in the Omnivore inbox, newest saved first."""
    logger.info("List endpoint called")
    _require_api_key(config)

    async with open_orchestrator(config) as orchestrator:
        result = await orchestrator.list_articles()

    if not result.ok:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=result.error)

    articles = [
        ArticleItem(id=a.id, title=a.title, url=a.url, slug=a.slug, author=a.author)
        for a in result.articles
    ]
    return ArticleListResponse(
        status="success",
        count=len(articles),
        articles=articles,
        message=None if articles else NO_ARTICLES_MESSAGE,
    )


@router.post("/articles/{slug}/download", response_model=DownloadResponse)
async def download_article(
    slug: str,
    request: DownloadRequest,
    config: SyncConfig = Depends(get_sync_config),
) -> DownloadResponse:
    """Download one article as a self-contained HTML file.

    This endpoint:
    1. Fetches the full article by slug
    2. Embeds its images as data URIs
    3. Writes <directory>/<title>.html atomically
    """
    logger.info("Download endpoint called", slug=slug)
    _require_api_key(config)

    summary = ArticleSummary(
        id=request.id,
        title=request.title,
        url=request.url,
        slug=slug,
        author=request.author,
    )
    async with open_orchestrator(config) as orchestrator:
        result = await orchestrator.download_article(summary)

    return DownloadResponse(
        status="success" if result.success else "failed",
        slug=slug,
        path=str(result.path) if result.path else None,
        message=result.message,
        images_embedded=result.images_embedded,
        images_failed=result.images_failed,
    )
