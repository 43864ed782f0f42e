"""Sync workflow orchestrator for Omnisync."""

from omnisync.clients.graphql import GraphQLClient
from omnisync.clients.images import ImageFetcher
from omnisync.config import SyncConfig
from omnisync.errors import ConfigError, ListingError
from omnisync.models import ArticleSummary, DownloadResult, ListingResult, ProgressCallback
from omnisync.services.inliner import ImageInliner
from omnisync.services.lister import ArticleLister
from omnisync.services.packager import ArticlePackager
from omnisync.utils.logging import get_logger

logger = get_logger(__name__)

NO_ARTICLES_MESSAGE = "No articles found in inbox."


def _log_progress(message: str) -> None:
    logger.debug("Progress", message=message)


class SyncOrchestrator:
    """Entry point for listing the inbox and downloading articles.

    Holds only the immutable configuration and its collaborators; every
    call is independent of the previous ones.
    """

    def __init__(
        self,
        config: SyncConfig,
        graphql_client: GraphQLClient,
        image_fetcher: ImageFetcher,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        self._config = config
        self._on_progress = on_progress or _log_progress

        self._lister = ArticleLister(graphql_client, config)
        self._packager = ArticlePackager(
            graphql_client,
            ImageInliner(image_fetcher),
            config,
        )

    async def list_articles(self) -> ListingResult:
        """List the inbox.

        Returns:
            ListingResult with the summaries, or with ``error`` set to a short
            message when the listing failed. Failed listings carry no articles.
        """
        self._on_progress("Fetching articles...")
        try:
            articles = await self._lister.list_inbox_articles(self._on_progress)
        except (ConfigError, ListingError) as e:
            logger.error("Article listing failed", reason=e.reason)
            return ListingResult(articles=[], error=f"Error fetching articles: {e.reason}")

        if not articles:
            logger.info(NO_ARTICLES_MESSAGE)
        return ListingResult(articles=articles)

    async def download_article(self, summary: ArticleSummary) -> DownloadResult:
        """Download a single article and report the outcome."""
        try:
            result = await self._packager.download_article(summary, self._on_progress)
        except ConfigError as e:
            logger.error("Article download failed", slug=summary.slug, reason=e.reason)
            result = DownloadResult(success=False, slug=summary.slug, reason=e.reason)

        self._on_progress(result.message)
        return result

    async def download_articles(self, summaries: list[ArticleSummary]) -> list[DownloadResult]:
        """Download several articles one after another.

        A failed article does not stop the remaining downloads.
        """
        results = []
        for summary in summaries:
            results.append(await self.download_article(summary))

        succeeded = sum(1 for r in results if r.success)
        logger.info(
            "Batch download complete",
            requested=len(summaries),
            succeeded=succeeded,
            failed=len(results) - succeeded,
        )
        return results
