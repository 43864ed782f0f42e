"""Unit tests for SyncOrchestrator."""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from omnisync.clients.graphql import GraphQLClient
from omnisync.clients.images import ImageFetcher
from omnisync.config import SyncConfig
from omnisync.errors import ListingError
from omnisync.models import ArticleSummary, DownloadResult
from omnisync.services.orchestrator import SyncOrchestrator


def _make_summary(n: int) -> ArticleSummary:
    return ArticleSummary(
        id=f"id-{n}",
        title=f"Title {n}",
        url=f"https://example.com/{n}",
        slug=f"slug-{n}",
    )


class TestSyncOrchestrator:
    """Tests for the list and download entry points."""

    @pytest.fixture
    def progress(self) -> list[str]:
        return []

    @pytest.fixture
    def graphql(self) -> MagicMock:
        client = MagicMock(spec=GraphQLClient)
        client.execute = AsyncMock()
        return client

    @pytest.fixture
    def orchestrator(
        self, graphql: MagicMock, progress: list[str], tmp_path: Path
    ) -> SyncOrchestrator:
        config = SyncConfig(api_key="test-key", directory=tmp_path)
        return SyncOrchestrator(
            config,
            graphql_client=graphql,
            image_fetcher=MagicMock(spec=ImageFetcher),
            on_progress=progress.append,
        )

    async def test_list_articles_success(self, orchestrator: SyncOrchestrator) -> None:
        """Should return the lister's summaries."""
        summaries = [_make_summary(1), _make_summary(2)]
        orchestrator._lister.list_inbox_articles = AsyncMock(return_value=summaries)

        result = await orchestrator.list_articles()

        assert result.ok
        assert result.articles == summaries

    async def test_list_articles_error(
        self, orchestrator: SyncOrchestrator, progress: list[str]
    ) -> None:
        """Listing failures become a short message with no articles."""
        orchestrator._lister.list_inbox_articles = AsyncMock(
            side_effect=ListingError("Search error: SOME_ERROR")
        )

        result = await orchestrator.list_articles()

        assert not result.ok
        assert result.articles == []
        assert result.error == "Error fetching articles: Search error: SOME_ERROR"
        assert progress == ["Fetching articles..."]

    async def test_list_without_api_key(self, graphql: MagicMock, tmp_path: Path) -> None:
        """A missing key is reported without calling the API."""
        orchestrator = SyncOrchestrator(
            SyncConfig(api_key="", directory=tmp_path),
            graphql_client=graphql,
            image_fetcher=MagicMock(spec=ImageFetcher),
        )

        result = await orchestrator.list_articles()

        assert result.error == "Error fetching articles: API key is not set"
        graphql.execute.assert_not_awaited()

    async def test_download_reports_final_message(
        self, orchestrator: SyncOrchestrator, progress: list[str]
    ) -> None:
        """The outcome is announced through the progress channel."""
        orchestrator._packager.download_article = AsyncMock(
            return_value=DownloadResult(success=True, slug="slug-1")
        )

        result = await orchestrator.download_article(_make_summary(1))

        assert result.success
        assert progress[-1] == "Article downloaded successfully."

    async def test_download_without_api_key(self, graphql: MagicMock, tmp_path: Path) -> None:
        """A missing key fails the download without calling the API."""
        orchestrator = SyncOrchestrator(
            SyncConfig(api_key="  ", directory=tmp_path),
            graphql_client=graphql,
            image_fetcher=MagicMock(spec=ImageFetcher),
        )

        result = await orchestrator.download_article(_make_summary(1))

        assert result.success is False
        assert result.message == "API key is not set"
        graphql.execute.assert_not_awaited()

    async def test_download_articles_continues_after_failure(
        self, orchestrator: SyncOrchestrator
    ) -> None:
        """One failed article does not stop the others."""

        async def mock_download(summary: ArticleSummary, on_progress: object) -> DownloadResult:
            if summary.slug == "slug-1":
                return DownloadResult(success=False, slug=summary.slug, reason="Failed to save article.")
            return DownloadResult(success=True, slug=summary.slug)

        orchestrator._packager.download_article = mock_download

        results = await orchestrator.download_articles(
            [_make_summary(1), _make_summary(2), _make_summary(3)]
        )

        assert [r.success for r in results] == [False, True, True]
        assert [r.slug for r in results] == ["slug-1", "slug-2", "slug-3"]
