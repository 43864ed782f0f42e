"""Inbox listing service for Omnisync."""

from typing import Any

from omnisync.clients.graphql import GraphQLClient
from omnisync.config import SyncConfig
from omnisync.errors import ClientError, ListingError
from omnisync.models import ArticleSummary, PageCursor, ProgressCallback
from omnisync.utils.logging import get_logger

logger = get_logger(__name__)

INBOX_QUERY = "sort:saved-desc in:inbox"

SEARCH_QUERY = """
query Search($after: String, $first: Int, $query: String) {
    search(first: $first, after: $after, query: $query) {
        ... on SearchSuccess {
            edges {
                node {
                    id
                    title
                    url
                    author
                    slug
                }
            }
            pageInfo {
                hasNextPage
                endCursor
            }
        }
        ... on SearchError {
            errorCodes
        }
    }
}
"""


def _noop(message: str) -> None:
    pass


class ArticleLister:
    """Walks the paginated search results of the inbox."""

    def __init__(self, client: GraphQLClient, config: SyncConfig) -> None:
        self._client = client
        self._config = config

    async def list_inbox_articles(
        self, on_progress: ProgressCallback | None = None
    ) -> list[ArticleSummary]:
        """List every article in the inbox, newest saved first.

        Args:
            on_progress: Called once per fetched page with a status line.

        Returns:
            Article summaries in the order the server returned them.

        Raises:
            ConfigError: If no API key is configured. No request is made.
            ListingError: If a request fails or the service reports error codes.
        """
        self._config.require_api_key()
        notify = on_progress or _noop

        articles: list[ArticleSummary] = []
        seen_ids: set[str] = set()
        cursor = PageCursor()
        pages = 0

        logger.info("Listing inbox articles", page_size=self._config.page_size)

        while cursor.has_next_page:
            if pages >= self._config.max_pages:
                logger.warning(
                    "Stopping listing at page limit",
                    max_pages=self._config.max_pages,
                    count=len(articles),
                )
                break

            search = await self._fetch_page(cursor.end_cursor)
            pages += 1

            if search is None:
                if self._config.strict_listing:
                    raise ListingError("Error fetching article list: malformed_response")
                logger.warning("Unexpected search response, ending listing", page=pages)
                cursor = PageCursor(end_cursor=cursor.end_cursor, has_next_page=False)
            else:
                for article in self._parse_edges(search["edges"]):
                    if article.id in seen_ids:
                        logger.debug("Skipping duplicate article", article_id=article.id)
                        continue
                    seen_ids.add(article.id)
                    articles.append(article)

                next_cursor = PageCursor.from_page_info(search.get("pageInfo"))
                if (
                    next_cursor.has_next_page
                    and next_cursor.end_cursor == cursor.end_cursor
                ):
                    logger.warning("Cursor did not advance, ending listing", page=pages)
                    next_cursor = PageCursor(next_cursor.end_cursor, has_next_page=False)
                cursor = next_cursor

            logger.info("Fetched search page", page=pages, count=len(articles))
            notify(f"Fetching articles... {len(articles)} found")

        logger.info("Inbox listing complete", pages=pages, count=len(articles))
        return articles

    async def _fetch_page(self, after: str | None) -> dict[str, Any] | None:
        """Fetch one search page.

        Returns:
            The ``search`` payload when it carries edges, None when the
            response does not have the expected shape.
        """
        variables = {
            "first": self._config.page_size,
            "query": INBOX_QUERY,
            "after": after,
        }
        try:
            result = await self._client.execute(SEARCH_QUERY, variables)
        except ClientError as e:
            raise ListingError(f"Error fetching article list: {e.kind}") from e

        data = result.get("data") if isinstance(result, dict) else None
        search = data.get("search") if isinstance(data, dict) else None
        if not isinstance(search, dict):
            if isinstance(result, dict) and result.get("errors"):
                logger.warning("GraphQL errors in search response", errors=result["errors"])
            return None

        if isinstance(search.get("edges"), list):
            page_info = search.get("pageInfo")
            if page_info is not None and not isinstance(page_info, dict):
                logger.warning("Unexpected pageInfo in search response", page_info=page_info)
                return None
            return search

        error_codes = search.get("errorCodes")
        if error_codes:
            codes = [str(code) for code in error_codes]
            logger.warning("Search returned error codes", codes=codes)
            raise ListingError(f"Search error: {', '.join(codes)}")

        return None

    @staticmethod
    def _parse_edges(edges: list[Any]) -> list[ArticleSummary]:
        articles = []
        for edge in edges:
            node = edge.get("node") if isinstance(edge, dict) else None
            try:
                articles.append(ArticleSummary.from_api_response(node))
            except (KeyError, TypeError):
                logger.warning("Skipping search edge without id, title or slug", edge=edge)
        return articles
