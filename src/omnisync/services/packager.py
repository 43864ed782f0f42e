"""Article download and packaging service for Omnisync."""

import contextlib
import html
import os
import tempfile
from pathlib import Path
from typing import Any

from omnisync.clients.graphql import GraphQLClient
from omnisync.config import SyncConfig
from omnisync.errors import ClientError, FilesystemError, RemoteError
from omnisync.models import ArticleContent, ArticleSummary, DownloadResult, ProgressCallback
from omnisync.services.inliner import ImageInliner
from omnisync.utils.filenames import safe_filename
from omnisync.utils.logging import get_logger

logger = get_logger(__name__)

# Omnivore resolves "me" to the owner of the API key.
ARTICLE_USERNAME = "me"

ARTICLE_QUERY = """
query GetArticle($username: String!, $slug: String!) {
    article(username: $username, slug: $slug) {
        ... on ArticleSuccess {
            article {
                id
                title
                url
                author
                content
                slug
            }
        }
        ... on ArticleError {
            errorCodes
        }
    }
}
"""

FETCH_FAILED_MESSAGE = "Failed to fetch article data."
SAVE_FAILED_MESSAGE = "Failed to save article."


def render_article(article: ArticleContent, body: str) -> str:
    """Render a standalone HTML document for an article.

    Args:
        article: The fetched article; supplies title, author and URL.
        body: The article body, already rewritten for offline use.

    Returns:
        The complete document. Equal inputs always render identically.
    """
    title = html.escape(article.title, quote=False)
    author = html.escape(article.author or "Unknown", quote=False)
    url = html.escape(article.url, quote=True)
    return (
        '<html><head><meta charset="utf-8">'
        f"<title>{title}</title></head><body>"
        f"<h1>{title}</h1>"
        f"<p>Author: {author}</p>"
        f"<p>URL: <a href='{url}'>{url}</a></p>"
        "<hr>"
        f"{body}"
        "</body></html>"
    )


def _default_file_mode() -> int:
    """Mode a plain open() would give a new file under the current umask."""
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def write_atomic(path: Path, text: str) -> None:
    """Write ``text`` to ``path`` as UTF-8, all or nothing.

    The document goes to a temporary file in the destination folder which
    is renamed over ``path`` once fully written.

    Raises:
        FilesystemError: If the folder cannot be created or the file written.
    """
    directory = path.parent
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error("Failed to create directory", directory=str(directory), error=str(e))
        raise FilesystemError(f"cannot create directory: {e}", directory) from e

    tmp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            newline="",
            dir=directory,
            prefix=".omnisync-",
            suffix=".tmp",
            delete=False,
        ) as f:
            tmp_path = Path(f.name)
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(tmp_path, _default_file_mode())
        os.replace(tmp_path, path)
    except OSError as e:
        logger.error("Failed to write file", path=str(path), error=str(e))
        if tmp_path is not None:
            with contextlib.suppress(OSError):
                tmp_path.unlink(missing_ok=True)
        raise FilesystemError(f"cannot write file: {e}", path) from e


def _noop(message: str) -> None:
    pass


class ArticlePackager:
    """Fetches an article and stores it as a self-contained HTML file."""

    def __init__(
        self,
        client: GraphQLClient,
        inliner: ImageInliner,
        config: SyncConfig,
    ) -> None:
        self._client = client
        self._inliner = inliner
        self._config = config

    def output_path(self, article: ArticleContent) -> Path:
        """Destination path of an article's HTML file."""
        name = safe_filename(article.title, fallback=article.slug)
        return self._config.directory / f"{name}.html"

    async def fetch_article(self, slug: str) -> ArticleContent:
        """Fetch the full article for a slug.

        Raises:
            ClientError: If the request fails.
            RemoteError: If the service reports error codes or the response
                does not contain an article.
        """
        variables = {"username": ARTICLE_USERNAME, "slug": slug}
        result = await self._client.execute(ARTICLE_QUERY, variables)
        return self._parse_article(slug, result)

    @staticmethod
    def _parse_article(slug: str, result: Any) -> ArticleContent:
        data = result.get("data") if isinstance(result, dict) else None
        payload = data.get("article") if isinstance(data, dict) else None
        if not isinstance(payload, dict):
            logger.warning("Unexpected article response", slug=slug)
            raise RemoteError(FETCH_FAILED_MESSAGE, codes=[])

        article = payload.get("article")
        if isinstance(article, dict):
            try:
                return ArticleContent.from_api_response(article)
            except (KeyError, TypeError) as e:
                logger.warning("Incomplete article payload", slug=slug, missing=str(e))
                raise RemoteError(FETCH_FAILED_MESSAGE, codes=[]) from e

        codes = [str(code) for code in payload.get("errorCodes") or []]
        logger.warning("Article request returned error codes", slug=slug, codes=codes)
        reason = f"Article error: {', '.join(codes)}" if codes else FETCH_FAILED_MESSAGE
        raise RemoteError(reason, codes=codes)

    async def download_article(
        self,
        summary: ArticleSummary,
        on_progress: ProgressCallback | None = None,
    ) -> DownloadResult:
        """Download one article to ``<directory>/<safe title>.html``.

        Args:
            summary: The article to download, as returned by the lister.
            on_progress: Receives short status lines while the download runs.

        Returns:
            DownloadResult; ``success`` is False when any step failed, in
            which case no file has been written.

        Raises:
            ConfigError: If no API key is configured. No request is made.
        """
        self._config.require_api_key()
        notify = on_progress or _noop

        logger.info("Downloading article", slug=summary.slug, article_id=summary.id)
        notify("Fetching article data...")

        try:
            article = await self.fetch_article(summary.slug)
        except ClientError as e:
            logger.warning("Failed to fetch article", slug=summary.slug, kind=str(e.kind))
            return DownloadResult(
                success=False, slug=summary.slug, reason=f"Error fetching article: {e.kind}"
            )
        except RemoteError as e:
            return DownloadResult(success=False, slug=summary.slug, reason=e.reason)

        notify("Processing article content...")
        inlined = await self._inliner.inline_images_with_stats(article.content, notify)
        document = render_article(article, inlined.html)
        path = self.output_path(article)

        notify("Saving article...")
        try:
            write_atomic(path, document)
        except FilesystemError as e:
            logger.warning("Failed to save article", slug=summary.slug, reason=e.reason)
            return DownloadResult(
                success=False,
                slug=summary.slug,
                reason=SAVE_FAILED_MESSAGE,
                images_embedded=inlined.embedded,
                images_failed=inlined.failed,
            )

        logger.info(
            "Article saved",
            slug=summary.slug,
            path=str(path),
            images_embedded=inlined.embedded,
            images_failed=inlined.failed,
        )
        return DownloadResult(
            success=True,
            slug=summary.slug,
            path=path,
            images_embedded=inlined.embedded,
            images_failed=inlined.failed,
        )
