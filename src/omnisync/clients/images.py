"""Remote image fetcher for Omnisync."""

import base64

import httpx

from omnisync.models import InlinedImage
from omnisync.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_MIME_TYPE = "image/jpeg"


class ImageFetcher:
    """Downloads images with a plain GET and encodes them for inlining."""

    def __init__(
        self,
        timeout: float = 30.0,
        max_bytes: int | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._max_bytes = max_bytes
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout, follow_redirects=True)

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "ImageFetcher":
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()

    async def fetch(self, url: str) -> InlinedImage | None:
        """Fetch an image and base64-encode it.

        Args:
            url: Absolute URL of the image.

        Returns:
            The encoded image, or None when the image could not be fetched.
        """
        try:
            response = await self._client.get(url)
        except (httpx.RequestError, httpx.InvalidURL) as e:
            logger.warning("Request error fetching image", url=url, error=str(e))
            return None

        if response.status_code != 200:
            logger.warning("HTTP error fetching image", url=url, status=response.status_code)
            return None

        data = response.content
        if self._max_bytes is not None and len(data) > self._max_bytes:
            logger.warning("Image too large to embed", url=url, size=len(data))
            return None

        mime_type = _mime_type(response.headers.get("content-type"))
        logger.debug("Fetched image", url=url, mime_type=mime_type, size=len(data))
        return InlinedImage(
            mime_type=mime_type,
            payload=base64.b64encode(data).decode("ascii"),
        )

    async def fetch_data_uri(self, url: str) -> str | None:
        """Fetch an image and return it as a data URI, or None on failure."""
        image = await self.fetch(url)
        return image.data_uri if image else None


def _mime_type(content_type: str | None) -> str:
    """Strip parameters from a Content-Type header value."""
    if not content_type:
        return DEFAULT_MIME_TYPE
    mime_type = content_type.split(";", 1)[0].strip()
    return mime_type or DEFAULT_MIME_TYPE
