"""Omnivore GraphQL API client for Omnisync."""

import json
from typing import Any

import httpx

from omnisync.config import OMNIVORE_API_ENDPOINT
from omnisync.errors import DecodeError, EmptyResponseError, HttpError, NetworkError
from omnisync.utils.logging import get_logger

logger = get_logger(__name__)


class GraphQLClient:
    """Client for issuing authenticated queries against the Omnivore GraphQL API.

    Each call performs exactly one HTTP request. Failures are classified into
    NetworkError, HttpError, EmptyResponseError and DecodeError; nothing is
    retried.
    """

    def __init__(
        self,
        api_key: str,
        endpoint: str = OMNIVORE_API_ENDPOINT,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = api_key
        self._endpoint = endpoint
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "GraphQLClient":
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()

    @property
    def headers(self) -> dict[str, str]:
        """Headers sent with every GraphQL request."""
        return {
            "Authorization": self._api_key,
            "Content-Type": "application/json",
        }

    async def execute(self, query: str, variables: dict[str, Any]) -> Any:
        """Run a GraphQL operation against the configured endpoint.

        Args:
            query: The GraphQL document.
            variables: Operation variables; None values are sent as null.

        Returns:
            The decoded JSON envelope (usually a dict with a ``data`` key).

        Raises:
            NetworkError, HttpError, EmptyResponseError, DecodeError.
        """
        body = json.dumps({"query": query, "variables": variables})
        return await self.request("POST", self._endpoint, self.headers, body)

    async def request(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        body: str | None = None,
    ) -> Any:
        """Perform a single request and decode its JSON body.

        Raises:
            NetworkError: The request could not be completed.
            HttpError: The server answered with a status other than 200.
            EmptyResponseError: The server answered 200 with no body.
            DecodeError: The body is not a usable JSON value.
        """
        try:
            response = await self._client.request(method, url, headers=headers, content=body)
        except httpx.RequestError as e:
            logger.warning("Request error calling API", url=url, error=str(e))
            raise NetworkError("network_error") from e

        if response.status_code != 200:
            logger.warning("HTTP error calling API", url=url, status=response.status_code)
            raise HttpError("http_error", status_code=response.status_code)

        if not response.content:
            logger.warning("Empty response from API", url=url)
            raise EmptyResponseError("empty_response", status_code=response.status_code)

        try:
            result = response.json()
        except ValueError as e:
            logger.warning("Invalid JSON from API", url=url, size=len(response.content))
            raise DecodeError("json_error", status_code=response.status_code) from e

        if result is None or result is False:
            logger.warning("Unusable JSON value from API", url=url)
            raise DecodeError("json_error", status_code=response.status_code)

        return result
