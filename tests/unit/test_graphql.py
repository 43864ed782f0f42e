"""Unit tests for the GraphQL client."""

import json

import httpx
import pytest
import respx
from httpx import Response

from omnisync.clients.graphql import GraphQLClient
from omnisync.config import OMNIVORE_API_ENDPOINT
from omnisync.errors import (
    DecodeError,
    EmptyResponseError,
    ErrorKind,
    HttpError,
    NetworkError,
)


class TestGraphQLClient:
    """Tests for GraphQLClient."""

    @pytest.fixture
    def client(self) -> GraphQLClient:
        """Create a test client."""
        return GraphQLClient(api_key="test-key")

    @respx.mock
    async def test_execute_returns_decoded_json(self, client: GraphQLClient) -> None:
        """Should return the decoded JSON envelope."""
        respx.post(OMNIVORE_API_ENDPOINT).mock(
            return_value=Response(200, json={"data": {"search": {"edges": []}}})
        )

        result = await client.execute("query { search }", {"first": 20})
        assert result == {"data": {"search": {"edges": []}}}
        await client.close()

    @respx.mock
    async def test_execute_sends_headers_and_body(self, client: GraphQLClient) -> None:
        """Should send the raw API key and a JSON body with null variables."""
        route = respx.post(OMNIVORE_API_ENDPOINT).mock(
            return_value=Response(200, json={"data": {}})
        )

        await client.execute("query Q", {"first": 20, "after": None})

        request = route.calls[0].request
        assert request.headers["Authorization"] == "test-key"
        assert request.headers["Content-Type"] == "application/json"
        body = json.loads(request.content)
        assert body["query"] == "query Q"
        assert body["variables"] == {"first": 20, "after": None}
        await client.close()

    @respx.mock
    async def test_custom_endpoint(self) -> None:
        """Should post to the configured endpoint."""
        route = respx.post("https://omnivore.example.com/api/graphql").mock(
            return_value=Response(200, json={"data": {}})
        )

        async with GraphQLClient("k", endpoint="https://omnivore.example.com/api/graphql") as client:
            await client.execute("query Q", {})

        assert route.called

    @respx.mock
    async def test_http_error_carries_status(self, client: GraphQLClient) -> None:
        """Should raise HttpError with the status code on non-200 responses."""
        respx.post(OMNIVORE_API_ENDPOINT).mock(return_value=Response(401))

        with pytest.raises(HttpError) as exc_info:
            await client.execute("query Q", {})

        assert exc_info.value.kind == ErrorKind.HTTP_ERROR
        assert exc_info.value.status_code == 401
        await client.close()

    @respx.mock
    async def test_non_200_success_status_is_http_error(self, client: GraphQLClient) -> None:
        """Only 200 counts as success."""
        respx.post(OMNIVORE_API_ENDPOINT).mock(return_value=Response(204))

        with pytest.raises(HttpError):
            await client.execute("query Q", {})
        await client.close()

    @respx.mock
    async def test_empty_body(self, client: GraphQLClient) -> None:
        """Should raise EmptyResponseError on a 200 with no body."""
        respx.post(OMNIVORE_API_ENDPOINT).mock(return_value=Response(200, content=b""))

        with pytest.raises(EmptyResponseError) as exc_info:
            await client.execute("query Q", {})

        assert exc_info.value.kind == ErrorKind.EMPTY_RESPONSE
        assert str(exc_info.value.kind) == "empty_response"
        await client.close()

    @respx.mock
    async def test_invalid_json(self, client: GraphQLClient) -> None:
        """Should raise DecodeError when the body is not JSON."""
        respx.post(OMNIVORE_API_ENDPOINT).mock(
            return_value=Response(200, content=b"<html>maintenance</html>")
        )

        with pytest.raises(DecodeError) as exc_info:
            await client.execute("query Q", {})

        assert exc_info.value.kind == ErrorKind.JSON_ERROR
        await client.close()

    @respx.mock
    async def test_json_null_is_decode_error(self, client: GraphQLClient) -> None:
        """A JSON null body is not a usable result."""
        respx.post(OMNIVORE_API_ENDPOINT).mock(return_value=Response(200, content=b"null"))

        with pytest.raises(DecodeError):
            await client.execute("query Q", {})
        await client.close()

    @respx.mock
    async def test_connection_error(self, client: GraphQLClient) -> None:
        """Should raise NetworkError when the connection fails."""
        respx.post(OMNIVORE_API_ENDPOINT).mock(side_effect=httpx.ConnectError("refused"))

        with pytest.raises(NetworkError) as exc_info:
            await client.execute("query Q", {})

        assert exc_info.value.kind == ErrorKind.NETWORK_ERROR
        assert exc_info.value.status_code is None
        await client.close()

    @respx.mock
    async def test_timeout_is_network_error(self, client: GraphQLClient) -> None:
        """Timeouts are transport failures."""
        respx.post(OMNIVORE_API_ENDPOINT).mock(side_effect=httpx.ReadTimeout("timeout"))

        with pytest.raises(NetworkError):
            await client.execute("query Q", {})
        await client.close()

    @respx.mock
    async def test_single_attempt(self, client: GraphQLClient) -> None:
        """Should not retry a failed request."""
        route = respx.post(OMNIVORE_API_ENDPOINT).mock(return_value=Response(503))

        with pytest.raises(HttpError):
            await client.execute("query Q", {})

        assert route.call_count == 1
        await client.close()

    async def test_injected_client_is_not_closed(self) -> None:
        """Should leave an injected httpx client open."""
        http_client = httpx.AsyncClient()
        async with GraphQLClient("k", client=http_client):
            pass

        assert not http_client.is_closed
        await http_client.aclose()
