"""Error taxonomy for Omnisync.

Every error carries a short, human-readable ``reason`` that a caller can
show to the user as-is.
"""

from enum import StrEnum
from pathlib import Path


class ErrorKind(StrEnum):
    """Failure classes reported by the GraphQL client."""

    NETWORK_ERROR = "network_error"
    HTTP_ERROR = "http_error"
    EMPTY_RESPONSE = "empty_response"
    JSON_ERROR = "json_error"


class SyncError(Exception):
    """Base class for all Omnisync failures."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)


class ConfigError(SyncError):
    """Raised when required configuration (such as the API key) is missing."""


class ClientError(SyncError):
    """Raised by the GraphQL client when a request cannot produce a JSON value."""

    kind: ErrorKind

    def __init__(self, reason: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(reason)


class NetworkError(ClientError):
    """Transport or connection failure."""

    kind = ErrorKind.NETWORK_ERROR


class HttpError(ClientError):
    """Non-200 response status."""

    kind = ErrorKind.HTTP_ERROR


class DecodeError(ClientError):
    """Response body could not be decoded as JSON."""

    kind = ErrorKind.JSON_ERROR


class EmptyResponseError(DecodeError):
    """200 response with a zero-length body."""

    kind = ErrorKind.EMPTY_RESPONSE


class RemoteError(SyncError):
    """The service answered with structured GraphQL error codes."""

    def __init__(self, reason: str, codes: list[str]) -> None:
        self.codes = codes
        super().__init__(reason)


class ListingError(SyncError):
    """Raised when the inbox listing must be aborted."""


class FilesystemError(SyncError):
    """Raised when an output file cannot be created or written."""

    def __init__(self, reason: str, path: Path) -> None:
        self.path = path
        super().__init__(reason)
