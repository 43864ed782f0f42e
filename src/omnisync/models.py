"""Shared data models for Omnisync."""

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

ProgressCallback = Callable[[str], None]


def _required_str(data: dict[str, Any], key: str) -> str:
    value = data[key]
    if value is None:
        raise KeyError(key)
    return str(value)


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value)
    return text if text.strip() else None


@dataclass(frozen=True)
class ArticleSummary:
    """An inbox entry as returned by the search listing."""

    id: str
    title: str
    url: str
    slug: str
    author: str | None = None

    @classmethod
    def from_api_response(cls, node: dict[str, Any]) -> "ArticleSummary":
        """Create an ArticleSummary from a search edge node."""
        return cls(
            id=_required_str(node, "id"),
            title=_required_str(node, "title"),
            url=str(node.get("url") or ""),
            slug=_required_str(node, "slug"),
            author=_optional_str(node.get("author")),
        )


@dataclass(frozen=True)
class ArticleContent:
    """A fully fetched article, including its raw HTML body."""

    id: str
    title: str
    url: str
    slug: str
    content: str
    author: str | None = None

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "ArticleContent":
        """Create an ArticleContent from a GetArticle payload."""
        return cls(
            id=_required_str(data, "id"),
            title=_required_str(data, "title"),
            url=str(data.get("url") or ""),
            slug=_required_str(data, "slug"),
            content=str(data.get("content") or ""),
            author=_optional_str(data.get("author")),
        )


@dataclass(frozen=True)
class PageCursor:
    """Pagination state of a search listing."""

    end_cursor: str | None = None
    has_next_page: bool = True

    @classmethod
    def from_page_info(cls, page_info: Any) -> "PageCursor":
        """Create a PageCursor from a GraphQL ``pageInfo`` object."""
        if not isinstance(page_info, dict) or not page_info:
            return cls(end_cursor=None, has_next_page=False)
        return cls(
            end_cursor=page_info.get("endCursor"),
            has_next_page=bool(page_info.get("hasNextPage")),
        )


@dataclass(frozen=True)
class InlinedImage:
    """An image embedded as a data URI."""

    mime_type: str
    payload: str

    @property
    def data_uri(self) -> str:
        return f"data:{self.mime_type};base64,{self.payload}"


@dataclass
class ListingResult:
    """Outcome of listing the inbox."""

    articles: list[ArticleSummary] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class DownloadResult:
    """Outcome of downloading a single article."""

    success: bool
    slug: str
    path: Path | None = None
    reason: str | None = None
    images_embedded: int = 0
    images_failed: int = 0

    @property
    def message(self) -> str:
        """Short status line suitable for showing to the user."""
        if self.success:
            return "Article downloaded successfully."
        return self.reason or "Failed to save article."
