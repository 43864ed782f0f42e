"""Pydantic models for API requests and responses."""

from pydantic import BaseModel, Field


class ArticleItem(BaseModel):
    """An inbox article as exposed by the API."""

    id: str = Field(description="Omnivore article ID")
    title: str = Field(description="Article title")
    url: str = Field(description="Original article URL")
    slug: str = Field(description="Slug used to download the article")
    author: str | None = Field(default=None, description="Article author, if known")


class ArticleListResponse(BaseModel):
    """Response model for the article listing endpoint."""

    status: str = Field(description="Status of the operation")
    count: int = Field(description="Number of articles in the inbox")
    articles: list[ArticleItem] = Field(default_factory=list, description="Inbox articles")
    message: str | None = Field(default=None, description="Error or info message")


class DownloadRequest(BaseModel):
    """Request body for downloading an article."""

    id: str = Field(description="Omnivore article ID")
    title: str = Field(description="Article title")
    url: str = Field(default="", description="Original article URL")
    author: str | None = Field(default=None, description="Article author, if known")


class DownloadResponse(BaseModel):
    """Response model for the download endpoint."""

    status: str = Field(description="Status of the operation")
    slug: str = Field(description="Slug of the requested article")
    path: str | None = Field(default=None, description="Path of the written HTML file")
    message: str = Field(description="Human-readable outcome")
    images_embedded: int = Field(default=0, description="Images embedded as data URIs")
    images_failed: int = Field(default=0, description="Images left as remote references")


class HealthResponse(BaseModel):
    """Response model for health check endpoint."""

    status: str = Field(description="Health status")
    version: str = Field(description="Application version")
