"""Result envelope models returned by every query tool."""

from typing import Any

from pydantic import BaseModel, ConfigDict

from .post import NormalizedPost


class Pagination(BaseModel):
    """Pagination metadata for a page of posts."""

    model_config = ConfigDict(frozen=True)

    total: int = 0
    showing: int = 0
    startIndex: int = 0
    currentPage: int = 0
    totalPages: int = 0


class SearchEnvelope(BaseModel):
    """Wrapper for a page of normalized posts."""

    model_config = ConfigDict(frozen=True)

    success: bool
    message: str
    items: list[NormalizedPost] = []
    pagination: Pagination = Pagination()
    tip: str
    raw: Any | None = None


class TagCount(BaseModel):
    """A tag label with the number of posts carrying it."""

    model_config = ConfigDict(frozen=True)

    name: str
    count: int = 0


class TagsEnvelope(BaseModel):
    """Wrapper for a tag aggregation result."""

    model_config = ConfigDict(frozen=True)

    success: bool
    message: str
    tags: list[TagCount] = []
    tip: str
    raw: Any | None = None
