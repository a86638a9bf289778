"""Pydantic models for community search data structures."""

from .post import NormalizedPost, RawAuthor, RawBoard, RawConversation, RawPost, RawTag
from .search_result import Pagination, SearchEnvelope, TagCount, TagsEnvelope

__all__ = [
    "NormalizedPost",
    "RawAuthor",
    "RawBoard",
    "RawConversation",
    "RawPost",
    "RawTag",
    "Pagination",
    "SearchEnvelope",
    "TagCount",
    "TagsEnvelope",
]
