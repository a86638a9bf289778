"""Post models for raw community search records and their normalized form."""

import math
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _text_or_none(value: Any) -> Any:
    """Keep strings, stringify plain numbers, drop anything else."""
    if isinstance(value, str) or value is None:
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


def _object_or_none(value: Any) -> Any:
    if isinstance(value, (Mapping, BaseModel)):
        return value
    return None


def _count_or_none(value: Any) -> int | None:
    """Whole-number view of a count; fractional values are truncated."""
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = float(value)
        except ValueError:
            return None
    if isinstance(value, (int, float)) and math.isfinite(value):
        return int(value)
    return None


class RawAuthor(BaseModel):
    """Author reference on a raw message."""

    model_config = ConfigDict(extra="allow")

    login: str | None = None

    @field_validator("login", mode="before")
    @classmethod
    def _login_text(cls, value: Any) -> Any:
        return _text_or_none(value)


class RawTag(BaseModel):
    """Tag attached to a raw message."""

    model_config = ConfigDict(extra="allow")

    text: str | None = None

    @field_validator("text", mode="before")
    @classmethod
    def _tag_text(cls, value: Any) -> Any:
        return _text_or_none(value)


class RawBoard(BaseModel):
    """Board the raw message was posted to."""

    model_config = ConfigDict(extra="allow")

    id: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _board_id_text(cls, value: Any) -> Any:
        return _text_or_none(value)


class RawConversation(BaseModel):
    """Conversation metadata; style is "qanda", "blog", "article", ..."""

    model_config = ConfigDict(extra="allow")

    style: str | None = None

    @field_validator("style", mode="before")
    @classmethod
    def _style_text(cls, value: Any) -> Any:
        return _text_or_none(value)


class RawPost(BaseModel):
    """Message record as returned by the community search API.

    Every field is optional: the API omits whatever the query did not
    select or the message does not carry. Present fields of an unexpected
    type are coerced where a sensible reading exists and dropped otherwise,
    so parsing a record never fails on its field types.
    """

    model_config = ConfigDict(extra="allow")

    id: str | int | None = None
    subject: str | None = None
    author: RawAuthor | None = None
    postTime: str | None = None
    tags: list[RawTag] | None = None
    viewCount: int | None = None
    replyCount: int | None = None
    acceptedSolutionId: Any = None
    body: str | None = None
    board: RawBoard | None = None
    conversation: RawConversation | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _id_must_be_scalar(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        return _text_or_none(value)

    @field_validator("tags", mode="before")
    @classmethod
    def _tags_must_be_list(cls, value: Any) -> Any:
        # Collection objects ({"items": [...]}) are treated as absent
        if not isinstance(value, list):
            return None
        return [tag if isinstance(tag, (Mapping, BaseModel)) else {} for tag in value]

    @field_validator("subject", "postTime", "body", mode="before")
    @classmethod
    def _text_fields(cls, value: Any) -> Any:
        return _text_or_none(value)

    @field_validator("author", "board", "conversation", mode="before")
    @classmethod
    def _nested_objects(cls, value: Any) -> Any:
        return _object_or_none(value)

    @field_validator("viewCount", "replyCount", mode="before")
    @classmethod
    def _counts(cls, value: Any) -> int | None:
        return _count_or_none(value)


class NormalizedPost(BaseModel):
    """Consumer-facing post built from a RawPost."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    author: str
    postDate: str
    tags: str
    viewCount: int = 0
    replyCount: int = 0
    hasAcceptedSolution: bool = False
    contentType: str = "unknown"
    isBlog: bool = False
    isQandA: bool = False
    url: str
    communityLink: str
    excerpt: str = ""
    raw: dict[str, Any] = Field(default_factory=dict)
