"""Normalizes raw community search responses into stable envelopes."""

import math
import re
from collections.abc import Mapping
from datetime import datetime
from typing import Any

import structlog

from ..models.post import NormalizedPost, RawPost
from ..models.search_result import Pagination, SearchEnvelope, TagCount, TagsEnvelope

logger = structlog.get_logger()

COMMUNITY_POST_URL = "https://community.atlassian.com/t5/{board_id}/{slug}/td-p/{post_id}"

# Defaults for fields missing from a raw post
UNKNOWN_ID = "Unknown ID"
NO_TITLE = "No title"
UNKNOWN_AUTHOR = "Unknown author"
UNKNOWN_DATE = "Unknown date"
INVALID_DATE = "Invalid Date"
NO_TAGS = "No tags"
UNKNOWN_CONTENT_TYPE = "unknown"
DEFAULT_BOARD_ID = "forums"
DEFAULT_SLUG = "post"
UNKNOWN_TAG = "Unknown"

EXCERPT_LENGTH = 200
EXCERPT_ELLIPSIS = "..."

RESULTS_TIP = (
    "Each result includes a 'communityLink' field with a direct URL to the post "
    "on the Atlassian Community site."
)
EMPTY_RESULTS_TIP = (
    "When results are found, each item includes a 'communityLink' field with a "
    "direct URL to the post."
)
TAGS_TIP = "Use these tags with the searchByTags tool to find relevant posts."
INVALID_TAGS_TIP = "Use the searchByTags tool with valid tags to find relevant posts."
EMPTY_TAGS_TIP = "Try a broader search to find available tags."
TAGS_ERROR_TIP = "Try again with a different query or contact support if the issue persists."

_NON_SLUG = re.compile(r"[^a-z0-9]+")
_HYPHENS = re.compile(r"-+")
_EDGE_HYPHEN = re.compile(r"^-|-$")
_HTML_TAG = re.compile(r"<[^>]*>")
_COMPACT_OFFSET = re.compile(r"([+-]\d{2})(\d{2})$")
_FRACTION = re.compile(r"\.(\d+)")


def slugify(subject: str | None) -> str:
    """Build the URL slug for a post subject."""
    if not subject:
        return DEFAULT_SLUG
    slug = _NON_SLUG.sub("-", subject.lower())
    slug = _HYPHENS.sub("-", slug)
    return _EDGE_HYPHEN.sub("", slug)


def build_post_url(post_id: str, subject: str | None, board_id: str | None) -> str:
    return COMMUNITY_POST_URL.format(
        board_id=board_id or DEFAULT_BOARD_ID,
        slug=slugify(subject),
        post_id=post_id,
    )


def make_excerpt(body: str | None) -> str:
    """Strip markup from an HTML body and cut it to the excerpt length."""
    if not body:
        return ""
    text = _HTML_TAG.sub("", body)
    if len(text) > EXCERPT_LENGTH:
        return text[:EXCERPT_LENGTH] + EXCERPT_ELLIPSIS
    return text


def _normalize_iso(value: str) -> str:
    """Rewrite ISO-8601 variants into the subset ``datetime.fromisoformat`` parses.

    Handles a ``Z`` suffix, offsets without a colon (``+0000``) and fractional
    seconds of any precision.
    """
    value = value.strip()
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    if ":" in value:
        value = _COMPACT_OFFSET.sub(r"\1:\2", value)
    return _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), value, count=1)


def format_timestamp(value: str | None) -> str:
    """Render an ISO-8601 timestamp as a local ``M/D/YYYY, h:mm:ss AM`` string.

    Missing or unparseable values render as ``"Invalid Date"``.
    """
    if not value:
        return INVALID_DATE
    try:
        moment = datetime.fromisoformat(_normalize_iso(value))
    except ValueError:
        return INVALID_DATE
    if moment.tzinfo is not None:
        moment = moment.astimezone()
    hour = moment.hour % 12 or 12
    meridiem = "AM" if moment.hour < 12 else "PM"
    return (
        f"{moment.month}/{moment.day}/{moment.year}, "
        f"{hour}:{moment.minute:02d}:{moment.second:02d} {meridiem}"
    )


def format_post(post: Mapping[str, Any] | RawPost) -> NormalizedPost:
    """Normalize one raw search record.

    Args:
        post: Raw record from ``data.items`` (mapping or parsed RawPost)

    Returns:
        NormalizedPost with every missing or unusable field defaulted
    """
    if isinstance(post, RawPost):
        raw = post.model_dump(exclude_unset=True)
        parsed = post
    else:
        raw = dict(post)
        parsed = RawPost.model_validate(raw)

    post_id = str(parsed.id) if parsed.id else UNKNOWN_ID
    # Fallback applies to the formatted string, which is never empty
    post_date = format_timestamp(parsed.postTime) or UNKNOWN_DATE

    tags = NO_TAGS
    if parsed.tags is not None:
        tags = ", ".join(tag.text or "" for tag in parsed.tags)

    content_type = (parsed.conversation.style if parsed.conversation else None) or UNKNOWN_CONTENT_TYPE
    url = build_post_url(
        post_id,
        parsed.subject,
        parsed.board.id if parsed.board else None,
    )

    return NormalizedPost(
        id=post_id,
        title=parsed.subject or NO_TITLE,
        author=(parsed.author.login if parsed.author else None) or UNKNOWN_AUTHOR,
        postDate=post_date,
        tags=tags,
        viewCount=parsed.viewCount or 0,
        replyCount=parsed.replyCount or 0,
        hasAcceptedSolution=bool(parsed.acceptedSolutionId),
        contentType=content_type,
        isBlog=content_type == "blog",
        isQandA=content_type == "qanda",
        url=url,
        communityLink=url,
        excerpt=make_excerpt(parsed.body),
        raw=raw,
    )


def _extract_items(data: Any) -> tuple[dict[str, Any], list[Any]] | None:
    """Return ``(data.data, data.data.items)`` or None for a malformed payload."""
    if not isinstance(data, Mapping):
        return None
    inner = data.get("data")
    if not isinstance(inner, Mapping) or not isinstance(inner.get("items"), list):
        return None
    return dict(inner), inner["items"]


def build_pagination(total: int, showing: int, start_index: int, size: int) -> Pagination:
    """Compute page numbers, treating a zero page size as a single page."""
    if size > 0:
        current_page = start_index // size + 1
        total_pages = max(1, math.ceil(total / size))
    else:
        current_page = 1
        total_pages = 1
    return Pagination(
        total=total,
        showing=showing,
        startIndex=start_index,
        currentPage=current_page,
        totalPages=total_pages,
    )


def failed_search_envelope(message: str) -> SearchEnvelope:
    return SearchEnvelope(
        success=False,
        message=message,
        items=[],
        pagination=Pagination(),
        tip=EMPTY_RESULTS_TIP,
    )


def format_search_results(data: Any) -> SearchEnvelope:
    """Normalize a raw paginated search response.

    Never raises: malformed payloads and formatting failures both come back
    as ``success=False`` envelopes.
    """
    try:
        extracted = _extract_items(data)
        if extracted is None:
            return failed_search_envelope("No results found or invalid response format.")

        inner, items = extracted
        size = inner.get("size") or len(items)
        start_index = inner.get("startIndex") or 0
        total_size = inner.get("totalSize") or len(items)

        if not items:
            return SearchEnvelope(
                success=True,
                message="No matching results found.",
                items=[],
                pagination=build_pagination(total_size, 0, start_index, size),
                tip=EMPTY_RESULTS_TIP,
            )

        formatted_items = [format_post(item) for item in items]

        return SearchEnvelope(
            success=True,
            message=(
                f"Found {total_size} total results. "
                f"Showing {len(items)} results starting from {start_index}."
            ),
            items=formatted_items,
            pagination=build_pagination(total_size, len(formatted_items), start_index, size),
            tip=RESULTS_TIP,
            raw=data,
        )

    except Exception as e:
        logger.warning("format_search_results_failed", error=str(e))
        return failed_search_envelope(f"Error formatting results: {e}")


def format_tags_results(data: Any) -> TagsEnvelope:
    """Normalize a raw tag aggregation response. Never raises."""
    try:
        extracted = _extract_items(data)
        if extracted is None:
            return TagsEnvelope(
                success=False,
                message="No tag results found or invalid response format.",
                tags=[],
                tip=INVALID_TAGS_TIP,
                raw=data,
            )

        inner, items = extracted
        total_size = inner.get("totalSize") or len(items)

        if not items:
            return TagsEnvelope(
                success=True,
                message="No matching tags found.",
                tags=[],
                tip=EMPTY_TAGS_TIP,
                raw=data,
            )

        tags = [
            TagCount(
                name=item.get("tags.text") or UNKNOWN_TAG,
                count=item.get("tag_count") or 0,
            )
            for item in items
        ]

        return TagsEnvelope(
            success=True,
            message=f"Found {total_size} total tags. Showing {len(items)} most popular tags.",
            tags=tags,
            tip=TAGS_TIP,
            raw=data,
        )

    except Exception as e:
        logger.warning("format_tags_results_failed", error=str(e))
        return TagsEnvelope(
            success=False,
            message=f"Error formatting tag results: {e}",
            tags=[],
            tip=TAGS_ERROR_TIP,
            raw=data,
        )
