"""Query builder for the community search language.

Every row query has the form::

    SELECT * FROM messages WHERE <predicates> ORDER BY <field> <dir> LIMIT <n> OFFSET <m>

Predicates are joined with ``AND`` in a fixed order: depth, conversation
style, free text, tags, author. User-supplied literals are always passed
through :func:`escape_literal` before being quoted.
"""

from enum import Enum
from typing import Literal, Sequence

SortOrder = Literal["asc", "desc"]

DEFAULT_LIMIT = 25
MAX_LIMIT = 100
DEFAULT_TAGS_LIMIT = 20

# Top-by-views over-fetches recent posts and re-sorts them client-side
TOP_VIEWS_FETCH_FACTOR = 3
TOP_VIEWS_FETCH_CAP = 100

TOP_LEVEL = "depth = 0"


class ContentStyle(str, Enum):
    """Conversation styles the tools can filter on."""

    QANDA = "qanda"
    BLOG = "blog"


def escape_literal(value: str) -> str:
    """Double every single quote so the value cannot close its literal."""
    return value.replace("'", "''")


def quote_literal(value: str) -> str:
    """Escape and wrap a value in single quotes."""
    return f"'{escape_literal(value)}'"


def style_predicate(style: ContentStyle | str) -> str:
    return f"conversation.style = {quote_literal(ContentStyle(style).value)}"


def text_predicate(search_terms: str) -> str:
    terms = quote_literal(search_terms)
    return f"(subject MATCHES {terms} OR body MATCHES {terms})"


def tag_predicate(tags: str | Sequence[str]) -> str:
    """Exact match for a single tag, ``IN (...)`` membership for a list."""
    if isinstance(tags, str):
        return f"tags.text = {quote_literal(tags)}"
    tags_list = ", ".join(quote_literal(tag) for tag in tags)
    return f"tags.text IN ({tags_list})"


def author_predicate(username: str) -> str:
    return f"author.login = {quote_literal(username)}"


def parent_predicate(post_id: str) -> str:
    return f"depth > 0 AND parent.id = {quote_literal(post_id)}"


def normalize_sort_order(sort_order: str) -> str:
    """Validate a caller-supplied sort direction.

    Raises:
        ValueError: If the direction is not ``asc`` or ``desc``
    """
    direction = sort_order.lower()
    if direction not in ("asc", "desc"):
        raise ValueError(f"Invalid sort order: {sort_order!r} (expected 'asc' or 'desc')")
    return direction


def build_messages_query(
    predicates: Sequence[str],
    sort_direction: str,
    limit: int,
    offset: int,
    sort_field: str = "post_time",
) -> str:
    """Assemble a row query from already rendered predicates."""
    query = "SELECT * FROM messages"
    if predicates:
        query += " WHERE " + " AND ".join(predicates)
    query += f" ORDER BY {sort_field} {sort_direction}"
    query += f" LIMIT {int(limit)} OFFSET {int(offset)}"
    return query


def build_search_query(
    search_terms: str,
    limit: int = DEFAULT_LIMIT,
    offset: int = 0,
    sort_order: SortOrder = "desc",
    style: ContentStyle | str | None = None,
    tags: Sequence[str] | None = None,
) -> str:
    """Build a free-text search over top-level posts.

    The text predicate is always present, even for empty terms. An empty tag
    list drops the tag predicate.
    """
    predicates = [TOP_LEVEL]
    if style is not None:
        predicates.append(style_predicate(style))
    predicates.append(text_predicate(search_terms))
    if tags:
        predicates.append(tag_predicate(list(tags)))
    return build_messages_query(predicates, normalize_sort_order(sort_order), limit, offset)


def build_recent_query(
    limit: int = DEFAULT_LIMIT,
    offset: int = 0,
    style: ContentStyle | str | None = None,
    tag: str | None = None,
) -> str:
    """Build a newest-first listing of top-level posts."""
    predicates = [TOP_LEVEL]
    if style is not None:
        predicates.append(style_predicate(style))
    if tag:
        predicates.append(tag_predicate(tag))
    return build_messages_query(predicates, "DESC", limit, offset)


def top_views_fetch_limit(limit: int) -> int:
    """Number of candidates fetched for a top-by-views page."""
    return min(limit * TOP_VIEWS_FETCH_FACTOR, TOP_VIEWS_FETCH_CAP)


def build_top_by_views_query(tag: str, limit: int = DEFAULT_LIMIT, offset: int = 0) -> str:
    """Build the candidate query for top posts by views within a tag.

    The result must be re-sorted by view count and truncated to ``limit``
    by the caller.
    """
    predicates = [TOP_LEVEL, tag_predicate(tag)]
    return build_messages_query(predicates, "DESC", top_views_fetch_limit(limit), offset)


def build_user_content_query(
    username: str,
    include_answers: bool = False,
    limit: int = DEFAULT_LIMIT,
    offset: int = 0,
) -> str:
    """Build a listing of a user's posts, and their answers when requested."""
    predicates = [] if include_answers else [TOP_LEVEL]
    predicates.append(author_predicate(username))
    return build_messages_query(predicates, "DESC", limit, offset)


def build_answers_query(post_id: str, limit: int = DEFAULT_LIMIT, offset: int = 0) -> str:
    """Build a chronological listing of the replies under a post."""
    return build_messages_query([parent_predicate(post_id)], "ASC", limit, offset)


def build_popular_tags_query(limit: int = DEFAULT_TAGS_LIMIT) -> str:
    """Build the tag aggregation query. It takes no offset."""
    query = "SELECT tags.text, COUNT(*) AS tag_count FROM messages"
    query += f" WHERE {TOP_LEVEL} AND tags.text IS NOT NULL"
    query += " GROUP BY tags.text ORDER BY tag_count DESC"
    query += f" LIMIT {int(limit)}"
    return query
