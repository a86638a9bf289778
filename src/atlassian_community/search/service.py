"""Query service composing the builder, an executor and the formatter."""

from typing import Any, Callable, Literal, Sequence, TypeVar

from ..models.search_result import SearchEnvelope, TagsEnvelope
from . import query_builder as qb
from .executor import RequestExecutor
from .observer import NullObserver, RequestObserver
from .query_builder import ContentStyle, SortOrder
from .result_formatter import format_search_results, format_tags_results

AnsweredFilter = Literal["answered", "unanswered"]

EnvelopeT = TypeVar("EnvelopeT", SearchEnvelope, TagsEnvelope)

_STYLE_LABELS = {None: "", ContentStyle.QANDA: "QandA", ContentStyle.BLOG: "Blog"}


def _style(style: ContentStyle | str | None) -> ContentStyle | None:
    return ContentStyle(style) if style is not None else None


def filter_items(
    envelope: SearchEnvelope,
    answered: AnsweredFilter | None = None,
    accepted_only: bool = False,
) -> SearchEnvelope:
    """Keep posts matching the answered/accepted filters.

    Filtering happens on the fetched page only; ``pagination.total`` still
    reflects the upstream count.
    """
    if not envelope.success or (answered is None and not accepted_only):
        return envelope

    items = envelope.items
    if answered == "answered":
        items = [item for item in items if item.replyCount > 0]
    elif answered == "unanswered":
        items = [item for item in items if item.replyCount == 0]
    if accepted_only:
        items = [item for item in items if item.hasAcceptedSolution]

    return envelope.model_copy(
        update={
            "items": items,
            "message": f"{envelope.message} {len(items)} results remain after filtering.",
            "pagination": envelope.pagination.model_copy(update={"showing": len(items)}),
        }
    )


def rank_by_views(envelope: SearchEnvelope, limit: int) -> SearchEnvelope:
    """Sort a fetched page by descending view count and keep the top ``limit``."""
    items = sorted(envelope.items, key=lambda item: item.viewCount, reverse=True)[:limit]
    return envelope.model_copy(
        update={
            "items": items,
            "pagination": envelope.pagination.model_copy(update={"showing": len(items)}),
        }
    )


class CommunitySearchService:
    """Runs the community retrieval operations.

    Each operation builds a query, executes it, formats the response and
    reports start/success/failure to the observer. Failures are re-raised.
    """

    def __init__(
        self,
        executor: RequestExecutor,
        observer: RequestObserver | None = None,
        default_limit: int = qb.DEFAULT_LIMIT,
    ):
        """Initialize the service.

        Args:
            executor: Runs finished queries against the search API
            observer: Notified around every operation, no-op when omitted
            default_limit: Page size used when an operation is called without a limit
        """
        self.executor = executor
        self.observer = observer or NullObserver()
        self.default_limit = default_limit

    def _limit(self, limit: int | None) -> int:
        return self.default_limit if limit is None else limit

    async def _run(
        self,
        operation: str,
        params: dict[str, Any],
        build: Callable[[], str],
        format_response: Callable[[Any], EnvelopeT],
        post_process: Callable[[EnvelopeT], EnvelopeT] | None = None,
    ) -> EnvelopeT:
        self.observer.on_request(operation, params)
        try:
            query = build()
            data = await self.executor.execute(query, operation)
            result = format_response(data)
            if post_process is not None:
                result = post_process(result)
        except Exception as e:
            self.observer.on_failure(operation, e)
            raise
        self.observer.on_success(operation, result)
        return result

    async def search_by_query(
        self,
        search_terms: str,
        limit: int | None = None,
        offset: int = 0,
        sort_order: SortOrder = "desc",
        style: ContentStyle | str | None = None,
        answered: AnsweredFilter | None = None,
        accepted_only: bool = False,
    ) -> SearchEnvelope:
        """Search top-level posts by terms, optionally restricted to a style."""
        limit = self._limit(limit)
        style = _style(style)
        operation = {
            None: "searchByQuery",
            ContentStyle.QANDA: "searchQandAPosts",
            ContentStyle.BLOG: "searchBlogPosts",
        }[style]
        params = {
            "searchTerms": search_terms,
            "limit": limit,
            "offset": offset,
            "sortOrder": sort_order,
        }
        if answered is not None or accepted_only:
            params.update(answered=answered, acceptedOnly=accepted_only)

        return await self._run(
            operation,
            params,
            lambda: qb.build_search_query(search_terms, limit, offset, sort_order, style=style),
            format_search_results,
            lambda envelope: filter_items(envelope, answered, accepted_only),
        )

    async def search_by_query_and_tags(
        self,
        search_terms: str,
        tags: Sequence[str],
        limit: int | None = None,
        offset: int = 0,
        sort_order: SortOrder = "desc",
        answered: AnsweredFilter | None = None,
        accepted_only: bool = False,
    ) -> SearchEnvelope:
        """Search top-level posts by terms within any of the given tags."""
        limit = self._limit(limit)
        tags = list(tags)
        params = {
            "searchTerms": search_terms,
            "tags": tags,
            "limit": limit,
            "offset": offset,
            "sortOrder": sort_order,
        }
        if answered is not None or accepted_only:
            params.update(answered=answered, acceptedOnly=accepted_only)

        return await self._run(
            "searchByQueryAndTag",
            params,
            lambda: qb.build_search_query(search_terms, limit, offset, sort_order, tags=tags),
            format_search_results,
            lambda envelope: filter_items(envelope, answered, accepted_only),
        )

    async def get_most_recent_posts(
        self,
        limit: int | None = None,
        offset: int = 0,
        style: ContentStyle | str | None = None,
        tag: str | None = None,
    ) -> SearchEnvelope:
        """List the newest top-level posts, optionally by style and tag."""
        limit = self._limit(limit)
        style = _style(style)
        operation = f"getMostRecent{_STYLE_LABELS[style]}Posts" + ("ByTag" if tag else "")
        params: dict[str, Any] = {"limit": limit, "offset": offset}
        if tag:
            params = {"tag": tag, **params}

        return await self._run(
            operation,
            params,
            lambda: qb.build_recent_query(limit, offset, style=style, tag=tag),
            format_search_results,
        )

    async def get_top_posts_by_views_for_tag(
        self,
        tag: str,
        limit: int | None = None,
        offset: int = 0,
    ) -> SearchEnvelope:
        """Top posts by views within a tag.

        Candidates are the most recent ``min(limit * 3, 100)`` posts; they are
        ranked by view count here, not upstream.
        """
        limit = self._limit(limit)
        return await self._run(
            "getTopPostsByViewsForTag",
            {"tag": tag, "limit": limit, "offset": offset},
            lambda: qb.build_top_by_views_query(tag, limit, offset),
            format_search_results,
            lambda envelope: rank_by_views(envelope, limit),
        )

    async def get_content_by_user(
        self,
        username: str,
        include_answers: bool = False,
        limit: int | None = None,
        offset: int = 0,
    ) -> SearchEnvelope:
        """List a user's posts, and their answers when ``include_answers`` is set."""
        limit = self._limit(limit)
        return await self._run(
            "getContentByUser",
            {
                "username": username,
                "includeAnswers": include_answers,
                "limit": limit,
                "offset": offset,
            },
            lambda: qb.build_user_content_query(username, include_answers, limit, offset),
            format_search_results,
        )

    async def get_answers_for_post(
        self,
        post_id: str,
        limit: int | None = None,
        offset: int = 0,
    ) -> SearchEnvelope:
        """List the replies to a post, oldest first."""
        limit = self._limit(limit)
        return await self._run(
            "getAnswersForPost",
            {"postId": post_id, "limit": limit, "offset": offset},
            lambda: qb.build_answers_query(post_id, limit, offset),
            format_search_results,
        )

    async def get_popular_tags(self, limit: int = qb.DEFAULT_TAGS_LIMIT) -> TagsEnvelope:
        """Aggregate top-level posts by tag, most used first."""
        return await self._run(
            "getPopularTags",
            {"limit": limit},
            lambda: qb.build_popular_tags_query(limit),
            format_tags_results,
        )
