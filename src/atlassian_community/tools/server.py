"""MCP tool server exposing the community search operations.

Every tool returns a single JSON text payload. Service errors are turned
into ``{"error": "<message>"}`` instead of protocol-level faults; argument
validation is left to FastMCP, which checks the annotated constraints before
a handler runs.
"""

import json
from typing import Annotated, Any, Awaitable, Callable, Literal

import structlog
from mcp.server.fastmcp import FastMCP
from pydantic import BaseModel, Field

from ..config import Settings, settings
from ..search.executor import HttpRequestExecutor
from ..search.observer import LoggingObserver
from ..search.query_builder import DEFAULT_LIMIT, DEFAULT_TAGS_LIMIT, MAX_LIMIT
from ..search.service import CommunitySearchService

logger = structlog.get_logger()

SERVER_NAME = "Atlassian Community MCP Server"
SERVER_INSTRUCTIONS = (
    "Search and browse the Atlassian Community forums. Every post in a result "
    "carries a 'communityLink' with a direct URL to the post."
)

Limit = Annotated[int, Field(ge=1, le=MAX_LIMIT, description="Maximum number of results to return")]
Offset = Annotated[int, Field(ge=0, description="Number of results to skip (for pagination)")]
SortOrderParam = Annotated[
    Literal["asc", "desc"],
    Field(description="Sorting order by post date"),
]
ContentTypeParam = Annotated[
    Literal["qanda", "blog"] | None,
    Field(description="Restrict to Q&A threads ('qanda') or articles ('blog')"),
]
AnsweredParam = Annotated[
    Literal["answered", "unanswered"] | None,
    Field(description="Keep only posts with replies ('answered') or without ('unanswered')"),
]
AcceptedOnlyParam = Annotated[
    bool,
    Field(description="Keep only posts with an accepted solution"),
]
RequiredText = Annotated[str, Field(min_length=1)]


class CommunityTools:
    """Tool handlers bound to a query service."""

    def __init__(self, service: CommunitySearchService):
        self.service = service

    async def _respond(self, call: Awaitable[BaseModel]) -> str:
        try:
            result = await call
        except Exception as e:
            logger.warning("tool_call_failed", error=str(e), error_type=type(e).__name__)
            return json.dumps({"error": str(e)})
        return result.model_dump_json()

    async def search_community(
        self,
        searchTerms: Annotated[RequiredText, Field(description="Terms to match in post subjects and bodies")],
        contentType: ContentTypeParam = None,
        answered: AnsweredParam = None,
        acceptedOnly: AcceptedOnlyParam = False,
        limit: Limit = DEFAULT_LIMIT,
        offset: Offset = 0,
        sortOrder: SortOrderParam = "desc",
    ) -> str:
        """Search community posts and articles by query terms across all tags."""
        return await self._respond(
            self.service.search_by_query(
                searchTerms,
                limit,
                offset,
                sortOrder,
                style=contentType,
                answered=answered,
                accepted_only=acceptedOnly,
            )
        )

    async def search_by_tags(
        self,
        tags: Annotated[list[str], Field(min_length=1, description="Tags to search within")],
        searchTerms: Annotated[str | None, Field(description="Optional terms to match")] = None,
        answered: AnsweredParam = None,
        acceptedOnly: AcceptedOnlyParam = False,
        limit: Limit = DEFAULT_LIMIT,
        offset: Offset = 0,
        sortOrder: SortOrderParam = "desc",
    ) -> str:
        """Search community posts within one or more tags, optionally by query terms."""
        return await self._respond(
            self.service.search_by_query_and_tags(
                searchTerms or "",
                tags,
                limit,
                offset,
                sortOrder,
                answered=answered,
                accepted_only=acceptedOnly,
            )
        )

    async def get_top_posts_by_views(
        self,
        tag: Annotated[RequiredText, Field(description="Tag to rank posts in")],
        limit: Limit = DEFAULT_LIMIT,
        offset: Offset = 0,
    ) -> str:
        """Get the most viewed recent posts for a tag."""
        return await self._respond(
            self.service.get_top_posts_by_views_for_tag(tag, limit, offset)
        )

    async def get_most_recent_posts(
        self,
        contentType: ContentTypeParam = None,
        limit: Limit = DEFAULT_LIMIT,
        offset: Offset = 0,
    ) -> str:
        """Get the newest posts across all tags."""
        return await self._respond(
            self.service.get_most_recent_posts(limit, offset, style=contentType)
        )

    async def get_most_recent_posts_by_tag(
        self,
        tag: Annotated[RequiredText, Field(description="Tag to list posts from")],
        contentType: ContentTypeParam = None,
        limit: Limit = DEFAULT_LIMIT,
        offset: Offset = 0,
    ) -> str:
        """Get the newest posts carrying a tag."""
        return await self._respond(
            self.service.get_most_recent_posts(limit, offset, style=contentType, tag=tag)
        )

    async def get_user_content(
        self,
        username: Annotated[RequiredText, Field(description="Login name of the author")],
        includeAnswers: Annotated[bool, Field(description="Include the user's answers")] = False,
        limit: Limit = DEFAULT_LIMIT,
        offset: Offset = 0,
    ) -> str:
        """Get posts, and optionally answers, written by a user."""
        return await self._respond(
            self.service.get_content_by_user(username, includeAnswers, limit, offset)
        )

    async def get_post_answers(
        self,
        postId: Annotated[RequiredText, Field(description="Id of the parent post")],
        limit: Limit = DEFAULT_LIMIT,
        offset: Offset = 0,
    ) -> str:
        """Get all replies to a post, oldest first."""
        return await self._respond(
            self.service.get_answers_for_post(postId, limit, offset)
        )

    async def get_popular_tags(
        self,
        limit: Annotated[int, Field(ge=1, le=MAX_LIMIT, description="Maximum number of tags")] = DEFAULT_TAGS_LIMIT,
    ) -> str:
        """Get the most used tags on the community."""
        return await self._respond(self.service.get_popular_tags(limit))

    def registrations(self, expose_popular_tags: bool = False) -> list[tuple[str, Callable[..., Any]]]:
        """Tool names paired with their handlers, in registration order."""
        handlers = [
            ("searchCommunity", self.search_community),
            ("searchByTags", self.search_by_tags),
            ("getTopPostsByViews", self.get_top_posts_by_views),
            ("getMostRecentPosts", self.get_most_recent_posts),
            ("getMostRecentPostsByTag", self.get_most_recent_posts_by_tag),
            ("getUserContent", self.get_user_content),
            ("getPostAnswers", self.get_post_answers),
        ]
        # Upstream answers aggregation queries with 400, so this stays opt-in
        if expose_popular_tags:
            handlers.append(("getPopularTags", self.get_popular_tags))
        return handlers


def build_service(config: Settings = settings) -> CommunitySearchService:
    """Create a query service backed by the HTTP search API."""
    executor = HttpRequestExecutor(
        config.api_base_url,
        timeout=config.request_timeout_seconds,
    )
    return CommunitySearchService(
        executor,
        observer=LoggingObserver(),
        default_limit=config.default_limit,
    )


def create_server(
    service: CommunitySearchService | None = None,
    config: Settings = settings,
) -> FastMCP:
    """Create the FastMCP server with every enabled tool registered.

    Args:
        service: Query service to use, built from ``config`` when omitted
        config: Application settings

    Returns:
        Configured FastMCP server
    """
    tools = CommunityTools(service or build_service(config))
    server = FastMCP(SERVER_NAME, instructions=SERVER_INSTRUCTIONS)

    for name, handler in tools.registrations(config.expose_popular_tags):
        server.add_tool(handler, name=name)

    logger.debug(
        "mcp_server_created",
        tools=[name for name, _ in tools.registrations(config.expose_popular_tags)],
    )
    return server
