"""Tests for the MCP tool adapter."""

import asyncio
import json

from conftest import RecordingExecutor

from atlassian_community.config import Settings
from atlassian_community.search.executor import TransportError
from atlassian_community.search.service import CommunitySearchService
from atlassian_community.tools.server import CommunityTools, create_server

EXPECTED_TOOLS = [
    "searchCommunity",
    "searchByTags",
    "getTopPostsByViews",
    "getMostRecentPosts",
    "getMostRecentPostsByTag",
    "getUserContent",
    "getPostAnswers",
]


def list_tool_names(server):
    return [tool.name for tool in asyncio.run(server.list_tools())]


def test_server_registers_tools(service):
    server = create_server(service, Settings(expose_popular_tags=False))

    assert list_tool_names(server) == EXPECTED_TOOLS


def test_popular_tags_tool_is_opt_in(service):
    server = create_server(service, Settings(expose_popular_tags=True))

    assert list_tool_names(server) == EXPECTED_TOOLS + ["getPopularTags"]


def test_tool_schemas_declare_pagination_bounds(service):
    tools = {tool.name: tool for tool in asyncio.run(create_server(service, Settings()).list_tools())}

    schema = tools["getMostRecentPosts"].inputSchema
    assert schema["properties"]["limit"]["minimum"] == 1
    assert schema["properties"]["limit"]["maximum"] == 100
    assert schema["properties"]["limit"]["default"] == 25
    assert schema["properties"]["offset"]["minimum"] == 0
    assert "required" not in schema or schema["required"] == []

    search_schema = tools["searchCommunity"].inputSchema
    assert search_schema["required"] == ["searchTerms"]
    assert search_schema["properties"]["searchTerms"]["minLength"] == 1
    assert search_schema["properties"]["sortOrder"]["enum"] == ["asc", "desc"]


def test_search_community_returns_json_envelope(service, executor):
    tools = CommunityTools(service)

    payload = json.loads(asyncio.run(tools.search_community("test", contentType="qanda")))

    assert payload["success"] is True
    assert payload["items"][0]["communityLink"].endswith("/td-p/post-123")
    assert executor.calls[-1][1] == "searchQandAPosts"


def test_search_by_tags_without_terms(service, executor):
    tools = CommunityTools(service)

    asyncio.run(tools.search_by_tags(["jira", "confluence"]))

    assert executor.last_query == (
        "SELECT * FROM messages WHERE depth = 0 AND (subject MATCHES '' OR body MATCHES '') "
        "AND tags.text IN ('jira', 'confluence') ORDER BY post_time desc LIMIT 25 OFFSET 0"
    )


def test_listing_tools_forward_arguments(service, executor):
    tools = CommunityTools(service)

    asyncio.run(tools.get_most_recent_posts_by_tag("jira-cloud", contentType="blog", limit=5))
    asyncio.run(tools.get_user_content("test-user", includeAnswers=True))
    asyncio.run(tools.get_post_answers("post-1", limit=50))
    asyncio.run(tools.get_top_posts_by_views("jira", limit=10))

    assert [label for _, label in executor.calls] == [
        "getMostRecentBlogPostsByTag",
        "getContentByUser",
        "getAnswersForPost",
        "getTopPostsByViewsForTag",
    ]


def test_transport_errors_become_error_payloads():
    service = CommunitySearchService(
        RecordingExecutor(error=TransportError("API responded with status: 500"))
    )
    tools = CommunityTools(service)

    payload = json.loads(asyncio.run(tools.get_most_recent_posts()))

    assert payload == {"error": "API responded with status: 500"}


def test_popular_tags_tool_payload():
    service = CommunitySearchService(
        RecordingExecutor({"data": {"items": [{"tags.text": "jira", "tag_count": 4}]}})
    )

    payload = json.loads(asyncio.run(CommunityTools(service).get_popular_tags(5)))

    assert payload["tags"] == [{"name": "jira", "count": 4}]


def test_build_service_uses_configured_default_limit():
    from atlassian_community.tools.server import build_service

    service = build_service(Settings(default_limit=7))

    assert service.default_limit == 7
