"""Pytest fixtures for the Atlassian Community tools tests."""

import copy
from typing import Any

import pytest


class RecordingExecutor:
    """Executor that records every call and returns a canned response."""

    def __init__(self, response: Any = None, error: Exception | None = None):
        self.response = response
        self.error = error
        self.calls: list[tuple[str, str]] = []

    async def execute(self, query: str, operation: str) -> Any:
        self.calls.append((query, operation))
        if self.error is not None:
            raise self.error
        return copy.deepcopy(self.response)

    @property
    def last_query(self) -> str:
        return self.calls[-1][0]


class RecordingObserver:
    """Observer that keeps every notification in order."""

    def __init__(self):
        self.events: list[tuple[str, str, Any]] = []

    def on_request(self, operation, params):
        self.events.append(("request", operation, params))

    def on_success(self, operation, result):
        self.events.append(("success", operation, result))

    def on_failure(self, operation, error):
        self.events.append(("failure", operation, error))


@pytest.fixture
def sample_post_data():
    """Sample raw message as returned by the search API."""
    return {
        "id": "post-123",
        "subject": "Test Post",
        "author": {"login": "test-user"},
        "postTime": "2025-04-01T12:00:00Z",
        "tags": [{"text": "test-tag"}, {"text": "jira"}],
        "viewCount": 100,
        "replyCount": 5,
        "acceptedSolutionId": "answer-456",
        "body": "<p>This is a test post body</p>",
        "board": {"id": "jira-software"},
    }


@pytest.fixture
def mock_api_response(sample_post_data):
    """Search API envelope holding one post."""
    return {
        "data": {
            "items": [sample_post_data],
            "size": 25,
            "startIndex": 0,
            "totalSize": 1,
        }
    }


@pytest.fixture
def executor(mock_api_response):
    return RecordingExecutor(mock_api_response)


@pytest.fixture
def observer():
    return RecordingObserver()


@pytest.fixture
def service(executor, observer):
    from atlassian_community.search.service import CommunitySearchService

    return CommunitySearchService(executor, observer=observer)
