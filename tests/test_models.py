"""Tests for Pydantic models."""

import pytest
from pydantic import ValidationError


def test_raw_post_creation(sample_post_data):
    """Test creating a RawPost from an API record."""
    from atlassian_community.models.post import RawPost

    post = RawPost(**sample_post_data)

    assert post.id == "post-123"
    assert post.author.login == "test-user"
    assert [tag.text for tag in post.tags] == ["test-tag", "jira"]
    assert post.board.id == "jira-software"


def test_raw_post_keeps_unknown_fields():
    """Test RawPost accepts fields it does not model."""
    from atlassian_community.models.post import RawPost

    post = RawPost(id="1", kudos={"sum": {"weight": 3}})

    assert post.model_extra == {"kudos": {"sum": {"weight": 3}}}
    assert post.subject is None


def test_raw_post_drops_unusable_types():
    """Test RawPost defaults fields whose type it cannot read."""
    from atlassian_community.models.post import RawPost

    post = RawPost(
        viewCount="lots",
        author="bob",
        board=["jira"],
        conversation="qanda",
        subject={"text": "Hi"},
    )

    assert post.viewCount is None
    assert post.author is None
    assert post.board is None
    assert post.conversation is None
    assert post.subject is None


def test_raw_post_coerces_numeric_values():
    """Test RawPost keeps numbers that have an obvious reading."""
    from atlassian_community.models.post import RawPost

    post = RawPost(
        id=7,
        viewCount=12.5,
        replyCount="3",
        board={"id": 42},
        tags=[{"text": "jira"}, "loose", {"text": 9}],
    )

    assert post.id == 7
    assert post.viewCount == 12
    assert post.replyCount == 3
    assert post.board.id == "42"
    assert [tag.text for tag in post.tags] == ["jira", None, "9"]


def test_normalized_post_is_frozen(sample_post_data):
    from atlassian_community.search.result_formatter import format_post

    post = format_post(sample_post_data)

    with pytest.raises(ValidationError):
        post.title = "changed"


def test_search_envelope_json_serialization(mock_api_response):
    """Test SearchEnvelope JSON serialization."""
    from atlassian_community.search.result_formatter import format_search_results

    json_data = format_search_results(mock_api_response).model_dump(mode="json")

    assert json_data["success"] is True
    assert json_data["pagination"]["showing"] == 1
    assert json_data["items"][0]["communityLink"].startswith("https://community.atlassian.com/t5/")
    assert json_data["items"][0]["raw"]["id"] == "post-123"


def test_failed_envelope_defaults():
    from atlassian_community.models.search_result import SearchEnvelope

    envelope = SearchEnvelope(success=False, message="nope", tip="tip")

    assert envelope.items == []
    assert envelope.pagination.model_dump() == {
        "total": 0,
        "showing": 0,
        "startIndex": 0,
        "currentPage": 0,
        "totalPages": 0,
    }
    assert envelope.raw is None
