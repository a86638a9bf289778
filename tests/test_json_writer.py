"""Tests for JSON result persistence."""

import asyncio
import json
from pathlib import Path

from atlassian_community.search.result_formatter import format_search_results
from atlassian_community.storage.json_writer import JsonWriter


def test_write_envelope_drops_raw_payloads(tmp_path, mock_api_response):
    writer = JsonWriter(str(tmp_path / "out"))
    envelope = format_search_results(mock_api_response)

    filepath = asyncio.run(writer.write_envelope(envelope, "bob's bug"))

    path = Path(filepath)
    assert path.parent == tmp_path / "out"
    assert path.name.startswith("bob_s_bug_")
    data = json.loads(path.read_text(encoding="utf-8"))
    assert "raw" not in data
    assert "raw" not in data["items"][0]
    assert data["items"][0]["id"] == "post-123"


def test_write_envelope_can_keep_raw(tmp_path, mock_api_response):
    writer = JsonWriter(str(tmp_path))
    envelope = format_search_results(mock_api_response)

    filepath = asyncio.run(writer.write_envelope(envelope, "jira", include_raw=True))

    data = json.loads(Path(filepath).read_text(encoding="utf-8"))
    assert data["raw"] == mock_api_response
