"""Tests for the CLI commands."""

import pytest
from typer.testing import CliRunner

from conftest import RecordingExecutor

from atlassian_community.cli import commands
from atlassian_community.search.executor import TransportError
from atlassian_community.search.service import CommunitySearchService

runner = CliRunner()


@pytest.fixture
def patched_service(monkeypatch, service):
    monkeypatch.setattr(commands, "build_service", lambda config: service)
    return service


def test_version():
    result = runner.invoke(commands.app, ["version"])

    assert result.exit_code == 0
    assert "Atlassian Community MCP v" in result.output


def test_search_command_uses_style(patched_service, executor):
    result = runner.invoke(commands.app, ["search", "jira", "--style", "qanda", "--limit", "5"])

    assert result.exit_code == 0, result.output
    assert executor.calls[-1][1] == "searchQandAPosts"
    assert "LIMIT 5 OFFSET 0" in executor.last_query


def test_search_command_with_tags_saves_output(patched_service, executor, tmp_path):
    result = runner.invoke(
        commands.app,
        ["search", "jira", "--tag", "cloud", "--tag", "dc", "--output", str(tmp_path)],
    )

    assert result.exit_code == 0, result.output
    assert "tags.text IN ('cloud', 'dc')" in executor.last_query
    assert len(list(tmp_path.glob("*.json"))) == 1


def test_recent_command(patched_service, executor):
    result = runner.invoke(commands.app, ["recent", "--tag", "jira"])

    assert result.exit_code == 0, result.output
    assert executor.calls[-1][1] == "getMostRecentPostsByTag"


def test_transport_error_exits_non_zero(monkeypatch):
    failing = CommunitySearchService(RecordingExecutor(error=TransportError("API responded with status: 502")))
    monkeypatch.setattr(commands, "build_service", lambda config: failing)

    result = runner.invoke(commands.app, ["recent"])

    assert result.exit_code == 1
    assert "502" in result.output


def test_limit_defaults_to_configured_value(monkeypatch, executor):
    monkeypatch.setattr(
        commands,
        "build_service",
        lambda config: CommunitySearchService(executor, default_limit=7),
    )

    result = runner.invoke(commands.app, ["recent"])

    assert result.exit_code == 0, result.output
    assert executor.last_query.endswith("LIMIT 7 OFFSET 0")


def test_save_writes_to_configured_output_dir(patched_service, monkeypatch, tmp_path):
    monkeypatch.setattr(commands.settings, "output_dir", str(tmp_path))

    result = runner.invoke(commands.app, ["search", "jira", "--save"])

    assert result.exit_code == 0, result.output
    assert len(list(tmp_path.glob("*.json"))) == 1


def test_results_are_not_saved_without_save_or_output(patched_service, monkeypatch, tmp_path):
    monkeypatch.setattr(commands.settings, "output_dir", str(tmp_path))

    result = runner.invoke(commands.app, ["search", "jira"])

    assert result.exit_code == 0, result.output
    assert list(tmp_path.glob("*.json")) == []
