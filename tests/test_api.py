"""Tests for the HTTP application."""

from fastapi.testclient import TestClient

from atlassian_community import __version__
from atlassian_community.api.app import create_app
from atlassian_community.config import Settings
from atlassian_community.tools.server import create_server


def make_client(service):
    config = Settings()
    return TestClient(create_app(config, create_server(service, config)))


def test_health_check(service):
    response = make_client(service).get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["version"] == __version__
    assert body["endpoints"] == ["/mcp", "/health"]


def test_unknown_path_is_not_found(service):
    response = make_client(service).get("/nope")

    assert response.status_code == 404
