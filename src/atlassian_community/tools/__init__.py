"""MCP tool registration for the community search operations."""

from .server import CommunityTools, build_service, create_server

__all__ = ["CommunityTools", "build_service", "create_server"]
