"""FastAPI application factory."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI
from mcp.server.fastmcp import FastMCP

from .. import __version__
from ..config import Settings, settings
from ..tools.server import create_server
from ..utils.logging import setup_logging
from .routers import health

logger = structlog.get_logger()


def create_app(config: Settings = settings, server: FastMCP | None = None) -> FastAPI:
    """Create and configure FastAPI application.

    The MCP streamable HTTP transport is mounted at ``/mcp`` next to the
    health check.

    Args:
        config: Application settings
        server: MCP server to mount, created from ``config`` when omitted

    Returns:
        Configured FastAPI application
    """
    server = server or create_server(config=config)
    mcp_app = server.streamable_http_app()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Run the MCP session manager for the lifetime of the app."""
        setup_logging(config.log_level, json_output=config.log_json)
        logger.info("api_starting", host=config.api_host, port=config.api_port)

        async with server.session_manager.run():
            yield

        logger.info("api_stopped")

    app = FastAPI(
        title="Atlassian Community MCP Server",
        description="MCP tools for searching the Atlassian Community",
        version=__version__,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
    )

    app.include_router(health.router, tags=["Health"])
    # Routes registered above win over the mount
    app.mount("/", mcp_app)

    return app
