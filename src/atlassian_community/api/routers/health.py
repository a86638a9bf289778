"""Health check endpoint."""

from datetime import datetime, timezone

from fastapi import APIRouter
from pydantic import BaseModel

router = APIRouter()

ENDPOINTS = ["/mcp", "/health"]


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    message: str
    timestamp: datetime
    endpoints: list[str]
    version: str


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Check API health status."""
    from ... import __version__

    return HealthResponse(
        status="ok",
        message="Atlassian Community MCP Server is running",
        timestamp=datetime.now(timezone.utc),
        endpoints=ENDPOINTS,
        version=__version__,
    )
