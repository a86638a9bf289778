"""Request executors that run a finished query against the search API."""

from typing import Any, Protocol
from urllib.parse import quote

import httpx
import structlog

logger = structlog.get_logger()

# Characters encodeURIComponent leaves untouched
_URI_COMPONENT_SAFE = "-_.!~*'()"


class TransportError(Exception):
    """Raised when the search API cannot be reached or answers with an error."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class RequestExecutor(Protocol):
    """Anything that can run a query string and return the parsed JSON body."""

    async def execute(self, query: str, operation: str) -> Any:
        ...


class HttpRequestExecutor:
    """Runs queries with a GET to ``{base_url}?q=<encoded query>``."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ):
        """Initialize the executor.

        Args:
            base_url: Search endpoint without a query string
            timeout: Request timeout in seconds for clients created per call
            client: Shared client to use instead of one client per call
        """
        self.base_url = base_url
        self.timeout = timeout
        self._client = client

    def build_url(self, query: str) -> str:
        return f"{self.base_url}?q={quote(query, safe=_URI_COMPONENT_SAFE)}"

    async def execute(self, query: str, operation: str) -> Any:
        """Run a query.

        Args:
            query: Finished query string
            operation: Name of the calling operation, used for logging

        Returns:
            Parsed JSON body

        Raises:
            TransportError: On network failure, non-2xx status or invalid JSON
        """
        url = self.build_url(query)
        logger.debug("api_request", operation=operation, url=url, query=query)

        try:
            if self._client is not None:
                response = await self._client.get(url)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.get(url)
        except httpx.HTTPError as e:
            logger.error("api_request_failed", operation=operation, error=str(e))
            raise TransportError(f"API request failed: {e}") from e

        if not response.is_success:
            logger.error(
                "api_bad_status",
                operation=operation,
                status_code=response.status_code,
            )
            raise TransportError(
                f"API responded with status: {response.status_code}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise TransportError(f"API returned invalid JSON: {e}") from e
