"""Observers notified around every query service call."""

import json
from typing import Any, Protocol

import structlog
from pydantic import BaseModel

logger = structlog.get_logger()

PREVIEW_CHARS = 200


class RequestObserver(Protocol):
    """Start/success/failure hooks for query service operations."""

    def on_request(self, operation: str, params: dict[str, Any]) -> None:
        ...

    def on_success(self, operation: str, result: Any) -> None:
        ...

    def on_failure(self, operation: str, error: BaseException) -> None:
        ...


class NullObserver:
    """Observer that ignores every notification."""

    def on_request(self, operation: str, params: dict[str, Any]) -> None:
        pass

    def on_success(self, operation: str, result: Any) -> None:
        pass

    def on_failure(self, operation: str, error: BaseException) -> None:
        pass


class LoggingObserver:
    """Observer that writes structured log events."""

    def __init__(self, preview_chars: int = PREVIEW_CHARS):
        self.preview_chars = preview_chars

    def _preview(self, result: Any) -> str:
        if isinstance(result, BaseModel):
            text = result.model_dump_json(exclude={"raw"})
        elif isinstance(result, str):
            text = result
        else:
            text = json.dumps(result, default=str)
        return text[: self.preview_chars]

    def on_request(self, operation: str, params: dict[str, Any]) -> None:
        logger.info("tool_request", operation=operation, params=params)

    def on_success(self, operation: str, result: Any) -> None:
        logger.info("tool_response", operation=operation, preview=self._preview(result))

    def on_failure(self, operation: str, error: BaseException) -> None:
        logger.error(
            "tool_error",
            operation=operation,
            error=str(error),
            error_type=type(error).__name__,
            exc_info=error,
        )
