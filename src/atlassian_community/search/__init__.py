"""Query building, execution and result formatting for community search."""

from .executor import HttpRequestExecutor, RequestExecutor, TransportError
from .observer import LoggingObserver, NullObserver, RequestObserver
from .query_builder import ContentStyle, escape_literal
from .result_formatter import format_post, format_search_results, format_tags_results
from .service import CommunitySearchService

__all__ = [
    "HttpRequestExecutor",
    "RequestExecutor",
    "TransportError",
    "LoggingObserver",
    "NullObserver",
    "RequestObserver",
    "ContentStyle",
    "escape_literal",
    "format_post",
    "format_search_results",
    "format_tags_results",
    "CommunitySearchService",
]
