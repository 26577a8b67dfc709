"""Web search tools."""

from .contracts import WebSearchClient, WebSearchError, WebSearchResponse, WebSearchResult
from .factory import create_web_search_client_from_env

__all__ = ["WebSearchClient", "WebSearchError", "WebSearchResponse", "WebSearchResult", "create_web_search_client_from_env"]
