"""Tavily search client.

Tavily returns cleaned page content rather than a SERP snippet; the content is
used as the snippet and trimmed downstream by the context assembler.
"""

import asyncio

from utils.logger import get_logger

from .contracts import WebSearchClient, WebSearchError, WebSearchResult

logger = get_logger(__name__)


class TavilySearchClient(WebSearchClient):
    """Web search through the Tavily API."""

    provider_name = "tavily"

    def __init__(self, api_key: str, max_results: int = 10, search_depth: str = "basic", client=None):
        """
        Args:
            api_key: Tavily API key
            max_results: Maximum number of results per query
            search_depth: "basic" (faster) or "advanced" (deeper)
            client: Pre-built TavilyClient, mainly for tests
        """
        if not api_key:
            raise ValueError("TAVILY_API_KEY not found in environment")

        self.max_results = max_results
        self.search_depth = search_depth

        if client is None:
            from tavily import TavilyClient

            client = TavilyClient(api_key=api_key)
        self.client = client
        logger.info("Tavily client initialized")

    def _search_sync(self, query: str) -> list[WebSearchResult]:
        response = self.client.search(
            query=query,
            max_results=self.max_results,
            search_depth=self.search_depth,
            include_raw_content=False,
            include_answer=False,
        )

        results = []
        for item in response.get("results", []):
            results.append(
                WebSearchResult(
                    title=item.get("title") or "Untitled",
                    link=item.get("url", ""),
                    snippet=item.get("content", ""),
                )
            )
            logger.debug(f"[{len(results)}] {results[-1].title[:50]} (score: {item.get('score', 0.0):.2f})")
        return results

    async def search(self, query: str) -> list[WebSearchResult]:
        logger.info(f"Tavily search: '{query[:80]}' (max_results={self.max_results}, depth={self.search_depth})")
        try:
            # TavilyClient is synchronous
            results = await asyncio.to_thread(self._search_sync, query)
        except Exception as e:
            logger.error(f"Tavily search failed: {e}", exc_info=True)
            raise WebSearchError(f"Tavily search failed: {e}") from e

        logger.info(f"Tavily returned {len(results)} result(s)")
        return results
