"""Serper.dev (Google results) search client."""

from typing import Any

import httpx

from utils.logger import get_logger

from .contracts import WebSearchClient, WebSearchError, WebSearchResult

logger = get_logger(__name__)

SERPER_SEARCH_URL = "https://google.serper.dev/search"
DEFAULT_TIMEOUT_S = 15.0


def _normalize_organic(payload: Any) -> list[WebSearchResult]:
    if not isinstance(payload, dict):
        return []
    results: list[WebSearchResult] = []
    for item in payload.get("organic") or []:
        if not isinstance(item, dict):
            continue
        link = str(item.get("link") or "").strip()
        title = str(item.get("title") or "").strip() or link
        if not title and not link:
            continue
        results.append(WebSearchResult(title=title, link=link, snippet=str(item.get("snippet") or "")))
    return results


class SerperSearchClient(WebSearchClient):
    """Posts ``{"q": query}`` to Serper and maps the ``organic`` results."""

    provider_name = "serper"

    def __init__(
        self,
        api_key: str,
        endpoint: str = SERPER_SEARCH_URL,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Args:
            api_key: Serper API key
            endpoint: Search endpoint URL
            timeout_s: HTTP timeout
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        if not api_key:
            raise ValueError("SERPER_API_KEY not found in environment")
        self.endpoint = endpoint
        self._http = httpx.AsyncClient(
            timeout=timeout_s,
            transport=transport,
            headers={"X-API-KEY": api_key, "Content-Type": "application/json"},
        )

    async def search(self, query: str) -> list[WebSearchResult]:
        logger.info(f"Serper search: '{query[:80]}'")
        try:
            response = await self._http.post(self.endpoint, json={"q": query})
            response.raise_for_status()
            payload = response.json() if response.content else {}
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(
                "Serper search failed",
                extra={"extra_fields": {"error": str(e), "error_type": type(e).__name__}},
            )
            raise WebSearchError(f"Serper search failed: {e}") from e

        results = _normalize_organic(payload)
        logger.info(f"Serper returned {len(results)} result(s)")
        return results

    async def aclose(self) -> None:
        await self._http.aclose()
