"""Data contracts for web search."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Literal


class WebSearchError(Exception):
    """A web search request could not be completed."""


@dataclass(frozen=True)
class WebSearchResult:
    """One organic result from a search provider."""

    title: str
    link: str
    snippet: str = ""
    origin: Literal["web"] = "web"

    def to_dict(self) -> dict[str, Any]:
        return {"origin": self.origin, "title": self.title, "snippet": self.snippet, "link": self.link}


@dataclass(frozen=True)
class WebSearchResponse:
    query: str
    results: list[WebSearchResult] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"query": self.query, "results": [r.to_dict() for r in self.results]}


class WebSearchClient(ABC):
    """A web search provider."""

    provider_name: str = "unknown"

    @abstractmethod
    async def search(self, query: str) -> list[WebSearchResult]:
        """
        Search the web.

        Args:
            query: Search query

        Returns:
            Organic results in provider order
        """

    async def aclose(self) -> None:
        return None
