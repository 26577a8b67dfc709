"""Exact-substring title query, fanned out across all enabled sources."""

import asyncio

from api.base_source_client import KnowledgeSourceClient
from models.knowledge import SearchResult, SourceDescriptor
from retrieval.errors import RetrievalError, SourceQueryError
from retrieval.normalizer import normalize_pages
from utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_RESULT_LIMIT = 5


class PrimaryQueryExecutor:
    """
    Issues one "title contains" query per source, concurrently.

    A failing source fails the whole search. A source that misses its deadline
    contributes no hits instead.
    """

    def __init__(
        self,
        client: KnowledgeSourceClient,
        result_limit: int = DEFAULT_RESULT_LIMIT,
        timeout_s: float | None = None,
    ):
        """
        Args:
            client: Knowledge-source client shared by all queries
            result_limit: Maximum hits requested from each source
            timeout_s: Per-source deadline in seconds (None disables it)
        """
        self.client = client
        self.result_limit = result_limit
        self.timeout_s = timeout_s

    async def _query_source(self, query: str, source: SourceDescriptor, index: int, total: int) -> list[SearchResult]:
        logger.debug(f"[{index}/{total}] Querying {source.display_name} ({source.source_id[:8]}...)")
        try:
            pages = await asyncio.wait_for(
                self.client.query_by_title_substring(source.source_id, query, self.result_limit),
                timeout=self.timeout_s,
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"Title query timed out for {source.display_name}",
                extra={"extra_fields": {"source_id": source.source_id, "timeout_s": self.timeout_s}},
            )
            return []
        except RetrievalError:
            raise
        except Exception as e:
            raise SourceQueryError(source.source_id, f"{type(e).__name__}: {e}") from e

        results = normalize_pages(pages, source)
        logger.info(
            f"[{index}/{total}] {source.display_name}: {len(results)} title match(es)",
            extra={"extra_fields": {"source_id": source.source_id, "hits": len(results)}},
        )
        return results

    async def execute(self, query: str, sources: list[SourceDescriptor]) -> list[SearchResult]:
        """
        Run the title query against every source.

        Returns:
            Hits of all sources, in source order, each source's hits in the order returned

        Raises:
            SourceQueryError: If any source query fails
        """
        total = len(sources)
        per_source = await asyncio.gather(
            *(self._query_source(query, source, i, total) for i, source in enumerate(sources, start=1))
        )
        results = [result for hits in per_source for result in hits]

        logger.info(
            f"Primary query matched {len(results)} record(s) across {total} source(s)",
            extra={"extra_fields": {"query": query, "hits": len(results), "source_count": total}},
        )
        return results
