"""Keyword fallback scan over the full contents of every source.

Used when the exact title query found nothing for a query written in a script
where substring title matching is unreliable (typically Japanese). Each source
is enumerated, every record gets a composite text built from the source's name
and usage hint plus the record's own title and content, and a record is kept as
soon as one keyword occurs in that text. There is no ranking: ``hit_count`` is
attached to each accepted result for callers that want to sort.
"""

import asyncio
from dataclasses import replace
from typing import Sequence

from api.base_source_client import KnowledgeSourceClient
from models.knowledge import SearchResult, SourceDescriptor
from retrieval.normalizer import normalize_pages
from utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_PAGE_SIZE = 100
DEFAULT_MAX_PAGES = 1


def build_composite_text(result: SearchResult) -> str:
    """Lower-cased, newline-joined source name, usage hint, title and content."""
    parts = [result.source_name, result.usage_hint, result.title, result.content]
    return "\n".join(part for part in parts if part).lower()


def count_keyword_hits(composite_text: str, keywords: Sequence[str]) -> int:
    """Number of keywords contained in ``composite_text``; repeated keywords count each time."""
    return sum(1 for keyword in keywords if keyword.lower() in composite_text)


class FallbackScanner:
    """
    Enumerates sources and keeps records matching at least one keyword.

    Failures are isolated per source: a source that errors or times out is
    logged and skipped, the others are still scanned.
    """

    def __init__(
        self,
        client: KnowledgeSourceClient,
        page_size: int = DEFAULT_PAGE_SIZE,
        max_pages: int = DEFAULT_MAX_PAGES,
        timeout_s: float | None = None,
    ):
        """
        Args:
            client: Knowledge-source client shared by all queries
            page_size: Records requested per enumeration page
            max_pages: Page budget per source; 1 scans a single page
            timeout_s: Deadline in seconds for scanning one source (None disables it)
        """
        self.client = client
        self.page_size = page_size
        self.max_pages = max(1, max_pages)
        self.timeout_s = timeout_s

    async def _enumerate(self, source: SourceDescriptor) -> list:
        pages = []
        cursor = None
        for _ in range(self.max_pages):
            page = await self.client.query_all(source.source_id, self.page_size, start_cursor=cursor)
            pages.extend(page.records)
            if not page.has_more:
                break
            cursor = page.next_cursor
        return pages

    def _accept(self, candidates: list[SearchResult], keywords: Sequence[str]) -> list[SearchResult]:
        accepted = []
        for result in candidates:
            hits = count_keyword_hits(build_composite_text(result), keywords)
            if hits >= 1:
                accepted.append(replace(result, hit_count=hits))
        return accepted

    async def _scan_source(self, source: SourceDescriptor, keywords: Sequence[str]) -> list[SearchResult]:
        try:
            pages = await asyncio.wait_for(self._enumerate(source), timeout=self.timeout_s)
        except asyncio.TimeoutError:
            logger.warning(
                f"Fallback scan timed out for {source.display_name}; skipping source",
                extra={"extra_fields": {"source_id": source.source_id, "timeout_s": self.timeout_s}},
            )
            return []
        except Exception as e:
            logger.error(
                f"Fallback scan failed for {source.display_name}; skipping source: {e}",
                extra={
                    "extra_fields": {
                        "source_id": source.source_id,
                        "error": str(e),
                        "error_type": type(e).__name__,
                    }
                },
            )
            return []

        candidates = normalize_pages(pages, source)
        accepted = self._accept(candidates, keywords)
        logger.info(
            f"{source.display_name}: {len(accepted)}/{len(candidates)} record(s) matched keywords",
            extra={
                "extra_fields": {
                    "source_id": source.source_id,
                    "scanned": len(candidates),
                    "accepted": len(accepted),
                }
            },
        )
        return accepted

    async def scan(self, keywords: Sequence[str], sources: list[SourceDescriptor]) -> list[SearchResult]:
        """
        Scan every source for records matching any of ``keywords``.

        Keywords are extracted once by the caller and shared by all sources.
        Returns accepted records in source order, each source in enumeration order.
        """
        if not keywords:
            logger.info("Fallback scan skipped: query has no usable keywords")
            return []

        per_source = await asyncio.gather(*(self._scan_source(source, keywords) for source in sources))
        results = [result for accepted in per_source for result in accepted]

        logger.info(
            f"Fallback scan accepted {len(results)} record(s)",
            extra={"extra_fields": {"keywords": list(keywords), "accepted": len(results)}},
        )
        return results
