"""
RetrievalOrchestrator - entry point of knowledge retrieval.

Flow of one search:
1. load the enabled sources from the registry (empty registry -> empty result)
2. run the exact title query across all sources
3. return its hits when there are any, or when the query is pure ASCII
4. otherwise run the keyword fallback scan and return its hits instead
"""

from enum import Enum

from api.base_source_client import KnowledgeSourceClient
from models.knowledge import QuerySession, SearchKnowledgeResponse, SearchResult
from retrieval.errors import RetrievalError
from retrieval.fallback_scanner import DEFAULT_MAX_PAGES, DEFAULT_PAGE_SIZE, FallbackScanner
from retrieval.keywords import DEFAULT_LEXICON, KeywordLexicon, extract_keywords
from retrieval.primary import DEFAULT_RESULT_LIMIT, PrimaryQueryExecutor
from retrieval.registry import SourceRegistryLoader
from utils.logger import get_logger

logger = get_logger(__name__)


class RetrievalStage(Enum):
    PRIMARY = "primary"
    FALLBACK = "fallback"
    DONE = "done"


def needs_fallback(session: QuerySession, primary_results: list[SearchResult]) -> bool:
    """Fallback runs only for non-ASCII queries whose title query found nothing."""
    return not primary_results and not session.is_ascii


class RetrievalOrchestrator:
    """
    Searches the registered knowledge sources for a query.

    The knowledge-source client is injected; the orchestrator never builds its
    own, so tests and callers decide which credentials and transport are used.

    Example:
        client = NotionSourceClient.from_config(config)
        orchestrator = RetrievalOrchestrator(client)
        response = await orchestrator.search("おすすめの漫画")
    """

    def __init__(
        self,
        client: KnowledgeSourceClient,
        *,
        lexicon: KeywordLexicon = DEFAULT_LEXICON,
        registry: SourceRegistryLoader | None = None,
        primary_result_limit: int = DEFAULT_RESULT_LIMIT,
        fallback_page_size: int = DEFAULT_PAGE_SIZE,
        fallback_max_pages: int = DEFAULT_MAX_PAGES,
        source_timeout_s: float | None = None,
    ):
        self.client = client
        self.lexicon = lexicon
        self.registry = registry or SourceRegistryLoader(client)
        self.primary = PrimaryQueryExecutor(client, result_limit=primary_result_limit, timeout_s=source_timeout_s)
        self.fallback = FallbackScanner(
            client,
            page_size=fallback_page_size,
            max_pages=fallback_max_pages,
            timeout_s=source_timeout_s,
        )

    @classmethod
    def from_config(cls, client: KnowledgeSourceClient, config, lexicon: KeywordLexicon = DEFAULT_LEXICON):
        """Build an orchestrator with the limits and registry property names from ``Config``."""
        registry = SourceRegistryLoader(
            client,
            url_property=config.NOTION_CONFIG_URL_PROPERTY,
            description_property=config.NOTION_CONFIG_DESCRIPTION_PROPERTY,
            enabled_property=config.NOTION_CONFIG_ENABLED_PROPERTY,
        )
        return cls(
            client,
            lexicon=lexicon,
            registry=registry,
            primary_result_limit=config.PRIMARY_RESULT_LIMIT,
            fallback_page_size=config.FALLBACK_PAGE_SIZE,
            fallback_max_pages=config.FALLBACK_MAX_PAGES,
            source_timeout_s=config.SOURCE_QUERY_TIMEOUT_S,
        )

    def start_session(self, query: str) -> QuerySession:
        return QuerySession(
            raw_query=query,
            primary_query=query.strip(),
            keywords=tuple(extract_keywords(query, self.lexicon)),
        )

    async def search(self, query: str) -> SearchKnowledgeResponse:
        """
        Search all enabled knowledge sources.

        Args:
            query: Raw user query

        Returns:
            SearchKnowledgeResponse with the query and its results

        Raises:
            RetrievalError: If the registry cannot be loaded or a title query fails
        """
        session = self.start_session(query)
        logger.info(
            f"Searching knowledge sources: '{query[:80]}'",
            extra={"extra_fields": {"query": query, "keywords": list(session.keywords)}},
        )

        try:
            sources = await self.registry.load()
            if not sources:
                logger.warning("No enabled knowledge sources; returning empty result")
                return SearchKnowledgeResponse(query=query, results=[])

            stage = RetrievalStage.PRIMARY
            results = await self.primary.execute(session.primary_query, sources)

            if needs_fallback(session, results):
                stage = RetrievalStage.FALLBACK
                logger.info(
                    "No title matches for non-ASCII query; running keyword fallback scan",
                    extra={"extra_fields": {"keywords": list(session.keywords)}},
                )
                results = await self.fallback.scan(session.keywords, sources)
            else:
                stage = RetrievalStage.DONE
        except RetrievalError as e:
            logger.error(f"Knowledge search failed: {e}", extra={"extra_fields": {"query": query}})
            raise
        except Exception as e:
            logger.error(f"Knowledge search failed: {e}", exc_info=True, extra={"extra_fields": {"query": query}})
            raise RetrievalError(f"Knowledge search failed: {e}") from e

        logger.info(
            f"Knowledge search finished with {len(results)} result(s)",
            extra={"extra_fields": {"query": query, "stage": stage.value, "hits": len(results)}},
        )
        return SearchKnowledgeResponse(query=query, results=results)
