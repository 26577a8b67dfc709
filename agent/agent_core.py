"""
PersonalAgent - answers a question from the user's Notion notes and the web.

One run:
1. derive a search query from the question
2. search the knowledge sources and/or the web (concurrently in default mode)
3. stop with a fixed message when neither returned anything
4. otherwise build the grounded prompt and ask the generation model
"""

import asyncio
from dataclasses import dataclass, field
from enum import Enum

from api.base_client import BaseCompletionClient
from context.grounding import MAX_KNOWLEDGE_BLOCKS, MAX_WEB_BLOCKS, build_answer_prompt
from models.knowledge import SearchResult
from retrieval.core import RetrievalOrchestrator
from tools.web.contracts import WebSearchClient, WebSearchError, WebSearchResult
from utils.logger import get_logger

logger = get_logger(__name__)

TOPIC_MARKER = "に関する"
NO_RESULTS_MESSAGE = "Nothing relevant was found in either the knowledge base or on the web."


class AgentMode(Enum):
    DEFAULT = "default"
    NOTION_ONLY = "notion-only"
    WEB_ONLY = "web-only"

    @property
    def uses_knowledge(self) -> bool:
        return self in (AgentMode.DEFAULT, AgentMode.NOTION_ONLY)

    @property
    def uses_web(self) -> bool:
        return self in (AgentMode.DEFAULT, AgentMode.WEB_ONLY)


@dataclass(frozen=True)
class AgentResult:
    answer: str
    search_query: str
    knowledge_results: list[SearchResult] = field(default_factory=list)
    web_results: list[WebSearchResult] = field(default_factory=list)

    @property
    def found_anything(self) -> bool:
        return bool(self.knowledge_results or self.web_results)


def generate_search_query(question: str) -> str:
    """
    Derive the search query from a question.

    "漫画に関する情報を教えて" -> "漫画"; questions without the topic marker are
    used whole.
    """
    index = question.find(TOPIC_MARKER)
    if index == -1:
        return question.strip()
    return question[:index].strip()


class PersonalAgent:
    """
    Glue between retrieval, web search and generation.

    Any of the three collaborators may be None when the mode in use does not
    need it; a mode that needs a missing collaborator simply gets no results
    from it.
    """

    def __init__(
        self,
        retrieval: RetrievalOrchestrator | None,
        web_client: WebSearchClient | None,
        generator: BaseCompletionClient,
        answer_language: str = "Japanese",
    ):
        self.retrieval = retrieval
        self.web_client = web_client
        self.generator = generator
        self.answer_language = answer_language

    async def _search_knowledge(self, query: str) -> list[SearchResult]:
        if self.retrieval is None:
            logger.warning("Knowledge search requested but no retrieval orchestrator is configured")
            return []
        response = await self.retrieval.search(query)
        return response.results

    async def _search_web(self, query: str) -> list[WebSearchResult]:
        if self.web_client is None:
            logger.warning("Web search requested but no web search client is configured")
            return []
        try:
            return await self.web_client.search(query)
        except WebSearchError as e:
            logger.warning(f"Web search failed, continuing without web results: {e}")
            return []

    async def _empty(self) -> list:
        return []

    async def run(self, question: str, mode: AgentMode = AgentMode.DEFAULT) -> AgentResult:
        """
        Answer ``question``.

        Raises:
            RetrievalError: If the knowledge search fails
            GenerationError: If the generation model fails
        """
        search_query = generate_search_query(question)
        logger.info(
            f"Agent question: '{question[:80]}'",
            extra={"extra_fields": {"search_query": search_query, "mode": mode.value}},
        )

        knowledge_results, web_results = await asyncio.gather(
            self._search_knowledge(search_query) if mode.uses_knowledge else self._empty(),
            self._search_web(search_query) if mode.uses_web else self._empty(),
        )

        logger.info(
            f"Knowledge hits: {len(knowledge_results)}, web hits: {len(web_results)}",
            extra={"extra_fields": {"knowledge_hits": len(knowledge_results), "web_hits": len(web_results)}},
        )

        if not knowledge_results and not web_results:
            return AgentResult(answer=NO_RESULTS_MESSAGE, search_query=search_query)

        prompt = build_answer_prompt(question, knowledge_results, web_results, self.answer_language)
        answer = await asyncio.to_thread(self.generator.complete, prompt)

        for idx, r in enumerate(knowledge_results[:MAX_KNOWLEDGE_BLOCKS], start=1):
            logger.debug(f"[knowledge {idx}] {r.title} ({r.link or 'no URL'})")
        for idx, r in enumerate(web_results[:MAX_WEB_BLOCKS], start=1):
            logger.debug(f"[web {idx}] {r.title} ({r.link})")

        return AgentResult(
            answer=answer,
            search_query=search_query,
            knowledge_results=list(knowledge_results),
            web_results=list(web_results),
        )
