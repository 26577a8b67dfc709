import asyncio

import pytest

from agent.agent_core import NO_RESULTS_MESSAGE, AgentMode, PersonalAgent, generate_search_query
from api.base_client import BaseCompletionClient
from api.openai_client import GenerationError
from models.knowledge import SearchKnowledgeResponse, SearchResult
from retrieval.errors import SourceQueryError
from tools.web.contracts import WebSearchClient, WebSearchError, WebSearchResult

pytestmark = pytest.mark.unit


class FakeGenerator(BaseCompletionClient):
    def __init__(self, answer="answer", error=None):
        super().__init__("key", model_name="fake")
        self.answer = answer
        self.error = error
        self.prompts = []

    def complete(self, prompt, **kwargs):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.answer


class FakeRetrieval:
    def __init__(self, results=None, error=None):
        self.results = results or []
        self.error = error
        self.queries = []

    async def search(self, query):
        self.queries.append(query)
        if self.error is not None:
            raise self.error
        return SearchKnowledgeResponse(query=query, results=self.results)


class FakeWeb(WebSearchClient):
    def __init__(self, results=None, error=None):
        self.results = results or []
        self.error = error
        self.queries = []

    async def search(self, query):
        self.queries.append(query)
        if self.error is not None:
            raise self.error
        return self.results


NOTE = SearchResult(source_id="s", record_id="r1", title="ワンピース", content="海賊の漫画", source_name="漫画")
PAGE = WebSearchResult(title="ONE PIECE - Wikipedia", link="https://example.com/op", snippet="Japanese manga")


def _agent(retrieval=None, web=None, generator=None):
    return PersonalAgent(retrieval=retrieval, web_client=web, generator=generator or FakeGenerator())


@pytest.mark.parametrize(
    "question, expected",
    [
        ("漫画に関する情報を教えて", "漫画"),
        ("  TypeScriptに関する記事 ", "TypeScript"),
        ("おすすめの漫画は？", "おすすめの漫画は？"),
        ("  spaced  ", "spaced"),
    ],
)
def test_generate_search_query(question, expected):
    assert generate_search_query(question) == expected


def test_mode_flags():
    assert AgentMode.DEFAULT.uses_knowledge and AgentMode.DEFAULT.uses_web
    assert AgentMode.NOTION_ONLY.uses_knowledge and not AgentMode.NOTION_ONLY.uses_web
    assert AgentMode.WEB_ONLY.uses_web and not AgentMode.WEB_ONLY.uses_knowledge


def test_default_mode_searches_both_and_generates():
    retrieval, web, generator = FakeRetrieval([NOTE]), FakeWeb([PAGE]), FakeGenerator("回答")

    result = asyncio.run(_agent(retrieval, web, generator).run("ワンピースに関する情報を教えて"))

    assert result.answer == "回答"
    assert result.search_query == "ワンピース"
    assert retrieval.queries == ["ワンピース"] and web.queries == ["ワンピース"]
    assert result.knowledge_results == [NOTE] and result.web_results == [PAGE]
    prompt = generator.prompts[0]
    assert prompt.index("## Doc1: ワンピース [漫画]") < prompt.index("## Web1: ONE PIECE - Wikipedia")


def test_notion_only_mode_skips_web():
    web = FakeWeb([PAGE])

    result = asyncio.run(_agent(FakeRetrieval([NOTE]), web).run("ワンピース", AgentMode.NOTION_ONLY))

    assert web.queries == []
    assert result.web_results == []


def test_web_only_mode_skips_knowledge():
    retrieval = FakeRetrieval([NOTE])

    result = asyncio.run(_agent(retrieval, FakeWeb([PAGE])).run("ワンピース", AgentMode.WEB_ONLY))

    assert retrieval.queries == []
    assert result.web_results == [PAGE]


def test_nothing_found_skips_generation():
    generator = FakeGenerator()

    result = asyncio.run(_agent(FakeRetrieval(), FakeWeb(), generator).run("存在しない話題"))

    assert result.answer == NO_RESULTS_MESSAGE
    assert not result.found_anything
    assert generator.prompts == []


def test_web_failure_is_not_fatal():
    result = asyncio.run(_agent(FakeRetrieval([NOTE]), FakeWeb(error=WebSearchError("quota"))).run("ワンピース"))

    assert result.knowledge_results == [NOTE]
    assert result.web_results == []
    assert result.answer == "answer"


def test_missing_collaborator_yields_no_results():
    result = asyncio.run(_agent(None, FakeWeb([PAGE])).run("ワンピース"))

    assert result.knowledge_results == []
    assert result.web_results == [PAGE]


def test_retrieval_failure_propagates():
    with pytest.raises(SourceQueryError):
        asyncio.run(_agent(FakeRetrieval(error=SourceQueryError("s", "boom")), FakeWeb()).run("ワンピース"))


def test_generation_failure_propagates():
    generator = FakeGenerator(error=GenerationError("rate limited"))

    with pytest.raises(GenerationError):
        asyncio.run(_agent(FakeRetrieval([NOTE]), FakeWeb(), generator).run("ワンピース"))
