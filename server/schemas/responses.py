"""Pydantic response models (DTOs) for FastAPI endpoints.

Result DTOs are validated from the domain objects' ``to_dict()`` so the wire
field names stay identical to the dataclasses.
"""

from pydantic import BaseModel, Field

from agent.agent_core import AgentResult
from models.knowledge import SearchKnowledgeResponse, SearchResult
from tools.web.contracts import WebSearchResponse, WebSearchResult


class SearchResultDTO(BaseModel):
    origin: str = "notion"
    source_id: str
    record_id: str
    title: str
    content: str
    link: str | None = None
    source_name: str | None = None
    usage_hint: str | None = None
    hit_count: int | None = None

    @classmethod
    def from_search_result(cls, r: SearchResult):
        return cls.model_validate(r.to_dict())


class SearchKnowledgeResponseDTO(BaseModel):
    query: str
    results: list[SearchResultDTO] = Field(default_factory=list)

    @classmethod
    def from_response(cls, response: SearchKnowledgeResponse):
        return cls.model_validate(response.to_dict())


class WebSearchResultDTO(BaseModel):
    origin: str = "web"
    title: str
    snippet: str
    link: str

    @classmethod
    def from_web_result(cls, r: WebSearchResult):
        return cls.model_validate(r.to_dict())


class WebSearchResponseDTO(BaseModel):
    query: str
    results: list[WebSearchResultDTO] = Field(default_factory=list)

    @classmethod
    def from_response(cls, response: WebSearchResponse):
        return cls.model_validate(response.to_dict())


class AskResponseDTO(BaseModel):
    answer: str
    search_query: str
    knowledge_hits: int = 0
    web_hits: int = 0

    @classmethod
    def from_agent_result(cls, result: AgentResult):
        return cls(
            answer=result.answer,
            search_query=result.search_query,
            knowledge_hits=len(result.knowledge_results),
            web_hits=len(result.web_results),
        )


class HealthResponseDTO(BaseModel):
    status: str
    service: str
    timestamp: str


class ErrorResponseDTO(BaseModel):
    error: str
    message: str
    timestamp: str
