"""Web search endpoint."""

from fastapi import APIRouter, Depends

from server.dependencies import get_web_search_client
from server.schemas.requests import QueryRequest
from server.schemas.responses import WebSearchResponseDTO
from server.utils import require_text
from tools.web.contracts import WebSearchClient, WebSearchResponse

router = APIRouter(tags=["Web"])


@router.post("/web_search", response_model=WebSearchResponseDTO)
async def web_search(
    request: QueryRequest,
    client: WebSearchClient = Depends(get_web_search_client),
):
    """Search the web with the configured provider."""
    query = require_text(request.query, "query")
    results = await client.search(query)
    return WebSearchResponseDTO.from_response(WebSearchResponse(query=query, results=results))
