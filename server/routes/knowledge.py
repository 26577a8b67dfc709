"""Knowledge search endpoint."""

from fastapi import APIRouter, Depends

from retrieval.core import RetrievalOrchestrator
from server.dependencies import get_retrieval_orchestrator
from server.schemas.requests import QueryRequest
from server.schemas.responses import SearchKnowledgeResponseDTO
from server.utils import require_text
from utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["Knowledge"])


@router.post("/search_knowledge", response_model=SearchKnowledgeResponseDTO)
async def search_knowledge(
    request: QueryRequest,
    orchestrator: RetrievalOrchestrator = Depends(get_retrieval_orchestrator),
):
    """Search the enabled Notion knowledge sources for a query."""
    query = require_text(request.query, "query")
    response = await orchestrator.search(query)
    logger.info(f"search_knowledge returned {len(response.results)} result(s)")
    return SearchKnowledgeResponseDTO.from_response(response)
