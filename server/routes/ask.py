"""Question answering endpoint."""

from fastapi import APIRouter, Depends, status

from agent.agent_core import AgentMode, PersonalAgent
from server.dependencies import get_agent
from server.schemas.requests import AskRequest
from server.schemas.responses import AskResponseDTO
from server.utils import ApiError, require_text
from utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["Agent"])


def _parse_mode(raw: str | None) -> AgentMode:
    if raw is None:
        return AgentMode.DEFAULT
    try:
        return AgentMode(raw)
    except ValueError:
        raise ApiError(
            status.HTTP_400_BAD_REQUEST,
            "ValidationError",
            f"'mode' must be one of: {', '.join(m.value for m in AgentMode)}",
        ) from None


@router.post("/ask", response_model=AskResponseDTO)
async def ask(request: AskRequest, agent: PersonalAgent = Depends(get_agent)):
    """Answer a question grounded in the knowledge base and the web."""
    question = require_text(request.question, "question")
    mode = _parse_mode(request.mode)

    logger.info(f"Question received: '{question[:80]}'", extra={"extra_fields": {"mode": mode.value}})
    result = await agent.run(question, mode)
    return AskResponseDTO.from_agent_result(result)
