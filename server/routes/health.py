"""Health check endpoint."""

from fastapi import APIRouter

from server.schemas.responses import HealthResponseDTO
from server.utils import utc_timestamp

SERVICE_NAME = "notion-knowledge-agent"

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponseDTO)
async def health_check():
    """Health check endpoint."""
    return HealthResponseDTO(status="ok", service=SERVICE_NAME, timestamp=utc_timestamp())
