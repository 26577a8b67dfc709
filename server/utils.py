"""Shared utilities for FastAPI routes."""

from datetime import datetime, timezone

from fastapi import status
from fastapi.responses import JSONResponse

from server.schemas.responses import ErrorResponseDTO

MAX_QUERY_CHARS = 2000


class ApiError(Exception):
    """An error that maps directly onto an HTTP error response."""

    def __init__(self, status_code: int, error: str, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.error = error
        self.message = message


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def error_response(status_code: int, error: str, message: str) -> JSONResponse:
    body = ErrorResponseDTO(error=error, message=message, timestamp=utc_timestamp())
    return JSONResponse(status_code=status_code, content=body.model_dump())


def require_text(value, field_name: str) -> str:
    """
    Validate a required free-text field and return it trimmed.

    Raises:
        ApiError: 400 if the value is missing, not a string, blank or too long
    """
    if not isinstance(value, str) or not value.strip():
        raise ApiError(
            status.HTTP_400_BAD_REQUEST,
            "ValidationError",
            f"'{field_name}' is required and must be a non-empty string",
        )
    text = value.strip()
    if len(text) > MAX_QUERY_CHARS:
        raise ApiError(
            status.HTTP_400_BAD_REQUEST,
            "ValidationError",
            f"'{field_name}' exceeds {MAX_QUERY_CHARS} characters",
        )
    return text
