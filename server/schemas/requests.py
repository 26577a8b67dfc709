"""Pydantic request models for FastAPI endpoints.

Fields are optional on purpose: a missing or blank value is reported by the
route as a 400 ValidationError instead of FastAPI's default 422.
"""

from typing import Optional

from pydantic import BaseModel


class QueryRequest(BaseModel):
    query: Optional[str] = None


class AskRequest(BaseModel):
    question: Optional[str] = None
    mode: Optional[str] = None
