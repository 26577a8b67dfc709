"""
Models package for knowledge retrieval objects.
"""

from .knowledge import (
    NO_TITLE_PLACEHOLDER,
    QuerySession,
    RawRecord,
    RecordPage,
    SearchKnowledgeResponse,
    SearchResult,
    SourceDescriptor,
)

__all__ = [
    "NO_TITLE_PLACEHOLDER",
    "QuerySession",
    "RawRecord",
    "RecordPage",
    "SearchKnowledgeResponse",
    "SearchResult",
    "SourceDescriptor",
]
