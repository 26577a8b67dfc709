from abc import ABC, abstractmethod
from typing import Any

from models.knowledge import RecordPage


class KnowledgeSourceClient(ABC):
    """
    Abstract access to knowledge sources and to the registry that lists them.

    Records are returned as raw page objects (mappings); turning them into
    ``RawRecord`` and ``SearchResult`` is the retrieval layer's job. Implementations
    raise ``SourceQueryError`` when a source query cannot be completed.
    """

    @abstractmethod
    async def query_by_title_substring(
        self, source_id: str, substring: str, limit: int
    ) -> list[Any]:
        """
        Return up to ``limit`` records whose title contains ``substring``.

        Args:
            source_id: Identifier of the knowledge source
            substring: Text the title must contain
            limit: Maximum number of records to return
        """

    @abstractmethod
    async def query_all(
        self, source_id: str, page_size: int, start_cursor: str | None = None
    ) -> RecordPage:
        """
        Return one page of records from a source, unfiltered.

        Args:
            source_id: Identifier of the knowledge source
            page_size: Maximum number of records in the page
            start_cursor: Cursor from a previous page, or None for the first page
        """

    @abstractmethod
    async def list_enabled_source_records(self) -> list[Any]:
        """Return the registry records flagged as enabled."""

    async def aclose(self) -> None:
        """Release network resources. Subclasses holding connections override this."""
        return None
