"""Notion REST client for knowledge sources and the source registry."""

from typing import Any

import httpx

from api.base_source_client import KnowledgeSourceClient
from models.knowledge import RecordPage
from retrieval.errors import SourceQueryError
from utils.logger import get_logger

logger = get_logger(__name__)

NOTION_API_BASE_URL = "https://api.notion.com/v1"
DEFAULT_NOTION_VERSION = "2022-06-28"
DEFAULT_TIMEOUT_S = 30.0
MAX_PAGE_SIZE = 100


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict) and payload.get("message"):
        return f"HTTP {response.status_code} ({payload.get('code', 'error')}): {payload['message']}"
    return f"HTTP {response.status_code}"


class NotionSourceClient(KnowledgeSourceClient):
    """
    Knowledge-source client backed by the Notion ``databases/{id}/query`` endpoint.

    One ``httpx.AsyncClient`` is shared by all queries issued through this object,
    so a single instance should be created at startup and passed to the
    ``RetrievalOrchestrator``.

    Every Notion database has exactly one title property, but its name differs
    per database. Unless a fixed ``title_property`` is given, the name is read
    from each database's schema on first use and cached for the client's lifetime.
    """

    def __init__(
        self,
        token: str,
        config_database_id: str,
        *,
        title_property: str | None = None,
        enabled_property: str = "Enabled",
        api_version: str = DEFAULT_NOTION_VERSION,
        base_url: str = NOTION_API_BASE_URL,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Args:
            token: Notion integration token
            config_database_id: Database listing the knowledge sources
            title_property: Title property used for substring queries in every source;
                None detects it per source from the database schema
            enabled_property: Checkbox property of the registry marking enabled sources
            api_version: Value of the Notion-Version header
            base_url: API root, overridable for tests
            timeout_s: HTTP timeout per request
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.config_database_id = config_database_id
        self.title_property = title_property
        self.enabled_property = enabled_property
        self._title_properties: dict[str, str] = {}
        self._http = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout_s,
            transport=transport,
            headers={
                "Authorization": f"Bearer {token}",
                "Notion-Version": api_version,
                "Content-Type": "application/json",
            },
        )

    @classmethod
    def from_config(cls, config, transport: httpx.AsyncBaseTransport | None = None) -> "NotionSourceClient":
        """Build a client from a ``Config``; raises ConfigurationError when credentials are missing."""
        config.require_notion()
        return cls(
            token=config.NOTION_TOKEN,
            config_database_id=config.NOTION_CONFIG_DATABASE_ID,
            title_property=config.NOTION_TITLE_PROPERTY,
            enabled_property=config.NOTION_CONFIG_ENABLED_PROPERTY,
            api_version=config.NOTION_API_VERSION,
            transport=transport,
        )

    async def _request(self, method: str, database_id: str, path: str, body: dict[str, Any] | None = None) -> dict[str, Any]:
        try:
            response = await self._http.request(method, path, json=body)
        except httpx.HTTPError as e:
            raise SourceQueryError(database_id, f"{type(e).__name__}: {e}") from e

        if response.is_error:
            raise SourceQueryError(database_id, _error_message(response))

        try:
            payload = response.json()
        except ValueError as e:
            raise SourceQueryError(database_id, "response is not valid JSON") from e
        if not isinstance(payload, dict):
            raise SourceQueryError(database_id, "unexpected response shape")
        return payload

    async def _query_database(self, database_id: str, body: dict[str, Any]) -> dict[str, Any]:
        return await self._request("POST", database_id, f"/databases/{database_id}/query", body)

    async def _title_property_for(self, database_id: str) -> str:
        if self.title_property:
            return self.title_property
        if database_id in self._title_properties:
            return self._title_properties[database_id]

        schema = await self._request("GET", database_id, f"/databases/{database_id}")
        properties = schema.get("properties")
        if isinstance(properties, dict):
            for name, prop in properties.items():
                if isinstance(prop, dict) and prop.get("type") == "title":
                    self._title_properties[database_id] = name
                    logger.debug(
                        "Detected title property",
                        extra={"extra_fields": {"source_id": database_id, "title_property": name}},
                    )
                    return name
        raise SourceQueryError(database_id, "database schema has no title property")

    async def query_by_title_substring(self, source_id: str, substring: str, limit: int) -> list[Any]:
        title_property = await self._title_property_for(source_id)
        body = {
            "filter": {"property": title_property, "title": {"contains": substring}},
            "page_size": max(1, min(limit, MAX_PAGE_SIZE)),
        }
        payload = await self._query_database(source_id, body)
        return list(payload.get("results") or [])

    async def query_all(self, source_id: str, page_size: int, start_cursor: str | None = None) -> RecordPage:
        body: dict[str, Any] = {"page_size": max(1, min(page_size, MAX_PAGE_SIZE))}
        if start_cursor:
            body["start_cursor"] = start_cursor
        payload = await self._query_database(source_id, body)
        next_cursor = payload.get("next_cursor") if payload.get("has_more") else None
        return RecordPage(records=list(payload.get("results") or []), next_cursor=next_cursor)

    async def list_enabled_source_records(self) -> list[Any]:
        records: list[Any] = []
        cursor = None
        while True:
            body: dict[str, Any] = {
                "filter": {"property": self.enabled_property, "checkbox": {"equals": True}},
                "page_size": MAX_PAGE_SIZE,
            }
            if cursor:
                body["start_cursor"] = cursor
            payload = await self._query_database(self.config_database_id, body)
            records.extend(payload.get("results") or [])
            if not payload.get("has_more") or not payload.get("next_cursor"):
                break
            cursor = payload["next_cursor"]

        logger.debug(
            "Registry records fetched",
            extra={"extra_fields": {"config_database_id": self.config_database_id[:8], "count": len(records)}},
        )
        return records

    async def aclose(self) -> None:
        await self._http.aclose()
