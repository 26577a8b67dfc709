"""Fakes and page builders shared by the test modules."""

import asyncio

from api.base_source_client import KnowledgeSourceClient
from models.knowledge import RecordPage


def title_prop(text: str) -> dict:
    return {"type": "title", "title": [{"plain_text": text}] if text else []}


def rich_text_prop(text: str) -> dict:
    return {"type": "rich_text", "rich_text": [{"plain_text": text}] if text else []}


def url_prop(link: str | None) -> dict:
    return {"type": "url", "url": link}


def checkbox_prop(value: bool) -> dict:
    return {"type": "checkbox", "checkbox": value}


def make_page(page_id: str, title: str, body: str = "", url: str | None = None, **extra_props) -> dict:
    properties = {"Name": title_prop(title), "Content": rich_text_prop(body)}
    properties.update(extra_props)
    page = {"object": "page", "id": page_id, "properties": properties}
    if url is not None:
        page["url"] = url
    return page


def make_registry_record(name: str, locator: str, description: str = "", enabled: bool = True) -> dict:
    return {
        "object": "page",
        "id": f"cfg-{name}",
        "properties": {
            "Name": title_prop(name),
            "URL": url_prop(locator),
            "Description": rich_text_prop(description),
            "Enabled": checkbox_prop(enabled),
        },
    }


def hex_id(seed: str) -> str:
    return (seed * 32)[:32]


class FakeSourceClient(KnowledgeSourceClient):
    """
    In-memory knowledge-source client.

    ``pages`` maps source id -> pages; ``failing`` holds source ids whose queries
    raise; ``slow`` holds source ids whose queries never finish in time.
    """

    def __init__(self, registry=None, pages=None, failing=(), slow=(), registry_error=None):
        self.registry = list(registry or [])
        self.pages = dict(pages or {})
        self.failing = set(failing)
        self.slow = set(slow)
        self.registry_error = registry_error
        self.title_queries: list[tuple[str, str, int]] = []
        self.enumerations: list[tuple[str, int, str | None]] = []
        self.closed = False

    async def _maybe_fail(self, source_id: str) -> None:
        if source_id in self.slow:
            await asyncio.sleep(10)
        if source_id in self.failing:
            raise RuntimeError(f"source {source_id} is unavailable")

    async def query_by_title_substring(self, source_id, substring, limit):
        self.title_queries.append((source_id, substring, limit))
        await self._maybe_fail(source_id)
        hits = []
        for page in self.pages.get(source_id, []):
            props = page.get("properties") or {}
            title = "".join(t["plain_text"] for t in props.get("Name", {}).get("title", []))
            if substring in title:
                hits.append(page)
        return hits[:limit]

    async def query_all(self, source_id, page_size, start_cursor=None):
        self.enumerations.append((source_id, page_size, start_cursor))
        await self._maybe_fail(source_id)
        records = self.pages.get(source_id, [])
        start = int(start_cursor or 0)
        end = start + page_size
        next_cursor = str(end) if end < len(records) else None
        return RecordPage(records=records[start:end], next_cursor=next_cursor)

    async def list_enabled_source_records(self):
        if self.registry_error is not None:
            raise self.registry_error
        return list(self.registry)

    async def aclose(self):
        self.closed = True
