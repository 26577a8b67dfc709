import asyncio
import json

import httpx
import pytest

from api.notion_source_client import NotionSourceClient
from fakes import make_page
from retrieval.errors import ConfigurationError, SourceQueryError

pytestmark = pytest.mark.unit

SOURCE_ID = "a" * 32
CONFIG_DB = "c" * 32


class RecordingTransport:
    """Serves queued JSON responses and remembers every request."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status, payload = self.responses.pop(0)
        return httpx.Response(status, json=payload)

    def bodies(self):
        return [json.loads(r.content) if r.content else None for r in self.requests]


def _client(handler, title_property="Name") -> NotionSourceClient:
    return NotionSourceClient(
        "secret-token", CONFIG_DB, title_property=title_property, transport=httpx.MockTransport(handler)
    )


def _run(client, coro_factory):
    async def go():
        try:
            return await coro_factory(client)
        finally:
            await client.aclose()

    return asyncio.run(go())


def test_title_query_request_shape():
    transport = RecordingTransport((200, {"results": [make_page("p1", "ワンピース")], "has_more": False}))

    pages = _run(_client(transport), lambda c: c.query_by_title_substring(SOURCE_ID, "ワンピース", 5))

    request = transport.requests[0]
    assert request.method == "POST"
    assert request.url.path == f"/v1/databases/{SOURCE_ID}/query"
    assert request.headers["Authorization"] == "Bearer secret-token"
    assert request.headers["Notion-Version"] == "2022-06-28"
    assert transport.bodies()[0] == {
        "filter": {"property": "Name", "title": {"contains": "ワンピース"}},
        "page_size": 5,
    }
    assert [p["id"] for p in pages] == ["p1"]


def test_page_size_is_capped():
    transport = RecordingTransport((200, {"results": []}))

    _run(_client(transport), lambda c: c.query_all(SOURCE_ID, 500))

    assert transport.bodies()[0] == {"page_size": 100}


def test_query_all_returns_cursor_only_when_more_pages_exist():
    transport = RecordingTransport(
        (200, {"results": [make_page("p1", "a")], "has_more": True, "next_cursor": "cur-2"}),
        (200, {"results": [make_page("p2", "b")], "has_more": False, "next_cursor": "ignored"}),
    )

    async def both(client):
        first = await client.query_all(SOURCE_ID, 1)
        second = await client.query_all(SOURCE_ID, 1, start_cursor=first.next_cursor)
        return first, second

    first, second = _run(_client(transport), both)

    assert first.next_cursor == "cur-2" and first.has_more
    assert second.next_cursor is None and not second.has_more
    assert transport.bodies()[1] == {"page_size": 1, "start_cursor": "cur-2"}


def test_registry_listing_filters_enabled_and_follows_cursors():
    transport = RecordingTransport(
        (200, {"results": [{"id": "r1"}], "has_more": True, "next_cursor": "n1"}),
        (200, {"results": [{"id": "r2"}], "has_more": False, "next_cursor": None}),
    )

    records = _run(_client(transport), lambda c: c.list_enabled_source_records())

    assert [r["id"] for r in records] == ["r1", "r2"]
    assert all(r.url.path == f"/v1/databases/{CONFIG_DB}/query" for r in transport.requests)
    bodies = transport.bodies()
    assert bodies[0]["filter"] == {"property": "Enabled", "checkbox": {"equals": True}}
    assert "start_cursor" not in bodies[0]
    assert bodies[1]["start_cursor"] == "n1"


def test_error_status_becomes_source_query_error():
    transport = RecordingTransport(
        (404, {"object": "error", "code": "object_not_found", "message": "Could not find database"})
    )

    with pytest.raises(SourceQueryError, match="object_not_found") as exc_info:
        _run(_client(transport), lambda c: c.query_all(SOURCE_ID, 10))

    assert exc_info.value.source_id == SOURCE_ID


def test_transport_failure_becomes_source_query_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(SourceQueryError, match="ConnectError"):
        _run(_client(handler), lambda c: c.query_by_title_substring(SOURCE_ID, "x", 5))


def test_invalid_json_becomes_source_query_error():
    def handler(request):
        return httpx.Response(200, content=b"<html>oops</html>")

    with pytest.raises(SourceQueryError, match="not valid JSON"):
        _run(_client(handler), lambda c: c.query_all(SOURCE_ID, 10))


def test_from_config_requires_credentials(monkeypatch):
    from config.config import Config

    monkeypatch.delenv("NOTION_TOKEN", raising=False)
    monkeypatch.setenv("NOTION_CONFIG_DATABASE_ID", CONFIG_DB)

    with pytest.raises(ConfigurationError, match="NOTION_TOKEN"):
        NotionSourceClient.from_config(Config())


def test_from_config_uses_configured_property_names(monkeypatch):
    from config.config import Config

    monkeypatch.setenv("NOTION_TOKEN", "tok")
    monkeypatch.setenv("NOTION_CONFIG_DATABASE_ID", CONFIG_DB)
    monkeypatch.setenv("NOTION_TITLE_PROPERTY", "Title")
    transport = RecordingTransport((200, {"results": []}))

    client = NotionSourceClient.from_config(Config(), transport=httpx.MockTransport(transport))
    _run(client, lambda c: c.query_by_title_substring(SOURCE_ID, "x", 5))

    assert transport.bodies()[0]["filter"]["property"] == "Title"


def _schema(**props):
    return {"object": "database", "properties": {name: {"type": t} for name, t in props.items()}}


def test_title_property_is_detected_per_source_and_cached():
    other = "b" * 32
    transport = RecordingTransport(
        (200, _schema(Memo="rich_text", Title="title")),
        (200, {"results": []}),
        (200, {"results": []}),
        (200, _schema(名前="title")),
        (200, {"results": []}),
    )

    async def three_queries(client):
        await client.query_by_title_substring(SOURCE_ID, "x", 5)
        await client.query_by_title_substring(SOURCE_ID, "y", 5)
        await client.query_by_title_substring(other, "z", 5)

    _run(_client(transport, title_property=None), three_queries)

    assert [(r.method, r.url.path) for r in transport.requests] == [
        ("GET", f"/v1/databases/{SOURCE_ID}"),
        ("POST", f"/v1/databases/{SOURCE_ID}/query"),
        ("POST", f"/v1/databases/{SOURCE_ID}/query"),
        ("GET", f"/v1/databases/{other}"),
        ("POST", f"/v1/databases/{other}/query"),
    ]
    bodies = transport.bodies()
    assert bodies[1]["filter"]["property"] == "Title"
    assert bodies[2]["filter"]["property"] == "Title"
    assert bodies[4]["filter"]["property"] == "名前"


def test_schema_without_title_property_is_a_source_error():
    transport = RecordingTransport((200, _schema(Memo="rich_text")))

    with pytest.raises(SourceQueryError, match="no title property") as exc_info:
        _run(_client(transport, title_property=None), lambda c: c.query_by_title_substring(SOURCE_ID, "x", 5))

    assert exc_info.value.source_id == SOURCE_ID


def test_from_config_detects_title_property_when_unset(monkeypatch):
    from config.config import Config

    monkeypatch.setenv("NOTION_TOKEN", "tok")
    monkeypatch.setenv("NOTION_CONFIG_DATABASE_ID", CONFIG_DB)
    monkeypatch.delenv("NOTION_TITLE_PROPERTY", raising=False)
    transport = RecordingTransport((200, _schema(Title="title")), (200, {"results": []}))

    client = NotionSourceClient.from_config(Config(), transport=httpx.MockTransport(transport))
    _run(client, lambda c: c.query_by_title_substring(SOURCE_ID, "x", 5))

    assert transport.requests[0].method == "GET"
    assert transport.bodies()[1]["filter"]["property"] == "Title"
