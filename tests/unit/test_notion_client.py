import json

import httpx
import pytest

from askme_bot.workspace.client import NOTION_API_VERSION, NotionClient, WorkspaceAPIError


def _client(handler) -> NotionClient:
    return NotionClient("secret-token", transport=httpx.MockTransport(handler))


async def test_query_database_posts_body_with_auth_headers() -> None:
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"results": [{"id": "p1"}], "has_more": False})

    client = _client(handler)
    body = {"page_size": 10, "filter": {"and": []}}

    payload = await client.query_database("db-1", body)
    await client.aclose()

    assert payload["results"] == [{"id": "p1"}]
    request = seen[0]
    assert request.method == "POST"
    assert request.url.path == "/v1/databases/db-1/query"
    assert request.headers["Authorization"] == "Bearer secret-token"
    assert request.headers["Notion-Version"] == NOTION_API_VERSION
    assert json.loads(request.content) == body


async def test_list_block_children_passes_cursor() -> None:
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"results": [], "has_more": False, "next_cursor": None})

    client = _client(handler)
    await client.list_block_children("page-1")
    await client.list_block_children("page-1", start_cursor="abc", page_size=50)
    await client.aclose()

    assert seen[0].url.path == "/v1/blocks/page-1/children"
    assert dict(seen[0].url.params) == {"page_size": "100"}
    assert dict(seen[1].url.params) == {"page_size": "50", "start_cursor": "abc"}


async def test_error_status_raises_workspace_api_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            404,
            json={"object": "error", "status": 404, "code": "object_not_found", "message": "Not shared"},
        )

    client = _client(handler)

    with pytest.raises(WorkspaceAPIError) as excinfo:
        await client.retrieve_database("db-1")
    await client.aclose()

    assert excinfo.value.status_code == 404
    assert excinfo.value.code == "object_not_found"
    assert "Not shared" in str(excinfo.value)


async def test_non_json_error_body_is_tolerated() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="<html>bad gateway</html>")

    client = _client(handler)

    with pytest.raises(WorkspaceAPIError) as excinfo:
        await client.search({"query": "x"})
    await client.aclose()

    assert excinfo.value.status_code == 502
    assert excinfo.value.code == "unknown"
