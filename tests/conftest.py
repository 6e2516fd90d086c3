from __future__ import annotations

from typing import Any

import pytest

from askme_bot.workspace.client import WorkspaceAPIError

POLICY_SCHEMA: dict[str, Any] = {
    "Name": {"id": "title", "type": "title", "title": {}},
    "Tags": {"id": "t1", "type": "multi_select", "multi_select": {"options": []}},
    "Status": {"id": "s1", "type": "select", "select": {"options": []}},
    "Effective date": {"id": "d1", "type": "date", "date": {}},
    "Summary": {"id": "r1", "type": "rich_text", "rich_text": {}},
}


def _rich(text: str) -> list[dict[str, Any]]:
    return [{"type": "text", "plain_text": text, "text": {"content": text}}]


def build_page(
    page_id: str,
    title: str,
    *,
    status: str | None = "Published",
    effective: str | None = None,
    tags: tuple[str, ...] = (),
    summary: str = "",
    edited: str = "2024-05-01T09:00:00.000Z",
) -> dict[str, Any]:
    return {
        "object": "page",
        "id": page_id,
        "url": f"https://www.notion.so/{page_id}",
        "last_edited_time": edited,
        "properties": {
            "Name": {"id": "title", "type": "title", "title": _rich(title)},
            "Tags": {
                "id": "t1",
                "type": "multi_select",
                "multi_select": [{"name": tag} for tag in tags],
            },
            "Status": {
                "id": "s1",
                "type": "select",
                "select": {"name": status} if status else None,
            },
            "Effective date": {
                "id": "d1",
                "type": "date",
                "date": {"start": effective} if effective else None,
            },
            "Summary": {"id": "r1", "type": "rich_text", "rich_text": _rich(summary) if summary else []},
        },
    }


def build_block(block_type: str, text: str, **extra: Any) -> dict[str, Any]:
    return {"object": "block", "type": block_type, block_type: {"rich_text": _rich(text), **extra}}


class FakeWorkspace:
    """In-memory document API that evaluates the Notion filters the bot sends."""

    def __init__(self) -> None:
        self.databases: dict[str, dict[str, Any]] = {}
        self.pages: dict[str, list[dict[str, Any]]] = {}
        self.blocks: dict[str, list[dict[str, Any]]] = {}
        self.failing: set[str] = set()
        self.calls: list[tuple[str, str]] = []

    def add_database(self, database_id: str, pages: list[dict[str, Any]], *, title: str = "", schema=None) -> None:
        self.databases[database_id] = {
            "object": "database",
            "id": database_id,
            "title": _rich(title) if title else [],
            "properties": schema if schema is not None else POLICY_SCHEMA,
        }
        self.pages[database_id] = pages

    async def retrieve_database(self, database_id: str) -> dict[str, Any]:
        self.calls.append(("retrieve_database", database_id))
        if database_id in self.failing or database_id not in self.databases:
            raise WorkspaceAPIError(404, "object_not_found", f"Could not find database {database_id}")
        return self.databases[database_id]

    async def query_database(self, database_id: str, body: dict[str, Any]) -> dict[str, Any]:
        self.calls.append(("query_database", database_id))
        self.last_query = body
        matched = [
            page
            for page in self.pages.get(database_id, [])
            if "filter" not in body or _matches(page, body["filter"])
        ]
        return {"object": "list", "results": matched[: body.get("page_size", 100)], "has_more": False}

    async def list_block_children(
        self, block_id: str, *, start_cursor: str | None = None, page_size: int = 100
    ) -> dict[str, Any]:
        self.calls.append(("list_block_children", block_id))
        blocks = self.blocks.get(block_id, [])
        start = int(start_cursor) if start_cursor else 0
        end = start + page_size
        has_more = end < len(blocks)
        return {
            "object": "list",
            "results": blocks[start:end],
            "has_more": has_more,
            "next_cursor": str(end) if has_more else None,
        }

    async def search(self, body: dict[str, Any]) -> dict[str, Any]:
        self.calls.append(("search", str(body.get("query", ""))))
        kind = body.get("filter", {}).get("value")
        if kind == "database":
            return {"results": list(self.databases.values())}
        query = str(body.get("query", ""))
        pages = [
            page
            for pages in self.pages.values()
            for page in pages
            if query in _title_of(page)
        ]
        pages.sort(key=lambda page: page["last_edited_time"], reverse=True)
        return {"results": pages}


def _title_of(page: dict[str, Any]) -> str:
    return "".join(part["plain_text"] for part in page["properties"]["Name"]["title"])


def _matches(page: dict[str, Any], condition: dict[str, Any]) -> bool:
    if "and" in condition:
        return all(_matches(page, item) for item in condition["and"])
    if "or" in condition:
        return any(_matches(page, item) for item in condition["or"])

    prop = page["properties"].get(condition["property"], {})
    if "title" in condition:
        text = "".join(part["plain_text"] for part in prop.get("title", []))
        return condition["title"]["contains"] in text
    if "multi_select" in condition:
        names = [option["name"] for option in prop.get("multi_select", [])]
        return condition["multi_select"]["contains"] in names
    if "select" in condition:
        selected = prop.get("select")
        return selected is not None and selected["name"] == condition["select"]["equals"]
    if "date" in condition:
        value = prop.get("date")
        if condition["date"].get("is_empty"):
            return value is None
        if value is None:
            return False
        return value["start"] <= condition["date"]["on_or_before"]
    raise AssertionError(f"unsupported condition: {condition}")


class RecordingRespond:
    """Stands in for Bolt's `respond`, keeping every message sent."""

    def __init__(self) -> None:
        self.messages: list[dict[str, Any]] = []

    async def __call__(self, text: str | None = None, **kwargs: Any) -> None:
        self.messages.append({"text": text, **kwargs})


@pytest.fixture
def workspace() -> FakeWorkspace:
    return FakeWorkspace()


@pytest.fixture
def respond() -> RecordingRespond:
    return RecordingRespond()


@pytest.fixture
def make_page():
    return build_page


@pytest.fixture
def make_block():
    return build_block
