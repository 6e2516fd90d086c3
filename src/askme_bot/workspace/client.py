"""Async Notion REST client limited to the calls the bot needs."""

from __future__ import annotations

from typing import Any, Protocol

import httpx
import structlog

logger = structlog.get_logger(__name__)

NOTION_API_VERSION = "2022-06-28"
NOTION_BASE_URL = "https://api.notion.com/v1"


class WorkspaceAPIError(RuntimeError):
    """Raised when the document API answers with a non-success status."""

    def __init__(self, status_code: int, code: str, message: str) -> None:
        super().__init__(f"{status_code} {code}: {message}")
        self.status_code = status_code
        self.code = code
        self.message = message


class Workspace(Protocol):
    """The subset of the document API used by search and extraction."""

    async def retrieve_database(self, database_id: str) -> dict[str, Any]: ...

    async def query_database(self, database_id: str, body: dict[str, Any]) -> dict[str, Any]: ...

    async def list_block_children(
        self, block_id: str, *, start_cursor: str | None = None, page_size: int = 100
    ) -> dict[str, Any]: ...

    async def search(self, body: dict[str, Any]) -> dict[str, Any]: ...


class NotionClient:
    """Thin wrapper over `httpx.AsyncClient` with bearer auth and error mapping."""

    def __init__(
        self,
        token: str,
        *,
        base_url: str = NOTION_BASE_URL,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={
                "Authorization": f"Bearer {token}",
                "Notion-Version": NOTION_API_VERSION,
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    async def retrieve_database(self, database_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/databases/{database_id}")

    async def query_database(self, database_id: str, body: dict[str, Any]) -> dict[str, Any]:
        return await self._request("POST", f"/databases/{database_id}/query", json=body)

    async def list_block_children(
        self, block_id: str, *, start_cursor: str | None = None, page_size: int = 100
    ) -> dict[str, Any]:
        params: dict[str, Any] = {"page_size": page_size}
        if start_cursor:
            params["start_cursor"] = start_cursor
        return await self._request("GET", f"/blocks/{block_id}/children", params=params)

    async def search(self, body: dict[str, Any]) -> dict[str, Any]:
        return await self._request("POST", "/search", json=body)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        response = await self._client.request(method, path, **kwargs)
        if response.is_success:
            return response.json()

        try:
            payload = response.json()
        except ValueError:
            payload = {}
        error = WorkspaceAPIError(
            response.status_code,
            str(payload.get("code", "unknown")),
            str(payload.get("message", response.reason_phrase)),
        )
        logger.warning(
            "Notion request failed",
            method=method,
            path=path,
            status=error.status_code,
            code=error.code,
        )
        raise error
