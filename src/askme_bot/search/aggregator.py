"""Sequential search across the allow-listed databases."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import datetime

import structlog

from askme_bot.config import SearchConfig
from askme_bot.search.query import build_database_query
from askme_bot.search.schema import SchemaDetector
from askme_bot.types import Document, SearchResult
from askme_bot.workspace.client import Workspace

logger = structlog.get_logger(__name__)


class SearchAggregator:
    """Runs one query per allow-listed database and merges the pages.

    Databases are queried one after another. A database that fails (not shared
    with the integration, deleted, API error, unreadable response) is logged
    and contributes nothing.
    """

    def __init__(
        self,
        workspace: Workspace,
        allowlist: Sequence[str],
        *,
        config: SearchConfig | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.workspace = workspace
        self.allowlist = tuple(allowlist)
        self.config = config or SearchConfig()
        self.detector = SchemaDetector(workspace)
        self._clock = clock

    async def search(self, text: str) -> SearchResult:
        if not self.allowlist:
            return SearchResult()

        pages: list[Document] = []
        for database_id in self.allowlist:
            try:
                pages.extend(await self._query_one(database_id, text))
            except Exception:
                logger.exception("Database query failed", database_id=database_id)

        return SearchResult(documents=_dedupe(pages))

    async def find_latest(self, text: str) -> Document | None:
        """Return the most recently edited page matching `text`.

        Uses the allow-listed databases when configured, otherwise the
        workspace-wide page search.
        """
        if self.allowlist:
            candidates = (await self.search(text)).documents
        else:
            response = await self.workspace.search(
                {
                    "query": text,
                    "filter": {"property": "object", "value": "page"},
                    "sort": {"direction": "descending", "timestamp": "last_edited_time"},
                    "page_size": self.config.page_size,
                }
            )
            candidates = [Document.from_page(page) for page in response.get("results", [])]

        if not candidates:
            return None
        return max(candidates, key=lambda doc: doc.last_edited_time)

    async def _query_one(self, database_id: str, text: str) -> list[Document]:
        hint = await self.detector.detect(database_id)
        now = self._clock() if self._clock is not None else None
        body = build_database_query(text, hint, now=now, config=self.config)
        response = await self.workspace.query_database(database_id, body)
        return [Document.from_page(page) for page in response.get("results", [])]


def _dedupe(pages: list[Document]) -> list[Document]:
    seen: set[str] = set()
    unique: list[Document] = []
    for page in pages:
        if page.id in seen:
            continue
        seen.add(page.id)
        unique.append(page)
    return unique
