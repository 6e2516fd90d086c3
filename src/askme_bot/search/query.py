"""Builds Notion database query bodies from free text."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from askme_bot.config import SearchConfig
from askme_bot.types import SchemaHint


def tokenize(text: str, max_tokens: int = 5) -> list[str]:
    return text.split()[:max_tokens]


def build_database_query(
    text: str,
    hint: SchemaHint,
    *,
    now: datetime | None = None,
    config: SearchConfig | None = None,
) -> dict[str, Any]:
    """Translate `text` into a filter/sort/page-size body for one database.

    Tokens match the title (substring) or tag (option containment). When the
    database has them, a status field must equal the published marker and an
    effective date must be in the past or unset.
    """
    config = config or SearchConfig()
    now = now or datetime.now(timezone.utc)
    tokens = tokenize(text, config.max_tokens)

    token_filters: list[dict[str, Any]] = []
    if hint.title:
        token_filters.extend({"property": hint.title, "title": {"contains": t}} for t in tokens)
    if hint.tag:
        token_filters.extend({"property": hint.tag, "multi_select": {"contains": t}} for t in tokens)

    conditions: list[dict[str, Any]] = []
    if token_filters:
        conditions.append({"or": token_filters})
    if hint.status:
        conditions.append(
            {"property": hint.status, "select": {"equals": config.published_value}}
        )
    if hint.effective_date:
        conditions.append(
            {
                "or": [
                    {"property": hint.effective_date, "date": {"on_or_before": now.isoformat()}},
                    {"property": hint.effective_date, "date": {"is_empty": True}},
                ]
            }
        )

    body: dict[str, Any] = {"page_size": config.page_size}
    if conditions:
        body["filter"] = {"and": conditions}
    if hint.effective_date:
        body["sorts"] = [{"property": hint.effective_date, "direction": "descending"}]
    return body
