"""Heuristic detection of field roles from a database's field definitions."""

from __future__ import annotations

from typing import Any

from askme_bot.types import FieldRole, SchemaHint
from askme_bot.workspace.client import Workspace

# (declared type, name substrings) per role. An empty token tuple matches any name.
ROLE_RULES: dict[FieldRole, tuple[str, tuple[str, ...]]] = {
    FieldRole.TITLE: ("title", ()),
    FieldRole.TAG: ("multi_select", ("tags", "tag", "category", "カテゴリ", "カテゴリー")),
    FieldRole.STATUS: ("select", ("status", "公開状態", "状態")),
    FieldRole.EFFECTIVE_DATE: ("date", ("effective", "施行", "適用", "発効")),
    FieldRole.SUMMARY: ("rich_text", ("summary", "要約", "概要")),
}


def classify_field(field_type: str | None, name: str) -> FieldRole | None:
    """Map one field definition to the role it plays, if any."""
    lowered = name.lower()
    for role, (declared_type, tokens) in ROLE_RULES.items():
        if field_type != declared_type:
            continue
        if not tokens or any(token in lowered for token in tokens):
            return role
    return None


def detect_schema(properties: dict[str, Any]) -> SchemaHint:
    """Keep the first field found for each role, in definition order.

    Works on both database field definitions and page property values, since
    both are keyed by field name and carry a `type`.
    """
    found: dict[str, str] = {}
    for name, definition in properties.items():
        role = classify_field((definition or {}).get("type"), name)
        if role is not None and role.value not in found:
            found[role.value] = name
    return SchemaHint(**found)


class SchemaDetector:
    """Fetches a database definition and labels its field roles."""

    def __init__(self, workspace: Workspace) -> None:
        self.workspace = workspace

    async def detect(self, database_id: str) -> SchemaHint:
        database = await self.workspace.retrieve_database(database_id)
        return detect_schema(database.get("properties") or {})
