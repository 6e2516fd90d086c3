"""Plain-text readers for Notion property and rich-text values."""

from __future__ import annotations

from typing import Any


def plain_text(rich_text: list[dict[str, Any]] | None) -> str:
    return "".join(part.get("plain_text", "") for part in rich_text or [])


def property_text(prop: dict[str, Any] | None) -> str:
    """Flatten a title or rich_text property into a string."""
    if not prop:
        return ""
    prop_type = prop.get("type")
    if prop_type in ("title", "rich_text"):
        return plain_text(prop.get(prop_type))
    return ""


def property_names(prop: dict[str, Any] | None) -> list[str]:
    """Option names of a multi_select property."""
    if not prop or prop.get("type") != "multi_select":
        return []
    return [option.get("name", "") for option in prop.get("multi_select") or [] if option.get("name")]


def database_title(database: dict[str, Any]) -> str:
    return plain_text(database.get("title"))
