"""Flattens a page's top-level content blocks into plain text."""

from __future__ import annotations

from typing import Any

from askme_bot.config import ExtractionConfig
from askme_bot.workspace.client import Workspace
from askme_bot.workspace.properties import plain_text

_HEADINGS = {"heading_1": "# ", "heading_2": "## ", "heading_3": "### "}
_BULLET = "• "


def render_block(block: dict[str, Any]) -> str:
    """Plain-text line for a supported block, or "" for anything else."""
    block_type = block.get("type", "")
    data = block.get(block_type) or {}
    text = plain_text(data.get("rich_text")).strip()
    if not text:
        return ""

    if block_type in _HEADINGS:
        return _HEADINGS[block_type] + text
    if block_type == "paragraph":
        return text
    if block_type in ("bulleted_list_item", "numbered_list_item"):
        return _BULLET + text
    if block_type == "to_do":
        return ("☑ " if data.get("checked") else "☐ ") + text
    if block_type == "quote":
        return f'"{text}"'
    return ""


class PageTextExtractor:
    """Reads block pages by cursor until the page ends or the budget is hit.

    Output never exceeds `char_budget` and always ends on a whole block.
    Child blocks (toggles, nested lists) are not descended into.
    """

    def __init__(self, workspace: Workspace, config: ExtractionConfig | None = None) -> None:
        self.workspace = workspace
        self.config = config or ExtractionConfig()

    async def extract(self, page_id: str, *, char_budget: int | None = None) -> str:
        budget = self.config.char_budget if char_budget is None else char_budget
        text = ""
        cursor: str | None = None

        while True:
            response = await self.workspace.list_block_children(
                page_id,
                start_cursor=cursor,
                page_size=self.config.block_page_size,
            )
            for block in response.get("results", []):
                line = render_block(block)
                if not line:
                    continue
                candidate = f"{text}\n{line}" if text else line
                if len(candidate) > budget:
                    return text
                text = candidate

            cursor = response.get("next_cursor")
            if not response.get("has_more") or not cursor:
                return text
