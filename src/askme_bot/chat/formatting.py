"""Slack mrkdwn and Block Kit rendering for search results and answers."""

from __future__ import annotations

import re
from typing import Any

from askme_bot.search.schema import detect_schema
from askme_bot.types import DatabaseSummary, Document
from askme_bot.workspace.properties import property_names, property_text

_MRKDWN_SPECIAL = re.compile(r"([_*`~])")

# Slack rejects section text longer than 3000 characters.
_SECTION_LIMIT = 3000

UNTITLED = "Untitled"


def escape_mrkdwn(text: str) -> str:
    return _MRKDWN_SPECIAL.sub(r"\\\1", str(text))


def usage_text(command: str) -> str:
    return f"Usage: `{command} <search words>`  e.g. `{command} travel expense`"


def summarize_document(document: Document, *, summary_chars: int = 180) -> dict[str, Any]:
    """Pull the list-view fields out of a page's properties."""
    props = document.properties
    hint = detect_schema(props)

    title = property_text(props.get(hint.title)) if hint.title else ""
    summary = property_text(props.get(hint.summary)) if hint.summary else ""

    tag_prop = props.get(hint.tag) if hint.tag else None
    if tag_prop is None:
        tag_prop = next(
            (p for p in props.values() if (p or {}).get("type") == "multi_select"), None
        )

    return {
        "title": title or UNTITLED,
        "url": document.url,
        "tags": property_names(tag_prop),
        "summary": summary[:summary_chars],
        "last_edited": document.last_edited_time[:10] or "—",
    }


def build_result_blocks(
    query: str, documents: list[Document], *, summary_chars: int = 180
) -> list[dict[str, Any]]:
    blocks: list[dict[str, Any]] = [
        {
            "type": "section",
            "text": {
                "type": "mrkdwn",
                "text": f"*Notion search results ({len(documents)})*: _{escape_mrkdwn(query)}_",
            },
        },
        {"type": "divider"},
    ]

    for document in documents:
        item = summarize_document(document, summary_chars=summary_chars)
        lines: list[str] = []
        if item["summary"]:
            lines.append(f"_{escape_mrkdwn(item['summary'])}_")
        if item["tags"]:
            tags = " ".join(f"`{escape_mrkdwn(tag)}`" for tag in item["tags"])
            lines.append(f"• *Tags*: {tags}")
        lines.append(f"• *Updated*: {item['last_edited']}")

        blocks.append(
            {
                "type": "section",
                "text": {
                    "type": "mrkdwn",
                    "text": f"*<{item['url']}|{escape_mrkdwn(item['title'])}>*\n" + "\n".join(lines),
                },
                "accessory": {
                    "type": "button",
                    "text": {"type": "plain_text", "text": "Open"},
                    "url": item["url"],
                    "action_id": "open_link",
                },
            }
        )
        blocks.append({"type": "divider"})

    return blocks


def build_answer_blocks(question: str, document: Document, answer: str) -> list[dict[str, Any]]:
    """Question, source link and the generated answer in one message.

    The answer is inserted unescaped so the model's own mrkdwn renders.
    """
    title = summarize_document(document)["title"]
    body = answer if len(answer) <= _SECTION_LIMIT else answer[: _SECTION_LIMIT - 1] + "…"
    return [
        {
            "type": "section",
            "text": {"type": "mrkdwn", "text": f"*Q:* _{escape_mrkdwn(question)}_"},
        },
        {
            "type": "context",
            "elements": [
                {
                    "type": "mrkdwn",
                    "text": f"Source: <{document.url}|{escape_mrkdwn(title)}>",
                }
            ],
        },
        {"type": "divider"},
        {"type": "section", "text": {"type": "mrkdwn", "text": body}},
    ]


def build_not_found_text(query: str) -> str:
    return f"*Nothing found in Notion*: _{escape_mrkdwn(query)}_"


def build_database_list_text(databases: list[DatabaseSummary]) -> str:
    lines = [
        f"{index}. {escape_mrkdwn(db.title or '(untitled database)')}\n   id: `{db.id}`"
        for index, db in enumerate(databases, start=1)
    ]
    return f"*Accessible databases (top {len(databases)})*\n" + "\n".join(lines)
