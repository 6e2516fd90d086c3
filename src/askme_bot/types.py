"""Shared domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class FieldRole(str, Enum):
    """Logical meaning of a database field."""

    TITLE = "title"
    TAG = "tag"
    STATUS = "status"
    EFFECTIVE_DATE = "effective_date"
    SUMMARY = "summary"


@dataclass(slots=True)
class Document:
    """A read-only snapshot of a workspace page."""

    id: str
    url: str
    last_edited_time: str
    properties: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_page(cls, page: dict[str, Any]) -> "Document":
        return cls(
            id=str(page["id"]),
            url=page.get("url") or "",
            last_edited_time=page.get("last_edited_time") or "",
            properties=page.get("properties") or {},
        )


@dataclass(slots=True)
class SchemaHint:
    """Field names detected per role for one database; any role may be absent."""

    title: str | None = None
    tag: str | None = None
    status: str | None = None
    effective_date: str | None = None
    summary: str | None = None

    def get(self, role: FieldRole) -> str | None:
        return getattr(self, role.value)


@dataclass(slots=True)
class SearchResult:
    """Documents merged across databases, unique by id in first-seen order."""

    documents: list[Document] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.documents)

    def __bool__(self) -> bool:
        return bool(self.documents)


@dataclass(slots=True)
class CommandInvocation:
    """One slash-command call; discarded once the handler returns."""

    command: str
    text: str
    user_id: str = ""
    channel_id: str = ""

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "CommandInvocation":
        return cls(
            command=str(payload.get("command", "")),
            text=str(payload.get("text") or "").strip(),
            user_id=str(payload.get("user_id", "")),
            channel_id=str(payload.get("channel_id", "")),
        )


@dataclass(slots=True)
class DatabaseSummary:
    """A database visible to the integration."""

    id: str
    title: str
