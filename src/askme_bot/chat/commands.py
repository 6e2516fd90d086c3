"""Handlers for the `/askme` and `/askme-admin` slash commands."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Literal

import structlog

from askme_bot.answer.composer import AnswerComposer
from askme_bot.answer.extractor import PageTextExtractor
from askme_bot.chat.formatting import (
    build_answer_blocks,
    build_database_list_text,
    build_not_found_text,
    build_result_blocks,
    usage_text,
)
from askme_bot.chat.registry import CommandRegistry, CommandSpec, Respond
from askme_bot.config import SearchConfig
from askme_bot.search.aggregator import SearchAggregator
from askme_bot.types import CommandInvocation, DatabaseSummary
from askme_bot.workspace.client import Workspace
from askme_bot.workspace.properties import database_title

logger = structlog.get_logger(__name__)

SEARCH_FAILED = "Something went wrong while searching. Check the database sharing settings and environment variables."
ANSWER_FAILED = "Something went wrong while generating the answer. Please try again later."
BODY_NOT_RETRIEVABLE = "Found a matching page, but its body could not be retrieved."
NOT_PERMITTED = "You are not permitted to run this command."
NO_DATABASES = "No databases found. Invite the integration to your Notion databases first."
LIST_DATABASES_FAILED = "Failed to list databases. Check the sharing settings."

ADMIN_SUBCOMMAND = "listdbs"


class AskmeCommands:
    """Search-and-respond handlers, parameterised by response mode.

    In `list` mode `/askme` replies with up to five matching pages; in `answer`
    mode it summarises the most recently edited match with the LLM.
    """

    def __init__(
        self,
        *,
        workspace: Workspace,
        aggregator: SearchAggregator,
        mode: Literal["list", "answer"] = "list",
        extractor: PageTextExtractor | None = None,
        composer: AnswerComposer | None = None,
        config: SearchConfig | None = None,
        command_name: str = "/askme",
        admin_command_name: str = "/askme-admin",
        admin_user_ids: Iterable[str] = (),
    ) -> None:
        if mode == "answer" and (extractor is None or composer is None):
            raise ValueError("answer mode needs an extractor and a composer")
        self.workspace = workspace
        self.aggregator = aggregator
        self.mode = mode
        self.extractor = extractor
        self.composer = composer
        self.config = config or SearchConfig()
        self.command_name = command_name
        self.admin_command_name = admin_command_name
        self.admin_user_ids = frozenset(admin_user_ids)

    def register(self, registry: CommandRegistry) -> None:
        registry.register(
            CommandSpec(
                name=self.command_name,
                description="Search Notion and reply with matching pages or an answer.",
                handler=self.handle_ask,
            )
        )
        registry.register(
            CommandSpec(
                name=self.admin_command_name,
                description="List the Notion databases shared with the integration.",
                handler=self.handle_admin,
            )
        )

    async def handle_ask(self, invocation: CommandInvocation, respond: Respond) -> None:
        query = invocation.text
        if not query:
            await respond(text=usage_text(self.command_name), response_type="ephemeral")
            return

        if self.mode == "answer":
            await self._answer(query, respond)
        else:
            await self._list(query, respond)

    async def handle_admin(self, invocation: CommandInvocation, respond: Respond) -> None:
        if self.admin_user_ids and invocation.user_id not in self.admin_user_ids:
            await respond(text=NOT_PERMITTED, response_type="ephemeral")
            return
        if invocation.text != ADMIN_SUBCOMMAND:
            await respond(
                text=f"Usage: `{self.admin_command_name} {ADMIN_SUBCOMMAND}`",
                response_type="ephemeral",
            )
            return

        try:
            response = await self.workspace.search(
                {"filter": {"property": "object", "value": "database"}}
            )
        except Exception:
            logger.exception("Listing databases failed")
            await respond(text=LIST_DATABASES_FAILED, response_type="ephemeral")
            return

        databases = [
            DatabaseSummary(id=str(item["id"]), title=database_title(item))
            for item in response.get("results", [])[: self.config.admin_list_limit]
        ]
        if not databases:
            await respond(text=NO_DATABASES, response_type="ephemeral")
            return
        await respond(text=build_database_list_text(databases), response_type="ephemeral")

    async def _list(self, query: str, respond: Respond) -> None:
        try:
            result = await self.aggregator.search(query)
        except Exception:
            logger.exception("Search failed", query=query)
            await respond(text=SEARCH_FAILED, response_type="ephemeral")
            return

        if not result:
            await respond(text=build_not_found_text(query), response_type="in_channel")
            return

        documents = result.documents[: self.config.list_limit]
        await respond(
            text=f"Search results: {query}",
            blocks=build_result_blocks(
                query, documents, summary_chars=self.config.summary_chars
            ),
            response_type="in_channel",
        )

    async def _answer(self, query: str, respond: Respond) -> None:
        extractor, composer = self.extractor, self.composer
        if extractor is None or composer is None:
            raise RuntimeError("answer mode needs an extractor and a composer")
        try:
            document = await self.aggregator.find_latest(query)
            if document is None:
                await respond(text=build_not_found_text(query), response_type="in_channel")
                return

            source_text = await extractor.extract(document.id)
            if not source_text.strip():
                await respond(text=BODY_NOT_RETRIEVABLE, response_type="ephemeral")
                return

            answer = await composer.compose(query, source_text, document.url)
        except Exception:
            logger.exception("Answer generation failed", query=query)
            await respond(text=ANSWER_FAILED, response_type="ephemeral")
            return

        await respond(
            text=f"Answer: {query}",
            blocks=build_answer_blocks(query, document, answer),
            response_type="in_channel",
        )
