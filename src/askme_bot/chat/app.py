"""Bolt app assembly for Socket Mode."""

from __future__ import annotations

from dataclasses import dataclass

import structlog
from slack_bolt.adapter.socket_mode.async_handler import AsyncSocketModeHandler
from slack_bolt.async_app import AsyncApp

from askme_bot.answer.composer import AnswerComposer, create_chat_model
from askme_bot.answer.extractor import PageTextExtractor
from askme_bot.chat.commands import AskmeCommands
from askme_bot.chat.registry import CommandRegistry
from askme_bot.config import BotSettings, ExtractionConfig, SearchConfig
from askme_bot.search.aggregator import SearchAggregator
from askme_bot.workspace.client import NotionClient

logger = structlog.get_logger(__name__)


@dataclass(slots=True)
class BotRuntime:
    """Long-lived objects shared by every command invocation."""

    app: AsyncApp
    workspace: NotionClient
    registry: CommandRegistry

    async def start(self, app_token: str) -> None:
        handler = AsyncSocketModeHandler(self.app, app_token)
        logger.info("Starting Slack bot via Socket Mode", commands=[s.name for s in self.registry.specs()])
        await handler.start_async()

    async def aclose(self) -> None:
        await self.workspace.aclose()


def build_commands(
    settings: BotSettings,
    workspace: NotionClient,
    *,
    search_config: SearchConfig | None = None,
) -> AskmeCommands:
    search_config = search_config or SearchConfig()
    aggregator = SearchAggregator(workspace, settings.allowlist, config=search_config)

    extractor = None
    composer = None
    if settings.askme_mode == "answer":
        answer_config = settings.answer_config()
        extractor = PageTextExtractor(workspace, ExtractionConfig())
        composer = AnswerComposer(
            create_chat_model(settings.openai_api_key, answer_config),
            config=answer_config,
        )

    return AskmeCommands(
        workspace=workspace,
        aggregator=aggregator,
        mode=settings.askme_mode,
        extractor=extractor,
        composer=composer,
        config=search_config,
        command_name=settings.askme_command,
        admin_command_name=settings.askme_admin_command,
        admin_user_ids=settings.admin_user_ids,
    )


def create_bot(settings: BotSettings) -> BotRuntime:
    app = AsyncApp(
        token=settings.slack_bot_token,
        signing_secret=settings.slack_signing_secret,
    )
    workspace = NotionClient(settings.notion_token)

    registry = CommandRegistry()
    build_commands(settings, workspace).register(registry)
    registry.bind(app)

    logger.info("Slack bot initialized", mode=settings.askme_mode, databases=len(settings.allowlist))
    return BotRuntime(app=app, workspace=workspace, registry=registry)
