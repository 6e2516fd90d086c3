"""Process entrypoint: `python -m askme_bot` or the `askme-bot` script."""

from __future__ import annotations

import asyncio

import structlog
import uvicorn

from askme_bot.api.main import create_health_app
from askme_bot.chat.app import create_bot
from askme_bot.config import BotSettings, load_settings
from askme_bot.obs.logs import configure_logging

logger = structlog.get_logger(__name__)


async def serve(settings: BotSettings) -> None:
    bot = create_bot(settings)
    health = uvicorn.Server(
        uvicorn.Config(
            create_health_app(),
            host="0.0.0.0",
            port=settings.port,
            log_level=settings.log_level.lower(),
        )
    )
    logger.info("Health server listening", port=settings.port)
    try:
        await asyncio.gather(bot.start(settings.slack_app_token), health.serve())
    finally:
        await bot.aclose()


def main() -> None:
    settings = BotSettings()
    configure_logging(settings.log_level, settings.log_format)
    asyncio.run(serve(load_settings(settings)))


if __name__ == "__main__":
    main()
