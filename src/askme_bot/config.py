"""Configuration models and environment-backed settings."""

from __future__ import annotations

from typing import Literal

import structlog
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = structlog.get_logger(__name__)

_SLACK_AND_NOTION = (
    "SLACK_BOT_TOKEN",
    "SLACK_SIGNING_SECRET",
    "SLACK_APP_TOKEN",
    "NOTION_TOKEN",
)

REQUIRED_ENV: dict[str, tuple[str, ...]] = {
    "list": (*_SLACK_AND_NOTION, "NOTION_DB_ALLOWLIST"),
    "answer": (*_SLACK_AND_NOTION, "OPENAI_API_KEY"),
}


class SearchConfig(BaseModel):
    """Configures database querying and result listing."""

    max_tokens: int = Field(default=5, ge=1)
    page_size: int = Field(default=10, ge=1, le=100)
    list_limit: int = Field(default=5, ge=1)
    summary_chars: int = Field(default=180, ge=1)
    published_value: str = "Published"
    admin_list_limit: int = Field(default=20, ge=1)


class ExtractionConfig(BaseModel):
    """Configures page body flattening for answer mode."""

    char_budget: int = Field(default=8000, ge=1)
    block_page_size: int = Field(default=100, ge=1, le=100)


class AnswerConfig(BaseModel):
    """Configures the completion call and its rate-limit retries."""

    model: str = "gpt-4o-mini"
    temperature: float = Field(default=0.2, ge=0.0, le=2.0)
    max_attempts: int = Field(default=3, ge=1)
    base_delay_seconds: float = Field(default=1.5, ge=0.0)


class BotSettings(BaseSettings):
    """Process settings read once at startup from the environment or `.env`."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    slack_bot_token: str = ""
    slack_signing_secret: str = ""
    slack_app_token: str = ""
    notion_token: str = ""
    notion_db_allowlist: str = ""
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"

    askme_mode: Literal["list", "answer"] = "list"
    askme_command: str = "/askme"
    askme_admin_command: str = "/askme-admin"
    askme_admin_user_ids: str = ""

    port: int = 3000
    log_level: str = "INFO"
    log_format: Literal["console", "json"] = "console"

    @property
    def allowlist(self) -> tuple[str, ...]:
        return _split_csv(self.notion_db_allowlist)

    @property
    def admin_user_ids(self) -> frozenset[str]:
        return frozenset(_split_csv(self.askme_admin_user_ids))

    def answer_config(self) -> AnswerConfig:
        return AnswerConfig(model=self.openai_model)


def missing_settings(settings: BotSettings) -> list[str]:
    """Return the environment names required by the configured mode that are blank."""
    return [
        name
        for name in REQUIRED_ENV[settings.askme_mode]
        if not str(getattr(settings, name.lower())).strip()
    ]


def load_settings(settings: BotSettings | None = None) -> BotSettings:
    """Validate settings for the configured mode and halt when values are absent."""
    settings = settings or BotSettings()
    missing = missing_settings(settings)
    logger.info(
        "env_check",
        mode=settings.askme_mode,
        **{
            name: "MISSING" if name in missing else "OK"
            for name in REQUIRED_ENV[settings.askme_mode]
        },
    )
    if missing:
        logger.error("missing_env", missing=missing)
        raise SystemExit(1)
    return settings


def _split_csv(raw: str) -> tuple[str, ...]:
    return tuple(part.strip() for part in raw.split(",") if part.strip())
