"""Slack slash-command bot answering from a Notion workspace."""

from .config import AnswerConfig, BotSettings, ExtractionConfig, SearchConfig

__all__ = ["AnswerConfig", "BotSettings", "ExtractionConfig", "SearchConfig"]
