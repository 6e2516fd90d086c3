"""LLM answer generation grounded on a single source page."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

from langchain_core.prompts import ChatPromptTemplate

from askme_bot.answer.retry import RetryPolicy, retry_async
from askme_bot.config import AnswerConfig

FALLBACK_ANSWER = "(The model returned no answer text.)"

_SYSTEM_PROMPT = """
You are an internal documentation assistant answering employee questions in Slack.

Rules:
1) Answer only from the source text provided. Do not speculate or add facts it does not contain.
2) Start with a one-line conclusion.
3) Follow with a structured breakdown as short bullet points (conditions, steps, amounts, exceptions).
4) If the source does not answer the question, say so plainly.
5) End with a citation line exactly like: Source: <url>
""".strip()

_HUMAN_PROMPT = """
Question:
{question}

Source URL: {source_url}

Source text:
{source_text}
""".strip()

ANSWER_PROMPT = ChatPromptTemplate.from_messages(
    [("system", _SYSTEM_PROMPT), ("human", _HUMAN_PROMPT)]
)


def create_chat_model(api_key: str, config: AnswerConfig) -> Any:
    from langchain_openai import ChatOpenAI

    # Retries are owned by RetryPolicy, not the SDK.
    return ChatOpenAI(
        model=config.model,
        temperature=config.temperature,
        api_key=api_key,
        max_retries=0,
        streaming=False,
    )


class AnswerComposer:
    """Sends question + page text to the completion endpoint with rate-limit retries."""

    def __init__(
        self,
        llm: Any,
        *,
        config: AnswerConfig | None = None,
        policy: RetryPolicy | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.llm = llm
        self.config = config or AnswerConfig()
        self.policy = policy or RetryPolicy(
            max_attempts=self.config.max_attempts,
            base_delay=self.config.base_delay_seconds,
        )
        self._sleep = sleep

    async def compose(self, question: str, source_text: str, source_url: str) -> str:
        messages = ANSWER_PROMPT.format_messages(
            question=question,
            source_text=source_text,
            source_url=source_url,
        )

        async def _call() -> Any:
            return await self.llm.ainvoke(messages)

        response = await retry_async(_call, self.policy, sleep=self._sleep)
        return _response_text(response) or FALLBACK_ANSWER


def _response_text(response: Any) -> str:
    content = getattr(response, "content", response)
    if isinstance(content, list):
        parts: list[str] = []
        for item in content:
            if isinstance(item, dict):
                parts.append(str(item.get("text", "")))
            else:
                parts.append(str(item))
        content = "".join(parts)
    return str(content or "").strip()
