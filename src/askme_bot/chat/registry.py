"""Slash-command registry bound onto a Bolt app."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from askme_bot.obs.tracing import CommandTrace, Timer, log_command_trace
from askme_bot.types import CommandInvocation

Respond = Callable[..., Awaitable[Any]]
CommandHandler = Callable[[CommandInvocation, Respond], Awaitable[None]]


class CommandSpec(BaseModel):
    """Declarative slash-command registration."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str = Field(pattern=r"^/\S+$")
    description: str
    handler: CommandHandler


class CommandRegistry:
    """Stores command specs and wires them into a Bolt `AsyncApp`.

    Every bound listener acks before the handler runs, since Slack drops
    commands that are not acknowledged within three seconds.
    """

    def __init__(self) -> None:
        self._commands: dict[str, CommandSpec] = {}
        self._observer: Callable[[CommandTrace], None] | None = log_command_trace

    def register(self, spec: CommandSpec) -> None:
        if spec.name in self._commands:
            raise ValueError(f"Command already registered: {spec.name}")
        self._commands[spec.name] = spec

    def set_observer(self, observer: Callable[[CommandTrace], None] | None) -> None:
        """Set an optional callback invoked after each command completes."""
        self._observer = observer

    def specs(self) -> list[CommandSpec]:
        return list(self._commands.values())

    async def dispatch(self, name: str, invocation: CommandInvocation, respond: Respond) -> None:
        spec = self._commands.get(name)
        if spec is None:
            raise KeyError(f"Unknown command: {name}")

        outcome = "ok"
        timer = Timer()
        try:
            with timer:
                await spec.handler(invocation, respond)
        except Exception:
            outcome = "error"
            raise
        finally:
            self._notify(spec, invocation, timer.elapsed_ms, outcome)

    def bind(self, app: Any) -> None:
        for spec in self._commands.values():
            app.command(spec.name)(self._build_listener(spec))

    def _build_listener(self, spec: CommandSpec) -> Callable[..., Awaitable[None]]:
        async def _listener(ack: Any, command: dict[str, Any], respond: Respond) -> None:
            await ack()
            await self.dispatch(spec.name, CommandInvocation.from_payload(command), respond)

        return _listener

    def _notify(
        self, spec: CommandSpec, invocation: CommandInvocation, latency_ms: float, outcome: str
    ) -> None:
        if self._observer is None:
            return
        self._observer(
            CommandTrace(
                command=spec.name,
                user_id=invocation.user_id,
                channel_id=invocation.channel_id,
                query_preview=invocation.text[:50],
                latency_ms=latency_ms,
                outcome=outcome,
            )
        )
