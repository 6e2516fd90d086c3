"""Per-command timing records."""

from __future__ import annotations

import time
from dataclasses import asdict, dataclass

import structlog

logger = structlog.get_logger(__name__)


@dataclass(slots=True)
class CommandTrace:
    command: str
    user_id: str
    channel_id: str
    query_preview: str
    latency_ms: float
    outcome: str


def log_command_trace(trace: CommandTrace) -> None:
    """Default registry observer: one structured log line per command."""
    log = logger.info if trace.outcome == "ok" else logger.error
    log("Command handled", **asdict(trace))


class Timer:
    """Simple context timer used by the command dispatcher."""

    def __init__(self) -> None:
        self._start = 0.0
        self.elapsed_ms = 0.0

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type: object, exc: object, tb: object) -> None:
        self.elapsed_ms = (time.perf_counter() - self._start) * 1000.0
