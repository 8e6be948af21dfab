"""Explicit telemetry side channel for the fallback ladder.

Observers are handed to the orchestrator as configuration; nothing is
broadcast implicitly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from threading import Lock
from typing import Any, Protocol

from answer_judge.evaluation.types import ApiUsage

logger = logging.getLogger(__name__)


class EventKind(str, Enum):
    REQUEST = "request"
    RESPONSE = "response"
    ERROR = "error"
    BYPASS = "bypass"
    FALLBACK = "fallback"
    USAGE = "usage"


@dataclass(frozen=True)
class EvaluationEvent:
    """One notable step of an evaluation."""

    kind: EventKind
    message: str
    request_id: str = ""
    data: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))


class EvaluationObserver(Protocol):
    """Receives ladder events. Must not block; exceptions are logged and dropped."""

    def on_event(self, event: EvaluationEvent) -> None: ...


def notify(observers: tuple[EvaluationObserver, ...], event: EvaluationEvent) -> None:
    """Deliver *event* to every observer, isolating observer failures."""
    for observer in observers:
        try:
            observer.on_event(event)
        except Exception:
            logger.warning(
                "Observer %r failed on %s event", observer, event.kind.value, exc_info=True
            )


@dataclass
class UsageTotals:
    total_requests: int = 0
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0
    last_request: datetime | None = None


class UsageTracker:
    """Accumulates remote-call usage across evaluations. Thread-safe."""

    def __init__(self) -> None:
        self._totals = UsageTotals()
        self._lock = Lock()

    def on_event(self, event: EvaluationEvent) -> None:
        if event.kind is not EventKind.USAGE:
            return
        usage = event.data.get("usage")
        if not isinstance(usage, ApiUsage):
            return
        with self._lock:
            self._totals.total_requests += 1
            self._totals.prompt_tokens += usage.prompt_tokens
            self._totals.completion_tokens += usage.completion_tokens
            self._totals.total_tokens += usage.total_tokens
            self._totals.last_request = event.timestamp

    def snapshot(self) -> UsageTotals:
        with self._lock:
            t = self._totals
            return UsageTotals(
                total_requests=t.total_requests,
                prompt_tokens=t.prompt_tokens,
                completion_tokens=t.completion_tokens,
                total_tokens=t.total_tokens,
                last_request=t.last_request,
            )

    def reset(self) -> None:
        with self._lock:
            self._totals = UsageTotals()
