"""Three-tier fallback ladder for answer evaluation.

Tier 1 asks the remote judge. Tier 2 scores locally against the whole
reference (multi-signal aggregator, or plain text similarity). Tier 3 is the
keyword / example overlap that always produces a result.
"""

from __future__ import annotations

import logging
import random
import uuid
from collections.abc import Iterable
from enum import Enum
from typing import Protocol

from opentelemetry import trace

from answer_judge.config.settings import Settings, get_settings
from answer_judge.config.telemetry import clear_correlation_context, set_correlation_context
from answer_judge.errors import ContractViolation, TransportError
from answer_judge.evaluation.aggregator import ScoreAggregator
from answer_judge.evaluation.breaker import CircuitBreakerState
from answer_judge.evaluation.fallbacks import (
    last_resort_evaluation,
    text_similarity_available,
    text_similarity_evaluation,
)
from answer_judge.evaluation.observers import (
    EvaluationEvent,
    EvaluationObserver,
    EventKind,
    notify,
)
from answer_judge.evaluation.types import (
    EvaluationMode,
    EvaluationRequest,
    EvaluationResult,
    Tier,
)
from answer_judge.judge.client import RemoteJudge, parse_verdict
from answer_judge.judge.schemas import JudgeResponse

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

COMPLETE_CONFIDENCE = 0.9
TRUNCATED_CONFIDENCE = 0.5
DEFAULT_REMOTE_SUGGESTIONS: tuple[str, ...] = (
    "Try including key terms from the definition",
    "Be more specific in your answer",
)


class Judge(Protocol):
    """What the ladder needs from a remote judge."""

    @property
    def has_credential(self) -> bool: ...

    def set_api_key(self, api_key: str | None) -> None: ...

    async def complete(self, request: EvaluationRequest) -> JudgeResponse: ...


# ---------------------------------------------------------------------------
# Ladder state machine
# ---------------------------------------------------------------------------


class LadderState(str, Enum):
    IDLE = "idle"
    AWAITING_REMOTE = "awaiting_remote"
    PARSING_REMOTE = "parsing_remote"
    FALLBACK2 = "fallback2"
    FALLBACK3 = "fallback3"
    DONE = "done"


_TRANSITIONS: dict[LadderState, frozenset[LadderState]] = {
    LadderState.IDLE: frozenset(
        {LadderState.AWAITING_REMOTE, LadderState.FALLBACK2, LadderState.FALLBACK3}
    ),
    LadderState.AWAITING_REMOTE: frozenset(
        {LadderState.PARSING_REMOTE, LadderState.FALLBACK2, LadderState.FALLBACK3}
    ),
    LadderState.PARSING_REMOTE: frozenset(
        {LadderState.DONE, LadderState.FALLBACK2, LadderState.FALLBACK3}
    ),
    LadderState.FALLBACK2: frozenset({LadderState.DONE}),
    LadderState.FALLBACK3: frozenset({LadderState.DONE}),
    LadderState.DONE: frozenset(),
}


class LadderStateMachine:
    """Tracks one evaluation's position on the ladder.

    Every move is checked against the transition table; an illegal move is a
    programming error and raises ``RuntimeError``.
    """

    def __init__(self) -> None:
        self.state = LadderState.IDLE
        self.history: list[LadderState] = [LadderState.IDLE]

    @staticmethod
    def can_transition(source: LadderState, target: LadderState) -> bool:
        return target in _TRANSITIONS[source]

    def transition(self, target: LadderState) -> None:
        if not self.can_transition(self.state, target):
            raise RuntimeError(
                f"Illegal ladder transition {self.state.value} -> {target.value}"
            )
        self.state = target
        self.history.append(target)


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------


class EvaluationOrchestrator:
    """Scores answers by walking the fallback ladder.

    The breaker is shared across evaluations: after ``breaker.threshold``
    consecutive remote failures tier 1 is bypassed until a success,
    :meth:`install_credential` or :meth:`reset_failures`.

    Only :class:`~answer_judge.errors.ValidationError` escapes
    :meth:`evaluate`; every other failure moves the ladder down a tier.
    """

    def __init__(
        self,
        judge: Judge | None,
        *,
        breaker: CircuitBreakerState | None = None,
        aggregator: ScoreAggregator | None = None,
        observers: Iterable[EvaluationObserver] = (),
        rng: random.Random | None = None,
    ) -> None:
        self._judge = judge
        self._breaker = breaker or CircuitBreakerState()
        self._aggregator = aggregator
        self._observers = tuple(observers)
        self._rng = rng or random.Random()

    @property
    def breaker(self) -> CircuitBreakerState:
        return self._breaker

    def install_credential(self, api_key: str | None) -> None:
        """Swap the judge's credential and give tier 1 a fresh start."""
        if self._judge is None:
            self._judge = RemoteJudge(api_key)
        else:
            self._judge.set_api_key(api_key)
        self._breaker.reset()

    def reset_failures(self) -> None:
        self._breaker.reset()

    def _emit(self, kind: EventKind, message: str, request_id: str, **data: object) -> None:
        notify(self._observers, EvaluationEvent(kind, message, request_id, dict(data)))

    async def evaluate(self, request: EvaluationRequest) -> EvaluationResult:
        """Score *request*, always returning a result.

        Raises:
            ValidationError: If the request cannot be scored at all.
        """
        request.validate()

        request_id = uuid.uuid4().hex
        set_correlation_context(request_id=request_id, mode=request.mode.value, tier="")
        try:
            with tracer.start_as_current_span("answer_judge.evaluate") as span:
                span.set_attribute("answer_judge.request_id", request_id)
                span.set_attribute("answer_judge.mode", request.mode.value)
                result = await self._walk(request, request_id)
                span.set_attribute("answer_judge.tier", result.tier.value)
                span.set_attribute("answer_judge.score", result.score)
                return result
        finally:
            clear_correlation_context()

    async def _walk(self, request: EvaluationRequest, request_id: str) -> EvaluationResult:
        ladder = LadderStateMachine()

        if self._judge is not None and self._judge.has_credential:
            if self._breaker.is_open:
                logger.info(
                    "Remote judge bypassed after %d consecutive failures",
                    self._breaker.failures,
                )
                self._emit(
                    EventKind.BYPASS,
                    "Remote judge bypassed",
                    request_id,
                    failures=self._breaker.failures,
                )
            else:
                result = await self._try_remote(request, request_id, ladder)
                if result is not None:
                    ladder.transition(LadderState.DONE)
                    return result

        result = await self._fall_back(request, request_id, ladder)
        ladder.transition(LadderState.DONE)
        return result

    async def _try_remote(
        self,
        request: EvaluationRequest,
        request_id: str,
        ladder: LadderStateMachine,
    ) -> EvaluationResult | None:
        assert self._judge is not None
        ladder.transition(LadderState.AWAITING_REMOTE)
        set_correlation_context(tier=Tier.REMOTE.value)
        self._emit(EventKind.REQUEST, "Remote judge request", request_id, mode=request.mode.value)

        try:
            response = await self._judge.complete(request)
        except (TransportError, ContractViolation) as exc:
            self._record_remote_failure(exc, request_id)
            return None
        except Exception as exc:
            logger.exception("Unexpected remote judge error")
            self._record_remote_failure(exc, request_id)
            return None

        ladder.transition(LadderState.PARSING_REMOTE)
        self._emit(
            EventKind.RESPONSE,
            "Remote judge response",
            request_id,
            finish_reason=response.finish_reason,
        )
        self._emit(EventKind.USAGE, "Remote judge usage", request_id, usage=response.usage)

        try:
            verdict = parse_verdict(response.content)
        except ContractViolation as exc:
            self._record_remote_failure(exc, request_id)
            return None

        self._breaker.record_success()

        valid_examples = None
        if request.mode is EvaluationMode.EXAMPLES:
            valid_examples = verdict.valid_examples or []

        return EvaluationResult.build(
            score=verdict.score,
            threshold=request.threshold,
            feedback=verdict.feedback,
            tier=Tier.REMOTE,
            confidence=(
                COMPLETE_CONFIDENCE if response.finish_reason == "stop" else TRUNCATED_CONFIDENCE
            ),
            similarities=verdict.similarities or [],
            missing_concepts=verdict.missing_concepts or [],
            suggestions=verdict.suggestions or DEFAULT_REMOTE_SUGGESTIONS,
            valid_examples=valid_examples,
            usage=response.usage,
        )

    def _record_remote_failure(self, exc: Exception, request_id: str) -> None:
        failures = self._breaker.record_failure()
        logger.warning("Remote judge failed (%d in a row): %s", failures, exc)
        self._emit(
            EventKind.ERROR,
            str(exc),
            request_id,
            error_type=type(exc).__name__,
            failures=failures,
        )

    async def _fall_back(
        self,
        request: EvaluationRequest,
        request_id: str,
        ladder: LadderStateMachine,
    ) -> EvaluationResult:
        if text_similarity_available(request):
            ladder.transition(LadderState.FALLBACK2)
            set_correlation_context(tier=Tier.TEXT_SIMILARITY.value)
            result = await self._second_tier(request)
            message = "Local fallback used"
        else:
            ladder.transition(LadderState.FALLBACK3)
            set_correlation_context(tier=Tier.KEYWORD_OVERLAP.value)
            result = last_resort_evaluation(request, self._rng)
            message = "Last-resort fallback used"

        logger.info("%s: %s scored %d", message, result.tier.value, result.score)
        self._emit(EventKind.FALLBACK, message, request_id, tier=result.tier.value)
        return result

    async def _second_tier(self, request: EvaluationRequest) -> EvaluationResult:
        if self._aggregator is None:
            return text_similarity_evaluation(request)
        try:
            return await self._aggregator.evaluate(request)
        except Exception:
            logger.warning("Multi-signal scoring failed; using text similarity", exc_info=True)
            return text_similarity_evaluation(request)


def build_orchestrator(
    settings: Settings | None = None,
    *,
    observers: Iterable[EvaluationObserver] = (),
) -> EvaluationOrchestrator:
    """Wire an orchestrator from settings."""
    settings = settings or get_settings()

    judge = RemoteJudge(settings=settings) if settings.has_credential else None
    aggregator = (
        ScoreAggregator(signal_timeout=settings.SIGNAL_TIMEOUT)
        if settings.MULTI_SIGNAL_ENABLED
        else None
    )
    rng = (
        random.Random(settings.FALLBACK_RANDOM_SEED)
        if settings.FALLBACK_RANDOM_SEED is not None
        else random.Random()
    )
    return EvaluationOrchestrator(
        judge,
        breaker=CircuitBreakerState(settings.FAILURE_THRESHOLD),
        aggregator=aggregator,
        observers=observers,
        rng=rng,
    )
