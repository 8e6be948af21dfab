from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping, Sequence

from answer_judge.config.settings import get_settings
from answer_judge.evaluation.signals import (
    CompletenessSignal,
    LexicalSignal,
    SemanticSignal,
    SignalEvaluator,
    StructuralSignal,
)
from answer_judge.evaluation.types import (
    ApiUsage,
    EvaluationRequest,
    EvaluationResult,
    KeywordCategory,
    SignalResult,
    Tier,
    clamp_score,
)

logger = logging.getLogger(__name__)

SIGNAL_WEIGHTS: dict[str, float] = {
    "semantic": 0.4,
    "lexical": 0.3,
    "structural": 0.15,
    "completeness": 0.15,
}

SUGGESTION_CUTOFF = 60

_SUGGESTIONS: dict[str, str] = {
    "semantic": "Focus on the core concepts and their relationships to show semantic understanding",
    "lexical": "Include more specific technical terminology",
    "structural": "Organize your answer with clear logical flow",
    "completeness": "Provide more detailed explanations and examples for depth",
}

# (lower bound, message), checked top-down.
_FEEDBACK_BANDS: tuple[tuple[int, str], ...] = (
    (90, "Outstanding answer! You demonstrate excellent understanding."),
    (80, "Very good answer! Minor improvements could make it perfect."),
    (70, "Good answer! You understand the main concepts well."),
    (60, "Decent answer with room for improvement. Focus on key concepts."),
    (50, "Basic understanding shown. More practice needed."),
)
_NEEDS_MAJOR_IMPROVEMENT = "Significant improvement needed. Review the material and try again."


def overall_feedback(score: int) -> str:
    for lower_bound, message in _FEEDBACK_BANDS:
        if score >= lower_bound:
            return message
    return _NEEDS_MAJOR_IMPROVEMENT


def weighted_score(signals: Mapping[str, SignalResult]) -> float:
    """Weighted sum of the signal scores; a missing signal counts as zero."""
    return sum(
        weight * (signals[name].score if name in signals else 0)
        for name, weight in SIGNAL_WEIGHTS.items()
    )


def variance(scores: Sequence[float]) -> float:
    """Population variance."""
    if not scores:
        return 0.0
    mean = sum(scores) / len(scores)
    return sum((s - mean) ** 2 for s in scores) / len(scores)


def calculate_confidence(scores: Sequence[float]) -> float:
    """Agreement between signals times their average level, in [0, 1].

    Disagreement (high variance) and low scores each pull confidence down
    independently.
    """
    if not scores:
        return 0.0
    consistency = max(0.0, 1 - variance(scores) / 1000)
    average = (sum(scores) / len(scores)) / 100
    return max(0.0, min(1.0, consistency * average))


def extract_similarities(lexical: SignalResult) -> list[str]:
    return [f'Used key term: "{m.keyword}"' for m in lexical.details.get("found", ())]


def extract_missing_concepts(lexical: SignalResult) -> list[str]:
    """Missed critical/important terms only; supporting-tier gaps stay silent."""
    surfaced = {KeywordCategory.CRITICAL, KeywordCategory.IMPORTANT}
    return [
        f'Missing: "{m.keyword}"'
        for m in lexical.details.get("missing", ())
        if m.category in surfaced
    ]


def generate_suggestions(signals: Mapping[str, SignalResult]) -> list[str]:
    return [
        _SUGGESTIONS[name]
        for name in SIGNAL_WEIGHTS
        if name in signals and signals[name].score < SUGGESTION_CUTOFF
    ]


class ScoreAggregator:
    """Multi-signal local scorer.

    Runs the semantic, lexical, structural and completeness signals
    concurrently and folds them into one :class:`EvaluationResult`. A signal
    that raises or exceeds ``signal_timeout`` is replaced by a zero-score
    placeholder; the others are unaffected.
    """

    def __init__(
        self,
        *,
        semantic: SignalEvaluator | None = None,
        lexical: SignalEvaluator | None = None,
        structural: SignalEvaluator | None = None,
        completeness: SignalEvaluator | None = None,
        signal_timeout: float | None = None,
    ) -> None:
        self._signals: tuple[SignalEvaluator, ...] = (
            semantic or SemanticSignal(),
            lexical or LexicalSignal(),
            structural or StructuralSignal(),
            completeness or CompletenessSignal(),
        )
        self._signal_timeout = signal_timeout

    async def _run_signal(
        self, signal: SignalEvaluator, candidate: str, reference: str, timeout: float
    ) -> SignalResult:
        try:
            return await asyncio.wait_for(signal.evaluate(candidate, reference), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning("Signal %s timed out after %.1fs", signal.name, timeout)
            return SignalResult.failure(signal.name, f"timed out after {timeout}s")
        except Exception as exc:
            logger.warning("Signal %s failed", signal.name, exc_info=True)
            return SignalResult.failure(signal.name, str(exc))

    async def run_signals(self, candidate: str, reference: str) -> dict[str, SignalResult]:
        """Evaluate every signal concurrently and join on all of them."""
        timeout = self._signal_timeout or get_settings().SIGNAL_TIMEOUT
        results = await asyncio.gather(
            *(self._run_signal(s, candidate, reference, timeout) for s in self._signals)
        )
        return {signal.name: result for signal, result in zip(self._signals, results)}

    async def evaluate(self, request: EvaluationRequest) -> EvaluationResult:
        """Score *request* with all signals.

        Raises:
            ValidationError: If the request cannot be scored.
        """
        request.validate()
        signals = await self.run_signals(request.candidate_answer, request.reference_answer)

        final = clamp_score(weighted_score(signals))
        lexical = signals.get("lexical") or SignalResult.failure("lexical", "not configured")
        breakdown = {name: signals[name].score for name in SIGNAL_WEIGHTS if name in signals}
        # Failed signals lower the score but say nothing about agreement.
        healthy_scores = [s.score for s in signals.values() if not s.failed]

        result = EvaluationResult.build(
            score=final,
            threshold=request.threshold,
            feedback=overall_feedback(final),
            tier=Tier.MULTI_SIGNAL,
            confidence=calculate_confidence(healthy_scores),
            similarities=extract_similarities(lexical),
            missing_concepts=extract_missing_concepts(lexical),
            suggestions=generate_suggestions(signals),
            breakdown=breakdown,
            usage=ApiUsage.local("multi-signal"),
        )
        logger.debug("Multi-signal breakdown %s -> %d", breakdown, result.score)
        return result
