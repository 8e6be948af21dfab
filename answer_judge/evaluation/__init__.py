from answer_judge.evaluation.aggregator import ScoreAggregator
from answer_judge.evaluation.breaker import CircuitBreakerState
from answer_judge.evaluation.observers import (
    EvaluationEvent,
    EvaluationObserver,
    EventKind,
    UsageTracker,
)
from answer_judge.evaluation.types import (
    ApiUsage,
    EvaluationMode,
    EvaluationRequest,
    EvaluationResult,
    SignalResult,
    Tier,
)

__all__ = [
    "ApiUsage",
    "CircuitBreakerState",
    "EvaluationEvent",
    "EvaluationMode",
    "EvaluationObserver",
    "EvaluationRequest",
    "EvaluationResult",
    "EventKind",
    "ScoreAggregator",
    "SignalResult",
    "Tier",
    "UsageTracker",
]
