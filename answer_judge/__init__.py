"""Graded answer evaluation with a remote judge and local fallbacks."""

from answer_judge.config.telemetry import configure_telemetry
from answer_judge.errors import ContractViolation, SignalFailure, TransportError, ValidationError
from answer_judge.evaluation.orchestrator import EvaluationOrchestrator, build_orchestrator
from answer_judge.evaluation.types import EvaluationMode, EvaluationRequest, EvaluationResult

__all__ = [
    "ContractViolation",
    "EvaluationMode",
    "EvaluationOrchestrator",
    "EvaluationRequest",
    "EvaluationResult",
    "SignalFailure",
    "TransportError",
    "ValidationError",
    "build_orchestrator",
    "configure_telemetry",
]
