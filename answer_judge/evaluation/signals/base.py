from __future__ import annotations

from abc import ABC, abstractmethod

from answer_judge.evaluation.types import SignalResult


class SignalEvaluator(ABC):
    """Abstract base class for one independent scoring dimension."""

    name: str

    @abstractmethod
    async def evaluate(self, candidate: str, reference: str) -> SignalResult:
        """Score *candidate* against *reference* on this signal's dimension.

        Args:
            candidate: The learner's (voice-transcribed) answer.
            reference: The expected answer.
        """
