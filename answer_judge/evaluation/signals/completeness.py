from __future__ import annotations

from answer_judge.evaluation.signals.base import SignalEvaluator
from answer_judge.evaluation.text import word_count
from answer_judge.evaluation.types import SignalResult, clamp_score


def completeness_feedback(ratio: float) -> str:
    if ratio >= 0.8:
        return "Comprehensive answer with good depth."
    if ratio >= 0.5:
        return "Moderately complete answer. Could be expanded."
    return "Answer seems incomplete. Try to provide more detail."


class CompletenessSignal(SignalEvaluator):
    """Length-ratio proxy for thoroughness; ignores content on purpose."""

    name = "completeness"

    async def evaluate(self, candidate: str, reference: str) -> SignalResult:
        candidate_length = word_count(candidate)
        reference_length = word_count(reference)
        ratio = min(candidate_length / reference_length, 1.0) if reference_length else 1.0

        return SignalResult(
            name=self.name,
            score=clamp_score(ratio * 100),
            feedback=completeness_feedback(ratio),
            details={
                "candidate_length": candidate_length,
                "reference_length": reference_length,
                "length_ratio": ratio,
            },
        )
