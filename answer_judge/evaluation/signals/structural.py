from __future__ import annotations

from answer_judge.evaluation.signals.base import SignalEvaluator
from answer_judge.evaluation.text import StructureProfile, analyze_structure
from answer_judge.evaluation.types import SignalResult, clamp_score

BASE_SCORE = 50
SENTENCE_POINTS = 20
FLOW_POINTS = 15
DEFINITION_POINTS = 15


def structure_score(candidate: StructureProfile, reference: StructureProfile) -> int:
    """Base 50, up to +20 for sentence coverage, +15 flow, +15 shared definitions."""
    if reference.sentences:
        sentence_ratio = min(candidate.sentences / reference.sentences, 1.0)
    else:
        sentence_ratio = 1.0

    score = BASE_SCORE + sentence_ratio * SENTENCE_POINTS
    if candidate.has_flow_indicators:
        score += FLOW_POINTS
    if candidate.has_definitions and reference.has_definitions:
        score += DEFINITION_POINTS
    return clamp_score(score)


def structure_feedback(candidate: StructureProfile, reference: StructureProfile) -> str:
    if candidate.has_flow_indicators:
        return "Well-structured answer with good flow."
    if candidate.sentences >= reference.sentences * 0.7:
        return "Adequate structure and length."
    return "Consider expanding your answer and improving organization."


class StructuralSignal(SignalEvaluator):
    name = "structural"

    async def evaluate(self, candidate: str, reference: str) -> SignalResult:
        candidate_profile = analyze_structure(candidate)
        reference_profile = analyze_structure(reference)
        return SignalResult(
            name=self.name,
            score=structure_score(candidate_profile, reference_profile),
            feedback=structure_feedback(candidate_profile, reference_profile),
            details={"candidate": candidate_profile, "reference": reference_profile},
        )
