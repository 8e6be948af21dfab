from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Awaitable, Callable, Sequence

from answer_judge.errors import SignalFailure
from answer_judge.evaluation.signals.base import SignalEvaluator
from answer_judge.evaluation.types import SignalResult, clamp_score
from answer_judge.services.embedding import embed_text

logger = logging.getLogger(__name__)

Embedder = Callable[[str], Awaitable[Sequence[float]]]


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """dot(a, b) / (|a| * |b|); 0.0 when either vector has zero length.

    Raises:
        SignalFailure: If the vectors are empty or differ in length.
    """
    if not a or not b or len(a) != len(b):
        raise SignalFailure(f"Cannot compare vectors of length {len(a)} and {len(b)}")
    dot = sum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(y * y for y in b))
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return dot / (norm_a * norm_b)


def semantic_feedback(similarity: float) -> str:
    if similarity >= 0.8:
        return "Excellent semantic match! Your answer captures the meaning very well."
    if similarity >= 0.6:
        return "Good semantic understanding. Your answer is on the right track."
    if similarity >= 0.4:
        return "Some semantic similarity detected. Consider focusing on key concepts."
    return "Limited semantic match. Try to align your answer more closely with the expected concepts."


class SemanticSignal(SignalEvaluator):
    """Embedding cosine similarity between candidate and reference.

    Never raises: any embedding or vector problem becomes a zero-score
    failed signal.
    """

    name = "semantic"

    def __init__(self, embed: Embedder | None = None) -> None:
        self._embed = embed or embed_text

    async def evaluate(self, candidate: str, reference: str) -> SignalResult:
        try:
            candidate_vec, reference_vec = await asyncio.gather(
                self._embed(candidate),
                self._embed(reference),
            )
            similarity = cosine_similarity(
                [float(x) for x in candidate_vec],
                [float(x) for x in reference_vec],
            )
        except Exception as exc:
            logger.warning("Semantic evaluation failed: %s", exc)
            return SignalResult.failure(self.name, str(exc))

        return SignalResult(
            name=self.name,
            score=clamp_score(similarity * 100),
            feedback=semantic_feedback(similarity),
            details={"similarity": similarity},
        )
