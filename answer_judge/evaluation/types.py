from __future__ import annotations

import math
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from answer_judge.errors import ValidationError

MAX_LISTED_ITEMS = 5
DEFAULT_THRESHOLD = 70

_EXAMPLE_SPLIT_RE = re.compile(r"[,;\n]+")


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives.

    ``round()`` uses banker's rounding, which turns 62.5 into 62.
    """
    return int(math.floor(value + 0.5))


def clamp_score(value: float) -> int:
    """Round *value* and clamp it to the 0-100 score range."""
    return max(0, min(100, round_half_up(value)))


class EvaluationMode(str, Enum):
    """Kind of answer being judged."""

    DEFINITION = "definition"
    EXAMPLES = "examples"


class Tier(str, Enum):
    """Rung of the fallback ladder that produced a result."""

    REMOTE = "remote"
    MULTI_SIGNAL = "multi_signal"
    TEXT_SIMILARITY = "text_similarity"
    KEYWORD_OVERLAP = "keyword_overlap"


class KeywordCategory(str, Enum):
    """Importance tier of a reference keyword."""

    CRITICAL = "critical"
    IMPORTANT = "important"
    SUPPORTING = "supporting"
    CONTEXT = "context"

    @property
    def weight(self) -> float:
        return KEYWORD_WEIGHTS[self]


KEYWORD_WEIGHTS: dict[KeywordCategory, float] = {
    KeywordCategory.CRITICAL: 0.4,
    KeywordCategory.IMPORTANT: 0.3,
    KeywordCategory.SUPPORTING: 0.2,
    KeywordCategory.CONTEXT: 0.1,
}


@dataclass(frozen=True)
class KeywordMatch:
    """A reference keyword with its importance tier."""

    keyword: str
    category: KeywordCategory


@dataclass(frozen=True)
class EvaluationRequest:
    """Immutable input to every evaluator."""

    candidate_answer: str
    reference_answer: str
    question_text: str = ""
    mode: EvaluationMode = EvaluationMode.DEFINITION
    threshold: int = DEFAULT_THRESHOLD
    reference_examples: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        try:
            mode = EvaluationMode(self.mode)
        except ValueError as exc:
            raise ValidationError(f"Unknown evaluation mode {self.mode!r}") from exc
        object.__setattr__(self, "mode", mode)
        object.__setattr__(self, "reference_examples", tuple(self.reference_examples or ()))

    def examples(self) -> list[str]:
        """Reference examples, falling back to a split of the reference answer."""
        source: Iterable[str] = self.reference_examples or _EXAMPLE_SPLIT_RE.split(
            self.reference_answer or ""
        )
        return [item.strip() for item in source if item and item.strip()]

    def validate(self) -> None:
        """Reject requests that cannot be scored.

        Raises:
            ValidationError: On an empty candidate, a missing reference, or
                a threshold outside 0-100.
        """
        if not (self.candidate_answer or "").strip():
            raise ValidationError("Candidate answer is empty")
        if not 0 <= self.threshold <= 100:
            raise ValidationError(f"Threshold {self.threshold} outside 0-100")
        if self.mode is EvaluationMode.EXAMPLES:
            if not self.examples():
                raise ValidationError("No reference examples to compare against")
        elif not (self.reference_answer or "").strip():
            raise ValidationError("Reference answer is empty")


@dataclass(frozen=True)
class SignalResult:
    """Outcome of one independent scoring signal."""

    name: str
    score: int
    feedback: str
    details: Mapping[str, Any] = field(default_factory=dict)
    failed: bool = False

    @classmethod
    def failure(cls, name: str, reason: str) -> SignalResult:
        """Zero-score placeholder for a signal that could not be computed."""
        return cls(
            name=name,
            score=0,
            feedback=f"Could not perform {name} analysis",
            details={"error": reason},
            failed=True,
        )


@dataclass
class ApiUsage:
    """Token usage for the call that produced a result."""

    model: str
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    @classmethod
    def local(cls, name: str) -> ApiUsage:
        """Usage block for a tier that never leaves the process."""
        return cls(model=name)

    def to_dict(self) -> dict[str, Any]:
        return {
            "model": self.model,
            "promptTokens": self.prompt_tokens,
            "completionTokens": self.completion_tokens,
            "totalTokens": self.total_tokens,
        }


@dataclass(frozen=True)
class EvaluationResult:
    """The one result shape every ladder tier returns.

    Use :meth:`build` rather than the constructor so the score range,
    correctness flag, and list limits always hold.
    """

    score: int
    is_correct: bool
    feedback: str
    similarities: tuple[str, ...]
    missing_concepts: tuple[str, ...]
    suggestions: tuple[str, ...]
    confidence: float
    tier: Tier
    breakdown: dict[str, int] | None = None
    valid_examples: tuple[str, ...] | None = None
    usage: ApiUsage | None = None

    @classmethod
    def build(
        cls,
        *,
        score: float,
        threshold: int,
        feedback: str,
        tier: Tier,
        confidence: float,
        similarities: Iterable[str] = (),
        missing_concepts: Iterable[str] = (),
        suggestions: Iterable[str] = (),
        breakdown: Mapping[str, int] | None = None,
        valid_examples: Iterable[str] | None = None,
        usage: ApiUsage | None = None,
    ) -> EvaluationResult:
        final = clamp_score(score)
        return cls(
            score=final,
            is_correct=final >= threshold,
            feedback=feedback,
            similarities=tuple(similarities)[:MAX_LISTED_ITEMS],
            missing_concepts=tuple(missing_concepts)[:MAX_LISTED_ITEMS],
            suggestions=tuple(suggestions),
            confidence=max(0.0, min(1.0, float(confidence))),
            tier=tier,
            breakdown=dict(breakdown) if breakdown is not None else None,
            valid_examples=tuple(valid_examples) if valid_examples is not None else None,
            usage=usage,
        )

    def to_dict(self) -> dict[str, Any]:
        """Render the camelCase contract consumed by a UI layer."""
        return {
            "score": self.score,
            "isCorrect": self.is_correct,
            "feedback": self.feedback,
            "similarities": list(self.similarities),
            "missingConcepts": list(self.missing_concepts),
            "suggestions": list(self.suggestions),
            "confidence": self.confidence,
            "tier": self.tier.value,
            "breakdown": dict(self.breakdown) if self.breakdown is not None else None,
            "validExamples": list(self.valid_examples) if self.valid_examples is not None else None,
            "apiUsage": self.usage.to_dict() if self.usage is not None else None,
        }
