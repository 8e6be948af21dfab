"""Local fallback tiers used when the remote judge is unavailable.

Tier 2 compares whole texts (Jaccard word overlap plus a length bonus).
Tier 3 is the last resort: plain keyword overlap for definitions, and
reference-example spotting for examples mode.
"""

from __future__ import annotations

import random

from answer_judge.evaluation.text import normalize_compact, words
from answer_judge.evaluation.types import (
    ApiUsage,
    EvaluationMode,
    EvaluationRequest,
    EvaluationResult,
    Tier,
    round_half_up,
)

TEXT_SIMILARITY_CONFIDENCE = 0.8
KEYWORD_OVERLAP_CONFIDENCE = 0.6
NO_KEYWORDS_CONFIDENCE = 0.3
EXAMPLES_CONFIDENCE = 0.6

JACCARD_WEIGHT = 0.7
LENGTH_WEIGHT = 0.3

# Generic brands and devices that are not AI systems in their own right.
NON_AI_TERMS: tuple[str, ...] = (
    "iphone", "microsoft", "apple", "google company", "facebook company",
    "amazon company", "computer", "laptop", "phone",
)
NON_AI_MAX_SCORE = 10
EXAMPLES_MAX_SCORE = 90
EXAMPLES_TRYING_SCORE = 20


# ---------------------------------------------------------------------------
# Tier 2 - text similarity
# ---------------------------------------------------------------------------


def text_similarity(text1: str, text2: str) -> float:
    """0.7 x Jaccard word overlap + 0.3 x character length ratio.

    Identical normalized texts score exactly 1.0.
    """
    t1 = normalize_compact(text1)
    t2 = normalize_compact(text2)
    if t1 == t2:
        return 1.0

    words1 = set(t1.split())
    words2 = set(t2.split())
    union = words1 | words2
    jaccard = len(words1 & words2) / len(union) if union else 0.0

    longest = max(len(t1), len(t2))
    length_ratio = min(len(t1), len(t2)) / longest if longest else 0.0

    return jaccard * JACCARD_WEIGHT + length_ratio * LENGTH_WEIGHT


def text_similarity_available(request: EvaluationRequest) -> bool:
    """Tier 2 only makes sense for a definition with real words on both sides."""
    return (
        request.mode is EvaluationMode.DEFINITION
        and bool(normalize_compact(request.candidate_answer))
        and bool(normalize_compact(request.reference_answer))
    )


def text_similarity_evaluation(request: EvaluationRequest) -> EvaluationResult:
    score = round_half_up(text_similarity(request.candidate_answer, request.reference_answer) * 100)
    passed = score >= request.threshold
    if passed:
        feedback = f"Great! {score}% similarity to expected definition."
        suggestions = ["Well done!"]
    else:
        feedback = f"Partial match ({score}%). Include more key concepts from the definition."
        suggestions = ["Include more key terms", "Use terminology from the definition"]

    return EvaluationResult.build(
        score=score,
        threshold=request.threshold,
        feedback=feedback,
        tier=Tier.TEXT_SIMILARITY,
        confidence=TEXT_SIMILARITY_CONFIDENCE,
        suggestions=suggestions,
        usage=ApiUsage.local("text-similarity-fallback"),
    )


# ---------------------------------------------------------------------------
# Tier 3 - keyword overlap
# ---------------------------------------------------------------------------


def _reference_keywords(text: str) -> list[str]:
    return list(dict.fromkeys(w for w in words(text) if len(w) > 3))


def _mentions(keyword: str, candidate_words: list[str]) -> bool:
    return any(w in keyword or keyword in w for w in candidate_words)


def keyword_overlap_evaluation(request: EvaluationRequest) -> EvaluationResult:
    """Fraction of reference keywords that the candidate mentions."""
    keywords = _reference_keywords(request.reference_answer)
    if not keywords:
        return EvaluationResult.build(
            score=0,
            threshold=request.threshold,
            feedback="Could not extract key concepts from the reference answer.",
            tier=Tier.KEYWORD_OVERLAP,
            confidence=NO_KEYWORDS_CONFIDENCE,
            suggestions=["Try again or check the expected answer"],
            usage=ApiUsage.local("keyword-overlap-fallback"),
        )

    # Very short candidate words would be "contained" in almost any keyword.
    candidate_words = [w for w in words(request.candidate_answer) if len(w) >= 3]
    matched = [k for k in keywords if _mentions(k, candidate_words)]
    missing = [k for k in keywords if k not in matched]

    score = round_half_up(len(matched) / len(keywords) * 100)
    return EvaluationResult.build(
        score=score,
        threshold=request.threshold,
        feedback="Good answer!" if score >= request.threshold else "Try to include more key concepts.",
        tier=Tier.KEYWORD_OVERLAP,
        confidence=KEYWORD_OVERLAP_CONFIDENCE,
        similarities=[f"Mentioned: {k}" for k in matched],
        missing_concepts=[f"Missing: {k}" for k in missing],
        suggestions=["Try to use more specific terminology", "Include examples if possible"],
        usage=ApiUsage.local("keyword-overlap-fallback"),
    )


def _example_terms(example: str) -> list[str]:
    terms = [w for w in example.lower().split() if len(w) >= 3]
    return terms or [example.lower().strip()]


def examples_overlap_evaluation(
    request: EvaluationRequest,
    rng: random.Random | None = None,
) -> EvaluationResult:
    """Count reference examples the candidate names.

    With no matches, a candidate naming only generic brands or devices gets
    a random score below ``NON_AI_MAX_SCORE``; pass a seeded *rng* for
    reproducible results.
    """
    rng = rng or random.Random()
    user_text = request.candidate_answer.lower()
    examples = request.examples()

    matched = [e for e in examples if any(t in user_text for t in _example_terms(e))]
    has_non_ai_terms = any(term in user_text for term in NON_AI_TERMS)

    if not matched and has_non_ai_terms:
        score = rng.random() * NON_AI_MAX_SCORE
    elif matched:
        score = min(EXAMPLES_MAX_SCORE, len(matched) / len(examples) * 80 + 20)
    else:
        score = EXAMPLES_TRYING_SCORE

    if matched:
        feedback = (
            f"Found {len(matched)} relevant AI examples. "
            "Try to provide more specific examples."
        )
    else:
        feedback = (
            "Examples must be specific AI systems or applications, "
            "not generic tech brands or devices."
        )

    return EvaluationResult.build(
        score=score,
        threshold=request.threshold,
        feedback=feedback,
        tier=Tier.KEYWORD_OVERLAP,
        confidence=EXAMPLES_CONFIDENCE,
        similarities=[f"Mentioned: {e}" for e in matched],
        suggestions=["Try Siri, Google Search, Netflix recommendations, Tesla Autopilot"],
        valid_examples=matched,
        usage=ApiUsage.local("basic-examples-fallback"),
    )


def last_resort_evaluation(
    request: EvaluationRequest,
    rng: random.Random | None = None,
) -> EvaluationResult:
    """Tier 3 for either mode."""
    if request.mode is EvaluationMode.EXAMPLES:
        return examples_overlap_evaluation(request, rng)
    return keyword_overlap_evaluation(request)
