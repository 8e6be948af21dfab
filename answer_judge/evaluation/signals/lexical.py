from __future__ import annotations

from answer_judge.evaluation.keywords import KeywordClassifier
from answer_judge.evaluation.signals.base import SignalEvaluator
from answer_judge.evaluation.text import contains_keyword, extract_keywords
from answer_judge.evaluation.types import KeywordMatch, SignalResult, clamp_score

# Score used when the reference has no content words to look for.
NEUTRAL_SCORE = 50


def match_keywords(
    candidate: str,
    reference_keywords: list[str],
    classifier: KeywordClassifier,
) -> tuple[list[KeywordMatch], list[KeywordMatch]]:
    """Split the reference keywords into those the candidate mentions and the rest."""
    found: list[KeywordMatch] = []
    missing: list[KeywordMatch] = []
    for category, keywords in classifier.categorize(reference_keywords).items():
        for keyword in keywords:
            match = KeywordMatch(keyword=keyword, category=category)
            if contains_keyword(candidate, keyword):
                found.append(match)
            else:
                missing.append(match)
    return found, missing


def keyword_feedback(found: list[KeywordMatch], missing: list[KeywordMatch]) -> str:
    if not missing:
        return "Excellent keyword coverage!"
    if len(found) > len(missing):
        return "Good keyword usage with some gaps to address."
    return "Several important keywords missing. Focus on key terminology."


class LexicalSignal(SignalEvaluator):
    """Weighted coverage of the reference's key terms."""

    name = "lexical"

    def __init__(self, classifier: KeywordClassifier | None = None) -> None:
        self._classifier = classifier or KeywordClassifier()

    async def evaluate(self, candidate: str, reference: str) -> SignalResult:
        reference_keywords = extract_keywords(reference)
        found, missing = match_keywords(candidate, reference_keywords, self._classifier)

        total_weight = sum(m.category.weight for m in found + missing)
        if total_weight:
            found_weight = sum(m.category.weight for m in found)
            score = clamp_score(found_weight / total_weight * 100)
        else:
            score = NEUTRAL_SCORE

        return SignalResult(
            name=self.name,
            score=score,
            feedback=keyword_feedback(found, missing),
            details={
                "found": tuple(found),
                "missing": tuple(missing),
                "reference_keywords": tuple(reference_keywords),
                "candidate_keywords": tuple(extract_keywords(candidate)),
            },
        )
