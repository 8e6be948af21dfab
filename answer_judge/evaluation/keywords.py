from __future__ import annotations

from collections.abc import Iterable

from answer_judge.evaluation.types import KeywordCategory

# Curated for an AI / machine-learning quiz. Plural forms are listed
# explicitly because lookup is exact.
CRITICAL_TERMS: frozenset[str] = frozenset({
    "learning", "training", "model", "models", "algorithm", "algorithms",
    "data", "supervised", "unsupervised", "neural", "network", "networks",
    "fine-tuning", "optimization", "gradient", "loss", "machine",
})

IMPORTANT_TERMS: frozenset[str] = frozenset({
    "accuracy", "performance", "validation", "testing", "feature",
    "features", "parameter", "parameters", "hyperparameter", "epoch",
    "bias", "variance", "overfitting", "underfitting", "artificial",
    "intelligence", "computer", "computers", "prediction", "predictions",
})


class KeywordClassifier:
    """Assign reference keywords to importance tiers by static lookup.

    Anything not on the critical or important lists is ``supporting``.
    The ``context`` tier has a weight but no term list, so it is never
    populated.
    """

    def __init__(
        self,
        critical_terms: Iterable[str] | None = None,
        important_terms: Iterable[str] | None = None,
    ) -> None:
        self._critical = frozenset(
            t.lower() for t in (CRITICAL_TERMS if critical_terms is None else critical_terms)
        )
        self._important = frozenset(
            t.lower() for t in (IMPORTANT_TERMS if important_terms is None else important_terms)
        )

    def classify(self, token: str) -> KeywordCategory:
        word = token.lower()
        if word in self._critical:
            return KeywordCategory.CRITICAL
        if word in self._important:
            return KeywordCategory.IMPORTANT
        return KeywordCategory.SUPPORTING

    def categorize(self, keywords: Iterable[str]) -> dict[KeywordCategory, list[str]]:
        """Group *keywords* by tier, keeping their order within each tier."""
        groups: dict[KeywordCategory, list[str]] = {category: [] for category in KeywordCategory}
        for keyword in keywords:
            groups[self.classify(keyword)].append(keyword)
        return groups
