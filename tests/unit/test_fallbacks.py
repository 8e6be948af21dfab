"""Tests for the local tier-2 and tier-3 fallbacks."""

from __future__ import annotations

import random

import pytest

from answer_judge.evaluation.fallbacks import (
    examples_overlap_evaluation,
    keyword_overlap_evaluation,
    last_resort_evaluation,
    text_similarity,
    text_similarity_available,
    text_similarity_evaluation,
)
from answer_judge.evaluation.types import (
    EvaluationMode,
    EvaluationRequest,
    Tier,
    clamp_score,
)

ML_REFERENCE = (
    "Machine learning is a subset of artificial intelligence that enables "
    "computers to learn from data."
)
NN_REFERENCE = "Neural networks are computing systems inspired by biological neurons."
AI_EXAMPLES = ("Siri", "Alexa", "Netflix recommendations")


def _examples_request(candidate: str) -> EvaluationRequest:
    return EvaluationRequest(
        candidate_answer=candidate,
        reference_answer="",
        mode=EvaluationMode.EXAMPLES,
        reference_examples=AI_EXAMPLES,
    )


# ---------------------------------------------------------------------------
# Tier 2
# ---------------------------------------------------------------------------


class TestTextSimilarity:
    def test_identical_after_normalization(self):
        assert text_similarity("Neural networks!", "neural networks") == 1.0

    def test_no_overlap_uses_length_ratio_only(self):
        assert text_similarity("abcd", "wxyz wxyz") == pytest.approx(0.3 * 4 / 9)

    def test_unrelated_answer_scores_low(self):
        request = EvaluationRequest(candidate_answer="I don't know", reference_answer=NN_REFERENCE)
        result = text_similarity_evaluation(request)

        assert result.tier is Tier.TEXT_SIMILARITY
        assert result.score == 5
        assert result.score < 20
        assert not result.is_correct
        assert result.feedback == (
            "Partial match (5%). Include more key concepts from the definition."
        )
        assert result.confidence == 0.8

    def test_exact_match_scores_100(self):
        request = EvaluationRequest(candidate_answer=NN_REFERENCE, reference_answer=NN_REFERENCE)
        result = text_similarity_evaluation(request)

        assert result.score == 100
        assert result.is_correct
        assert result.feedback == "Great! 100% similarity to expected definition."


class TestTextSimilarityAvailable:
    def test_definition_with_words(self):
        request = EvaluationRequest(candidate_answer="data", reference_answer=ML_REFERENCE)
        assert text_similarity_available(request)

    def test_punctuation_only_candidate(self):
        request = EvaluationRequest(candidate_answer="?!", reference_answer=ML_REFERENCE)
        assert not text_similarity_available(request)

    def test_examples_mode_never_available(self):
        assert not text_similarity_available(_examples_request("Siri"))


# ---------------------------------------------------------------------------
# Tier 3
# ---------------------------------------------------------------------------


class TestKeywordOverlap:
    def test_partial_overlap(self):
        request = EvaluationRequest(
            candidate_answer="machine learning lets computers learn from data",
            reference_answer=ML_REFERENCE,
        )
        result = keyword_overlap_evaluation(request)

        # 6 of 11 reference words longer than three characters.
        assert result.score == 55
        assert not result.is_correct
        assert result.tier is Tier.KEYWORD_OVERLAP
        assert result.confidence == 0.6
        assert result.feedback == "Try to include more key concepts."
        assert len(result.missing_concepts) == 5

    def test_exact_match_scores_100(self):
        request = EvaluationRequest(candidate_answer=ML_REFERENCE, reference_answer=ML_REFERENCE)
        result = keyword_overlap_evaluation(request)

        assert result.score == 100
        assert result.is_correct
        assert result.feedback == "Good answer!"

    def test_reference_without_keywords(self):
        request = EvaluationRequest(candidate_answer="anything", reference_answer="a is to be")
        result = keyword_overlap_evaluation(request)

        assert result.score == 0
        assert result.confidence == 0.3


class TestExamplesOverlap:
    def test_non_ai_brands_score_low(self):
        result = examples_overlap_evaluation(_examples_request("iPhone and Microsoft"))

        assert result.score < 15
        assert not result.is_correct
        assert result.valid_examples == ()
        assert result.feedback.startswith("Examples must be specific AI systems")

    def test_non_ai_penalty_is_reproducible_with_seed(self):
        expected = clamp_score(random.Random(0).random() * 10)
        result = examples_overlap_evaluation(
            _examples_request("iPhone and Microsoft"), random.Random(0)
        )
        assert result.score == expected

    def test_matches_scale_score(self):
        result = examples_overlap_evaluation(_examples_request("I use Siri and Netflix"))

        # 2/3 * 80 + 20
        assert result.score == 73
        assert result.is_correct
        assert result.valid_examples == ("Siri", "Netflix recommendations")
        assert result.feedback.startswith("Found 2 relevant AI examples")

    def test_all_matches_capped_at_90(self):
        result = examples_overlap_evaluation(_examples_request("Siri, Alexa, Netflix"))
        assert result.score == 90

    def test_no_match_without_brands(self):
        result = examples_overlap_evaluation(_examples_request("a toaster"))
        assert result.score == 20

    def test_examples_split_from_reference_text(self):
        request = EvaluationRequest(
            candidate_answer="alexa",
            reference_answer="Siri; Alexa\nGoogle Translate",
            mode=EvaluationMode.EXAMPLES,
        )
        result = examples_overlap_evaluation(request)
        assert result.valid_examples == ("Alexa",)


class TestLastResort:
    def test_dispatches_by_mode(self):
        definition = EvaluationRequest(candidate_answer="data", reference_answer=ML_REFERENCE)
        assert last_resort_evaluation(definition).valid_examples is None
        assert last_resort_evaluation(_examples_request("Siri")).valid_examples == ("Siri",)
