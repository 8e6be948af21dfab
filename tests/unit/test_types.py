import pytest

from answer_judge.errors import ValidationError
from answer_judge.evaluation.types import (
    ApiUsage,
    EvaluationMode,
    EvaluationRequest,
    EvaluationResult,
    SignalResult,
    Tier,
    clamp_score,
    round_half_up,
)


class TestRounding:
    @pytest.mark.parametrize(("value", "expected"), [(62.5, 63), (0.5, 1), (4.49, 4), (99.99, 100)])
    def test_round_half_up(self, value, expected):
        assert round_half_up(value) == expected

    def test_clamp_score(self):
        assert clamp_score(-3) == 0
        assert clamp_score(140) == 100
        assert clamp_score(70.4) == 70


class TestEvaluationRequest:
    def test_valid_definition_request(self):
        EvaluationRequest(candidate_answer="x", reference_answer="y").validate()

    @pytest.mark.parametrize(
        "request_",
        [
            EvaluationRequest(candidate_answer="", reference_answer="y"),
            EvaluationRequest(candidate_answer=" \n", reference_answer="y"),
            EvaluationRequest(candidate_answer="x", reference_answer=""),
            EvaluationRequest(candidate_answer="x", reference_answer="y", threshold=101),
            EvaluationRequest(
                candidate_answer="x", reference_answer=" ", mode=EvaluationMode.EXAMPLES
            ),
        ],
    )
    def test_unscorable_requests(self, request_):
        with pytest.raises(ValidationError):
            request_.validate()

    def test_examples_prefer_explicit_list(self):
        request = EvaluationRequest(
            candidate_answer="x",
            reference_answer="ignored, list",
            reference_examples=("Siri", " ", "Alexa"),
        )
        assert request.examples() == ["Siri", "Alexa"]

    def test_mode_given_as_plain_string_is_normalized(self):
        request = EvaluationRequest(
            candidate_answer="Siri", reference_answer="Siri, Alexa", mode="examples"
        )
        assert request.mode is EvaluationMode.EXAMPLES
        assert request.examples() == ["Siri", "Alexa"]

    def test_unknown_mode_raises_validation_error(self):
        with pytest.raises(ValidationError, match="Unknown evaluation mode"):
            EvaluationRequest(candidate_answer="x", reference_answer="y", mode="essay")

    def test_reference_examples_list_becomes_tuple(self):
        request = EvaluationRequest(
            candidate_answer="x", reference_answer="", reference_examples=["Siri", "Alexa"]
        )
        assert request.reference_examples == ("Siri", "Alexa")


class TestSignalResult:
    def test_failure_placeholder(self):
        result = SignalResult.failure("lexical", "boom")
        assert result.score == 0
        assert result.failed
        assert result.feedback == "Could not perform lexical analysis"
        assert result.details == {"error": "boom"}


class TestEvaluationResult:
    def test_build_enforces_invariants(self):
        result = EvaluationResult.build(
            score=123.4,
            threshold=70,
            feedback="f",
            tier=Tier.REMOTE,
            confidence=1.7,
            similarities=[str(i) for i in range(8)],
            missing_concepts=[str(i) for i in range(6)],
        )
        assert result.score == 100
        assert result.is_correct
        assert result.confidence == 1.0
        assert len(result.similarities) == 5
        assert len(result.missing_concepts) == 5

    def test_is_correct_at_threshold_boundary(self):
        at = EvaluationResult.build(
            score=70, threshold=70, feedback="", tier=Tier.TEXT_SIMILARITY, confidence=0.8
        )
        below = EvaluationResult.build(
            score=69.4, threshold=70, feedback="", tier=Tier.TEXT_SIMILARITY, confidence=0.8
        )
        assert at.is_correct
        assert not below.is_correct

    def test_to_dict_uses_camel_case_and_fixed_keys(self):
        result = EvaluationResult.build(
            score=50,
            threshold=70,
            feedback="f",
            tier=Tier.KEYWORD_OVERLAP,
            confidence=0.6,
            usage=ApiUsage.local("keyword-overlap-fallback"),
        )
        data = result.to_dict()
        assert set(data) == {
            "score", "isCorrect", "feedback", "similarities", "missingConcepts",
            "suggestions", "confidence", "tier", "breakdown", "validExamples", "apiUsage",
        }
        assert data["tier"] == "keyword_overlap"
        assert data["validExamples"] is None
        assert data["apiUsage"] == {
            "model": "keyword-overlap-fallback",
            "promptTokens": 0,
            "completionTokens": 0,
            "totalTokens": 0,
        }
