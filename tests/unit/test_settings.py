import pytest

from answer_judge.config.settings import Settings, is_valid_api_key
from answer_judge.evaluation.types import EvaluationMode

VALID_KEY = "sk-" + "a" * 48


def _settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


class TestIsValidApiKey:
    def test_accepts_well_formed_key(self):
        assert is_valid_api_key(VALID_KEY)

    def test_accepts_long_project_key(self):
        assert is_valid_api_key("sk-proj-" + "x" * 150)

    def test_strips_surrounding_whitespace(self):
        assert is_valid_api_key(f"  {VALID_KEY}\n")

    @pytest.mark.parametrize(
        "key",
        [None, "", "sk-short", "pk-" + "a" * 48, "sk-" + "a" * 200],
    )
    def test_rejects_malformed_keys(self, key):
        assert not is_valid_api_key(key)


class TestSettingsDefaults:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        monkeypatch.delenv("FAILURE_THRESHOLD", raising=False)
        s = _settings()
        assert s.JUDGE_MODEL == "gpt-4o"
        assert s.EMBEDDING_MODEL == "text-embedding-3-small"
        assert s.CORRECTNESS_THRESHOLD == 70
        assert s.FAILURE_THRESHOLD == 2
        assert s.MULTI_SIGNAL_ENABLED is False
        assert s.FALLBACK_RANDOM_SEED is None
        assert not s.has_credential

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", VALID_KEY)
        monkeypatch.setenv("MULTI_SIGNAL_ENABLED", "true")
        monkeypatch.setenv("FALLBACK_RANDOM_SEED", "7")
        s = _settings()
        assert s.has_credential
        assert s.MULTI_SIGNAL_ENABLED is True
        assert s.FALLBACK_RANDOM_SEED == 7


class TestGetJudgeParams:
    def test_definition_mode(self):
        params = _settings().get_judge_params(EvaluationMode.DEFINITION)
        assert params == {"max_tokens": 150, "temperature": 0.3}

    def test_examples_mode_by_string(self):
        params = _settings().get_judge_params("examples")
        assert params == {"max_tokens": 200, "temperature": 0.2}

    def test_overrides_apply(self):
        s = _settings(JUDGE_DEFINITION_MAX_TOKENS=400)
        assert s.get_judge_params("definition")["max_tokens"] == 400

    def test_unknown_mode_raises(self):
        with pytest.raises(ValueError, match="Unknown evaluation mode"):
            _settings().get_judge_params("essay")
