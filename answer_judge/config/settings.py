from __future__ import annotations

from functools import lru_cache
from typing import Any

from pydantic_settings import BaseSettings, SettingsConfigDict

_API_KEY_PREFIX = "sk-"
_API_KEY_MIN_LENGTH = 48
_API_KEY_MAX_LENGTH = 200


def is_valid_api_key(key: str | None) -> bool:
    """Return True if *key* looks like an OpenAI secret key.

    Legacy keys are 48-64 characters, project keys (``sk-proj-...``) run up
    to 200 characters.
    """
    if not key or not isinstance(key, str):
        return False
    trimmed = key.strip()
    return (
        trimmed.startswith(_API_KEY_PREFIX)
        and _API_KEY_MIN_LENGTH <= len(trimmed) <= _API_KEY_MAX_LENGTH
    )


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Remote credential (absent => remote judge is never attempted)
    OPENAI_API_KEY: str = ""

    # Remote answer judge
    JUDGE_MODEL: str = "gpt-4o"
    JUDGE_TIMEOUT: float = 20.0
    JUDGE_DEFINITION_MAX_TOKENS: int = 150
    JUDGE_DEFINITION_TEMPERATURE: float = 0.3
    JUDGE_EXAMPLES_MAX_TOKENS: int = 200
    JUDGE_EXAMPLES_TEMPERATURE: float = 0.2

    # Embedding
    EMBEDDING_MODEL: str = "text-embedding-3-small"
    EMBEDDING_DIMENSIONS: int = 1536
    EMBEDDING_BATCH_SIZE: int = 16
    EMBEDDING_TIMEOUT: float = 10.0

    # Scoring
    CORRECTNESS_THRESHOLD: int = 70
    SIGNAL_TIMEOUT: float = 15.0
    MULTI_SIGNAL_ENABLED: bool = False

    # Circuit breaker
    FAILURE_THRESHOLD: int = 2

    # Tier-3 examples fallback; None keeps the non-AI penalty random
    FALLBACK_RANDOM_SEED: int | None = None

    # Logging / OpenTelemetry
    LOG_LEVEL: str = "INFO"
    OTEL_EXPORTER_OTLP_ENDPOINT: str = "http://localhost:4317"
    OTEL_SERVICE_NAME: str = "answer-judge"
    OTEL_TRACES_ENABLED: bool = False

    @property
    def has_credential(self) -> bool:
        """True when a usable remote credential is configured."""
        return is_valid_api_key(self.OPENAI_API_KEY)

    def get_judge_params(self, mode: Any) -> dict[str, Any]:
        """Return the completion parameters for a judging mode.

        Args:
            mode: ``"definition"`` or ``"examples"`` (plain string or
                :class:`~answer_judge.evaluation.types.EvaluationMode`).

        Returns:
            ``{"max_tokens": ..., "temperature": ...}`` for the mode.

        Raises:
            ValueError: If *mode* is not a recognised evaluation mode.
        """
        mode_fields: dict[str, tuple[str, str]] = {
            "definition": ("JUDGE_DEFINITION_MAX_TOKENS", "JUDGE_DEFINITION_TEMPERATURE"),
            "examples": ("JUDGE_EXAMPLES_MAX_TOKENS", "JUDGE_EXAMPLES_TEMPERATURE"),
        }

        key = getattr(mode, "value", mode)
        fields = mode_fields.get(key)
        if fields is None:
            raise ValueError(
                f"Unknown evaluation mode {mode!r}. "
                f"Expected one of: {', '.join(sorted(mode_fields))}"
            )

        max_tokens_field, temperature_field = fields
        return {
            "max_tokens": getattr(self, max_tokens_field),
            "temperature": getattr(self, temperature_field),
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached singleton :class:`Settings` instance."""
    return Settings()
