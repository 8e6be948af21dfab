from __future__ import annotations

import json
import logging

import litellm
from pydantic import ValidationError as PydanticValidationError

from answer_judge.config.settings import Settings, get_settings, is_valid_api_key
from answer_judge.errors import ContractViolation, TransportError
from answer_judge.evaluation.types import ApiUsage, EvaluationRequest
from answer_judge.judge.prompts import build_messages
from answer_judge.judge.schemas import JudgeResponse, JudgeVerdict

logger = logging.getLogger(__name__)


def _strip_code_fence(raw: str) -> str:
    text = raw.strip()
    if text.startswith("```"):
        lines = text.split("\n")
        lines = lines[1:]
        if lines and lines[-1].strip() == "```":
            lines = lines[:-1]
        text = "\n".join(lines)
    return text


def parse_verdict(raw: str) -> JudgeVerdict:
    """Parse the judge's raw text into a :class:`JudgeVerdict`.

    Raises:
        ContractViolation: If the text is not a JSON object with a numeric
            ``score`` in 0-100, a boolean ``isCorrect`` and a string
            ``feedback``.
    """
    text = _strip_code_fence(raw or "")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ContractViolation(f"Judge response is not JSON: {exc}", raw=raw) from exc

    if not isinstance(data, dict):
        raise ContractViolation(
            f"Judge response is a JSON {type(data).__name__}, expected an object", raw=raw
        )

    try:
        return JudgeVerdict.model_validate(data)
    except PydanticValidationError as exc:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in exc.errors())
        raise ContractViolation(f"Judge response fails contract on: {fields}", raw=raw) from exc


def _usage_from(response: object, model: str) -> ApiUsage:
    usage = getattr(response, "usage", None)
    return ApiUsage(
        model=getattr(response, "model", None) or model,
        prompt_tokens=getattr(usage, "prompt_tokens", 0) or 0,
        completion_tokens=getattr(usage, "completion_tokens", 0) or 0,
        total_tokens=getattr(usage, "total_tokens", 0) or 0,
    )


class RemoteJudge:
    """Client for the remote answer-judging LLM.

    One call per evaluation, bounded by ``timeout`` and never retried here;
    retry policy belongs to the orchestrator's circuit breaker.
    """

    def __init__(
        self,
        api_key: str | None = None,
        *,
        model: str | None = None,
        timeout: float | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._api_key = api_key if api_key is not None else self._settings.OPENAI_API_KEY
        self.model = model or self._settings.JUDGE_MODEL
        self.timeout = timeout or self._settings.JUDGE_TIMEOUT

    @property
    def has_credential(self) -> bool:
        return is_valid_api_key(self._api_key)

    def set_api_key(self, api_key: str | None) -> None:
        self._api_key = (api_key or "").strip()

    async def complete(self, request: EvaluationRequest) -> JudgeResponse:
        """Send *request* to the judge and return the raw completion.

        Raises:
            TransportError: If there is no credential or the provider call
                fails for any reason (network, timeout, auth, rate limit).
        """
        if not self.has_credential:
            raise TransportError("No valid judge credential configured")

        params = self._settings.get_judge_params(request.mode)
        logger.debug(
            "Judge request model=%s mode=%s max_tokens=%d",
            self.model,
            request.mode.value,
            params["max_tokens"],
        )

        try:
            response = await litellm.acompletion(
                model=self.model,
                messages=build_messages(request),
                api_key=self._api_key,
                timeout=self.timeout,
                **params,
            )
        except Exception as exc:
            raise TransportError(f"Judge call to {self.model} failed: {exc}") from exc

        try:
            choice = response.choices[0]
            content = choice.message.content or ""
            finish_reason = getattr(choice, "finish_reason", None)
        except (AttributeError, IndexError, TypeError) as exc:
            raise TransportError(f"Judge returned no choices: {exc}") from exc

        return JudgeResponse(
            content=content,
            finish_reason=finish_reason,
            model=getattr(response, "model", None) or self.model,
            usage=_usage_from(response, self.model),
        )
