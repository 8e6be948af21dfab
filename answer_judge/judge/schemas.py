from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr

from answer_judge.evaluation.types import ApiUsage


class JudgeVerdict(BaseModel):
    """The JSON object the remote judge must return."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    score: float = Field(ge=0, le=100)
    is_correct: StrictBool = Field(alias="isCorrect")
    feedback: StrictStr
    similarities: list[str] | None = None
    missing_concepts: list[str] | None = Field(default=None, alias="missingConcepts")
    suggestions: list[str] | None = None
    valid_examples: list[str] | None = Field(default=None, alias="validExamples")


@dataclass
class JudgeResponse:
    """Raw completion returned by the judging service."""

    content: str
    finish_reason: str | None
    model: str
    usage: ApiUsage
