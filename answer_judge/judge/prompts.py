from __future__ import annotations

from answer_judge.evaluation.types import EvaluationMode, EvaluationRequest

DEFINITION_SYSTEM_PROMPT = """\
You are an AI tutor evaluating student answers. Provide detailed scores \
based on conceptual understanding. Be forgiving of speech-to-text errors but \
strict about missing key concepts."""

EXAMPLES_SYSTEM_PROMPT = """\
You are evaluating AI examples. Award high scores for actual AI systems like \
Siri, Alexa, Google Translate. Be strict about non-AI brands but generous \
for valid AI examples."""

_DEFINITION_PROMPT = """\
Evaluate this SPOKEN answer from speech-to-text (0-100 points):

QUESTION: {question}
EXPECTED ANSWER: {reference}
STUDENT ANSWER: {candidate}

EVALUATION CRITERIA:
- Award points for key concepts from the expected answer that are mentioned
- Deduct points for missing important concepts
- Ignore speech recognition errors like "abroad" instead of "broad"
- Focus on conceptual understanding, not grammar

SCORING:
- 90-100: All key concepts covered
- 70-89: Most key concepts with minor gaps
- 50-69: Basic understanding with significant gaps
- 30-49: Limited understanding
- 0-29: Incorrect or no understanding

Return ONLY JSON: {{"score": [0-100], "isCorrect": [true/false], \
"feedback": "specific feedback about what was good/missing", \
"similarities": ["concepts covered"], "missingConcepts": ["concepts missed"], \
"suggestions": ["tips"]}}"""

_EXAMPLES_PROMPT = """\
Evaluate these SPOKEN examples for AI technology:

Question: {question}
Expected examples: {examples}
User examples: {candidate}

SCORING GUIDELINES:
- Valid AI systems/apps (Siri, Alexa, Google Translate, Netflix recommendations): 80-100 points
- Generic tech brands without AI focus (iPhone, Microsoft, Apple): 0-15 points
- Mix of valid AI + non-AI examples: 40-70 points
- User can provide different valid AI examples not in the expected list
- Ignore speech recognition errors (e.g. "Serie" for "Siri")

Count valid AI examples and score accordingly:
- 3+ valid AI examples: 85-100 points
- 2 valid AI examples: 70-85 points
- 1 valid AI example: 50-70 points
- 0 valid AI examples: 0-15 points

Return ONLY JSON: {{"score": number, "isCorrect": boolean, \
"feedback": "explanation", "validExamples": ["list"], "suggestions": ["tips"]}}"""


def build_definition_prompt(request: EvaluationRequest) -> str:
    return _DEFINITION_PROMPT.format(
        question=request.question_text.strip() or "(not provided)",
        reference=request.reference_answer.strip(),
        candidate=request.candidate_answer.strip(),
    )


def build_examples_prompt(request: EvaluationRequest) -> str:
    return _EXAMPLES_PROMPT.format(
        question=request.question_text.strip() or "(not provided)",
        examples=", ".join(request.examples()),
        candidate=request.candidate_answer.strip(),
    )


def build_messages(request: EvaluationRequest) -> list[dict[str, str]]:
    """Chat messages for the judge, shaped by the request's mode."""
    if request.mode is EvaluationMode.EXAMPLES:
        system, user = EXAMPLES_SYSTEM_PROMPT, build_examples_prompt(request)
    else:
        system, user = DEFINITION_SYSTEM_PROMPT, build_definition_prompt(request)
    return [
        {"role": "system", "content": system},
        {"role": "user", "content": user},
    ]
