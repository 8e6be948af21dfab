from answer_judge.judge.client import RemoteJudge, parse_verdict
from answer_judge.judge.schemas import JudgeResponse, JudgeVerdict

__all__ = [
    "JudgeResponse",
    "JudgeVerdict",
    "RemoteJudge",
    "parse_verdict",
]
