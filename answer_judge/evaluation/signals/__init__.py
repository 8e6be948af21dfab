from answer_judge.evaluation.signals.base import SignalEvaluator
from answer_judge.evaluation.signals.completeness import CompletenessSignal
from answer_judge.evaluation.signals.lexical import LexicalSignal
from answer_judge.evaluation.signals.semantic import SemanticSignal, cosine_similarity
from answer_judge.evaluation.signals.structural import StructuralSignal

__all__ = [
    "CompletenessSignal",
    "LexicalSignal",
    "SemanticSignal",
    "SignalEvaluator",
    "StructuralSignal",
    "cosine_similarity",
]
