"""Answer pipeline -- input classification, confidence gate, orchestration."""

from .classifier import is_likely_question
from .gate import AnswerResult, ConfidenceGate, FallbackPhrasePolicy, normalize_confidence
from .pipeline import AnswerPipeline, notice_for

__all__ = [
    "AnswerPipeline",
    "AnswerResult",
    "ConfidenceGate",
    "FallbackPhrasePolicy",
    "is_likely_question",
    "normalize_confidence",
    "notice_for",
]
