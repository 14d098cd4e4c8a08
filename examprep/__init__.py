"""examprep package initialization.

Exposes the scoring engine and attempt-record helpers so applications can
simply `import examprep`.
"""

from __future__ import annotations

from .scoring import (
    Evaluation,
    InvalidAnswerFormat,
    MalformedQuestion,
    MarkingScheme,
    Question,
    QuestionKind,
    ScoringError,
    evaluate,
    parse_submission,
)
from .results import AttemptRecord, ResultManager, build_attempt

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "AttemptRecord",
    "Evaluation",
    "InvalidAnswerFormat",
    "MalformedQuestion",
    "MarkingScheme",
    "Question",
    "QuestionKind",
    "ResultManager",
    "ScoringError",
    "build_attempt",
    "evaluate",
    "parse_submission",
]
