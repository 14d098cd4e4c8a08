from .errors import InvalidAnswerFormat, MalformedQuestion, ScoringError
from .models import (
    MultipleChoice,
    MultipleCorrectKey,
    NumericalEntry,
    NumericalKey,
    Question,
    QuestionKind,
    SingleChoice,
    SingleCorrectKey,
    normalize_answer,
    parse_submission,
)
from .scheme import DEFAULT_SCHEME, MarkingScheme
from .engine import Evaluation, evaluate, numerical_tolerance, parse_numeric, validate_question

__all__ = [
    "ScoringError",
    "InvalidAnswerFormat",
    "MalformedQuestion",
    "QuestionKind",
    "Question",
    "SingleCorrectKey",
    "MultipleCorrectKey",
    "NumericalKey",
    "SingleChoice",
    "MultipleChoice",
    "NumericalEntry",
    "normalize_answer",
    "parse_submission",
    "MarkingScheme",
    "DEFAULT_SCHEME",
    "Evaluation",
    "evaluate",
    "numerical_tolerance",
    "parse_numeric",
    "validate_question",
]
