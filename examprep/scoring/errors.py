from __future__ import annotations

"""Error taxonomy for answer evaluation."""

from typing import Optional


class ScoringError(ValueError):
    """Base class for errors raised while scoring an answer."""

    def __init__(self, message: str, question_id: Optional[str] = None) -> None:
        self.question_id = question_id
        if question_id is not None:
            message = f"{message} (question {question_id})"
        super().__init__(message)


class InvalidAnswerFormat(ScoringError):
    """Submitted answer does not fit the question's expected shape."""


class MalformedQuestion(ScoringError):
    """Question answer key violates its invariant; an upstream data problem."""
