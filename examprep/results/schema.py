from __future__ import annotations

"""Attempt record schema.

One record per submission, immutable once created. Field names follow Python
conventions; the camelCase / snake_case names used by the external progress
store are accepted on input so its rows can be validated verbatim.
"""

import math
from datetime import datetime, timezone
from typing import Any, List, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from ..scoring.models import QuestionKind

_KIND_ALIASES = {
    "singlecorrect": QuestionKind.SINGLE_CORRECT,
    "multiplecorrect": QuestionKind.MULTIPLE_CORRECT,
    "numerical": QuestionKind.NUMERICAL,
    "integer": QuestionKind.NUMERICAL,
}


def _as_number(v: Any) -> Optional[float]:
    """Parse a stored numeric value; None for blanks, garbage and non-finite values."""
    if v is None or isinstance(v, bool):
        return None
    try:
        value = float(v.strip() if isinstance(v, str) else v)
    except (TypeError, ValueError):
        return None
    return value if math.isfinite(value) else None


class AttemptRecord(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    question_id: Optional[str] = Field(None, validation_alias=AliasChoices("question_id", "questionId"))
    exam_type: Optional[str] = Field(None, validation_alias=AliasChoices("exam_type", "examType"))
    subject: Optional[str] = None
    chapter: Optional[str] = None
    user_id: Optional[str] = Field(None, validation_alias=AliasChoices("user_id", "userId"))
    question_kind: Optional[QuestionKind] = Field(
        None, validation_alias=AliasChoices("question_kind", "questionKind", "questionType", "question_type")
    )
    submitted_answer: Union[List[int], str, None] = Field(
        None, validation_alias=AliasChoices("submitted_answer", "submittedAnswer", "answer")
    )
    is_correct: bool = Field(False, validation_alias=AliasChoices("is_correct", "isCorrect"))
    score: int = 0
    time_spent_seconds: int = Field(
        0, ge=0, validation_alias=AliasChoices("time_spent_seconds", "timeSpentSeconds", "timeSpent", "time_spent")
    )
    attempt_count: int = Field(1, ge=1, validation_alias=AliasChoices("attempt_count", "attemptCount"))
    submitted_at: Optional[datetime] = Field(
        None, validation_alias=AliasChoices("submitted_at", "submittedAt", "created_at", "timestamp")
    )

    @field_validator("question_id", "exam_type", "subject", "chapter", "user_id", mode="before")
    @classmethod
    def _identifier_text(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("question_kind", mode="before")
    @classmethod
    def _kind_from_store(cls, v: Any) -> Any:
        if isinstance(v, str):
            return _KIND_ALIASES.get(v.replace("_", "").lower(), v)
        return v

    @field_validator("time_spent_seconds", mode="before")
    @classmethod
    def _whole_seconds(cls, v: Any) -> int:
        # Truncated, not rounded: 29.6 s is still under the 30 s mark
        seconds = _as_number(v)
        if seconds is None or seconds < 0:
            return 0
        return math.floor(seconds)

    @field_validator("attempt_count", mode="before")
    @classmethod
    def _missing_attempts_is_one(cls, v: Any) -> int:
        count = _as_number(v)
        if count is None or count < 1:
            return 1
        return math.floor(count)

    @field_validator("is_correct", mode="before")
    @classmethod
    def _missing_is_false(cls, v: Any) -> Any:
        return False if v is None else v

    @field_validator("score", mode="before")
    @classmethod
    def _missing_score_is_zero(cls, v: Any) -> int:
        score = _as_number(v)
        return 0 if score is None else int(score)

    @field_validator("submitted_at")
    @classmethod
    def _ensure_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        if v is None:
            return v
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)
