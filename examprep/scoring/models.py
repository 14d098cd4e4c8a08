from __future__ import annotations

"""Question, answer-key and submitted-answer models.

Answer keys and submissions are tagged unions discriminated by ``kind`` so the
engine never has to sniff shapes at runtime. Option indices are 1-based.
"""

import math
from enum import Enum
from typing import Annotated, Any, FrozenSet, List, Literal, Mapping, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import InvalidAnswerFormat, MalformedQuestion


class QuestionKind(str, Enum):
    SINGLE_CORRECT = "SingleCorrect"
    MULTIPLE_CORRECT = "MultipleCorrect"
    NUMERICAL = "Numerical"


# --- Answer keys ---

class SingleCorrectKey(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["SingleCorrect"] = "SingleCorrect"
    index: int


class MultipleCorrectKey(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["MultipleCorrect"] = "MultipleCorrect"
    indices: FrozenSet[int]


class NumericalKey(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["Numerical"] = "Numerical"
    value: float


AnswerKey = Annotated[
    Union[SingleCorrectKey, MultipleCorrectKey, NumericalKey],
    Field(discriminator="kind"),
]


# --- Submitted answers ---

class SingleChoice(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["SingleCorrect"] = "SingleCorrect"
    index: int


class MultipleChoice(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["MultipleCorrect"] = "MultipleCorrect"
    indices: FrozenSet[int]


class NumericalEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["Numerical"] = "Numerical"
    text: str


SubmittedAnswer = Annotated[
    Union[SingleChoice, MultipleChoice, NumericalEntry],
    Field(discriminator="kind"),
]


# Question-bank "type" values; "integer" questions are scored as numerical.
_API_KINDS = {
    "singlecorrect": QuestionKind.SINGLE_CORRECT,
    "multiplecorrect": QuestionKind.MULTIPLE_CORRECT,
    "numerical": QuestionKind.NUMERICAL,
    "integer": QuestionKind.NUMERICAL,
}


class Question(BaseModel):
    """A read-only question as served by the question bank."""

    model_config = ConfigDict(frozen=True)

    id: str
    kind: QuestionKind
    options: List[str] = Field(default_factory=list)
    answer_key: AnswerKey
    difficulty_level: int = Field(1, ge=1, le=10)

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "Question":
        """Build a Question from the question-bank JSON shape.

        The API serves ``correct_options`` as 0-based indices (a single int or a
        list); they are shifted to the 1-based indices used everywhere else.
        """
        raw_id = payload.get("question_ID", payload.get("id"))
        qid = None if raw_id is None else str(raw_id)
        if qid is None:
            raise MalformedQuestion("Question payload has no id")

        raw_type = str(payload.get("type") or "singleCorrect")
        kind = _API_KINDS.get(raw_type.replace("_", "").lower())
        if kind is None:
            raise MalformedQuestion(f"Unknown question type: {raw_type!r}", qid)

        options = [str(o) for o in (payload.get("options") or [])]
        level = payload.get("level") or 1

        if kind is QuestionKind.NUMERICAL:
            key: Any = {"kind": kind.value, "value": _parse_reference(payload.get("correct_value"), qid)}
            options = []
        else:
            raw = payload.get("correct_options")
            if raw is None:
                raw_list: List[Any] = []
            elif isinstance(raw, (list, tuple)):
                raw_list = list(raw)
            else:
                raw_list = [raw]
            try:
                indices = [int(i) + 1 for i in raw_list]
            except (TypeError, ValueError) as exc:
                raise MalformedQuestion(f"Non-integer correct option in {raw_list!r}", qid) from exc
            if len(set(indices)) != len(indices):
                raise MalformedQuestion(f"Duplicate correct options: {raw_list!r}", qid)
            if kind is QuestionKind.SINGLE_CORRECT:
                if len(indices) != 1:
                    raise MalformedQuestion(
                        f"SingleCorrect question needs exactly one correct option, got {len(indices)}", qid
                    )
                key = {"kind": kind.value, "index": indices[0]}
            else:
                key = {"kind": kind.value, "indices": frozenset(indices)}

        try:
            return cls(id=qid, kind=kind, options=options, answer_key=key, difficulty_level=int(level))
        except (ValidationError, TypeError, ValueError) as exc:
            raise MalformedQuestion(f"Invalid question payload: {exc}", qid) from exc


def _parse_reference(raw: Any, qid: str) -> float:
    try:
        value = float(str(raw).strip())
    except (TypeError, ValueError) as exc:
        raise MalformedQuestion(f"Unparseable numerical reference value: {raw!r}", qid) from exc
    if not math.isfinite(value):
        raise MalformedQuestion(f"Non-finite numerical reference value: {raw!r}", qid)
    return value


def parse_submission(question: Question, raw: Any) -> Union[SingleChoice, MultipleChoice, NumericalEntry]:
    """Convert a raw UI value into the submitted-answer variant for ``question``.

    - SingleCorrect: an int (or a one-element list, as the UI keeps selections in a list)
    - MultipleCorrect: an iterable of ints
    - Numerical: a numeric string (ints and floats are accepted and stringified)
    """
    kind = question.kind
    if kind is QuestionKind.NUMERICAL:
        if isinstance(raw, bool) or not isinstance(raw, (str, int, float)):
            raise InvalidAnswerFormat(f"Expected a numeric string, got {type(raw).__name__}", question.id)
        return NumericalEntry(text=str(raw))

    if isinstance(raw, (str, bytes)) or isinstance(raw, bool):
        raise InvalidAnswerFormat(f"Expected option indices, got {raw!r}", question.id)

    if kind is QuestionKind.SINGLE_CORRECT:
        if isinstance(raw, int):
            return SingleChoice(index=raw)
        try:
            items = list(raw)
        except TypeError as exc:
            raise InvalidAnswerFormat(f"Expected an option index, got {raw!r}", question.id) from exc
        if len(items) != 1:
            raise InvalidAnswerFormat(
                f"SingleCorrect question takes exactly one selection, got {len(items)}", question.id
            )
        return SingleChoice(index=_as_index(items[0], question.id))

    if isinstance(raw, int):
        raise InvalidAnswerFormat("MultipleCorrect question takes a set of selections", question.id)
    try:
        items = list(raw)
    except TypeError as exc:
        raise InvalidAnswerFormat(f"Expected option indices, got {raw!r}", question.id) from exc
    return MultipleChoice(indices=frozenset(_as_index(i, question.id) for i in items))


def _as_index(value: Any, qid: str) -> int:
    if isinstance(value, bool):
        raise InvalidAnswerFormat(f"Invalid option index: {value!r}", qid)
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise InvalidAnswerFormat(f"Invalid option index: {value!r}", qid) from exc


def normalize_answer(submitted: Union[SingleChoice, MultipleChoice, NumericalEntry]) -> Union[List[int], str]:
    """Return the persisted form of a submission: sorted indices or the numeric string."""
    if isinstance(submitted, SingleChoice):
        return [submitted.index]
    if isinstance(submitted, MultipleChoice):
        return sorted(submitted.indices)
    return submitted.text.strip()
