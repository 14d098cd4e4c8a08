from __future__ import annotations

"""Answer evaluation: correctness verdict and signed point score."""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Union

from .errors import InvalidAnswerFormat, MalformedQuestion
from .models import (
    MultipleChoice,
    MultipleCorrectKey,
    NumericalEntry,
    NumericalKey,
    Question,
    QuestionKind,
    SingleChoice,
    SingleCorrectKey,
)
from .scheme import DEFAULT_SCHEME, MarkingScheme

logger = logging.getLogger(__name__)

Submission = Union[SingleChoice, MultipleChoice, NumericalEntry]

_KEY_TYPES = {
    QuestionKind.SINGLE_CORRECT: SingleCorrectKey,
    QuestionKind.MULTIPLE_CORRECT: MultipleCorrectKey,
    QuestionKind.NUMERICAL: NumericalKey,
}
_ANSWER_TYPES = {
    QuestionKind.SINGLE_CORRECT: SingleChoice,
    QuestionKind.MULTIPLE_CORRECT: MultipleChoice,
    QuestionKind.NUMERICAL: NumericalEntry,
}


@dataclass(frozen=True)
class Evaluation:
    is_correct: bool
    score: int


def validate_question(question: Question) -> None:
    """Raise MalformedQuestion when the answer key violates its invariant."""
    key = question.answer_key
    if not isinstance(key, _KEY_TYPES[question.kind]):
        raise MalformedQuestion(
            f"Answer key kind {key.kind!r} does not match question kind {question.kind.value!r}", question.id
        )
    n_options = len(question.options)
    if isinstance(key, SingleCorrectKey):
        indices = {key.index}
    elif isinstance(key, MultipleCorrectKey):
        if not key.indices:
            raise MalformedQuestion("MultipleCorrect answer key is empty", question.id)
        indices = set(key.indices)
    else:
        if not math.isfinite(key.value):
            raise MalformedQuestion(f"Non-finite numerical reference value: {key.value!r}", question.id)
        return
    # Options may be omitted by callers that only carry the key
    if n_options and any(i < 1 or i > n_options for i in indices):
        raise MalformedQuestion(f"Answer key {sorted(indices)} outside options 1..{n_options}", question.id)
    if any(i < 1 for i in indices):
        raise MalformedQuestion(f"Answer key {sorted(indices)} has non-positive indices", question.id)


def numerical_tolerance(reference: float, scheme: Optional[MarkingScheme] = None) -> float:
    """Greater of the absolute floor and the relative share of |reference|."""
    scheme = scheme or DEFAULT_SCHEME
    return max(scheme.tolerance_abs, abs(reference) * scheme.tolerance_rel)


def parse_numeric(text: str, question_id: Optional[str] = None) -> float:
    stripped = text.strip()
    if not stripped:
        raise InvalidAnswerFormat("Empty numerical answer", question_id)
    try:
        value = float(stripped)
    except ValueError as exc:
        raise InvalidAnswerFormat(f"Unparseable numerical answer: {text!r}", question_id) from exc
    if not math.isfinite(value):
        raise InvalidAnswerFormat(f"Non-finite numerical answer: {text!r}", question_id)
    return value


def evaluate(question: Question, submitted: Submission, scheme: Optional[MarkingScheme] = None) -> Evaluation:
    """Score ``submitted`` against ``question``'s answer key.

    Pure and deterministic. Raises MalformedQuestion for a broken key and
    InvalidAnswerFormat when the submission does not fit the question kind.
    """
    scheme = scheme or DEFAULT_SCHEME
    validate_question(question)
    if not isinstance(submitted, _ANSWER_TYPES[question.kind]):
        raise InvalidAnswerFormat(
            f"{type(submitted).__name__} submitted for a {question.kind.value} question", question.id
        )
    _check_selection_range(question, submitted)

    key = question.answer_key
    if isinstance(key, NumericalKey):
        result = _evaluate_numerical(key, submitted, scheme, question.id)  # type: ignore[arg-type]
    elif isinstance(key, SingleCorrectKey):
        result = _evaluate_single(key, submitted, scheme)  # type: ignore[arg-type]
    else:
        result = _evaluate_multiple(key, submitted, scheme, question.id)  # type: ignore[arg-type]
    logger.debug("Evaluated question %s: correct=%s score=%d", question.id, result.is_correct, result.score)
    return result


def _check_selection_range(question: Question, submitted: Submission) -> None:
    if isinstance(submitted, SingleChoice):
        selected = {submitted.index}
    elif isinstance(submitted, MultipleChoice):
        selected = set(submitted.indices)
    else:
        return
    n_options = len(question.options)
    upper = n_options if n_options else None
    bad = sorted(i for i in selected if i < 1 or (upper is not None and i > upper))
    if bad:
        raise InvalidAnswerFormat(f"Selected option(s) {bad} do not exist", question.id)


def _evaluate_numerical(key: NumericalKey, submitted: NumericalEntry, scheme: MarkingScheme, qid: str) -> Evaluation:
    value = parse_numeric(submitted.text, qid)
    correct = abs(value - key.value) <= numerical_tolerance(key.value, scheme)
    return Evaluation(correct, scheme.correct if correct else scheme.numerical_wrong)


def _evaluate_single(key: SingleCorrectKey, submitted: SingleChoice, scheme: MarkingScheme) -> Evaluation:
    correct = submitted.index == key.index
    return Evaluation(correct, scheme.correct if correct else scheme.single_wrong)


def _evaluate_multiple(key: MultipleCorrectKey, submitted: MultipleChoice, scheme: MarkingScheme, qid: str) -> Evaluation:
    selected = submitted.indices
    if not selected:
        raise InvalidAnswerFormat("No options selected", qid)
    correct_set = key.indices
    hit = selected & correct_set
    miss = selected - correct_set

    if selected == correct_set:
        return Evaluation(True, scheme.correct)
    if miss:
        return Evaluation(False, scheme.multiple_wrong)
    if hit:
        fraction = len(hit) / len(correct_set)
        if fraction > 0.75:
            return Evaluation(False, scheme.partial_high)
        if fraction > 0.5:
            return Evaluation(False, scheme.partial_mid)
        return Evaluation(False, scheme.partial_low)
    return Evaluation(False, 0)
