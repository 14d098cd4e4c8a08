from __future__ import annotations

"""Result Manager: evaluates submissions and keeps the attempt records.

Records live in memory until flushed to a repository (see storage.cache).
Re-attempts create new records with an incremented attempt count; existing
records are never modified.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple

from ..scoring.engine import Evaluation, Submission, evaluate
from ..scoring.models import Question, normalize_answer, parse_submission
from ..scoring.scheme import MarkingScheme
from .schema import AttemptRecord

logger = logging.getLogger(__name__)


class AttemptSink(Protocol):
    def append(self, records: Sequence[AttemptRecord]) -> None: ...


def build_attempt(
    question: Question,
    submitted: Submission,
    *,
    exam_type: Optional[str] = None,
    subject: Optional[str] = None,
    chapter: Optional[str] = None,
    user_id: Optional[str] = None,
    time_spent_seconds: int = 0,
    attempt_count: int = 1,
    submitted_at: Optional[datetime] = None,
    scheme: Optional[MarkingScheme] = None,
) -> Tuple[AttemptRecord, Evaluation]:
    """Evaluate one submission and package it as an immutable AttemptRecord."""
    result = evaluate(question, submitted, scheme)
    record = AttemptRecord(
        question_id=question.id,
        exam_type=exam_type,
        subject=subject,
        chapter=chapter,
        user_id=user_id,
        question_kind=question.kind,
        submitted_answer=normalize_answer(submitted),
        is_correct=result.is_correct,
        score=result.score,
        time_spent_seconds=max(0, int(time_spent_seconds)),
        attempt_count=attempt_count,
        submitted_at=submitted_at or datetime.now(timezone.utc),
    )
    return record, result


class ResultManager:
    def __init__(self, scheme: Optional[MarkingScheme] = None) -> None:
        self.scheme = scheme
        self._records: List[AttemptRecord] = []
        self._attempts: Dict[Tuple[Optional[str], str], int] = {}
        self._flushed = 0

    def submit(
        self,
        question: Question,
        raw_answer: Any,
        *,
        user_id: Optional[str] = None,
        exam_type: Optional[str] = None,
        subject: Optional[str] = None,
        chapter: Optional[str] = None,
        time_spent_seconds: int = 0,
        submitted_at: Optional[datetime] = None,
    ) -> AttemptRecord:
        """Score a raw UI answer and record it as the next attempt on ``question``."""
        submitted = parse_submission(question, raw_answer)
        key = (user_id, question.id)
        attempt_count = self._attempts.get(key, 0) + 1
        record, _ = build_attempt(
            question,
            submitted,
            exam_type=exam_type,
            subject=subject,
            chapter=chapter,
            user_id=user_id,
            time_spent_seconds=time_spent_seconds,
            attempt_count=attempt_count,
            submitted_at=submitted_at,
            scheme=self.scheme,
        )
        # Counted only once evaluation succeeded; rejected answers are not attempts
        self._attempts[key] = attempt_count
        self._records.append(record)
        return record

    def seed(self, records: Sequence[AttemptRecord]) -> None:
        """Register previously stored attempts so new ones continue their count."""
        for rec in records:
            key = (rec.user_id, rec.question_id)
            self._attempts[key] = max(self._attempts.get(key, 0), rec.attempt_count)

    def records(self, user_id: Optional[str] = None) -> List[AttemptRecord]:
        if user_id is None:
            return list(self._records)
        return [r for r in self._records if r.user_id == user_id]

    def attempts_for(self, user_id: Optional[str], question_id: str) -> List[AttemptRecord]:
        return [r for r in self._records if r.user_id == user_id and r.question_id == question_id]

    def pending(self) -> List[AttemptRecord]:
        return self._records[self._flushed:]

    def flush(self, sink: AttemptSink) -> int:
        """Hand records not yet flushed to ``sink``; returns how many were written."""
        pending = self.pending()
        if pending:
            sink.append(pending)
            self._flushed = len(self._records)
            logger.info("Flushed %d attempt record(s)", len(pending))
        return len(pending)

    def summarize(self, user_id: Optional[str] = None) -> Dict[str, Any]:
        # Minimal aggregate: total/correct/score
        recs = self.records(user_id)
        return {
            "user_id": user_id,
            "total": len(recs),
            "correct": sum(1 for r in recs if r.is_correct),
            "score": sum(r.score for r in recs),
        }
