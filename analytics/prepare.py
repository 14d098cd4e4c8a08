from __future__ import annotations

"""Turn raw attempt records into a typed DataFrame for aggregation."""

from datetime import datetime, timezone
from typing import Any, Dict, Hashable, Iterable, List, Mapping, Optional, Tuple, Union

import pandas as pd

from examprep.results.schema import AttemptRecord

from .config import AnalyticsConfig

RecordLike = Union[AttemptRecord, Mapping[str, Any]]

COLUMNS = [
    "question_id",
    "exam_type",
    "subject",
    "chapter",
    "user_id",
    "is_correct",
    "score",
    "time_spent_seconds",
    "attempt_count",
    "submitted_at",
]

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def coerce_records(records: Optional[Iterable[RecordLike]]) -> List[AttemptRecord]:
    """Validate store-shaped mappings into AttemptRecord; models pass through."""
    if records is None:
        return []
    return [r if isinstance(r, AttemptRecord) else AttemptRecord.model_validate(r) for r in records]


def apply_attempt_policy(records: List[AttemptRecord], policy: str) -> List[AttemptRecord]:
    """Keep every attempt ("all"), or only the first / latest one per user and question.

    Records without a question id cannot be matched to a re-attempt and are
    always kept. Input order is preserved among the kept records.
    """
    if policy == "all":
        return list(records)
    if policy not in ("first", "latest"):
        raise ValueError(f"Unknown attempt policy: {policy}")

    chosen: Dict[Hashable, Tuple[Tuple[int, datetime], int]] = {}
    unmatched: List[int] = []
    for pos, rec in enumerate(records):
        if rec.question_id is None:
            unmatched.append(pos)
            continue
        key = (rec.user_id, rec.exam_type, rec.subject, rec.chapter, rec.question_id)
        rank = (rec.attempt_count, rec.submitted_at or _EPOCH)
        best = chosen.get(key)
        if best is None:
            chosen[key] = (rank, pos)
        elif policy == "first" and rank < best[0]:
            chosen[key] = (rank, pos)
        elif policy == "latest" and rank >= best[0]:
            chosen[key] = (rank, pos)
    keep = sorted([pos for _, pos in chosen.values()] + unmatched)
    return [records[i] for i in keep]


def records_to_frame(records: List[AttemptRecord], cfg: AnalyticsConfig) -> pd.DataFrame:
    """Build the aggregation frame.

    Adds ``local_ts`` (submitted_at in the configured zone) and ``date`` (its
    calendar day); both are missing for records without a timestamp.
    """
    rows = [
        {
            "question_id": r.question_id,
            "exam_type": r.exam_type,
            "subject": r.subject,
            "chapter": r.chapter,
            "user_id": r.user_id,
            "is_correct": bool(r.is_correct),
            "score": int(r.score),
            "time_spent_seconds": int(r.time_spent_seconds),
            "attempt_count": int(r.attempt_count),
            "submitted_at": r.submitted_at,
        }
        for r in records
    ]
    df = pd.DataFrame(rows, columns=COLUMNS)
    df["is_correct"] = df["is_correct"].astype(bool)
    for col in ("score", "time_spent_seconds", "attempt_count"):
        df[col] = df[col].astype("int64")
    df["submitted_at"] = pd.to_datetime(df["submitted_at"], utc=True)
    df["local_ts"] = df["submitted_at"].dt.tz_convert(cfg.timezone)
    df["date"] = df["local_ts"].dt.date
    return df


def prepare(records: Optional[Iterable[RecordLike]], cfg: Optional[AnalyticsConfig] = None) -> pd.DataFrame:
    """Coerce, apply the attempt policy and build the frame in one step."""
    cfg = cfg or AnalyticsConfig()
    return records_to_frame(prepared_records(records, cfg), cfg)


def prepared_records(records: Optional[Iterable[RecordLike]], cfg: Optional[AnalyticsConfig] = None) -> List[AttemptRecord]:
    cfg = cfg or AnalyticsConfig()
    return apply_attempt_policy(coerce_records(records), cfg.attempt_policy)
