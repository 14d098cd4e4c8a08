from __future__ import annotations

"""Categorical groupings of attempts: time spent, attempt count, score, clock time.

Every function returns an ordered mapping containing all of its labels, with
zero counts where no attempt falls in a bucket. Records missing the field a
grouping needs (e.g. no timestamp for the hour view) are left out of that
grouping only.
"""

from typing import Dict, Iterable, List, Optional

import numpy as np
import pandas as pd

from .config import AnalyticsConfig
from .models import BucketStats
from .prepare import RecordLike, prepare

TIME_SPENT_LABELS = [
    "Quick (<30 sec)",
    "Short (30-60 sec)",
    "Medium (1-2 min)",
    "Long (2-5 min)",
    "Very Long (>5 min)",
]
_TIME_SPENT_EDGES = [-np.inf, 30, 60, 120, 300, np.inf]

ATTEMPT_LABELS = ["1 Attempt", "2 Attempts", "3 Attempts", "4+ Attempts"]

SCORE_LABELS = ["0-20", "21-40", "41-60", "61-80", "81-100"]
_SCORE_EDGES = [-np.inf, 20, 40, 60, 80, np.inf]

HOUR_LABELS = [f"{h:02d}" for h in range(24)]

TIME_OF_DAY_LABELS = [
    "Morning (6AM-12PM)",
    "Afternoon (12PM-5PM)",
    "Evening (5PM-9PM)",
    "Night (9PM-6AM)",
]

DAY_OF_WEEK_LABELS = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


def time_spent_label(seconds: float) -> str:
    if seconds < 30:
        return TIME_SPENT_LABELS[0]
    if seconds < 60:
        return TIME_SPENT_LABELS[1]
    if seconds < 120:
        return TIME_SPENT_LABELS[2]
    if seconds < 300:
        return TIME_SPENT_LABELS[3]
    return TIME_SPENT_LABELS[4]


def attempt_label(attempt_count: int) -> str:
    if attempt_count >= 4:
        return ATTEMPT_LABELS[3]
    return ATTEMPT_LABELS[max(attempt_count, 1) - 1]


def time_of_day_label(hour: int) -> str:
    if 6 <= hour < 12:
        return TIME_OF_DAY_LABELS[0]
    if 12 <= hour < 17:
        return TIME_OF_DAY_LABELS[1]
    if 17 <= hour < 21:
        return TIME_OF_DAY_LABELS[2]
    return TIME_OF_DAY_LABELS[3]


def _tally(df: pd.DataFrame, keys: pd.Series, labels: List[str]) -> Dict[str, BucketStats]:
    correct = df["is_correct"].astype("int64")
    grouped = correct.groupby(keys.astype(object), dropna=True)
    totals = grouped.size().reindex(labels, fill_value=0)
    corrects = grouped.sum().reindex(labels, fill_value=0)
    return {label: BucketStats(total=int(totals[label]), correct=int(corrects[label])) for label in labels}


def bucket_by_time_spent(records: Optional[Iterable[RecordLike]], cfg: Optional[AnalyticsConfig] = None) -> Dict[str, BucketStats]:
    """Low-inclusive buckets: exactly 30 s is Short, exactly 60 s is Medium, ..."""
    df = prepare(records, cfg)
    keys = pd.cut(df["time_spent_seconds"], bins=_TIME_SPENT_EDGES, right=False, labels=TIME_SPENT_LABELS)
    return _tally(df, keys, TIME_SPENT_LABELS)


def bucket_by_attempt_count(records: Optional[Iterable[RecordLike]], cfg: Optional[AnalyticsConfig] = None) -> Dict[str, BucketStats]:
    df = prepare(records, cfg)
    return _tally(df, df["attempt_count"].map(attempt_label), ATTEMPT_LABELS)


def bucket_by_score(
    records: Optional[Iterable[RecordLike]],
    cfg: Optional[AnalyticsConfig] = None,
    *,
    max_score: Optional[float] = None,
) -> Dict[str, BucketStats]:
    """Score distribution over inclusive 0-100 ranges.

    Scores are taken as already normalized to 0-100 unless ``max_score`` is
    given, in which case each score is scaled by 100 / max_score first. Values
    below the range fall in "0-20", values above it in "81-100".
    """
    df = prepare(records, cfg)
    scores = df["score"].astype("float64")
    if max_score is not None:
        if max_score <= 0:
            raise ValueError("max_score must be > 0")
        scores = scores / float(max_score) * 100.0
    keys = pd.cut(scores, bins=_SCORE_EDGES, right=True, labels=SCORE_LABELS)
    return _tally(df, keys, SCORE_LABELS)


def bucket_by_hour_of_day(records: Optional[Iterable[RecordLike]], cfg: Optional[AnalyticsConfig] = None) -> Dict[str, BucketStats]:
    df = prepare(records, cfg)
    return _tally(df, df["local_ts"].dt.strftime("%H"), HOUR_LABELS)


def bucket_by_time_of_day(records: Optional[Iterable[RecordLike]], cfg: Optional[AnalyticsConfig] = None) -> Dict[str, BucketStats]:
    df = prepare(records, cfg)
    hours = df["local_ts"].dt.hour
    keys = hours.map(lambda h: None if pd.isna(h) else time_of_day_label(int(h)))
    return _tally(df, keys, TIME_OF_DAY_LABELS)


def bucket_by_day_of_week(records: Optional[Iterable[RecordLike]], cfg: Optional[AnalyticsConfig] = None) -> Dict[str, BucketStats]:
    df = prepare(records, cfg)
    # Fixed English names independent of the process locale
    keys = df["local_ts"].dt.dayofweek.map(lambda d: None if pd.isna(d) else DAY_OF_WEEK_LABELS[(int(d) + 1) % 7])
    return _tally(df, keys, DAY_OF_WEEK_LABELS)
