from __future__ import annotations

"""Daily time series, study streaks and study sessions."""

from datetime import date, datetime, timedelta, timezone
from typing import Iterable, List, Optional
from zoneinfo import ZoneInfo

import pandas as pd

from .config import AnalyticsConfig
from .models import DailyBucket, StudySession
from .prepare import RecordLike, prepare


def time_series(
    records: Optional[Iterable[RecordLike]],
    cfg: Optional[AnalyticsConfig] = None,
    *,
    subject: Optional[str] = None,
) -> List[DailyBucket]:
    """One bucket per calendar day with at least one attempt, ascending by date.

    Days without attempts are omitted, so consecutive buckets need not be
    consecutive days. Records without a timestamp are ignored here. With
    ``subject`` only that subject's attempts are counted.
    """
    df = prepare(records, cfg)
    mask = df["date"].notna()
    if subject is not None:
        mask &= df["subject"] == subject
    df = df[mask.astype(bool)]
    if df.empty:
        return []
    g = (
        df.groupby("date")
        .agg(
            total=("is_correct", "size"),
            correct=("is_correct", "sum"),
            seconds=("time_spent_seconds", "sum"),
        )
        .sort_index()
    )
    return [
        DailyBucket(
            date=day,
            total_attempts=int(row.total),
            correct_attempts=int(row.correct),
            time_spent_minutes=float(row.seconds) / 60.0,
        )
        for day, row in zip(g.index, g.itertuples(index=False))
    ]


def local_today(cfg: Optional[AnalyticsConfig] = None, now: Optional[datetime] = None) -> date:
    """Calendar date of ``now`` (default: the current instant) in the configured zone."""
    cfg = cfg or AnalyticsConfig()
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(ZoneInfo(cfg.timezone)).date()


def longest_streak(dates: Iterable[date]) -> int:
    """Length of the longest run of consecutive calendar days in ``dates``."""
    ordered = sorted(set(dates))
    if not ordered:
        return 0
    best = run = 1
    for prev, cur in zip(ordered, ordered[1:]):
        if (cur - prev).days > 1:
            best = max(best, run)
            run = 1
        else:
            run += 1
    return max(best, run)


def current_streak(dates: Iterable[date], today: date) -> int:
    """Run of consecutive days ending today, or yesterday when today has no attempt yet."""
    days = set(dates)
    if today in days:
        cursor = today
    elif today - timedelta(days=1) in days:
        cursor = today - timedelta(days=1)
    else:
        return 0
    run = 0
    while cursor in days:
        run += 1
        cursor -= timedelta(days=1)
    return run


def study_streaks(
    records: Optional[Iterable[RecordLike]],
    cfg: Optional[AnalyticsConfig] = None,
    *,
    today: Optional[date] = None,
) -> dict[str, int]:
    """Longest and current streak computed from the daily time series."""
    dates = [b.date for b in time_series(records, cfg)]
    out = {"longest": longest_streak(dates)}
    if today is not None:
        out["current"] = current_streak(dates, today)
    return out


def filter_recent(buckets: List[DailyBucket], days: Optional[int], today: date) -> List[DailyBucket]:
    """Buckets dated on or after ``today - days``; ``None`` keeps everything."""
    if days is None:
        return list(buckets)
    if days < 0:
        raise ValueError("days must be >= 0")
    cutoff = today - timedelta(days=days)
    return [b for b in buckets if b.date >= cutoff]


def study_sessions(records: Optional[Iterable[RecordLike]], cfg: Optional[AnalyticsConfig] = None) -> List[StudySession]:
    """Split the chronological attempt stream into sessions.

    A new session starts whenever two consecutive attempts are more than
    ``session_break_minutes`` apart.
    """
    cfg = cfg or AnalyticsConfig()
    df = prepare(records, cfg)
    df = df[df["local_ts"].notna()].sort_values("local_ts", kind="stable")
    if df.empty:
        return []
    gap = df["local_ts"].diff() > pd.Timedelta(minutes=cfg.session_break_minutes)
    session_id = gap.cumsum()
    sessions = []
    for _, part in df.groupby(session_id, sort=True):
        sessions.append(
            StudySession(
                start=part["local_ts"].iloc[0].to_pydatetime(),
                end=part["local_ts"].iloc[-1].to_pydatetime(),
                questions=len(part),
                correct=int(part["is_correct"].sum()),
                time_spent_seconds=int(part["time_spent_seconds"].sum()),
            )
        )
    return sessions
