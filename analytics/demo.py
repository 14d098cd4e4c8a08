from __future__ import annotations

"""Demo script for analytics module.

Loads stored attempts, computes the progress summary, buckets and time
series, and writes basic plots plus a CSV snapshot to ./reports.
"""

from pathlib import Path
from typing import Optional

import pandas as pd

from analytics.buckets import bucket_by_attempt_count, bucket_by_time_of_day, bucket_by_time_spent
from analytics.config import AnalyticsConfig
from analytics.plots import plot_buckets, plot_radar_subjects, plot_subject_accuracy, plot_trend
from analytics.summary import summarize
from analytics.timeseries import time_series
from storage.cache import AttemptRepository


def _default_data_dir() -> Path:
    # Prefer storage/data where the app writes; fall back to data/
    p1 = Path("storage/data")
    if p1.exists():
        return p1
    return Path("data")


def write_reports(
    repo: AttemptRepository,
    outdir: Path,
    *,
    user_id: Optional[str] = None,
    cfg: Optional[AnalyticsConfig] = None,
) -> Path:
    """Render plots and the daily CSV snapshot for ``user_id`` (all users when None)."""
    cfg = cfg or AnalyticsConfig()
    records = repo.load(user_id)
    outdir = Path(outdir)
    outdir.mkdir(exist_ok=True, parents=True)

    summary = summarize(records, cfg)
    daily = time_series(records, cfg)

    plot_trend(daily, save_path=outdir / "daily_accuracy.png")
    plot_buckets(bucket_by_time_spent(records, cfg), title="Time spent vs accuracy", save_path=outdir / "time_spent.png")
    plot_buckets(bucket_by_attempt_count(records, cfg), title="Attempts vs accuracy", save_path=outdir / "attempts.png")
    plot_buckets(bucket_by_time_of_day(records, cfg), title="Time of day", save_path=outdir / "time_of_day.png")
    for exam_type in summary.exams:
        plot_subject_accuracy(summary, exam_type, save_path=outdir / f"subjects_{exam_type}.png")
        plot_radar_subjects(summary, exam_type, save_path=outdir / f"radar_{exam_type}.png")

    snapshot = outdir / "daily_snapshot.csv"
    pd.DataFrame([b.model_dump() for b in daily]).to_csv(snapshot, index=False)
    return snapshot


def main() -> int:
    data_dir = _default_data_dir()
    if not data_dir.exists():
        print(f"Attempt store not found: {data_dir}")
        return 2
    repo = AttemptRepository(data_dir)
    snapshot = write_reports(repo, Path("reports"))
    print(f"Reports saved to: {snapshot.parent.resolve()}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
