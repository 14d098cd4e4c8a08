from .config import AnalyticsConfig
from .metrics import percentage, format_percent
from .models import (
    BucketStats,
    SubjectProgress,
    ExamProgress,
    ProgressSummary,
    OverallStats,
    DailyBucket,
    StudySession,
    Goals,
    GoalProgress,
    Milestone,
)
from .prepare import coerce_records, apply_attempt_policy, records_to_frame, prepare
from .summary import summarize, completion_percentage, overall_stats, goals, goal_progress, milestones
from .buckets import (
    bucket_by_time_spent,
    bucket_by_attempt_count,
    bucket_by_score,
    bucket_by_hour_of_day,
    bucket_by_time_of_day,
    bucket_by_day_of_week,
)
from .timeseries import (
    time_series,
    local_today,
    longest_streak,
    current_streak,
    study_streaks,
    filter_recent,
    study_sessions,
)
from .plots import plot_trend, plot_buckets, plot_subject_accuracy, plot_radar_subjects

__all__ = [
    "AnalyticsConfig",
    "percentage",
    "format_percent",
    "BucketStats",
    "SubjectProgress",
    "ExamProgress",
    "ProgressSummary",
    "OverallStats",
    "DailyBucket",
    "StudySession",
    "Goals",
    "GoalProgress",
    "Milestone",
    "coerce_records",
    "apply_attempt_policy",
    "records_to_frame",
    "prepare",
    "summarize",
    "completion_percentage",
    "overall_stats",
    "goals",
    "goal_progress",
    "milestones",
    "bucket_by_time_spent",
    "bucket_by_attempt_count",
    "bucket_by_score",
    "bucket_by_hour_of_day",
    "bucket_by_time_of_day",
    "bucket_by_day_of_week",
    "time_series",
    "local_today",
    "longest_streak",
    "current_streak",
    "study_streaks",
    "filter_recent",
    "study_sessions",
    "plot_trend",
    "plot_buckets",
    "plot_subject_accuracy",
    "plot_radar_subjects",
]
