from __future__ import annotations

"""Progress summary: exam -> subject -> chapter roll-up and overall totals."""

import math
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .config import AnalyticsConfig
from .metrics import percentage
from .models import (
    BucketStats,
    ExamProgress,
    GoalProgress,
    Goals,
    Milestone,
    OverallStats,
    ProgressSummary,
    SubjectProgress,
)
from .prepare import RecordLike, prepared_records


def _node() -> Dict[str, Any]:
    return {"total": 0, "correct": 0}


def _bump(node: Dict[str, Any], correct: bool) -> None:
    node["total"] += 1
    node["correct"] += 1 if correct else 0


def summarize(records: Optional[Iterable[RecordLike]], cfg: Optional[AnalyticsConfig] = None) -> ProgressSummary:
    """Aggregate attempts into overall totals and the nested progress tree.

    Each level counts the records that name it; a record with no subject is
    counted under its exam but in no subject, and so on. Empty input yields a
    summary with zero totals and no exams.
    """
    recs = prepared_records(records, cfg)
    overall = {"total": 0, "correct": 0, "score": 0, "time_spent_seconds": 0}
    exams: Dict[str, Dict[str, Any]] = {}

    for rec in recs:
        overall["total"] += 1
        overall["correct"] += 1 if rec.is_correct else 0
        overall["score"] += rec.score
        overall["time_spent_seconds"] += rec.time_spent_seconds
        if rec.exam_type is None:
            continue
        exam = exams.setdefault(rec.exam_type, {**_node(), "subjects": {}})
        _bump(exam, rec.is_correct)
        if rec.subject is None:
            continue
        subj = exam["subjects"].setdefault(rec.subject, {**_node(), "chapters": {}})
        _bump(subj, rec.is_correct)
        if rec.chapter is None:
            continue
        chap = subj["chapters"].setdefault(rec.chapter, _node())
        _bump(chap, rec.is_correct)

    return ProgressSummary(
        **overall,
        exams={
            exam_type: ExamProgress(
                total=exam["total"],
                correct=exam["correct"],
                subjects={
                    subject: SubjectProgress(
                        total=subj["total"],
                        correct=subj["correct"],
                        chapters={
                            chapter: BucketStats(**chap) for chapter, chap in sorted(subj["chapters"].items())
                        },
                    )
                    for subject, subj in sorted(exam["subjects"].items())
                },
            )
            for exam_type, exam in sorted(exams.items())
        },
    )


def completion_percentage(
    summary: ProgressSummary,
    exam_type: str,
    subject: Optional[str] = None,
    chapter: Optional[str] = None,
) -> float:
    """Percentage correct for an exam, subject or chapter (0.0 when absent).

    Always computed from summed counts at that level, so larger chapters weigh more.
    """
    if chapter is not None and subject is None:
        raise ValueError("chapter requires a subject")
    exam = summary.exams.get(exam_type)
    node: Optional[BucketStats] = exam
    if exam is not None and subject is not None:
        subj = exam.subjects.get(subject)
        node = subj
        if subj is not None and chapter is not None:
            node = subj.chapters.get(chapter)
    if node is None:
        return 0.0
    return percentage(node.correct, node.total)


def overall_stats(records: Optional[Iterable[RecordLike]], cfg: Optional[AnalyticsConfig] = None) -> OverallStats:
    """Headline numbers for the dashboard: attempts, correct, score, time."""
    summary = summarize(records, cfg)
    return OverallStats(
        total_attempts=summary.total,
        correct_answers=summary.correct,
        total_score=summary.score,
        total_time_seconds=summary.time_spent_seconds,
    )


# (name, threshold, measure) for the milestones every learner works toward
OVERALL_MILESTONES: List[Tuple[str, float, str]] = [
    ("First Question", 1, "questions"),
    ("10 Questions", 10, "questions"),
    ("50 Questions", 50, "questions"),
    ("100 Questions", 100, "questions"),
    ("50% Accuracy", 50, "accuracy"),
    ("70% Accuracy", 70, "accuracy"),
    ("90% Accuracy", 90, "accuracy"),
    ("1 Hour Study", 1, "hours"),
    ("5 Hours Study", 5, "hours"),
    ("10 Hours Study", 10, "hours"),
]
SUBJECT_QUESTIONS_MILESTONE = 10
SUBJECT_ACCURACY_MILESTONE = 80
SUBJECT_ACCURACY_MIN_ATTEMPTS = 5


def _ceil(value: float) -> int:
    # Float noise must not bump a target: 50 * 1.1 is 55.000000000000007
    return math.ceil(round(value, 6))


def goals(stats: OverallStats) -> Goals:
    """Next targets: accuracy +10% (capped at 100), questions and hours +20%, rounded up."""
    return Goals(
        accuracy=min(100, _ceil(stats.accuracy_percentage * 1.1)),
        questions=_ceil(stats.total_attempts * 1.2),
        hours=_ceil(stats.total_time_hours * 1.2),
    )


def goal_progress(stats: OverallStats, target: Optional[Goals] = None) -> GoalProgress:
    """Current value as a percentage of each goal (0.0 for a zero goal)."""
    target = target or goals(stats)
    return GoalProgress(
        accuracy=percentage(stats.accuracy_percentage, target.accuracy),
        questions=percentage(stats.total_attempts, target.questions),
        hours=percentage(stats.total_time_hours, target.hours),
    )


def milestones(stats: OverallStats, summary: ProgressSummary) -> List[Milestone]:
    """Fixed milestones with their achieved flag, then subject milestones already reached.

    Subjects with the same name under different exams are counted together.
    """
    measures = {
        "questions": stats.total_attempts,
        "accuracy": stats.accuracy_percentage,
        "hours": stats.total_time_hours,
    }
    out = [
        Milestone(name=name, threshold=threshold, achieved=measures[measure] >= threshold)
        for name, threshold, measure in OVERALL_MILESTONES
    ]

    subjects: Dict[str, Dict[str, int]] = {}
    for exam in summary.exams.values():
        for name, subj in exam.subjects.items():
            node = subjects.setdefault(name, _node())
            node["total"] += subj.total
            node["correct"] += subj.correct

    for name, node in sorted(subjects.items()):
        if node["total"] >= SUBJECT_QUESTIONS_MILESTONE:
            out.append(
                Milestone(
                    name=f"{SUBJECT_QUESTIONS_MILESTONE} {name} Questions",
                    threshold=SUBJECT_QUESTIONS_MILESTONE,
                    achieved=True,
                    category="Subject",
                )
            )
        accuracy = percentage(node["correct"], node["total"])
        if accuracy >= SUBJECT_ACCURACY_MILESTONE and node["total"] >= SUBJECT_ACCURACY_MIN_ATTEMPTS:
            out.append(
                Milestone(
                    name=f"{SUBJECT_ACCURACY_MILESTONE}% in {name}",
                    threshold=SUBJECT_ACCURACY_MILESTONE,
                    achieved=True,
                    category="Subject",
                )
            )
    return out
