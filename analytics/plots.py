from __future__ import annotations

"""Matplotlib plots for daily trends, bucket accuracy and subject profiles."""

import os
from typing import List, Mapping, Optional, Union

import numpy as np
import matplotlib.pyplot as plt

from .models import BucketStats, DailyBucket, ProgressSummary

PathLike = Union[str, "os.PathLike[str]"]


def plot_trend(
    buckets: List[DailyBucket],
    *,
    value_col: str = "accuracy_percent",
    save_path: Optional[PathLike] = None,
) -> None:
    if not buckets:
        return
    dates = [b.date for b in buckets]
    values = [getattr(b, value_col) for b in buckets]
    plt.figure()
    plt.plot(dates, values, marker="o", label=value_col)
    totals = [b.total_attempts for b in buckets]
    ax2 = plt.gca().twinx()
    ax2.bar(dates, totals, alpha=0.2, color="tab:green", label="Questions Attempted")
    ax2.set_ylabel("Questions Attempted")
    plt.gcf().autofmt_xdate()
    plt.title(f"Daily trend : {value_col}")
    if save_path:
        plt.savefig(save_path, bbox_inches="tight", dpi=150)
    plt.close()


def plot_buckets(
    stats: Mapping[str, BucketStats],
    *,
    title: str = "Accuracy by bucket",
    save_path: Optional[PathLike] = None,
) -> None:
    if not stats or sum(s.total for s in stats.values()) == 0:
        return
    labels = list(stats.keys())
    acc = [stats[k].accuracy for k in labels]
    x = np.arange(len(labels))
    plt.figure()
    bars = plt.bar(x, acc)
    for rect, k in zip(bars, labels):
        plt.annotate(
            f"n={stats[k].total}",
            (rect.get_x() + rect.get_width() / 2, rect.get_height()),
            ha="center",
            va="bottom",
            fontsize=8,
        )
    plt.xticks(ticks=x, labels=labels, rotation=30, ha="right")
    plt.ylim(0, 105)
    plt.ylabel("Accuracy (%)")
    plt.title(title)
    if save_path:
        plt.savefig(save_path, bbox_inches="tight", dpi=150)
    plt.close()


def plot_subject_accuracy(
    summary: ProgressSummary,
    exam_type: str,
    *,
    save_path: Optional[PathLike] = None,
) -> None:
    exam = summary.exams.get(exam_type)
    if exam is None or not exam.subjects:
        return
    plot_buckets(exam.subjects, title=f"Subject accuracy : {exam_type}", save_path=save_path)


def plot_radar_subjects(
    summary: ProgressSummary,
    exam_type: str,
    *,
    save_path: Optional[PathLike] = None,
) -> None:
    exam = summary.exams.get(exam_type)
    if exam is None or len(exam.subjects) < 3:
        return
    labels = list(exam.subjects.keys())
    vals = np.array([exam.subjects[k].accuracy for k in labels])
    vals = np.concatenate([vals, vals[:1]])
    angles = np.linspace(0, 2 * np.pi, len(labels), endpoint=False)
    angles = np.concatenate([angles, angles[:1]])

    fig = plt.figure()
    ax = fig.add_subplot(111, polar=True)
    ax.plot(angles, vals)
    ax.fill(angles, vals, alpha=0.1)
    ax.set_xticks(angles[:-1])
    ax.set_xticklabels(labels)
    ax.set_ylim(0, 100)
    ax.set_title(f"Subject profile : {exam_type}")
    if save_path:
        plt.savefig(save_path, bbox_inches="tight", dpi=150)
    plt.close()
