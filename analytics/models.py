from __future__ import annotations

"""Result shapes returned by the progress aggregator."""

import datetime as dt
from typing import Dict, Literal

from pydantic import BaseModel, Field, computed_field

from .metrics import percentage


class BucketStats(BaseModel):
    total: int = Field(0, ge=0)
    correct: int = Field(0, ge=0)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def accuracy(self) -> float:
        return percentage(self.correct, self.total)


class SubjectProgress(BucketStats):
    chapters: Dict[str, BucketStats] = Field(default_factory=dict)


class ExamProgress(BucketStats):
    subjects: Dict[str, SubjectProgress] = Field(default_factory=dict)


class ProgressSummary(BucketStats):
    """Overall totals plus the exam -> subject -> chapter tree.

    Records without an exam type still count in the overall totals; records
    missing a subject or chapter stop at the deepest level they name.
    """

    score: int = 0
    time_spent_seconds: int = Field(0, ge=0)
    exams: Dict[str, ExamProgress] = Field(default_factory=dict)


class OverallStats(BaseModel):
    total_attempts: int = 0
    correct_answers: int = 0
    total_score: int = 0
    total_time_seconds: int = 0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def accuracy_percentage(self) -> float:
        return percentage(self.correct_answers, self.total_attempts)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_time_hours(self) -> float:
        return self.total_time_seconds / 3600.0


class DailyBucket(BaseModel):
    date: dt.date
    total_attempts: int = Field(0, ge=0)
    correct_attempts: int = Field(0, ge=0)
    time_spent_minutes: float = Field(0.0, ge=0)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def accuracy_percent(self) -> float:
        return percentage(self.correct_attempts, self.total_attempts)


class StudySession(BaseModel):
    start: dt.datetime
    end: dt.datetime
    questions: int = Field(0, ge=0)
    correct: int = Field(0, ge=0)
    time_spent_seconds: int = Field(0, ge=0)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def accuracy(self) -> float:
        return percentage(self.correct, self.questions)


class Goals(BaseModel):
    """Targets a little above the current level: accuracy %, questions, study hours."""

    accuracy: int = Field(0, ge=0, le=100)
    questions: int = Field(0, ge=0)
    hours: int = Field(0, ge=0)


class GoalProgress(BaseModel):
    accuracy: float = 0.0
    questions: float = 0.0
    hours: float = 0.0


class Milestone(BaseModel):
    name: str
    threshold: float
    achieved: bool
    category: Literal["Overall", "Subject"] = "Overall"
