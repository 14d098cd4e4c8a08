from __future__ import annotations

"""CLI for examprep: score a single answer or report on stored attempts."""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from analytics.buckets import (
    bucket_by_attempt_count,
    bucket_by_day_of_week,
    bucket_by_time_of_day,
    bucket_by_time_spent,
)
from analytics.metrics import format_percent
from analytics.summary import goal_progress, goals, milestones, overall_stats, summarize
from analytics.timeseries import local_today, study_sessions, study_streaks
from storage.cache import AttemptRepository, TTLCache

from .. import __version__
from ..config.config import build_analytics_config, build_marking_scheme, load_config, validate_config
from ..scoring.engine import evaluate, numerical_tolerance
from ..scoring.errors import ScoringError
from ..scoring.models import NumericalKey, Question, parse_submission

logger = logging.getLogger(__name__)


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="examprep", description="Exam prep scoring and progress analytics")
    p.add_argument("--config", type=str, default=None, help="Path to YAML config")
    p.add_argument("--version", action="store_true", help="Print version and exit")
    sub = p.add_subparsers(dest="command")

    ev = sub.add_parser("evaluate", help="Score one answer against a question JSON file")
    ev.add_argument("--question", type=str, required=True, help="Question JSON (question-bank shape)")
    ev.add_argument("--answer", type=str, required=True, help="Answer: option number(s) like 2 or 1,3, or a numeric value")

    rp = sub.add_parser("report", help="Summarize stored attempts")
    rp.add_argument("--data-dir", type=str, default=None, help="Attempt store directory (overrides config)")
    rp.add_argument("--user", type=str, default=None, help="Only this user's attempts")
    rp.add_argument("--out", type=str, default=None, help="Also write plots and a CSV snapshot here")
    return p.parse_args(argv)


def _raw_answer(question: Question, text: str) -> Any:
    if isinstance(question.answer_key, NumericalKey):
        return text
    parts = [t.strip() for t in text.split(",") if t.strip()]
    return parts


def _cmd_evaluate(args: argparse.Namespace, cfg: Dict[str, Any]) -> int:
    scheme = build_marking_scheme(cfg)
    with Path(args.question).open("r", encoding="utf-8") as f:
        payload = json.load(f)
    question = Question.from_api(payload)
    submitted = parse_submission(question, _raw_answer(question, args.answer))
    result = evaluate(question, submitted, scheme)
    out: Dict[str, Any] = {"question_id": question.id, "is_correct": result.is_correct, "score": result.score}
    if isinstance(question.answer_key, NumericalKey):
        out["tolerance"] = numerical_tolerance(question.answer_key.value, scheme)
    print(json.dumps(out))
    return 0


def _format_buckets(title: str, buckets: Dict[str, Any]) -> List[str]:
    lines = [title]
    for label, stats in buckets.items():
        lines.append(f"  {label}: {stats.correct}/{stats.total} ({format_percent(stats.accuracy)}%)")
    return lines


def _cmd_report(args: argparse.Namespace, cfg: Dict[str, Any]) -> int:
    acfg = build_analytics_config(cfg)
    data_dir = Path(args.data_dir or cfg["storage"]["data_dir"])
    repo = AttemptRepository(data_dir, TTLCache(float(cfg["storage"]["cache_ttl_seconds"])))
    records = repo.load(args.user)

    stats = overall_stats(records, acfg)
    summary = summarize(records, acfg)
    lines = [
        f"Total: {stats.correct_answers}/{stats.total_attempts} correct "
        f"({format_percent(stats.accuracy_percentage)}%), score {stats.total_score}, "
        f"{format_percent(stats.total_time_hours)} h",
    ]
    for exam_type, exam in summary.exams.items():
        lines.append(f"{exam_type}: {exam.correct}/{exam.total} ({format_percent(exam.accuracy)}%)")
        for subject, subj in exam.subjects.items():
            lines.append(f"  {subject}: {subj.correct}/{subj.total} ({format_percent(subj.accuracy)}%)")
            for chapter, chap in subj.chapters.items():
                lines.append(f"    {chapter}: {chap.correct}/{chap.total} ({format_percent(chap.accuracy)}%)")
    lines += _format_buckets("Time spent:", bucket_by_time_spent(records, acfg))
    lines += _format_buckets("Attempts:", bucket_by_attempt_count(records, acfg))
    lines += _format_buckets("Time of day:", bucket_by_time_of_day(records, acfg))
    lines += _format_buckets("Day of week:", bucket_by_day_of_week(records, acfg))

    streaks = study_streaks(records, acfg, today=local_today(acfg))
    sessions = study_sessions(records, acfg)
    lines.append(f"Longest streak: {streaks['longest']} day(s), current: {streaks['current']} day(s)")
    if streaks["longest"] >= acfg.consistency_threshold_days:
        lines.append("Consistent study routine.")
    lines.append(f"Study sessions: {len(sessions)}")

    target = goals(stats)
    progress = goal_progress(stats, target)
    lines.append(
        f"Goals: {target.accuracy}% accuracy ({format_percent(progress.accuracy, 0)}%), "
        f"{target.questions} questions ({format_percent(progress.questions, 0)}%), "
        f"{target.hours} h ({format_percent(progress.hours, 0)}%)"
    )
    reached = milestones(stats, summary)
    lines.append(f"Milestones: {sum(m.achieved for m in reached)}/{len(reached)} achieved")
    lines += [f"  {m.name}" for m in reached if m.achieved]
    print("\n".join(lines))

    if args.out:
        from analytics.demo import write_reports

        snapshot = write_reports(repo, Path(args.out), user_id=args.user, cfg=acfg)
        print(f"Reports saved to: {snapshot.parent.resolve()}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    if args.version:
        print(f"examprep {__version__}")
        return 0

    try:
        cfg = validate_config(load_config(args.config))
    except FileNotFoundError as exc:
        print(f"ERROR: Config file not found: {exc.filename}", file=sys.stderr)
        return 1
    logging.basicConfig(level=cfg["logging"]["level"], format="%(levelname)s %(name)s: %(message)s")

    if args.command == "evaluate":
        try:
            return _cmd_evaluate(args, cfg)
        except ScoringError as exc:
            print(f"ERROR: {exc}", file=sys.stderr)
            return 2
    if args.command == "report":
        return _cmd_report(args, cfg)
    print("Nothing to do; choose a command (evaluate, report). See --help.", file=sys.stderr)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
