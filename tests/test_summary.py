import unittest
from datetime import datetime, timedelta, timezone

from analytics import (
    AnalyticsConfig,
    Goals,
    OverallStats,
    apply_attempt_policy,
    coerce_records,
    completion_percentage,
    format_percent,
    goal_progress,
    goals,
    milestones,
    overall_stats,
    percentage,
    prepare,
    summarize,
)
from examprep.results import AttemptRecord

T0 = datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)


def rec(
    qid,
    correct=True,
    *,
    exam="JEE",
    subject="Physics",
    chapter="Mechanics",
    user="u1",
    attempt=1,
    score=None,
    time_spent_seconds=60,
    submitted_at=T0,
):
    return AttemptRecord(
        question_id=qid,
        exam_type=exam,
        subject=subject,
        chapter=chapter,
        user_id=user,
        is_correct=correct,
        score=(4 if correct else -1) if score is None else score,
        attempt_count=attempt,
        time_spent_seconds=time_spent_seconds,
        submitted_at=submitted_at,
    )


class PercentageTests(unittest.TestCase):
    def test_zero_total(self) -> None:
        self.assertEqual(percentage(0, 0), 0.0)

    def test_formatting_happens_at_the_edge(self) -> None:
        self.assertAlmostEqual(percentage(2, 3), 66.6666666, places=5)
        self.assertEqual(format_percent(percentage(2, 3)), "66.67")
        self.assertEqual(format_percent(50.0, digits=0), "50")


class SummarizeTests(unittest.TestCase):
    def test_chapter_accuracy(self) -> None:
        summary = summarize([rec("q1"), rec("q2"), rec("q3", correct=False)])
        chap = summary.exams["JEE"].subjects["Physics"].chapters["Mechanics"]
        self.assertEqual((chap.total, chap.correct), (3, 2))
        self.assertEqual(format_percent(chap.accuracy), "66.67")

    def test_empty_input(self) -> None:
        for empty in ([], None):
            summary = summarize(empty)
            self.assertEqual((summary.total, summary.correct, summary.score), (0, 0, 0))
            self.assertEqual(summary.accuracy, 0.0)
            self.assertEqual(summary.exams, {})

    def test_sum_invariant(self) -> None:
        records = [
            rec("a1", chapter="Mechanics"),
            rec("a2", correct=False, chapter="Mechanics"),
            rec("a3", chapter="Optics"),
            rec("a4", correct=False, chapter="Optics"),
            rec("a5", chapter="Waves"),
            rec("b1", subject="Chemistry", chapter="Atoms"),
            rec("c1", exam="NEET", subject="Biology", chapter="Cells", correct=False),
        ]
        summary = summarize(records)
        for exam in summary.exams.values():
            self.assertEqual(exam.total, sum(s.total for s in exam.subjects.values()))
            self.assertEqual(exam.correct, sum(s.correct for s in exam.subjects.values()))
            for subj in exam.subjects.values():
                self.assertEqual(subj.total, sum(c.total for c in subj.chapters.values()))
                self.assertEqual(subj.correct, sum(c.correct for c in subj.chapters.values()))
        self.assertEqual(summary.total, 7)
        self.assertEqual(list(summary.exams), ["JEE", "NEET"])
        self.assertEqual(list(summary.exams["JEE"].subjects["Physics"].chapters), ["Mechanics", "Optics", "Waves"])

    def test_records_missing_levels_stop_early(self) -> None:
        summary = summarize([rec("q1"), rec("q2", chapter=None), rec("q3", subject=None, chapter=None), rec("q4", exam=None)])
        self.assertEqual(summary.total, 4)
        self.assertEqual(summary.exams["JEE"].total, 3)
        self.assertEqual(summary.exams["JEE"].subjects["Physics"].total, 2)
        self.assertEqual(summary.exams["JEE"].subjects["Physics"].chapters["Mechanics"].total, 1)

    def test_accepts_store_shaped_mappings(self) -> None:
        rows = [
            {"questionId": "q1", "examType": "JEE", "subject": "Physics", "chapter": "Optics", "isCorrect": True, "score": 4},
            {"questionId": "q2", "examType": "JEE", "subject": "Physics", "chapter": "Optics", "isCorrect": False},
        ]
        self.assertEqual(len(coerce_records(rows)), 2)
        summary = summarize(rows)
        self.assertEqual(summary.exams["JEE"].subjects["Physics"].chapters["Optics"].correct, 1)
        self.assertEqual(summary.score, 4)

    def test_imperfect_rows_do_not_fail_the_batch(self) -> None:
        rows = [
            {"examType": "JEE", "subject": "Physics", "chapter": "Mechanics", "isCorrect": True},
            {"questionId": "", "examType": "JEE", "subject": "Physics", "chapter": "Mechanics"},
            {"questionId": "q3", "examType": "JEE", "subject": "Physics", "timeSpent": -3},
            {"questionId": "q4", "examType": "JEE", "timeSpent": "45.5", "isCorrect": True},
        ]
        summary = summarize(rows)
        self.assertEqual((summary.total, summary.correct), (4, 2))
        self.assertEqual(summary.time_spent_seconds, 45)
        self.assertEqual(summary.exams["JEE"].subjects["Physics"].chapters["Mechanics"].total, 2)
        self.assertEqual(len(apply_attempt_policy(coerce_records(rows), "latest")), 4)

    def test_completion_percentage(self) -> None:
        summary = summarize([rec("q1"), rec("q2", correct=False), rec("q3", subject="Chemistry", chapter="Atoms")])
        self.assertAlmostEqual(completion_percentage(summary, "JEE"), 200 / 3)
        self.assertEqual(completion_percentage(summary, "JEE", "Physics"), 50.0)
        self.assertEqual(completion_percentage(summary, "JEE", "Chemistry", "Atoms"), 100.0)
        self.assertEqual(completion_percentage(summary, "NEET"), 0.0)
        self.assertEqual(completion_percentage(summary, "JEE", "Physics", "Optics"), 0.0)
        with self.assertRaises(ValueError):
            completion_percentage(summary, "JEE", chapter="Mechanics")

    def test_overall_stats(self) -> None:
        stats = overall_stats([rec("q1", time_spent_seconds=1800), rec("q2", correct=False, time_spent_seconds=1800)])
        self.assertEqual(stats.total_attempts, 2)
        self.assertEqual(stats.correct_answers, 1)
        self.assertEqual(stats.total_score, 3)
        self.assertEqual(stats.accuracy_percentage, 50.0)
        self.assertEqual(stats.total_time_hours, 1.0)


class GoalTests(unittest.TestCase):
    def test_targets_round_up(self) -> None:
        stats = OverallStats(total_attempts=10, correct_answers=5, total_time_seconds=3600)
        self.assertEqual(goals(stats), Goals(accuracy=55, questions=12, hours=2))

    def test_accuracy_goal_is_capped(self) -> None:
        stats = OverallStats(total_attempts=3, correct_answers=3, total_time_seconds=60)
        self.assertEqual(goals(stats).accuracy, 100)

    def test_empty_stats(self) -> None:
        self.assertEqual(goals(OverallStats()), Goals(accuracy=0, questions=0, hours=0))
        progress = goal_progress(OverallStats())
        self.assertEqual((progress.accuracy, progress.questions, progress.hours), (0.0, 0.0, 0.0))

    def test_progress_against_goal(self) -> None:
        stats = OverallStats(total_attempts=10, correct_answers=5, total_time_seconds=3600)
        progress = goal_progress(stats)
        self.assertAlmostEqual(progress.accuracy, 50 / 55 * 100)
        self.assertAlmostEqual(progress.questions, 10 / 12 * 100)
        self.assertEqual(progress.hours, 50.0)
        explicit = goal_progress(stats, Goals(accuracy=50, questions=20, hours=4))
        self.assertEqual((explicit.accuracy, explicit.questions, explicit.hours), (100.0, 50.0, 25.0))


class MilestoneTests(unittest.TestCase):
    def setUp(self) -> None:
        self.records = (
            [rec(f"p{i}") for i in range(6)]
            + [rec(f"n{i}", exam="NEET") for i in range(4)]
            + [rec(f"c{i}", subject="Chemistry") for i in range(4)]
            + [rec(f"m{i}", correct=i > 0, subject="Mathematics") for i in range(5)]
        )

    def test_fixed_milestones_come_first(self) -> None:
        found = milestones(overall_stats(self.records), summarize(self.records))
        fixed = [m for m in found if m.category == "Overall"]
        self.assertEqual(len(fixed), 10)
        self.assertEqual(found[:10], fixed)
        reached = {m.name for m in fixed if m.achieved}
        self.assertEqual(
            reached, {"First Question", "10 Questions", "50% Accuracy", "70% Accuracy", "90% Accuracy"}
        )

    def test_subject_milestones(self) -> None:
        found = milestones(overall_stats(self.records), summarize(self.records))
        subject = [m for m in found if m.category == "Subject"]
        # Physics is summed across JEE and NEET; Chemistry has too few attempts
        self.assertEqual([m.name for m in subject], ["80% in Mathematics", "10 Physics Questions", "80% in Physics"])
        self.assertTrue(all(m.achieved for m in subject))

    def test_nothing_reached_on_empty_input(self) -> None:
        found = milestones(OverallStats(), summarize([]))
        self.assertEqual(len(found), 10)
        self.assertFalse(any(m.achieved for m in found))


class AttemptPolicyTests(unittest.TestCase):
    def setUp(self) -> None:
        self.records = [
            rec("q1", correct=False, attempt=1, submitted_at=T0),
            rec("q2", attempt=1, submitted_at=T0),
            rec("q1", correct=True, attempt=2, submitted_at=T0 + timedelta(hours=1)),
            rec("q1", correct=False, user="u2", attempt=1, submitted_at=T0),
        ]

    def test_all_keeps_every_attempt(self) -> None:
        self.assertEqual(summarize(self.records).total, 4)

    def test_first_and_latest(self) -> None:
        first = apply_attempt_policy(self.records, "first")
        latest = apply_attempt_policy(self.records, "latest")
        self.assertEqual([(r.question_id, r.attempt_count) for r in first], [("q1", 1), ("q2", 1), ("q1", 1)])
        self.assertEqual([(r.question_id, r.attempt_count) for r in latest], [("q2", 1), ("q1", 2), ("q1", 1)])

    def test_policy_changes_accuracy(self) -> None:
        first = summarize(self.records, AnalyticsConfig(attempt_policy="first"))
        latest = summarize(self.records, AnalyticsConfig(attempt_policy="latest"))
        self.assertEqual((first.total, first.correct), (3, 1))
        self.assertEqual((latest.total, latest.correct), (3, 2))

    def test_unknown_policy(self) -> None:
        with self.assertRaises(ValueError):
            apply_attempt_policy(self.records, "best")


class PrepareTests(unittest.TestCase):
    def test_local_calendar_day(self) -> None:
        late = rec("q1", submitted_at=datetime(2024, 5, 1, 20, 0, tzinfo=timezone.utc))
        utc = prepare([late])
        kolkata = prepare([late], AnalyticsConfig(timezone="Asia/Kolkata"))
        self.assertEqual(str(utc["date"].iloc[0]), "2024-05-01")
        self.assertEqual(str(kolkata["date"].iloc[0]), "2024-05-02")
        self.assertEqual(int(kolkata["local_ts"].dt.hour.iloc[0]), 1)

    def test_empty_frame_has_columns(self) -> None:
        df = prepare([])
        self.assertTrue(df.empty)
        for col in ("is_correct", "local_ts", "date"):
            self.assertIn(col, df.columns)

    def test_bad_timezone_rejected(self) -> None:
        with self.assertRaises(ValueError):
            AnalyticsConfig(timezone="Mars/Olympus")


if __name__ == "__main__":
    unittest.main()
