import os

os.environ.setdefault("MPLBACKEND", "Agg")

import contextlib
import io
import json
import tempfile
import unittest
from datetime import datetime, timedelta, timezone
from pathlib import Path

from analytics import AnalyticsConfig
from analytics.demo import write_reports
from examprep.app.cli import main
from examprep.results import AttemptRecord
from storage import AttemptRepository


def _run(argv):
    out, err = io.StringIO(), io.StringIO()
    with contextlib.redirect_stdout(out), contextlib.redirect_stderr(err):
        code = main(argv)
    return code, out.getvalue(), err.getvalue()


def _seed(data_dir: Path) -> AttemptRepository:
    t0 = datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc)
    subjects = ["Physics", "Chemistry", "Mathematics"]
    records = [
        AttemptRecord(
            question_id=f"q{i}",
            exam_type="JEE",
            subject=subjects[i % 3],
            chapter="Basics",
            user_id="u1" if i % 4 else "u2",
            is_correct=i % 2 == 0,
            score=4 if i % 2 == 0 else -1,
            time_spent_seconds=20 + 25 * i,
            attempt_count=1,
            submitted_at=t0 + timedelta(days=i // 3, minutes=5 * i),
        )
        for i in range(9)
    ]
    repo = AttemptRepository(data_dir)
    repo.append(records)
    return repo


class EvaluateCommandTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _question(self, payload) -> str:
        path = self.tmp / "question.json"
        path.write_text(json.dumps(payload), encoding="utf-8")
        return str(path)

    def test_multiple_correct_partial(self) -> None:
        q = self._question({"id": 5, "type": "multipleCorrect", "options": list("abcd"), "correct_options": [0, 1, 2, 3]})
        code, out, _ = _run(["evaluate", "--question", q, "--answer", "1, 2,3"])
        self.assertEqual(code, 0)
        self.assertEqual(json.loads(out), {"question_id": "5", "is_correct": False, "score": 2})

    def test_numerical_reports_tolerance(self) -> None:
        q = self._question({"id": "n", "type": "numerical", "correct_value": "100"})
        code, out, _ = _run(["evaluate", "--question", q, "--answer", "100.05"])
        self.assertEqual(code, 0)
        result = json.loads(out)
        self.assertTrue(result["is_correct"])
        self.assertAlmostEqual(result["tolerance"], 0.1)

    def test_scoring_errors_exit_2(self) -> None:
        q = self._question({"id": "s", "options": ["a", "b"], "correct_options": 0})
        code, _, err = _run(["evaluate", "--question", q, "--answer", "7"])
        self.assertEqual(code, 2)
        self.assertIn("do not exist", err)

        bad = self._question({"id": "b", "type": "essay"})
        code, _, err = _run(["evaluate", "--question", bad, "--answer", "1"])
        self.assertEqual(code, 2)
        self.assertIn("Unknown question type", err)

    def test_custom_config(self) -> None:
        cfg = self.tmp / "cfg.yml"
        cfg.write_text("scoring:\n  single_wrong: 0\n", encoding="utf-8")
        q = self._question({"id": "s", "options": ["a", "b"], "correct_options": 0})
        code, out, _ = _run(["--config", str(cfg), "evaluate", "--question", q, "--answer", "2"])
        self.assertEqual(code, 0)
        self.assertEqual(json.loads(out)["score"], 0)

    def test_missing_config_and_no_command(self) -> None:
        self.assertEqual(_run(["--config", str(self.tmp / "nope.yml"), "report"])[0], 1)
        self.assertEqual(_run([])[0], 1)

    def test_version(self) -> None:
        code, out, _ = _run(["--version"])
        self.assertEqual(code, 0)
        self.assertTrue(out.startswith("examprep "))


class ReportTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)
        self.data_dir = self.tmp / "data"
        self.repo = _seed(self.data_dir)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_report_prints_tree_and_buckets(self) -> None:
        code, out, _ = _run(["report", "--data-dir", str(self.data_dir)])
        self.assertEqual(code, 0)
        self.assertIn("Total: 5/9 correct (55.56%)", out)
        self.assertIn("JEE: 5/9", out)
        self.assertIn("    Basics:", out)
        self.assertIn("Time spent:", out)
        self.assertIn("Longest streak: 3 day(s)", out)
        self.assertIn("Consistent study routine.", out)
        self.assertIn("Goals: 62% accuracy", out)
        self.assertIn("11 questions", out)
        self.assertIn("Milestones: 2/10 achieved", out)
        self.assertIn("  First Question", out)
        self.assertIn("  50% Accuracy", out)

    def test_report_for_one_user(self) -> None:
        code, out, _ = _run(["report", "--data-dir", str(self.data_dir), "--user", "u2"])
        self.assertEqual(code, 0)
        self.assertIn("Total: 3/3 correct", out)

    def test_report_writes_files(self) -> None:
        outdir = self.tmp / "reports"
        code, out, _ = _run(["report", "--data-dir", str(self.data_dir), "--out", str(outdir)])
        self.assertEqual(code, 0)
        self.assertIn("Reports saved to", out)
        for name in ("daily_snapshot.csv", "daily_accuracy.png", "time_spent.png", "subjects_JEE.png", "radar_JEE.png"):
            self.assertTrue((outdir / name).exists(), name)

    def test_write_reports_on_empty_store(self) -> None:
        empty = AttemptRepository(self.tmp / "empty")
        empty.initialize()
        snapshot = write_reports(empty, self.tmp / "empty_reports", cfg=AnalyticsConfig())
        self.assertTrue(snapshot.exists())
        self.assertFalse((self.tmp / "empty_reports" / "daily_accuracy.png").exists())


if __name__ == "__main__":
    unittest.main()
