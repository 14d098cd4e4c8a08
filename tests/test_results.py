import unittest
from datetime import datetime, timedelta, timezone

from examprep.results import AttemptRecord, ResultManager, build_attempt
from examprep.scoring import InvalidAnswerFormat, MultipleChoice, Question, QuestionKind, SingleChoice


def _questions():
    single = Question.from_api({"id": "s1", "options": ["a", "b", "c", "d"], "correct_options": 0})
    multiple = Question.from_api(
        {"id": "m1", "type": "multipleCorrect", "options": ["a", "b", "c", "d"], "correct_options": [0, 1, 2, 3]}
    )
    numerical = Question.from_api({"id": "n1", "type": "numerical", "correct_value": "100"})
    return single, multiple, numerical


class ListSink:
    def __init__(self) -> None:
        self.batches = []

    def append(self, records) -> None:
        self.batches.append(list(records))


class BuildAttemptTests(unittest.TestCase):
    def test_record_carries_evaluation(self) -> None:
        _, multiple, _ = _questions()
        when = datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)
        record, result = build_attempt(
            multiple,
            MultipleChoice(indices=frozenset({3, 1, 2})),
            exam_type="JEE",
            subject="Physics",
            chapter="Mechanics",
            user_id="u1",
            time_spent_seconds=45,
            submitted_at=when,
        )
        self.assertFalse(result.is_correct)
        self.assertEqual(result.score, 2)
        self.assertEqual(record.score, 2)
        self.assertEqual(record.submitted_answer, [1, 2, 3])
        self.assertIs(record.question_kind, QuestionKind.MULTIPLE_CORRECT)
        self.assertEqual(record.submitted_at, when)

    def test_negative_time_is_clamped(self) -> None:
        single, _, _ = _questions()
        record, _ = build_attempt(single, SingleChoice(index=1), time_spent_seconds=-5)
        self.assertEqual(record.time_spent_seconds, 0)
        self.assertIsNotNone(record.submitted_at)


class AttemptRecordTests(unittest.TestCase):
    def test_accepts_store_field_names(self) -> None:
        rec = AttemptRecord.model_validate(
            {
                "questionId": 12,
                "examType": "NEET",
                "subject": "Biology",
                "chapter": "",
                "userId": "u9",
                "questionType": "multipleCorrect",
                "isCorrect": True,
                "score": 4,
                "timeSpent": 61.6,
                "attemptCount": 0,
                "created_at": "2024-05-01T10:00:00",
                "unused": "ignored",
            }
        )
        self.assertEqual(rec.question_id, "12")
        self.assertEqual(rec.exam_type, "NEET")
        self.assertIsNone(rec.chapter)
        self.assertIs(rec.question_kind, QuestionKind.MULTIPLE_CORRECT)
        self.assertEqual(rec.time_spent_seconds, 61)
        self.assertEqual(rec.attempt_count, 1)
        self.assertEqual(rec.submitted_at, datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc))

    def test_offsets_are_normalized_to_utc(self) -> None:
        rec = AttemptRecord(
            question_id="q", submitted_at=datetime(2024, 5, 1, 15, 30, tzinfo=timezone(timedelta(hours=5, minutes=30)))
        )
        self.assertEqual(rec.submitted_at, datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc))
        self.assertEqual(rec.submitted_at.utcoffset(), timedelta(0))

    def test_missing_values_default(self) -> None:
        rec = AttemptRecord.model_validate({"question_id": "q", "is_correct": None, "score": None, "time_spent": None})
        self.assertFalse(rec.is_correct)
        self.assertEqual(rec.score, 0)
        self.assertEqual(rec.time_spent_seconds, 0)

    def test_imperfect_stored_rows_are_cleaned(self) -> None:
        cases = [
            ({"examType": "JEE"}, None, 0),
            ({"questionId": "", "examType": "JEE"}, None, 0),
            ({"questionId": "q", "timeSpent": -3}, "q", 0),
            ({"questionId": "q", "timeSpent": "45.5"}, "q", 45),
            ({"questionId": "q", "timeSpent": "soon"}, "q", 0),
            ({"questionId": "q", "timeSpent": float("nan")}, "q", 0),
            ({"questionId": "q", "timeSpent": 29.6}, "q", 29),
        ]
        for row, qid, seconds in cases:
            with self.subTest(row=row):
                rec = AttemptRecord.model_validate(row)
                self.assertEqual(rec.question_id, qid)
                self.assertEqual(rec.time_spent_seconds, seconds)

    def test_invalid_counts_and_scores_default(self) -> None:
        rec = AttemptRecord.model_validate({"questionId": "q", "attemptCount": -2, "score": "n/a"})
        self.assertEqual(rec.attempt_count, 1)
        self.assertEqual(rec.score, 0)
        self.assertEqual(AttemptRecord.model_validate({"attemptCount": "3", "score": "-1"}).attempt_count, 3)


class ResultManagerTests(unittest.TestCase):
    def test_reattempts_increment_count_per_user(self) -> None:
        single, _, _ = _questions()
        mgr = ResultManager()
        first = mgr.submit(single, 2, user_id="u1")
        second = mgr.submit(single, 1, user_id="u1")
        other = mgr.submit(single, 1, user_id="u2")
        self.assertEqual((first.attempt_count, first.score), (1, -1))
        self.assertEqual((second.attempt_count, second.score), (2, 4))
        self.assertEqual(other.attempt_count, 1)
        self.assertEqual(len(mgr.attempts_for("u1", "s1")), 2)
        # earlier records are untouched by the re-attempt
        self.assertFalse(mgr.records("u1")[0].is_correct)

    def test_rejected_answer_is_not_an_attempt(self) -> None:
        single, _, _ = _questions()
        mgr = ResultManager()
        with self.assertRaises(InvalidAnswerFormat):
            mgr.submit(single, 9, user_id="u1")
        self.assertEqual(mgr.records(), [])
        self.assertEqual(mgr.submit(single, 1, user_id="u1").attempt_count, 1)

    def test_seed_continues_stored_counts(self) -> None:
        _, _, numerical = _questions()
        mgr = ResultManager()
        mgr.seed([AttemptRecord(question_id="n1", user_id="u1", attempt_count=3)])
        rec = mgr.submit(numerical, "100.05", user_id="u1")
        self.assertEqual(rec.attempt_count, 4)
        self.assertTrue(rec.is_correct)

    def test_flush_hands_over_pending_once(self) -> None:
        single, multiple, _ = _questions()
        mgr = ResultManager()
        sink = ListSink()
        mgr.submit(single, 1, user_id="u1")
        mgr.submit(multiple, [1, 2], user_id="u1")
        self.assertEqual(mgr.flush(sink), 2)
        self.assertEqual(mgr.flush(sink), 0)
        mgr.submit(single, 1, user_id="u1")
        self.assertEqual(mgr.flush(sink), 1)
        self.assertEqual([len(b) for b in sink.batches], [2, 1])

    def test_summarize(self) -> None:
        single, multiple, numerical = _questions()
        mgr = ResultManager()
        mgr.submit(single, 1, user_id="u1")
        mgr.submit(multiple, [1], user_id="u1")
        mgr.submit(numerical, "7", user_id="u1")
        mgr.submit(single, 1, user_id="u2")
        self.assertEqual(mgr.summarize("u1"), {"user_id": "u1", "total": 3, "correct": 1, "score": 5})
        self.assertEqual(mgr.summarize()["total"], 4)


if __name__ == "__main__":
    unittest.main()
