from __future__ import annotations

"""Schema constants for the Parquet-backed attempt table."""

import pandas as pd
from pandas.api.types import CategoricalDtype

from examprep.scoring.models import QuestionKind

# --- Constants ---

QUESTION_KINDS = {k.value for k in QuestionKind}


def _cat_dtype(categories: set[str]) -> CategoricalDtype:
    return CategoricalDtype(categories=sorted(categories), ordered=False)


DTYPES = {
    "question_id": "string",
    "exam_type": "string",
    "subject": "string",
    "chapter": "string",
    "user_id": "string",
    "question_kind": _cat_dtype(QUESTION_KINDS),
    # JSON-encoded: a list of option indices or the numeric string
    "submitted_answer": "string",
    "is_correct": "boolean",
    "score": "Int16",
    "time_spent_seconds": "UInt32",
    "attempt_count": "UInt16",
    # timezone-aware UTC timestamps
    "submitted_at": pd.DatetimeTZDtype(tz="UTC"),
}
