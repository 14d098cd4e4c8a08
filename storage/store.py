from __future__ import annotations

"""Parquet-backed store for attempt records using pandas + pyarrow.

Unit of data: one row per submitted answer (an AttemptRecord).
"""

import json
import logging
from pathlib import Path
from typing import Any, Mapping, Optional, Union

import pandas as pd

from examprep.results.schema import AttemptRecord

from .schema import DTYPES

logger = logging.getLogger(__name__)

DATA_FILE = "attempts.parquet"


def _empty_df() -> pd.DataFrame:
    dtypes = DTYPES.copy()
    df = pd.DataFrame({k: pd.Series(dtype=v) for k, v in dtypes.items()})
    return df


def init_store(data_dir: Path) -> None:
    """Ensure data directory and an empty Parquet file with correct schema exist."""
    data_dir = Path(data_dir)
    data_dir.mkdir(parents=True, exist_ok=True)
    table_path = data_dir / DATA_FILE
    if not table_path.exists():
        _empty_df().to_parquet(table_path, engine="pyarrow", compression="zstd")


def _row(record: Union[AttemptRecord, Mapping[str, Any]]) -> dict[str, Any]:
    rec = record if isinstance(record, AttemptRecord) else AttemptRecord.model_validate(record)
    row = rec.model_dump()
    row["question_kind"] = rec.question_kind.value if rec.question_kind is not None else None
    row["submitted_answer"] = None if rec.submitted_answer is None else json.dumps(rec.submitted_answer)
    return row


def validate_records(records: list[AttemptRecord]) -> pd.DataFrame:
    """Validate a list of AttemptRecord (or store-shaped dicts) into a typed DataFrame.

    - Field constraints are enforced by the AttemptRecord model.
    - Returns a pandas DataFrame with nullable string/integer dtypes and UTC timestamps.
    """
    if not isinstance(records, list):
        raise TypeError("records must be a list[AttemptRecord]")
    if not records:
        return _empty_df()
    df = pd.DataFrame([_row(r) for r in records])
    return _fix_dtypes(df)


def _fix_dtypes(df: pd.DataFrame) -> pd.DataFrame:
    for col, dt in DTYPES.items():
        if col not in df.columns:
            df[col] = pd.Series(pd.NA, index=df.index, dtype=object)
        if col == "submitted_at":
            df[col] = pd.to_datetime(df[col], utc=True)
        else:
            df[col] = df[col].astype(dt)
    return df[list(DTYPES.keys())]


def append_attempts(df_new: pd.DataFrame, data_path: Path) -> None:
    """Append rows to the attempts table.

    - Reads existing, concatenates, fixes dtypes, removes exact duplicates, and writes back.
    - Uses pyarrow with zstd compression.
    """
    data_path = Path(data_path)
    data_path.mkdir(parents=True, exist_ok=True)
    f = data_path / DATA_FILE
    if f.exists():
        df_old = _fix_dtypes(pd.read_parquet(f, engine="pyarrow"))
    else:
        df_old = _empty_df()
    df_new = _fix_dtypes(df_new.copy())
    if df_old.empty:
        combined = df_new
    elif df_new.empty:
        combined = df_old
    else:
        combined = pd.concat([df_old, df_new], ignore_index=True)
    combined = _fix_dtypes(combined)
    combined = combined.drop_duplicates()  # exact duplicate rows only
    combined.to_parquet(f, engine="pyarrow", compression="zstd", index=False)
    logger.info("Appended %d attempt row(s) to %s (%d total)", len(df_new), f, len(combined))


def load_all(data_path: Path) -> pd.DataFrame:
    """Load the full attempts table with consistent dtypes (empty if the store is missing)."""
    f = Path(data_path) / DATA_FILE
    if not f.exists():
        return _empty_df()
    df = pd.read_parquet(f, engine="pyarrow")
    return _fix_dtypes(df)


def _scalar(v: Any) -> Any:
    if v is None:
        return None
    if isinstance(v, pd.Timestamp):
        return None if pd.isna(v) else v.to_pydatetime()
    if pd.isna(v):
        return None
    if hasattr(v, "item"):
        return v.item()
    return v


def frame_to_records(df: pd.DataFrame) -> list[AttemptRecord]:
    """Convert rows of the attempts table back to AttemptRecord models."""
    out: list[AttemptRecord] = []
    for raw in df.to_dict(orient="records"):
        row = {k: _scalar(v) for k, v in raw.items()}
        answer = row.get("submitted_answer")
        if answer is not None:
            row["submitted_answer"] = json.loads(answer)
        out.append(AttemptRecord.model_validate(row))
    return out


def query_chapter(
    df: pd.DataFrame,
    *,
    exam_type: str,
    subject: Optional[str] = None,
    chapter: Optional[str] = None,
) -> pd.DataFrame:
    """Filter rows for an exam (optionally a subject / chapter) and sort by submitted_at."""
    if not exam_type:
        raise ValueError("exam_type is required")
    if chapter is not None and subject is None:
        raise ValueError("chapter filter requires a subject")
    mask = df["exam_type"] == exam_type
    if subject is not None:
        mask &= df["subject"] == subject
    if chapter is not None:
        mask &= df["chapter"] == chapter
    dff = df[mask.fillna(False).astype(bool)]
    return dff.sort_values("submitted_at", kind="stable").reset_index(drop=True)


def query_user(df: pd.DataFrame, user_id: str) -> pd.DataFrame:
    """Rows owned by ``user_id`` in submission order."""
    dff = df[(df["user_id"] == user_id).fillna(False).astype(bool)]
    return dff.sort_values("submitted_at", kind="stable").reset_index(drop=True)


def export_ndjson(df: pd.DataFrame, out_path: Path) -> None:
    """Export a DataFrame to line-delimited JSON (NDJSON) for quick inspection."""
    Path(out_path).parent.mkdir(parents=True, exist_ok=True)
    df.to_json(out_path, orient="records", lines=True, date_format="iso")