from .schema import QUESTION_KINDS, DTYPES
from .store import (
    DATA_FILE,
    init_store,
    validate_records,
    append_attempts,
    load_all,
    frame_to_records,
    query_chapter,
    query_user,
    export_ndjson,
)
from .cache import CacheEntry, is_expired, TTLCache, AttemptRepository

__all__ = [
    "QUESTION_KINDS",
    "DTYPES",
    "DATA_FILE",
    "init_store",
    "validate_records",
    "append_attempts",
    "load_all",
    "frame_to_records",
    "query_chapter",
    "query_user",
    "export_ndjson",
    "CacheEntry",
    "is_expired",
    "TTLCache",
    "AttemptRepository",
]
