from __future__ import annotations

"""Analytics configuration using Pydantic."""

from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, field_validator


class AnalyticsConfig(BaseModel):
    """Parameters for progress aggregation.

    - attempt_policy: which attempts per (user, question) are counted
      ("all" every record, "first" lowest attempt_count, "latest" highest)
    - timezone: IANA zone used to derive calendar days and hours
    - session_break_minutes: gap that splits two study sessions (>0)
    - consistency_threshold_days: streak length regarded as consistent study
    """

    attempt_policy: Literal["all", "first", "latest"] = "all"
    timezone: str = "UTC"
    session_break_minutes: int = Field(30, gt=0)
    consistency_threshold_days: int = Field(3, ge=1)

    @field_validator("timezone")
    @classmethod
    def _known_zone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown timezone: {v}") from exc
        return v
