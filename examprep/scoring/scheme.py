from __future__ import annotations

"""Marking scheme (point values and numerical tolerance) using Pydantic."""

from pydantic import BaseModel, ConfigDict, Field


class MarkingScheme(BaseModel):
    """Point values awarded by the scoring engine.

    - correct: full marks for any fully correct answer
    - single_wrong: SingleCorrect penalty
    - multiple_wrong: MultipleCorrect penalty when any wrong option is selected
    - numerical_wrong: Numerical answers are not negatively marked
    - partial_high/mid/low: MultipleCorrect partial credit tiers (>0.75, >0.5, >0)
    - tolerance_abs/tolerance_rel: numerical tolerance floor and relative share
    """

    model_config = ConfigDict(frozen=True)

    correct: int = 4
    single_wrong: int = -1
    multiple_wrong: int = -2
    numerical_wrong: int = 0
    partial_high: int = 3
    partial_mid: int = 2
    partial_low: int = 1
    tolerance_abs: float = Field(0.001, ge=0)
    tolerance_rel: float = Field(0.001, ge=0)


DEFAULT_SCHEME = MarkingScheme()
