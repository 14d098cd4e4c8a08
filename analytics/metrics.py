from __future__ import annotations

"""Percentage computations shared by every aggregation.

Percentages stay unrounded floats; rounding happens in format_percent only.
"""


def percentage(correct: float, total: float) -> float:
    """correct / total * 100, or 0.0 when there is nothing to divide."""
    if total <= 0:
        return 0.0
    return correct / total * 100.0


def format_percent(value: float, digits: int = 2) -> str:
    return f"{value:.{digits}f}"
