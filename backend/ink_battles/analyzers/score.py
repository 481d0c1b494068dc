"""Aggregate per-dimension scores into one overall score."""

from __future__ import annotations

from statistics import mean
from typing import Any, Iterable, List, Optional

MIN_DIMENSION_SCORE = 1
MAX_DIMENSION_SCORE = 5
EMPTY_SCORE = 0.0


def _extract_score(item: Any) -> Optional[float]:
    if isinstance(item, dict):
        item = item.get("score")
    elif hasattr(item, "score"):
        item = getattr(item, "score")

    if item is None or isinstance(item, bool):
        return None
    try:
        value = float(item)
    except (TypeError, ValueError):
        return None
    if value != value:  # NaN
        return None
    return min(max(value, MIN_DIMENSION_SCORE), MAX_DIMENSION_SCORE)


class ScoreAggregator:
    """Reduce dimension scores to a single comparable value.

    The overall score is the arithmetic mean of the dimension scores, each
    clamped to ``[1, 5]``, rounded to one decimal and kept on the same 1-5
    scale as the dimensions. Entries without a numeric score are ignored and
    an empty input yields ``0.0``.
    """

    def scores(self, dimensions: Optional[Iterable[Any]]) -> List[float]:
        if not dimensions or isinstance(dimensions, (str, bytes, dict)):
            return []
        return [score for score in map(_extract_score, dimensions) if score is not None]

    def overall_score(self, dimensions: Optional[Iterable[Any]]) -> float:
        values = self.scores(dimensions)
        if not values:
            return EMPTY_SCORE
        return round(mean(values), 1)


_AGGREGATOR = ScoreAggregator()


def calculate_overall_score(dimensions: Optional[Iterable[Any]]) -> float:
    """Return the overall score for dimension dicts, models or bare numbers."""
    return _AGGREGATOR.overall_score(dimensions)


__all__ = ["EMPTY_SCORE", "ScoreAggregator", "calculate_overall_score"]
