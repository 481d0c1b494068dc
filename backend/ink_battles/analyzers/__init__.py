"""Backend invocation and score aggregation."""

from .llm_analyzer import LLMBackend, build_messages
from .score import ScoreAggregator, calculate_overall_score

__all__ = ["LLMBackend", "ScoreAggregator", "build_messages", "calculate_overall_score"]
