"""Prompt assembly for the analysis backend."""

from .analysis_prompt import (
    ANALYSIS_JSON_SCHEMA,
    JSON_FORMAT_INSTRUCTION,
    OPTION_PROMPTS,
    build_prompt,
)

__all__ = ["ANALYSIS_JSON_SCHEMA", "JSON_FORMAT_INSTRUCTION", "OPTION_PROMPTS", "build_prompt"]
