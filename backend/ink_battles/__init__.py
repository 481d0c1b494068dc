"""Ink Battles: streaming LLM writing analysis service."""

__version__ = "1.0.0"
