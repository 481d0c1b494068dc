"""Export helpers for analysis results."""

from .markdown import generate_markdown

__all__ = ["generate_markdown"]
