"""Markdown export of a merged analysis result."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from ink_battles.models import AnalysisResult


def _escape_cell(value: str) -> str:
    return value.replace("|", "\\|").replace("\n", " ").strip()


def generate_markdown(result: AnalysisResult, generated_at: Optional[datetime] = None) -> str:
    """Render the result as a standalone Markdown document."""
    timestamp = (generated_at or datetime.now()).strftime("%Y-%m-%d %H:%M:%S")

    md = f"# {result.title}\n\n"
    md += f"**Overall score**: {result.overallScore:.1f}\n\n"
    md += f"**Rating**: {result.ratingTag}\n\n"

    if result.overallAssessment:
        md += f"## Overall assessment\n\n{result.overallAssessment}\n\n"

    md += "## Dimension scores\n\n"
    md += "| Dimension | Score | Description |\n"
    md += "| --- | --- | --- |\n"
    for dimension in result.dimensions:
        description = _escape_cell(dimension.description) or "-"
        md += f"| {_escape_cell(dimension.name)} | {dimension.score:.1f} | {description} |\n"
    md += "\n"

    if result.strengths:
        md += "## Strengths\n\n"
        md += "".join(f"- {item}\n" for item in result.strengths)
        md += "\n"

    if result.improvements:
        md += "## Suggested improvements\n\n"
        md += "".join(f"- {item}\n" for item in result.improvements)
        md += "\n"

    if result.comment:
        md += f"## Summary\n\n{result.comment}\n\n"

    if result.structural_analysis:
        md += "## Structural analysis\n\n"
        md += "".join(f"{item}\n\n" for item in result.structural_analysis)

    md += f"---\n\n*Generated by Ink Battles on {timestamp}*\n"
    return md


__all__ = ["generate_markdown"]
