"""Tests for Markdown export."""
from datetime import datetime

from ink_battles.client.reducer import merge_result
from ink_battles.export import generate_markdown
from ink_battles.models import AnalysisResult, Dimension


def test_full_result(sample_result_payload):
    result, _ = merge_result(sample_result_payload)

    md = generate_markdown(result, generated_at=datetime(2024, 5, 1, 12, 30, 0))

    assert md.startswith("# The Lighthouse Keeper\n")
    assert "**Overall score**: 4.0" in md
    assert "**Rating**: Promising" in md
    assert "## Overall assessment\n\nA confident debut with a strong voice." in md
    assert "| Dimension | Score | Description |" in md
    assert "| Plot | 4.0 | Tight and well paced. |" in md
    assert "- Atmosphere\n- Dialogue\n" in md
    assert "## Suggested improvements" in md
    assert "## Summary\n\nWorth a second draft." in md
    assert "## Structural analysis" in md
    assert md.rstrip().endswith("*Generated by Ink Battles on 2024-05-01 12:30:00*")


def test_minimal_result_skips_empty_sections():
    result = AnalysisResult(dimensions=[Dimension(name="Pipe | name", score=2)])

    md = generate_markdown(result)

    assert "# Analysis result" in md
    assert "| Pipe \\| name | 2.0 | - |" in md
    assert "## Strengths" not in md
    assert "## Summary" not in md
    assert "## Structural analysis" not in md
