"""Prompt templates for the writing analysis request."""

from __future__ import annotations

from typing import Any, Dict, Mapping

BASE_ANALYSIS_PROMPT = """You are a seasoned literary critic and writing coach. Read the submitted work carefully and evaluate it.

EVALUATION RULES:
1. Score every dimension with an integer from 1 (weak) to 5 (outstanding).
2. Ground each description in concrete evidence from the work.
3. Keep strengths and improvements short, specific and actionable.
4. Use "structural_analysis" for observations about plot, pacing and organisation.
5. Add "mermaid_diagrams" only when a diagram genuinely clarifies the structure.

Return only a single JSON object."""

# One fragment per toggle exposed by the client.
OPTION_PROMPTS: Dict[str, str] = {
    "initialScore": "Score as a first-pass reader: judge the opening and hook strictly.",
    "productionQuality": "Weigh production quality: consistency, polish and completeness of the piece.",
    "contentReview": "Review the content for factual errors, logic gaps and problematic passages.",
    "textStyle": "Pay particular attention to prose style, diction and rhythm.",
    "hotTopic": "Assess how well the work engages with current trends and popular topics.",
    "antiCapitalism": "Examine how the work treats labour, class and economic power.",
    "speedReview": "Keep the review brief: at most three strengths and three improvements.",
}

ANALYSIS_JSON_SCHEMA: Dict[str, Any] = {
    "name": "analysis_response",
    "strict": True,
    "schema": {
        "type": "object",
        "properties": {
            "overallAssessment": {"type": "string"},
            "title": {"type": "string"},
            "ratingTag": {"type": "string"},
            "dimensions": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "name": {"type": "string"},
                        "score": {"type": "integer", "minimum": 1, "maximum": 5},
                        "description": {"type": "string"},
                    },
                    "required": ["name", "score", "description"],
                    "additionalProperties": False,
                },
            },
            "strengths": {"type": "array", "items": {"type": "string"}},
            "improvements": {"type": "array", "items": {"type": "string"}},
            "comment": {"type": "string"},
            "structural_analysis": {"type": "array", "items": {"type": "string"}},
            "mermaid_diagrams": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "type": {"type": "string"},
                        "title": {"type": "string"},
                        "code": {"type": "string"},
                    },
                    "required": ["type", "title", "code"],
                    "additionalProperties": False,
                },
            },
        },
        "required": [
            "overallAssessment",
            "title",
            "ratingTag",
            "dimensions",
            "strengths",
            "improvements",
            "comment",
            "structural_analysis",
            "mermaid_diagrams",
        ],
        "additionalProperties": False,
    },
}

JSON_FORMAT_INSTRUCTION = """

Return the analysis strictly in the following JSON format:
{
  "overallAssessment": "Overall assessment of the work",
  "title": "Title or one-line summary of the work",
  "ratingTag": "Rating label",
  "dimensions": [
    { "name": "Dimension name", "score": integer from 1 to 5, "description": "Dimension description" }
  ],
  "strengths": ["Strength 1", "Strength 2"],
  "improvements": ["Improvement 1", "Improvement 2"],
  "comment": "Closing remarks",
  "structural_analysis": ["Structural note 1", "Structural note 2"],
  "mermaid_diagrams": [
    { "type": "Diagram type", "title": "Diagram title", "code": "mermaid code" }
  ]
}"""


def build_prompt(options: Mapping[str, bool]) -> str:
    """Assemble the system prompt from the enabled analysis options."""
    enabled = [OPTION_PROMPTS[name] for name in OPTION_PROMPTS if options.get(name)]
    if not enabled:
        return BASE_ANALYSIS_PROMPT

    focus = "\n".join(f"- {fragment}" for fragment in enabled)
    return f"{BASE_ANALYSIS_PROMPT}\n\nADDITIONAL FOCUS:\n{focus}"
