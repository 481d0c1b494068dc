"""Pytest configuration and fixtures."""
import json
import sys
import time
from pathlib import Path

import pytest

# Add backend to path
backend_path = Path(__file__).parent.parent
sys.path.insert(0, str(backend_path))

from ink_battles.config import DefaultProviderSettings  # noqa: E402


class FakeBackend:
    """Stand-in for LLMBackend that records every call."""

    def __init__(self, response="", error=None, delay=0.0, probe_response="Hello"):
        self.response = response
        self.error = error
        self.delay = delay
        self.probe_response = probe_response
        self.calls = []
        self.probe_calls = []

    def generate(self, config, plan, messages):
        self.calls.append({"config": config, "plan": plan, "messages": messages})
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.response

    def probe(self, config):
        self.probe_calls.append(config)
        if self.error is not None:
            raise self.error
        return self.probe_response


@pytest.fixture
def sample_result_payload():
    """A well formed backend answer."""
    return {
        "overallAssessment": "A confident debut with a strong voice.",
        "title": "The Lighthouse Keeper",
        "ratingTag": "Promising",
        "dimensions": [
            {"name": "Plot", "score": 4, "description": "Tight and well paced."},
            {"name": "Style", "score": 5, "description": "Vivid imagery."},
            {"name": "Characters", "score": 3, "description": "Side cast is thin."},
        ],
        "strengths": ["Atmosphere", "Dialogue"],
        "improvements": ["Develop the side characters"],
        "comment": "Worth a second draft.",
        "structural_analysis": ["Three-act structure with a late twist."],
        "mermaid_diagrams": [
            {"type": "flowchart", "title": "Plot", "code": "graph TD; A-->B"}
        ],
    }


@pytest.fixture
def sample_result_text(sample_result_payload):
    return json.dumps(sample_result_payload)


@pytest.fixture
def default_settings():
    """Valid injected defaults; no process environment involved."""
    return DefaultProviderSettings(
        base_url="https://llm.example.test/v1",
        api_key="default-key",
        model="default-model",
        temperature=1.2,
        max_tokens=65536,
    )


@pytest.fixture
def make_backend():
    """Factory for FakeBackend instances."""
    return FakeBackend
