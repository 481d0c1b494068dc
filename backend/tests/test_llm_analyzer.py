"""Tests for the chat-completion backend."""
import pytest

from ink_battles.analyzers.llm_analyzer import (
    CONNECTION_PROBE_MAX_TOKENS,
    IMAGE_USER_PROMPT,
    LLMBackend,
    build_messages,
    encode_image_data_url,
)
from ink_battles.config import ProviderConfigResolver
from ink_battles.errors import BackendError
from ink_battles.models import AnalysisRequest, EffectiveProviderConfig


def _config(provider=None, base_url="https://llm.example.test/v1"):
    return EffectiveProviderConfig(
        base_url=base_url,
        api_key="test-key",
        model="test-model",
        temperature=1.2,
        max_tokens=65536,
        provider=provider,
    )


class DummyCompletions:
    def __init__(self, text="", error=None):
        self.text = text
        self.error = error
        self.last_kwargs = None

    def create(self, **kwargs):
        self.last_kwargs = kwargs
        if self.error is not None:
            raise self.error
        message = type("Message", (), {"content": self.text})()
        choice = type("Choice", (), {"message": message})()
        return type("Response", (), {"choices": [choice], "usage": None})()


@pytest.fixture
def openai_client(monkeypatch):
    completions = DummyCompletions(text='{"dimensions": []}')
    created = {}

    class DummyOpenAI:
        def __init__(self, api_key, base_url=None):
            created["api_key"] = api_key
            created["base_url"] = base_url
            self.chat = type("Chat", (), {"completions": completions})()

    monkeypatch.setattr("ink_battles.analyzers.llm_analyzer.OpenAI", DummyOpenAI)
    return completions, created


class TestBuildMessages:
    """Test suite for build_messages."""

    def test_text_request(self):
        request = AnalysisRequest(mode="text", text_content="Once upon a time")
        messages = build_messages(request, "SYSTEM")
        assert messages == [
            {"role": "system", "content": "SYSTEM"},
            {"role": "user", "content": "Once upon a time"},
        ]

    def test_image_request(self):
        request = AnalysisRequest(mode="file", file_blob=b"abc", file_media_type="image/jpeg")
        user_content = build_messages(request, "SYSTEM")[1]["content"]

        assert user_content[0] == {"type": "text", "text": IMAGE_USER_PROMPT}
        assert user_content[1] == {"type": "image_url", "image_url": {"url": "data:image/jpeg;base64,YWJj"}}

    def test_encode_image_data_url(self):
        assert encode_image_data_url(b"abc", "image/png") == "data:image/png;base64,YWJj"


class TestOpenAIBackend:
    """OpenAI-compatible providers go through chat.completions."""

    def test_generate_sends_plan(self, openai_client):
        completions, created = openai_client
        config = _config()
        plan = ProviderConfigResolver.negotiate(config, "SYSTEM")

        text = LLMBackend().generate(config, plan, [{"role": "user", "content": "hi"}])

        assert text == '{"dimensions": []}'
        kwargs = completions.last_kwargs
        assert kwargs["model"] == "test-model"
        assert kwargs["max_tokens"] == 65536
        assert kwargs["temperature"] == 1.2
        assert kwargs["response_format"]["type"] == "json_schema"
        assert "dimensions" in kwargs["response_format"]["json_schema"]["schema"]["properties"]
        assert created == {"api_key": "test-key", "base_url": "https://llm.example.test/v1"}

    def test_deepseek_uses_json_object(self, openai_client):
        completions, _ = openai_client
        config = _config(provider="deepseek")
        plan = ProviderConfigResolver.negotiate(config, "SYSTEM")

        LLMBackend().generate(config, plan, [{"role": "user", "content": "hi"}])

        assert completions.last_kwargs["response_format"] == {"type": "json_object"}
        assert completions.last_kwargs["max_tokens"] == 8192

    def test_probe_is_small(self, openai_client):
        completions, _ = openai_client
        LLMBackend().probe(_config())

        kwargs = completions.last_kwargs
        assert kwargs["max_tokens"] == CONNECTION_PROBE_MAX_TOKENS
        assert "response_format" not in kwargs
        assert kwargs["messages"] == [{"role": "user", "content": "Hi"}]

    def test_sdk_failure_becomes_backend_error(self, monkeypatch):
        completions = DummyCompletions(error=TimeoutError("read timeout"))

        class DummyOpenAI:
            def __init__(self, api_key, base_url=None):
                self.chat = type("Chat", (), {"completions": completions})()

        monkeypatch.setattr("ink_battles.analyzers.llm_analyzer.OpenAI", DummyOpenAI)
        config = _config()
        plan = ProviderConfigResolver.negotiate(config, "SYSTEM")

        with pytest.raises(BackendError, match="read timeout"):
            LLMBackend().generate(config, plan, [])


class TestAnthropicProvider:
    """The anthropic provider shares the chat-completion path and its JSON mode."""

    def test_anthropic_uses_json_object_on_same_endpoint(self, openai_client):
        completions, created = openai_client
        config = _config(provider="anthropic", base_url="https://gateway.test/v1")
        plan = ProviderConfigResolver.negotiate(config, "SYSTEM")
        chat = build_messages(AnalysisRequest(mode="text", text_content="story"), plan.system_prompt)

        text = LLMBackend().generate(config, plan, chat)

        assert text == '{"dimensions": []}'
        kwargs = completions.last_kwargs
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["messages"][0] == {"role": "system", "content": plan.system_prompt}
        assert kwargs["max_tokens"] == 4096
        assert kwargs["temperature"] == 1.0
        assert created["base_url"] == "https://gateway.test/v1"

    def test_anthropic_image_stays_a_data_url(self, openai_client):
        completions, _ = openai_client
        config = _config(provider="anthropic")
        plan = ProviderConfigResolver.negotiate(config, "SYSTEM")
        request = AnalysisRequest(mode="file", file_blob=b"abc", file_media_type="image/png")

        LLMBackend().generate(config, plan, build_messages(request, plan.system_prompt))

        content = completions.last_kwargs["messages"][1]["content"]
        assert content[1] == {"type": "image_url", "image_url": {"url": "data:image/png;base64,YWJj"}}

    def test_anthropic_probe(self, openai_client):
        completions, _ = openai_client
        LLMBackend().probe(_config(provider="anthropic"))
        assert completions.last_kwargs["max_tokens"] == CONNECTION_PROBE_MAX_TOKENS
