# -*- coding: utf-8 -*-
"""Chat-completion backend used for the single analysis call."""

from __future__ import annotations

import base64
import logging
from typing import Any, Dict, List, Optional

from openai import OpenAI
from openai import APIConnectionError as OpenAIConnectionError
from openai import APIError as OpenAIAPIError

from ink_battles.errors import BackendError
from ink_battles.models import AnalysisRequest, BackendRequestPlan, EffectiveProviderConfig

logger = logging.getLogger(__name__)

IMAGE_USER_PROMPT = "Please analyze the content of this image."
CONNECTION_PROBE_MESSAGE = "Hi"
CONNECTION_PROBE_MAX_TOKENS = 10


def encode_image_data_url(blob: bytes, media_type: str) -> str:
    """Encode raw image bytes as a base64 data URL."""
    encoded = base64.standard_b64encode(blob).decode("utf-8")
    return f"data:{media_type};base64,{encoded}"


def build_messages(request: AnalysisRequest, system_prompt: str) -> List[Dict[str, Any]]:
    """Build the chat message list for a validated request."""
    if request.has_image:
        assert request.file_blob is not None and request.file_media_type is not None
        data_url = encode_image_data_url(request.file_blob, request.file_media_type)
        user_content: Any = [
            {"type": "text", "text": IMAGE_USER_PROMPT},
            {"type": "image_url", "image_url": {"url": data_url}},
        ]
    else:
        user_content = request.text_content or ""

    return [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": user_content},
    ]


class LLMBackend:
    """Perform exactly one chat-completion call per invocation.

    Every provider, DeepSeek and Anthropic included, is reached through the
    OpenAI-compatible chat completions endpoint at the configured base URL.
    Provider differences live in the negotiated :class:`BackendRequestPlan`.
    """

    def generate(
        self,
        config: EffectiveProviderConfig,
        plan: BackendRequestPlan,
        messages: List[Dict[str, Any]],
    ) -> str:
        logger.debug(
            "LLM isteği gönderiliyor (provider=%s, model=%s, max_tokens=%s, format=%s)",
            config.provider,
            config.model,
            plan.max_tokens,
            plan.response_format.get("type"),
        )
        return self._chat_completion(
            config,
            messages,
            max_tokens=plan.max_tokens,
            temperature=plan.temperature,
            response_format=plan.response_format,
        )

    def probe(self, config: EffectiveProviderConfig) -> str:
        """Send a tiny request to check that the backend is reachable."""
        messages = [{"role": "user", "content": CONNECTION_PROBE_MESSAGE}]
        return self._chat_completion(config, messages, max_tokens=CONNECTION_PROBE_MAX_TOKENS)

    def _chat_completion(
        self,
        config: EffectiveProviderConfig,
        messages: List[Dict[str, Any]],
        *,
        max_tokens: int,
        temperature: Optional[float] = None,
        response_format: Optional[Dict[str, Any]] = None,
    ) -> str:
        request_kwargs: Dict[str, Any] = {
            "model": config.model,
            "messages": messages,
            "max_tokens": max_tokens,
        }
        if temperature is not None:
            request_kwargs["temperature"] = temperature
        if response_format is not None:
            request_kwargs["response_format"] = response_format

        try:
            client = OpenAI(api_key=config.api_key, base_url=config.base_url)
            response = client.chat.completions.create(**request_kwargs)
        except (TimeoutError, OpenAIConnectionError, OpenAIAPIError) as exc:
            logger.exception("LLM isteği başarısız oldu (provider=%s)", config.provider)
            raise BackendError(f"LLM request failed: {exc}") from exc

        raw_text = ""
        choices = getattr(response, "choices", None) or []
        if choices:
            message = getattr(choices[0], "message", None)
            raw_text = getattr(message, "content", None) or ""

        usage = getattr(response, "usage", None)
        logger.debug(
            "LLM yanıtı alındı (uzunluk=%s karakter, tokens=%s)",
            len(raw_text),
            getattr(usage, "total_tokens", "N/A"),
        )
        return raw_text


__all__ = ["LLMBackend", "build_messages", "encode_image_data_url"]
