# -*- coding: utf-8 -*-
"""Provider configuration resolution and capability negotiation."""

from __future__ import annotations

import logging
import os
from typing import Dict, Mapping, Optional

from pydantic import BaseModel

from ink_battles.errors import ConfigurationError
from ink_battles.models import BackendRequestPlan, EffectiveProviderConfig, ProviderOverride
from ink_battles.prompts import ANALYSIS_JSON_SCHEMA, JSON_FORMAT_INSTRUCTION

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_TEMPERATURE = 1.2
DEFAULT_MAX_TOKENS = 65536

# Providers that reject strict ``json_schema`` response formats.
JSON_SCHEMA_UNSUPPORTED_PROVIDERS = frozenset({"deepseek", "anthropic"})

# Hard output ceilings; exceeding them is a request error on the provider side.
PROVIDER_MAX_TOKENS: Dict[str, int] = {
    "deepseek": 8192,
    "anthropic": 4096,
}

PROVIDER_MAX_TEMPERATURE: Dict[str, float] = {
    "anthropic": 1.0,
}


def _env_number(environ: Mapping[str, str], name: str, default, caster):
    raw_value = (environ.get(name) or "").strip()
    if not raw_value:
        return default
    try:
        value = caster(raw_value)
    except ValueError:
        logger.warning("%s ortam değişkeni sayısal değil: %r, varsayılan kullanılacak", name, raw_value)
        return default
    # zero counts as unset
    return value or default


class DefaultProviderSettings(BaseModel):
    """Process-wide default backend settings, read once and injected."""

    base_url: Optional[str] = None
    api_key: str = ""
    model: str = DEFAULT_MODEL
    temperature: float = DEFAULT_TEMPERATURE
    max_tokens: int = DEFAULT_MAX_TOKENS

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "DefaultProviderSettings":
        env = os.environ if environ is None else environ
        settings = cls(
            base_url=(env.get("OPENAI_BASE_URL") or "").strip() or None,
            api_key=(env.get("OPENAI_API_KEY") or "").strip(),
            model=(env.get("MODEL") or "").strip() or DEFAULT_MODEL,
            temperature=_env_number(env, "TEMPERATURE", DEFAULT_TEMPERATURE, float),
            max_tokens=_env_number(env, "MAX_TOKENS", DEFAULT_MAX_TOKENS, int),
        )
        logger.info(
            "Varsayılan LLM ayarları yüklendi (model=%s, api_key_var=%s)",
            settings.model,
            bool(settings.api_key),
        )
        return settings


def _normalise_provider(provider: Optional[str]) -> Optional[str]:
    if provider is None:
        return None
    cleaned = provider.strip().lower()
    return cleaned or None


def supports_json_schema(provider: Optional[str]) -> bool:
    """Return True when the provider accepts a strict ``json_schema`` format."""
    normalised = _normalise_provider(provider)
    return normalised is None or normalised not in JSON_SCHEMA_UNSUPPORTED_PROVIDERS


def max_tokens_for_provider(provider: Optional[str], requested: Optional[int] = None) -> int:
    """Return the token budget to send; a provider ceiling always wins."""
    normalised = _normalise_provider(provider)
    if normalised and normalised in PROVIDER_MAX_TOKENS:
        return PROVIDER_MAX_TOKENS[normalised]
    return requested or DEFAULT_MAX_TOKENS


def temperature_for_provider(provider: Optional[str], requested: float) -> float:
    normalised = _normalise_provider(provider)
    ceiling = PROVIDER_MAX_TEMPERATURE.get(normalised or "")
    if ceiling is not None and requested > ceiling:
        logger.debug("%s için temperature %.2f → %.2f sınırlandı", normalised, requested, ceiling)
        return ceiling
    return requested


class ProviderConfigResolver:
    """Resolve the effective backend configuration for a single request."""

    def __init__(self, defaults: DefaultProviderSettings) -> None:
        self.defaults = defaults

    def resolve(self, override: Optional[ProviderOverride] = None) -> EffectiveProviderConfig:
        """Merge an optional override over the defaults.

        Raises:
            ConfigurationError: when the resulting API key is empty.
        """
        defaults = self.defaults
        uses_override = override is not None and not override.use_default

        if uses_override and not override.api_key:
            raise ConfigurationError("Custom model configuration is invalid, please check the API key.")

        if uses_override:
            config = EffectiveProviderConfig(
                base_url=override.base_url or defaults.base_url,
                api_key=override.api_key or "",
                model=override.model_id or defaults.model,
                temperature=defaults.temperature,
                max_tokens=defaults.max_tokens,
                provider=override.provider or None,
            )
        else:
            config = EffectiveProviderConfig(
                base_url=defaults.base_url,
                api_key=defaults.api_key,
                model=defaults.model,
                temperature=defaults.temperature,
                max_tokens=defaults.max_tokens,
            )

        if not config.is_valid:
            raise ConfigurationError("LLM API configuration is invalid, please check the environment settings.")

        logger.debug(
            "Etkin LLM yapılandırması çözüldü (provider=%s, model=%s, override=%s)",
            config.provider,
            config.model,
            uses_override,
        )
        return config

    @staticmethod
    def negotiate(config: EffectiveProviderConfig, system_prompt: str) -> BackendRequestPlan:
        """Pick the response format, token ceiling and prompt for the provider."""
        use_json_schema = supports_json_schema(config.provider)
        if use_json_schema:
            response_format = {"type": "json_schema", "json_schema": ANALYSIS_JSON_SCHEMA}
            final_prompt = system_prompt
        else:
            response_format = {"type": "json_object"}
            final_prompt = system_prompt + JSON_FORMAT_INSTRUCTION

        return BackendRequestPlan(
            system_prompt=final_prompt,
            response_format=response_format,
            max_tokens=max_tokens_for_provider(config.provider, config.max_tokens),
            temperature=temperature_for_provider(config.provider, config.temperature),
            use_json_schema=use_json_schema,
        )


__all__ = [
    "DefaultProviderSettings",
    "JSON_SCHEMA_UNSUPPORTED_PROVIDERS",
    "PROVIDER_MAX_TOKENS",
    "ProviderConfigResolver",
    "max_tokens_for_provider",
    "supports_json_schema",
    "temperature_for_provider",
]
