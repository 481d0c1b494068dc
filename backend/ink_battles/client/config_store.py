# -*- coding: utf-8 -*-
"""Local persistence of the caller's model override settings.

The store is injected explicitly so presentation code never reaches for
global mutable state.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from threading import Lock
from typing import Any, Dict, List, Optional, Protocol

from pydantic import ValidationError as PydanticValidationError

from ink_battles.models import ProviderOverride

logger = logging.getLogger(__name__)

MODEL_CONFIG_STORAGE_KEY = "ink-battles-model-config"

PROVIDER_PRESETS: Dict[str, Dict[str, Any]] = {
    "openai": {
        "name": "OpenAI",
        "base_url": "https://api.openai.com/v1",
        "models": ["gpt-4o", "gpt-4o-mini", "gpt-4-turbo", "gpt-3.5-turbo"],
    },
    "anthropic": {
        "name": "Anthropic",
        "base_url": "https://api.anthropic.com/v1",
        "models": [
            "claude-3-5-sonnet-20241022",
            "claude-3-opus-20240229",
            "claude-3-haiku-20240307",
        ],
    },
    "deepseek": {
        "name": "DeepSeek",
        "base_url": "https://api.deepseek.com/v1",
        "models": ["deepseek-chat", "deepseek-reasoner"],
    },
    "custom": {
        "name": "Custom",
        "base_url": "",
        "models": [],
    },
}


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class InMemoryKeyValueStore:
    def __init__(self) -> None:
        self._data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileKeyValueStore:
    """String key-value pairs kept in one JSON file, written atomically."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path)
        self._lock = Lock()

    def _read_all(self) -> Dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            with self._path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
        except (OSError, json.JSONDecodeError):
            logger.warning("Ayar dosyası okunamadı, boş kabul ediliyor: %s", self._path)
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(key): str(value) for key, value in data.items()}

    def _write_all(self, data: Dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        try:
            with tmp_path.open("w", encoding="utf-8") as handle:
                json.dump(data, handle, ensure_ascii=False, indent=2)
            tmp_path.replace(self._path)
        except OSError:
            logger.exception("Ayar dosyası yazılırken hata oluştu: %s", self._path)
            try:
                tmp_path.unlink()
            except OSError:
                logger.debug("Geçici ayar dosyası silinemedi: %s", tmp_path)
            raise

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            data = self._read_all()
            data[key] = value
            self._write_all(data)

    def delete(self, key: str) -> None:
        with self._lock:
            data = self._read_all()
            if data.pop(key, None) is not None:
                self._write_all(data)


class ModelConfigStore:
    """Load and save the :class:`ProviderOverride` through a key-value store."""

    def __init__(self, store: KeyValueStore, key: str = MODEL_CONFIG_STORAGE_KEY) -> None:
        self._store = store
        self._key = key

    def load(self) -> ProviderOverride:
        raw_value = self._store.get(self._key)
        if not raw_value:
            return ProviderOverride()
        try:
            return ProviderOverride.model_validate_json(raw_value)
        except PydanticValidationError:
            logger.error("Kayıtlı model yapılandırması çözümlenemedi; varsayılan kullanılacak")
            return ProviderOverride()

    def save(self, config: ProviderOverride) -> ProviderOverride:
        self._store.set(self._key, config.model_dump_json(by_alias=True))
        return config

    def update(self, **changes: Any) -> ProviderOverride:
        current = self.load().model_dump()
        current.update(changes)
        return self.save(ProviderOverride.model_validate(current))

    def reset(self) -> ProviderOverride:
        self._store.delete(self._key)
        return ProviderOverride()

    def apply_provider_preset(self, provider: str) -> ProviderOverride:
        preset = PROVIDER_PRESETS.get(provider)
        if preset is None:
            raise KeyError(f"Unknown provider preset: {provider}")
        models: List[str] = preset["models"]
        return self.update(
            provider=provider,
            base_url=preset["base_url"],
            model_id=models[0] if models else "",
            use_default=False,
        )


__all__ = [
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "MODEL_CONFIG_STORAGE_KEY",
    "ModelConfigStore",
    "PROVIDER_PRESETS",
]
