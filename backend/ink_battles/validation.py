"""Inbound request validation; runs before any backend cost is incurred."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError as PydanticValidationError

from ink_battles.errors import ValidationError
from ink_battles.models import AnalysisRequest, ProviderOverride

logger = logging.getLogger(__name__)

ANALYSIS_MODES = ("text", "file")


def _parse_json_field(raw_value: Optional[str], *, field_name: str) -> Optional[Any]:
    if raw_value is None:
        return None
    candidate = raw_value.strip()
    if not candidate:
        return None
    try:
        return json.loads(candidate)
    except json.JSONDecodeError as exc:
        logger.warning("%s alanı için geçersiz JSON alındı", field_name)
        raise ValidationError(f"{field_name} must be valid JSON.") from exc


def _parse_options(raw_value: Optional[str]) -> Dict[str, bool]:
    payload = _parse_json_field(raw_value, field_name="options")
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError("options must be a JSON object.")

    options: Dict[str, bool] = {}
    for key, value in payload.items():
        if not isinstance(value, bool):
            raise ValidationError(f"Option '{key}' must be a boolean.")
        options[str(key)] = value
    return options


def _parse_model_override(raw_value: Optional[str]) -> Optional[ProviderOverride]:
    payload = _parse_json_field(raw_value, field_name="modelConfig")
    if payload is None:
        return None
    if not isinstance(payload, dict):
        raise ValidationError("modelConfig must be a JSON object.")
    try:
        return ProviderOverride.model_validate(payload)
    except PydanticValidationError as exc:
        raise ValidationError("modelConfig has an invalid shape.") from exc


def validate_analysis_request(
    mode: Optional[str],
    content: Optional[str] = None,
    file_bytes: Optional[bytes] = None,
    file_media_type: Optional[str] = None,
    file_name: Optional[str] = None,
    options_json: Optional[str] = None,
    model_config_json: Optional[str] = None,
) -> AnalysisRequest:
    """Turn raw multipart fields into a typed :class:`AnalysisRequest`.

    Raises:
        ValidationError: for any malformed or incomplete request.
    """
    if mode not in ANALYSIS_MODES:
        raise ValidationError('analysisType is required and must be "text" or "file".')

    text = content if content and content.strip() else None

    if mode == "text" and text is None:
        raise ValidationError("Text content must not be empty.")

    if mode == "file":
        if not file_bytes and text is None:
            raise ValidationError("File or image data must not be empty.")
        if file_bytes and text is None and not (file_media_type or "").startswith("image/"):
            raise ValidationError("Invalid file type; only images can be uploaded directly.")

    request = AnalysisRequest(
        mode=mode,
        text_content=text,
        file_blob=file_bytes or None,
        file_media_type=file_media_type,
        file_name=file_name,
        options=_parse_options(options_json),
        model_override=_parse_model_override(model_config_json),
    )
    logger.debug(
        "Analiz isteği doğrulandı (mode=%s, text=%s, image=%s, options=%s)",
        request.mode,
        request.text_content is not None,
        request.has_image,
        sorted(name for name, enabled in request.options.items() if enabled),
    )
    return request


__all__ = ["ANALYSIS_MODES", "validate_analysis_request"]
