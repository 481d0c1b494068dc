# -*- coding: utf-8 -*-
"""Backend connectivity probe used by the model settings panel."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from ink_battles.errors import ConfigurationError, InkBattlesError
from ink_battles.models import ProviderOverride

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["connection"])

MAX_RAW_ERROR_CHARS = 100

# (needles, message, hint); first match wins
_ERROR_PATTERNS = (
    (("401", "Unauthorized"), "Invalid or expired API key", ""),
    (("404",), "Model not found or wrong API address", ""),
    (("429",), "Request was rate limited", "the API quota may be exhausted or requests are too frequent"),
    (("403", "Forbidden"), "Access denied", "check the API key permissions or model access"),
    (("timeout", "ETIMEDOUT"), "Connection timed out", "check the network or the API address"),
    (("ENOTFOUND", "getaddrinfo"), "Could not resolve the host name", "check the API address"),
    (("ECONNREFUSED",), "Connection refused", "check the API address and port"),
)


class ConnectionTestRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    model_override: Optional[ProviderOverride] = Field(default=None, alias="modelConfig")


def describe_connection_error(raw_message: str) -> str:
    """Map a backend failure message to a short, user facing explanation."""
    error_message = "Connection failed"
    hint = ""
    for needles, message, pattern_hint in _ERROR_PATTERNS:
        if any(needle in raw_message for needle in needles):
            error_message, hint = message, pattern_hint
            break
    else:
        if raw_message:
            error_message = (
                raw_message[:MAX_RAW_ERROR_CHARS] + "..."
                if len(raw_message) > MAX_RAW_ERROR_CHARS
                else raw_message
            )
    return f"{error_message} ({hint})" if hint else error_message


@router.post("/test-connection")
async def test_connection(request: Request, payload: ConnectionTestRequest):
    override = payload.model_override
    try:
        config = request.app.state.resolver.resolve(override)
    except ConfigurationError:
        message = (
            "Please provide an API key."
            if override is not None and not override.use_default
            else "The server has no default model configured."
        )
        return JSONResponse(status_code=400, content={"success": False, "error": message})

    try:
        text = await run_in_threadpool(request.app.state.backend.probe, config)
    except InkBattlesError as exc:
        logger.error("Bağlantı testi başarısız oldu: %s", exc.message)
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": describe_connection_error(exc.message)},
        )

    if text:
        return {"success": True, "message": "Connection successful", "model": config.model}

    return JSONResponse(
        status_code=500,
        content={"success": False, "error": "No response received from the model"},
    )
