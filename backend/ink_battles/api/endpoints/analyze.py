# -*- coding: utf-8 -*-
"""Streaming analysis endpoint."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, File, Form, Request, UploadFile
from fastapi.responses import JSONResponse, StreamingResponse

from ink_battles.errors import InkBattlesError
from ink_battles.streaming.session import StreamingSession
from ink_battles.validation import validate_analysis_request

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["analysis"])

STREAM_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}


@router.post("/analyze")
async def analyze(
    request: Request,
    content: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    analysis_type: Optional[str] = Form(None, alias="analysisType"),
    options: Optional[str] = Form(None),
    model_config_json: Optional[str] = Form(None, alias="modelConfig"),
):
    """
    Validate the request, resolve the backend and stream the analysis.

    Failures detected before the stream opens are returned as JSON with
    status 400 (validation) or 500 (configuration). Afterwards every failure
    is reported in-band as an ``error`` frame under status 200.
    """
    try:
        file_bytes = await file.read() if file is not None else None
        analysis_request = validate_analysis_request(
            analysis_type,
            content=content,
            file_bytes=file_bytes,
            file_media_type=file.content_type if file is not None else None,
            file_name=file.filename if file is not None else None,
            options_json=options,
            model_config_json=model_config_json,
        )
        resolver = request.app.state.resolver
        effective_config = resolver.resolve(analysis_request.model_override)
    except InkBattlesError as exc:
        logger.warning("Analiz isteği reddedildi (status=%s): %s", exc.status_code, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())
    except Exception:
        logger.exception("Analiz API isteğinde beklenmeyen hata")
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": "Error while processing the request."},
        )

    logger.info(
        "=== ANALYSIS STREAM STARTED === mode=%s provider=%s model=%s",
        analysis_request.mode,
        effective_config.provider,
        effective_config.model,
    )
    session = StreamingSession(
        analysis_request,
        effective_config,
        request.app.state.backend,
        heartbeat_interval=request.app.state.heartbeat_interval,
    )
    return StreamingResponse(
        session.stream(),
        media_type="text/event-stream",
        headers=STREAM_HEADERS,
    )
