# -*- coding: utf-8 -*-
"""Server-side streaming session for one analysis request.

The session writes newline-delimited JSON frames to an output queue:
one heartbeat right away, a heartbeat every ``heartbeat_interval`` seconds
while the backend call is running, one progress frame before the call and
finally exactly one ``result`` or ``error`` frame.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from enum import Enum
from typing import Any, AsyncIterator, Callable, Dict, List, Mapping, Optional

from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel

from ink_battles.analyzers.llm_analyzer import build_messages
from ink_battles.analyzers.score import calculate_overall_score
from ink_battles.config import ProviderConfigResolver
from ink_battles.errors import BackendError, InkBattlesError
from ink_battles.models import (
    AnalysisRequest,
    EffectiveProviderConfig,
    ErrorFrame,
    HeartbeatFrame,
    ProgressFrame,
    ResultFrame,
    encode_frame,
    is_terminal,
)
from ink_battles.prompts import build_prompt

logger = logging.getLogger(__name__)

HEARTBEAT_INTERVAL_SECONDS = 10.0
# Execution ceiling of the hosting platform; the session itself never times out.
MAX_SESSION_DURATION_SECONDS = 300
PROGRESS_MESSAGE = "Analyzing..."
GENERIC_ERROR_MESSAGE = "An error occurred while processing the request."
EMPTY_RESPONSE_MESSAGE = "Analysis failed, no valid result was returned."
INVALID_JSON_MESSAGE = "The AI response is not valid JSON."
NOT_AN_OBJECT_MESSAGE = "The server could not process the AI response."


class SessionState(str, Enum):
    INIT = "init"
    STREAMING = "streaming"
    COMPLETED = "completed"
    FAILED = "failed"


TERMINAL_STATES = (SessionState.COMPLETED, SessionState.FAILED)


def parse_backend_answer(raw_text: Optional[str]) -> Dict[str, Any]:
    """Parse the backend text into a result payload with ``overallScore``.

    Raises:
        BackendError: for empty, non-JSON or non-object answers.
    """
    if not raw_text or not raw_text.strip():
        logger.error("LLM yanıtında içerik yok")
        raise BackendError(EMPTY_RESPONSE_MESSAGE)

    try:
        payload = json.loads(raw_text)
    except json.JSONDecodeError as exc:
        logger.error("LLM yanıtı JSON olarak çözümlenemedi: %s", raw_text[:200])
        raise BackendError(INVALID_JSON_MESSAGE) from exc

    if not isinstance(payload, dict):
        logger.error("Çözümlenen LLM yanıtı bir nesne değil: %s", type(payload).__name__)
        raise BackendError(NOT_AN_OBJECT_MESSAGE)

    return {**payload, "overallScore": calculate_overall_score(payload.get("dimensions"))}


class StreamingSession:
    """Drive one request through ``INIT -> STREAMING -> COMPLETED | FAILED``."""

    def __init__(
        self,
        request: AnalysisRequest,
        config: EffectiveProviderConfig,
        backend: Any,
        *,
        heartbeat_interval: float = HEARTBEAT_INTERVAL_SECONDS,
        prompt_builder: Callable[[Mapping[str, bool]], str] = build_prompt,
    ) -> None:
        self.request = request
        self.config = config
        self.backend = backend
        self.heartbeat_interval = heartbeat_interval
        self.prompt_builder = prompt_builder

        self.state = SessionState.INIT
        self.frames: List[BaseModel] = []
        self._queue: "asyncio.Queue[Optional[bytes]]" = asyncio.Queue()
        self._stop_event: Optional[asyncio.Event] = None
        self._heartbeat_task: Optional[asyncio.Task] = None
        self._runner: Optional[asyncio.Task] = None
        self._closed = False

    # ------------------------------------------------------------------
    # Output channel
    # ------------------------------------------------------------------

    def _emit(self, frame: BaseModel) -> bool:
        """Single write path into the output channel."""
        if self._closed:
            logger.warning("Kapalı oturuma çerçeve yazılmak istendi (type=%s)", getattr(frame, "type", "?"))
            return False
        if self.state in TERMINAL_STATES:
            if is_terminal(frame):
                logger.error(
                    "İkinci terminal çerçeve reddedildi (state=%s, type=%s)",
                    self.state.value,
                    getattr(frame, "type", "?"),
                )
            return False

        self.frames.append(frame)
        self._queue.put_nowait(encode_frame(frame))
        return True

    def _finish(self, frame: BaseModel, state: SessionState) -> None:
        if self._emit(frame):
            self.state = state

    @staticmethod
    def _heartbeat() -> HeartbeatFrame:
        return HeartbeatFrame(timestamp=int(time.time() * 1000))

    async def _heartbeat_loop(self) -> None:
        assert self._stop_event is not None
        while not self._stop_event.is_set():
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self.heartbeat_interval)
            except asyncio.TimeoutError:
                self._emit(self._heartbeat())

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _enter_streaming(self) -> None:
        self.state = SessionState.STREAMING
        self._emit(self._heartbeat())
        self._stop_event = asyncio.Event()
        self._heartbeat_task = asyncio.create_task(self._heartbeat_loop())

    async def _close(self) -> None:
        if self._stop_event is not None:
            self._stop_event.set()
        if self._heartbeat_task is not None:
            await self._heartbeat_task
        self._closed = True
        self._queue.put_nowait(None)
        logger.info("Analiz oturumu kapatıldı (state=%s, frames=%s)", self.state.value, len(self.frames))

    async def _analyze(self) -> Dict[str, Any]:
        system_prompt = self.prompt_builder(self.request.options)
        plan = ProviderConfigResolver.negotiate(self.config, system_prompt)
        messages = build_messages(self.request, plan.system_prompt)

        self._emit(ProgressFrame(message=PROGRESS_MESSAGE))
        started = time.monotonic()
        raw_text = await run_in_threadpool(self.backend.generate, self.config, plan, messages)
        logger.info(
            "LLM çağrısı tamamlandı (provider=%s, model=%s, süre=%.2fs)",
            self.config.provider,
            self.config.model,
            time.monotonic() - started,
        )
        return parse_backend_answer(raw_text)

    async def run(self) -> SessionState:
        """Run the session to a terminal state; never raises for request errors."""
        if self.state is not SessionState.INIT:
            raise RuntimeError("A streaming session can only be run once.")

        try:
            self._enter_streaming()
            result = await self._analyze()
            self._finish(ResultFrame(data=result), SessionState.COMPLETED)
        except InkBattlesError as exc:
            logger.warning("Analiz başarısız oldu: %s", exc.message)
            self._finish(ErrorFrame(error=exc.message), SessionState.FAILED)
        except Exception as exc:
            logger.exception("Analiz isteği işlenirken beklenmeyen hata")
            self._finish(ErrorFrame(error=str(exc) or GENERIC_ERROR_MESSAGE), SessionState.FAILED)
        finally:
            await self._close()
        return self.state

    async def stream(self) -> AsyncIterator[bytes]:
        """Yield encoded frames until the session closes its output channel."""
        self._runner = asyncio.create_task(self.run())
        while True:
            chunk = await self._queue.get()
            if chunk is None:
                break
            yield chunk
        await self._runner


__all__ = [
    "HEARTBEAT_INTERVAL_SECONDS",
    "MAX_SESSION_DURATION_SECONDS",
    "SessionState",
    "StreamingSession",
    "parse_backend_answer",
]
