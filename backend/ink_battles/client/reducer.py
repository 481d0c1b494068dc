# -*- coding: utf-8 -*-
"""Incremental reducer for the newline-delimited analysis stream.

The reducer owns a text carry-over buffer. Each network chunk is decoded and
appended, complete lines are parsed as frames and the trailing partial line
is kept for the next chunk. A corrupt line is logged and skipped; it never
aborts the stream.
"""

from __future__ import annotations

import codecs
import logging
from enum import Enum
from typing import Any, AsyncIterable, Dict, Iterable, List, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from ink_battles.analyzers.score import calculate_overall_score
from ink_battles.errors import FrameParseError
from ink_battles.models import (
    AnalysisResult,
    Dimension,
    ErrorFrame,
    HeartbeatFrame,
    MermaidDiagram,
    ProgressFrame,
    ResultFrame,
    parse_frame,
)

logger = logging.getLogger(__name__)

INCOMPLETE_DATA_WARNING = "Analysis data is incomplete; some features may be affected."
DEFAULT_ERROR_MESSAGE = "Analysis failed"

_SCALAR_FIELDS = (
    "overallAssessment",
    "title",
    "ratingTag",
    "strengths",
    "improvements",
    "comment",
    "structural_analysis",
)


class StreamStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class StreamListener:
    """Presentation hooks; every method is a no-op by default."""

    def on_heartbeat(self, frame: HeartbeatFrame) -> None:
        pass

    def on_progress(self, frame: ProgressFrame) -> None:
        pass

    def on_result(self, result: AnalysisResult) -> None:
        pass

    def on_error(self, message: str) -> None:
        pass

    def on_warning(self, message: str) -> None:
        pass


def _validate_items(model, raw_items: List[Any], label: str, warnings: List[str]) -> list:
    items = []
    for raw_item in raw_items:
        try:
            items.append(model.model_validate(raw_item))
        except PydanticValidationError:
            warnings.append(f"Dropped invalid {label} entry: {raw_item!r}")
    return items


def merge_result(data: Any) -> Tuple[AnalysisResult, List[str]]:
    """Merge a raw ``result`` payload over the default :class:`AnalysisResult`.

    Fields are validated one by one; anything missing or malformed falls back
    to its default and adds a warning instead of raising. Stream frames always
    carry an object here; a non-object payload only comes from direct callers,
    e.g. a result restored from disk.
    """
    warnings: List[str] = []
    if not isinstance(data, dict):
        warnings.append("Result payload is not an object; using defaults.")
        data = {}

    raw_dimensions = data.get("dimensions")
    if not isinstance(raw_dimensions, list):
        warnings.append(INCOMPLETE_DATA_WARNING)
        raw_dimensions = []
    dimensions = _validate_items(Dimension, raw_dimensions, "dimension", warnings)

    raw_diagrams = data.get("mermaid_diagrams")
    diagrams: List[MermaidDiagram] = []
    if isinstance(raw_diagrams, list):
        diagrams = _validate_items(MermaidDiagram, raw_diagrams, "mermaid diagram", warnings)
    elif raw_diagrams is not None:
        warnings.append("mermaid_diagrams is not a list; ignoring it.")

    fields: Dict[str, Any] = {}
    for name in _SCALAR_FIELDS:
        if name not in data:
            continue
        try:
            fields[name] = getattr(AnalysisResult.model_validate({name: data[name]}), name)
        except PydanticValidationError:
            warnings.append(f"Field '{name}' has an invalid value; using the default.")

    raw_score = data.get("overallScore")
    if isinstance(raw_score, (int, float)) and not isinstance(raw_score, bool):
        overall_score = float(raw_score)
    else:
        overall_score = calculate_overall_score(dimensions)

    result = AnalysisResult(
        overallScore=overall_score,
        dimensions=dimensions,
        mermaid_diagrams=diagrams,
        **fields,
    )
    return result, warnings


class StreamReducer:
    """Consume stream bytes and track the terminal outcome of one session."""

    def __init__(self, listener: Optional[StreamListener] = None) -> None:
        self.listener = listener or StreamListener()
        self.frames: List[Any] = []
        self.status = StreamStatus.PENDING
        self.result: Optional[AnalysisResult] = None
        self.error: Optional[str] = None
        self.warnings: List[str] = []
        self.parse_errors: List[FrameParseError] = []
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""

    @property
    def is_terminal(self) -> bool:
        return self.status is not StreamStatus.PENDING

    @property
    def succeeded(self) -> bool:
        return self.status is StreamStatus.COMPLETED

    def feed(self, chunk: bytes) -> List[Any]:
        """Process one network chunk and return the frames it completed."""
        self._buffer += self._decoder.decode(chunk)
        *lines, self._buffer = self._buffer.split("\n")
        return self._process_lines(lines)

    def close(self) -> List[Any]:
        """Flush the decoder and parse a final line without a newline."""
        self._buffer += self._decoder.decode(b"", final=True)
        remaining, self._buffer = self._buffer, ""
        return self._process_lines([remaining])

    def consume(self, chunks: Iterable[bytes]) -> "StreamReducer":
        for chunk in chunks:
            self.feed(chunk)
        self.close()
        return self

    async def aconsume(self, chunks: AsyncIterable[bytes]) -> "StreamReducer":
        async for chunk in chunks:
            self.feed(chunk)
        self.close()
        return self

    def _process_lines(self, lines: List[str]) -> List[Any]:
        dispatched: List[Any] = []
        for line in lines:
            if not line.strip():
                continue
            try:
                frame = self._parse_line(line)
            except FrameParseError as exc:
                logger.warning("Mesaj çözümlenemedi, satır atlandı: %s (%s)", line[:200], exc.reason)
                self.parse_errors.append(exc)
                continue
            if self._dispatch(frame):
                self.frames.append(frame)
                dispatched.append(frame)
        return dispatched

    @staticmethod
    def _parse_line(line: str):
        try:
            return parse_frame(line.strip())
        except PydanticValidationError as exc:
            errors = exc.errors()
            reason = errors[0].get("msg", str(exc)) if errors else str(exc)
            raise FrameParseError(line, reason) from exc

    def _warn(self, message: str) -> None:
        logger.warning("%s", message)
        self.warnings.append(message)
        self.listener.on_warning(message)

    def _dispatch(self, frame: Any) -> bool:
        if isinstance(frame, HeartbeatFrame):
            logger.debug("Kalp atışı alındı: %s", frame.timestamp)
            self.listener.on_heartbeat(frame)
            return True
        if isinstance(frame, ProgressFrame):
            logger.debug("İlerleme: %s", frame.message)
            self.listener.on_progress(frame)
            return True

        if isinstance(frame, (ResultFrame, ErrorFrame)) and self.is_terminal:
            self._warn(f"Ignoring '{frame.type}' frame after the stream already ended ({self.status.value}).")
            return False

        if isinstance(frame, ResultFrame):
            result, warnings = merge_result(frame.data)
            for message in warnings:
                self._warn(message)
            self.result = result
            self.status = StreamStatus.COMPLETED
            self.listener.on_result(result)
            return True
        if isinstance(frame, ErrorFrame):
            self.error = frame.error or DEFAULT_ERROR_MESSAGE
            self.status = StreamStatus.FAILED
            self.listener.on_error(self.error)
            return True

        raise TypeError(f"Unhandled stream frame: {type(frame).__name__}")


__all__ = [
    "INCOMPLETE_DATA_WARNING",
    "StreamListener",
    "StreamReducer",
    "StreamStatus",
    "merge_result",
]
