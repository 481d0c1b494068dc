# -*- coding: utf-8 -*-
"""HTTP client that posts an analysis request and reduces the streamed answer."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple

import httpx

from ink_battles.client.reducer import StreamListener, StreamReducer
from ink_battles.errors import InkBattlesError
from ink_battles.models import ProviderOverride

logger = logging.getLogger(__name__)

ANALYZE_PATH = "/api/analyze"
TEST_CONNECTION_PATH = "/api/test-connection"

# Heartbeats arrive every 10 seconds, so a silent read longer than this is a dead stream.
DEFAULT_TIMEOUT = httpx.Timeout(30.0, connect=10.0)

FileField = Tuple[str, bytes, str]


class AnalysisRequestError(InkBattlesError):
    """The server rejected the request before opening the stream."""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message, context={"status_code": status_code})
        self.status_code = status_code


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return f"Request failed: {response.status_code}"
    if isinstance(payload, dict) and payload.get("error"):
        return str(payload["error"])
    return f"Request failed: {response.status_code}"


class AnalysisClient:
    """Thin wrapper around :class:`httpx.Client` for the analysis API."""

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        client: Optional[httpx.Client] = None,
        timeout: httpx.Timeout = DEFAULT_TIMEOUT,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.Client(base_url=base_url, timeout=timeout)

    def __enter__(self) -> "AnalysisClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def analyze(
        self,
        mode: str,
        content: Optional[str] = None,
        file: Optional[FileField] = None,
        options: Optional[Mapping[str, bool]] = None,
        model_config: Optional[ProviderOverride] = None,
        listener: Optional[StreamListener] = None,
    ) -> StreamReducer:
        """Post the multipart request and feed the response body into a reducer.

        Raises:
            AnalysisRequestError: when the server answers with a non-2xx status.
        """
        fields: Dict[str, str] = {
            "analysisType": mode,
            "options": json.dumps(dict(options or {})),
        }
        if content:
            fields["content"] = content
        if model_config is not None:
            fields["modelConfig"] = json.dumps(model_config.model_dump(by_alias=True))
        # Filename-less parts are plain form fields; they keep the body multipart without a file.
        parts: List[Tuple[str, Any]] = [(name, (None, value.encode("utf-8"))) for name, value in fields.items()]
        if file is not None:
            parts.append(("file", file))

        reducer = StreamReducer(listener)
        with self._client.stream("POST", ANALYZE_PATH, files=parts) as response:
            if response.status_code >= 400:
                response.read()
                message = _error_message(response)
                logger.error("Analiz isteği reddedildi (status=%s): %s", response.status_code, message)
                raise AnalysisRequestError(message, response.status_code)
            for chunk in response.iter_bytes():
                reducer.feed(chunk)
        reducer.close()

        if not reducer.is_terminal:
            logger.warning("Akış terminal çerçeve olmadan kapandı")
        return reducer

    def test_connection(self, model_config: Optional[ProviderOverride] = None) -> Dict[str, Any]:
        body: Dict[str, Any] = {}
        if model_config is not None:
            body["modelConfig"] = model_config.model_dump(by_alias=True)
        response = self._client.post(TEST_CONNECTION_PATH, json=body)
        if response.status_code >= 400:
            raise AnalysisRequestError(_error_message(response), response.status_code)
        return response.json()


__all__ = ["AnalysisClient", "AnalysisRequestError"]
