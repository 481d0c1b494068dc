# -*- coding: utf-8 -*-
"""Exception hierarchy for the analysis service.

Every error carries a human-readable message that is safe to show to the end
user, plus an HTTP status code used when the error is raised before the
response stream has been opened.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class InkBattlesError(Exception):
    """Base exception for all analysis service errors."""

    status_code: int = 500

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert the exception to the JSON body returned by the API."""
        return {"success": False, "error": self.message}


class ValidationError(InkBattlesError):
    """Malformed or incomplete analysis request."""

    status_code = 400


class ConfigurationError(InkBattlesError):
    """Missing or invalid effective provider credentials."""

    status_code = 500


class BackendError(InkBattlesError):
    """The backend call failed or returned an unusable answer."""


class FrameParseError(InkBattlesError):
    """A single stream line could not be parsed into a frame."""

    def __init__(self, line: str, reason: str) -> None:
        super().__init__(f"Failed to parse stream frame: {reason}", context={"line": line})
        self.line = line
        self.reason = reason


__all__ = [
    "BackendError",
    "ConfigurationError",
    "FrameParseError",
    "InkBattlesError",
    "ValidationError",
]
