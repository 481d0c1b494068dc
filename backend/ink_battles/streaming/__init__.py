"""Server-side streaming session."""

from .session import SessionState, StreamingSession, parse_backend_answer

__all__ = ["SessionState", "StreamingSession", "parse_backend_answer"]
