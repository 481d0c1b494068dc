"""Tests for the exception hierarchy."""
import pytest

from ink_battles.errors import (
    BackendError,
    ConfigurationError,
    FrameParseError,
    InkBattlesError,
    ValidationError,
)


class TestErrors:
    """Test suite for InkBattlesError and its subclasses."""

    @pytest.mark.parametrize(
        "error, status_code",
        [
            (ValidationError("bad"), 400),
            (ConfigurationError("bad"), 500),
            (BackendError("bad"), 500),
            (FrameParseError("{", "invalid json"), 500),
        ],
    )
    def test_status_codes(self, error, status_code):
        assert error.status_code == status_code

    def test_only_pre_stream_errors_override_status(self):
        assert "status_code" in vars(ValidationError)
        assert "status_code" in vars(ConfigurationError)
        assert "status_code" not in vars(BackendError)
        assert "status_code" not in vars(FrameParseError)

    def test_to_dict(self):
        assert BackendError("LLM request failed").to_dict() == {"success": False, "error": "LLM request failed"}

    def test_frame_parse_error_keeps_line(self):
        error = FrameParseError("{broken", "invalid json")
        assert isinstance(error, InkBattlesError)
        assert error.line == "{broken"
        assert error.reason == "invalid json"
        assert error.context == {"line": "{broken"}
        assert "invalid json" in error.message
