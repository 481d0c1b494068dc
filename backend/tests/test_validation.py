"""Tests for inbound request validation."""
import json

import pytest

from ink_battles.errors import ValidationError
from ink_battles.validation import validate_analysis_request


class TestValidateAnalysisRequest:
    """Test suite for validate_analysis_request."""

    def test_text_mode_with_content(self):
        request = validate_analysis_request("text", content="hello world")
        assert request.mode == "text"
        assert request.text_content == "hello world"
        assert request.options == {}
        assert request.model_override is None

    @pytest.mark.parametrize("content", [None, "", "   ", "\n\t  \n"])
    def test_text_mode_rejects_blank_content(self, content):
        with pytest.raises(ValidationError) as excinfo:
            validate_analysis_request("text", content=content)
        assert excinfo.value.status_code == 400
        assert excinfo.value.message == "Text content must not be empty."

    @pytest.mark.parametrize("mode", [None, "", "TEXT", "image", "files"])
    def test_mode_must_be_text_or_file(self, mode):
        with pytest.raises(ValidationError, match="analysisType"):
            validate_analysis_request(mode, content="hello")

    def test_file_mode_accepts_image(self):
        request = validate_analysis_request(
            "file",
            file_bytes=b"\x89PNG",
            file_media_type="image/png",
            file_name="page.png",
        )
        assert request.has_image
        assert request.file_name == "page.png"

    def test_file_mode_accepts_extracted_text(self):
        request = validate_analysis_request("file", content="chapter one")
        assert request.text_content == "chapter one"
        assert not request.has_image

    def test_file_mode_requires_file_or_text(self):
        with pytest.raises(ValidationError, match="must not be empty"):
            validate_analysis_request("file")

    def test_file_mode_rejects_non_image_attachment(self):
        with pytest.raises(ValidationError, match="Invalid file type"):
            validate_analysis_request(
                "file",
                file_bytes=b"%PDF",
                file_media_type="application/pdf",
            )

    def test_options_are_parsed(self):
        request = validate_analysis_request(
            "text",
            content="hello",
            options_json=json.dumps({"textStyle": True, "hotTopic": False}),
        )
        assert request.options == {"textStyle": True, "hotTopic": False}

    @pytest.mark.parametrize(
        "options_json",
        ["{not json", "[1, 2]", json.dumps({"textStyle": "yes"})],
    )
    def test_invalid_options_rejected(self, options_json):
        with pytest.raises(ValidationError):
            validate_analysis_request("text", content="hello", options_json=options_json)

    def test_model_config_is_parsed(self):
        request = validate_analysis_request(
            "text",
            content="hello",
            model_config_json=json.dumps(
                {
                    "provider": "deepseek",
                    "apiKey": "sk-test",
                    "modelId": "deepseek-chat",
                    "baseUrl": "https://api.deepseek.com/v1",
                    "useDefault": False,
                }
            ),
        )
        override = request.model_override
        assert override is not None
        assert override.provider == "deepseek"
        assert override.api_key == "sk-test"
        assert override.use_default is False

    def test_malformed_model_config_rejected(self):
        with pytest.raises(ValidationError, match="modelConfig"):
            validate_analysis_request("text", content="hello", model_config_json="{oops")
