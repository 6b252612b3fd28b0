"""Tests for the OpenAI and Gemini request builders and response parsers."""

import pytest

from visua11y.errors import ResponseParseError
from visua11y.prompts import get_profile
from visua11y.providers.base import Operation, ProviderKind
from visua11y.providers.gemini import DEFAULT_IMAGE_MIME, GeminiProvider, parse_data_url
from visua11y.providers.openai import OpenAIProvider

from conftest import GEMINI_KEY, OPENAI_KEY, gemini_reply, openai_reply

SCREENSHOT = "data:image/jpeg;base64,/9j/4AAQSkZJRg=="


class TestOpenAIRequest:
    """Tests for OpenAIProvider.build_request."""

    def setup_method(self):
        self.provider = OpenAIProvider(api_url="https://api.test/v1/chat/completions", model="gpt-test")

    def test_kind_and_label(self):
        assert self.provider.kind is ProviderKind.OPENAI
        assert self.provider.label == "OpenAI"

    def test_summarize_body(self):
        request = self.provider.build_request(Operation.SUMMARIZE, "Dense text.", OPENAI_KEY)
        profile = get_profile(Operation.SUMMARIZE)

        assert request.url == "https://api.test/v1/chat/completions"
        assert request.body["model"] == "gpt-test"
        assert request.body["max_tokens"] == 1024
        assert request.body["temperature"] == 0.3
        system, user = request.body["messages"]
        assert system == {"role": "system", "content": profile.system_instruction}
        assert user["role"] == "user"
        assert user["content"] == "Please summarize the following text:\n\nDense text."

    def test_bearer_header(self):
        request = self.provider.build_request(Operation.SUMMARIZE, "x", OPENAI_KEY)

        assert request.headers["Authorization"] == f"Bearer {OPENAI_KEY}"
        assert request.headers["Content-Type"] == "application/json"

    def test_digest_limits(self):
        request = self.provider.build_request(Operation.GENERATE_DIGEST, "Title: x", OPENAI_KEY)

        assert request.body["max_tokens"] == 300
        assert request.body["messages"][1]["content"].startswith("Provide a TLDR for:")

    def test_screenshot_passes_data_url_unchanged(self):
        request = self.provider.build_request(Operation.ANALYZE_SCREENSHOT, SCREENSHOT, OPENAI_KEY)

        assert request.body["max_tokens"] == 400
        assert request.body["temperature"] == 0.1
        content = request.body["messages"][1]["content"]
        assert content[0]["type"] == "text"
        assert content[1] == {
            "type": "image_url",
            "image_url": {"url": SCREENSHOT, "detail": "high"},
        }


class TestOpenAIResponse:
    """Tests for OpenAIProvider.parse_response."""

    def setup_method(self):
        self.provider = OpenAIProvider(api_url="https://api.test", model="gpt-test")

    def test_reads_first_choice(self):
        assert self.provider.parse_response(Operation.SUMMARIZE, openai_reply("  Short.  ")) == "Short."

    def test_missing_choices_raises(self):
        with pytest.raises(ResponseParseError) as exc_info:
            self.provider.parse_response(Operation.GENERATE_DIGEST, {"id": "x"})
        assert "Unexpected response format" in str(exc_info.value)

    def test_empty_content_raises(self):
        with pytest.raises(ResponseParseError):
            self.provider.parse_response(Operation.SUMMARIZE, openai_reply("   "))

    def test_error_body_message_is_used(self):
        with pytest.raises(ResponseParseError) as exc_info:
            self.provider.parse_response(
                Operation.SUMMARIZE, {"error": {"message": "model overloaded"}}
            )
        assert "model overloaded" in str(exc_info.value)

    def test_non_dict_raises(self):
        with pytest.raises(ResponseParseError):
            self.provider.parse_response(Operation.SUMMARIZE, ["not", "a", "dict"])


class TestParseDataUrl:
    """Tests for parse_data_url."""

    def test_splits_mime_and_payload(self):
        image = parse_data_url(SCREENSHOT)
        assert image.mime_type == "image/jpeg"
        assert image.data == "/9j/4AAQSkZJRg=="

    @pytest.mark.parametrize("value", ["", "not a data url", "data:image/png,rawbytes", None, 42])
    def test_malformed_input_falls_back(self, value):
        image = parse_data_url(value)
        assert image.mime_type == DEFAULT_IMAGE_MIME
        assert image.data == ""

    def test_missing_mime_uses_default(self):
        image = parse_data_url("data:;base64,AAAA")
        assert image.mime_type == DEFAULT_IMAGE_MIME
        assert image.data == "AAAA"


class TestGeminiRequest:
    """Tests for GeminiProvider.build_request."""

    def setup_method(self):
        self.provider = GeminiProvider(
            api_base="https://gemini.test/v1beta/",
            text_model="models/text-model",
            vision_model="models/vision-model",
        )

    def test_kind_and_label(self):
        assert self.provider.kind is ProviderKind.GEMINI
        assert self.provider.label == "Gemini"

    def test_key_in_query_string(self):
        request = self.provider.build_request(Operation.SUMMARIZE, "x", GEMINI_KEY)

        assert request.url == (
            f"https://gemini.test/v1beta/models/text-model:generateContent?key={GEMINI_KEY}"
        )
        assert "Authorization" not in request.headers

    def test_instruction_folded_into_user_turn(self):
        request = self.provider.build_request(Operation.GENERATE_DIGEST, "Title: Docs", GEMINI_KEY)
        profile = get_profile(Operation.GENERATE_DIGEST)

        contents = request.body["contents"]
        assert len(contents) == 1
        assert contents[0]["role"] == "user"
        text = contents[0]["parts"][0]["text"]
        assert text.startswith(profile.system_instruction)
        assert text.endswith("Provide a TLDR for:\n\nTitle: Docs")
        assert request.body["generationConfig"] == {"temperature": 0.3, "maxOutputTokens": 300}

    def test_screenshot_uses_vision_model_and_inline_data(self):
        request = self.provider.build_request(Operation.ANALYZE_SCREENSHOT, SCREENSHOT, GEMINI_KEY)

        assert "/models/vision-model:generateContent" in request.url
        parts = request.body["contents"][0]["parts"]
        assert parts[1] == {"inline_data": {"mime_type": "image/jpeg", "data": "/9j/4AAQSkZJRg=="}}
        assert request.body["generationConfig"] == {"temperature": 0.1, "maxOutputTokens": 400}

    def test_malformed_screenshot_still_builds(self):
        request = self.provider.build_request(Operation.ANALYZE_SCREENSHOT, "garbage", GEMINI_KEY)

        inline = request.body["contents"][0]["parts"][1]["inline_data"]
        assert inline == {"mime_type": "image/png", "data": ""}


class TestGeminiResponse:
    """Tests for GeminiProvider.parse_response."""

    def setup_method(self):
        self.provider = GeminiProvider(api_base="https://gemini.test", text_model="m", vision_model="m")

    def test_reads_first_text_part(self):
        assert self.provider.parse_response(Operation.SUMMARIZE, gemini_reply("Plain.")) == "Plain."

    def test_skips_empty_parts(self):
        data = {"candidates": [{"content": {"parts": [{"text": " "}, {"text": "Second."}]}}]}
        assert self.provider.parse_response(Operation.SUMMARIZE, data) == "Second."

    def test_no_candidates_raises(self):
        with pytest.raises(ResponseParseError):
            self.provider.parse_response(Operation.SUMMARIZE, {"candidates": []})

    def test_blocked_prompt_raises(self):
        data = {"promptFeedback": {"blockReason": "SAFETY"}}
        with pytest.raises(ResponseParseError) as exc_info:
            self.provider.parse_response(Operation.ANALYZE_SCREENSHOT, data)
        assert "Gemini" in str(exc_info.value)
