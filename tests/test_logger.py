"""Tests for logger utilities."""

import logging

import pytest

from visua11y.utils.logger import SENSITIVE_PATTERNS, get_logger, mask_sensitive_data, setup_logging

from conftest import GEMINI_KEY, OPENAI_KEY


class TestMaskSensitiveData:
    """Tests for mask_sensitive_data structlog processor."""

    def test_masks_api_key(self):
        """Test that api_key values are masked."""
        event = {"error": "api_key=secret123"}
        result = mask_sensitive_data(None, None, event)
        assert "secret123" not in result["error"]
        assert "MASKED" in result["error"]

    def test_masks_bearer_token(self):
        """Test that bearer tokens are masked."""
        event = {"auth": f"Bearer {OPENAI_KEY}"}
        result = mask_sensitive_data(None, None, event)
        assert OPENAI_KEY not in result["auth"]
        assert "MASKED" in result["auth"]

    def test_masks_bare_openai_key(self):
        """Test that an OpenAI key anywhere in a message is masked."""
        event = {"error": f"rejected key {OPENAI_KEY} by upstream"}
        result = mask_sensitive_data(None, None, event)
        assert OPENAI_KEY not in result["error"]
        assert result["error"].startswith("rejected key ")

    def test_masks_bare_gemini_key(self):
        """Test that a Gemini key anywhere in a message is masked."""
        event = {"event": f"using {GEMINI_KEY}"}
        result = mask_sensitive_data(None, None, event)
        assert GEMINI_KEY not in result["event"]

    def test_masks_query_string_key(self):
        """Test that ?key= query parameters are masked."""
        event = {"url": "https://host/v1beta/models/m:generateContent?key=abc123&alt=json"}
        result = mask_sensitive_data(None, None, event)
        assert "abc123" not in result["url"]
        assert result["url"].endswith("&alt=json")

    def test_masks_json_store_keys(self):
        """Test that credential store JSON values are masked."""
        event = {"data": '{"openaiApiKey": "whatever-value", "geminiApiKey": "other"}'}
        result = mask_sensitive_data(None, None, event)
        assert "whatever-value" not in result["data"]
        assert '"other"' not in result["data"]

    def test_preserves_non_sensitive_data(self):
        """Test that non-sensitive data is preserved."""
        event = {"provider": "openai", "operation": "summarize", "status": 200}
        result = mask_sensitive_data(None, None, event)
        assert result == event

    def test_handles_non_string_values(self):
        """Test that non-string values are passed through."""
        event = {"count": 42, "active": True, "data": None}
        result = mask_sensitive_data(None, None, event)
        assert result == event

    def test_case_insensitive(self):
        """Test that matching is case-insensitive."""
        event = {"err": "API_KEY=secret", "auth": "TOKEN=abc123"}
        result = mask_sensitive_data(None, None, event)
        assert "secret" not in result["err"]
        assert "abc123" not in result["auth"]

    def test_patterns_are_compiled(self):
        """Test that all patterns are precompiled regexes."""
        for pattern, replacement in SENSITIVE_PATTERNS:
            assert hasattr(pattern, "sub")
            assert isinstance(replacement, str)


class TestSetupLogging:
    """Tests for setup_logging."""

    @pytest.fixture(autouse=True)
    def restore_root_logger(self):
        root = logging.getLogger()
        handlers, level = list(root.handlers), root.level
        yield
        root.handlers[:] = handlers
        root.setLevel(level)

    def test_sets_root_level(self):
        setup_logging("WARNING", "production")
        assert logging.getLogger().level == logging.WARNING

    def test_quiets_noisy_loggers(self):
        setup_logging("DEBUG", "development")
        assert logging.getLogger("aiohttp").level == logging.WARNING

    def test_get_logger_returns_bound_logger(self):
        logger = get_logger("visua11y.test")
        assert hasattr(logger, "info")
        assert hasattr(logger, "warning")
